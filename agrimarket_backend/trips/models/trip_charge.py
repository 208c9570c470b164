# trips/models/trip_charge.py

import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class TripCharge(models.Model):
    """
    Additional cost line on a trip (tolls, loading, waiting time).

    Inserting or deleting a charge re-saves the trip so total_cost
    stays equal to the recomputed sum.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    trip = models.ForeignKey(
        "trips.Trip",
        on_delete=models.CASCADE,
        related_name="additional_charges",
    )
    description = models.CharField(max_length=255)
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.description}: {self.amount}"

    def _resave_trip(self):
        trip = self.trip
        trip.save(update_fields=["updated_at"])

    def save(self, *args, **kwargs):
        result = super().save(*args, **kwargs)
        self._resave_trip()
        return result

    def delete(self, *args, **kwargs):
        trip = self.trip
        result = super().delete(*args, **kwargs)
        trip.save(update_fields=["updated_at"])
        return result
