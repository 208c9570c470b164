# trips/models/trip.py

import re
import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q, Sum
from django.utils import timezone

TRIP_NO_RE = re.compile(r"^TRIP\d{4}(\d+)$")


class Trip(models.Model):
    """
    One transporter's delivery of one order with one vehicle.

    COST MODEL:
    - total_cost = base_fare + distance_charge + sum(additional_charges.amount)
    - total_cost is recomputed on every save and never set by callers.

    Invariants:
    - at most one non-cancelled trip per order
    - estimated_delivery > scheduled_pickup
    - Completed and Cancelled are final (see trips.services.trip_lifecycle)
    """

    STATUS_PENDING = "Pending"
    STATUS_ACCEPTED = "Accepted"
    STATUS_IN_PROGRESS = "In Progress"
    STATUS_COMPLETED = "Completed"
    STATUS_CANCELLED = "Cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_IN_PROGRESS, "In Progress"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    CURRENCY_CHOICES = [
        ("LKR", "LKR"),
        ("USD", "USD"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    trip_no = models.CharField(max_length=16, blank=True, editable=False)

    # SET_NULL: a cancelled trip outlives an order its distributor later deletes.
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="trips",
    )
    transporter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="trips",
    )
    vehicle = models.ForeignKey(
        "fleet.Vehicle",
        on_delete=models.PROTECT,
        related_name="trips",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    trip_status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)

    # Pickup (from product / farmer)
    pickup_address = models.CharField(max_length=255)
    pickup_city = models.CharField(max_length=100, blank=True, default="")
    pickup_district = models.CharField(max_length=100, blank=True, default="")
    pickup_lat = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    pickup_lng = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)

    # Dropoff (from order delivery address)
    dropoff_address = models.CharField(max_length=255)
    dropoff_city = models.CharField(max_length=100, blank=True, default="")
    dropoff_lat = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    dropoff_lng = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)

    # Schedule
    scheduled_pickup = models.DateTimeField()
    estimated_delivery = models.DateTimeField()
    actual_pickup = models.DateTimeField(null=True, blank=True)
    actual_delivery = models.DateTimeField(null=True, blank=True)

    distance_km = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    estimated_duration_minutes = models.PositiveIntegerField(null=True, blank=True)

    # Costs
    base_fare = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal("0.00"))]
    )
    distance_charge = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    total_cost = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"), editable=False)
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default="LKR")

    special_instructions = models.TextField(blank=True, default="")

    cancellation_reason = models.CharField(max_length=255, blank=True, default="")
    cancelled_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["order"],
                condition=~Q(trip_status="Cancelled"),
                name="uq_trip_active_order",
            ),
            models.UniqueConstraint(fields=["transporter", "trip_no"], name="uq_trip_transporter_trip_no"),
            models.CheckConstraint(
                condition=Q(estimated_delivery__gt=models.F("scheduled_pickup")),
                name="ck_trip_delivery_after_pickup",
            ),
        ]
        indexes = [
            models.Index(fields=["transporter", "trip_status"], name="trip_transporter_status_idx"),
            models.Index(fields=["vehicle", "trip_status"], name="trip_vehicle_status_idx"),
            models.Index(fields=["scheduled_pickup"], name="trip_scheduled_pickup_idx"),
        ]

    def __str__(self):
        return f"{self.trip_no or self.id} | {self.trip_status}"

    # ---------------- COSTS ----------------
    def additional_total(self) -> Decimal:
        if self._state.adding:
            return Decimal("0.00")
        total = self.additional_charges.aggregate(total=Sum("amount")).get("total")
        return Decimal(total or 0)

    def recalculate_total(self) -> Decimal:
        self.total_cost = (
            Decimal(str(self.base_fare or 0))
            + Decimal(str(self.distance_charge or 0))
            + self.additional_total()
        ).quantize(Decimal("0.01"))
        return self.total_cost

    # ---------------- NUMBERING ----------------
    def next_trip_no(self) -> str:
        """
        TRIP + yymm + 4-digit per-transporter sequence.

        The sequence continues from the highest number already issued to
        the transporter. Callers serialize on the TransporterProfile row.
        """
        stamp = timezone.localtime().strftime("%y%m")
        issued = Trip.objects.filter(transporter_id=self.transporter_id).values_list("trip_no", flat=True)
        highest = 0
        for trip_no in issued:
            m = TRIP_NO_RE.match(trip_no or "")
            if m:
                highest = max(highest, int(m.group(1)))
        return f"TRIP{stamp}{highest + 1:04d}"

    def save(self, *args, **kwargs):
        if self._state.adding and not self.trip_no:
            self.trip_no = self.next_trip_no()

        self.recalculate_total()

        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "total_cost" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["total_cost"]

        return super().save(*args, **kwargs)

    # ---------------- LOCATIONS ----------------
    @property
    def pickup_location(self) -> dict:
        return {
            "address": self.pickup_address,
            "city": self.pickup_city,
            "district": self.pickup_district,
            "lat": self.pickup_lat,
            "lng": self.pickup_lng,
        }

    @property
    def dropoff_location(self) -> dict:
        return {
            "address": self.dropoff_address,
            "city": self.dropoff_city,
            "lat": self.dropoff_lat,
            "lng": self.dropoff_lng,
        }
