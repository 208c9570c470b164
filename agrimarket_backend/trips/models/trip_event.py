# trips/models/trip_event.py

"""
TRIP TIMELINE

Append-only log of what happened to a trip.

GUARANTEES:
- Created once, never edited
- Never deleted on its own (only with its trip)
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class TripEvent(models.Model):
    LABEL_CREATED = "Created"
    LABEL_VEHICLE_CHANGED = "Vehicle Changed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    trip = models.ForeignKey(
        "trips.Trip",
        on_delete=models.CASCADE,
        related_name="timeline",
    )

    # A trip status, or one of the LABEL_* markers.
    status = models.CharField(max_length=32)
    note = models.CharField(max_length=255, blank=True, default="")

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["timestamp", "id"]
        indexes = [
            models.Index(fields=["trip", "timestamp"], name="tripevent_trip_ts_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("TripEvent records are immutable")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("TripEvent records are immutable and cannot be deleted")

    def __str__(self):
        return f"{self.status} @ {self.timestamp:%Y-%m-%d %H:%M}"
