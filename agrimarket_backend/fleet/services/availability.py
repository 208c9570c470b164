# fleet/services/availability.py

"""
VEHICLE AVAILABILITY CHECKER

A vehicle is booked for [scheduled_pickup, estimated_delivery] by every
trip that is not finished (Pending, Accepted, In Progress).

Two windows overlap iff  existing.start < end  AND  existing.end > start.
Touching windows (one ends exactly when the next starts) do not overlap.
"""

from __future__ import annotations

from trips.models import Trip

BLOCKING_TRIP_STATUSES = (
    Trip.STATUS_PENDING,
    Trip.STATUS_ACCEPTED,
    Trip.STATUS_IN_PROGRESS,
)


def conflicting_trips(*, vehicle_id, window_start, window_end, exclude_trip_id=None):
    qs = Trip.objects.filter(
        vehicle_id=vehicle_id,
        trip_status__in=BLOCKING_TRIP_STATUSES,
        scheduled_pickup__lt=window_end,
        estimated_delivery__gt=window_start,
    )
    if exclude_trip_id is not None:
        qs = qs.exclude(id=exclude_trip_id)
    return qs.order_by("scheduled_pickup")


def is_vehicle_available(vehicle_id, window_start, window_end, exclude_trip_id=None) -> bool:
    return not conflicting_trips(
        vehicle_id=vehicle_id,
        window_start=window_start,
        window_end=window_end,
        exclude_trip_id=exclude_trip_id,
    ).exists()
