from .availability import BLOCKING_TRIP_STATUSES, conflicting_trips, is_vehicle_available
from .registration import (
    get_owned_vehicle,
    register_vehicle,
    retire_vehicle,
    set_vehicle_status,
    update_vehicle,
)

__all__ = [
    "BLOCKING_TRIP_STATUSES",
    "conflicting_trips",
    "is_vehicle_available",
    "get_owned_vehicle",
    "register_vehicle",
    "retire_vehicle",
    "set_vehicle_status",
    "update_vehicle",
]
