from .trip_lifecycle import (
    ALLOWED_TRANSITIONS,
    TERMINAL_STATES,
    InvalidTripTransitionError,
    TripLifecycleError,
    TripNotCancellableError,
    TripTerminalError,
    can_transition,
    validate_transition,
)
from .trip_service import (
    add_trip_charge,
    cancel_trip,
    change_vehicle,
    create_trip,
    get_trip,
    list_transporter_trips,
    remove_trip_charge,
    set_trip_status,
    trip_stats,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "TERMINAL_STATES",
    "InvalidTripTransitionError",
    "TripLifecycleError",
    "TripNotCancellableError",
    "TripTerminalError",
    "can_transition",
    "validate_transition",
    "add_trip_charge",
    "cancel_trip",
    "change_vehicle",
    "create_trip",
    "get_trip",
    "list_transporter_trips",
    "remove_trip_charge",
    "set_trip_status",
    "trip_stats",
]
