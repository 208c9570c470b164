"""
TRIP LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Trip entities.

DESIGN PRINCIPLES:
- No database writes
- No vehicle or order mutation
- Single source of truth for the state machine
"""

from core.exceptions import ConflictError, ValidationFailedError
from trips.models import Trip

# ============================================================
# DOMAIN ERRORS
# ============================================================


class TripLifecycleError(ConflictError):
    default_code = "INVALID_TRIP_TRANSITION"


class InvalidTripTransitionError(TripLifecycleError):
    default_code = "INVALID_TRIP_TRANSITION"


class TripTerminalError(TripLifecycleError):
    default_code = "TRIP_TERMINAL"


class TripNotCancellableError(TripLifecycleError):
    default_code = "TRIP_NOT_CANCELLABLE"


# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Trip.STATUS_COMPLETED,
    Trip.STATUS_CANCELLED,
}

# Trips that may still be cancelled or re-assigned to another vehicle.
UNSTARTED_STATES = {
    Trip.STATUS_PENDING,
    Trip.STATUS_ACCEPTED,
}

ALLOWED_TRANSITIONS = {
    Trip.STATUS_PENDING: {
        Trip.STATUS_ACCEPTED,
        Trip.STATUS_IN_PROGRESS,
        Trip.STATUS_COMPLETED,
        Trip.STATUS_CANCELLED,
    },
    Trip.STATUS_ACCEPTED: {
        Trip.STATUS_IN_PROGRESS,
        Trip.STATUS_COMPLETED,
        Trip.STATUS_CANCELLED,
    },
    Trip.STATUS_IN_PROGRESS: {
        Trip.STATUS_COMPLETED,
    },
}

# Targets a client may request; Pending is only ever the initial state.
REQUESTABLE_STATES = {
    Trip.STATUS_ACCEPTED,
    Trip.STATUS_IN_PROGRESS,
    Trip.STATUS_COMPLETED,
    Trip.STATUS_CANCELLED,
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, trip: Trip, target_status: str):
    if trip.trip_status in TERMINAL_STATES:
        raise TripTerminalError(f"Cannot update a {trip.trip_status} trip")

    if target_status not in REQUESTABLE_STATES:
        raise ValidationFailedError(
            f"Invalid trip status '{target_status}'", code="INVALID_TRIP_STATUS"
        )

    if target_status == Trip.STATUS_CANCELLED and trip.trip_status not in UNSTARTED_STATES:
        raise TripNotCancellableError("Only pending or accepted trips can be cancelled")

    if not can_transition(from_status=trip.trip_status, to_status=target_status):
        raise InvalidTripTransitionError(
            f"Trip {trip.trip_no or trip.id} cannot transition from "
            f"'{trip.trip_status}' to '{target_status}'"
        )


def validate_vehicle_change(*, trip: Trip):
    if trip.trip_status in TERMINAL_STATES:
        raise TripTerminalError(f"Cannot change the vehicle of a {trip.trip_status} trip")

    if trip.trip_status not in UNSTARTED_STATES:
        raise TripLifecycleError(
            "Vehicle can only be changed for pending or accepted trips",
            code="VEHICLE_CHANGE_NOT_ALLOWED",
        )


def validate_mutable(*, trip: Trip):
    """Charges may only change while the trip is still open."""
    if trip.trip_status in TERMINAL_STATES:
        raise TripTerminalError(f"Cannot modify a {trip.trip_status} trip")
