"""
PATH: trips/models/__init__.py

Trips models export surface.
"""

from .trip import Trip
from .trip_charge import TripCharge
from .trip_event import TripEvent

__all__ = [
    "Trip",
    "TripCharge",
    "TripEvent",
]
