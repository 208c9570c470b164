from .trip import (
    TripCancelSerializer,
    TripChargeInputSerializer,
    TripChargeSerializer,
    TripCreateSerializer,
    TripEventSerializer,
    TripSerializer,
    TripStatsSerializer,
    TripStatusSerializer,
    TripVehicleSerializer,
)

__all__ = [
    "TripCancelSerializer",
    "TripChargeInputSerializer",
    "TripChargeSerializer",
    "TripCreateSerializer",
    "TripEventSerializer",
    "TripSerializer",
    "TripStatsSerializer",
    "TripStatusSerializer",
    "TripVehicleSerializer",
]
