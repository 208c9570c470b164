from .trips import (
    AvailableOrdersView,
    MyTripsView,
    TripChargeDetailView,
    TripChargesView,
    TripCreateView,
    TripDetailView,
    TripStatsView,
    TripStatusView,
    TripVehicleView,
)

__all__ = [
    "AvailableOrdersView",
    "MyTripsView",
    "TripChargeDetailView",
    "TripChargesView",
    "TripCreateView",
    "TripDetailView",
    "TripStatsView",
    "TripStatusView",
    "TripVehicleView",
]
