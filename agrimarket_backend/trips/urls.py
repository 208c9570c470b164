# trips/urls.py

from django.urls import path

from .views import (
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

app_name = "trips"

urlpatterns = [
    path("", TripCreateView.as_view(), name="trip-create"),
    path("available-orders/", AvailableOrdersView.as_view(), name="available-orders"),
    path("my-trips/", MyTripsView.as_view(), name="my-trips"),
    path("stats/", TripStatsView.as_view(), name="trip-stats"),
    path("<uuid:trip_id>/", TripDetailView.as_view(), name="trip-detail"),
    path("<uuid:trip_id>/status/", TripStatusView.as_view(), name="trip-status"),
    path("<uuid:trip_id>/vehicle/", TripVehicleView.as_view(), name="trip-vehicle"),
    path("<uuid:trip_id>/charges/", TripChargesView.as_view(), name="trip-charges"),
    path(
        "<uuid:trip_id>/charges/<uuid:charge_id>/",
        TripChargeDetailView.as_view(),
        name="trip-charge-detail",
    ),
]
