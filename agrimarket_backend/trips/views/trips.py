# trips/views/trips.py

import logging

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import FulfillmentError
from core.responses import fulfillment_error_response, paged_payload
from orders.serializers import TransportOrderSerializer
from orders.services import list_available_for_transport
from permissions.roles import (
    CAP_TRIPS_BROWSE,
    CAP_TRIPS_MANAGE,
    CAP_TRIPS_STATS,
    HasCapability,
    IsTransporter,
)
from trips.serializers import (
    TripCancelSerializer,
    TripChargeInputSerializer,
    TripCreateSerializer,
    TripSerializer,
    TripStatsSerializer,
    TripStatusSerializer,
    TripVehicleSerializer,
)
from trips.services import (
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

logger = logging.getLogger(__name__)


def _trip_payload(trip_id, actor):
    return {"trip": TripSerializer(get_trip(trip_id=trip_id, actor=actor)).data}


# ============================================================
# BROWSE / CLAIM
# ============================================================

class AvailableOrdersView(APIView):
    """GET /api/trips/available-orders/?district=&page=&limit="""

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_TRIPS_BROWSE
    serializer_class = TransportOrderSerializer

    @extend_schema(
        parameters=[
            OpenApiParameter("district", str, required=False),
            OpenApiParameter("page", int, required=False),
            OpenApiParameter("limit", int, required=False),
        ],
        responses={200: dict},
        description="Paid orders waiting for a transporter, oldest first",
    )
    def get(self, request):
        district = (request.query_params.get("district") or "").strip() or None
        payload = paged_payload(
            request=request,
            queryset=list_available_for_transport(district=district),
            serializer_class=TransportOrderSerializer,
            key="orders",
        )
        return Response(payload)


class TripCreateView(APIView):
    """POST /api/trips/  claim an order with one of the caller's vehicles"""

    permission_classes = [IsAuthenticated, IsTransporter]
    serializer_class = TripCreateSerializer

    @extend_schema(request=TripCreateSerializer, responses={201: TripSerializer})
    def post(self, request):
        serializer = TripCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            trip = create_trip(
                transporter=request.user,
                order_id=data.get("order_id"),
                vehicle_id=data.get("vehicle_id"),
                scheduled_pickup=data.get("scheduled_pickup"),
                estimated_delivery=data.get("estimated_delivery"),
                base_fare=data.get("base_fare"),
                distance_charge=data.get("distance_charge"),
                additional_charges=[dict(c) for c in data.get("additional_charges", [])],
                special_instructions=data.get("special_instructions", ""),
                distance_km=data.get("distance_km"),
                estimated_duration_minutes=data.get("estimated_duration_minutes"),
            )
            payload = _trip_payload(trip.id, request.user)
        except FulfillmentError as exc:
            return fulfillment_error_response(exc)

        return Response(payload, status=status.HTTP_201_CREATED)


# ============================================================
# LISTING / STATS
# ============================================================

class MyTripsView(APIView):
    """GET /api/trips/my-trips/?status=&page=&limit="""

    permission_classes = [IsAuthenticated, IsTransporter]
    serializer_class = TripSerializer

    @extend_schema(
        parameters=[
            OpenApiParameter("status", str, required=False),
            OpenApiParameter("page", int, required=False),
            OpenApiParameter("limit", int, required=False),
        ],
        responses={200: dict},
    )
    def get(self, request):
        payload = paged_payload(
            request=request,
            queryset=list_transporter_trips(
                transporter=request.user,
                status=(request.query_params.get("status") or "").strip() or None,
            ),
            serializer_class=TripSerializer,
            key="trips",
        )
        return Response(payload)


class TripStatsView(APIView):
    """GET /api/trips/stats/"""

    permission_classes = [IsAuthenticated, HasCapability, IsTransporter]
    required_capability = CAP_TRIPS_STATS
    serializer_class = TripStatsSerializer

    @extend_schema(responses={200: TripStatsSerializer})
    def get(self, request):
        stats = trip_stats(transporter=request.user)
        return Response({"stats": TripStatsSerializer(stats).data})


# ============================================================
# SINGLE TRIP
# ============================================================

class TripDetailView(APIView):
    """
    GET    /api/trips/<id>/  owner or admin
    DELETE /api/trips/<id>/  cancel (owner, unstarted trips only)
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_TRIPS_MANAGE
    serializer_class = TripSerializer

    @extend_schema(responses={200: TripSerializer})
    def get(self, request, trip_id):
        try:
            payload = _trip_payload(trip_id, request.user)
        except FulfillmentError as exc:
            return fulfillment_error_response(exc)
        return Response(payload)

    @extend_schema(request=TripCancelSerializer, responses={200: dict})
    def delete(self, request, trip_id):
        serializer = TripCancelSerializer(data=request.data or {})
        serializer.is_valid(raise_exception=True)

        try:
            trip = cancel_trip(
                trip_id=trip_id,
                actor=request.user,
                reason=serializer.validated_data.get("reason"),
            )
        except FulfillmentError as exc:
            return fulfillment_error_response(exc)

        return Response(
            {"message": "Trip cancelled", "trip_id": str(trip.id)},
            status=status.HTTP_200_OK,
        )


class TripStatusView(APIView):
    """PATCH /api/trips/<id>/status/"""

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_TRIPS_MANAGE
    serializer_class = TripStatusSerializer

    @extend_schema(request=TripStatusSerializer, responses={200: TripSerializer})
    def patch(self, request, trip_id):
        serializer = TripStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            set_trip_status(
                trip_id=trip_id,
                actor=request.user,
                status=data["status"],
                reason=data.get("reason"),
                note=data.get("note") or None,
            )
            payload = _trip_payload(trip_id, request.user)
        except FulfillmentError as exc:
            return fulfillment_error_response(exc)

        return Response(payload)


class TripVehicleView(APIView):
    """PATCH /api/trips/<id>/vehicle/"""

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_TRIPS_MANAGE
    serializer_class = TripVehicleSerializer

    @extend_schema(request=TripVehicleSerializer, responses={200: TripSerializer})
    def patch(self, request, trip_id):
        serializer = TripVehicleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            change_vehicle(
                trip_id=trip_id,
                actor=request.user,
                new_vehicle_id=serializer.validated_data["vehicle_id"],
            )
            payload = _trip_payload(trip_id, request.user)
        except FulfillmentError as exc:
            return fulfillment_error_response(exc)

        return Response(payload)


class TripChargesView(APIView):
    """POST /api/trips/<id>/charges/"""

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_TRIPS_MANAGE
    serializer_class = TripChargeInputSerializer

    @extend_schema(request=TripChargeInputSerializer, responses={201: TripSerializer})
    def post(self, request, trip_id):
        serializer = TripChargeInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            add_trip_charge(
                trip_id=trip_id,
                actor=request.user,
                description=serializer.validated_data["description"],
                amount=serializer.validated_data["amount"],
            )
            payload = _trip_payload(trip_id, request.user)
        except FulfillmentError as exc:
            return fulfillment_error_response(exc)

        return Response(payload, status=status.HTTP_201_CREATED)


class TripChargeDetailView(APIView):
    """DELETE /api/trips/<id>/charges/<charge_id>/"""

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_TRIPS_MANAGE

    @extend_schema(request=None, responses={200: TripSerializer})
    def delete(self, request, trip_id, charge_id):
        try:
            remove_trip_charge(trip_id=trip_id, charge_id=charge_id, actor=request.user)
            payload = _trip_payload(trip_id, request.user)
        except FulfillmentError as exc:
            return fulfillment_error_response(exc)

        return Response(payload)
