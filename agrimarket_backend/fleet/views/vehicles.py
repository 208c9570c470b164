# fleet/views/vehicles.py

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.exceptions import FulfillmentError
from core.responses import fulfillment_error_response
from fleet.models import Vehicle
from fleet.serializers import VehicleSerializer, VehicleStatusSerializer
from fleet.services import (
    get_owned_vehicle,
    register_vehicle,
    retire_vehicle,
    set_vehicle_status,
    update_vehicle,
)
from permissions.roles import CAP_FLEET_MANAGE, ROLE_ADMIN, HasCapability


class VehicleViewSet(
    mixins.ListModelMixin,
    viewsets.GenericViewSet,
):
    """
    Transporter fleet registry.

    - list:     own vehicles (admins see all), filter by status/category/vehicle_type
    - create:   register a vehicle (code auto-assigned)
    - retrieve / partial_update / destroy: owner only
    - status:   PATCH manual status (Available, Maintenance, Offline)
    """

    serializer_class = VehicleSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_FLEET_MANAGE

    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["status", "category", "vehicle_type"]

    def get_queryset(self):
        qs = Vehicle.objects.all().order_by("category", "code")
        if getattr(self.request.user, "role", None) == ROLE_ADMIN:
            return qs
        return qs.filter(transporter=self.request.user)

    def create(self, request):
        serializer = VehicleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            vehicle = register_vehicle(transporter=request.user, data=dict(serializer.validated_data))
        except FulfillmentError as exc:
            return fulfillment_error_response(exc)

        return Response(VehicleSerializer(vehicle).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        if getattr(request.user, "role", None) == ROLE_ADMIN:
            vehicle = self.get_object()
            return Response(VehicleSerializer(vehicle).data)

        try:
            vehicle = get_owned_vehicle(vehicle_id=pk, actor=request.user)
        except FulfillmentError as exc:
            return fulfillment_error_response(exc)
        return Response(VehicleSerializer(vehicle).data)

    def partial_update(self, request, pk=None):
        serializer = VehicleSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            vehicle = update_vehicle(
                vehicle_id=pk,
                actor=request.user,
                changes=dict(serializer.validated_data),
            )
        except FulfillmentError as exc:
            return fulfillment_error_response(exc)
        return Response(VehicleSerializer(vehicle).data)

    def destroy(self, request, pk=None):
        try:
            retire_vehicle(vehicle_id=pk, actor=request.user)
        except FulfillmentError as exc:
            return fulfillment_error_response(exc)
        return Response({"message": "Vehicle deleted"}, status=status.HTTP_200_OK)

    @extend_schema(request=VehicleStatusSerializer, responses={200: VehicleSerializer})
    @action(detail=True, methods=["patch"], url_path="status")
    def set_status(self, request, pk=None):
        serializer = VehicleStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            vehicle = set_vehicle_status(
                vehicle_id=pk,
                actor=request.user,
                status=serializer.validated_data["status"],
            )
        except FulfillmentError as exc:
            return fulfillment_error_response(exc)

        return Response(
            {
                "message": f"Vehicle status updated to {vehicle.status}",
                "vehicle": VehicleSerializer(vehicle).data,
            }
        )
