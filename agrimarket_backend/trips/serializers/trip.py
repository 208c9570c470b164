# trips/serializers/trip.py

from decimal import Decimal

from rest_framework import serializers

from fleet.models import Vehicle
from trips.models import Trip, TripCharge, TripEvent
from trips.services.trip_lifecycle import REQUESTABLE_STATES
from users.serializers import UserSummarySerializer


def _coord(value):
    return str(value) if value is not None else None


# ============================================================
# INPUT
# ============================================================

class TripChargeInputSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=255)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.00"))


class TripCreateSerializer(serializers.Serializer):
    """
    Shape check only. Missing/negative amounts, schedule rules and
    availability are enforced by trips.services.create_trip so the
    error codes stay the same for every caller.
    """

    order_id = serializers.UUIDField(required=False, allow_null=True)
    vehicle_id = serializers.UUIDField(required=False, allow_null=True)
    scheduled_pickup = serializers.DateTimeField(required=False, allow_null=True)
    estimated_delivery = serializers.DateTimeField(required=False, allow_null=True)
    base_fare = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    distance_charge = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    distance_km = serializers.DecimalField(max_digits=8, decimal_places=2, required=False, allow_null=True)
    estimated_duration_minutes = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    additional_charges = TripChargeInputSerializer(many=True, required=False)
    special_instructions = serializers.CharField(required=False, allow_blank=True, default="")


class TripStatusSerializer(serializers.Serializer):
    # Allowed values are checked by the lifecycle rules (terminal trips first).
    status = serializers.CharField(max_length=16, help_text=", ".join(sorted(REQUESTABLE_STATES)))
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)
    note = serializers.CharField(required=False, allow_blank=True, max_length=255)


class TripVehicleSerializer(serializers.Serializer):
    vehicle_id = serializers.UUIDField()


class TripCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)


# ============================================================
# OUTPUT
# ============================================================

class TripChargeSerializer(serializers.ModelSerializer):
    class Meta:
        model = TripCharge
        fields = ["id", "description", "amount", "created_at"]
        read_only_fields = fields


class TripEventSerializer(serializers.ModelSerializer):
    actor_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = TripEvent
        fields = ["id", "status", "note", "actor_id", "timestamp"]
        read_only_fields = fields


class TripVehicleSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Vehicle
        fields = ["id", "code", "registration_number", "category", "vehicle_type", "status"]
        read_only_fields = fields


class TripOrderSummarySerializer(serializers.Serializer):
    id = serializers.UUIDField()
    quantity = serializers.IntegerField()
    total_price = serializers.DecimalField(max_digits=14, decimal_places=2)
    status = serializers.CharField()
    delivery_status = serializers.CharField()
    product_name = serializers.CharField(source="product.name")
    distributor = UserSummarySerializer()


class TripSerializer(serializers.ModelSerializer):
    order = TripOrderSummarySerializer(read_only=True, allow_null=True)
    vehicle = TripVehicleSummarySerializer(read_only=True)
    transporter_id = serializers.UUIDField(read_only=True)
    pickup_location = serializers.SerializerMethodField()
    dropoff_location = serializers.SerializerMethodField()
    additional_charges = TripChargeSerializer(many=True, read_only=True)
    timeline = TripEventSerializer(many=True, read_only=True)

    class Meta:
        model = Trip
        fields = [
            "id",
            "trip_no",
            "order",
            "transporter_id",
            "vehicle",
            "trip_status",
            "pickup_location",
            "dropoff_location",
            "scheduled_pickup",
            "estimated_delivery",
            "actual_pickup",
            "actual_delivery",
            "distance_km",
            "estimated_duration_minutes",
            "base_fare",
            "distance_charge",
            "additional_charges",
            "total_cost",
            "currency",
            "special_instructions",
            "cancellation_reason",
            "cancelled_at",
            "timeline",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_pickup_location(self, obj):
        loc = obj.pickup_location
        return {**loc, "lat": _coord(loc["lat"]), "lng": _coord(loc["lng"])}

    def get_dropoff_location(self, obj):
        loc = obj.dropoff_location
        return {**loc, "lat": _coord(loc["lat"]), "lng": _coord(loc["lng"])}


class TripStatusBucketSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=16, decimal_places=2)


class TripStatsSerializer(serializers.Serializer):
    by_status = serializers.DictField(child=TripStatusBucketSerializer())
    total_trips = serializers.IntegerField()
    completed_trips = serializers.IntegerField()
    cancelled_trips = serializers.IntegerField()
    completed_revenue = serializers.DecimalField(max_digits=16, decimal_places=2)
    completion_rate = serializers.DecimalField(max_digits=5, decimal_places=2)
