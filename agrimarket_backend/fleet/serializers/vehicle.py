# fleet/serializers/vehicle.py

from rest_framework import serializers

from fleet.models import Vehicle


class VehicleSerializer(serializers.ModelSerializer):
    transporter_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Vehicle
        fields = [
            "id",
            "code",
            "transporter_id",
            "category",
            "vehicle_type",
            "weight_capacity_kg",
            "volume_capacity_l",
            "registration_number",
            "brand",
            "vehicle_model",
            "fuel_type",
            "manufacturing_year",
            "status",
            "last_maintenance_date",
            "next_maintenance_due",
            "insurance_expiry",
            "registration_expiry",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "code", "transporter_id", "status", "created_at", "updated_at"]
        extra_kwargs = {
            # uniqueness and plate format are checked by the registry service
            "registration_number": {"validators": []},
        }


class VehicleStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=sorted(Vehicle.MANUAL_STATUSES))
