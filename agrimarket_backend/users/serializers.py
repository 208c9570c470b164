# users/serializers.py

from rest_framework import serializers

from .models import AdminProfile, DistributorProfile, FarmerProfile, TransporterProfile, User


# ---------------- ROLE PROFILES ----------------
class FarmerProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = FarmerProfile
        fields = ["farm_size", "main_crops", "nic_number"]


class DistributorProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = DistributorProfile
        fields = ["business_name", "business_reg_number", "warehouse_capacity"]


class TransporterProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = TransporterProfile
        fields = ["company_name", "business_reg_number", "fleet_size"]


class AdminProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = AdminProfile
        fields = ["admin_level"]


PROFILE_SERIALIZERS = {
    User.ROLE_FARMER: FarmerProfileSerializer,
    User.ROLE_DISTRIBUTOR: DistributorProfileSerializer,
    User.ROLE_TRANSPORTER: TransporterProfileSerializer,
    User.ROLE_ADMIN: AdminProfileSerializer,
}


# ---------------- USER OUTPUT ----------------
class UserSerializer(serializers.ModelSerializer):
    """
    Safe user representation for frontend consumption.
    """

    profile = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "full_name",
            "phone",
            "address",
            "city",
            "district",
            "role",
            "is_verified",
            "profile",
        ]
        read_only_fields = fields

    def get_profile(self, obj):
        profile = obj.profile
        if profile is None:
            return None
        return PROFILE_SERIALIZERS[obj.role](profile).data


class UserSummarySerializer(serializers.ModelSerializer):
    """Compact party reference embedded in orders and trips."""

    class Meta:
        model = User
        fields = ["id", "full_name", "email", "phone", "role"]
        read_only_fields = fields
