# orders/serializers/order.py

from rest_framework import serializers

from orders.models import Order
from users.serializers import UserSummarySerializer


# ---------------- INPUT ----------------
class DeliveryAddressSerializer(serializers.Serializer):
    address = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    lat = serializers.DecimalField(max_digits=9, decimal_places=6, required=False, allow_null=True, default=None)
    lng = serializers.DecimalField(max_digits=9, decimal_places=6, required=False, allow_null=True, default=None)


class OrderPlaceSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    delivery_address = DeliveryAddressSerializer()


class OrderUpdateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, required=False)
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES, required=False)

    def validate(self, attrs):
        if "quantity" not in attrs and "status" not in attrs:
            raise serializers.ValidationError("Provide quantity and/or status.")
        return attrs


# ---------------- OUTPUT ----------------
class OrderProductSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    unit = serializers.CharField()
    price = serializers.DecimalField(max_digits=12, decimal_places=2)


class OrderSerializer(serializers.ModelSerializer):
    product = OrderProductSerializer(read_only=True)
    distributor = UserSummarySerializer(read_only=True)
    transporter = UserSummarySerializer(read_only=True, allow_null=True)
    delivery_address = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "product",
            "distributor",
            "quantity",
            "total_price",
            "total_price_usd",
            "status",
            "delivery_status",
            "payment_status",
            "payment_session_id",
            "transporter",
            "delivery_address",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_delivery_address(self, obj):
        loc = obj.dropoff_location
        return {
            "address": loc["address"],
            "city": loc["city"],
            "lat": str(loc["lat"]) if loc["lat"] is not None else None,
            "lng": str(loc["lng"]) if loc["lng"] is not None else None,
        }


class TransportOrderSerializer(OrderSerializer):
    """Order as shown to transporters browsing for work (adds pickup point)."""

    pickup_location = serializers.SerializerMethodField()

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ["pickup_location"]
        read_only_fields = fields

    def get_pickup_location(self, obj):
        loc = obj.product.pickup_location
        return {
            "address": loc["address"],
            "city": loc["city"],
            "district": loc["district"],
            "lat": str(loc["lat"]) if loc["lat"] is not None else None,
            "lng": str(loc["lng"]) if loc["lng"] is not None else None,
        }
