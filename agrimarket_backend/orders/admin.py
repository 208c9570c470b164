# orders/admin.py

from django.contrib import admin

from orders.models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "distributor",
        "product",
        "quantity",
        "total_price",
        "status",
        "delivery_status",
        "payment_status",
        "transporter",
        "created_at",
    )
    list_filter = ("status", "delivery_status", "payment_status")
    search_fields = ("id", "distributor__email", "product__name", "payment_session_id")
    # stock and trip state must move through services
    readonly_fields = (
        "quantity",
        "total_price",
        "total_price_usd",
        "delivery_status",
        "transporter",
        "payment_session_id",
        "payment_status",
        "created_at",
        "updated_at",
    )
