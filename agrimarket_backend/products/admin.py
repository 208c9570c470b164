# products/admin.py
"""
Admin rules (audit-safe stock):

- Product quantity is read-only here; stock only moves through orders.
- StockMovement rows are immutable and shown read-only.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Product, StockMovement


class StockMovementInline(admin.TabularInline):
    model = StockMovement
    extra = 0
    can_delete = False
    fields = ("created_at", "reason", "movement_type", "quantity", "order_ref", "performed_by")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "farmer", "category", "quantity", "unit", "price", "pickup_district", "is_available")
    list_filter = ("category", "is_available", "pickup_district")
    search_fields = ("name", "farmer__email", "farmer__full_name")
    readonly_fields = ("quantity", "created_at", "updated_at")
    inlines = [StockMovementInline]


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ("created_at", "product", "reason", "movement_type", "quantity", "order_ref")
    list_filter = ("reason", "movement_type")
    search_fields = ("product__name", "order_ref")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
