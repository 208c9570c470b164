# payments/admin.py

from django.contrib import admin

from payments.models import PaymentSession


@admin.register(PaymentSession)
class PaymentSessionAdmin(admin.ModelAdmin):
    list_display = ("session_id", "order", "amount", "currency", "status", "created_at", "paid_at")
    list_filter = ("status", "provider")
    search_fields = ("session_id", "order__id")
    readonly_fields = ("provider_payload", "created_at", "paid_at")
