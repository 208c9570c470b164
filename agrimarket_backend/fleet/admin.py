# fleet/admin.py

from django.contrib import admin

from fleet.models import Vehicle


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ("code", "registration_number", "transporter", "category", "vehicle_type", "status")
    list_filter = ("category", "vehicle_type", "status", "fuel_type")
    search_fields = ("code", "registration_number", "transporter__email")
    readonly_fields = ("code", "status", "created_at", "updated_at")
