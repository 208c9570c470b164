# trips/admin.py

from django.contrib import admin

from trips.models import Trip, TripCharge, TripEvent


class TripChargeInline(admin.TabularInline):
    model = TripCharge
    extra = 0


class TripEventInline(admin.TabularInline):
    model = TripEvent
    extra = 0
    can_delete = False
    readonly_fields = ("status", "note", "actor", "timestamp")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Trip)
class TripAdmin(admin.ModelAdmin):
    list_display = ("trip_no", "transporter", "vehicle", "trip_status", "scheduled_pickup", "total_cost")
    list_filter = ("trip_status", "currency")
    search_fields = ("trip_no", "transporter__email", "vehicle__code", "vehicle__registration_number")
    readonly_fields = ("trip_no", "total_cost", "created_at", "updated_at")
    inlines = [TripChargeInline, TripEventInline]

    def has_delete_permission(self, request, obj=None):
        # trips keep their timeline; cancel instead
        return False
