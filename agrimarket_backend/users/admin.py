# users/admin.py

"""
USERS ADMIN REGISTRATION

Registers the custom User model and the four role profiles.
Profiles are edited inline on the owning account.
"""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import AdminProfile, DistributorProfile, FarmerProfile, TransporterProfile, User


class FarmerProfileInline(admin.StackedInline):
    model = FarmerProfile
    can_delete = False
    extra = 0


class DistributorProfileInline(admin.StackedInline):
    model = DistributorProfile
    can_delete = False
    extra = 0


class TransporterProfileInline(admin.StackedInline):
    model = TransporterProfile
    can_delete = False
    extra = 0


class AdminProfileInline(admin.StackedInline):
    model = AdminProfile
    can_delete = False
    extra = 0


_ROLE_INLINES = {
    User.ROLE_FARMER: FarmerProfileInline,
    User.ROLE_DISTRIBUTOR: DistributorProfileInline,
    User.ROLE_TRANSPORTER: TransporterProfileInline,
    User.ROLE_ADMIN: AdminProfileInline,
}


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    ordering = ("email",)
    list_display = ("email", "full_name", "role", "district", "is_verified", "is_active")
    list_filter = ("role", "is_verified", "is_active", "district")
    search_fields = ("email", "full_name", "phone")

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Contact", {"fields": ("full_name", "phone", "address", "city", "district")}),
        ("Role", {"fields": ("role", "is_verified")}),
        (
            "Permissions",
            {
                "fields": (
                    "is_active",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                )
            },
        ),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": (
                    "email",
                    "password1",
                    "password2",
                    "role",
                    "full_name",
                ),
            },
        ),
    )

    def get_inlines(self, request, obj):
        # only the variant matching the saved role
        if obj is None:
            return []
        inline = _ROLE_INLINES.get(obj.role)
        return [inline] if inline else []
