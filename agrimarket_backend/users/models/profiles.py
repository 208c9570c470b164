"""
PATH: users/models/profiles.py

ROLE PROFILES (tagged variants of User)

Each account has exactly one profile, and its kind must equal user.role.
The shared identity (email, phone, location) stays on User; these tables
only hold what is specific to one role.
"""

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class RoleProfile(models.Model):
    """
    Abstract base for role variants.

    Subclasses set `role` to the User.ROLE_* value they belong to.
    """

    role: str = ""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def clean(self):
        user_role = getattr(self.user, "role", None)
        if user_role != self.role:
            raise ValidationError(
                {"user": f"{self.__class__.__name__} requires a {self.role} account (got {user_role})."}
            )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class FarmerProfile(RoleProfile):
    role = "farmer"

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="farmer_profile",
    )
    farm_size = models.DecimalField(max_digits=10, decimal_places=2, help_text="Acres")
    main_crops = models.JSONField(default=list, blank=True)
    nic_number = models.CharField(max_length=20)

    def __str__(self):
        return f"Farmer {self.user}"


class DistributorProfile(RoleProfile):
    role = "distributor"

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="distributor_profile",
    )
    business_name = models.CharField(max_length=200)
    business_reg_number = models.CharField(max_length=64)
    warehouse_capacity = models.PositiveIntegerField(null=True, blank=True)

    def __str__(self):
        return self.business_name


class TransporterProfile(RoleProfile):
    role = "transporter"

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="transporter_profile",
    )
    company_name = models.CharField(max_length=200)
    business_reg_number = models.CharField(max_length=64)
    fleet_size = models.PositiveIntegerField(default=0)

    def __str__(self):
        return self.company_name


class AdminProfile(RoleProfile):
    role = "admin"

    LEVEL_SUPER_ADMIN = "SuperAdmin"
    LEVEL_ADMIN = "Admin"
    LEVEL_MODERATOR = "Moderator"

    LEVEL_CHOICES = [
        (LEVEL_SUPER_ADMIN, "Super Admin"),
        (LEVEL_ADMIN, "Admin"),
        (LEVEL_MODERATOR, "Moderator"),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="admin_profile",
    )
    admin_level = models.CharField(max_length=20, choices=LEVEL_CHOICES, default=LEVEL_MODERATOR)

    def __str__(self):
        return f"{self.admin_level} {self.user}"
