"""
PATH: users/models/user.py

CUSTOM USER MODEL (ACCOUNT)

One identity record for every marketplace participant:
- farmer      (lists produce)
- distributor (places orders)
- transporter (runs delivery trips)
- admin       (moderation)

Role-specific data does NOT live here. Each role has its own profile table
(users/models/profiles.py); `user.profile` resolves the variant that matches
`user.role`. Registration/OTP flows are handled outside this service.
"""

from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import models


# ---------------- USER MANAGER ----------------
class UserManager(BaseUserManager):
    def create_user(self, email=None, password=None, **extra_fields):
        email = self.normalize_email((email or "").strip())
        if not email:
            raise ValueError("email is required")

        extra_fields.setdefault("is_active", True)

        user = self.model(email=email, **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.full_clean()
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        if not password:
            raise ValueError("Superuser must have a password")

        extra_fields.setdefault("role", User.ROLE_ADMIN)
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True")

        return self.create_user(email=email, password=password, **extra_fields)


# ---------------- USER MODEL ----------------
class User(AbstractBaseUser, PermissionsMixin):
    ROLE_FARMER = "farmer"
    ROLE_DISTRIBUTOR = "distributor"
    ROLE_TRANSPORTER = "transporter"
    ROLE_ADMIN = "admin"

    ROLE_CHOICES = [
        (ROLE_FARMER, "Farmer"),
        (ROLE_DISTRIBUTOR, "Distributor"),
        (ROLE_TRANSPORTER, "Transporter"),
        (ROLE_ADMIN, "Admin"),
    ]

    # role -> reverse accessor of the matching profile table
    PROFILE_ACCESSORS = {
        ROLE_FARMER: "farmer_profile",
        ROLE_DISTRIBUTOR: "distributor_profile",
        ROLE_TRANSPORTER: "transporter_profile",
        ROLE_ADMIN: "admin_profile",
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    email = models.EmailField(unique=True)
    full_name = models.CharField(max_length=150, blank=True)
    phone = models.CharField(max_length=40, blank=True)

    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    district = models.CharField(max_length=100, blank=True)

    role = models.CharField(max_length=20, choices=ROLE_CHOICES)

    is_verified = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ["-created_at"]

    def clean(self):
        if self.email:
            self.email = self.__class__.objects.normalize_email(self.email).strip()
        if self.role not in self.PROFILE_ACCESSORS:
            raise ValidationError({"role": f"Unknown role: {self.role!r}"})

    @property
    def profile(self):
        """
        The role-specific variant for this account, or None if it has not
        been created yet.
        """
        accessor = self.PROFILE_ACCESSORS.get(self.role)
        if not accessor:
            return None
        try:
            return getattr(self, accessor)
        except ObjectDoesNotExist:
            return None

    def has_role(self, *roles: str) -> bool:
        return self.role in roles

    def __str__(self):
        return f"{self.full_name or self.email} ({self.role})"
