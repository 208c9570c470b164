# fleet/models/vehicle.py

import re
import uuid

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from fleet.validators import normalize_plate, validate_sl_plate


class Vehicle(models.Model):
    """
    A transporter-owned vehicle.

    Key rules:
    - `code` is assigned on first save: category prefix + 3-digit sequence
      per (transporter, category), e.g. T001, L002.
    - `status` is owned by the trip lifecycle while the vehicle is assigned
      (On Delivery). Owners may only toggle Available/Maintenance/Offline.
    """

    CATEGORY_TRUCK = "Truck"
    CATEGORY_LORRY = "Lorry"
    CATEGORY_PICKUP = "Pickup"
    CATEGORY_VAN = "Van"

    CATEGORY_CHOICES = [
        (CATEGORY_TRUCK, "Truck"),
        (CATEGORY_LORRY, "Lorry"),
        (CATEGORY_PICKUP, "Pickup"),
        (CATEGORY_VAN, "Van"),
    ]

    CODE_PREFIX = {
        CATEGORY_TRUCK: "T",
        CATEGORY_LORRY: "L",
        CATEGORY_PICKUP: "P",
        CATEGORY_VAN: "V",
    }

    TYPE_OPEN_BODY = "Open body"
    TYPE_COVERED_BODY = "Covered body"
    TYPE_REFRIGERATED = "Refrigerated"
    TYPE_CONTAINER = "Container"

    TYPE_CHOICES = [
        (TYPE_OPEN_BODY, "Open body"),
        (TYPE_COVERED_BODY, "Covered body"),
        (TYPE_REFRIGERATED, "Refrigerated"),
        (TYPE_CONTAINER, "Container"),
    ]

    FUEL_CHOICES = [
        ("Diesel", "Diesel"),
        ("Petrol", "Petrol"),
        ("Electric", "Electric"),
        ("Hybrid", "Hybrid"),
    ]

    STATUS_AVAILABLE = "Available"
    STATUS_ON_DELIVERY = "On Delivery"
    STATUS_MAINTENANCE = "Maintenance"
    STATUS_OFFLINE = "Offline"

    STATUS_CHOICES = [
        (STATUS_AVAILABLE, "Available"),
        (STATUS_ON_DELIVERY, "On Delivery"),
        (STATUS_MAINTENANCE, "Maintenance"),
        (STATUS_OFFLINE, "Offline"),
    ]

    # statuses an owner may set by hand
    MANUAL_STATUSES = {STATUS_AVAILABLE, STATUS_MAINTENANCE, STATUS_OFFLINE}

    # in service; an On Delivery vehicle can still take a non-overlapping trip
    BOOKABLE_STATUSES = {STATUS_AVAILABLE, STATUS_ON_DELIVERY}

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    code = models.CharField(max_length=8, blank=True, editable=False)

    transporter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="vehicles",
    )

    category = models.CharField(max_length=16, choices=CATEGORY_CHOICES)
    vehicle_type = models.CharField(max_length=16, choices=TYPE_CHOICES)

    weight_capacity_kg = models.PositiveIntegerField(validators=[MinValueValidator(500)])
    volume_capacity_l = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(100)],
    )

    registration_number = models.CharField(
        max_length=20,
        unique=True,
        validators=[validate_sl_plate],
    )
    brand = models.CharField(max_length=64)
    vehicle_model = models.CharField(max_length=64)
    fuel_type = models.CharField(max_length=16, choices=FUEL_CHOICES)
    manufacturing_year = models.PositiveIntegerField(null=True, blank=True)

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_AVAILABLE)

    last_maintenance_date = models.DateField(null=True, blank=True)
    next_maintenance_due = models.DateField(null=True, blank=True)
    insurance_expiry = models.DateField(null=True, blank=True)
    registration_expiry = models.DateField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["transporter", "code"], name="uq_vehicle_transporter_code"),
        ]
        indexes = [
            models.Index(fields=["transporter", "status"], name="vehicle_transporter_status_idx"),
        ]

    def __str__(self):
        return f"{self.code or '-'} {self.registration_number} ({self.status})"

    @property
    def is_available(self) -> bool:
        return self.status == self.STATUS_AVAILABLE

    @property
    def is_bookable(self) -> bool:
        return self.status in self.BOOKABLE_STATUSES

    def next_code(self) -> str:
        prefix = self.CODE_PREFIX.get(self.category, "V")
        pattern = re.compile(rf"^{prefix}(\d+)$")
        used = (
            Vehicle.objects.filter(transporter_id=self.transporter_id, category=self.category)
            .values_list("code", flat=True)
        )
        highest = 0
        for code in used:
            m = pattern.match(code or "")
            if m:
                highest = max(highest, int(m.group(1)))
        return f"{prefix}{highest + 1:03d}"

    def save(self, *args, **kwargs):
        self.registration_number = normalize_plate(self.registration_number)
        if self._state.adding and not self.code:
            self.code = self.next_code()
        return super().save(*args, **kwargs)
