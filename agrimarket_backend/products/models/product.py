# products/models/product.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class Product(models.Model):
    """
    Produce listed by a farmer.

    STOCK MODEL (IMPORTANT):
    - `quantity` is the live available stock, in `unit`s.
    - It is only changed through products.services.inventory, which
      writes a StockMovement for every delta.
    - Catalog CRUD is owned elsewhere; this service only reads price and
      pickup location and moves stock.
    """

    class Category(models.TextChoices):
        VEGETABLES = "Vegetables", "Vegetables"
        FRUITS = "Fruits", "Fruits"
        GRAINS = "Grains", "Grains"
        SPICES = "Spices", "Spices"
        OTHER = "Other", "Other"

    class Unit(models.TextChoices):
        KG = "kg", "Kilogram"
        TON = "ton", "Ton"
        PIECE = "piece", "Piece"
        BUNCH = "bunch", "Bunch"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    farmer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="products",
    )

    name = models.CharField(max_length=255, db_index=True)
    category = models.CharField(max_length=32, choices=Category.choices, default=Category.OTHER)
    unit = models.CharField(max_length=16, choices=Unit.choices, default=Unit.KG)

    quantity = models.PositiveIntegerField(default=0)
    price = models.DecimalField(max_digits=12, decimal_places=2, help_text="Unit price in LKR")

    # Pickup location (trip origin)
    pickup_address = models.CharField(max_length=255, blank=True)
    pickup_city = models.CharField(max_length=100, blank=True)
    pickup_district = models.CharField(max_length=100, blank=True, db_index=True)
    pickup_lat = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    pickup_lng = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)

    is_available = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["name"], name="product_name_idx"),
            models.Index(fields=["farmer", "created_at"], name="product_farmer_created_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.quantity} {self.unit})"

    def clean(self):
        if self.price is None or Decimal(self.price) <= 0:
            raise ValidationError("Price must be greater than zero")

    @property
    def pickup_location(self) -> dict:
        return {
            "address": self.pickup_address,
            "city": self.pickup_city,
            "district": self.pickup_district,
            "lat": self.pickup_lat,
            "lng": self.pickup_lng,
        }

    @property
    def has_pickup_location(self) -> bool:
        return bool(self.pickup_address or self.pickup_city or self.pickup_district)
