# products/models/stock_movement.py

"""
INVENTORY LEDGER

Immutable record of every product stock change caused by an order.

GUARANTEES:
- Append-only (no updates, no deletes)
- Direction validated against reason
- Every row references the order that caused it
- For one order: sum(OUT) - sum(IN) == quantity it still holds reserved
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .product import Product


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        IN = "IN", "Stock In"
        OUT = "OUT", "Stock Out"

    class Reason(models.TextChoices):
        ORDER_PLACED = "ORDER_PLACED", "Order Placed"
        ORDER_INCREASED = "ORDER_INCREASED", "Order Quantity Increased"
        ORDER_DECREASED = "ORDER_DECREASED", "Order Quantity Decreased"
        ORDER_CANCELLED = "ORDER_CANCELLED", "Order Cancelled"

    REASON_TO_MOVEMENT = {
        Reason.ORDER_PLACED: MovementType.OUT,
        Reason.ORDER_INCREASED: MovementType.OUT,
        Reason.ORDER_DECREASED: MovementType.IN,
        Reason.ORDER_CANCELLED: MovementType.IN,
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product, on_delete=models.CASCADE, related_name="stock_movements"
    )

    # Orders are deleted on cancellation; the ledger row outlives them.
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )
    order_ref = models.UUIDField(db_index=True)

    movement_type = models.CharField(max_length=3, choices=MovementType.choices)
    reason = models.CharField(max_length=20, choices=Reason.choices)

    quantity = models.PositiveIntegerField()

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["product", "created_at"], name="stockmove_product_created_idx"),
            models.Index(fields=["reason"], name="stockmove_reason_idx"),
        ]

    def clean(self):
        if not self.quantity or self.quantity <= 0:
            raise ValidationError("quantity must be greater than zero")

        expected_type = self.REASON_TO_MOVEMENT.get(self.reason)
        if expected_type and self.movement_type != expected_type:
            raise ValidationError(
                f"{self.reason} requires movement_type={expected_type}"
            )

        if not self.order_ref:
            raise ValidationError("Order movements must reference an order")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")

        if not self.order_ref and self.order_id:
            self.order_ref = self.order_id

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    @property
    def signed_quantity(self) -> int:
        """Stock delta as seen by the product (OUT is negative)."""
        qty = int(self.quantity or 0)
        return -qty if self.movement_type == self.MovementType.OUT else qty

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.reason} | {self.quantity}"
