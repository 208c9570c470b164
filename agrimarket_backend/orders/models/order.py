# orders/models/order.py

import uuid
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Order(models.Model):
    """
    A distributor's purchase of one product.

    Two independent state tracks:
    - status           (commercial: Pending -> Confirmed -> Shipped, or Cancelled)
    - delivery_status  (logistics: Pending -> Requested -> In Transit -> Delivered)

    Key rules:
    - Placement debits product stock; the reservation is tracked in the
      StockMovement ledger.
    - Payment confirmation makes the order visible to transporters
      (delivery_status=Requested).
    - A transporter claims the order by creating a Trip; `transporter` is
      set while a trip holds it.
    """

    STATUS_PENDING = "Pending"
    STATUS_CONFIRMED = "Confirmed"
    STATUS_SHIPPED = "Shipped"
    STATUS_CANCELLED = "Cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_SHIPPED, "Shipped"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    DELIVERY_PENDING = "Pending"
    DELIVERY_REQUESTED = "Requested"
    DELIVERY_IN_TRANSIT = "In Transit"
    DELIVERY_DELIVERED = "Delivered"

    DELIVERY_STATUS_CHOICES = [
        (DELIVERY_PENDING, "Pending"),
        (DELIVERY_REQUESTED, "Requested"),
        (DELIVERY_IN_TRANSIT, "In Transit"),
        (DELIVERY_DELIVERED, "Delivered"),
    ]

    PAYMENT_UNPAID = "unpaid"
    PAYMENT_PAID = "paid"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_UNPAID, "Unpaid"),
        (PAYMENT_PAID, "Paid"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    distributor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="orders",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="orders",
    )

    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    # Money fields (server authoritative)
    total_price = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_price_usd = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Best-effort conversion; 0 when the rate service is unavailable.",
    )

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    delivery_status = models.CharField(
        max_length=16,
        choices=DELIVERY_STATUS_CHOICES,
        default=DELIVERY_PENDING,
    )

    transporter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="claimed_orders",
    )

    payment_session_id = models.CharField(max_length=255, blank=True, default="", db_index=True)
    payment_status = models.CharField(
        max_length=8,
        choices=PAYMENT_STATUS_CHOICES,
        default=PAYMENT_UNPAID,
    )

    # Delivery address (trip dropoff)
    delivery_address = models.CharField(max_length=255)
    delivery_city = models.CharField(max_length=100, blank=True, default="")
    delivery_lat = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    delivery_lng = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["distributor", "created_at"], name="order_distributor_created_idx"),
            models.Index(
                fields=["status", "delivery_status", "created_at"],
                name="order_transport_queue_idx",
            ),
        ]

    def __str__(self):
        return f"Order {self.id} | {self.status}/{self.delivery_status}"

    def compute_total_price(self, unit_price=None) -> Decimal:
        price = Decimal(str(unit_price if unit_price is not None else self.product.price))
        total = price * Decimal(int(self.quantity or 0))
        return total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    @property
    def is_claimed(self) -> bool:
        return self.transporter_id is not None

    @property
    def is_open_for_transport(self) -> bool:
        return (
            self.status == self.STATUS_CONFIRMED
            and self.delivery_status == self.DELIVERY_REQUESTED
            and self.transporter_id is None
        )

    @property
    def dropoff_location(self) -> dict:
        return {
            "address": self.delivery_address,
            "city": self.delivery_city,
            "lat": self.delivery_lat,
            "lng": self.delivery_lng,
        }
