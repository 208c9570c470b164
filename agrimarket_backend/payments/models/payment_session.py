# payments/models/payment_session.py

import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class PaymentSession(models.Model):
    """
    Hosted checkout session opened for an Order.

    Idempotency rule:
    - session_id is unique (Stripe checkout session id)
    - confirmation looks the session up by this id and is safe to repeat
    """

    PROVIDER_STRIPE = "stripe"
    PROVIDER_CHOICES = [
        (PROVIDER_STRIPE, "Stripe"),
    ]

    STATUS_OPEN = "open"
    STATUS_PAID = "paid"
    STATUS_FAILED = "failed"

    STATUS_CHOICES = [
        (STATUS_OPEN, "Open"),
        (STATUS_PAID, "Paid"),
        (STATUS_FAILED, "Failed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="payment_sessions",
    )

    provider = models.CharField(max_length=32, choices=PROVIDER_CHOICES, default=PROVIDER_STRIPE)

    session_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Provider checkout session id. Unique for idempotent confirmation.",
    )
    checkout_url = models.URLField(max_length=1024, blank=True, default="")

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    currency = models.CharField(max_length=8, default="LKR")

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_OPEN)
    provider_payload = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="paysession_status_idx"),
            models.Index(fields=["order", "created_at"], name="paysession_order_created_idx"),
        ]

    def mark_paid(self, payload=None):
        self.status = self.STATUS_PAID
        self.paid_at = self.paid_at or timezone.now()
        if payload is not None:
            self.provider_payload = payload

    def __str__(self):
        return f"{self.provider}:{self.session_id} | {self.status}"
