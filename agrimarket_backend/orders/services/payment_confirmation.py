# orders/services/payment_confirmation.py

"""
PAYMENT CONFIRMATION

Bridges a completed Stripe checkout back onto its Order.

Rules:
- Only a session whose payment_status is "paid" confirms an order.
- The order is found by the session's metadata order_id, falling back to
  the session id stored at placement.
- Idempotent: a second confirmation of a paid order changes nothing.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from core.exceptions import ConflictError, NotFoundError
from orders.models import Order
from orders.services.order_lifecycle import validate_transition
from payments.models import PaymentSession
from payments.services import retrieve_checkout_session

logger = logging.getLogger(__name__)

PAID = "paid"


def _lock_order(*, order_id, session_id) -> Order:
    qs = Order.objects.select_for_update()
    try:
        if order_id:
            return qs.get(id=order_id)
        return qs.get(payment_session_id=session_id)
    except (Order.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundError("No order matches this payment session.", code="ORDER_NOT_FOUND")


def confirm_payment(session_id: str) -> Order:
    # Provider call stays outside the transaction.
    session = retrieve_checkout_session(session_id)

    if session["payment_status"] != PAID:
        raise ConflictError(
            "Payment has not been completed for this session.",
            code="PAYMENT_NOT_COMPLETED",
        )

    order_id = session["metadata"].get("order_id")

    with transaction.atomic():
        order = _lock_order(order_id=order_id, session_id=session["id"])

        payment_session = (
            PaymentSession.objects.select_for_update()
            .filter(session_id=session["id"])
            .first()
        )
        if payment_session and payment_session.status != PaymentSession.STATUS_PAID:
            payment_session.mark_paid(session.get("raw"))
            payment_session.save(update_fields=["status", "paid_at", "provider_payload"])

        if order.payment_status == Order.PAYMENT_PAID:
            logger.info("Payment already confirmed", extra={"order_id": str(order.id)})
            return order

        if order.status != Order.STATUS_CONFIRMED:
            validate_transition(order=order, target_status=Order.STATUS_CONFIRMED)

        order.status = Order.STATUS_CONFIRMED
        order.payment_status = Order.PAYMENT_PAID
        if order.delivery_status == Order.DELIVERY_PENDING:
            order.delivery_status = Order.DELIVERY_REQUESTED
        if not order.payment_session_id:
            order.payment_session_id = session["id"]
        order.save()

    logger.info(
        "Payment confirmed",
        extra={"order_id": str(order.id), "session_id": session["id"]},
    )
    return order
