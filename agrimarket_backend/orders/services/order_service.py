# orders/services/order_service.py

"""
ORDER SERVICE (APPLICATION SERVICE)

Purpose:
- Place an order: debit stock, price it, open a checkout session.
- Edit quantity/status of an own order with stock kept in step.
- Cancel (delete) an own order and return its reservation to stock.
- Read-side queues: a distributor's own orders, and orders awaiting transport.

Hard rules:
- Quantities are integer units.
- Money values are computed server-side.
- Each mutation is one transaction: order row + stock + ledger + payment
  session succeed together or roll back together.
- Ownership and state checks run before anything is written.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationFailedError
from orders.models import Order
from orders.services.order_lifecycle import (
    is_cancellable,
    is_quantity_editable,
    validate_transition,
)
from payments.models import PaymentSession
from payments.services import convert_lkr_to_usd, create_checkout_session
from products.models import Product
from products.services.inventory import (
    InsufficientStockError,
    adjust_order_quantity,
    debit_for_order,
    lock_product,
    release_order_reservation,
    require_positive_qty,
)
from users.models import User

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def _usd_or_zero(amount: Decimal) -> Decimal:
    converted = convert_lkr_to_usd(amount)
    return converted if converted is not None else ZERO


def _require_distributor(user) -> None:
    if getattr(user, "role", None) != User.ROLE_DISTRIBUTOR:
        raise ForbiddenError("Only distributors can manage orders.", code="DISTRIBUTOR_ROLE_REQUIRED")


def _normalize_address(delivery_address) -> dict:
    if not isinstance(delivery_address, dict):
        raise ValidationFailedError(
            "delivery_address is required", code="DELIVERY_ADDRESS_REQUIRED"
        )

    line = str(delivery_address.get("address") or "").strip()
    if not line:
        raise ValidationFailedError(
            "delivery_address.address is required", code="DELIVERY_ADDRESS_REQUIRED"
        )

    return {
        "delivery_address": line,
        "delivery_city": str(delivery_address.get("city") or "").strip(),
        "delivery_lat": delivery_address.get("lat"),
        "delivery_lng": delivery_address.get("lng"),
    }


def get_owned_order_for_update(*, order_id, actor) -> Order:
    """Lock an order row and check that `actor` placed it."""
    try:
        order = (
            Order.objects.select_for_update()
            .select_related("product")
            .get(id=order_id)
        )
    except (Order.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundError("Order not found.", code="ORDER_NOT_FOUND")

    if order.distributor_id != getattr(actor, "id", None):
        raise ForbiddenError("You can only modify your own orders.", code="NOT_ORDER_OWNER")

    return order


# ============================================================
# PLACE
# ============================================================

def _quote(read_price, qty: int) -> tuple[Decimal | None, Decimal]:
    """
    Unlocked price read plus currency lookup, run before any row lock.
    Returns (quoted_total, quoted_usd).
    """
    try:
        price = read_price()
    except (DjangoValidationError, ValueError, TypeError):
        return None, ZERO
    if price is None:
        return None, ZERO
    total = Order(quantity=qty).compute_total_price(price)
    return total, _usd_or_zero(total)


def _usd_for(total: Decimal, *, quoted_total, quoted_usd) -> Decimal:
    if total == quoted_total:
        return quoted_usd
    # price changed since the quote
    return _usd_or_zero(total)


def place_order(*, distributor, product_id, quantity, delivery_address) -> tuple[Order, str]:
    """
    Returns (order, checkout_url).

    The currency lookup runs before the product row is locked. Only the
    checkout session call happens inside the transaction.

    A payment provider failure raises UpstreamUnavailableError and the
    transaction rolls back: no order row, no stock debit.
    """
    _require_distributor(distributor)
    qty = require_positive_qty(quantity)
    address = _normalize_address(delivery_address)

    quoted_total, quoted_usd = _quote(
        lambda: Product.objects.filter(id=product_id).values_list("price", flat=True).first(), qty
    )

    with transaction.atomic():
        return _place_locked(
            distributor=distributor,
            product_id=product_id,
            qty=qty,
            address=address,
            quoted_total=quoted_total,
            quoted_usd=quoted_usd,
        )


def _place_locked(*, distributor, product_id, qty: int, address: dict, quoted_total, quoted_usd) -> tuple[Order, str]:
    product = lock_product(product_id)
    if not product.is_available:
        raise ConflictError(f"{product.name} is not available for ordering.", code="PRODUCT_UNAVAILABLE")
    if product.quantity < qty:
        raise InsufficientStockError(product=product, requested=qty)

    order = Order(
        distributor=distributor,
        product=product,
        quantity=qty,
        status=Order.STATUS_PENDING,
        delivery_status=Order.DELIVERY_PENDING,
        payment_status=Order.PAYMENT_UNPAID,
        **address,
    )
    order.total_price = order.compute_total_price(product.price)
    order.total_price_usd = _usd_for(order.total_price, quoted_total=quoted_total, quoted_usd=quoted_usd)
    order.save()

    debit_for_order(product=product, order=order, quantity=qty, user=distributor)

    session = create_checkout_session(order, product)
    PaymentSession.objects.create(
        order=order,
        session_id=session["id"],
        checkout_url=session["url"],
        amount=order.total_price,
        currency="LKR",
        provider_payload=session.get("raw") or {},
    )

    order.payment_session_id = session["id"]
    order.save(update_fields=["payment_session_id", "updated_at"])

    logger.info(
        "Order placed",
        extra={
            "order_id": str(order.id),
            "product_id": str(product.id),
            "quantity": qty,
            "session_id": session["id"],
        },
    )
    return order, session["url"]


# ============================================================
# UPDATE
# ============================================================

def update_order(*, order_id, actor, quantity=None, status=None) -> Order:
    quoted_total, quoted_usd = None, ZERO
    try:
        wanted = int(quantity) if quantity is not None else None
    except (TypeError, ValueError):
        wanted = None
    if wanted and wanted > 0:
        # quote only edits that can go through; validation happens under lock
        quoted_total, quoted_usd = _quote(
            lambda: Order.objects.filter(
                id=order_id, distributor_id=getattr(actor, "id", None), status=Order.STATUS_PENDING
            )
            .exclude(quantity=wanted)
            .values_list("product__price", flat=True)
            .first(),
            wanted,
        )

    with transaction.atomic():
        return _update_locked(
            order_id=order_id,
            actor=actor,
            quantity=quantity,
            status=status,
            quoted_total=quoted_total,
            quoted_usd=quoted_usd,
        )


def _update_locked(*, order_id, actor, quantity, status, quoted_total, quoted_usd) -> Order:
    order = get_owned_order_for_update(order_id=order_id, actor=actor)

    new_qty = None
    if quantity is not None:
        new_qty = require_positive_qty(quantity)
        if new_qty != order.quantity and not is_quantity_editable(order):
            raise ConflictError(
                f"Quantity can only change while the order is {Order.STATUS_PENDING}.",
                code="ORDER_LOCKED",
            )
        if new_qty == order.quantity:
            new_qty = None

    target_status = None
    if status is not None and status != order.status:
        validate_transition(order=order, target_status=status)
        if status == Order.STATUS_CANCELLED and not is_cancellable(order):
            raise ConflictError(
                "Order is held by a trip and cannot be cancelled.",
                code="ORDER_NOT_CANCELLABLE",
            )
        target_status = status

    if new_qty is not None:
        adjust_order_quantity(order=order, new_quantity=new_qty, user=actor)
        order.quantity = new_qty
        order.total_price = order.compute_total_price()
        order.total_price_usd = _usd_for(order.total_price, quoted_total=quoted_total, quoted_usd=quoted_usd)

    if target_status is not None:
        if target_status == Order.STATUS_CANCELLED:
            release_order_reservation(order=order, user=actor)
        order.status = target_status

    order.save()

    logger.info(
        "Order updated",
        extra={"order_id": str(order.id), "quantity": order.quantity, "status": order.status},
    )
    return order


# ============================================================
# CANCEL (DELETE)
# ============================================================

@transaction.atomic
def cancel_order(*, order_id, actor) -> int:
    """
    Delete an own order that no trip holds.
    Returns the number of units credited back to the product.
    """
    order = get_owned_order_for_update(order_id=order_id, actor=actor)

    if not is_cancellable(order):
        raise ConflictError(
            "Order is held by a trip and cannot be cancelled.",
            code="ORDER_NOT_CANCELLABLE",
        )

    restored = release_order_reservation(order=order, user=actor)
    order_pk = order.id
    order.delete()

    logger.info("Order cancelled", extra={"order_id": str(order_pk), "restored": restored})
    return restored


# ============================================================
# QUEUES
# ============================================================

def list_distributor_orders(distributor):
    return (
        Order.objects.filter(distributor=distributor)
        .select_related("product", "transporter")
        .order_by("-created_at")
    )


def list_available_for_transport(*, district: str | None = None):
    """
    Paid orders no transporter holds yet, oldest first.
    `district` matches the product's pickup district.
    """
    qs = (
        Order.objects.filter(
            status=Order.STATUS_CONFIRMED,
            delivery_status=Order.DELIVERY_REQUESTED,
            transporter__isnull=True,
        )
        .select_related("product", "product__farmer", "distributor")
        .order_by("created_at", "id")
    )

    district = (district or "").strip()
    if district:
        qs = qs.filter(product__pickup_district__iexact=district)

    return qs
