# products/services/inventory.py

"""
======================================================
PATH: products/services/inventory.py
======================================================
INVENTORY LEDGER SERVICES

Purpose:
- Debit stock when an order is placed.
- Apply the delta when an order's quantity changes.
- Return the outstanding reservation when an order is cancelled.

Rules:
- Quantities are integer units.
- Every stock change writes exactly one StockMovement in the same
  transaction as the Product update.
- Product rows are locked (select_for_update) for check-and-write.
- Stock never goes negative; a short debit raises InsufficientStockError
  before anything is written.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Case, F, IntegerField, Sum, Value, When

from core.exceptions import ConflictError, NotFoundError, ValidationFailedError
from products.models import Product, StockMovement

logger = logging.getLogger(__name__)


# ============================================================
# DOMAIN ERRORS
# ============================================================

class InsufficientStockError(ConflictError):
    default_code = "INSUFFICIENT_STOCK"

    def __init__(self, *, product: Product, requested: int):
        self.product_id = product.id
        self.available = int(product.quantity)
        self.requested = int(requested)
        super().__init__(
            f"Insufficient stock for {product.name}: "
            f"available {self.available}, requested {self.requested}."
        )


# ============================================================
# HELPERS
# ============================================================

def _to_int_qty(value, *, field_name="quantity") -> int:
    """
    Quantity normalizer.
    Quantities are whole units; bools and fractional values are rejected.
    """
    if value is None or value == "":
        raise ValidationFailedError(f"{field_name} is required")
    if isinstance(value, bool):
        raise ValidationFailedError(f"{field_name} must be a whole number")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ValidationFailedError(f"{field_name} must be a whole number")


def require_positive_qty(value, *, field_name="quantity") -> int:
    qty = _to_int_qty(value, field_name=field_name)
    if qty < 1:
        raise ValidationFailedError(f"{field_name} must be at least 1")
    return qty


def lock_product(product_id) -> Product:
    """Fetch a product row for update. Must run inside a transaction."""
    try:
        return Product.objects.select_for_update().get(id=product_id)
    except (Product.DoesNotExist, DjangoValidationError, ValueError, TypeError):
        raise NotFoundError("Product not found.", code="PRODUCT_NOT_FOUND")


def _record(*, product, order, reason, quantity, user) -> StockMovement:
    return StockMovement.objects.create(
        product=product,
        order=order,
        order_ref=order.id,
        movement_type=StockMovement.REASON_TO_MOVEMENT[reason],
        reason=reason,
        quantity=quantity,
        performed_by=user,
    )


def _debit(*, product: Product, order, quantity: int, reason, user) -> None:
    if product.quantity < quantity:
        raise InsufficientStockError(product=product, requested=quantity)

    product.quantity = F("quantity") - quantity
    product.save(update_fields=["quantity", "updated_at"])
    product.refresh_from_db(fields=["quantity"])

    _record(product=product, order=order, reason=reason, quantity=quantity, user=user)


def _credit(*, product: Product, order, quantity: int, reason, user) -> None:
    product.quantity = F("quantity") + quantity
    product.save(update_fields=["quantity", "updated_at"])
    product.refresh_from_db(fields=["quantity"])

    _record(product=product, order=order, reason=reason, quantity=quantity, user=user)


# ============================================================
# PUBLIC API
# ============================================================

def reserved_quantity(order_id) -> int:
    """
    Units an order still holds according to the ledger:
    sum(OUT) - sum(IN) over its movements.
    """
    total = (
        StockMovement.objects.filter(order_ref=order_id)
        .aggregate(
            net=Sum(
                Case(
                    When(movement_type=StockMovement.MovementType.OUT, then=F("quantity")),
                    default=Value(0) - F("quantity"),
                    output_field=IntegerField(),
                )
            )
        )
        .get("net")
    )
    return int(total or 0)


@transaction.atomic
def debit_for_order(*, product: Product, order, quantity, user=None) -> Product:
    """
    Placement debit. `product` must already be locked by the caller.
    """
    qty = require_positive_qty(quantity)
    _debit(
        product=product,
        order=order,
        quantity=qty,
        reason=StockMovement.Reason.ORDER_PLACED,
        user=user,
    )
    logger.info(
        "Stock debited for order",
        extra={"product_id": str(product.id), "order_id": str(order.id), "quantity": qty},
    )
    return product


@transaction.atomic
def adjust_order_quantity(*, order, new_quantity, user=None) -> int:
    """
    Move stock by the difference between the order's current and new quantity.

    Increase: requires product.quantity >= delta, debits delta.
    Decrease: credits delta (always allowed).
    Returns the signed delta applied to the order (positive = increase).
    """
    new_qty = require_positive_qty(new_quantity)
    old_qty = int(order.quantity)
    delta = new_qty - old_qty
    if delta == 0:
        return 0

    product = lock_product(order.product_id)

    if delta > 0:
        _debit(
            product=product,
            order=order,
            quantity=delta,
            reason=StockMovement.Reason.ORDER_INCREASED,
            user=user,
        )
    else:
        _credit(
            product=product,
            order=order,
            quantity=-delta,
            reason=StockMovement.Reason.ORDER_DECREASED,
            user=user,
        )

    logger.info(
        "Order quantity adjusted",
        extra={"order_id": str(order.id), "old": old_qty, "new": new_qty},
    )
    return delta


@transaction.atomic
def release_order_reservation(*, order, user=None) -> int:
    """
    Credit back whatever the order still holds (ledger net).

    Idempotent: a second call finds a zero reservation and writes nothing.
    Returns the number of units restored.
    """
    product = lock_product(order.product_id)
    outstanding = reserved_quantity(order.id)
    if outstanding <= 0:
        return 0

    _credit(
        product=product,
        order=order,
        quantity=outstanding,
        reason=StockMovement.Reason.ORDER_CANCELLED,
        user=user,
    )
    logger.info(
        "Order reservation released",
        extra={"order_id": str(order.id), "quantity": outstanding},
    )
    return outstanding
