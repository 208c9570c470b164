"""
ORDER LIFECYCLE DOMAIN RULES

Allowed transitions of Order.status (the commercial track).

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- No side effects
"""

from core.exceptions import ConflictError
from orders.models import Order

# ============================================================
# DOMAIN ERRORS
# ============================================================


class InvalidOrderTransitionError(ConflictError):
    default_code = "INVALID_ORDER_TRANSITION"


# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Order.STATUS_SHIPPED,
    Order.STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    Order.STATUS_PENDING: {
        Order.STATUS_CONFIRMED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_CONFIRMED: {
        Order.STATUS_SHIPPED,
        Order.STATUS_CANCELLED,
    },
}

# Delivery statuses in which no trip holds the order.
UNCLAIMED_DELIVERY_STATES = {
    Order.DELIVERY_PENDING,
    Order.DELIVERY_REQUESTED,
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, order: Order, target_status: str):
    if target_status not in dict(Order.STATUS_CHOICES):
        raise InvalidOrderTransitionError(f"Unknown order status '{target_status}'")

    if not can_transition(from_status=order.status, to_status=target_status):
        raise InvalidOrderTransitionError(
            f"Order {order.id} cannot transition from "
            f"'{order.status}' to '{target_status}'"
        )


def is_cancellable(order: Order) -> bool:
    """No trip holds the order and it has not shipped."""
    return (
        order.transporter_id is None
        and order.delivery_status in UNCLAIMED_DELIVERY_STATES
        and order.status != Order.STATUS_SHIPPED
    )


def is_quantity_editable(order: Order) -> bool:
    return order.status == Order.STATUS_PENDING
