from .order_service import (
    cancel_order,
    list_available_for_transport,
    list_distributor_orders,
    place_order,
    update_order,
)
from .payment_confirmation import confirm_payment

__all__ = [
    "cancel_order",
    "confirm_payment",
    "list_available_for_transport",
    "list_distributor_orders",
    "place_order",
    "update_order",
]
