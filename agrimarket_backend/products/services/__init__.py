from .inventory import (
    InsufficientStockError,
    adjust_order_quantity,
    debit_for_order,
    lock_product,
    release_order_reservation,
    reserved_quantity,
)

__all__ = [
    "InsufficientStockError",
    "adjust_order_quantity",
    "debit_for_order",
    "lock_product",
    "release_order_reservation",
    "reserved_quantity",
]
