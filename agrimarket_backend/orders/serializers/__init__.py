from .order import (
    DeliveryAddressSerializer,
    OrderPlaceSerializer,
    OrderSerializer,
    OrderUpdateSerializer,
    TransportOrderSerializer,
)

__all__ = [
    "DeliveryAddressSerializer",
    "OrderPlaceSerializer",
    "OrderSerializer",
    "OrderUpdateSerializer",
    "TransportOrderSerializer",
]
