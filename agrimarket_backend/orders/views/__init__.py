from .orders import MyOrdersView, OrderCreateView, OrderDetailView
from .payment_callback import PaymentCancelView, PaymentSuccessView

__all__ = [
    "OrderCreateView",
    "MyOrdersView",
    "OrderDetailView",
    "PaymentSuccessView",
    "PaymentCancelView",
]
