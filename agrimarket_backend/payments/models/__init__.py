from .payment_session import PaymentSession

__all__ = [
    "PaymentSession",
]
