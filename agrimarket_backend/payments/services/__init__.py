from .currency import convert_lkr_to_usd
from .stripe_checkout import create_checkout_session, retrieve_checkout_session

__all__ = [
    "convert_lkr_to_usd",
    "create_checkout_session",
    "retrieve_checkout_session",
]
