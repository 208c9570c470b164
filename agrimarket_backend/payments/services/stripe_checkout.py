# payments/services/stripe_checkout.py
"""
Stripe Checkout adapter.

Two calls only:
- create_checkout_session(order, product) -> {"id", "url"}
- retrieve_checkout_session(session_id)   -> {"id", "payment_status", "metadata", "raw"}

Amounts are sent in the smallest currency unit (cents), as Stripe expects.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from urllib.parse import quote

from django.conf import settings

from core.exceptions import UpstreamUnavailableError, ValidationFailedError

from .http_client import request_json

logger = logging.getLogger(__name__)

STRIPE_API_BASE = "https://api.stripe.com/v1"
PROVIDER = "Stripe"
ERROR_CODE = "PAYMENT_PROVIDER_UNAVAILABLE"


def _stripe_cfg() -> dict:
    payments = getattr(settings, "PAYMENTS", {}) or {}
    cfg = payments.get("STRIPE") if isinstance(payments, dict) else None
    return cfg if isinstance(cfg, dict) else {}


def _get_secret_key() -> str:
    sk = (_stripe_cfg().get("SECRET_KEY") or "").strip()
    if not sk:
        raise UpstreamUnavailableError(
            "Stripe is not configured (settings.PAYMENTS['STRIPE']['SECRET_KEY']).",
            code=ERROR_CODE,
        )
    return sk


def _timeout() -> int:
    return int(_stripe_cfg().get("TIMEOUT") or 25)


def to_minor_units(amount) -> int:
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValidationFailedError("amount must be a valid decimal") from exc
    return int((value * Decimal("100")).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def create_checkout_session(order, product) -> dict:
    """
    Open a one-line-item hosted checkout for `order`.

    The order id travels in `metadata[order_id]` so the success callback can
    find the order again.
    """
    cfg = _stripe_cfg()
    currency = (cfg.get("CURRENCY") or "lkr").lower()

    form = {
        "mode": "payment",
        "payment_method_types[0]": "card",
        "line_items[0][price_data][currency]": currency,
        "line_items[0][price_data][product_data][name]": product.name,
        "line_items[0][price_data][unit_amount]": to_minor_units(product.price),
        "line_items[0][quantity]": int(order.quantity),
        "success_url": cfg.get("SUCCESS_URL") or "",
        "cancel_url": cfg.get("CANCEL_URL") or "",
        "client_reference_id": str(order.id),
        "metadata[order_id]": str(order.id),
    }

    body = request_json(
        "POST",
        f"{STRIPE_API_BASE}/checkout/sessions",
        provider=PROVIDER,
        bearer=_get_secret_key(),
        form=form,
        timeout=_timeout(),
        error_code=ERROR_CODE,
    )

    session_id = str(body.get("id") or "").strip()
    url = str(body.get("url") or "").strip()
    if not session_id or not url:
        raise UpstreamUnavailableError(
            "Stripe did not return a checkout session id/url.", code=ERROR_CODE
        )

    logger.info(
        "Checkout session created",
        extra={"order_id": str(order.id), "session_id": session_id},
    )
    return {"id": session_id, "url": url, "raw": body}


def retrieve_checkout_session(session_id: str) -> dict:
    sid = str(session_id or "").strip()
    if not sid:
        raise ValidationFailedError("session_id is required", code="SESSION_ID_REQUIRED")

    body = request_json(
        "GET",
        f"{STRIPE_API_BASE}/checkout/sessions/{quote(sid, safe='')}",
        provider=PROVIDER,
        bearer=_get_secret_key(),
        timeout=_timeout(),
        error_code=ERROR_CODE,
    )

    metadata = body.get("metadata") or {}
    return {
        "id": str(body.get("id") or sid),
        "payment_status": str(body.get("payment_status") or "").strip().lower(),
        "metadata": metadata if isinstance(metadata, dict) else {},
        "raw": body,
    }
