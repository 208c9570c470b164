# payments/services/currency.py
"""
LKR -> USD conversion via ExchangeRate-API (pair endpoint).

Best-effort: convert_lkr_to_usd never raises. Any failure (missing key,
network error, provider refusal, malformed body) is logged and returns None.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings

from core.exceptions import UpstreamUnavailableError

from .http_client import request_json

logger = logging.getLogger(__name__)

EXCHANGE_RATE_API_BASE = "https://v6.exchangerate-api.com/v6"


def _currency_cfg() -> dict:
    cfg = getattr(settings, "CURRENCY", {}) or {}
    return cfg if isinstance(cfg, dict) else {}


def convert_lkr_to_usd(amount) -> Decimal | None:
    cfg = _currency_cfg()
    api_key = (cfg.get("EXCHANGE_RATE_API_KEY") or "").strip()
    if not api_key:
        logger.warning("Currency conversion skipped: EXCHANGE_RATE_API_KEY not configured")
        return None

    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        logger.warning("Currency conversion skipped: invalid amount", extra={"amount": str(amount)})
        return None

    base = cfg.get("BASE") or "LKR"
    target = cfg.get("SECONDARY") or "USD"
    url = f"{EXCHANGE_RATE_API_BASE}/{api_key}/pair/{base}/{target}/{value}"

    try:
        body = request_json(
            "GET",
            url,
            provider="ExchangeRate-API",
            timeout=int(cfg.get("TIMEOUT") or 10),
        )
    except UpstreamUnavailableError as exc:
        logger.warning("Currency conversion failed", extra={"error": exc.message})
        return None

    if body.get("result") != "success":
        logger.warning(
            "Currency conversion rejected",
            extra={"error_type": body.get("error-type")},
        )
        return None

    try:
        converted = Decimal(str(body["conversion_result"]))
    except (KeyError, InvalidOperation, ValueError, TypeError):
        logger.warning("Currency conversion returned no conversion_result")
        return None

    return converted.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
