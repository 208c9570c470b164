# payments/services/http_client.py

"""
Minimal JSON-over-HTTP client for the payment and FX providers.

- stdlib urllib only
- provider errors are parsed from the response body when possible
- every failure surfaces as UpstreamUnavailableError
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from core.exceptions import UpstreamUnavailableError

logger = logging.getLogger(__name__)

USER_AGENT = "AgriMarketFulfillment/1.0 Python-urllib"


def _safe_preview(text: str, limit: int = 500) -> str:
    text = (text or "").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + " ...(truncated)"


def _parse_json_or_text(raw: str) -> dict[str, Any]:
    raw = raw or ""
    try:
        parsed = json.loads(raw)
    except ValueError:
        return {"kind": "text", "raw": raw}
    if isinstance(parsed, dict):
        return {"kind": "json", "json": parsed, "raw": raw}
    return {"kind": "json_non_object", "json": parsed, "raw": raw}


def _error_message(body: dict) -> str:
    err = body.get("error")
    if isinstance(err, dict):
        return str(err.get("message") or err.get("type") or "")
    return str(err or body.get("message") or body.get("error-type") or "")


def request_json(
    method: str,
    url: str,
    *,
    provider: str,
    bearer: str | None = None,
    form: dict | None = None,
    timeout: int = 25,
    error_code: str = "UPSTREAM_UNAVAILABLE",
) -> dict[str, Any]:
    """
    Perform one request and return the decoded JSON object.

    `form` is sent as application/x-www-form-urlencoded (Stripe's API format).
    """
    data = None
    headers = {
        "Accept": "application/json",
        "User-Agent": USER_AGENT,
    }
    if bearer:
        headers["Authorization"] = f"Bearer {bearer}"
    if form is not None:
        data = urlencode(form).encode("utf-8")
        headers["Content-Type"] = "application/x-www-form-urlencoded"

    req = Request(url, data=data, headers=headers, method=method)

    try:
        with urlopen(req, timeout=timeout) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
    except HTTPError as e:
        try:
            raw = e.read().decode("utf-8", errors="replace")
        except OSError:
            raw = ""
        parsed = _parse_json_or_text(raw)
        detail = _error_message(parsed["json"]) if parsed["kind"] == "json" else _safe_preview(raw)
        logger.warning(
            "Upstream HTTP error",
            extra={"provider": provider, "status": e.code, "detail": detail},
        )
        raise UpstreamUnavailableError(
            f"{provider} rejected the request ({e.code}): {detail or 'no detail'}",
            code=error_code,
        ) from e
    except (URLError, TimeoutError, OSError) as e:
        logger.warning("Upstream unreachable", extra={"provider": provider, "error": str(e)})
        raise UpstreamUnavailableError(f"{provider} is unreachable: {e}", code=error_code) from e

    parsed = _parse_json_or_text(raw)
    if parsed["kind"] != "json":
        raise UpstreamUnavailableError(
            f"{provider} returned non-JSON: {_safe_preview(raw)}",
            code=error_code,
        )
    return parsed["json"]
