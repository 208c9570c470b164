# core/exceptions.py

"""
FULFILLMENT DOMAIN ERRORS

Centralized error taxonomy shared by the order, fleet and trip services.

Every error carries:
- code: stable machine-readable kind (e.g. "INSUFFICIENT_STOCK")
- message: human-readable explanation
- http_status: what views return for it

Services raise these BEFORE any write whenever possible; anything raised
inside a transaction.atomic block rolls the whole mutation back.
"""

from __future__ import annotations


class FulfillmentError(Exception):
    """Base exception for all fulfillment service failures."""

    http_status = 400
    default_code = "FULFILLMENT_ERROR"

    def __init__(self, message: str = "", *, code: str | None = None):
        self.message = message or self.__class__.__doc__ or "Request failed"
        self.code = code or self.default_code
        super().__init__(self.message)


class ValidationFailedError(FulfillmentError):
    """Input is malformed or violates a field-level rule."""

    http_status = 400
    default_code = "VALIDATION_FAILED"


class ForbiddenError(FulfillmentError):
    """Actor does not own the resource or has the wrong role."""

    http_status = 403
    default_code = "FORBIDDEN"


class NotFoundError(FulfillmentError):
    """Referenced order, product, vehicle or trip does not exist."""

    http_status = 404
    default_code = "NOT_FOUND"


class ConflictError(FulfillmentError):
    """Request is well-formed but clashes with current state."""

    http_status = 409
    default_code = "CONFLICT"


class UpstreamUnavailableError(FulfillmentError):
    """A third-party collaborator (payments, FX) failed."""

    http_status = 502
    default_code = "UPSTREAM_UNAVAILABLE"
