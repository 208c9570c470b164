# core/responses.py

"""
API RESPONSE HELPERS

- error_response(): canonical error envelope {"error": {"code", "message"}}
- paged_payload(): page/limit slicing for the "my orders" / "my trips" style
  listings, returning the count/total/page/pages envelope clients expect.
"""

from __future__ import annotations

from django.core.paginator import EmptyPage, Paginator
from rest_framework.response import Response

from core.exceptions import FulfillmentError

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def error_response(*, code: str, message: str, http_status: int) -> Response:
    """
    Canonical API error response.
    """
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def fulfillment_error_response(exc: FulfillmentError) -> Response:
    return error_response(
        code=exc.code,
        message=exc.message,
        http_status=exc.http_status,
    )


def _positive_int(raw, default: int) -> int:
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def paged_payload(*, request, queryset, serializer_class, key: str) -> dict:
    """
    Slice a queryset by ?page=&limit= and serialize the current page.
    Out-of-range pages return an empty list rather than an error.
    """
    page_number = _positive_int(request.query_params.get("page"), 1)
    limit = min(_positive_int(request.query_params.get("limit"), DEFAULT_LIMIT), MAX_LIMIT)

    paginator = Paginator(queryset, limit)
    try:
        rows = list(paginator.page(page_number).object_list)
    except EmptyPage:
        rows = []

    data = serializer_class(rows, many=True, context={"request": request}).data
    return {
        "count": len(data),
        "total": paginator.count,
        "page": page_number,
        "pages": paginator.num_pages if paginator.count else 0,
        key: data,
    }
