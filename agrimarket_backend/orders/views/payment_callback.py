# orders/views/payment_callback.py

"""
Browser landing pages for Stripe Checkout redirects.

GET /api/orders/success/?session_id=...  confirms payment, renders HTML
GET /api/orders/cancel/                  renders HTML, changes nothing

These are public: the buyer's browser arrives here straight from Stripe.
"""

from __future__ import annotations

import logging

from django.shortcuts import render
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.permissions import AllowAny
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from core.exceptions import FulfillmentError
from orders.services import confirm_payment

logger = logging.getLogger(__name__)


class PublicPollThrottle(AnonRateThrottle):
    scope = "public_poll"


class PaymentSuccessView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PublicPollThrottle]

    @extend_schema(
        parameters=[OpenApiParameter("session_id", str, required=True)],
        responses={200: None},
        description="Stripe success redirect: confirms the order and renders a confirmation page",
    )
    def get(self, request):
        session_id = (request.query_params.get("session_id") or "").strip()

        if not session_id:
            logger.warning("Payment success callback without session_id")
            return render(
                request,
                "orders/payment_success.html",
                {"ok": False, "message": "Missing payment session reference."},
                status=400,
            )

        try:
            order = confirm_payment(session_id)
        except FulfillmentError as exc:
            logger.warning(
                "Payment confirmation failed",
                extra={"session_id": session_id, "code": exc.code},
            )
            return render(
                request,
                "orders/payment_success.html",
                {"ok": False, "message": exc.message, "code": exc.code},
                status=exc.http_status,
            )

        return render(
            request,
            "orders/payment_success.html",
            {"ok": True, "order": order},
        )


class PaymentCancelView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(responses={200: None}, description="Stripe cancel redirect")
    def get(self, request):
        return render(request, "orders/payment_cancelled.html", {})
