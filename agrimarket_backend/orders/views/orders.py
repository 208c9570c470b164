# orders/views/orders.py

import logging

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import FulfillmentError
from core.responses import fulfillment_error_response, paged_payload
from orders.serializers import OrderPlaceSerializer, OrderSerializer, OrderUpdateSerializer
from orders.services import cancel_order, list_distributor_orders, place_order, update_order
from permissions.roles import IsDistributor

logger = logging.getLogger(__name__)


class OrderCreateView(APIView):
    """
    POST /api/orders/

    Places an order, debits stock and returns a hosted checkout URL.
    """

    permission_classes = [IsAuthenticated, IsDistributor]
    serializer_class = OrderPlaceSerializer

    @extend_schema(
        request=OrderPlaceSerializer,
        responses={201: dict},
        description="Place an order for a product and open a payment session",
    )
    def post(self, request):
        serializer = OrderPlaceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            order, checkout_url = place_order(
                distributor=request.user,
                product_id=data["product_id"],
                quantity=data["quantity"],
                delivery_address=dict(data["delivery_address"]),
            )
        except FulfillmentError as exc:
            return fulfillment_error_response(exc)

        return Response(
            {"order": OrderSerializer(order).data, "checkout_url": checkout_url},
            status=status.HTTP_201_CREATED,
        )


class MyOrdersView(APIView):
    """GET /api/orders/my-orders/?page=&limit="""

    permission_classes = [IsAuthenticated, IsDistributor]
    serializer_class = OrderSerializer

    @extend_schema(
        parameters=[
            OpenApiParameter("page", int, required=False),
            OpenApiParameter("limit", int, required=False),
        ],
        responses={200: dict},
        description="Orders placed by the current distributor, newest first",
    )
    def get(self, request):
        payload = paged_payload(
            request=request,
            queryset=list_distributor_orders(request.user),
            serializer_class=OrderSerializer,
            key="orders",
        )
        return Response(payload)


class OrderDetailView(APIView):
    """
    PUT    /api/orders/<id>/  quantity and/or status
    DELETE /api/orders/<id>/  cancel and delete
    """

    permission_classes = [IsAuthenticated, IsDistributor]
    serializer_class = OrderUpdateSerializer

    @extend_schema(
        request=OrderUpdateSerializer,
        responses={200: dict},
        description="Change quantity (while Pending) and/or status of an own order",
    )
    def put(self, request, order_id):
        serializer = OrderUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            order = update_order(
                order_id=order_id,
                actor=request.user,
                quantity=data.get("quantity"),
                status=data.get("status"),
            )
        except FulfillmentError as exc:
            return fulfillment_error_response(exc)

        return Response({"order": OrderSerializer(order).data})

    @extend_schema(
        request=None,
        responses={200: dict},
        description="Cancel an own order that no trip holds; stock is restored",
    )
    def delete(self, request, order_id):
        try:
            restored = cancel_order(order_id=order_id, actor=request.user)
        except FulfillmentError as exc:
            return fulfillment_error_response(exc)

        return Response(
            {"message": "Order cancelled", "order_id": str(order_id), "restored_quantity": restored},
            status=status.HTTP_200_OK,
        )
