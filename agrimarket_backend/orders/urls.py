# orders/urls.py

from django.urls import path

from .views import (
    MyOrdersView,
    OrderCreateView,
    OrderDetailView,
    PaymentCancelView,
    PaymentSuccessView,
)

app_name = "orders"

urlpatterns = [
    path("", OrderCreateView.as_view(), name="order-create"),
    path("my-orders/", MyOrdersView.as_view(), name="my-orders"),
    path("success/", PaymentSuccessView.as_view(), name="payment-success"),
    path("cancel/", PaymentCancelView.as_view(), name="payment-cancel"),
    path("<uuid:order_id>/", OrderDetailView.as_view(), name="order-detail"),
]
