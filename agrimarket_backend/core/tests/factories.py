# core/tests/factories.py

"""
TEST SEEDING HELPERS

Shared by the app test suites:
    python manage.py test -v 2

Every helper writes straight to the ORM (no HTTP, no payment provider),
so tests can seed exactly the state they need.
"""

from __future__ import annotations

import itertools
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone

from fleet.models import Vehicle
from orders.models import Order
from products.models import Product
from users.models import AdminProfile, DistributorProfile, FarmerProfile, TransporterProfile

User = get_user_model()

_seq = itertools.count(1)


def _profile_for(user):
    if user.role == User.ROLE_FARMER:
        return FarmerProfile.objects.create(user=user, farm_size=Decimal("2.50"), nic_number="199012345678")
    if user.role == User.ROLE_DISTRIBUTOR:
        return DistributorProfile.objects.create(
            user=user, business_name="Fresh Wholesale", business_reg_number="PV-0001"
        )
    if user.role == User.ROLE_TRANSPORTER:
        return TransporterProfile.objects.create(
            user=user, company_name="Lanka Haulage", business_reg_number="PV-0002"
        )
    return AdminProfile.objects.create(user=user)


def make_user(role: str, *, email: str | None = None, with_profile: bool = True, **fields):
    n = next(_seq)
    fields.setdefault("full_name", f"{role.title()} {n}")
    fields.setdefault("address", f"{n} Temple Road")
    fields.setdefault("city", "Kandy")
    fields.setdefault("district", "Kandy")
    user = User.objects.create_user(
        email=email or f"{role}{n}@example.com",
        password="pass",
        role=role,
        **fields,
    )
    if with_profile:
        _profile_for(user)
    return user


def make_product(*, farmer=None, quantity: int = 100, price="150.00", **fields):
    fields.setdefault("name", "Carrots")
    fields.setdefault("pickup_address", "12 Farm Lane")
    fields.setdefault("pickup_city", "Nuwara Eliya")
    fields.setdefault("pickup_district", "Nuwara Eliya")
    return Product.objects.create(
        farmer=farmer or make_user(User.ROLE_FARMER),
        quantity=quantity,
        price=Decimal(str(price)),
        **fields,
    )


def make_vehicle(*, transporter, status: str = Vehicle.STATUS_AVAILABLE, **fields):
    n = next(_seq)
    fields.setdefault("category", Vehicle.CATEGORY_LORRY)
    fields.setdefault("vehicle_type", Vehicle.TYPE_COVERED_BODY)
    fields.setdefault("weight_capacity_kg", 3000)
    fields.setdefault("registration_number", f"WP-LB-{n:04d}")
    fields.setdefault("brand", "Isuzu")
    fields.setdefault("vehicle_model", "Elf")
    fields.setdefault("fuel_type", "Diesel")
    return Vehicle.objects.create(transporter=transporter, status=status, **fields)


def make_order(*, distributor=None, product=None, quantity: int = 5, paid: bool = True, **fields):
    """
    Seed an order without touching stock or the payment provider.
    paid=True yields an order waiting for a transporter.
    """
    product = product or make_product()
    order = Order(
        distributor=distributor or make_user(User.ROLE_DISTRIBUTOR),
        product=product,
        quantity=quantity,
        delivery_address=fields.pop("delivery_address", "45 Market Street"),
        delivery_city=fields.pop("delivery_city", "Colombo"),
        **fields,
    )
    order.total_price = order.compute_total_price(product.price)
    if paid:
        order.status = Order.STATUS_CONFIRMED
        order.payment_status = Order.PAYMENT_PAID
        order.delivery_status = Order.DELIVERY_REQUESTED
    order.save()
    return order


def window(start_hours: float, end_hours: float, *, base=None):
    """(start, end) relative to a base time a day from now."""
    base = base or (timezone.now() + timedelta(days=1)).replace(minute=0, second=0, microsecond=0)
    return base + timedelta(hours=start_hours), base + timedelta(hours=end_hours)
