from decimal import Decimal
from unittest import mock

from django.test import TestCase

from core.tests.factories import make_product, make_user, make_vehicle, window
from fleet.models import Vehicle
from orders.models import Order
from orders.services import cancel_order, confirm_payment, place_order, update_order
from products.models import StockMovement
from products.services.inventory import reserved_quantity
from trips.models import Trip
from trips.services import cancel_trip, create_trip
from users.models import User

CHECKOUT = "orders.services.order_service.create_checkout_session"
FX = "orders.services.order_service.convert_lkr_to_usd"
RETRIEVE = "orders.services.payment_confirmation.retrieve_checkout_session"


def _fake_session(order, product):
    return {
        "id": f"cs_test_{order.id.hex[:12]}",
        "url": "https://checkout.stripe.com/c/pay/cs_test",
        "raw": {"object": "checkout.session"},
    }


class FulfillmentFlowTests(TestCase):
    """
    GUARANTEES:
    - place, resize, pay, haul, cancel and delete leave stock where it started
    - a cancelled trip hands the order and the vehicle back
    """

    def setUp(self):
        self.distributor = make_user(User.ROLE_DISTRIBUTOR)
        self.transporter = make_user(User.ROLE_TRANSPORTER)
        self.product = make_product(quantity=100, price="150.00")
        self.vehicle = make_vehicle(transporter=self.transporter)

        checkout = mock.patch(CHECKOUT, side_effect=_fake_session)
        fx = mock.patch(FX, return_value=None)
        checkout.start()
        fx.start()
        self.addCleanup(checkout.stop)
        self.addCleanup(fx.stop)

    def _stock(self):
        self.product.refresh_from_db()
        return self.product.quantity

    def _pay(self, order):
        session = {
            "id": order.payment_session_id,
            "payment_status": "paid",
            "metadata": {"order_id": str(order.id)},
        }
        with mock.patch(RETRIEVE, return_value=session):
            return confirm_payment(order.payment_session_id)

    def test_order_trip_cancel_and_delete_restores_stock(self):
        order, _ = place_order(
            distributor=self.distributor,
            product_id=self.product.id,
            quantity=30,
            delivery_address={"address": "45 Market Street", "city": "Colombo"},
        )
        self.assertEqual(self._stock(), 70)

        order = update_order(order_id=order.id, actor=self.distributor, quantity=50)
        self.assertEqual(self._stock(), 50)
        self.assertEqual(order.total_price, Decimal("7500.00"))

        order = self._pay(order)
        self.assertEqual(order.status, Order.STATUS_CONFIRMED)
        self.assertEqual(order.delivery_status, Order.DELIVERY_REQUESTED)

        start, end = window(10, 14)
        trip = create_trip(
            transporter=self.transporter,
            order_id=order.id,
            vehicle_id=self.vehicle.id,
            scheduled_pickup=start,
            estimated_delivery=end,
            base_fare="3000.00",
        )
        self.vehicle.refresh_from_db()
        self.assertEqual(self.vehicle.status, Vehicle.STATUS_ON_DELIVERY)
        order.refresh_from_db()
        self.assertEqual(order.transporter_id, self.transporter.id)
        self.assertEqual(order.delivery_status, Order.DELIVERY_IN_TRANSIT)

        trip = cancel_trip(trip_id=trip.id, actor=self.transporter)
        self.assertEqual(trip.trip_status, Trip.STATUS_CANCELLED)
        self.vehicle.refresh_from_db()
        self.assertEqual(self.vehicle.status, Vehicle.STATUS_AVAILABLE)
        order.refresh_from_db()
        self.assertIsNone(order.transporter_id)
        self.assertEqual(order.delivery_status, Order.DELIVERY_REQUESTED)

        cancel_order(order_id=order.id, actor=self.distributor)

        self.assertEqual(self._stock(), 100)
        self.assertFalse(Order.objects.filter(id=order.id).exists())
        self.assertEqual(reserved_quantity(order.id), 0)
        self.assertEqual(
            sum(m.signed_quantity for m in StockMovement.objects.filter(product=self.product)),
            0,
        )

        trip.refresh_from_db()
        self.assertIsNone(trip.order_id)
