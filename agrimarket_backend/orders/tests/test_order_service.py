from decimal import Decimal
from unittest import mock

from django.test import TestCase

from core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UpstreamUnavailableError,
    ValidationFailedError,
)
from core.tests.factories import make_product, make_user
from orders.models import Order
from orders.services import cancel_order, list_available_for_transport, place_order, update_order
from orders.services.order_lifecycle import InvalidOrderTransitionError
from payments.models import PaymentSession
from products.models import Product, StockMovement
from products.services.inventory import InsufficientStockError, lock_product, reserved_quantity
from users.models import User

CHECKOUT = "orders.services.order_service.create_checkout_session"
FX = "orders.services.order_service.convert_lkr_to_usd"
LOCK = "orders.services.order_service.lock_product"

ADDRESS = {"address": "45 Market Street", "city": "Colombo"}


def _fake_session(order, product):
    return {
        "id": f"cs_test_{order.id.hex[:12]}",
        "url": "https://checkout.stripe.com/c/pay/cs_test",
        "raw": {"object": "checkout.session"},
    }


class OrderServiceTestBase(TestCase):
    def setUp(self):
        self.distributor = make_user(User.ROLE_DISTRIBUTOR)
        self.product = make_product(quantity=50, price="120.00")

        checkout = mock.patch(CHECKOUT, side_effect=_fake_session)
        fx = mock.patch(FX, return_value=Decimal("0.40"))
        self.checkout_mock = checkout.start()
        self.fx_mock = fx.start()
        self.addCleanup(checkout.stop)
        self.addCleanup(fx.stop)

    def _place(self, quantity=10, **overrides):
        kwargs = {
            "distributor": self.distributor,
            "product_id": self.product.id,
            "quantity": quantity,
            "delivery_address": ADDRESS,
        }
        kwargs.update(overrides)
        return place_order(**kwargs)

    def _stock(self):
        self.product.refresh_from_db()
        return self.product.quantity


class PlaceOrderTests(OrderServiceTestBase):
    """
    GUARANTEES:
    - stock, ledger, order row and payment session move together
    - a failure anywhere leaves stock untouched
    """

    def test_place_order_debits_stock_and_opens_session(self):
        order, url = self._place(quantity=10)

        self.assertEqual(url, "https://checkout.stripe.com/c/pay/cs_test")
        self.assertEqual(self._stock(), 40)
        self.assertEqual(order.total_price, Decimal("1200.00"))
        self.assertEqual(order.total_price_usd, Decimal("0.40"))
        self.assertEqual(order.status, Order.STATUS_PENDING)
        self.assertEqual(order.delivery_status, Order.DELIVERY_PENDING)
        self.assertEqual(order.payment_status, Order.PAYMENT_UNPAID)

        session = PaymentSession.objects.get(order=order)
        self.assertEqual(order.payment_session_id, session.session_id)
        self.assertEqual(session.amount, Decimal("1200.00"))

        movement = StockMovement.objects.get(order_ref=order.id)
        self.assertEqual(movement.reason, StockMovement.Reason.ORDER_PLACED)
        self.assertEqual(movement.quantity, 10)
        self.assertEqual(reserved_quantity(order.id), 10)

    def test_usd_total_falls_back_to_zero(self):
        self.fx_mock.return_value = None
        order, _ = self._place()
        self.assertEqual(order.total_price_usd, Decimal("0.00"))

    def test_currency_lookup_runs_before_product_lock(self):
        calls = []

        def fx(amount):
            calls.append(("fx", amount))
            return Decimal("4.00")

        def lock(product_id):
            calls.append(("lock", product_id))
            return lock_product(product_id)

        self.fx_mock.side_effect = fx
        with mock.patch(LOCK, side_effect=lock):
            order, _ = self._place(quantity=10)

        self.assertEqual([name for name, _ in calls], ["fx", "lock"])
        self.assertEqual(calls[0][1], Decimal("1200.00"))
        self.assertEqual(order.total_price_usd, Decimal("4.00"))

    def test_price_change_after_quote_is_reconverted(self):
        def fx(amount):
            # the price moves while the first lookup is in flight
            if self.fx_mock.call_count == 1:
                Product.objects.filter(id=self.product.id).update(price=Decimal("130.00"))
            return (amount / 100).quantize(Decimal("0.01"))

        self.fx_mock.side_effect = fx
        order, _ = self._place(quantity=10)

        self.assertEqual(order.total_price, Decimal("1300.00"))
        self.assertEqual(order.total_price_usd, Decimal("13.00"))
        self.assertEqual(self.fx_mock.call_count, 2)

    def test_insufficient_stock_writes_nothing(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            self._place(quantity=51)

        self.assertEqual(ctx.exception.code, "INSUFFICIENT_STOCK")
        self.assertEqual(ctx.exception.available, 50)
        self.assertEqual(self._stock(), 50)
        self.assertFalse(Order.objects.exists())
        self.checkout_mock.assert_not_called()

    def test_exact_stock_is_allowed(self):
        self._place(quantity=50)
        self.assertEqual(self._stock(), 0)

    def test_payment_failure_rolls_back(self):
        self.checkout_mock.side_effect = UpstreamUnavailableError(
            "Stripe is unreachable", code="PAYMENT_PROVIDER_UNAVAILABLE"
        )
        with self.assertRaises(UpstreamUnavailableError):
            self._place(quantity=5)

        self.assertEqual(self._stock(), 50)
        self.assertFalse(Order.objects.exists())
        self.assertFalse(StockMovement.objects.exists())

    def test_unknown_product(self):
        with self.assertRaises(NotFoundError) as ctx:
            self._place(product_id="00000000-0000-0000-0000-000000000000")
        self.assertEqual(ctx.exception.code, "PRODUCT_NOT_FOUND")

    def test_unavailable_product(self):
        self.product.is_available = False
        self.product.save()
        with self.assertRaises(ConflictError) as ctx:
            self._place()
        self.assertEqual(ctx.exception.code, "PRODUCT_UNAVAILABLE")

    def test_quantity_must_be_positive_integer(self):
        for bad in (0, -3, "2.5", True):
            with self.assertRaises(ValidationFailedError):
                self._place(quantity=bad)

    def test_address_required(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            self._place(delivery_address={"address": "  "})
        self.assertEqual(ctx.exception.code, "DELIVERY_ADDRESS_REQUIRED")

    def test_only_distributors_place_orders(self):
        with self.assertRaises(ForbiddenError):
            self._place(distributor=make_user(User.ROLE_FARMER))


class UpdateOrderTests(OrderServiceTestBase):
    def setUp(self):
        super().setUp()
        self.order, _ = self._place(quantity=10)

    def test_increase_and_decrease_quantity(self):
        order = update_order(order_id=self.order.id, actor=self.distributor, quantity=15)
        self.assertEqual(self._stock(), 35)
        self.assertEqual(order.total_price, Decimal("1800.00"))

        order = update_order(order_id=self.order.id, actor=self.distributor, quantity=4)
        self.assertEqual(self._stock(), 46)
        self.assertEqual(reserved_quantity(order.id), 4)

    def test_increase_beyond_stock_is_rejected(self):
        with self.assertRaises(InsufficientStockError):
            update_order(order_id=self.order.id, actor=self.distributor, quantity=61)
        self.assertEqual(self._stock(), 40)

    def test_quantity_locked_once_confirmed(self):
        Order.objects.filter(id=self.order.id).update(status=Order.STATUS_CONFIRMED)
        with self.assertRaises(ConflictError) as ctx:
            update_order(order_id=self.order.id, actor=self.distributor, quantity=12)
        self.assertEqual(ctx.exception.code, "ORDER_LOCKED")

    def test_cancel_via_status_restores_stock(self):
        order = update_order(order_id=self.order.id, actor=self.distributor, status=Order.STATUS_CANCELLED)
        self.assertEqual(order.status, Order.STATUS_CANCELLED)
        self.assertEqual(self._stock(), 50)
        self.assertEqual(reserved_quantity(order.id), 0)

    def test_cancelled_order_is_terminal(self):
        update_order(order_id=self.order.id, actor=self.distributor, status=Order.STATUS_CANCELLED)
        with self.assertRaises(InvalidOrderTransitionError):
            update_order(order_id=self.order.id, actor=self.distributor, status=Order.STATUS_CONFIRMED)

    def test_only_owner_updates(self):
        with self.assertRaises(ForbiddenError) as ctx:
            update_order(order_id=self.order.id, actor=make_user(User.ROLE_DISTRIBUTOR), quantity=2)
        self.assertEqual(ctx.exception.code, "NOT_ORDER_OWNER")

    def test_quantity_edit_converts_new_total_once(self):
        self.fx_mock.reset_mock()
        self.fx_mock.return_value = Decimal("6.00")
        order = update_order(order_id=self.order.id, actor=self.distributor, quantity=15)

        self.fx_mock.assert_called_once_with(Decimal("1800.00"))
        self.assertEqual(order.total_price_usd, Decimal("6.00"))

    def test_rejected_edits_skip_currency_lookup(self):
        self.fx_mock.reset_mock()
        with self.assertRaises(ForbiddenError):
            update_order(order_id=self.order.id, actor=make_user(User.ROLE_DISTRIBUTOR), quantity=2)
        update_order(order_id=self.order.id, actor=self.distributor, quantity=10)
        self.fx_mock.assert_not_called()


class CancelOrderTests(OrderServiceTestBase):
    def setUp(self):
        super().setUp()
        self.order, _ = self._place(quantity=10)

    def test_cancel_deletes_and_restores(self):
        restored = cancel_order(order_id=self.order.id, actor=self.distributor)
        self.assertEqual(restored, 10)
        self.assertEqual(self._stock(), 50)
        self.assertFalse(Order.objects.filter(id=self.order.id).exists())

        # ledger survives the order
        reasons = set(StockMovement.objects.filter(order_ref=self.order.id).values_list("reason", flat=True))
        self.assertEqual(reasons, {StockMovement.Reason.ORDER_PLACED, StockMovement.Reason.ORDER_CANCELLED})

    def test_claimed_order_cannot_be_cancelled(self):
        transporter = make_user(User.ROLE_TRANSPORTER)
        Order.objects.filter(id=self.order.id).update(
            transporter=transporter, delivery_status=Order.DELIVERY_IN_TRANSIT
        )
        with self.assertRaises(ConflictError) as ctx:
            cancel_order(order_id=self.order.id, actor=self.distributor)
        self.assertEqual(ctx.exception.code, "ORDER_NOT_CANCELLABLE")
        self.assertEqual(self._stock(), 40)

    def test_unknown_order(self):
        with self.assertRaises(NotFoundError):
            cancel_order(order_id="not-a-uuid", actor=self.distributor)


class TransportQueueTests(OrderServiceTestBase):
    def test_only_paid_unclaimed_orders_are_listed(self):
        pending, _ = self._place(quantity=1)
        paid, _ = self._place(quantity=1)
        Order.objects.filter(id=paid.id).update(
            status=Order.STATUS_CONFIRMED,
            payment_status=Order.PAYMENT_PAID,
            delivery_status=Order.DELIVERY_REQUESTED,
        )

        ids = [o.id for o in list_available_for_transport()]
        self.assertEqual(ids, [paid.id])
        self.assertEqual(list(list_available_for_transport(district="Galle")), [])
        self.assertEqual(len(list_available_for_transport(district="nuwara eliya")), 1)
