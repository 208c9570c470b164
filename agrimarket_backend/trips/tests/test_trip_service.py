from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationFailedError
from core.tests.factories import make_order, make_user, make_vehicle, window
from fleet.models import Vehicle
from fleet.services import is_vehicle_available
from orders.models import Order
from trips.models import Trip, TripEvent
from trips.services import (
    TripNotCancellableError,
    TripTerminalError,
    add_trip_charge,
    cancel_trip,
    change_vehicle,
    create_trip,
    get_trip,
    list_transporter_trips,
    remove_trip_charge,
    set_trip_status,
    trip_stats,
)
from users.models import User


class TripServiceTestBase(TestCase):
    def setUp(self):
        self.transporter = make_user(User.ROLE_TRANSPORTER)
        self.vehicle = make_vehicle(transporter=self.transporter)
        self.order = make_order()

    def _create(self, *, order=None, vehicle=None, hours=(10, 14), **overrides):
        start, end = window(*hours)
        kwargs = {
            "transporter": self.transporter,
            "order_id": (order or self.order).id,
            "vehicle_id": (vehicle or self.vehicle).id,
            "scheduled_pickup": start,
            "estimated_delivery": end,
            "base_fare": "2000.00",
            "distance_charge": "500.00",
        }
        kwargs.update(overrides)
        return create_trip(**kwargs)

    def _assert_code(self, ctx, code):
        self.assertEqual(ctx.exception.code, code)


class CreateTripTests(TripServiceTestBase):
    """
    GUARANTEES:
    - claiming an order moves order, vehicle and trip together
    - validation order is fixed and nothing is written on failure
    """

    def test_create_trip_claims_order_and_vehicle(self):
        trip = self._create(
            additional_charges=[{"description": "Loading", "amount": "250.00"}],
            special_instructions="  Keep chilled  ",
        )

        self.assertEqual(trip.trip_status, Trip.STATUS_PENDING)
        self.assertTrue(trip.trip_no.startswith("TRIP"))
        self.assertEqual(trip.total_cost, Decimal("2750.00"))
        self.assertEqual(trip.special_instructions, "Keep chilled")
        self.assertEqual(trip.pickup_address, "12 Farm Lane")
        self.assertEqual(trip.dropoff_address, "45 Market Street")

        self.order.refresh_from_db()
        self.assertEqual(self.order.transporter_id, self.transporter.id)
        self.assertEqual(self.order.delivery_status, Order.DELIVERY_IN_TRANSIT)

        self.vehicle.refresh_from_db()
        self.assertEqual(self.vehicle.status, Vehicle.STATUS_ON_DELIVERY)

        events = list(trip.timeline.all())
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0].status, TripEvent.LABEL_CREATED)

    def test_trip_numbers_continue_after_a_trip_row_is_removed(self):
        first = self._create(hours=(10, 14))
        second = self._create(order=make_order(), hours=(14, 18))
        Trip.objects.filter(id=first.id).delete()

        third = self._create(order=make_order(), hours=(18, 22))

        self.assertEqual(first.trip_no[-4:], "0001")
        self.assertEqual(second.trip_no[-4:], "0002")
        self.assertEqual(third.trip_no[-4:], "0003")
        self.assertNotEqual(third.trip_no, second.trip_no)

    def test_trip_numbers_are_per_transporter(self):
        self._create()
        other = make_user(User.ROLE_TRANSPORTER)
        other_vehicle = make_vehicle(transporter=other)
        start, end = window(10, 14)
        trip = create_trip(
            transporter=other,
            order_id=make_order().id,
            vehicle_id=other_vehicle.id,
            scheduled_pickup=start,
            estimated_delivery=end,
            base_fare="1000.00",
        )
        self.assertEqual(trip.trip_no[-4:], "0001")

    def test_overlapping_window_is_rejected_and_touching_window_accepted(self):
        self._create(hours=(10, 14))

        second_order = make_order()
        with self.assertRaises(ConflictError) as ctx:
            self._create(order=second_order, hours=(12, 16))
        self._assert_code(ctx, "VEHICLE_CONFLICT")

        second_order.refresh_from_db()
        self.assertIsNone(second_order.transporter_id)
        self.assertEqual(second_order.delivery_status, Order.DELIVERY_REQUESTED)

        trip = self._create(order=second_order, hours=(14, 18))
        self.assertEqual(trip.trip_status, Trip.STATUS_PENDING)
        self.assertEqual(Trip.objects.filter(vehicle=self.vehicle).count(), 2)

    def test_missing_fields_checked_first(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            self._create(base_fare=None, vehicle_id=None)
        self._assert_code(ctx, "MISSING_FIELDS")
        self.assertIn("vehicle_id", ctx.exception.message)

    def test_negative_fare_is_rejected(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            self._create(distance_charge="-1")
        self._assert_code(ctx, "INVALID_AMOUNT")

    def test_only_transporters_create_trips(self):
        distributor = make_user(User.ROLE_DISTRIBUTOR)
        with self.assertRaises(ForbiddenError):
            self._create(transporter=distributor)

    def test_transporter_without_profile(self):
        bare = make_user(User.ROLE_TRANSPORTER, with_profile=False)
        with self.assertRaises(NotFoundError) as ctx:
            self._create(transporter=bare)
        self._assert_code(ctx, "TRANSPORTER_NOT_FOUND")

    def test_unknown_order(self):
        with self.assertRaises(NotFoundError) as ctx:
            self._create(order_id="00000000-0000-0000-0000-000000000000")
        self._assert_code(ctx, "ORDER_NOT_FOUND")

    def test_unpaid_order_is_not_available(self):
        unpaid = make_order(paid=False)
        with self.assertRaises(ConflictError) as ctx:
            self._create(order=unpaid)
        self._assert_code(ctx, "ORDER_NOT_AVAILABLE")

    def test_order_cannot_be_claimed_twice(self):
        self._create()
        other_vehicle = make_vehicle(transporter=self.transporter)
        with self.assertRaises(ConflictError) as ctx:
            self._create(vehicle=other_vehicle, hours=(20, 22))
        self._assert_code(ctx, "ORDER_NOT_AVAILABLE")

    def test_foreign_vehicle_is_forbidden(self):
        other = make_user(User.ROLE_TRANSPORTER)
        foreign = make_vehicle(transporter=other)
        with self.assertRaises(ForbiddenError) as ctx:
            self._create(vehicle=foreign)
        self._assert_code(ctx, "NOT_VEHICLE_OWNER")

    def test_vehicle_in_maintenance_is_not_available(self):
        self.vehicle.status = Vehicle.STATUS_MAINTENANCE
        self.vehicle.save()
        with self.assertRaises(ConflictError) as ctx:
            self._create()
        self._assert_code(ctx, "VEHICLE_NOT_AVAILABLE")

    def test_pickup_in_the_past(self):
        now = timezone.now()
        with self.assertRaises(ValidationFailedError) as ctx:
            self._create(scheduled_pickup=now - timedelta(hours=1), estimated_delivery=now + timedelta(hours=3))
        self._assert_code(ctx, "PICKUP_IN_PAST")

    def test_delivery_must_follow_pickup(self):
        start, _ = window(10, 14)
        with self.assertRaises(ValidationFailedError) as ctx:
            self._create(scheduled_pickup=start, estimated_delivery=start)
        self._assert_code(ctx, "INVALID_SCHEDULE")

    def test_unresolvable_pickup_location(self):
        farmer = self.order.product.farmer
        farmer.address = ""
        farmer.save()
        product = self.order.product
        product.pickup_address = ""
        product.save()

        with self.assertRaises(ValidationFailedError) as ctx:
            self._create()
        self._assert_code(ctx, "LOCATION_UNRESOLVED")
        self.assertFalse(Trip.objects.exists())

    def test_pickup_falls_back_to_farmer_address(self):
        product = self.order.product
        product.pickup_address = ""
        product.pickup_district = ""
        product.save()

        trip = self._create()
        self.assertEqual(trip.pickup_address, product.farmer.address)
        self.assertEqual(trip.pickup_district, product.farmer.district)


class TripStatusTests(TripServiceTestBase):
    def setUp(self):
        super().setUp()
        self.trip = self._create()

    def test_full_lifecycle_to_completed(self):
        set_trip_status(trip_id=self.trip.id, actor=self.transporter, status=Trip.STATUS_ACCEPTED)
        trip = set_trip_status(trip_id=self.trip.id, actor=self.transporter, status=Trip.STATUS_IN_PROGRESS)
        self.assertIsNotNone(trip.actual_pickup)

        trip = set_trip_status(trip_id=self.trip.id, actor=self.transporter, status=Trip.STATUS_COMPLETED)
        self.assertIsNotNone(trip.actual_delivery)

        self.order.refresh_from_db()
        self.vehicle.refresh_from_db()
        self.assertEqual(self.order.delivery_status, Order.DELIVERY_DELIVERED)
        self.assertEqual(self.vehicle.status, Vehicle.STATUS_AVAILABLE)

        labels = list(trip.timeline.values_list("status", flat=True))
        self.assertEqual(
            labels,
            [TripEvent.LABEL_CREATED, Trip.STATUS_ACCEPTED, Trip.STATUS_IN_PROGRESS, Trip.STATUS_COMPLETED],
        )
        self.assertEqual(trip.timeline.get(status=Trip.STATUS_ACCEPTED).note, "Status updated to Accepted")

    def test_completed_trip_is_terminal(self):
        set_trip_status(trip_id=self.trip.id, actor=self.transporter, status=Trip.STATUS_COMPLETED)
        with self.assertRaises(TripTerminalError):
            set_trip_status(trip_id=self.trip.id, actor=self.transporter, status=Trip.STATUS_CANCELLED)
        self.assertEqual(self.trip.timeline.count(), 2)

    def test_started_trip_cannot_be_cancelled(self):
        set_trip_status(trip_id=self.trip.id, actor=self.transporter, status=Trip.STATUS_IN_PROGRESS)
        with self.assertRaises(TripNotCancellableError):
            cancel_trip(trip_id=self.trip.id, actor=self.transporter)

    def test_cancel_reopens_order_and_frees_vehicle(self):
        trip = set_trip_status(
            trip_id=self.trip.id, actor=self.transporter, status=Trip.STATUS_CANCELLED
        )
        self.assertEqual(trip.cancellation_reason, "No reason provided")
        self.assertIsNotNone(trip.cancelled_at)

        self.order.refresh_from_db()
        self.vehicle.refresh_from_db()
        self.assertIsNone(self.order.transporter_id)
        self.assertEqual(self.order.delivery_status, Order.DELIVERY_REQUESTED)
        self.assertEqual(self.vehicle.status, Vehicle.STATUS_AVAILABLE)
        self.assertTrue(is_vehicle_available(self.vehicle.id, trip.scheduled_pickup, trip.estimated_delivery))

        # the reopened order can be claimed again
        again = self._create(hours=(10, 14))
        self.assertEqual(again.order_id, self.order.id)

    def test_delete_cancel_uses_its_own_default_reason(self):
        trip = cancel_trip(trip_id=self.trip.id, actor=self.transporter)
        self.assertEqual(trip.cancellation_reason, "Cancelled by transporter")
        self.assertEqual(trip.timeline.get(status=Trip.STATUS_CANCELLED).note, "Cancelled by transporter")

    def test_vehicle_stays_on_delivery_while_another_trip_holds_it(self):
        self._create(order=make_order(), hours=(14, 18))
        set_trip_status(trip_id=self.trip.id, actor=self.transporter, status=Trip.STATUS_COMPLETED)

        self.vehicle.refresh_from_db()
        self.assertEqual(self.vehicle.status, Vehicle.STATUS_ON_DELIVERY)

    def test_non_owner_cannot_change_status(self):
        other = make_user(User.ROLE_TRANSPORTER)
        with self.assertRaises(ForbiddenError) as ctx:
            set_trip_status(trip_id=self.trip.id, actor=other, status=Trip.STATUS_ACCEPTED)
        self._assert_code(ctx, "NOT_TRIP_OWNER")

    def test_unknown_trip(self):
        with self.assertRaises(NotFoundError):
            set_trip_status(
                trip_id="00000000-0000-0000-0000-000000000000",
                actor=self.transporter,
                status=Trip.STATUS_ACCEPTED,
            )


class ChangeVehicleTests(TripServiceTestBase):
    def setUp(self):
        super().setUp()
        self.trip = self._create()
        self.spare = make_vehicle(transporter=self.transporter)

    def test_change_vehicle_moves_booking(self):
        trip = change_vehicle(trip_id=self.trip.id, actor=self.transporter, new_vehicle_id=self.spare.id)
        self.assertEqual(trip.vehicle_id, self.spare.id)

        self.vehicle.refresh_from_db()
        self.spare.refresh_from_db()
        self.assertEqual(self.vehicle.status, Vehicle.STATUS_AVAILABLE)
        self.assertEqual(self.spare.status, Vehicle.STATUS_ON_DELIVERY)
        self.assertTrue(trip.timeline.filter(status=TripEvent.LABEL_VEHICLE_CHANGED).exists())

    def test_same_vehicle_is_rejected(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            change_vehicle(trip_id=self.trip.id, actor=self.transporter, new_vehicle_id=self.vehicle.id)
        self._assert_code(ctx, "SAME_VEHICLE")

    def test_new_vehicle_must_be_free(self):
        self._create(order=make_order(), vehicle=self.spare, hours=(12, 16))
        with self.assertRaises(ConflictError) as ctx:
            change_vehicle(trip_id=self.trip.id, actor=self.transporter, new_vehicle_id=self.spare.id)
        self._assert_code(ctx, "VEHICLE_CONFLICT")

    def test_started_trip_keeps_its_vehicle(self):
        set_trip_status(trip_id=self.trip.id, actor=self.transporter, status=Trip.STATUS_IN_PROGRESS)
        with self.assertRaises(ConflictError) as ctx:
            change_vehicle(trip_id=self.trip.id, actor=self.transporter, new_vehicle_id=self.spare.id)
        self._assert_code(ctx, "VEHICLE_CHANGE_NOT_ALLOWED")


class TripChargeTests(TripServiceTestBase):
    def setUp(self):
        super().setUp()
        self.trip = self._create()

    def test_total_cost_follows_charges(self):
        trip = add_trip_charge(trip_id=self.trip.id, actor=self.transporter, description="Toll", amount="120.50")
        self.assertEqual(trip.total_cost, Decimal("2620.50"))

        charge = trip.additional_charges.get()
        trip = remove_trip_charge(trip_id=self.trip.id, charge_id=charge.id, actor=self.transporter)
        self.assertEqual(trip.total_cost, Decimal("2500.00"))

    def test_unknown_charge(self):
        with self.assertRaises(NotFoundError) as ctx:
            remove_trip_charge(
                trip_id=self.trip.id,
                charge_id="00000000-0000-0000-0000-000000000000",
                actor=self.transporter,
            )
        self._assert_code(ctx, "CHARGE_NOT_FOUND")

    def test_finished_trip_rejects_charges(self):
        set_trip_status(trip_id=self.trip.id, actor=self.transporter, status=Trip.STATUS_COMPLETED)
        with self.assertRaises(TripTerminalError):
            add_trip_charge(trip_id=self.trip.id, actor=self.transporter, description="Late", amount="10")


class TripReadTests(TripServiceTestBase):
    def test_get_trip_owner_or_admin(self):
        trip = self._create()
        admin = make_user(User.ROLE_ADMIN)
        self.assertEqual(get_trip(trip_id=trip.id, actor=admin).id, trip.id)
        self.assertEqual(get_trip(trip_id=trip.id, actor=self.transporter).id, trip.id)

        with self.assertRaises(ForbiddenError):
            get_trip(trip_id=trip.id, actor=make_user(User.ROLE_TRANSPORTER))

    def test_list_filters_by_status(self):
        first = self._create()
        self._create(order=make_order(), hours=(20, 22))
        set_trip_status(trip_id=first.id, actor=self.transporter, status=Trip.STATUS_COMPLETED)

        completed = list_transporter_trips(transporter=self.transporter, status=Trip.STATUS_COMPLETED)
        self.assertEqual([t.id for t in completed], [first.id])
        self.assertEqual(list_transporter_trips(transporter=self.transporter).count(), 2)

    def test_stats(self):
        first = self._create()
        second = self._create(order=make_order(), hours=(20, 22))
        set_trip_status(trip_id=first.id, actor=self.transporter, status=Trip.STATUS_COMPLETED)
        cancel_trip(trip_id=second.id, actor=self.transporter)
        self._create(order=make_order(), hours=(30, 32))

        stats = trip_stats(transporter=self.transporter)
        self.assertEqual(stats["total_trips"], 3)
        self.assertEqual(stats["completed_trips"], 1)
        self.assertEqual(stats["cancelled_trips"], 1)
        self.assertEqual(stats["completed_revenue"], Decimal("2500.00"))
        self.assertEqual(stats["completion_rate"], Decimal("33.33"))
        self.assertEqual(stats["by_status"][Trip.STATUS_PENDING]["count"], 1)
