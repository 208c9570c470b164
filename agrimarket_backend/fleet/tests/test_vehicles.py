from django.test import SimpleTestCase, TestCase

from core.exceptions import ConflictError, ForbiddenError, ValidationFailedError
from core.tests.factories import make_order, make_user, make_vehicle, window
from fleet.models import Vehicle
from fleet.services import (
    conflicting_trips,
    is_vehicle_available,
    register_vehicle,
    retire_vehicle,
    set_vehicle_status,
    update_vehicle,
)
from fleet.validators import is_valid_sl_plate, normalize_plate
from trips.models import Trip
from users.models import TransporterProfile, User


class PlateFormatTests(SimpleTestCase):
    def test_accepted_formats(self):
        for plate in ("WP-CAB-1234", "CAB-1234", "wp cab 1234", "CP AB 0001", "12 SRI 3456", "AB 1234"):
            self.assertTrue(is_valid_sl_plate(plate), plate)

    def test_rejected_formats(self):
        for plate in ("", "1234", "WPCAB1234", "W-CAB-1234", "WP-CAB-123", "ABCDE-1234"):
            self.assertFalse(is_valid_sl_plate(plate), plate)

    def test_normalize_collapses_spaces_and_upper_cases(self):
        self.assertEqual(normalize_plate("  wp   cab 1234 "), "WP CAB 1234")


class VehicleRegistryTests(TestCase):
    """
    GUARANTEES:
    - codes are per transporter and per category (T001, L001, L002...)
    - registration numbers are unique across the platform
    - fleet_size follows registrations and retirements
    """

    def setUp(self):
        self.transporter = make_user(User.ROLE_TRANSPORTER)
        self.data = {
            "category": Vehicle.CATEGORY_LORRY,
            "vehicle_type": Vehicle.TYPE_OPEN_BODY,
            "weight_capacity_kg": 2500,
            "registration_number": "wp-lc-4455",
            "brand": "Tata",
            "vehicle_model": "1613",
            "fuel_type": "Diesel",
        }

    def _profile(self):
        return TransporterProfile.objects.get(user=self.transporter)

    def test_register_assigns_code_and_counts_fleet(self):
        first = register_vehicle(transporter=self.transporter, data=self.data)
        second = register_vehicle(
            transporter=self.transporter, data={**self.data, "registration_number": "WP-LC-4456"}
        )
        truck = register_vehicle(
            transporter=self.transporter,
            data={**self.data, "category": Vehicle.CATEGORY_TRUCK, "registration_number": "WP-LC-4457"},
        )

        self.assertEqual(first.code, "L001")
        self.assertEqual(second.code, "L002")
        self.assertEqual(truck.code, "T001")
        self.assertEqual(first.registration_number, "WP-LC-4455")
        self.assertEqual(first.status, Vehicle.STATUS_AVAILABLE)
        self.assertEqual(self._profile().fleet_size, 3)

    def test_codes_are_independent_per_transporter(self):
        register_vehicle(transporter=self.transporter, data=self.data)
        other = make_user(User.ROLE_TRANSPORTER)
        vehicle = register_vehicle(transporter=other, data={**self.data, "registration_number": "CAB-9999"})
        self.assertEqual(vehicle.code, "L001")

    def test_duplicate_registration_is_rejected(self):
        register_vehicle(transporter=self.transporter, data=self.data)
        with self.assertRaises(ConflictError) as ctx:
            register_vehicle(transporter=self.transporter, data={**self.data, "registration_number": "WP-LC-4455"})
        self.assertEqual(ctx.exception.code, "REGISTRATION_EXISTS")

    def test_invalid_plate_is_rejected(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            register_vehicle(transporter=self.transporter, data={**self.data, "registration_number": "XYZ"})
        self.assertEqual(ctx.exception.code, "INVALID_REGISTRATION_NUMBER")

    def test_capacity_floor(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            register_vehicle(transporter=self.transporter, data={**self.data, "weight_capacity_kg": 100})
        self.assertEqual(ctx.exception.code, "INVALID_VEHICLE")

    def test_only_transporters_register(self):
        with self.assertRaises(ForbiddenError):
            register_vehicle(transporter=make_user(User.ROLE_FARMER), data=self.data)

    def test_update_rejects_status_field(self):
        vehicle = register_vehicle(transporter=self.transporter, data=self.data)
        with self.assertRaises(ValidationFailedError) as ctx:
            update_vehicle(vehicle_id=vehicle.id, actor=self.transporter, changes={"status": "Available"})
        self.assertEqual(ctx.exception.code, "FIELD_NOT_EDITABLE")

        vehicle = update_vehicle(vehicle_id=vehicle.id, actor=self.transporter, changes={"brand": "Ashok Leyland"})
        self.assertEqual(vehicle.brand, "Ashok Leyland")

    def test_manual_status_and_on_delivery_lock(self):
        vehicle = register_vehicle(transporter=self.transporter, data=self.data)
        vehicle = set_vehicle_status(vehicle_id=vehicle.id, actor=self.transporter, status=Vehicle.STATUS_MAINTENANCE)
        self.assertEqual(vehicle.status, Vehicle.STATUS_MAINTENANCE)

        with self.assertRaises(ValidationFailedError):
            set_vehicle_status(vehicle_id=vehicle.id, actor=self.transporter, status=Vehicle.STATUS_ON_DELIVERY)

        Vehicle.objects.filter(id=vehicle.id).update(status=Vehicle.STATUS_ON_DELIVERY)
        with self.assertRaises(ConflictError) as ctx:
            set_vehicle_status(vehicle_id=vehicle.id, actor=self.transporter, status=Vehicle.STATUS_AVAILABLE)
        self.assertEqual(ctx.exception.code, "VEHICLE_ON_DELIVERY")

    def test_retire_vehicle(self):
        vehicle = register_vehicle(transporter=self.transporter, data=self.data)
        retire_vehicle(vehicle_id=vehicle.id, actor=self.transporter)
        self.assertFalse(Vehicle.objects.filter(id=vehicle.id).exists())
        self.assertEqual(self._profile().fleet_size, 0)

    def test_retire_blocked_by_trip_history(self):
        vehicle = make_vehicle(transporter=self.transporter)
        start, end = window(1, 3)
        Trip.objects.create(
            transporter=self.transporter,
            vehicle=vehicle,
            order=make_order(),
            trip_status=Trip.STATUS_COMPLETED,
            pickup_address="A",
            dropoff_address="B",
            scheduled_pickup=start,
            estimated_delivery=end,
            base_fare="100.00",
        )
        with self.assertRaises(ConflictError) as ctx:
            retire_vehicle(vehicle_id=vehicle.id, actor=self.transporter)
        self.assertEqual(ctx.exception.code, "VEHICLE_HAS_TRIPS")

    def test_non_owner_is_forbidden(self):
        vehicle = register_vehicle(transporter=self.transporter, data=self.data)
        with self.assertRaises(ForbiddenError):
            retire_vehicle(vehicle_id=vehicle.id, actor=make_user(User.ROLE_TRANSPORTER))


class VehicleAvailabilityTests(TestCase):
    """
    Overlap is strict: existing.start < end AND existing.end > start.
    Only Pending / Accepted / In Progress trips block.
    """

    def setUp(self):
        self.transporter = make_user(User.ROLE_TRANSPORTER)
        self.vehicle = make_vehicle(transporter=self.transporter)
        start, end = window(10, 14)
        self.trip = Trip.objects.create(
            transporter=self.transporter,
            vehicle=self.vehicle,
            order=make_order(),
            pickup_address="A",
            dropoff_address="B",
            scheduled_pickup=start,
            estimated_delivery=end,
            base_fare="100.00",
        )

    def test_overlapping_windows_conflict(self):
        for hours in ((12, 16), (8, 11), (11, 13), (9, 15)):
            self.assertFalse(is_vehicle_available(self.vehicle.id, *window(*hours)), hours)

    def test_touching_windows_do_not_conflict(self):
        self.assertTrue(is_vehicle_available(self.vehicle.id, *window(14, 18)))
        self.assertTrue(is_vehicle_available(self.vehicle.id, *window(6, 10)))

    def test_finished_trips_do_not_block(self):
        for finished in (Trip.STATUS_COMPLETED, Trip.STATUS_CANCELLED):
            Trip.objects.filter(id=self.trip.id).update(trip_status=finished)
            self.assertTrue(is_vehicle_available(self.vehicle.id, *window(11, 13)))

    def test_excluded_trip_is_ignored(self):
        start, end = window(11, 13)
        self.assertTrue(is_vehicle_available(self.vehicle.id, start, end, exclude_trip_id=self.trip.id))
        self.assertEqual(
            list(conflicting_trips(vehicle_id=self.vehicle.id, window_start=start, window_end=end)),
            [self.trip],
        )

    def test_other_vehicles_are_unaffected(self):
        other = make_vehicle(transporter=self.transporter)
        self.assertTrue(is_vehicle_available(other.id, *window(11, 13)))
