# trips/services/trip_service.py

"""
TRIP SERVICE (FULFILLMENT ORCHESTRATOR)

Purpose:
- Claim a paid order by creating a trip with one of the caller's vehicles.
- Drive the trip through its lifecycle, keeping Order.delivery_status,
  Order.transporter and Vehicle.status in step.
- Swap the vehicle of an unstarted trip.
- Maintain additional charges (total_cost is recomputed by the model).

Hard rules:
- Every mutation is one transaction: trip + order + vehicle + timeline
  commit together or roll back together.
- Rows are locked in the order trip -> order -> vehicle.
- Validation and ownership checks run before anything is written.
- Every status change appends exactly one TripEvent.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationFailedError
from fleet.models import Vehicle
from fleet.services.availability import conflicting_trips, is_vehicle_available
from orders.models import Order
from trips.models import Trip, TripCharge, TripEvent
from trips.services.trip_lifecycle import (
    validate_mutable,
    validate_transition,
    validate_vehicle_change,
)
from users.models import TransporterProfile, User

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

DEFAULT_STATUS_CANCEL_REASON = "No reason provided"
DEFAULT_DELETE_CANCEL_REASON = "Cancelled by transporter"


# ============================================================
# HELPERS
# ============================================================

def _money(value, *, field_name: str) -> Decimal:
    if value is None or value == "":
        return Decimal("0.00")
    if isinstance(value, bool):
        raise ValidationFailedError(f"{field_name} must be a number", code="INVALID_AMOUNT")
    try:
        amount = Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationFailedError(f"{field_name} must be a number", code="INVALID_AMOUNT")
    if amount < 0:
        raise ValidationFailedError(f"{field_name} cannot be negative", code="INVALID_AMOUNT")
    return amount


def _normalize_charges(charges) -> list[dict]:
    out = []
    for idx, charge in enumerate(charges or []):
        description = str((charge or {}).get("description") or "").strip()
        if not description:
            raise ValidationFailedError(
                f"additional_charges[{idx}].description is required", code="INVALID_CHARGE"
            )
        out.append(
            {
                "description": description,
                "amount": _money(charge.get("amount"), field_name=f"additional_charges[{idx}].amount"),
            }
        )
    return out


def _require_transporter(user) -> None:
    if getattr(user, "role", None) != User.ROLE_TRANSPORTER:
        raise ForbiddenError("Only transporters can manage trips.", code="TRANSPORTER_ROLE_REQUIRED")
    if not TransporterProfile.objects.filter(user_id=user.id).exists():
        raise NotFoundError("Transporter profile not found.", code="TRANSPORTER_NOT_FOUND")


def _lock_transporter_profile(user) -> TransporterProfile:
    # serializes trip numbering for one transporter
    return TransporterProfile.objects.select_for_update().get(user_id=user.id)


def _lock_owned_trip(*, trip_id, actor) -> Trip:
    try:
        trip = Trip.objects.select_for_update().get(id=trip_id)
    except (Trip.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundError("Trip not found.", code="TRIP_NOT_FOUND")

    if trip.transporter_id != getattr(actor, "id", None):
        raise ForbiddenError("This trip does not belong to you.", code="NOT_TRIP_OWNER")
    return trip


def _lock_order(order_id) -> Order | None:
    if order_id is None:
        return None
    return (
        Order.objects.select_for_update()
        .select_related("product", "product__farmer")
        .filter(id=order_id)
        .first()
    )


def _lock_vehicle(vehicle_id) -> Vehicle:
    try:
        return Vehicle.objects.select_for_update().get(id=vehicle_id)
    except (Vehicle.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundError("Vehicle not found.", code="VEHICLE_NOT_FOUND")


def _require_bookable_vehicle(vehicle: Vehicle, *, transporter) -> None:
    if vehicle.transporter_id != transporter.id:
        raise ForbiddenError("This vehicle does not belong to you.", code="NOT_VEHICLE_OWNER")
    if not vehicle.is_bookable:
        raise ConflictError(
            f"Vehicle {vehicle.code} is {vehicle.status} and cannot take trips.",
            code="VEHICLE_NOT_AVAILABLE",
        )


def _require_free_window(vehicle: Vehicle, *, start, end, exclude_trip_id=None) -> None:
    if not is_vehicle_available(vehicle.id, start, end, exclude_trip_id=exclude_trip_id):
        clash = conflicting_trips(
            vehicle_id=vehicle.id, window_start=start, window_end=end, exclude_trip_id=exclude_trip_id
        ).first()
        raise ConflictError(
            f"Vehicle {vehicle.code} is already booked for an overlapping window"
            + (f" (trip {clash.trip_no})." if clash else "."),
            code="VEHICLE_CONFLICT",
        )


def _claim_vehicle(vehicle: Vehicle) -> None:
    if vehicle.status != Vehicle.STATUS_ON_DELIVERY:
        vehicle.status = Vehicle.STATUS_ON_DELIVERY
        vehicle.save(update_fields=["status", "updated_at"])


def _release_vehicle(vehicle_id, *, trip_id) -> None:
    """Back to Available unless another open trip still holds the vehicle."""
    vehicle = _lock_vehicle(vehicle_id)
    if vehicle.status != Vehicle.STATUS_ON_DELIVERY:
        return

    still_booked = (
        Trip.objects.filter(
            vehicle_id=vehicle.id,
            trip_status__in=(Trip.STATUS_PENDING, Trip.STATUS_ACCEPTED, Trip.STATUS_IN_PROGRESS),
        )
        .exclude(id=trip_id)
        .exists()
    )
    if still_booked:
        return

    vehicle.status = Vehicle.STATUS_AVAILABLE
    vehicle.save(update_fields=["status", "updated_at"])


def _resolve_locations(order: Order) -> dict:
    product = order.product
    farmer = product.farmer

    pickup_address = product.pickup_address or farmer.address
    dropoff_address = order.delivery_address
    if not pickup_address or not dropoff_address:
        raise ValidationFailedError(
            "Pickup or dropoff location not found.", code="LOCATION_UNRESOLVED"
        )

    return {
        "pickup_address": pickup_address,
        "pickup_city": product.pickup_city or farmer.city,
        "pickup_district": product.pickup_district or farmer.district,
        "pickup_lat": product.pickup_lat,
        "pickup_lng": product.pickup_lng,
        "dropoff_address": dropoff_address,
        "dropoff_city": order.delivery_city,
        "dropoff_lat": order.delivery_lat,
        "dropoff_lng": order.delivery_lng,
    }


def _log_event(trip: Trip, *, status: str, note: str, actor) -> TripEvent:
    return TripEvent.objects.create(trip=trip, status=status, note=note, actor=actor)


# ============================================================
# CREATE (CLAIM ORDER)
# ============================================================

def create_trip(
    *,
    transporter,
    order_id,
    vehicle_id,
    scheduled_pickup,
    estimated_delivery,
    base_fare,
    distance_charge=None,
    additional_charges=None,
    special_instructions="",
    distance_km=None,
    estimated_duration_minutes=None,
) -> Trip:
    """
    Validation order (first failure wins):
    required fields -> transporter -> order claimable -> vehicle owned and
    in service -> pickup not in the past -> delivery after pickup ->
    vehicle window free -> locations resolvable.
    """
    missing = [
        name
        for name, value in (
            ("order_id", order_id),
            ("vehicle_id", vehicle_id),
            ("scheduled_pickup", scheduled_pickup),
            ("estimated_delivery", estimated_delivery),
            ("base_fare", base_fare),
        )
        if value is None or value == ""
    ]
    if missing:
        raise ValidationFailedError(
            f"Missing required fields: {', '.join(missing)}", code="MISSING_FIELDS"
        )

    fare = _money(base_fare, field_name="base_fare")
    dist_charge = _money(distance_charge, field_name="distance_charge")
    charges = _normalize_charges(additional_charges)

    _require_transporter(transporter)

    with transaction.atomic():
        _lock_transporter_profile(transporter)
        order = _lock_order(order_id)
        if order is None:
            raise NotFoundError("Order not found.", code="ORDER_NOT_FOUND")
        if not order.is_open_for_transport:
            raise ConflictError(
                "Order is not available for transport (must be confirmed, requested and unclaimed).",
                code="ORDER_NOT_AVAILABLE",
            )

        vehicle = _lock_vehicle(vehicle_id)
        _require_bookable_vehicle(vehicle, transporter=transporter)

        if scheduled_pickup < timezone.now():
            raise ValidationFailedError("Pickup time cannot be in the past.", code="PICKUP_IN_PAST")
        if estimated_delivery <= scheduled_pickup:
            raise ValidationFailedError(
                "Delivery time must be after pickup time.", code="INVALID_SCHEDULE"
            )

        _require_free_window(vehicle, start=scheduled_pickup, end=estimated_delivery)

        locations = _resolve_locations(order)

        trip = Trip.objects.create(
            order=order,
            transporter=transporter,
            vehicle=vehicle,
            created_by=transporter,
            trip_status=Trip.STATUS_PENDING,
            scheduled_pickup=scheduled_pickup,
            estimated_delivery=estimated_delivery,
            base_fare=fare,
            distance_charge=dist_charge,
            distance_km=distance_km,
            estimated_duration_minutes=estimated_duration_minutes,
            special_instructions=(special_instructions or "").strip(),
            **locations,
        )
        for charge in charges:
            TripCharge.objects.create(trip=trip, **charge)

        _log_event(trip, status=TripEvent.LABEL_CREATED, note="Trip created", actor=transporter)

        order.transporter = transporter
        order.delivery_status = Order.DELIVERY_IN_TRANSIT
        order.save(update_fields=["transporter", "delivery_status", "updated_at"])

        _claim_vehicle(vehicle)

    trip.refresh_from_db()
    logger.info(
        "Trip created",
        extra={
            "trip_id": str(trip.id),
            "trip_no": trip.trip_no,
            "order_id": str(order.id),
            "vehicle_id": str(vehicle.id),
        },
    )
    return trip


# ============================================================
# STATUS TRANSITIONS
# ============================================================

@transaction.atomic
def set_trip_status(*, trip_id, actor, status: str, reason: str | None = None, note: str | None = None) -> Trip:
    trip = _lock_owned_trip(trip_id=trip_id, actor=actor)
    validate_transition(trip=trip, target_status=status)

    now = timezone.now()
    order = _lock_order(trip.order_id)

    trip.trip_status = status

    if status == Trip.STATUS_IN_PROGRESS:
        trip.actual_pickup = now

    elif status == Trip.STATUS_COMPLETED:
        trip.actual_delivery = now
        if order is not None:
            order.delivery_status = Order.DELIVERY_DELIVERED
            order.save(update_fields=["delivery_status", "updated_at"])

    elif status == Trip.STATUS_CANCELLED:
        trip.cancellation_reason = (reason or "").strip() or DEFAULT_STATUS_CANCEL_REASON
        trip.cancelled_at = now
        if order is not None:
            order.transporter = None
            order.delivery_status = Order.DELIVERY_REQUESTED
            order.save(update_fields=["transporter", "delivery_status", "updated_at"])

    trip.save()

    if status in (Trip.STATUS_COMPLETED, Trip.STATUS_CANCELLED):
        _release_vehicle(trip.vehicle_id, trip_id=trip.id)

    event_note = note or (
        trip.cancellation_reason if status == Trip.STATUS_CANCELLED else f"Status updated to {status}"
    )
    _log_event(trip, status=status, note=event_note, actor=actor)

    logger.info(
        "Trip status changed",
        extra={"trip_id": str(trip.id), "status": status, "actor_id": str(actor.id)},
    )
    return trip


def cancel_trip(*, trip_id, actor, reason: str | None = None) -> Trip:
    return set_trip_status(
        trip_id=trip_id,
        actor=actor,
        status=Trip.STATUS_CANCELLED,
        reason=(reason or "").strip() or DEFAULT_DELETE_CANCEL_REASON,
    )


# ============================================================
# VEHICLE SWAP
# ============================================================

@transaction.atomic
def change_vehicle(*, trip_id, actor, new_vehicle_id) -> Trip:
    if not new_vehicle_id:
        raise ValidationFailedError("vehicle_id is required", code="MISSING_FIELDS")

    trip = _lock_owned_trip(trip_id=trip_id, actor=actor)
    validate_vehicle_change(trip=trip)

    if str(trip.vehicle_id) == str(new_vehicle_id):
        raise ValidationFailedError("Trip already uses this vehicle.", code="SAME_VEHICLE")

    new_vehicle = _lock_vehicle(new_vehicle_id)
    _require_bookable_vehicle(new_vehicle, transporter=actor)
    _require_free_window(
        new_vehicle,
        start=trip.scheduled_pickup,
        end=trip.estimated_delivery,
        exclude_trip_id=trip.id,
    )

    old_vehicle_id = trip.vehicle_id
    old_code = Vehicle.objects.filter(id=old_vehicle_id).values_list("code", flat=True).first()

    trip.vehicle = new_vehicle
    trip.save(update_fields=["vehicle", "updated_at"])

    _release_vehicle(old_vehicle_id, trip_id=trip.id)
    _claim_vehicle(new_vehicle)

    _log_event(
        trip,
        status=TripEvent.LABEL_VEHICLE_CHANGED,
        note=f"Vehicle changed from {old_code} to {new_vehicle.code}",
        actor=actor,
    )
    logger.info(
        "Trip vehicle changed",
        extra={"trip_id": str(trip.id), "from": str(old_vehicle_id), "to": str(new_vehicle.id)},
    )
    return trip


# ============================================================
# ADDITIONAL CHARGES
# ============================================================

@transaction.atomic
def add_trip_charge(*, trip_id, actor, description: str, amount) -> Trip:
    trip = _lock_owned_trip(trip_id=trip_id, actor=actor)
    validate_mutable(trip=trip)

    charge = _normalize_charges([{"description": description, "amount": amount}])[0]
    TripCharge.objects.create(trip=trip, **charge)

    trip.refresh_from_db()
    return trip


@transaction.atomic
def remove_trip_charge(*, trip_id, charge_id, actor) -> Trip:
    trip = _lock_owned_trip(trip_id=trip_id, actor=actor)
    validate_mutable(trip=trip)

    try:
        charge = trip.additional_charges.get(id=charge_id)
    except (TripCharge.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundError("Charge not found on this trip.", code="CHARGE_NOT_FOUND")

    charge.delete()
    trip.refresh_from_db()
    return trip


# ============================================================
# READS
# ============================================================

def _detail_queryset():
    return Trip.objects.select_related(
        "order",
        "order__product",
        "order__distributor",
        "vehicle",
        "transporter",
    ).prefetch_related("additional_charges", "timeline")


def get_trip(*, trip_id, actor) -> Trip:
    try:
        trip = _detail_queryset().get(id=trip_id)
    except (Trip.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundError("Trip not found.", code="TRIP_NOT_FOUND")

    if trip.transporter_id != actor.id and getattr(actor, "role", None) != User.ROLE_ADMIN:
        raise ForbiddenError("This trip does not belong to you.", code="NOT_TRIP_OWNER")
    return trip


def list_transporter_trips(*, transporter, status: str | None = None):
    qs = _detail_queryset().filter(transporter=transporter).order_by("-created_at")
    if status:
        qs = qs.filter(trip_status=status)
    return qs


def trip_stats(*, transporter) -> dict:
    qs = Trip.objects.filter(transporter=transporter)

    by_status = {
        row["trip_status"]: {
            "count": row["count"],
            "revenue": row["revenue"] or Decimal("0.00"),
        }
        for row in qs.values("trip_status").annotate(count=Count("id"), revenue=Sum("total_cost"))
    }

    totals = qs.aggregate(
        total=Count("id"),
        completed=Count("id", filter=Q(trip_status=Trip.STATUS_COMPLETED)),
        cancelled=Count("id", filter=Q(trip_status=Trip.STATUS_CANCELLED)),
        earned=Sum("total_cost", filter=Q(trip_status=Trip.STATUS_COMPLETED)),
    )

    total = totals["total"] or 0
    completed = totals["completed"] or 0
    rate = (Decimal(completed) * 100 / Decimal(total)).quantize(TWOPLACES) if total else Decimal("0.00")

    return {
        "by_status": by_status,
        "total_trips": total,
        "completed_trips": completed,
        "cancelled_trips": totals["cancelled"] or 0,
        "completed_revenue": totals["earned"] or Decimal("0.00"),
        "completion_rate": rate,
    }
