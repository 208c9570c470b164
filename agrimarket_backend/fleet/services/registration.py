# fleet/services/registration.py

"""
FLEET REGISTRY SERVICES

- register / edit / retire transporter-owned vehicles
- manual status toggles (Available, Maintenance, Offline)

Rules:
- Only the owning transporter touches a vehicle.
- A vehicle On Delivery belongs to its trip: no manual status change,
  no retirement.
- TransporterProfile.fleet_size follows registrations and retirements.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import F
from django.db.models.functions import Greatest

from core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationFailedError
from fleet.models import Vehicle
from fleet.validators import is_valid_sl_plate, normalize_plate
from users.models import TransporterProfile, User

logger = logging.getLogger(__name__)

# fields owners may edit after registration
EDITABLE_FIELDS = {
    "category",
    "vehicle_type",
    "weight_capacity_kg",
    "volume_capacity_l",
    "registration_number",
    "brand",
    "vehicle_model",
    "fuel_type",
    "manufacturing_year",
    "last_maintenance_date",
    "next_maintenance_due",
    "insurance_expiry",
    "registration_expiry",
}


def _require_transporter(user) -> None:
    if getattr(user, "role", None) != User.ROLE_TRANSPORTER:
        raise ForbiddenError("Only transporters manage vehicles.", code="TRANSPORTER_ROLE_REQUIRED")


def _flatten(exc: DjangoValidationError) -> str:
    if hasattr(exc, "message_dict"):
        return "; ".join(f"{k}: {' '.join(v)}" for k, v in exc.message_dict.items())
    return " ".join(exc.messages)


def _check_registration(number, *, exclude_id=None) -> str:
    plate = normalize_plate(number)
    if not is_valid_sl_plate(plate):
        raise ValidationFailedError(
            "Invalid registration number format.", code="INVALID_REGISTRATION_NUMBER"
        )
    qs = Vehicle.objects.filter(registration_number=plate)
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    if qs.exists():
        raise ConflictError("Registration number already exists.", code="REGISTRATION_EXISTS")
    return plate


def _full_clean(vehicle: Vehicle) -> None:
    try:
        vehicle.full_clean(exclude=["transporter", "code"])
    except DjangoValidationError as exc:
        raise ValidationFailedError(_flatten(exc), code="INVALID_VEHICLE")


def get_owned_vehicle(*, vehicle_id, actor, for_update=False) -> Vehicle:
    qs = Vehicle.objects.all()
    if for_update:
        qs = qs.select_for_update()
    try:
        vehicle = qs.get(id=vehicle_id)
    except (Vehicle.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundError("Vehicle not found.", code="VEHICLE_NOT_FOUND")

    if vehicle.transporter_id != getattr(actor, "id", None):
        raise ForbiddenError("This vehicle does not belong to you.", code="NOT_VEHICLE_OWNER")
    return vehicle


@transaction.atomic
def register_vehicle(*, transporter, data: dict) -> Vehicle:
    _require_transporter(transporter)

    fields = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
    fields["registration_number"] = _check_registration(fields.get("registration_number"))

    vehicle = Vehicle(transporter=transporter, status=Vehicle.STATUS_AVAILABLE, **fields)
    _full_clean(vehicle)
    vehicle.save()

    TransporterProfile.objects.filter(user=transporter).update(fleet_size=F("fleet_size") + 1)

    logger.info(
        "Vehicle registered",
        extra={"vehicle_id": str(vehicle.id), "code": vehicle.code, "transporter_id": str(transporter.id)},
    )
    return vehicle


@transaction.atomic
def update_vehicle(*, vehicle_id, actor, changes: dict) -> Vehicle:
    vehicle = get_owned_vehicle(vehicle_id=vehicle_id, actor=actor, for_update=True)

    blocked = set(changes) - EDITABLE_FIELDS
    if blocked:
        raise ValidationFailedError(
            f"These fields cannot be edited here: {', '.join(sorted(blocked))}",
            code="FIELD_NOT_EDITABLE",
        )

    if "registration_number" in changes:
        changes = dict(changes)
        changes["registration_number"] = _check_registration(
            changes["registration_number"], exclude_id=vehicle.id
        )

    for field, value in changes.items():
        setattr(vehicle, field, value)

    _full_clean(vehicle)
    vehicle.save()
    return vehicle


@transaction.atomic
def set_vehicle_status(*, vehicle_id, actor, status: str) -> Vehicle:
    if status not in Vehicle.MANUAL_STATUSES:
        raise ValidationFailedError(
            f"Status must be one of: {', '.join(sorted(Vehicle.MANUAL_STATUSES))}",
            code="INVALID_VEHICLE_STATUS",
        )

    vehicle = get_owned_vehicle(vehicle_id=vehicle_id, actor=actor, for_update=True)

    if vehicle.status == Vehicle.STATUS_ON_DELIVERY:
        raise ConflictError(
            "Vehicle is on a delivery; its status follows the trip.",
            code="VEHICLE_ON_DELIVERY",
        )

    vehicle.status = status
    vehicle.save(update_fields=["status", "updated_at"])
    logger.info("Vehicle status set", extra={"vehicle_id": str(vehicle.id), "status": status})
    return vehicle


@transaction.atomic
def retire_vehicle(*, vehicle_id, actor) -> None:
    vehicle = get_owned_vehicle(vehicle_id=vehicle_id, actor=actor, for_update=True)

    if vehicle.status == Vehicle.STATUS_ON_DELIVERY:
        raise ConflictError("Cannot delete a vehicle that is on a delivery.", code="VEHICLE_ON_DELIVERY")

    if vehicle.trips.exists():
        raise ConflictError(
            "Vehicle has trip history; set it Offline instead of deleting it.",
            code="VEHICLE_HAS_TRIPS",
        )

    transporter_id = vehicle.transporter_id
    vehicle.delete()

    TransporterProfile.objects.filter(user_id=transporter_id).update(
        fleet_size=Greatest(F("fleet_size") - 1, 0)
    )
    logger.info("Vehicle retired", extra={"vehicle_id": str(vehicle_id)})
