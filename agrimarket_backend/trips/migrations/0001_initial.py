import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("fleet", "0001_initial"),
        ("orders", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Trip",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("trip_no", models.CharField(blank=True, editable=False, max_length=16)),
                (
                    "trip_status",
                    models.CharField(
                        choices=[
                            ("Pending", "Pending"),
                            ("Accepted", "Accepted"),
                            ("In Progress", "In Progress"),
                            ("Completed", "Completed"),
                            ("Cancelled", "Cancelled"),
                        ],
                        default="Pending",
                        max_length=16,
                    ),
                ),
                ("pickup_address", models.CharField(max_length=255)),
                ("pickup_city", models.CharField(blank=True, default="", max_length=100)),
                ("pickup_district", models.CharField(blank=True, default="", max_length=100)),
                ("pickup_lat", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("pickup_lng", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("dropoff_address", models.CharField(max_length=255)),
                ("dropoff_city", models.CharField(blank=True, default="", max_length=100)),
                ("dropoff_lat", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("dropoff_lng", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("scheduled_pickup", models.DateTimeField()),
                ("estimated_delivery", models.DateTimeField()),
                ("actual_pickup", models.DateTimeField(blank=True, null=True)),
                ("actual_delivery", models.DateTimeField(blank=True, null=True)),
                ("distance_km", models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True)),
                ("estimated_duration_minutes", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "base_fare",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "distance_charge",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "total_cost",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), editable=False, max_digits=14),
                ),
                (
                    "currency",
                    models.CharField(choices=[("LKR", "LKR"), ("USD", "USD")], default="LKR", max_length=3),
                ),
                ("special_instructions", models.TextField(blank=True, default="")),
                ("cancellation_reason", models.CharField(blank=True, default="", max_length=255)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="trips",
                        to="orders.order",
                    ),
                ),
                (
                    "transporter",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="trips",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "vehicle",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="trips",
                        to="fleet.vehicle",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["transporter", "trip_status"], name="trip_transporter_status_idx"),
                    models.Index(fields=["vehicle", "trip_status"], name="trip_vehicle_status_idx"),
                    models.Index(fields=["scheduled_pickup"], name="trip_scheduled_pickup_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("trip_status", "Cancelled"), _negated=True),
                        fields=("order",),
                        name="uq_trip_active_order",
                    ),
                    models.UniqueConstraint(fields=("transporter", "trip_no"), name="uq_trip_transporter_trip_no"),
                    models.CheckConstraint(
                        condition=models.Q(("estimated_delivery__gt", models.F("scheduled_pickup"))),
                        name="ck_trip_delivery_after_pickup",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="TripCharge",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("description", models.CharField(max_length=255)),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "trip",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="additional_charges",
                        to="trips.trip",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
            },
        ),
        migrations.CreateModel(
            name="TripEvent",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("status", models.CharField(max_length=32)),
                ("note", models.CharField(blank=True, default="", max_length=255)),
                ("timestamp", models.DateTimeField(auto_now_add=True)),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "trip",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="timeline",
                        to="trips.trip",
                    ),
                ),
            ],
            options={
                "ordering": ["timestamp", "id"],
                "indexes": [models.Index(fields=["trip", "timestamp"], name="tripevent_trip_ts_idx")],
            },
        ),
    ]
