import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import fleet.validators


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Vehicle",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("code", models.CharField(blank=True, editable=False, max_length=8)),
                (
                    "category",
                    models.CharField(
                        choices=[("Truck", "Truck"), ("Lorry", "Lorry"), ("Pickup", "Pickup"), ("Van", "Van")],
                        max_length=16,
                    ),
                ),
                (
                    "vehicle_type",
                    models.CharField(
                        choices=[
                            ("Open body", "Open body"),
                            ("Covered body", "Covered body"),
                            ("Refrigerated", "Refrigerated"),
                            ("Container", "Container"),
                        ],
                        max_length=16,
                    ),
                ),
                (
                    "weight_capacity_kg",
                    models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(500)]),
                ),
                (
                    "volume_capacity_l",
                    models.PositiveIntegerField(
                        blank=True, null=True, validators=[django.core.validators.MinValueValidator(100)]
                    ),
                ),
                (
                    "registration_number",
                    models.CharField(max_length=20, unique=True, validators=[fleet.validators.validate_sl_plate]),
                ),
                ("brand", models.CharField(max_length=64)),
                ("vehicle_model", models.CharField(max_length=64)),
                (
                    "fuel_type",
                    models.CharField(
                        choices=[
                            ("Diesel", "Diesel"),
                            ("Petrol", "Petrol"),
                            ("Electric", "Electric"),
                            ("Hybrid", "Hybrid"),
                        ],
                        max_length=16,
                    ),
                ),
                ("manufacturing_year", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("Available", "Available"),
                            ("On Delivery", "On Delivery"),
                            ("Maintenance", "Maintenance"),
                            ("Offline", "Offline"),
                        ],
                        default="Available",
                        max_length=16,
                    ),
                ),
                ("last_maintenance_date", models.DateField(blank=True, null=True)),
                ("next_maintenance_due", models.DateField(blank=True, null=True)),
                ("insurance_expiry", models.DateField(blank=True, null=True)),
                ("registration_expiry", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "transporter",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="vehicles",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["transporter", "status"], name="vehicle_transporter_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("transporter", "code"), name="uq_vehicle_transporter_code"),
                ],
            },
        ),
    ]
