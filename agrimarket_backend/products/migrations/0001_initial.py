import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(db_index=True, max_length=255)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("Vegetables", "Vegetables"),
                            ("Fruits", "Fruits"),
                            ("Grains", "Grains"),
                            ("Spices", "Spices"),
                            ("Other", "Other"),
                        ],
                        default="Other",
                        max_length=32,
                    ),
                ),
                (
                    "unit",
                    models.CharField(
                        choices=[("kg", "Kilogram"), ("ton", "Ton"), ("piece", "Piece"), ("bunch", "Bunch")],
                        default="kg",
                        max_length=16,
                    ),
                ),
                ("quantity", models.PositiveIntegerField(default=0)),
                ("price", models.DecimalField(decimal_places=2, help_text="Unit price in LKR", max_digits=12)),
                ("pickup_address", models.CharField(blank=True, max_length=255)),
                ("pickup_city", models.CharField(blank=True, max_length=100)),
                ("pickup_district", models.CharField(blank=True, db_index=True, max_length=100)),
                ("pickup_lat", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("pickup_lng", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("is_available", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "farmer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="products",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["name"], name="product_name_idx"),
                    models.Index(fields=["farmer", "created_at"], name="product_farmer_created_idx"),
                ],
            },
        ),
    ]
