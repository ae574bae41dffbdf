"""
======================================================
PATH: pricing/migrations/0001_initial.py
======================================================
MIGRATION: CREATE FuelPrice (effective-dated price list)
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("stations", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="FuelPrice",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                (
                    "fuel_type",
                    models.CharField(
                        choices=[
                            ("petrol", "Petrol"),
                            ("diesel", "Diesel"),
                            ("premium_petrol", "Premium Petrol"),
                            ("premium_diesel", "Premium Diesel"),
                            ("cng", "CNG"),
                            ("lpg", "LPG"),
                            ("ev_charging", "EV Charging"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Selling price per litre",
                        max_digits=8,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                (
                    "cost_price",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Purchase cost per litre (optional, for margin reporting)",
                        max_digits=8,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                ("effective_from", models.DateField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "station",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="fuel_prices",
                        to="stations.station",
                    ),
                ),
                (
                    "updated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="fuel_prices_set",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"ordering": ["station", "fuel_type", "-effective_from"]},
        ),
        migrations.AddConstraint(
            model_name="fuelprice",
            constraint=models.UniqueConstraint(
                fields=("station", "fuel_type", "effective_from"),
                name="uniq_price_per_fuel_per_station_per_date",
            ),
        ),
        migrations.AddConstraint(
            model_name="fuelprice",
            constraint=models.CheckConstraint(
                condition=models.Q(price__gt=Decimal("0.00")),
                name="fuel_price_positive",
            ),
        ),
    ]
