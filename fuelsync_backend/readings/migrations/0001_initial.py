"""
======================================================
PATH: readings/migrations/0001_initial.py
======================================================
MIGRATION: CREATE NozzleReading

creditor + settlement links are added in 0002: both target tables
reference readings themselves.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

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
            name="NozzleReading",
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
                ("reading_date", models.DateField()),
                ("reading_value", models.DecimalField(decimal_places=3, max_digits=14)),
                ("previous_reading", models.DecimalField(decimal_places=3, max_digits=14)),
                (
                    "litres_sold",
                    models.DecimalField(decimal_places=3, default=Decimal("0.000"), max_digits=14),
                ),
                (
                    "price_per_litre",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=8),
                ),
                (
                    "total_amount",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14),
                ),
                (
                    "cash_amount",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14),
                ),
                (
                    "online_amount",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14),
                ),
                (
                    "credit_amount",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14),
                ),
                ("is_initial", models.BooleanField(default=False)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "entered_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="readings_entered",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "nozzle",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="readings",
                        to="stations.nozzle",
                    ),
                ),
                (
                    "shift",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="readings",
                        to="stations.shift",
                    ),
                ),
                (
                    "station",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="readings",
                        to="stations.station",
                    ),
                ),
            ],
            options={"ordering": ["-reading_date", "-created_at"]},
        ),
        migrations.AddIndex(
            model_name="nozzlereading",
            index=models.Index(
                fields=["nozzle", "reading_date", "created_at"], name="reading_chain_idx"
            ),
        ),
        migrations.AddIndex(
            model_name="nozzlereading",
            index=models.Index(fields=["station", "reading_date"], name="reading_station_date_idx"),
        ),
    ]
