"""
======================================================
PATH: stations/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Station, Pump, Nozzle, Shift
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

STATUS_CHOICES = [("active", "Active"), ("inactive", "Inactive"), ("repair", "Repair")]

FUEL_TYPE_CHOICES = [
    ("petrol", "Petrol"),
    ("diesel", "Diesel"),
    ("premium_petrol", "Premium Petrol"),
    ("premium_diesel", "Premium Diesel"),
    ("cng", "CNG"),
    ("lpg", "LPG"),
    ("ev_charging", "EV Charging"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("users", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Station",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("code", models.CharField(blank=True, max_length=20)),
                ("address", models.TextField(blank=True)),
                ("city", models.CharField(blank=True, max_length=100)),
                ("phone", models.CharField(blank=True, max_length=20)),
                ("require_shift_for_readings", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="owned_stations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.AddConstraint(
            model_name="station",
            constraint=models.UniqueConstraint(
                fields=("owner", "name"), name="uniq_station_name_per_owner"
            ),
        ),
        migrations.CreateModel(
            name="Pump",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("pump_number", models.PositiveIntegerField()),
                ("name", models.CharField(blank=True, max_length=100)),
                (
                    "status",
                    models.CharField(choices=STATUS_CHOICES, default="active", max_length=10),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "station",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="pumps",
                        to="stations.station",
                    ),
                ),
            ],
            options={"ordering": ["station", "pump_number"]},
        ),
        migrations.AddConstraint(
            model_name="pump",
            constraint=models.UniqueConstraint(
                fields=("station", "pump_number"), name="uniq_pump_number_per_station"
            ),
        ),
        migrations.CreateModel(
            name="Nozzle",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("nozzle_number", models.PositiveIntegerField()),
                ("fuel_type", models.CharField(choices=FUEL_TYPE_CHOICES, max_length=20)),
                (
                    "status",
                    models.CharField(choices=STATUS_CHOICES, default="active", max_length=10),
                ),
                (
                    "initial_reading",
                    models.DecimalField(
                        decimal_places=3,
                        default=Decimal("0.000"),
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                (
                    "last_reading",
                    models.DecimalField(blank=True, decimal_places=3, max_digits=14, null=True),
                ),
                ("last_reading_date", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "pump",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="nozzles",
                        to="stations.pump",
                    ),
                ),
                (
                    "station",
                    models.ForeignKey(
                        help_text="Denormalized from pump.station",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="nozzles",
                        to="stations.station",
                    ),
                ),
            ],
            options={"ordering": ["pump", "nozzle_number"]},
        ),
        migrations.AddConstraint(
            model_name="nozzle",
            constraint=models.UniqueConstraint(
                fields=("pump", "nozzle_number"), name="uniq_nozzle_number_per_pump"
            ),
        ),
        migrations.CreateModel(
            name="Shift",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("ended", "Ended")],
                        default="active",
                        max_length=10,
                    ),
                ),
                ("started_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("ended_at", models.DateTimeField(blank=True, null=True)),
                (
                    "employee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="shifts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "station",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="shifts",
                        to="stations.station",
                    ),
                ),
            ],
            options={"ordering": ["-started_at"]},
        ),
        migrations.AddIndex(
            model_name="shift",
            index=models.Index(
                fields=["station", "employee", "status"], name="shift_open_lookup_idx"
            ),
        ),
    ]
