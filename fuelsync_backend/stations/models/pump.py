"""
======================================================
PATH: stations/models/pump.py
======================================================
PUMP + NOZZLE (directory entities)

Nozzle rules:
- nozzle_number unique within its pump
- status gates whether readings may be recorded (only "active")
- initial_reading: meter value when the nozzle was commissioned
- last_reading / last_reading_date: cache maintained by the reading engine
  (always the value of the latest reading by date)
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from core.constants import FUEL_TYPE_CHOICES


class Pump(models.Model):
    STATUS_ACTIVE = "active"
    STATUS_INACTIVE = "inactive"
    STATUS_REPAIR = "repair"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_INACTIVE, "Inactive"),
        (STATUS_REPAIR, "Repair"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    station = models.ForeignKey(
        "stations.Station",
        on_delete=models.CASCADE,
        related_name="pumps",
    )
    pump_number = models.PositiveIntegerField()
    name = models.CharField(max_length=100, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["station", "pump_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["station", "pump_number"], name="uniq_pump_number_per_station"
            ),
        ]

    def __str__(self):
        return self.name or f"Pump {self.pump_number}"


class Nozzle(models.Model):
    STATUS_ACTIVE = "active"
    STATUS_INACTIVE = "inactive"
    STATUS_REPAIR = "repair"

    STATUS_CHOICES = Pump.STATUS_CHOICES

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    pump = models.ForeignKey(Pump, on_delete=models.CASCADE, related_name="nozzles")
    station = models.ForeignKey(
        "stations.Station",
        on_delete=models.CASCADE,
        related_name="nozzles",
        help_text="Denormalized from pump.station",
    )

    nozzle_number = models.PositiveIntegerField()
    fuel_type = models.CharField(max_length=20, choices=FUEL_TYPE_CHOICES)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    initial_reading = models.DecimalField(
        max_digits=14,
        decimal_places=3,
        default=Decimal("0.000"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    last_reading = models.DecimalField(max_digits=14, decimal_places=3, null=True, blank=True)
    last_reading_date = models.DateField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["pump", "nozzle_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["pump", "nozzle_number"], name="uniq_nozzle_number_per_pump"
            ),
        ]

    def save(self, *args, **kwargs):
        if self.pump_id and not self.station_id:
            self.station_id = self.pump.station_id
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.pump} / Nozzle {self.nozzle_number} ({self.fuel_type})"
