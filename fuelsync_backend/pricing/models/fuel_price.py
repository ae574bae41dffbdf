"""
======================================================
PATH: pricing/models/fuel_price.py
======================================================
FUEL PRICE (EFFECTIVE-DATED)

Rules:
- price > 0
- at most one row per (station, fuel_type, effective_from)
- a row that priced any reading is never edited; a new effective-dated
  row supersedes it (enforced in pricing.services.price_resolver)

Lookup:
- the price for a date is the row with the largest effective_from <= date
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from core.constants import FUEL_TYPE_CHOICES


class FuelPrice(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    station = models.ForeignKey(
        "stations.Station",
        on_delete=models.CASCADE,
        related_name="fuel_prices",
    )
    fuel_type = models.CharField(max_length=20, choices=FUEL_TYPE_CHOICES)

    price = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text="Selling price per litre",
    )
    cost_price = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Purchase cost per litre (optional, for margin reporting)",
    )

    effective_from = models.DateField()

    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="fuel_prices_set",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["station", "fuel_type", "-effective_from"]
        constraints = [
            models.UniqueConstraint(
                fields=["station", "fuel_type", "effective_from"],
                name="uniq_price_per_fuel_per_station_per_date",
            ),
            models.CheckConstraint(
                condition=models.Q(price__gt=Decimal("0.00")),
                name="fuel_price_positive",
            ),
        ]

    def __str__(self):
        return f"{self.fuel_type} @ {self.price} from {self.effective_from}"
