"""
======================================================
PATH: readings/models/reading.py
======================================================
NOZZLE READING (PRICED SALE)

One row = one meter reading turned into a priced sale.

Invariants (maintained by readings.services.reading_engine):
- litres_sold = reading_value - previous_reading
- total_amount = litres_sold x price_per_litre (2dp, ROUND_HALF_UP)
- cash + online + credit == total_amount, except initial readings
- credit_amount > 0 implies a CreditTransaction linked to this reading
- is_initial readings sell zero litres

Settlement link:
- settlement is set by the reconciler; a settled reading cannot be
  deleted or re-priced.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models

from core.constants import FUEL_TYPE_CHOICES
from core.exceptions import ledger_error


class NozzleReading(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    nozzle = models.ForeignKey(
        "stations.Nozzle",
        on_delete=models.PROTECT,
        related_name="readings",
    )
    station = models.ForeignKey(
        "stations.Station",
        on_delete=models.PROTECT,
        related_name="readings",
    )
    # denormalized for daily summaries
    fuel_type = models.CharField(max_length=20, choices=FUEL_TYPE_CHOICES)

    entered_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="readings_entered",
    )
    shift = models.ForeignKey(
        "stations.Shift",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="readings",
    )

    reading_date = models.DateField()
    reading_value = models.DecimalField(max_digits=14, decimal_places=3)
    previous_reading = models.DecimalField(max_digits=14, decimal_places=3)
    litres_sold = models.DecimalField(max_digits=14, decimal_places=3, default=Decimal("0.000"))

    price_per_litre = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    cash_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    online_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    credit_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    creditor = models.ForeignKey(
        "credits.Creditor",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="readings",
    )
    settlement = models.ForeignKey(
        "settlements.Settlement",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="readings",
    )

    is_initial = models.BooleanField(default=False)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-reading_date", "-created_at"]
        indexes = [
            models.Index(fields=["nozzle", "reading_date", "created_at"], name="reading_chain_idx"),
            models.Index(fields=["station", "reading_date"], name="reading_station_date_idx"),
        ]

    def __str__(self):
        return f"{self.nozzle_id} {self.reading_date}: {self.reading_value}"

    @property
    def payment_total(self) -> Decimal:
        return self.cash_amount + self.online_amount + self.credit_amount

    def delete(self, *args, **kwargs):
        if self.settlement_id:
            raise ledger_error("READING_SETTLED", reading_id=self.id)
        return super().delete(*args, **kwargs)
