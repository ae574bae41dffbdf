"""
======================================================
PATH: credits/models/creditor.py
======================================================
CREDITOR (customer buying fuel against a running balance)

Rules:
- current_balance == sum(credit entries) - sum(settlement entries)
  Mutated ONLY through credits.services.credit_ledger.
- credit_limit NULL = no limit.
- A negative balance is an advance (creditor overpaid).
- Flagged creditors may still pay but cannot take new credit.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Creditor(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    station = models.ForeignKey(
        "stations.Station",
        on_delete=models.PROTECT,
        related_name="creditors",
    )

    name = models.CharField(max_length=255)
    contact_person = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    vehicle_number = models.CharField(max_length=50, blank=True)

    credit_limit = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Maximum outstanding balance; empty means no limit",
    )
    credit_period_days = models.PositiveIntegerField(default=30)

    current_balance = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        editable=False,
    )
    last_transaction_date = models.DateField(null=True, blank=True, editable=False)
    last_payment_date = models.DateField(null=True, blank=True, editable=False)

    is_active = models.BooleanField(default=True)
    is_flagged = models.BooleanField(default=False)
    flag_reason = models.TextField(blank=True)
    flagged_at = models.DateTimeField(null=True, blank=True)

    notes = models.TextField(blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="creditors_created",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["station", "is_active"], name="creditor_station_active_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.current_balance})"

    @property
    def available_credit(self):
        if self.credit_limit is None:
            return None
        return self.credit_limit - self.current_balance
