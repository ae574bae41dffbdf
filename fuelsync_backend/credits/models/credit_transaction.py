"""
======================================================
PATH: credits/models/credit_transaction.py
======================================================
CREDIT TRANSACTION (APPEND-ONLY LEDGER ENTRY)

Guarantees:
- Immutable once created (no updates, no deletes)
- amount is always positive; direction is via transaction_type
    credit      -> increases the creditor balance
    settlement  -> decreases the creditor balance
    adjustment  -> reserved; not written by the ledger services
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from core.constants import FUEL_TYPE_CHOICES


class CreditTransaction(models.Model):
    TYPE_CREDIT = "credit"
    TYPE_SETTLEMENT = "settlement"
    TYPE_ADJUSTMENT = "adjustment"

    TYPE_CHOICES = [
        (TYPE_CREDIT, "Credit"),
        (TYPE_SETTLEMENT, "Settlement"),
        (TYPE_ADJUSTMENT, "Adjustment"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    station = models.ForeignKey(
        "stations.Station",
        on_delete=models.PROTECT,
        related_name="credit_transactions",
    )
    creditor = models.ForeignKey(
        "credits.Creditor",
        on_delete=models.PROTECT,
        related_name="transactions",
    )

    transaction_type = models.CharField(max_length=12, choices=TYPE_CHOICES)

    fuel_type = models.CharField(max_length=20, choices=FUEL_TYPE_CHOICES, blank=True)
    litres = models.DecimalField(max_digits=14, decimal_places=3, null=True, blank=True)
    price_per_litre = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text="Positive monetary value",
    )

    transaction_date = models.DateField()

    nozzle_reading = models.ForeignKey(
        "readings.NozzleReading",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="credit_transactions",
    )

    reference_number = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)

    entered_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="credit_transactions_entered",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-transaction_date", "-created_at"]
        indexes = [
            models.Index(fields=["creditor", "transaction_type"], name="credit_txn_creditor_type_idx"),
            models.Index(fields=["station", "transaction_date"], name="credit_txn_station_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=Decimal("0.00")),
                name="credit_transaction_amount_gt_zero",
            ),
        ]

    def __str__(self):
        return f"{self.transaction_type} {self.amount} -> {self.creditor_id}"

    @property
    def signed_amount(self) -> Decimal:
        if self.transaction_type == self.TYPE_SETTLEMENT:
            return -self.amount
        return self.amount

    def clean(self):
        if self.transaction_type not in {t for t, _ in self.TYPE_CHOICES}:
            raise ValidationError("Invalid transaction_type")
        if self.amount is None or self.amount <= 0:
            raise ValidationError("Credit transaction amount must be > 0")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("CreditTransaction records are immutable and cannot be modified")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("CreditTransaction records are immutable and cannot be deleted")
