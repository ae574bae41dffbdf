"""
======================================================
PATH: settlements/models/settlement.py
======================================================
DAILY CASH SETTLEMENT

One row per (station, settlement_date).

All figures are server-computed by settlements.services.reconciler:
- expected_cash: sum of cash_amount over the date's non-initial readings
- variance = expected_cash - actual_cash   (positive = shortfall)
- variance_percent: NULL when expected_cash is zero but cash was counted
- variance_online / variance_credit: expected - manager-confirmed, NULL
  when the manager did not confirm that tender
- variance_status: OK | REVIEW | INVESTIGATE

Lifecycle:
- recorded -> approved
- a recorded settlement may be re-submitted (revision increments)
- an approved settlement is final
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models


class Settlement(models.Model):
    STATUS_RECORDED = "recorded"
    STATUS_APPROVED = "approved"

    STATUS_CHOICES = [
        (STATUS_RECORDED, "Recorded"),
        (STATUS_APPROVED, "Approved"),
    ]

    VARIANCE_OK = "OK"
    VARIANCE_REVIEW = "REVIEW"
    VARIANCE_INVESTIGATE = "INVESTIGATE"

    VARIANCE_CHOICES = [
        (VARIANCE_OK, "OK"),
        (VARIANCE_REVIEW, "Review"),
        (VARIANCE_INVESTIGATE, "Investigate"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    station = models.ForeignKey(
        "stations.Station",
        on_delete=models.PROTECT,
        related_name="settlements",
    )
    settlement_date = models.DateField()

    expected_cash = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    actual_cash = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    variance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    variance_percent = models.DecimalField(max_digits=20, decimal_places=2, null=True, blank=True)
    variance_status = models.CharField(
        max_length=12, choices=VARIANCE_CHOICES, default=VARIANCE_OK
    )

    # informational totals from the same readings
    expected_online = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    expected_credit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    # manager-confirmed tenders; NULL when not confirmed
    actual_online = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    actual_credit = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    variance_online = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    variance_credit = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)

    reading_count = models.PositiveIntegerField(default=0)

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_RECORDED)
    revision = models.PositiveIntegerField(default=1)
    notes = models.TextField(blank=True)

    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="settlements_recorded",
    )
    recorded_at = models.DateTimeField()

    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="settlements_approved",
    )
    approved_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-settlement_date"]
        constraints = [
            models.UniqueConstraint(
                fields=["station", "settlement_date"],
                name="uniq_settlement_per_station_per_date",
            ),
        ]

    def __str__(self):
        return f"{self.station_id} {self.settlement_date} ({self.variance_status})"

    @property
    def is_final(self) -> bool:
        return self.status == self.STATUS_APPROVED
