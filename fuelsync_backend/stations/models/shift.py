"""
PATH: stations/models/shift.py

SHIFT

The ledger only asks one question of shifts:
"does this employee have an open (active) shift at this station?"
"""

from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class Shift(models.Model):
    STATUS_ACTIVE = "active"
    STATUS_ENDED = "ended"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_ENDED, "Ended"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    station = models.ForeignKey(
        "stations.Station",
        on_delete=models.CASCADE,
        related_name="shifts",
    )
    employee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="shifts",
    )

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    started_at = models.DateTimeField(default=timezone.now)
    ended_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-started_at"]
        indexes = [
            models.Index(fields=["station", "employee", "status"], name="shift_open_lookup_idx"),
        ]

    @classmethod
    def open_for(cls, *, station, employee):
        return (
            cls.objects.filter(station=station, employee=employee, status=cls.STATUS_ACTIVE)
            .order_by("-started_at")
            .first()
        )

    def __str__(self):
        return f"Shift {self.employee} @ {self.station} ({self.status})"
