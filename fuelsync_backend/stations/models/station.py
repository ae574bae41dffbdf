"""
======================================================
PATH: stations/models/station.py
======================================================
STATION (directory entity)

Every ledger row (price, reading, creditor, settlement) is owned by
exactly one station; a station is owned by exactly one owner account.

require_shift_for_readings:
- when True, readings can only be recorded by a caller with an open shift
"""

from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models


class Station(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="owned_stations",
    )

    name = models.CharField(max_length=255)
    code = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    city = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=20, blank=True)

    require_shift_for_readings = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(fields=["owner", "name"], name="uniq_station_name_per_owner"),
        ]

    def __str__(self):
        return self.name
