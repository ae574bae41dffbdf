"""
PATH: users/models/plan.py

SUBSCRIPTION PLAN

Owned by the plan/subscription collaborator; the ledger only reads the
limits it exposes (through core.policies.PlanLimits):
- backdated_days: how far back a reading may be dated
- can_track_credits: whether credit sales are allowed
"""

from __future__ import annotations

import uuid

from django.db import models


class Plan(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True)

    backdated_days = models.PositiveIntegerField(
        default=3,
        help_text="Maximum age (days) of a reading date",
    )
    can_track_credits = models.BooleanField(default=True)

    price_monthly = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name
