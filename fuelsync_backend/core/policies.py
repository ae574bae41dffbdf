# core/policies.py

"""
PLAN LIMITS (EXPLICIT INPUT TO LEDGER OPERATIONS)

The ledger services never look up the caller's plan themselves.
The HTTP edge resolves a PlanLimits value and passes it in:

    limits = PlanLimits.for_station(station)
    submit_reading(..., limits=limits)

Fallback: when the station owner has no plan, settings defaults apply
(DEFAULT_BACKDATED_DAYS, DEFAULT_CREDIT_ENABLED).
"""

from __future__ import annotations

from dataclasses import dataclass

from django.conf import settings


@dataclass(frozen=True)
class PlanLimits:
    backdated_days: int
    credit_enabled: bool

    @classmethod
    def defaults(cls) -> "PlanLimits":
        return cls(
            backdated_days=int(getattr(settings, "DEFAULT_BACKDATED_DAYS", 3)),
            credit_enabled=bool(getattr(settings, "DEFAULT_CREDIT_ENABLED", True)),
        )

    @classmethod
    def for_station(cls, station) -> "PlanLimits":
        owner = getattr(station, "owner", None)
        plan = getattr(owner, "plan", None) if owner is not None else None
        if plan is None:
            return cls.defaults()

        return cls(
            backdated_days=int(plan.backdated_days),
            credit_enabled=bool(plan.can_track_credits),
        )
