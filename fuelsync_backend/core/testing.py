# core/testing.py

"""
TEST FIXTURE BUILDERS

Small factories shared by the ledger test suites. Every builder takes
keyword overrides so a test spells out only what it cares about.
"""

from __future__ import annotations

import itertools
from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model

from core.constants import FUEL_PETROL
from core.policies import PlanLimits
from permissions.roles import ROLE_EMPLOYEE, ROLE_MANAGER, ROLE_OWNER

_seq = itertools.count(1)

DEFAULT_LIMITS = PlanLimits(backdated_days=3, credit_enabled=True)


def make_plan(**overrides):
    from users.models import Plan

    fields = {
        "name": f"Plan {next(_seq)}",
        "backdated_days": 3,
        "can_track_credits": True,
    }
    fields.update(overrides)
    return Plan.objects.create(**fields)


def make_user(role=ROLE_OWNER, **overrides):
    User = get_user_model()
    n = next(_seq)
    fields = {
        "email": f"{role}{n}@fuelsync.test",
        "password": "pass",
        "role": role,
    }
    fields.update(overrides)
    return User.objects.create_user(**fields)


def make_station(owner=None, **overrides):
    from stations.models import Station

    fields = {
        "owner": owner or make_user(ROLE_OWNER),
        "name": f"Station {next(_seq)}",
    }
    fields.update(overrides)
    return Station.objects.create(**fields)


def make_staff(station, role=ROLE_EMPLOYEE, **overrides):
    return make_user(role, station=station, **overrides)


def make_manager(station, **overrides):
    return make_staff(station, ROLE_MANAGER, **overrides)


def make_nozzle(station, fuel_type=FUEL_PETROL, initial_reading="0", **overrides):
    from stations.models import Nozzle, Pump

    pump = overrides.pop("pump", None) or Pump.objects.create(
        station=station, pump_number=next(_seq)
    )
    fields = {
        "pump": pump,
        "station": station,
        "nozzle_number": 1,
        "fuel_type": fuel_type,
        "initial_reading": Decimal(str(initial_reading)),
    }
    fields.update(overrides)
    return Nozzle.objects.create(**fields)


def set_price(station, price, effective_from: date, fuel_type=FUEL_PETROL, user=None):
    from pricing.services.price_resolver import set_fuel_price

    row, _created = set_fuel_price(
        station=station,
        fuel_type=fuel_type,
        price=Decimal(str(price)),
        effective_from=effective_from,
        user=user,
    )
    return row


def make_creditor(station, credit_limit=None, **overrides):
    from credits.models import Creditor

    fields = {
        "station": station,
        "name": f"Fleet {next(_seq)}",
        "credit_limit": Decimal(str(credit_limit)) if credit_limit is not None else None,
    }
    fields.update(overrides)
    return Creditor.objects.create(**fields)
