# pricing/services/price_resolver.py

"""
PRICE RESOLVER

Purpose:
- Answer "what did a litre of <fuel> cost at <station> on <date>?"

Rules:
- The effective price is the FuelPrice row with the largest
  effective_from <= target date.
- A missing price is reported as found=False. Nothing is defaulted.
  require_price() turns that into PRICE_NOT_SET for callers that cannot
  proceed without a price (the reading engine).
- Resolution is read-only and takes no locks.

Price maintenance (set_fuel_price):
- Each call writes one effective-dated row.
- Re-posting an existing (station, fuel_type, effective_from) replaces the
  price only while no reading has been priced from that row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from django.db import transaction

from core.constants import FUEL_TYPES
from core.exceptions import ledger_error
from core.money import money
from pricing.models import FuelPrice

logger = logging.getLogger("fuelsync.pricing")


@dataclass(frozen=True)
class ResolvedPrice:
    fuel_type: str
    price: Optional[Decimal]
    found: bool
    effective_from: Optional[date] = None
    price_id: Optional[str] = None


def _effective_row(*, station, fuel_type: str, on_date: date) -> Optional[FuelPrice]:
    return (
        FuelPrice.objects.filter(
            station=station,
            fuel_type=fuel_type,
            effective_from__lte=on_date,
        )
        .order_by("-effective_from")
        .first()
    )


def resolve_price(*, station, fuel_type: str, on_date: date) -> ResolvedPrice:
    row = _effective_row(station=station, fuel_type=fuel_type, on_date=on_date)
    if row is None:
        return ResolvedPrice(fuel_type=fuel_type, price=None, found=False)

    return ResolvedPrice(
        fuel_type=fuel_type,
        price=row.price,
        found=True,
        effective_from=row.effective_from,
        price_id=str(row.id),
    )


def require_price(*, station, fuel_type: str, on_date: date) -> ResolvedPrice:
    resolved = resolve_price(station=station, fuel_type=fuel_type, on_date=on_date)
    if not resolved.found:
        raise ledger_error("PRICE_NOT_SET", fuel_type=fuel_type, on_date=on_date)
    return resolved


def current_prices(*, station, on_date: date) -> list[ResolvedPrice]:
    """
    Effective price per fuel type for a station.

    Covers every fuel type that has a price row or an active nozzle,
    so fuel types still missing a price show up as found=False.
    """
    from stations.models import Nozzle

    priced = set(
        FuelPrice.objects.filter(station=station).values_list("fuel_type", flat=True)
    )
    dispensed = set(
        Nozzle.objects.filter(station=station, status=Nozzle.STATUS_ACTIVE).values_list(
            "fuel_type", flat=True
        )
    )

    return [
        resolve_price(station=station, fuel_type=fuel_type, on_date=on_date)
        for fuel_type in sorted(priced | dispensed)
    ]


def _row_has_priced_readings(row: FuelPrice) -> bool:
    from readings.models import NozzleReading

    qs = NozzleReading.objects.filter(
        station_id=row.station_id,
        fuel_type=row.fuel_type,
        is_initial=False,
        reading_date__gte=row.effective_from,
    )

    next_row = (
        FuelPrice.objects.filter(
            station_id=row.station_id,
            fuel_type=row.fuel_type,
            effective_from__gt=row.effective_from,
        )
        .order_by("effective_from")
        .first()
    )
    if next_row is not None:
        qs = qs.filter(reading_date__lt=next_row.effective_from)

    return qs.exists()


@transaction.atomic
def set_fuel_price(
    *,
    station,
    fuel_type: str,
    price,
    effective_from: date,
    user=None,
    cost_price=None,
) -> tuple[FuelPrice, bool]:
    """
    Returns (row, created).
    """
    if fuel_type not in FUEL_TYPES:
        raise ValueError(f"Unknown fuel type: {fuel_type}")

    price = money(price)
    if price <= Decimal("0.00"):
        raise ledger_error("INVALID_PRICE")

    if cost_price not in (None, ""):
        cost_price = money(cost_price)
        if cost_price < Decimal("0.00"):
            raise ledger_error("NEGATIVE_AMOUNT", field="cost_price")
    else:
        cost_price = None

    existing = (
        FuelPrice.objects.select_for_update()
        .filter(station=station, fuel_type=fuel_type, effective_from=effective_from)
        .first()
    )

    if existing is None:
        row = FuelPrice.objects.create(
            station=station,
            fuel_type=fuel_type,
            price=price,
            cost_price=cost_price,
            effective_from=effective_from,
            updated_by=user,
        )
        logger.info(
            "Fuel price set",
            extra={
                "station_id": str(station.id),
                "fuel_type": fuel_type,
                "price": str(price),
                "effective_from": effective_from.isoformat(),
            },
        )
        return row, True

    if existing.price != price and _row_has_priced_readings(existing):
        raise ledger_error(
            "PRICE_IN_USE",
            fuel_type=fuel_type,
            effective_from=effective_from,
        )

    existing.price = price
    existing.cost_price = cost_price
    existing.updated_by = user
    existing.save(update_fields=["price", "cost_price", "updated_by", "updated_at"])

    logger.info(
        "Fuel price replaced",
        extra={
            "station_id": str(station.id),
            "fuel_type": fuel_type,
            "price": str(price),
            "effective_from": effective_from.isoformat(),
        },
    )
    return existing, False
