# readings/services/reading_engine.py

"""
READING ENGINE (APPLICATION SERVICE)

Purpose:
- Turn a raw meter reading into a priced sale, atomically.

submit_reading() steps (one DB transaction, nozzle row locked):
 1. nozzle exists and is active
 2. previous value = latest reading of the nozzle dated <= reading_date
    (ties: creation order), else the nozzle's initial reading
 3. reading_value >= previous value
 4. litres_sold = reading_value - previous value
 5. price effective on reading_date (PRICE_NOT_SET otherwise)
 6. total_amount = litres_sold x price (2dp, ROUND_HALF_UP)
 7. |cash + online + credit - total| < tolerance, no negative legs
 8. reading_date not in the future, not older than the plan allows
 9. open shift when the station requires one
10. credit leg > 0: creditor required, credit ledger joins this transaction
11. persist reading, re-chain the successor, refresh the nozzle cache

Initial readings:
- Only the very first reading of a nozzle may be flagged is_initial.
- They sell zero litres and carry no payment.

Out-of-order (backdated) inserts:
- When a later reading already exists, the new value must not exceed it.
- The immediate successor now follows the new reading, so its
  previous_reading / litres_sold / total_amount are recomputed at its own
  price. The change in its total is absorbed by its cash leg first, then
  its online leg. Credit legs are never rewritten.
- A settled successor blocks the insert (READING_SETTLED).

Hard rules:
- Money is computed server-side.
- Any failure rolls back everything: no reading without its credit entry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Mapping, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from core.exceptions import ledger_error
from core.money import ZERO, litres as to_litres, money, sale_total
from core.policies import PlanLimits
from credits.services.credit_ledger import extend_credit
from pricing.services.price_resolver import require_price, resolve_price
from readings.models import NozzleReading
from stations.models import Nozzle, Shift

logger = logging.getLogger("fuelsync.readings")


def _split_tolerance() -> Decimal:
    return Decimal(str(getattr(settings, "PAYMENT_SPLIT_TOLERANCE", "0.01")))


# =========================================================
# PAYMENT SPLIT
# =========================================================
@dataclass(frozen=True)
class PaymentSplit:
    cash: Decimal = ZERO
    online: Decimal = ZERO
    credit: Decimal = ZERO

    @classmethod
    def from_mapping(cls, data: Optional[Mapping]) -> Optional["PaymentSplit"]:
        if data is None:
            return None
        return cls(
            cash=money(data.get("cash_amount")),
            online=money(data.get("online_amount")),
            credit=money(data.get("credit_amount")),
        )

    @property
    def total(self) -> Decimal:
        return self.cash + self.online + self.credit


def _validate_split(split: PaymentSplit, total_amount: Decimal) -> None:
    for field, value in (
        ("cash_amount", split.cash),
        ("online_amount", split.online),
        ("credit_amount", split.credit),
    ):
        if value < ZERO:
            raise ledger_error("NEGATIVE_AMOUNT", field=field)

    if abs(split.total - total_amount) >= _split_tolerance():
        raise ledger_error(
            "PAYMENT_SPLIT_MISMATCH",
            paid=split.total,
            total_amount=total_amount,
        )


# =========================================================
# CHAIN LOOKUPS
# =========================================================
def _prior_reading(*, nozzle, on_date: date) -> Optional[NozzleReading]:
    return (
        NozzleReading.objects.filter(nozzle=nozzle, reading_date__lte=on_date)
        .order_by("-reading_date", "-created_at")
        .first()
    )


def _successor_reading(*, nozzle, on_date: date) -> Optional[NozzleReading]:
    return (
        NozzleReading.objects.select_for_update()
        .filter(nozzle=nozzle, reading_date__gt=on_date)
        .order_by("reading_date", "created_at")
        .first()
    )


def _lock_nozzle(nozzle_id) -> Nozzle:
    try:
        return Nozzle.objects.select_for_update().get(id=nozzle_id)
    except Nozzle.DoesNotExist:
        raise ledger_error("NOZZLE_NOT_FOUND", nozzle_id=nozzle_id)


def _check_reading_date(*, reading_date: date, today: date, limits: PlanLimits) -> None:
    if reading_date > today:
        raise ledger_error("READING_DATE_IN_FUTURE", reading_date=reading_date)

    days_back = (today - reading_date).days
    if days_back > limits.backdated_days:
        raise ledger_error(
            "BACKDATE_LIMIT_EXCEEDED",
            backdated_days=limits.backdated_days,
            reading_date=reading_date,
            days_back=days_back,
        )


def _ensure_date_open(*, station_id, reading_date: date) -> None:
    from settlements.models import Settlement

    finalized = Settlement.objects.filter(
        station_id=station_id,
        settlement_date=reading_date,
        status=Settlement.STATUS_APPROVED,
    ).exists()
    if finalized:
        raise ledger_error("SETTLEMENT_FINALIZED", settlement_date=reading_date)


def _rechain_successor(successor: NozzleReading, *, new_previous: Decimal) -> NozzleReading:
    """
    Point the successor at the newly inserted reading and re-price it.
    """
    if successor.settlement_id:
        raise ledger_error("READING_SETTLED", reading_id=successor.id)

    new_litres = to_litres(successor.reading_value - new_previous)
    new_total = sale_total(new_litres, successor.price_per_litre)
    delta = new_total - successor.total_amount

    cash = successor.cash_amount + delta
    online = successor.online_amount
    if cash < ZERO:
        online += cash
        cash = ZERO
    if online < ZERO:
        raise ledger_error("READING_CHAIN_CONFLICT", successor_id=successor.id, delta=delta)

    successor.previous_reading = new_previous
    successor.litres_sold = new_litres
    successor.total_amount = new_total
    successor.cash_amount = money(cash)
    successor.online_amount = money(online)
    successor.save(
        update_fields=[
            "previous_reading",
            "litres_sold",
            "total_amount",
            "cash_amount",
            "online_amount",
            "updated_at",
        ]
    )

    logger.info(
        "Successor reading re-chained",
        extra={
            "reading_id": str(successor.id),
            "previous_reading": str(new_previous),
            "total_delta": str(delta),
        },
    )
    return successor


# =========================================================
# SUBMIT
# =========================================================
@transaction.atomic
def submit_reading(
    *,
    nozzle_id,
    reading_date: date,
    reading_value,
    user,
    limits: PlanLimits,
    payment: Optional[PaymentSplit] = None,
    creditor_id=None,
    is_initial: bool = False,
    notes: str = "",
    today: Optional[date] = None,
) -> NozzleReading:
    today = today or timezone.localdate()
    reading_value = to_litres(reading_value)

    if reading_value < ZERO:
        raise ledger_error("NEGATIVE_AMOUNT", field="reading_value")

    # 1. nozzle
    nozzle = _lock_nozzle(nozzle_id)
    if nozzle.status != Nozzle.STATUS_ACTIVE:
        raise ledger_error("NOZZLE_INACTIVE", nozzle_id=nozzle.id, status=nozzle.status)
    station = nozzle.station

    # 2. previous reading
    prior = _prior_reading(nozzle=nozzle, on_date=reading_date)
    successor = _successor_reading(nozzle=nozzle, on_date=reading_date)

    if is_initial:
        if prior is not None or successor is not None:
            raise ledger_error("INITIAL_READING_EXISTS", nozzle_id=nozzle.id)
        previous_value = reading_value
    else:
        if successor is not None and successor.is_initial:
            raise ledger_error(
                "READING_BEFORE_INITIAL",
                reading_date=reading_date,
                initial_date=successor.reading_date,
            )
        previous_value = prior.reading_value if prior is not None else nozzle.initial_reading

    # 3. must increase (and must not overtake the next recorded reading)
    if reading_value < previous_value:
        raise ledger_error(
            "READING_MUST_INCREASE",
            reading_value=reading_value,
            previous_reading=previous_value,
        )
    if successor is not None and reading_value > successor.reading_value:
        raise ledger_error(
            "READING_EXCEEDS_NEXT",
            reading_value=reading_value,
            next_reading=successor.reading_value,
            next_date=successor.reading_date,
        )

    # 4. litres
    litres_sold = to_litres(reading_value - previous_value)

    # 5-7. price, total, split
    if is_initial:
        resolved = resolve_price(station=station, fuel_type=nozzle.fuel_type, on_date=reading_date)
        price = resolved.price if resolved.found else ZERO
        total_amount = ZERO
        split = PaymentSplit()
        creditor_id = None
    else:
        price = require_price(
            station=station, fuel_type=nozzle.fuel_type, on_date=reading_date
        ).price
        total_amount = sale_total(litres_sold, price)
        split = payment if payment is not None else PaymentSplit(cash=total_amount)
        _validate_split(split, total_amount)

    # 8. backdate window
    _check_reading_date(reading_date=reading_date, today=today, limits=limits)
    _ensure_date_open(station_id=station.id, reading_date=reading_date)

    # 9. shift
    shift = Shift.open_for(station=station, employee=user)
    if station.require_shift_for_readings and shift is None:
        raise ledger_error("SHIFT_REQUIRED")

    # 10. credit preconditions
    if split.credit > ZERO:
        if not limits.credit_enabled:
            raise ledger_error("CREDIT_FEATURE_DISABLED")
        if not creditor_id:
            raise ledger_error("CREDITOR_REQUIRED")
    else:
        creditor_id = None

    # 11. persist
    reading = NozzleReading.objects.create(
        nozzle=nozzle,
        station=station,
        fuel_type=nozzle.fuel_type,
        entered_by=user,
        shift=shift,
        reading_date=reading_date,
        reading_value=reading_value,
        previous_reading=previous_value,
        litres_sold=litres_sold,
        price_per_litre=price,
        total_amount=total_amount,
        cash_amount=split.cash,
        online_amount=split.online,
        credit_amount=split.credit,
        creditor_id=creditor_id,
        is_initial=is_initial,
        notes=(notes or "").strip(),
    )

    if split.credit > ZERO:
        extend_credit(
            creditor_id=creditor_id,
            station=station,
            amount=split.credit,
            litres=split.credit / price,
            fuel_type=nozzle.fuel_type,
            price_per_litre=price,
            linked_reading=reading,
            transaction_date=reading_date,
            user=user,
            notes=f"Credit sale from reading {reading.id}",
        )

    if successor is not None:
        _rechain_successor(successor, new_previous=reading_value)
    else:
        nozzle.last_reading = reading_value
        nozzle.last_reading_date = reading_date
        nozzle.save(update_fields=["last_reading", "last_reading_date"])

    logger.info(
        "Reading recorded",
        extra={
            "reading_id": str(reading.id),
            "nozzle_id": str(nozzle.id),
            "station_id": str(station.id),
            "reading_date": reading_date.isoformat(),
            "litres_sold": str(litres_sold),
            "total_amount": str(total_amount),
            "credit_amount": str(split.credit),
            "backdated": successor is not None,
        },
    )
    return reading


# =========================================================
# PAYMENT CORRECTION
# =========================================================
@transaction.atomic
def update_reading_payment(*, reading_id, cash_amount, online_amount, user, station=None) -> NozzleReading:
    """
    Re-split the cash/online legs of a reading. The credit leg is fixed
    because it is already on the creditor's ledger.
    """
    qs = NozzleReading.objects.select_for_update()
    if station is not None:
        qs = qs.filter(station=station)

    try:
        reading = qs.get(id=reading_id)
    except NozzleReading.DoesNotExist:
        raise ledger_error("READING_NOT_FOUND", reading_id=reading_id)

    if reading.settlement_id:
        raise ledger_error("READING_SETTLED", reading_id=reading.id)

    if reading.is_initial:
        split = PaymentSplit()
    else:
        split = PaymentSplit(
            cash=money(cash_amount),
            online=money(online_amount),
            credit=reading.credit_amount,
        )
        _validate_split(split, reading.total_amount)

    reading.cash_amount = split.cash
    reading.online_amount = split.online
    reading.save(update_fields=["cash_amount", "online_amount", "updated_at"])

    logger.info(
        "Reading payment updated",
        extra={
            "reading_id": str(reading.id),
            "cash_amount": str(split.cash),
            "online_amount": str(split.online),
            "by": str(user.id),
        },
    )
    return reading


# =========================================================
# READ MODELS
# =========================================================
@dataclass(frozen=True)
class PreviousReading:
    nozzle_id: str
    fuel_type: str
    previous_reading: Decimal
    previous_date: Optional[date]
    is_first_reading: bool
    price_per_litre: Optional[Decimal]


def previous_reading_for(*, nozzle, on_date: date) -> PreviousReading:
    prior = _prior_reading(nozzle=nozzle, on_date=on_date)
    resolved = resolve_price(station=nozzle.station, fuel_type=nozzle.fuel_type, on_date=on_date)

    return PreviousReading(
        nozzle_id=str(nozzle.id),
        fuel_type=nozzle.fuel_type,
        previous_reading=prior.reading_value if prior is not None else nozzle.initial_reading,
        previous_date=prior.reading_date if prior is not None else None,
        is_first_reading=not NozzleReading.objects.filter(nozzle=nozzle).exists(),
        price_per_litre=resolved.price,
    )


def daily_reading_summary(*, station, on_date: date) -> dict:
    rows = (
        NozzleReading.objects.filter(station=station, reading_date=on_date, is_initial=False)
        .values("fuel_type")
        .annotate(
            litres=Sum("litres_sold"),
            total=Sum("total_amount"),
            cash=Sum("cash_amount"),
            online=Sum("online_amount"),
            credit=Sum("credit_amount"),
            readings=Count("id"),
        )
        .order_by("fuel_type")
    )

    by_fuel = [
        {
            "fuel_type": r["fuel_type"],
            "litres": to_litres(r["litres"] or 0),
            "total_amount": money(r["total"]),
            "cash_amount": money(r["cash"]),
            "online_amount": money(r["online"]),
            "credit_amount": money(r["credit"]),
            "reading_count": r["readings"],
        }
        for r in rows
    ]

    return {
        "station_id": str(station.id),
        "date": on_date,
        "by_fuel_type": by_fuel,
        "total_litres": to_litres(sum((r["litres"] for r in by_fuel), ZERO)),
        "total_amount": money(sum((r["total_amount"] for r in by_fuel), ZERO)),
        "cash_amount": money(sum((r["cash_amount"] for r in by_fuel), ZERO)),
        "online_amount": money(sum((r["online_amount"] for r in by_fuel), ZERO)),
        "credit_amount": money(sum((r["credit_amount"] for r in by_fuel), ZERO)),
        "reading_count": sum(r["reading_count"] for r in by_fuel),
    }
