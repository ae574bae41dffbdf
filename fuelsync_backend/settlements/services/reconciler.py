# settlements/services/reconciler.py

"""
SETTLEMENT RECONCILER (APPLICATION SERVICE)

Purpose:
- Compare the cash a station should hold for a day (from its readings)
  with the cash a manager actually counted.

record_settlement():
1) expected_cash = sum(cash_amount) over non-initial readings of
   (station, date). Computed here; never taken from the caller.
2) variance = expected_cash - actual_cash   (positive = shortfall)
3) variance_percent = variance / expected_cash x 100, stored at 2dp
     expected 0, actual 0  -> 0%
     expected 0, actual >0 -> NULL (classified INVESTIGATE)
4) classification on the unrounded |variance_percent|:
     < VARIANCE_REVIEW_PERCENT                -> OK
     REVIEW..VARIANCE_INVESTIGATE_PERCENT     -> REVIEW
     > VARIANCE_INVESTIGATE_PERCENT           -> INVESTIGATE
5) persist + link exactly the readings that produced expected_cash
   (their ids are fixed before summing)

Manager-confirmed tenders (optional):
- actual_online / actual_credit are compared with the readings' online
  and credit legs: variance_online = expected_online - actual_online,
  same for credit. Past SETTLEMENT_TENDER_TOLERANCE_PERCENT the
  difference is logged as a WARNING. It never blocks the settlement.

Re-submission:
- One settlement per (station, date).
- A "recorded" settlement is replaced in place (revision + 1) and its
  readings re-linked.
- An "approved" settlement is final: SETTLEMENT_FINALIZED.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.utils import timezone

from core.exceptions import ledger_error
from core.money import ZERO, money, percent
from readings.models import NozzleReading
from settlements.models import Settlement

logger = logging.getLogger("fuelsync.settlements")


def _thresholds() -> tuple[Decimal, Decimal]:
    review = Decimal(str(getattr(settings, "VARIANCE_REVIEW_PERCENT", "1.00")))
    investigate = Decimal(str(getattr(settings, "VARIANCE_INVESTIGATE_PERCENT", "3.00")))
    return review, investigate


def _tender_tolerance() -> Decimal:
    return Decimal(str(getattr(settings, "SETTLEMENT_TENDER_TOLERANCE_PERCENT", "5.00")))


def variance_ratio(*, expected_cash: Decimal, variance: Decimal, actual_cash: Decimal) -> Optional[Decimal]:
    """
    Unrounded variance / expected x 100. Classification uses this value.
    """
    if expected_cash == ZERO:
        return ZERO if actual_cash == ZERO else None
    return variance / expected_cash * Decimal("100")


def variance_percent(*, expected_cash: Decimal, variance: Decimal, actual_cash: Decimal) -> Optional[Decimal]:
    if expected_cash == ZERO:
        return ZERO if actual_cash == ZERO else None
    return percent(variance, expected_cash)


def classify_variance(pct: Optional[Decimal]) -> str:
    if pct is None:
        return Settlement.VARIANCE_INVESTIGATE

    review, investigate = _thresholds()
    magnitude = abs(pct)

    if magnitude < review:
        return Settlement.VARIANCE_OK
    if magnitude <= investigate:
        return Settlement.VARIANCE_REVIEW
    return Settlement.VARIANCE_INVESTIGATE


def tender_exceeds_tolerance(*, expected: Decimal, actual: Decimal) -> bool:
    """
    expected 0: any confirmed amount is out of tolerance.
    """
    if expected == ZERO:
        return actual != ZERO
    return abs(expected - actual) / expected * Decimal("100") > _tender_tolerance()


def _confirmed_amount(value, field: str) -> Optional[Decimal]:
    if value in (None, ""):
        return None
    value = money(value)
    if value < ZERO:
        raise ledger_error("NEGATIVE_AMOUNT", field=field)
    return value


def _lock_station(station_id):
    from stations.models import Station

    try:
        return Station.objects.select_for_update().get(id=station_id)
    except Station.DoesNotExist:
        raise ledger_error("STATION_NOT_FOUND", station_id=station_id)


@transaction.atomic
def record_settlement(
    *,
    station_id,
    settlement_date: date,
    actual_cash,
    user,
    actual_online=None,
    actual_credit=None,
    notes: str = "",
) -> Settlement:
    actual_cash = money(actual_cash)
    if actual_cash < ZERO:
        raise ledger_error("NEGATIVE_AMOUNT", field="actual_cash")
    actual_online = _confirmed_amount(actual_online, "actual_online")
    actual_credit = _confirmed_amount(actual_credit, "actual_credit")

    station = _lock_station(station_id)

    existing = (
        Settlement.objects.select_for_update()
        .filter(station=station, settlement_date=settlement_date)
        .first()
    )
    if existing is not None and existing.is_final:
        raise ledger_error("SETTLEMENT_FINALIZED", settlement_date=settlement_date)

    # 1) expected cash, server-side, over a fixed set of readings
    reading_ids = list(
        NozzleReading.objects.filter(
            station=station,
            reading_date=settlement_date,
            is_initial=False,
        ).values_list("id", flat=True)
    )
    readings = NozzleReading.objects.filter(id__in=reading_ids)
    totals = readings.aggregate(
        cash=Sum("cash_amount"),
        online=Sum("online_amount"),
        credit=Sum("credit_amount"),
    )
    expected_cash = money(totals["cash"])
    expected_online = money(totals["online"])
    expected_credit = money(totals["credit"])

    # 2-4) variance + classification
    variance = money(expected_cash - actual_cash)
    ratio = variance_ratio(expected_cash=expected_cash, variance=variance, actual_cash=actual_cash)
    pct = variance_percent(expected_cash=expected_cash, variance=variance, actual_cash=actual_cash)
    status = classify_variance(ratio)

    tenders = {}
    for tender, expected, actual in (
        ("online", expected_online, actual_online),
        ("credit", expected_credit, actual_credit),
    ):
        if actual is not None:
            tenders[tender] = (expected, actual, money(expected - actual))

    figures = {
        "expected_cash": expected_cash,
        "actual_cash": actual_cash,
        "variance": variance,
        "variance_percent": pct,
        "variance_status": status,
        "expected_online": expected_online,
        "expected_credit": expected_credit,
        "actual_online": actual_online,
        "actual_credit": actual_credit,
        "variance_online": tenders["online"][2] if "online" in tenders else None,
        "variance_credit": tenders["credit"][2] if "credit" in tenders else None,
        "reading_count": len(reading_ids),
        "notes": (notes or "").strip(),
        "recorded_by": user,
        "recorded_at": timezone.now(),
    }

    # 5) persist
    if existing is None:
        try:
            with transaction.atomic():
                settlement = Settlement.objects.create(
                    station=station,
                    settlement_date=settlement_date,
                    **figures,
                )
        except IntegrityError:
            raise ledger_error("SETTLEMENT_IN_PROGRESS", settlement_date=settlement_date)
    else:
        settlement = existing
        for field, value in figures.items():
            setattr(settlement, field, value)
        settlement.revision = existing.revision + 1
        settlement.save()
        NozzleReading.objects.filter(settlement=settlement).update(settlement=None)

    readings.update(settlement=settlement)

    for tender, (expected, actual, tender_variance) in tenders.items():
        if tender_exceeds_tolerance(expected=expected, actual=actual):
            logger.warning(
                "Confirmed tender outside tolerance",
                extra={
                    "settlement_id": str(settlement.id),
                    "tender": tender,
                    "expected": str(expected),
                    "actual": str(actual),
                    "variance": str(tender_variance),
                    "tolerance_percent": str(_tender_tolerance()),
                },
            )

    log = logger.warning if status == Settlement.VARIANCE_INVESTIGATE else logger.info
    log(
        "Settlement recorded",
        extra={
            "settlement_id": str(settlement.id),
            "station_id": str(station.id),
            "settlement_date": settlement_date.isoformat(),
            "expected_cash": str(expected_cash),
            "actual_cash": str(actual_cash),
            "variance": str(variance),
            "variance_percent": str(pct) if pct is not None else None,
            "variance_status": status,
            "revision": settlement.revision,
        },
    )
    return settlement


@transaction.atomic
def approve_settlement(*, settlement_id, user, station=None) -> Settlement:
    qs = Settlement.objects.select_for_update()
    if station is not None:
        qs = qs.filter(station=station)

    try:
        settlement = qs.get(id=settlement_id)
    except Settlement.DoesNotExist:
        raise ledger_error("SETTLEMENT_NOT_FOUND", settlement_id=settlement_id)

    if settlement.is_final:
        raise ledger_error("SETTLEMENT_FINALIZED", settlement_date=settlement.settlement_date)

    settlement.status = Settlement.STATUS_APPROVED
    settlement.approved_by = user
    settlement.approved_at = timezone.now()
    settlement.save(update_fields=["status", "approved_by", "approved_at", "updated_at"])

    logger.info(
        "Settlement approved",
        extra={"settlement_id": str(settlement.id), "by": str(user.id)},
    )
    return settlement


def settlement_for_reading(reading) -> Optional[Settlement]:
    """
    The settlement a reading was reconciled into, if any.
    """
    if not reading.settlement_id:
        return None
    return Settlement.objects.filter(id=reading.settlement_id).first()
