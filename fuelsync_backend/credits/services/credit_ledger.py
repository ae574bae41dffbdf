# credits/services/credit_ledger.py

"""
CREDIT LEDGER (APPLICATION SERVICE)

Purpose:
- Extend credit to a creditor (credit sale) and record settlements
  (payments against the balance).
- Keep Creditor.current_balance equal to
      sum(credit entries) - sum(settlement entries)

Hard rules:
- amount > 0 for every entry; direction is the transaction type.
- The creditor must be active. Flagged creditors cannot take new credit.
- extend_credit fails CREDIT_LIMIT_EXCEEDED when
      current_balance + amount > credit_limit   (NULL limit = no limit)

Serialization:
- lock_creditor() takes a row lock (SELECT ... FOR UPDATE) on the creditor.
- locked_balance_update() applies the delta with a conditional UPDATE:
      UPDATE creditor SET current_balance = current_balance + delta
      WHERE id = ? AND current_balance <= credit_limit - delta
  so two concurrent credit sales can never both pass the limit check,
  even on a backend that ignores FOR UPDATE.

Transactions:
- Every public function is @transaction.atomic. When called from the
  reading engine it joins the reading's transaction: a rejected credit
  rolls back the reading too.

Overpayment policy:
- A settlement larger than the outstanding balance is accepted. The
  balance goes negative (an advance held for the creditor) and a
  warning is logged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from django.db import transaction
from django.db.models import F, Q, Sum
from django.utils import timezone

from core.exceptions import ledger_error
from core.money import ZERO, litres as to_litres, money
from core.policies import PlanLimits
from credits.models import CreditTransaction, Creditor

logger = logging.getLogger("fuelsync.credits")


# =========================================================
# ROW LOCK + GUARDED BALANCE UPDATE
# =========================================================
def lock_creditor(*, creditor_id, station=None) -> Creditor:
    """
    Lock the creditor row for the rest of the current transaction.
    Must be called inside transaction.atomic.
    """
    qs = Creditor.objects.select_for_update()
    if station is not None:
        qs = qs.filter(station=station)

    try:
        return qs.get(id=creditor_id)
    except Creditor.DoesNotExist:
        raise ledger_error("CREDITOR_NOT_FOUND", creditor_id=creditor_id)


def locked_balance_update(*, creditor: Creditor, delta: Decimal, enforce_limit: bool) -> Creditor:
    """
    Apply delta to a creditor already locked by lock_creditor().

    enforce_limit=True adds the credit-limit guard to the UPDATE itself;
    zero affected rows means the limit would be exceeded.
    """
    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError("locked_balance_update must run inside transaction.atomic")

    qs = Creditor.objects.filter(id=creditor.id)
    if enforce_limit:
        qs = qs.filter(
            Q(credit_limit__isnull=True) | Q(current_balance__lte=F("credit_limit") - delta)
        )

    updated = qs.update(
        current_balance=F("current_balance") + delta,
        updated_at=timezone.now(),
    )
    if updated != 1:
        creditor.refresh_from_db(fields=["current_balance", "credit_limit"])
        raise ledger_error(
            "CREDIT_LIMIT_EXCEEDED",
            amount=delta,
            credit_limit=creditor.credit_limit,
            current_balance=creditor.current_balance,
        )

    creditor.refresh_from_db()
    return creditor


# =========================================================
# CREDIT
# =========================================================
@transaction.atomic
def extend_credit(
    *,
    creditor_id,
    amount,
    user,
    station=None,
    litres=None,
    fuel_type: str = "",
    price_per_litre=None,
    linked_reading=None,
    transaction_date: Optional[date] = None,
    reference_number: str = "",
    notes: str = "",
    limits: Optional[PlanLimits] = None,
) -> CreditTransaction:
    if limits is not None and not limits.credit_enabled:
        raise ledger_error("CREDIT_FEATURE_DISABLED")

    amount = money(amount)
    if amount <= ZERO:
        raise ledger_error("INVALID_AMOUNT", field="amount")

    creditor = lock_creditor(creditor_id=creditor_id, station=station)

    if not creditor.is_active:
        raise ledger_error("CREDITOR_INACTIVE", creditor_id=creditor.id)
    if creditor.is_flagged:
        raise ledger_error("CREDITOR_FLAGGED", creditor_id=creditor.id)

    if creditor.credit_limit is not None and creditor.current_balance + amount > creditor.credit_limit:
        logger.warning(
            "Credit limit exceeded",
            extra={
                "creditor_id": str(creditor.id),
                "amount": str(amount),
                "current_balance": str(creditor.current_balance),
                "credit_limit": str(creditor.credit_limit),
            },
        )
        raise ledger_error(
            "CREDIT_LIMIT_EXCEEDED",
            amount=amount,
            credit_limit=creditor.credit_limit,
            current_balance=creditor.current_balance,
        )

    creditor = locked_balance_update(creditor=creditor, delta=amount, enforce_limit=True)

    txn_date = transaction_date or timezone.localdate()

    txn = CreditTransaction.objects.create(
        station_id=creditor.station_id,
        creditor=creditor,
        transaction_type=CreditTransaction.TYPE_CREDIT,
        fuel_type=fuel_type or "",
        litres=to_litres(litres) if litres not in (None, "") else None,
        price_per_litre=money(price_per_litre) if price_per_litre not in (None, "") else None,
        amount=amount,
        transaction_date=txn_date,
        nozzle_reading=linked_reading,
        reference_number=(reference_number or "").strip(),
        notes=(notes or "").strip(),
        entered_by=user,
    )

    if creditor.last_transaction_date is None or txn_date > creditor.last_transaction_date:
        creditor.last_transaction_date = txn_date
        creditor.save(update_fields=["last_transaction_date", "updated_at"])

    logger.info(
        "Credit extended",
        extra={
            "creditor_id": str(creditor.id),
            "transaction_id": str(txn.id),
            "amount": str(amount),
            "balance": str(creditor.current_balance),
            "reading_id": str(linked_reading.id) if linked_reading is not None else None,
        },
    )
    return txn


# =========================================================
# SETTLEMENT (PAYMENT)
# =========================================================
@transaction.atomic
def settle_credit(
    *,
    creditor_id,
    amount,
    user,
    reference: str = "",
    station=None,
    transaction_date: Optional[date] = None,
    notes: str = "",
) -> CreditTransaction:
    amount = money(amount)
    if amount <= ZERO:
        raise ledger_error("INVALID_AMOUNT", field="amount")

    creditor = lock_creditor(creditor_id=creditor_id, station=station)

    if not creditor.is_active:
        raise ledger_error("CREDITOR_INACTIVE", creditor_id=creditor.id)

    outstanding = creditor.current_balance

    creditor = locked_balance_update(creditor=creditor, delta=-amount, enforce_limit=False)

    txn_date = transaction_date or timezone.localdate()

    txn = CreditTransaction.objects.create(
        station_id=creditor.station_id,
        creditor=creditor,
        transaction_type=CreditTransaction.TYPE_SETTLEMENT,
        amount=amount,
        transaction_date=txn_date,
        reference_number=(reference or "").strip(),
        notes=(notes or "").strip(),
        entered_by=user,
    )

    if creditor.last_payment_date is None or txn_date > creditor.last_payment_date:
        creditor.last_payment_date = txn_date
        creditor.save(update_fields=["last_payment_date", "updated_at"])

    if creditor.current_balance < ZERO:
        logger.warning(
            "Creditor overpaid; balance held as advance",
            extra={
                "creditor_id": str(creditor.id),
                "amount": str(amount),
                "outstanding_before": str(outstanding),
                "balance": str(creditor.current_balance),
            },
        )

    logger.info(
        "Credit settled",
        extra={
            "creditor_id": str(creditor.id),
            "transaction_id": str(txn.id),
            "amount": str(amount),
            "balance": str(creditor.current_balance),
        },
    )
    return txn


# =========================================================
# CREDITOR MAINTENANCE
# =========================================================
@transaction.atomic
def create_creditor(
    *,
    station,
    name: str,
    user,
    limits: PlanLimits,
    credit_limit=None,
    credit_period_days: int = 30,
    **profile,
) -> Creditor:
    if not limits.credit_enabled:
        raise ledger_error("CREDIT_FEATURE_DISABLED")

    if credit_limit not in (None, ""):
        credit_limit = money(credit_limit)
        if credit_limit < ZERO:
            raise ledger_error("NEGATIVE_AMOUNT", field="credit_limit")
    else:
        credit_limit = None

    creditor = Creditor.objects.create(
        station=station,
        name=(name or "").strip(),
        credit_limit=credit_limit,
        credit_period_days=credit_period_days,
        created_by=user,
        **profile,
    )

    logger.info(
        "Creditor created",
        extra={"creditor_id": str(creditor.id), "station_id": str(station.id)},
    )
    return creditor


@transaction.atomic
def flag_creditor(*, creditor_id, reason: str, user, station=None) -> Creditor:
    creditor = lock_creditor(creditor_id=creditor_id, station=station)
    creditor.is_flagged = True
    creditor.flag_reason = (reason or "").strip()
    creditor.flagged_at = timezone.now()
    creditor.save(update_fields=["is_flagged", "flag_reason", "flagged_at", "updated_at"])

    logger.warning(
        "Creditor flagged",
        extra={"creditor_id": str(creditor.id), "by": str(user.id), "reason": creditor.flag_reason},
    )
    return creditor


@transaction.atomic
def unflag_creditor(*, creditor_id, user, station=None) -> Creditor:
    creditor = lock_creditor(creditor_id=creditor_id, station=station)
    creditor.is_flagged = False
    creditor.flag_reason = ""
    creditor.flagged_at = None
    creditor.save(update_fields=["is_flagged", "flag_reason", "flagged_at", "updated_at"])

    logger.info("Creditor unflagged", extra={"creditor_id": str(creditor.id), "by": str(user.id)})
    return creditor


# =========================================================
# READ MODELS
# =========================================================
def ledger_balance(creditor) -> Decimal:
    """
    Balance recomputed from the ledger entries alone.
    """
    totals = CreditTransaction.objects.filter(creditor=creditor).aggregate(
        credits=Sum("amount", filter=Q(transaction_type=CreditTransaction.TYPE_CREDIT)),
        settlements=Sum("amount", filter=Q(transaction_type=CreditTransaction.TYPE_SETTLEMENT)),
    )
    return money((totals["credits"] or ZERO) - (totals["settlements"] or ZERO))


@dataclass(frozen=True)
class CreditSummary:
    creditor_count: int
    active_count: int
    flagged_count: int
    with_balance_count: int
    total_outstanding: Decimal
    total_advances: Decimal
    top_creditors: list


def credit_summary(*, station, top: int = 5) -> CreditSummary:
    qs = Creditor.objects.filter(station=station)

    agg = qs.aggregate(
        outstanding=Sum("current_balance", filter=Q(current_balance__gt=0)),
        advances=Sum("current_balance", filter=Q(current_balance__lt=0)),
    )

    top_rows = [
        {
            "creditor_id": str(c.id),
            "name": c.name,
            "current_balance": c.current_balance,
            "credit_limit": c.credit_limit,
        }
        for c in qs.filter(current_balance__gt=0).order_by("-current_balance")[:top]
    ]

    return CreditSummary(
        creditor_count=qs.count(),
        active_count=qs.filter(is_active=True).count(),
        flagged_count=qs.filter(is_flagged=True).count(),
        with_balance_count=qs.filter(current_balance__gt=0).count(),
        total_outstanding=money(agg["outstanding"] or ZERO),
        total_advances=money(-(agg["advances"] or ZERO)),
        top_creditors=top_rows,
    )
