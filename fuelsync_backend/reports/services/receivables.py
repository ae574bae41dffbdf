# reports/services/receivables.py

"""
RECEIVABLES AGGREGATOR (READ-ONLY)

aging_report(station, as_of):
- every creditor with current_balance > 0
- due_date = last_transaction_date + credit_period_days
- CURRENT when due_date >= as_of, else OVERDUE with a band by days
  overdue: "1-30", "31-60", "60+"

income_statement(station, start_date, end_date):
- sales from readings in the range (inclusive)
- credit collected from settlement-type ledger entries in the range
- cash variance from settlements in the range
- net_cash_income = total_sales - credit_sales - |cash_variance|

Neither function writes or locks anything.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from django.db.models import Count, Q, Sum

from core.exceptions import ledger_error
from core.money import ZERO, litres as to_litres, money
from credits.models import CreditTransaction, Creditor
from readings.models import NozzleReading
from settlements.models import Settlement

BUCKET_CURRENT = "CURRENT"
BUCKET_OVERDUE = "OVERDUE"

BAND_1_30 = "1-30"
BAND_31_60 = "31-60"
BAND_60_PLUS = "60+"


# =========================================================
# AGING
# =========================================================
@dataclass(frozen=True)
class AgingRow:
    creditor_id: str
    name: str
    balance: Decimal
    credit_limit: Optional[Decimal]
    credit_period_days: int
    last_transaction_date: Optional[date]
    due_date: date
    bucket: str
    days_overdue: int
    overdue_band: Optional[str]


@dataclass(frozen=True)
class AgingReport:
    station_id: str
    as_of: date
    rows: list
    current_total: Decimal
    overdue_total: Decimal
    outstanding_total: Decimal
    band_totals: dict = field(default_factory=dict)


def _overdue_band(days: int) -> Optional[str]:
    if days <= 0:
        return None
    if days <= 30:
        return BAND_1_30
    if days <= 60:
        return BAND_31_60
    return BAND_60_PLUS


def aging_report(*, station, as_of: date) -> AgingReport:
    creditors = Creditor.objects.filter(station=station, current_balance__gt=0).order_by(
        "-current_balance", "name"
    )

    rows = []
    band_totals = {BAND_1_30: ZERO, BAND_31_60: ZERO, BAND_60_PLUS: ZERO}
    current_total = ZERO
    overdue_total = ZERO

    for c in creditors:
        anchor = c.last_transaction_date or c.created_at.date()
        due_date = anchor + timedelta(days=c.credit_period_days)

        if due_date >= as_of:
            bucket = BUCKET_CURRENT
            days_overdue = 0
            current_total += c.current_balance
        else:
            bucket = BUCKET_OVERDUE
            days_overdue = (as_of - due_date).days
            overdue_total += c.current_balance

        band = _overdue_band(days_overdue)
        if band:
            band_totals[band] += c.current_balance

        rows.append(
            AgingRow(
                creditor_id=str(c.id),
                name=c.name,
                balance=c.current_balance,
                credit_limit=c.credit_limit,
                credit_period_days=c.credit_period_days,
                last_transaction_date=c.last_transaction_date,
                due_date=due_date,
                bucket=bucket,
                days_overdue=days_overdue,
                overdue_band=band,
            )
        )

    return AgingReport(
        station_id=str(station.id),
        as_of=as_of,
        rows=rows,
        current_total=money(current_total),
        overdue_total=money(overdue_total),
        outstanding_total=money(current_total + overdue_total),
        band_totals={k: money(v) for k, v in band_totals.items()},
    )


# =========================================================
# INCOME
# =========================================================
@dataclass(frozen=True)
class IncomeStatement:
    station_id: str
    start_date: date
    end_date: date
    total_litres: Decimal
    total_sales: Decimal
    cash_sales: Decimal
    online_sales: Decimal
    credit_sales: Decimal
    by_fuel_type: list
    credit_collected: Decimal
    cash_counted: Decimal
    cash_variance: Decimal
    cash_shortfall: Decimal
    settlement_count: int
    unsettled_days: list
    net_cash_income: Decimal


def income_statement(*, station, start_date: date, end_date: date) -> IncomeStatement:
    if start_date > end_date:
        raise ledger_error("INVALID_DATE_RANGE", start_date=start_date, end_date=end_date)

    readings = NozzleReading.objects.filter(
        station=station,
        reading_date__range=(start_date, end_date),
        is_initial=False,
    )

    sales = readings.aggregate(
        litres=Sum("litres_sold"),
        total=Sum("total_amount"),
        cash=Sum("cash_amount"),
        online=Sum("online_amount"),
        credit=Sum("credit_amount"),
    )

    by_fuel = [
        {
            "fuel_type": r["fuel_type"],
            "litres": to_litres(r["litres"] or 0),
            "total_amount": money(r["total"]),
        }
        for r in readings.values("fuel_type")
        .annotate(litres=Sum("litres_sold"), total=Sum("total_amount"))
        .order_by("fuel_type")
    ]

    collected = CreditTransaction.objects.filter(
        station=station,
        transaction_type=CreditTransaction.TYPE_SETTLEMENT,
        transaction_date__range=(start_date, end_date),
    ).aggregate(total=Sum("amount"))["total"]

    settlements = Settlement.objects.filter(
        station=station,
        settlement_date__range=(start_date, end_date),
    )
    variance = settlements.aggregate(
        signed=Sum("variance"),
        shortfall=Sum("variance", filter=Q(variance__gt=0)),
        counted=Sum("actual_cash"),
        n=Count("id"),
    )

    settled_days = set(settlements.values_list("settlement_date", flat=True))
    sale_days = set(readings.values_list("reading_date", flat=True).distinct())
    unsettled_days = sorted(sale_days - settled_days)

    total_sales = money(sales["total"])
    credit_sales = money(sales["credit"])
    cash_variance = money(variance["signed"])

    return IncomeStatement(
        station_id=str(station.id),
        start_date=start_date,
        end_date=end_date,
        total_litres=to_litres(sales["litres"] or 0),
        total_sales=total_sales,
        cash_sales=money(sales["cash"]),
        online_sales=money(sales["online"]),
        credit_sales=credit_sales,
        by_fuel_type=by_fuel,
        credit_collected=money(collected),
        cash_counted=money(variance["counted"]),
        cash_variance=cash_variance,
        cash_shortfall=money(variance["shortfall"]),
        settlement_count=variance["n"] or 0,
        unsettled_days=unsettled_days,
        net_cash_income=money(total_sales - credit_sales - abs(cash_variance)),
    )
