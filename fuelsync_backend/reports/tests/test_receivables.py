# reports/tests/test_receivables.py

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.test import TestCase

from core.exceptions import LedgerError
from core.testing import DEFAULT_LIMITS, make_creditor, make_manager, make_nozzle, make_station, set_price
from credits.services.credit_ledger import extend_credit, settle_credit
from readings.services.reading_engine import PaymentSplit, submit_reading
from reports.services.receivables import (
    BAND_1_30,
    BAND_31_60,
    BAND_60_PLUS,
    BUCKET_CURRENT,
    BUCKET_OVERDUE,
    aging_report,
    income_statement,
)
from settlements.services.reconciler import record_settlement

AS_OF = date(2025, 12, 31)


class AgingReportTests(TestCase):
    """
    due_date = last credit date + credit_period_days
    """

    def setUp(self):
        self.station = make_station()
        self.manager = make_manager(self.station)

    def owe(self, name, amount, days_ago, period=30):
        creditor = make_creditor(self.station, name=name, credit_period_days=period)
        extend_credit(
            creditor_id=creditor.id,
            amount=Decimal(str(amount)),
            user=self.manager,
            transaction_date=AS_OF - timedelta(days=days_ago),
        )
        return creditor

    def rows_by_name(self, report):
        return {row.name: row for row in report.rows}

    def test_buckets_and_bands(self):
        self.owe("current", 100, days_ago=10)
        self.owe("late", 200, days_ago=45)
        self.owe("later", 300, days_ago=80)
        self.owe("latest", 400, days_ago=120)

        report = aging_report(station=self.station, as_of=AS_OF)
        rows = self.rows_by_name(report)

        self.assertEqual(rows["current"].bucket, BUCKET_CURRENT)
        self.assertIsNone(rows["current"].overdue_band)

        self.assertEqual(rows["late"].bucket, BUCKET_OVERDUE)
        self.assertEqual(rows["late"].days_overdue, 15)
        self.assertEqual(rows["late"].overdue_band, BAND_1_30)

        self.assertEqual(rows["later"].overdue_band, BAND_31_60)
        self.assertEqual(rows["latest"].overdue_band, BAND_60_PLUS)
        self.assertEqual(rows["latest"].days_overdue, 90)

        self.assertEqual(report.current_total, Decimal("100.00"))
        self.assertEqual(report.overdue_total, Decimal("900.00"))
        self.assertEqual(report.outstanding_total, Decimal("1000.00"))
        self.assertEqual(report.band_totals[BAND_31_60], Decimal("300.00"))

    def test_due_today_is_current(self):
        self.owe("edge", 100, days_ago=30)
        row = aging_report(station=self.station, as_of=AS_OF).rows[0]

        self.assertEqual(row.due_date, AS_OF)
        self.assertEqual(row.bucket, BUCKET_CURRENT)

    def test_one_day_past_due(self):
        self.owe("edge", 100, days_ago=31)
        row = aging_report(station=self.station, as_of=AS_OF).rows[0]

        self.assertEqual(row.days_overdue, 1)
        self.assertEqual(row.overdue_band, BAND_1_30)

    def test_band_edges(self):
        self.owe("thirty", 100, days_ago=60)
        self.owe("sixty", 100, days_ago=90)
        self.owe("sixty-one", 100, days_ago=91)

        rows = self.rows_by_name(aging_report(station=self.station, as_of=AS_OF))

        self.assertEqual(rows["thirty"].overdue_band, BAND_1_30)
        self.assertEqual(rows["sixty"].overdue_band, BAND_31_60)
        self.assertEqual(rows["sixty-one"].overdue_band, BAND_60_PLUS)

    def test_cleared_and_advance_balances_are_excluded(self):
        cleared = self.owe("cleared", 100, days_ago=90)
        settle_credit(creditor_id=cleared.id, amount="100", user=self.manager)
        ahead = self.owe("ahead", 100, days_ago=5)
        settle_credit(creditor_id=ahead.id, amount="150", user=self.manager)

        report = aging_report(station=self.station, as_of=AS_OF)
        self.assertEqual(report.rows, [])
        self.assertEqual(report.outstanding_total, Decimal("0.00"))

    def test_custom_credit_period(self):
        self.owe("net7", 100, days_ago=10, period=7)
        row = aging_report(station=self.station, as_of=AS_OF).rows[0]

        self.assertEqual(row.bucket, BUCKET_OVERDUE)
        self.assertEqual(row.days_overdue, 3)


class IncomeStatementTests(TestCase):
    def setUp(self):
        self.station = make_station()
        self.manager = make_manager(self.station)
        self.nozzle = make_nozzle(self.station, initial_reading="0")
        self.creditor = make_creditor(self.station)
        set_price(self.station, "100.00", date(2025, 12, 1))

    def sell(self, value, on, **kwargs):
        return submit_reading(
            nozzle_id=self.nozzle.id,
            reading_date=on,
            reading_value=Decimal(str(value)),
            user=self.manager,
            limits=DEFAULT_LIMITS,
            today=on,
            **kwargs,
        )

    def test_statement_for_range(self):
        day_1 = date(2025, 12, 10)
        day_2 = date(2025, 12, 11)

        # day 1: 100 L, 8000 cash + 2000 credit
        self.sell(
            100,
            on=day_1,
            payment=PaymentSplit(cash=Decimal("8000.00"), credit=Decimal("2000.00")),
            creditor_id=self.creditor.id,
        )
        # day 2: 50 L, all online
        self.sell(150, on=day_2, payment=PaymentSplit(online=Decimal("5000.00")))
        # outside the range
        self.sell(160, on=date(2025, 12, 12))

        settle_credit(
            creditor_id=self.creditor.id,
            amount="1500",
            user=self.manager,
            transaction_date=day_2,
        )
        record_settlement(
            station_id=self.station.id,
            settlement_date=day_1,
            actual_cash=Decimal("7900.00"),
            user=self.manager,
        )

        st = income_statement(station=self.station, start_date=day_1, end_date=day_2)

        self.assertEqual(st.total_litres, Decimal("150.000"))
        self.assertEqual(st.total_sales, Decimal("15000.00"))
        self.assertEqual(st.cash_sales, Decimal("8000.00"))
        self.assertEqual(st.online_sales, Decimal("5000.00"))
        self.assertEqual(st.credit_sales, Decimal("2000.00"))
        self.assertEqual(st.credit_collected, Decimal("1500.00"))
        self.assertEqual(st.cash_counted, Decimal("7900.00"))
        self.assertEqual(st.cash_variance, Decimal("100.00"))
        self.assertEqual(st.cash_shortfall, Decimal("100.00"))
        self.assertEqual(st.settlement_count, 1)
        self.assertEqual(st.unsettled_days, [day_2])
        # 15000 - 2000 - |100|
        self.assertEqual(st.net_cash_income, Decimal("12900.00"))

    def test_empty_range(self):
        st = income_statement(
            station=self.station, start_date=date(2025, 11, 1), end_date=date(2025, 11, 30)
        )
        self.assertEqual(st.total_sales, Decimal("0.00"))
        self.assertEqual(st.by_fuel_type, [])
        self.assertEqual(st.net_cash_income, Decimal("0.00"))

    def test_inverted_range_rejected(self):
        with self.assertRaises(LedgerError) as ctx:
            income_statement(
                station=self.station, start_date=date(2025, 12, 2), end_date=date(2025, 12, 1)
            )
        self.assertEqual(ctx.exception.code, "INVALID_DATE_RANGE")
