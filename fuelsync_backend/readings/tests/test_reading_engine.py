# readings/tests/test_reading_engine.py

from __future__ import annotations

import uuid
from datetime import date, timedelta
from decimal import Decimal

from django.test import SimpleTestCase, TestCase

from core.exceptions import LedgerError
from core.policies import PlanLimits
from core.testing import (
    DEFAULT_LIMITS,
    make_creditor,
    make_manager,
    make_nozzle,
    make_station,
    set_price,
)
from credits.models import CreditTransaction
from credits.services.credit_ledger import ledger_balance
from readings.models import NozzleReading
from readings.services.reading_engine import (
    PaymentSplit,
    daily_reading_summary,
    previous_reading_for,
    submit_reading,
    update_reading_payment,
)
from settlements.services.reconciler import approve_settlement, record_settlement
from stations.models import Nozzle, Shift

DAY_1 = date(2025, 12, 10)


class ReadingEngineTestBase(TestCase):
    def setUp(self):
        self.station = make_station()
        self.owner = self.station.owner
        self.manager = make_manager(self.station)
        self.nozzle = make_nozzle(self.station, initial_reading="500")
        set_price(self.station, "100.00", DAY_1 - timedelta(days=30))

    def submit(self, value, on=DAY_1, today=DAY_1, limits=DEFAULT_LIMITS, **kwargs):
        return submit_reading(
            nozzle_id=self.nozzle.id,
            reading_date=on,
            reading_value=Decimal(str(value)),
            user=kwargs.pop("user", self.manager),
            limits=limits,
            today=today,
            **kwargs,
        )

    def assertLedgerError(self, code, fn, *args, **kwargs):
        with self.assertRaises(LedgerError) as ctx:
            fn(*args, **kwargs)
        self.assertEqual(ctx.exception.code, code)
        return ctx.exception


class SubmitReadingTests(ReadingEngineTestBase):
    """
    GUARANTEES:
    - litres and totals are computed server-side
    - the chain follows the nozzle's initial reading, then prior readings
    - a failed credit leg leaves no reading behind
    """

    # =====================================================
    # HAPPY PATH
    # =====================================================

    def test_first_reading_follows_nozzle_initial_value(self):
        reading = self.submit(800)

        self.assertEqual(reading.previous_reading, Decimal("500.000"))
        self.assertEqual(reading.litres_sold, Decimal("300.000"))
        self.assertEqual(reading.price_per_litre, Decimal("100.00"))
        self.assertEqual(reading.total_amount, Decimal("30000.00"))
        # no split given: all cash
        self.assertEqual(reading.cash_amount, Decimal("30000.00"))

    def test_second_reading_chains_from_first(self):
        self.submit(800)
        reading = self.submit(850.5, on=DAY_1 + timedelta(days=1), today=DAY_1 + timedelta(days=1))

        self.assertEqual(reading.previous_reading, Decimal("800.000"))
        self.assertEqual(reading.litres_sold, Decimal("50.500"))
        self.assertEqual(reading.total_amount, Decimal("5050.00"))

    def test_same_day_readings_chain_in_creation_order(self):
        self.submit(600)
        reading = self.submit(650)

        self.assertEqual(reading.previous_reading, Decimal("600.000"))
        self.assertEqual(reading.litres_sold, Decimal("50.000"))

    def test_nozzle_cache_tracks_latest_reading(self):
        self.submit(800)
        self.nozzle.refresh_from_db()

        self.assertEqual(self.nozzle.last_reading, Decimal("800.000"))
        self.assertEqual(self.nozzle.last_reading_date, DAY_1)

    def test_total_uses_half_up_rounding(self):
        set_price(self.station, "10.01", DAY_1)
        reading = self.submit("500.5")

        # 0.5 x 10.01 = 5.005
        self.assertEqual(reading.total_amount, Decimal("5.01"))

    def test_zero_litre_reading_is_allowed(self):
        reading = self.submit(500)
        self.assertEqual(reading.litres_sold, Decimal("0.000"))
        self.assertEqual(reading.total_amount, Decimal("0.00"))

    # =====================================================
    # INITIAL READINGS
    # =====================================================

    def test_initial_reading_sells_nothing(self):
        reading = self.submit(1000, is_initial=True)

        self.assertTrue(reading.is_initial)
        self.assertEqual(reading.litres_sold, Decimal("0.000"))
        self.assertEqual(reading.total_amount, Decimal("0.00"))
        self.assertEqual(reading.payment_total, Decimal("0.00"))

    def test_reading_after_initial_chains_from_it(self):
        self.submit(1000, on=DAY_1 - timedelta(days=1), is_initial=True)
        reading = self.submit(1200)

        self.assertEqual(reading.previous_reading, Decimal("1000.000"))
        self.assertEqual(reading.total_amount, Decimal("20000.00"))

    def test_only_first_reading_can_be_initial(self):
        self.submit(800)
        self.assertLedgerError("INITIAL_READING_EXISTS", self.submit, 900, is_initial=True)

    def test_reading_cannot_precede_initial(self):
        self.submit(1000, is_initial=True)
        self.assertLedgerError(
            "READING_BEFORE_INITIAL", self.submit, 900, on=DAY_1 - timedelta(days=1)
        )

    # =====================================================
    # VALIDATION
    # =====================================================

    def test_reading_must_increase(self):
        self.submit(800)
        self.assertLedgerError("READING_MUST_INCREASE", self.submit, 799.999)

    def test_reading_below_initial_value_rejected(self):
        self.assertLedgerError("READING_MUST_INCREASE", self.submit, 499)

    def test_negative_reading_rejected(self):
        self.assertLedgerError("NEGATIVE_AMOUNT", self.submit, -1)

    def test_missing_nozzle(self):
        self.assertLedgerError(
            "NOZZLE_NOT_FOUND",
            submit_reading,
            nozzle_id=uuid.uuid4(),
            reading_date=DAY_1,
            reading_value=Decimal("800"),
            user=self.manager,
            limits=DEFAULT_LIMITS,
            today=DAY_1,
        )

    def test_inactive_nozzle_rejected(self):
        Nozzle.objects.filter(id=self.nozzle.id).update(status=Nozzle.STATUS_REPAIR)
        err = self.assertLedgerError("NOZZLE_INACTIVE", self.submit, 800)
        self.assertEqual(err.context["status"], Nozzle.STATUS_REPAIR)

    def test_price_must_be_set(self):
        other = make_nozzle(self.station, fuel_type="diesel")
        self.assertLedgerError(
            "PRICE_NOT_SET",
            submit_reading,
            nozzle_id=other.id,
            reading_date=DAY_1,
            reading_value=Decimal("10"),
            user=self.manager,
            limits=DEFAULT_LIMITS,
            today=DAY_1,
        )

    def test_exact_split_accepted(self):
        reading = self.submit(
            800, payment=PaymentSplit(cash=Decimal("20000.00"), online=Decimal("10000.00"))
        )
        self.assertEqual(reading.online_amount, Decimal("10000.00"))

    def test_split_off_by_one_cent_rejected(self):
        self.assertLedgerError(
            "PAYMENT_SPLIT_MISMATCH",
            self.submit,
            800,
            payment=PaymentSplit(cash=Decimal("29999.99")),
        )
        self.assertFalse(NozzleReading.objects.exists())

    def test_negative_split_leg_rejected(self):
        err = self.assertLedgerError(
            "NEGATIVE_AMOUNT",
            self.submit,
            800,
            payment=PaymentSplit(cash=Decimal("30100.00"), online=Decimal("-100.00")),
        )
        self.assertEqual(err.context["field"], "online_amount")

    # =====================================================
    # DATE POLICY
    # =====================================================

    def test_backdate_beyond_plan_rejected(self):
        err = self.assertLedgerError(
            "BACKDATE_LIMIT_EXCEEDED",
            self.submit,
            800,
            on=DAY_1 - timedelta(days=10),
            limits=PlanLimits(backdated_days=3, credit_enabled=True),
        )
        self.assertEqual(err.context["days_back"], 10)

    def test_backdate_within_plan_accepted(self):
        reading = self.submit(
            800,
            on=DAY_1 - timedelta(days=3),
            limits=PlanLimits(backdated_days=3, credit_enabled=True),
        )
        self.assertEqual(reading.reading_date, DAY_1 - timedelta(days=3))

    def test_future_date_rejected(self):
        self.assertLedgerError("READING_DATE_IN_FUTURE", self.submit, 800, on=DAY_1 + timedelta(days=1))

    def test_approved_settlement_closes_the_date(self):
        self.submit(800)
        settlement = record_settlement(
            station_id=self.station.id,
            settlement_date=DAY_1,
            actual_cash=Decimal("30000.00"),
            user=self.manager,
        )
        approve_settlement(settlement_id=settlement.id, user=self.owner)

        self.assertLedgerError("SETTLEMENT_FINALIZED", self.submit, 900)

    # =====================================================
    # SHIFTS
    # =====================================================

    def test_shift_required_when_station_demands_it(self):
        self.station.require_shift_for_readings = True
        self.station.save()

        self.assertLedgerError("SHIFT_REQUIRED", self.submit, 800)

        shift = Shift.objects.create(station=self.station, employee=self.manager)
        reading = self.submit(800)
        self.assertEqual(reading.shift_id, shift.id)

    # =====================================================
    # CREDIT LEG
    # =====================================================

    def test_credit_leg_posts_to_creditor_ledger(self):
        creditor = make_creditor(self.station)
        reading = self.submit(
            800,
            payment=PaymentSplit(cash=Decimal("25000.00"), credit=Decimal("5000.00")),
            creditor_id=creditor.id,
        )

        txn = CreditTransaction.objects.get(nozzle_reading=reading)
        creditor.refresh_from_db()

        self.assertEqual(txn.amount, Decimal("5000.00"))
        self.assertEqual(txn.litres, Decimal("50.000"))
        self.assertEqual(txn.transaction_date, DAY_1)
        self.assertEqual(creditor.current_balance, Decimal("5000.00"))
        self.assertEqual(ledger_balance(creditor), creditor.current_balance)
        self.assertEqual(reading.creditor_id, creditor.id)

    def test_every_credit_reading_has_a_ledger_entry(self):
        creditor = make_creditor(self.station)
        for value in (600, 700, 800):
            self.submit(
                value,
                payment=PaymentSplit(cash=Decimal("5000.00"), credit=Decimal("5000.00")),
                creditor_id=creditor.id,
            )

        credit_readings = NozzleReading.objects.filter(credit_amount__gt=0)
        self.assertEqual(credit_readings.count(), 3)
        for reading in credit_readings:
            self.assertTrue(reading.credit_transactions.exists())

    def test_credit_leg_requires_creditor(self):
        self.assertLedgerError(
            "CREDITOR_REQUIRED",
            self.submit,
            800,
            payment=PaymentSplit(cash=Decimal("25000.00"), credit=Decimal("5000.00")),
        )

    def test_credit_leg_needs_plan_feature(self):
        creditor = make_creditor(self.station)
        self.assertLedgerError(
            "CREDIT_FEATURE_DISABLED",
            self.submit,
            800,
            payment=PaymentSplit(cash=Decimal("25000.00"), credit=Decimal("5000.00")),
            creditor_id=creditor.id,
            limits=PlanLimits(backdated_days=3, credit_enabled=False),
        )

    def test_rejected_credit_rolls_back_reading(self):
        creditor = make_creditor(self.station, credit_limit="1000.00")

        self.assertLedgerError(
            "CREDIT_LIMIT_EXCEEDED",
            self.submit,
            800,
            payment=PaymentSplit(cash=Decimal("25000.00"), credit=Decimal("5000.00")),
            creditor_id=creditor.id,
        )

        creditor.refresh_from_db()
        self.nozzle.refresh_from_db()
        self.assertFalse(NozzleReading.objects.exists())
        self.assertFalse(CreditTransaction.objects.exists())
        self.assertEqual(creditor.current_balance, Decimal("0.00"))
        self.assertIsNone(self.nozzle.last_reading)

    def test_flagged_creditor_cannot_buy_on_credit(self):
        creditor = make_creditor(self.station, is_flagged=True)
        self.assertLedgerError(
            "CREDITOR_FLAGGED",
            self.submit,
            800,
            payment=PaymentSplit(cash=Decimal("25000.00"), credit=Decimal("5000.00")),
            creditor_id=creditor.id,
        )
        self.assertFalse(NozzleReading.objects.exists())


class BackdatedInsertTests(ReadingEngineTestBase):
    """
    A reading inserted before an existing one re-chains the successor.
    """

    def setUp(self):
        super().setUp()
        self.later = self.submit(1000)

    def test_successor_is_rechained_and_repriced(self):
        inserted = self.submit(700, on=DAY_1 - timedelta(days=1))
        self.later.refresh_from_db()

        self.assertEqual(inserted.previous_reading, Decimal("500.000"))
        self.assertEqual(inserted.total_amount, Decimal("20000.00"))

        self.assertEqual(self.later.previous_reading, Decimal("700.000"))
        self.assertEqual(self.later.litres_sold, Decimal("300.000"))
        self.assertEqual(self.later.total_amount, Decimal("30000.00"))
        self.assertEqual(self.later.cash_amount, Decimal("30000.00"))

    def test_nozzle_cache_stays_on_latest_reading(self):
        self.submit(700, on=DAY_1 - timedelta(days=1))
        self.nozzle.refresh_from_db()

        self.assertEqual(self.nozzle.last_reading, Decimal("1000.000"))
        self.assertEqual(self.nozzle.last_reading_date, DAY_1)

    def test_backdated_value_cannot_exceed_next_reading(self):
        self.assertLedgerError("READING_EXCEEDS_NEXT", self.submit, 1001, on=DAY_1 - timedelta(days=1))

    def test_settled_successor_blocks_insert(self):
        record_settlement(
            station_id=self.station.id,
            settlement_date=DAY_1,
            actual_cash=Decimal("50000.00"),
            user=self.manager,
        )

        self.assertLedgerError("READING_SETTLED", self.submit, 700, on=DAY_1 - timedelta(days=1))
        self.assertEqual(NozzleReading.objects.count(), 1)

    def test_successor_credit_leg_is_never_rewritten(self):
        self.later.delete()
        creditor = make_creditor(self.station)
        credit_only = self.submit(
            1000,
            payment=PaymentSplit(credit=Decimal("50000.00")),
            creditor_id=creditor.id,
        )

        # the successor would lose 10000.00 with no cash or online to absorb it
        self.assertLedgerError("READING_CHAIN_CONFLICT", self.submit, 600, on=DAY_1 - timedelta(days=1))

        credit_only.refresh_from_db()
        creditor.refresh_from_db()
        self.assertEqual(credit_only.total_amount, Decimal("50000.00"))
        self.assertEqual(credit_only.credit_amount, Decimal("50000.00"))
        self.assertEqual(creditor.current_balance, Decimal("50000.00"))



class PaymentUpdateTests(ReadingEngineTestBase):
    def setUp(self):
        super().setUp()
        self.reading = self.submit(800)

    def test_cash_and_online_can_be_resplit(self):
        reading = update_reading_payment(
            reading_id=self.reading.id,
            cash_amount="10000.00",
            online_amount="20000.00",
            user=self.manager,
        )
        self.assertEqual(reading.cash_amount, Decimal("10000.00"))
        self.assertEqual(reading.online_amount, Decimal("20000.00"))

    def test_resplit_must_still_match_total(self):
        self.assertLedgerError(
            "PAYMENT_SPLIT_MISMATCH",
            update_reading_payment,
            reading_id=self.reading.id,
            cash_amount="10000.00",
            online_amount="10000.00",
            user=self.manager,
        )

    def test_settled_reading_is_frozen(self):
        record_settlement(
            station_id=self.station.id,
            settlement_date=DAY_1,
            actual_cash=Decimal("30000.00"),
            user=self.manager,
        )
        self.assertLedgerError(
            "READING_SETTLED",
            update_reading_payment,
            reading_id=self.reading.id,
            cash_amount="0.00",
            online_amount="30000.00",
            user=self.manager,
        )

    def test_settled_reading_cannot_be_deleted(self):
        record_settlement(
            station_id=self.station.id,
            settlement_date=DAY_1,
            actual_cash=Decimal("30000.00"),
            user=self.manager,
        )
        self.reading.refresh_from_db()
        self.assertLedgerError("READING_SETTLED", self.reading.delete)


class ReadingReadModelTests(ReadingEngineTestBase):
    def test_previous_reading_before_any_submission(self):
        prev = previous_reading_for(nozzle=self.nozzle, on_date=DAY_1)

        self.assertTrue(prev.is_first_reading)
        self.assertEqual(prev.previous_reading, Decimal("500.000"))
        self.assertIsNone(prev.previous_date)
        self.assertEqual(prev.price_per_litre, Decimal("100.00"))

    def test_previous_reading_after_submission(self):
        self.submit(800, on=DAY_1 - timedelta(days=1))
        prev = previous_reading_for(nozzle=self.nozzle, on_date=DAY_1)

        self.assertFalse(prev.is_first_reading)
        self.assertEqual(prev.previous_reading, Decimal("800.000"))
        self.assertEqual(prev.previous_date, DAY_1 - timedelta(days=1))

    def test_daily_summary_totals(self):
        creditor = make_creditor(self.station)
        self.submit(800)
        self.submit(
            900,
            payment=PaymentSplit(online=Decimal("4000.00"), credit=Decimal("6000.00")),
            creditor_id=creditor.id,
        )

        summary = daily_reading_summary(station=self.station, on_date=DAY_1)

        self.assertEqual(summary["reading_count"], 2)
        self.assertEqual(summary["total_litres"], Decimal("400.000"))
        self.assertEqual(summary["total_amount"], Decimal("40000.00"))
        self.assertEqual(summary["cash_amount"], Decimal("30000.00"))
        self.assertEqual(summary["online_amount"], Decimal("4000.00"))
        self.assertEqual(summary["credit_amount"], Decimal("6000.00"))


class PaymentSplitMappingTests(SimpleTestCase):
    def test_reads_amount_keys(self):
        split = PaymentSplit.from_mapping(
            {"cash_amount": "10.00", "online_amount": "5.50", "credit_amount": None}
        )
        self.assertEqual(split, PaymentSplit(cash=Decimal("10.00"), online=Decimal("5.50")))

    def test_short_keys_are_not_aliases(self):
        split = PaymentSplit.from_mapping({"cash": "10.00", "online": "5.50", "credit": "1.00"})
        self.assertEqual(split.total, Decimal("0.00"))

    def test_no_mapping_means_no_split(self):
        self.assertIsNone(PaymentSplit.from_mapping(None))
