# credits/tests/test_credit_ledger.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from core.exceptions import LedgerError
from core.policies import PlanLimits
from core.testing import DEFAULT_LIMITS, make_creditor, make_manager, make_station
from credits.models import CreditTransaction, Creditor
from credits.services.credit_ledger import (
    create_creditor,
    credit_summary,
    extend_credit,
    flag_creditor,
    ledger_balance,
    settle_credit,
    unflag_creditor,
)


class CreditLedgerTests(TestCase):
    """
    GUARANTEES:
    - current_balance always equals credits - settlements on the ledger
    - the credit limit is never crossed
    - ledger entries are append-only
    """

    def setUp(self):
        self.station = make_station()
        self.manager = make_manager(self.station)
        self.creditor = make_creditor(self.station, credit_limit="10000.00")

    def extend(self, amount, **kwargs):
        return extend_credit(
            creditor_id=self.creditor.id,
            amount=Decimal(str(amount)),
            user=self.manager,
            **kwargs,
        )

    def settle(self, amount, **kwargs):
        return settle_credit(
            creditor_id=self.creditor.id,
            amount=Decimal(str(amount)),
            user=self.manager,
            **kwargs,
        )

    def assertBalance(self, expected):
        self.creditor.refresh_from_db()
        self.assertEqual(self.creditor.current_balance, Decimal(expected))
        self.assertEqual(ledger_balance(self.creditor), Decimal(expected))

    # =====================================================
    # CREDIT LIMIT
    # =====================================================

    def test_limit_scenario(self):
        self.extend(8000)

        with self.assertRaises(LedgerError) as ctx:
            self.extend(3000)
        self.assertEqual(ctx.exception.code, "CREDIT_LIMIT_EXCEEDED")
        self.assertBalance("8000.00")

        self.extend(2000)
        self.assertBalance("10000.00")

    def test_unlimited_creditor(self):
        Creditor.objects.filter(id=self.creditor.id).update(credit_limit=None)
        self.extend(250000)
        self.assertBalance("250000.00")

    def test_zero_amount_rejected(self):
        with self.assertRaises(LedgerError) as ctx:
            self.extend(0)
        self.assertEqual(ctx.exception.code, "INVALID_AMOUNT")

    def test_inactive_creditor_rejected(self):
        Creditor.objects.filter(id=self.creditor.id).update(is_active=False)
        with self.assertRaises(LedgerError) as ctx:
            self.extend(100)
        self.assertEqual(ctx.exception.code, "CREDITOR_INACTIVE")

    def test_creditor_of_another_station_is_not_found(self):
        other = make_station()
        with self.assertRaises(LedgerError) as ctx:
            self.extend(100, station=other)
        self.assertEqual(ctx.exception.code, "CREDITOR_NOT_FOUND")

    def test_plan_without_credit_rejected(self):
        with self.assertRaises(LedgerError) as ctx:
            self.extend(100, limits=PlanLimits(backdated_days=3, credit_enabled=False))
        self.assertEqual(ctx.exception.code, "CREDIT_FEATURE_DISABLED")
        self.assertBalance("0.00")

    # =====================================================
    # SETTLEMENT
    # =====================================================

    def test_settlement_reduces_balance(self):
        self.extend(5000)
        txn = self.settle(1500, reference="RCPT-1")

        self.assertEqual(txn.transaction_type, CreditTransaction.TYPE_SETTLEMENT)
        self.assertEqual(txn.reference_number, "RCPT-1")
        self.assertEqual(txn.signed_amount, Decimal("-1500.00"))
        self.assertBalance("3500.00")

        self.creditor.refresh_from_db()
        self.assertIsNotNone(self.creditor.last_payment_date)

    def test_overpayment_becomes_advance(self):
        self.extend(1000)
        with self.assertLogs("fuelsync.credits", level="WARNING"):
            self.settle(1500)
        self.assertBalance("-500.00")

    def test_settlement_ignores_credit_limit(self):
        self.extend(10000)
        self.settle(10000)
        self.assertBalance("0.00")

    def test_flagged_creditor_can_still_pay(self):
        self.extend(1000)
        flag_creditor(creditor_id=self.creditor.id, reason="late payer", user=self.manager)

        with self.assertRaises(LedgerError) as ctx:
            self.extend(100)
        self.assertEqual(ctx.exception.code, "CREDITOR_FLAGGED")

        self.settle(1000)
        self.assertBalance("0.00")

        unflag_creditor(creditor_id=self.creditor.id, user=self.manager)
        self.extend(100)
        self.assertBalance("100.00")

    def test_mixed_history_balance_matches_ledger(self):
        for amount in (1200, 800, 300):
            self.extend(amount)
        self.settle(700)
        self.extend(450.55)
        self.settle(1000)

        self.assertBalance("1050.55")

    # =====================================================
    # IMMUTABILITY
    # =====================================================

    def test_ledger_entries_cannot_be_edited(self):
        txn = self.extend(100)
        txn.amount = Decimal("1.00")
        with self.assertRaises(ValidationError):
            txn.save()

    def test_ledger_entries_cannot_be_deleted(self):
        txn = self.extend(100)
        with self.assertRaises(ValidationError):
            txn.delete()
        self.assertTrue(CreditTransaction.objects.filter(id=txn.id).exists())


class CreditorMaintenanceTests(TestCase):
    def setUp(self):
        self.station = make_station()
        self.manager = make_manager(self.station)

    def test_create_creditor(self):
        creditor = create_creditor(
            station=self.station,
            name="  City Transport  ",
            user=self.manager,
            limits=DEFAULT_LIMITS,
            credit_limit="5000",
            phone="0700000000",
        )
        self.assertEqual(creditor.name, "City Transport")
        self.assertEqual(creditor.credit_limit, Decimal("5000.00"))
        self.assertEqual(creditor.current_balance, Decimal("0.00"))
        self.assertEqual(creditor.available_credit, Decimal("5000.00"))

    def test_create_creditor_needs_credit_plan(self):
        with self.assertRaises(LedgerError) as ctx:
            create_creditor(
                station=self.station,
                name="City Transport",
                user=self.manager,
                limits=PlanLimits(backdated_days=3, credit_enabled=False),
            )
        self.assertEqual(ctx.exception.code, "CREDIT_FEATURE_DISABLED")

    def test_negative_limit_rejected(self):
        with self.assertRaises(LedgerError) as ctx:
            create_creditor(
                station=self.station,
                name="City Transport",
                user=self.manager,
                limits=DEFAULT_LIMITS,
                credit_limit="-1",
            )
        self.assertEqual(ctx.exception.code, "NEGATIVE_AMOUNT")

    def test_credit_summary(self):
        a = make_creditor(self.station, name="A")
        b = make_creditor(self.station, name="B")
        make_creditor(self.station, name="C", is_flagged=True)

        extend_credit(creditor_id=a.id, amount="3000", user=self.manager)
        extend_credit(creditor_id=b.id, amount="500", user=self.manager)
        settle_credit(creditor_id=b.id, amount="700", user=self.manager)

        summary = credit_summary(station=self.station)

        self.assertEqual(summary.creditor_count, 3)
        self.assertEqual(summary.flagged_count, 1)
        self.assertEqual(summary.with_balance_count, 1)
        self.assertEqual(summary.total_outstanding, Decimal("3000.00"))
        self.assertEqual(summary.total_advances, Decimal("200.00"))
        self.assertEqual(summary.top_creditors[0]["name"], "A")
