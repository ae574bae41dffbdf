# reports/tests/test_api.py

from __future__ import annotations

from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from core.testing import make_creditor, make_manager, make_staff, make_station
from credits.services.credit_ledger import extend_credit

REPORTS_URL = "/api/reports/"


class ReportApiTests(TestCase):
    def setUp(self):
        self.today = timezone.localdate()
        self.station = make_station()
        self.manager = make_manager(self.station)
        self.employee = make_staff(self.station)

        creditor = make_creditor(self.station, name="Late Fleet", credit_period_days=30)
        extend_credit(
            creditor_id=creditor.id,
            amount="1200.00",
            user=self.manager,
            transaction_date=self.today - timedelta(days=45),
        )

        self.client = APIClient()

    def test_aging_report(self):
        self.client.force_authenticate(user=self.manager)
        res = self.client.get(f"{REPORTS_URL}stations/{self.station.id}/aging/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["overdue_total"], "1200.00")
        self.assertEqual(res.data["rows"][0]["bucket"], "OVERDUE")
        self.assertEqual(res.data["rows"][0]["overdue_band"], "1-30")

    def test_aging_as_of_past_date(self):
        self.client.force_authenticate(user=self.manager)
        as_of = (self.today - timedelta(days=20)).isoformat()
        res = self.client.get(f"{REPORTS_URL}stations/{self.station.id}/aging/", {"as_of": as_of})

        self.assertEqual(res.data["rows"][0]["bucket"], "CURRENT")

    def test_bad_date_is_400(self):
        self.client.force_authenticate(user=self.manager)
        res = self.client.get(f"{REPORTS_URL}stations/{self.station.id}/aging/", {"as_of": "31/12/2025"})
        self.assertEqual(res.status_code, 400)

    def test_employee_cannot_view_reports(self):
        self.client.force_authenticate(user=self.employee)
        res = self.client.get(f"{REPORTS_URL}stations/{self.station.id}/aging/")
        self.assertEqual(res.status_code, 403)

    def test_income_statement(self):
        self.client.force_authenticate(user=self.manager)
        res = self.client.get(
            f"{REPORTS_URL}stations/{self.station.id}/income/",
            {"start_date": (self.today - timedelta(days=7)).isoformat()},
        )

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["total_sales"], "0.00")
        self.assertEqual(res.data["unsettled_days"], [])

    def test_inverted_income_range_is_400(self):
        self.client.force_authenticate(user=self.manager)
        res = self.client.get(
            f"{REPORTS_URL}stations/{self.station.id}/income/",
            {
                "start_date": self.today.isoformat(),
                "end_date": (self.today - timedelta(days=1)).isoformat(),
            },
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["code"], "INVALID_DATE_RANGE")
