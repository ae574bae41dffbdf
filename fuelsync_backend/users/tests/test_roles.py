from django.test import TestCase
from rest_framework.test import APIClient, APIRequestFactory

from core.testing import make_creditor, make_manager, make_staff, make_station, make_user
from permissions.roles import (
    CAP_CREDIT_MANAGE,
    CAP_CREDIT_SELL,
    CAP_PRICES_SET,
    CAP_READINGS_SUBMIT,
    CAP_REPORTS_VIEW,
    CAP_SETTLEMENT_APPROVE,
    CAP_SETTLEMENT_RECORD,
    HasCapability,
    can_access_station,
    capabilities_for,
    station_scope_q,
)
from credits.models import Creditor


class _View:
    def __init__(self, capability):
        self.required_capability = capability


class RoleCapabilityTests(TestCase):
    """
    GUARANTEES:
    - every role can record sales
    - only owners approve settlements
    - unknown roles and anonymous users get nothing
    """

    def setUp(self):
        self.factory = APIRequestFactory()
        self.station = make_station()
        self.owner = self.station.owner
        self.manager = make_manager(self.station)
        self.employee = make_staff(self.station)

    def _allowed(self, user, capability):
        request = self.factory.get("/")
        request.user = user
        return HasCapability().has_permission(request, _View(capability))

    def test_employee_capabilities(self):
        caps = capabilities_for(self.employee)

        self.assertIn(CAP_READINGS_SUBMIT, caps)
        self.assertIn(CAP_CREDIT_SELL, caps)
        self.assertNotIn(CAP_CREDIT_MANAGE, caps)
        self.assertNotIn(CAP_SETTLEMENT_RECORD, caps)
        self.assertNotIn(CAP_REPORTS_VIEW, caps)

    def test_manager_capabilities(self):
        self.assertTrue(self._allowed(self.manager, CAP_PRICES_SET))
        self.assertTrue(self._allowed(self.manager, CAP_SETTLEMENT_RECORD))
        self.assertFalse(self._allowed(self.manager, CAP_SETTLEMENT_APPROVE))

    def test_owner_approves(self):
        self.assertTrue(self._allowed(self.owner, CAP_SETTLEMENT_APPROVE))

    def test_view_without_capability_denies(self):
        self.assertFalse(self._allowed(self.owner, None))

    def test_anonymous_denied(self):
        from django.contrib.auth.models import AnonymousUser

        self.assertFalse(self._allowed(AnonymousUser(), CAP_READINGS_SUBMIT))


class StationScopeTests(TestCase):
    def setUp(self):
        self.station = make_station()
        self.other = make_station()

    def test_owner_sees_own_stations(self):
        owner = self.station.owner
        self.assertTrue(can_access_station(owner, self.station))
        self.assertFalse(can_access_station(owner, self.other))


    def test_staff_see_assigned_station(self):
        employee = make_staff(self.station)
        self.assertTrue(can_access_station(employee, self.station))
        self.assertFalse(can_access_station(employee, self.other))

    def test_unassigned_staff_see_nothing(self):
        employee = make_user("employee")
        self.assertFalse(can_access_station(employee, self.station))

    def test_super_admin_sees_everything(self):
        admin = make_user("super_admin")
        self.assertTrue(can_access_station(admin, self.station))
        self.assertTrue(can_access_station(admin, self.other))


class MeEndpointTests(TestCase):
    def test_me_lists_capabilities_and_plan(self):
        station = make_station()
        manager = make_manager(station)

        client = APIClient()
        client.force_authenticate(user=manager)
        res = client.get("/api/auth/me/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["role"], "manager")
        self.assertIn(CAP_SETTLEMENT_RECORD, res.data["capabilities"])
        self.assertEqual(res.data["plan"]["backdated_days"], 3)


class StationScopeQueryTests(TestCase):
    def test_scope_filters_querysets(self):
        station = make_station()
        other = make_station()
        mine = make_creditor(station)
        make_creditor(other)

        owner_view = Creditor.objects.filter(station_scope_q(station.owner))
        staff_view = Creditor.objects.filter(station_scope_q(make_staff(station)))
        admin_view = Creditor.objects.filter(station_scope_q(make_user("super_admin")))
        stray_view = Creditor.objects.filter(station_scope_q(make_user("employee")))

        self.assertEqual(list(owner_view), [mine])
        self.assertEqual(list(staff_view), [mine])
        self.assertEqual(admin_view.count(), 2)
        self.assertEqual(stray_view.count(), 0)
