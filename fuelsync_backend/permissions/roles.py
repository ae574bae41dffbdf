# permissions/roles.py

from __future__ import annotations

from typing import Optional

from django.db.models import Q
from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS
# =========================================================
ROLE_SUPER_ADMIN = "super_admin"
ROLE_OWNER = "owner"
ROLE_MANAGER = "manager"
ROLE_EMPLOYEE = "employee"

ROLE_CHOICES = [
    (ROLE_SUPER_ADMIN, "Super Admin"),
    (ROLE_OWNER, "Owner"),
    (ROLE_MANAGER, "Manager"),
    (ROLE_EMPLOYEE, "Employee"),
]


# =========================================================
# CAPABILITIES
# =========================================================
# Views protect capabilities, not raw roles.
CAP_STATION_VIEW = "station.view"         # read prices, readings, creditors

CAP_READINGS_SUBMIT = "readings.submit"
CAP_READINGS_EDIT_PAYMENT = "readings.edit_payment"

CAP_PRICES_SET = "prices.set"

CAP_CREDIT_SELL = "credits.sell"
CAP_CREDIT_MANAGE = "credits.manage"      # create/flag creditors, record payments

CAP_SETTLEMENT_RECORD = "settlements.record"
CAP_SETTLEMENT_APPROVE = "settlements.approve"

CAP_REPORTS_VIEW = "reports.view"

ALL_CAPABILITIES = {
    CAP_STATION_VIEW,
    CAP_READINGS_SUBMIT,
    CAP_READINGS_EDIT_PAYMENT,
    CAP_PRICES_SET,
    CAP_CREDIT_SELL,
    CAP_CREDIT_MANAGE,
    CAP_SETTLEMENT_RECORD,
    CAP_SETTLEMENT_APPROVE,
    CAP_REPORTS_VIEW,
}

_MANAGER_CAPABILITIES = {
    CAP_STATION_VIEW,
    CAP_READINGS_SUBMIT,
    CAP_READINGS_EDIT_PAYMENT,
    CAP_PRICES_SET,
    CAP_CREDIT_SELL,
    CAP_CREDIT_MANAGE,
    CAP_SETTLEMENT_RECORD,
    CAP_REPORTS_VIEW,
}

ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_SUPER_ADMIN: {*ALL_CAPABILITIES},
    ROLE_OWNER: {*ALL_CAPABILITIES},
    ROLE_MANAGER: _MANAGER_CAPABILITIES,
    ROLE_EMPLOYEE: {
        CAP_STATION_VIEW,
        CAP_READINGS_SUBMIT,
        CAP_CREDIT_SELL,
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def capabilities_for(user) -> set[str]:
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


def can_access_station(user, station) -> bool:
    """
    Station scope:
    - super_admin: every station
    - owner: stations they own
    - manager/employee: the station they are assigned to
    """
    if not user or not user.is_authenticated:
        return False

    role = get_user_role(user)
    if role == ROLE_SUPER_ADMIN:
        return True
    if role == ROLE_OWNER:
        return station.owner_id == user.id
    if role in (ROLE_MANAGER, ROLE_EMPLOYEE):
        return user.station_id is not None and user.station_id == station.id
    return False


# =========================================================
# Capability permission
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        required_capability = CAP_SETTLEMENT_RECORD

    Views serving several methods may set required_capabilities
    as {method: capability}.
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        per_method = getattr(view, "required_capabilities", None) or {}
        required = per_method.get(request.method) or getattr(
            view, "required_capability", None
        )
        if not required:
            # deny-by-default to avoid accidental open endpoints
            return False

        return required in capabilities_for(user)


def station_scope_q(user, field: str = "station") -> Q:
    """
    Q filter restricting a queryset to the stations the user can act on.
    """
    role = get_user_role(user)
    if role == ROLE_SUPER_ADMIN:
        return Q()
    if role == ROLE_OWNER:
        return Q(**{f"{field}__owner_id": user.id})
    if role in (ROLE_MANAGER, ROLE_EMPLOYEE) and user.station_id:
        return Q(**{f"{field}_id": user.station_id})
    return Q(pk__in=[])
