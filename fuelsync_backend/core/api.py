# core/api.py

"""
HTTP EDGE HELPERS (shared by all ledger views)

- ledger_error_response: LedgerError -> Response with a stable body
    {"detail", "code", "kind", "context"}
- station_for_request: station lookup + station-scope check.
  Access is checked BEFORE any ledger algorithm runs.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework import status
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError
from rest_framework.response import Response

from core.exceptions import (
    KIND_CONFLICT,
    KIND_INVALID_STATE,
    KIND_NOT_FOUND,
    KIND_POLICY_VIOLATION,
    KIND_VALIDATION,
    LedgerError,
)
from permissions.roles import can_access_station

logger = logging.getLogger("fuelsync.api")

KIND_STATUS = {
    KIND_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    KIND_INVALID_STATE: status.HTTP_409_CONFLICT,
    KIND_VALIDATION: status.HTTP_400_BAD_REQUEST,
    KIND_POLICY_VIOLATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    KIND_CONFLICT: status.HTTP_409_CONFLICT,
}


def ledger_error_response(exc: LedgerError) -> Response:
    http_status = KIND_STATUS.get(exc.kind, status.HTTP_400_BAD_REQUEST)
    logger.info(
        "Ledger request rejected",
        extra={"code": exc.code, "kind": exc.kind, "http_status": http_status},
    )
    return Response(exc.as_dict(), status=http_status)


def station_for_request(request, station_id):
    from stations.models import Station

    try:
        station = Station.objects.select_related("owner__plan").get(id=station_id)
    except (Station.DoesNotExist, DjangoValidationError):
        raise NotFound("Station not found.")

    if not can_access_station(request.user, station):
        raise PermissionDenied("You do not have access to this station.")

    return station


def parse_query_date(value, *, field: str, default=None):
    """
    YYYY-MM-DD query param -> date. Missing -> default (today when None).
    """
    if value is None or str(value).strip() == "":
        return default if default is not None else timezone.localdate()

    try:
        parsed = parse_date(str(value).strip())
    except ValueError:
        parsed = None

    if parsed is None:
        raise ValidationError({field: "Expected a date in YYYY-MM-DD format."})
    return parsed
