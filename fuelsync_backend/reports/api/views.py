# reports/api/views.py

"""
RECEIVABLES REPORTS (READ-ONLY)

- GET stations/<id>/aging/?as_of=YYYY-MM-DD
- GET stations/<id>/income/?start_date=...&end_date=...

Both default their dates to today (station local time).
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.api import ledger_error_response, parse_query_date, station_for_request
from core.exceptions import LedgerError
from permissions.roles import CAP_REPORTS_VIEW, HasCapability
from reports.api.serializers import AgingReportSerializer, IncomeStatementSerializer
from reports.services.receivables import aging_report, income_statement


class AgingReportView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REPORTS_VIEW

    @extend_schema(
        tags=["reports"],
        parameters=[OpenApiParameter("as_of", str, required=False)],
        responses=AgingReportSerializer,
    )
    def get(self, request, station_id):
        station = station_for_request(request, station_id)
        as_of = parse_query_date(request.query_params.get("as_of"), field="as_of")

        report = aging_report(station=station, as_of=as_of)
        return Response(AgingReportSerializer(report).data, status=status.HTTP_200_OK)


class IncomeStatementView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REPORTS_VIEW

    @extend_schema(
        tags=["reports"],
        parameters=[
            OpenApiParameter("start_date", str, required=False),
            OpenApiParameter("end_date", str, required=False),
        ],
        responses=IncomeStatementSerializer,
    )
    def get(self, request, station_id):
        station = station_for_request(request, station_id)
        end_date = parse_query_date(request.query_params.get("end_date"), field="end_date")
        start_date = parse_query_date(
            request.query_params.get("start_date"), field="start_date", default=end_date
        )

        try:
            statement = income_statement(station=station, start_date=start_date, end_date=end_date)
        except LedgerError as exc:
            return ledger_error_response(exc)

        return Response(IncomeStatementSerializer(statement).data, status=status.HTTP_200_OK)
