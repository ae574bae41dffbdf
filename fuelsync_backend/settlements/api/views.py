# settlements/api/views.py

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.api import ledger_error_response, parse_query_date, station_for_request
from core.exceptions import LedgerError, ledger_error
from permissions.roles import (
    CAP_SETTLEMENT_APPROVE,
    CAP_SETTLEMENT_RECORD,
    CAP_STATION_VIEW,
    HasCapability,
)
from settlements.api.serializers import RecordSettlementSerializer, SettlementSerializer
from settlements.models import Settlement
from settlements.services.reconciler import approve_settlement, record_settlement


class StationSettlementListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_SETTLEMENT_RECORD
    serializer_class = RecordSettlementSerializer

    @extend_schema(
        tags=["settlements"],
        parameters=[
            OpenApiParameter("start_date", str, required=False),
            OpenApiParameter("end_date", str, required=False),
        ],
        responses=SettlementSerializer(many=True),
    )
    def get(self, request, station_id):
        station = station_for_request(request, station_id)

        qs = Settlement.objects.filter(station=station).order_by("-settlement_date")
        if request.query_params.get("start_date"):
            qs = qs.filter(
                settlement_date__gte=parse_query_date(
                    request.query_params["start_date"], field="start_date"
                )
            )
        if request.query_params.get("end_date"):
            qs = qs.filter(
                settlement_date__lte=parse_query_date(
                    request.query_params["end_date"], field="end_date"
                )
            )

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(SettlementSerializer(page, many=True).data)
        return Response(SettlementSerializer(qs, many=True).data)

    @extend_schema(
        tags=["settlements"],
        request=RecordSettlementSerializer,
        responses={201: SettlementSerializer},
        description="Record counted cash for a day. Expected cash and variance are computed server-side.",
    )
    def post(self, request, station_id):
        station = station_for_request(request, station_id)

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            settlement = record_settlement(
                station_id=station.id,
                settlement_date=data["settlement_date"],
                actual_cash=data["actual_cash"],
                actual_online=data.get("actual_online"),
                actual_credit=data.get("actual_credit"),
                notes=data.get("notes", ""),
                user=request.user,
            )
        except LedgerError as exc:
            return ledger_error_response(exc)

        return Response(SettlementSerializer(settlement).data, status=status.HTTP_201_CREATED)


class SettlementDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_STATION_VIEW

    @extend_schema(tags=["settlements"], responses=SettlementSerializer)
    def get(self, request, settlement_id):
        try:
            settlement = Settlement.objects.get(id=settlement_id)
        except Settlement.DoesNotExist:
            return ledger_error_response(
                ledger_error("SETTLEMENT_NOT_FOUND", settlement_id=settlement_id)
            )

        station_for_request(request, settlement.station_id)
        return Response(SettlementSerializer(settlement).data)


class SettlementApproveView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_SETTLEMENT_APPROVE

    @extend_schema(tags=["settlements"], request=None, responses=SettlementSerializer)
    def post(self, request, settlement_id):
        try:
            settlement = Settlement.objects.get(id=settlement_id)
        except Settlement.DoesNotExist:
            return ledger_error_response(
                ledger_error("SETTLEMENT_NOT_FOUND", settlement_id=settlement_id)
            )

        station = station_for_request(request, settlement.station_id)

        try:
            settlement = approve_settlement(
                settlement_id=settlement.id, station=station, user=request.user
            )
        except LedgerError as exc:
            return ledger_error_response(exc)

        return Response(SettlementSerializer(settlement).data, status=status.HTTP_200_OK)
