# credits/api/views.py

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.api import ledger_error_response, station_for_request
from core.exceptions import LedgerError, ledger_error
from core.policies import PlanLimits
from credits.api.serializers import (
    CreateCreditorSerializer,
    CreditorSerializer,
    CreditPaymentSerializer,
    CreditSaleSerializer,
    CreditTransactionSerializer,
    FlagCreditorSerializer,
)
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
from permissions.roles import (
    CAP_CREDIT_MANAGE,
    CAP_CREDIT_SELL,
    CAP_REPORTS_VIEW,
    CAP_STATION_VIEW,
    HasCapability,
)


def _creditor_for_request(request, creditor_id):
    """
    (creditor, station) after the station-scope check, or raises
    CREDITOR_NOT_FOUND.
    """
    try:
        creditor = Creditor.objects.get(id=creditor_id)
    except Creditor.DoesNotExist:
        raise ledger_error("CREDITOR_NOT_FOUND", creditor_id=creditor_id)

    station = station_for_request(request, creditor.station_id)
    return creditor, station


class StationCreditorListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capabilities = {"GET": CAP_STATION_VIEW, "POST": CAP_CREDIT_MANAGE}
    serializer_class = CreateCreditorSerializer

    @extend_schema(tags=["credits"], responses=CreditorSerializer(many=True))
    def get(self, request, station_id):
        station = station_for_request(request, station_id)

        qs = Creditor.objects.filter(station=station).order_by("name")
        if request.query_params.get("active") in ("true", "1"):
            qs = qs.filter(is_active=True)
        if request.query_params.get("with_balance") in ("true", "1"):
            qs = qs.filter(current_balance__gt=0)

        return Response(CreditorSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["credits"],
        request=CreateCreditorSerializer,
        responses={201: CreditorSerializer},
    )
    def post(self, request, station_id):
        station = station_for_request(request, station_id)

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = dict(s.validated_data)

        try:
            creditor = create_creditor(
                station=station,
                user=request.user,
                limits=PlanLimits.for_station(station),
                name=data.pop("name"),
                credit_limit=data.pop("credit_limit", None),
                credit_period_days=data.pop("credit_period_days", 30),
                **data,
            )
        except LedgerError as exc:
            return ledger_error_response(exc)

        return Response(CreditorSerializer(creditor).data, status=status.HTTP_201_CREATED)


class CreditorDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_STATION_VIEW

    @extend_schema(tags=["credits"], responses=CreditorSerializer)
    def get(self, request, creditor_id):
        try:
            creditor, _station = _creditor_for_request(request, creditor_id)
        except LedgerError as exc:
            return ledger_error_response(exc)

        data = CreditorSerializer(creditor).data
        data["ledger_balance"] = str(ledger_balance(creditor))
        return Response(data, status=status.HTTP_200_OK)


class CreditSaleView(GenericAPIView):
    """
    Standalone credit sale (not tied to a meter reading).
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_CREDIT_SELL
    serializer_class = CreditSaleSerializer

    @extend_schema(
        tags=["credits"],
        request=CreditSaleSerializer,
        responses={201: CreditTransactionSerializer},
    )
    def post(self, request, creditor_id):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            creditor, station = _creditor_for_request(request, creditor_id)
            txn = extend_credit(
                creditor_id=creditor.id,
                station=station,
                amount=data["amount"],
                fuel_type=data.get("fuel_type", ""),
                litres=data.get("litres"),
                price_per_litre=data.get("price_per_litre"),
                transaction_date=data.get("transaction_date"),
                reference_number=data.get("reference_number", ""),
                notes=data.get("notes", ""),
                limits=PlanLimits.for_station(station),
                user=request.user,
            )
        except LedgerError as exc:
            return ledger_error_response(exc)

        return Response(CreditTransactionSerializer(txn).data, status=status.HTTP_201_CREATED)


class CreditPaymentView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_CREDIT_MANAGE
    serializer_class = CreditPaymentSerializer

    @extend_schema(
        tags=["credits"],
        request=CreditPaymentSerializer,
        responses={201: CreditTransactionSerializer},
        description="Record a payment against a creditor balance. Overpayment is held as an advance.",
    )
    def post(self, request, creditor_id):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            creditor, station = _creditor_for_request(request, creditor_id)
            txn = settle_credit(
                creditor_id=creditor.id,
                station=station,
                amount=data["amount"],
                reference=data.get("reference", ""),
                transaction_date=data.get("transaction_date"),
                notes=data.get("notes", ""),
                user=request.user,
            )
        except LedgerError as exc:
            return ledger_error_response(exc)

        body = CreditTransactionSerializer(txn).data
        body["balance_after"] = str(txn.creditor.current_balance)
        return Response(body, status=status.HTTP_201_CREATED)


class CreditorTransactionListView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_STATION_VIEW

    @extend_schema(tags=["credits"], responses=CreditTransactionSerializer(many=True))
    def get(self, request, creditor_id):
        try:
            creditor, _station = _creditor_for_request(request, creditor_id)
        except LedgerError as exc:
            return ledger_error_response(exc)

        qs = (
            CreditTransaction.objects.filter(creditor=creditor)
            .select_related("creditor")
            .order_by("-transaction_date", "-created_at")
        )
        tx_type = request.query_params.get("type")
        if tx_type:
            qs = qs.filter(transaction_type=tx_type)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(CreditTransactionSerializer(page, many=True).data)
        return Response(CreditTransactionSerializer(qs, many=True).data)


class CreditorFlagView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_CREDIT_MANAGE
    serializer_class = FlagCreditorSerializer

    @extend_schema(tags=["credits"], request=FlagCreditorSerializer, responses=CreditorSerializer)
    def post(self, request, creditor_id):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            creditor, station = _creditor_for_request(request, creditor_id)
            creditor = flag_creditor(
                creditor_id=creditor.id,
                station=station,
                reason=s.validated_data.get("reason", ""),
                user=request.user,
            )
        except LedgerError as exc:
            return ledger_error_response(exc)

        return Response(CreditorSerializer(creditor).data, status=status.HTTP_200_OK)


class CreditorUnflagView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_CREDIT_MANAGE

    @extend_schema(tags=["credits"], request=None, responses=CreditorSerializer)
    def post(self, request, creditor_id):
        try:
            creditor, station = _creditor_for_request(request, creditor_id)
            creditor = unflag_creditor(creditor_id=creditor.id, station=station, user=request.user)
        except LedgerError as exc:
            return ledger_error_response(exc)

        return Response(CreditorSerializer(creditor).data, status=status.HTTP_200_OK)


class StationCreditSummaryView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REPORTS_VIEW

    @extend_schema(tags=["credits"])
    def get(self, request, station_id):
        station = station_for_request(request, station_id)
        summary = credit_summary(station=station)

        return Response(
            {
                "station_id": str(station.id),
                "creditor_count": summary.creditor_count,
                "active_count": summary.active_count,
                "flagged_count": summary.flagged_count,
                "with_balance_count": summary.with_balance_count,
                "total_outstanding": str(summary.total_outstanding),
                "total_advances": str(summary.total_advances),
                "top_creditors": [
                    {
                        **row,
                        "current_balance": str(row["current_balance"]),
                        "credit_limit": str(row["credit_limit"]) if row["credit_limit"] is not None else None,
                    }
                    for row in summary.top_creditors
                ],
            },
            status=status.HTTP_200_OK,
        )
