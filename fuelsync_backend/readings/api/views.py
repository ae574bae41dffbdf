# readings/api/views.py

"""
READING ENDPOINTS

Order of checks for every write:
1) authentication + capability (permission classes)
2) station scope (core.api.station_for_request)
3) plan limits resolved here and passed to the engine
4) reading engine (one atomic transaction)
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.generics import GenericAPIView, ListAPIView, RetrieveAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.api import ledger_error_response, parse_query_date, station_for_request
from core.exceptions import LedgerError, ledger_error
from core.policies import PlanLimits
from permissions.roles import (
    CAP_READINGS_EDIT_PAYMENT,
    CAP_READINGS_SUBMIT,
    CAP_STATION_VIEW,
    HasCapability,
    station_scope_q,
)
from readings.api.filters import NozzleReadingFilter
from readings.api.serializers import (
    NozzleReadingSerializer,
    PreviousReadingSerializer,
    SubmitReadingSerializer,
    UpdatePaymentSerializer,
)
from readings.models import NozzleReading
from readings.services.reading_engine import (
    PaymentSplit,
    daily_reading_summary,
    previous_reading_for,
    submit_reading,
    update_reading_payment,
)
from stations.models import Nozzle


def _scoped_readings(user):
    return NozzleReading.objects.select_related("nozzle", "creditor").filter(
        station_scope_q(user)
    )


class ReadingListCreateView(ListAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capabilities = {"GET": CAP_STATION_VIEW, "POST": CAP_READINGS_SUBMIT}
    serializer_class = NozzleReadingSerializer
    filterset_class = NozzleReadingFilter

    def get_queryset(self):
        return _scoped_readings(self.request.user).order_by("-reading_date", "-created_at")

    @extend_schema(tags=["readings"], responses=NozzleReadingSerializer(many=True))
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        tags=["readings"],
        request=SubmitReadingSerializer,
        responses={201: NozzleReadingSerializer},
        description="Record a meter reading; litres, price and total are computed server-side.",
    )
    def post(self, request):
        s = SubmitReadingSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            nozzle = Nozzle.objects.get(id=data["nozzle_id"])
        except Nozzle.DoesNotExist:
            return ledger_error_response(
                ledger_error("NOZZLE_NOT_FOUND", nozzle_id=data["nozzle_id"])
            )

        station = station_for_request(request, nozzle.station_id)
        limits = PlanLimits.for_station(station)

        try:
            reading = submit_reading(
                nozzle_id=nozzle.id,
                reading_date=data["reading_date"],
                reading_value=data["reading_value"],
                payment=PaymentSplit.from_mapping(s.payment_fields()),
                creditor_id=data.get("creditor_id"),
                is_initial=data.get("is_initial", False),
                notes=data.get("notes", ""),
                user=request.user,
                limits=limits,
            )
        except LedgerError as exc:
            return ledger_error_response(exc)

        return Response(NozzleReadingSerializer(reading).data, status=status.HTTP_201_CREATED)


class ReadingDetailView(RetrieveAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_STATION_VIEW
    serializer_class = NozzleReadingSerializer
    lookup_url_kwarg = "reading_id"

    def get_queryset(self):
        return _scoped_readings(self.request.user)

    @extend_schema(tags=["readings"], responses=NozzleReadingSerializer)
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class ReadingPaymentUpdateView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_READINGS_EDIT_PAYMENT
    serializer_class = UpdatePaymentSerializer

    @extend_schema(
        tags=["readings"],
        request=UpdatePaymentSerializer,
        responses={200: NozzleReadingSerializer},
        description="Re-split cash/online of an unsettled reading (credit leg is fixed).",
    )
    def patch(self, request, reading_id):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            reading = NozzleReading.objects.get(id=reading_id)
        except NozzleReading.DoesNotExist:
            return ledger_error_response(ledger_error("READING_NOT_FOUND", reading_id=reading_id))

        station = station_for_request(request, reading.station_id)

        try:
            reading = update_reading_payment(
                reading_id=reading.id,
                station=station,
                cash_amount=s.validated_data["cash_amount"],
                online_amount=s.validated_data["online_amount"],
                user=request.user,
            )
        except LedgerError as exc:
            return ledger_error_response(exc)

        return Response(NozzleReadingSerializer(reading).data, status=status.HTTP_200_OK)


class PreviousReadingView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_STATION_VIEW

    @extend_schema(
        tags=["readings"],
        parameters=[
            OpenApiParameter(name="date", type=str, location=OpenApiParameter.QUERY, required=False),
        ],
        responses=PreviousReadingSerializer,
    )
    def get(self, request, nozzle_id):
        try:
            nozzle = Nozzle.objects.select_related("station").get(id=nozzle_id)
        except Nozzle.DoesNotExist:
            return ledger_error_response(ledger_error("NOZZLE_NOT_FOUND", nozzle_id=nozzle_id))

        station_for_request(request, nozzle.station_id)
        on_date = parse_query_date(request.query_params.get("date"), field="date")

        result = previous_reading_for(nozzle=nozzle, on_date=on_date)
        return Response(PreviousReadingSerializer(result).data, status=status.HTTP_200_OK)


class DailyReadingSummaryView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_STATION_VIEW

    @extend_schema(
        tags=["readings"],
        parameters=[
            OpenApiParameter(name="station_id", type=str, location=OpenApiParameter.QUERY, required=True),
            OpenApiParameter(name="date", type=str, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def get(self, request):
        station_id = (request.query_params.get("station_id") or "").strip()
        if not station_id:
            raise ValidationError({"station_id": "This query parameter is required."})

        station = station_for_request(request, station_id)
        on_date = parse_query_date(request.query_params.get("date"), field="date")

        return Response(daily_reading_summary(station=station, on_date=on_date))
