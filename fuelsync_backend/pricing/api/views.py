# pricing/api/views.py

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.api import ledger_error_response, parse_query_date, station_for_request
from core.constants import FUEL_TYPES
from core.exceptions import LedgerError
from permissions.roles import CAP_PRICES_SET, CAP_STATION_VIEW, HasCapability
from pricing.api.serializers import (
    FuelPriceSerializer,
    ResolvedPriceSerializer,
    SetFuelPriceSerializer,
)
from pricing.models import FuelPrice
from pricing.services.price_resolver import current_prices, resolve_price, set_fuel_price

STATION_PARAM = OpenApiParameter(
    name="station_id", type=str, location=OpenApiParameter.QUERY, required=True
)
DATE_PARAM = OpenApiParameter(
    name="date",
    type=str,
    location=OpenApiParameter.QUERY,
    required=False,
    description="YYYY-MM-DD (default: today)",
)


def _required_param(request, name):
    value = (request.query_params.get(name) or "").strip()
    if not value:
        raise ValidationError({name: "This query parameter is required."})
    return value


class FuelPriceListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capabilities = {"GET": CAP_STATION_VIEW, "POST": CAP_PRICES_SET}
    serializer_class = SetFuelPriceSerializer

    @extend_schema(
        tags=["prices"],
        parameters=[STATION_PARAM],
        responses=FuelPriceSerializer(many=True),
    )
    def get(self, request):
        station = station_for_request(request, _required_param(request, "station_id"))
        qs = FuelPrice.objects.filter(station=station).order_by("fuel_type", "-effective_from")
        return Response(FuelPriceSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["prices"],
        request=SetFuelPriceSerializer,
        responses={201: FuelPriceSerializer, 200: FuelPriceSerializer},
        description="Add an effective-dated price (re-posting a date replaces it while unused).",
    )
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        station = station_for_request(request, data["station_id"])

        try:
            row, created = set_fuel_price(
                station=station,
                fuel_type=data["fuel_type"],
                price=data["price"],
                cost_price=data.get("cost_price"),
                effective_from=data["effective_from"],
                user=request.user,
            )
        except LedgerError as exc:
            return ledger_error_response(exc)

        return Response(
            FuelPriceSerializer(row).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class ResolvePriceView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_STATION_VIEW

    @extend_schema(
        tags=["prices"],
        parameters=[
            STATION_PARAM,
            OpenApiParameter(name="fuel_type", type=str, location=OpenApiParameter.QUERY, required=True),
            DATE_PARAM,
        ],
        responses=ResolvedPriceSerializer,
    )
    def get(self, request):
        station = station_for_request(request, _required_param(request, "station_id"))

        fuel_type = _required_param(request, "fuel_type")
        if fuel_type not in FUEL_TYPES:
            raise ValidationError({"fuel_type": f"Unknown fuel type: {fuel_type}"})

        on_date = parse_query_date(request.query_params.get("date"), field="date")
        resolved = resolve_price(station=station, fuel_type=fuel_type, on_date=on_date)
        return Response(ResolvedPriceSerializer(resolved).data, status=status.HTTP_200_OK)


class CurrentPricesView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_STATION_VIEW

    @extend_schema(
        tags=["prices"],
        parameters=[STATION_PARAM, DATE_PARAM],
        responses=ResolvedPriceSerializer(many=True),
        description="Effective price per fuel type; fuel types without a price report found=false.",
    )
    def get(self, request):
        station = station_for_request(request, _required_param(request, "station_id"))
        on_date = parse_query_date(request.query_params.get("date"), field="date")

        prices = current_prices(station=station, on_date=on_date)
        return Response(
            {
                "station_id": str(station.id),
                "date": on_date,
                "prices": ResolvedPriceSerializer(prices, many=True).data,
                "missing": [p.fuel_type for p in prices if not p.found],
            },
            status=status.HTTP_200_OK,
        )
