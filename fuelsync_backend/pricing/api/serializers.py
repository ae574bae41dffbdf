# pricing/api/serializers.py

from rest_framework import serializers

from core.constants import FUEL_TYPE_CHOICES
from pricing.models import FuelPrice


class FuelPriceSerializer(serializers.ModelSerializer):
    class Meta:
        model = FuelPrice
        fields = [
            "id",
            "station",
            "fuel_type",
            "price",
            "cost_price",
            "effective_from",
            "updated_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class SetFuelPriceSerializer(serializers.Serializer):
    station_id = serializers.UUIDField()
    fuel_type = serializers.ChoiceField(choices=FUEL_TYPE_CHOICES)
    price = serializers.DecimalField(max_digits=8, decimal_places=2)
    cost_price = serializers.DecimalField(
        max_digits=8, decimal_places=2, required=False, allow_null=True
    )
    effective_from = serializers.DateField()


class ResolvedPriceSerializer(serializers.Serializer):
    fuel_type = serializers.CharField()
    price = serializers.DecimalField(max_digits=8, decimal_places=2, allow_null=True)
    found = serializers.BooleanField()
    effective_from = serializers.DateField(allow_null=True)
    price_id = serializers.CharField(allow_null=True)
