# settlements/api/serializers.py

from rest_framework import serializers

from settlements.models import Settlement


class SettlementSerializer(serializers.ModelSerializer):
    class Meta:
        model = Settlement
        fields = [
            "id",
            "station",
            "settlement_date",
            "expected_cash",
            "actual_cash",
            "variance",
            "variance_percent",
            "variance_status",
            "expected_online",
            "expected_credit",
            "actual_online",
            "actual_credit",
            "variance_online",
            "variance_credit",
            "reading_count",
            "status",
            "revision",
            "notes",
            "recorded_by",
            "recorded_at",
            "approved_by",
            "approved_at",
        ]
        read_only_fields = fields


class RecordSettlementSerializer(serializers.Serializer):
    settlement_date = serializers.DateField()
    actual_cash = serializers.DecimalField(max_digits=14, decimal_places=2)
    actual_online = serializers.DecimalField(
        max_digits=14, decimal_places=2, required=False, allow_null=True, default=None
    )
    actual_credit = serializers.DecimalField(
        max_digits=14, decimal_places=2, required=False, allow_null=True, default=None
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")
