# readings/api/serializers.py

from rest_framework import serializers

from readings.models import NozzleReading


class NozzleReadingSerializer(serializers.ModelSerializer):
    creditor_name = serializers.CharField(source="creditor.name", read_only=True, default=None)
    pump_id = serializers.UUIDField(source="nozzle.pump_id", read_only=True)
    nozzle_number = serializers.IntegerField(source="nozzle.nozzle_number", read_only=True)

    class Meta:
        model = NozzleReading
        fields = [
            "id",
            "station",
            "nozzle",
            "pump_id",
            "nozzle_number",
            "fuel_type",
            "entered_by",
            "shift",
            "reading_date",
            "reading_value",
            "previous_reading",
            "litres_sold",
            "price_per_litre",
            "total_amount",
            "cash_amount",
            "online_amount",
            "credit_amount",
            "creditor",
            "creditor_name",
            "settlement",
            "is_initial",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class SubmitReadingSerializer(serializers.Serializer):
    """
    What the client may send. Litres, price and total are computed
    server-side; omitting all payment fields records the sale as cash.
    """

    nozzle_id = serializers.UUIDField()
    reading_date = serializers.DateField()
    reading_value = serializers.DecimalField(max_digits=14, decimal_places=3)

    cash_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False)
    online_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False)
    credit_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False)
    creditor_id = serializers.UUIDField(required=False, allow_null=True)

    is_initial = serializers.BooleanField(required=False, default=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def payment_fields(self) -> dict | None:
        data = self.validated_data
        keys = ("cash_amount", "online_amount", "credit_amount")
        if not any(k in data for k in keys):
            return None
        return {k: data.get(k) for k in keys}


class UpdatePaymentSerializer(serializers.Serializer):
    cash_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    online_amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class PreviousReadingSerializer(serializers.Serializer):
    nozzle_id = serializers.CharField()
    fuel_type = serializers.CharField()
    previous_reading = serializers.DecimalField(max_digits=14, decimal_places=3)
    previous_date = serializers.DateField(allow_null=True)
    is_first_reading = serializers.BooleanField()
    price_per_litre = serializers.DecimalField(max_digits=8, decimal_places=2, allow_null=True)
