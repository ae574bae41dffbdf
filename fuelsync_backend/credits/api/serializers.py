# credits/api/serializers.py

from rest_framework import serializers

from core.constants import FUEL_TYPE_CHOICES
from credits.models import CreditTransaction, Creditor


class CreditorSerializer(serializers.ModelSerializer):
    available_credit = serializers.DecimalField(
        max_digits=14, decimal_places=2, read_only=True, allow_null=True
    )

    class Meta:
        model = Creditor
        fields = [
            "id",
            "station",
            "name",
            "contact_person",
            "phone",
            "email",
            "address",
            "vehicle_number",
            "credit_limit",
            "credit_period_days",
            "current_balance",
            "available_credit",
            "last_transaction_date",
            "last_payment_date",
            "is_active",
            "is_flagged",
            "flag_reason",
            "flagged_at",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class CreateCreditorSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    contact_person = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    address = serializers.CharField(required=False, allow_blank=True, default="")
    vehicle_number = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    credit_limit = serializers.DecimalField(
        max_digits=14, decimal_places=2, required=False, allow_null=True, default=None
    )
    credit_period_days = serializers.IntegerField(min_value=0, required=False, default=30)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CreditTransactionSerializer(serializers.ModelSerializer):
    creditor_name = serializers.CharField(source="creditor.name", read_only=True)

    class Meta:
        model = CreditTransaction
        fields = [
            "id",
            "station",
            "creditor",
            "creditor_name",
            "transaction_type",
            "fuel_type",
            "litres",
            "price_per_litre",
            "amount",
            "transaction_date",
            "nozzle_reading",
            "reference_number",
            "notes",
            "entered_by",
            "created_at",
        ]
        read_only_fields = fields


class CreditSaleSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    fuel_type = serializers.ChoiceField(choices=FUEL_TYPE_CHOICES, required=False, allow_blank=True, default="")
    litres = serializers.DecimalField(max_digits=14, decimal_places=3, required=False, allow_null=True)
    price_per_litre = serializers.DecimalField(max_digits=8, decimal_places=2, required=False, allow_null=True)
    transaction_date = serializers.DateField(required=False, allow_null=True)
    reference_number = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CreditPaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    transaction_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class FlagCreditorSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
