# reports/api/serializers.py

from rest_framework import serializers


class AgingRowSerializer(serializers.Serializer):
    creditor_id = serializers.CharField()
    name = serializers.CharField()
    balance = serializers.DecimalField(max_digits=14, decimal_places=2)
    credit_limit = serializers.DecimalField(max_digits=14, decimal_places=2, allow_null=True)
    credit_period_days = serializers.IntegerField()
    last_transaction_date = serializers.DateField(allow_null=True)
    due_date = serializers.DateField()
    bucket = serializers.CharField()
    days_overdue = serializers.IntegerField()
    overdue_band = serializers.CharField(allow_null=True)


class AgingReportSerializer(serializers.Serializer):
    station_id = serializers.CharField()
    as_of = serializers.DateField()
    rows = AgingRowSerializer(many=True)
    current_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    overdue_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    outstanding_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    band_totals = serializers.DictField(
        child=serializers.DecimalField(max_digits=14, decimal_places=2)
    )


class FuelTotalsSerializer(serializers.Serializer):
    fuel_type = serializers.CharField()
    litres = serializers.DecimalField(max_digits=14, decimal_places=3)
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class IncomeStatementSerializer(serializers.Serializer):
    station_id = serializers.CharField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    total_litres = serializers.DecimalField(max_digits=16, decimal_places=3)
    total_sales = serializers.DecimalField(max_digits=16, decimal_places=2)
    cash_sales = serializers.DecimalField(max_digits=16, decimal_places=2)
    online_sales = serializers.DecimalField(max_digits=16, decimal_places=2)
    credit_sales = serializers.DecimalField(max_digits=16, decimal_places=2)
    by_fuel_type = FuelTotalsSerializer(many=True)
    credit_collected = serializers.DecimalField(max_digits=16, decimal_places=2)
    cash_counted = serializers.DecimalField(max_digits=16, decimal_places=2)
    cash_variance = serializers.DecimalField(max_digits=16, decimal_places=2)
    cash_shortfall = serializers.DecimalField(max_digits=16, decimal_places=2)
    settlement_count = serializers.IntegerField()
    unsettled_days = serializers.ListField(child=serializers.DateField())
    net_cash_income = serializers.DecimalField(max_digits=16, decimal_places=2)
