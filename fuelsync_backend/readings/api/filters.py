# readings/api/filters.py

import django_filters

from core.constants import FUEL_TYPE_CHOICES
from readings.models import NozzleReading


class NozzleReadingFilter(django_filters.FilterSet):
    station_id = django_filters.UUIDFilter(field_name="station_id")
    nozzle_id = django_filters.UUIDFilter(field_name="nozzle_id")
    pump_id = django_filters.UUIDFilter(field_name="nozzle__pump_id")
    fuel_type = django_filters.ChoiceFilter(choices=FUEL_TYPE_CHOICES)
    start_date = django_filters.DateFilter(field_name="reading_date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="reading_date", lookup_expr="lte")
    has_credit = django_filters.BooleanFilter(method="filter_has_credit")
    settled = django_filters.BooleanFilter(field_name="settlement", lookup_expr="isnull", exclude=True)

    class Meta:
        model = NozzleReading
        fields = ["reading_date", "is_initial", "creditor"]

    def filter_has_credit(self, queryset, name, value):
        if value:
            return queryset.filter(credit_amount__gt=0)
        return queryset.filter(credit_amount=0)
