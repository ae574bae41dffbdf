from django.contrib import admin

from readings.models import NozzleReading


@admin.register(NozzleReading)
class NozzleReadingAdmin(admin.ModelAdmin):
    list_display = (
        "nozzle",
        "reading_date",
        "reading_value",
        "litres_sold",
        "total_amount",
        "credit_amount",
        "is_initial",
        "settlement",
    )
    list_filter = ("fuel_type", "is_initial")
    date_hierarchy = "reading_date"

    # ledger rows change only through the reading engine
    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
