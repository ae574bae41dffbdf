from django.contrib import admin

from settlements.models import Settlement


@admin.register(Settlement)
class SettlementAdmin(admin.ModelAdmin):
    list_display = (
        "station",
        "settlement_date",
        "expected_cash",
        "actual_cash",
        "variance",
        "variance_status",
        "status",
        "revision",
    )
    list_filter = ("variance_status", "status")
    date_hierarchy = "settlement_date"
    readonly_fields = ("expected_cash", "variance", "variance_percent", "variance_status", "revision")
