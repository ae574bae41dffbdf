from django.contrib import admin

from stations.models import Nozzle, Pump, Shift, Station


@admin.register(Station)
class StationAdmin(admin.ModelAdmin):
    list_display = ("name", "owner", "city", "require_shift_for_readings", "is_active")
    list_filter = ("is_active", "require_shift_for_readings")
    search_fields = ("name", "code", "city")


@admin.register(Pump)
class PumpAdmin(admin.ModelAdmin):
    list_display = ("station", "pump_number", "name", "status")
    list_filter = ("status",)


@admin.register(Nozzle)
class NozzleAdmin(admin.ModelAdmin):
    list_display = ("pump", "nozzle_number", "fuel_type", "status", "last_reading", "last_reading_date")
    list_filter = ("status", "fuel_type")
    readonly_fields = ("last_reading", "last_reading_date")


@admin.register(Shift)
class ShiftAdmin(admin.ModelAdmin):
    list_display = ("station", "employee", "status", "started_at", "ended_at")
    list_filter = ("status",)
