from django.contrib import admin

from pricing.models import FuelPrice


@admin.register(FuelPrice)
class FuelPriceAdmin(admin.ModelAdmin):
    list_display = ("station", "fuel_type", "price", "effective_from", "updated_by")
    list_filter = ("fuel_type",)
    date_hierarchy = "effective_from"
