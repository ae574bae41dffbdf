from django.contrib import admin

from credits.models import CreditTransaction, Creditor


@admin.register(Creditor)
class CreditorAdmin(admin.ModelAdmin):
    list_display = ("name", "station", "current_balance", "credit_limit", "is_active", "is_flagged")
    list_filter = ("is_active", "is_flagged")
    search_fields = ("name", "phone", "vehicle_number")
    readonly_fields = ("current_balance", "last_transaction_date", "last_payment_date")


@admin.register(CreditTransaction)
class CreditTransactionAdmin(admin.ModelAdmin):
    list_display = ("creditor", "transaction_type", "amount", "transaction_date", "reference_number")
    list_filter = ("transaction_type",)
    date_hierarchy = "transaction_date"

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
