"""Admin registration for expense models."""
from django.contrib import admin

from expenses.models import AdSpend, Expense, ManualTransaction


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ("description", "category", "amount_usd", "date", "recurring", "created_by")
    list_filter = ("category", "recurring")
    search_fields = ("description",)
    date_hierarchy = "date"
    readonly_fields = ("created_at", "updated_at")


@admin.register(AdSpend)
class AdSpendAdmin(admin.ModelAdmin):
    list_display = ("platform", "period_start", "period_end", "amount_usd")
    list_filter = ("platform",)
    date_hierarchy = "period_start"


@admin.register(ManualTransaction)
class ManualTransactionAdmin(admin.ModelAdmin):
    list_display = ("type", "description", "amount_usd", "date", "created_by")
    list_filter = ("type",)
    search_fields = ("description", "notes")
    date_hierarchy = "date"
