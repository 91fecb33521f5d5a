from django.contrib import admin

from payroll.models import SalaryPayment


@admin.register(SalaryPayment)
class SalaryPaymentAdmin(admin.ModelAdmin):
    list_display = ("team_member", "period_label", "amount", "status", "paid_date")
    list_filter = ("status", "period_label")
    search_fields = ("team_member__email", "team_member__first_name", "period_label")
    list_select_related = ("team_member",)
