from django.contrib import admin

from payments.models import Commission, Payment


class CommissionInline(admin.TabularInline):
    model = Commission
    extra = 0
    can_delete = False
    readonly_fields = ("team_member", "role", "percentage", "amount", "is_paid", "paid_date")


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = (
        "payment_date",
        "sales_set",
        "client",
        "amount_gross",
        "payment_method",
        "installment_months",
        "fee_amount",
        "amount_net",
    )
    list_filter = ("payment_method", "installment_months")
    search_fields = ("sales_set__prospect_name", "client__business_name", "notes")
    date_hierarchy = "payment_date"
    readonly_fields = ("fee_percentage", "fee_amount", "amount_net", "created_by", "created_at")
    inlines = [CommissionInline]

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Commission)
class CommissionAdmin(admin.ModelAdmin):
    list_display = ("team_member", "role", "amount", "is_paid", "paid_date", "payment")
    list_filter = ("role", "is_paid")
    search_fields = ("team_member__email", "team_member__first_name")
    list_select_related = ("team_member", "payment")
    readonly_fields = ("payment", "team_member", "role", "percentage", "amount")

    def has_delete_permission(self, request, obj=None):
        return False
