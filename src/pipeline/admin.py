from django.contrib import admin

from pipeline.models import Deal, SalesSet, SetStatusHistory


class SetStatusHistoryInline(admin.TabularInline):
    model = SetStatusHistory
    extra = 0
    can_delete = False
    fields = ("created_at", "old_status", "new_status", "changed_by", "notes")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


class DealInline(admin.TabularInline):
    model = Deal
    extra = 0
    can_delete = False
    fields = ("outcome", "service_sold", "revenue_total", "follow_up_date", "recorded_by")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(SalesSet)
class SalesSetAdmin(admin.ModelAdmin):
    list_display = ("prospect_name", "prospect_ig", "setter", "closer", "scheduled_at", "status", "is_duplicate")
    list_filter = ("status", "service_offered", "is_duplicate")
    search_fields = ("prospect_name", "prospect_ig", "prospect_whatsapp")
    date_hierarchy = "scheduled_at"
    list_select_related = ("setter", "closer")
    # Status is written only by the transition service.
    readonly_fields = ("status", "is_duplicate", "created_at", "updated_at")
    inlines = [SetStatusHistoryInline, DealInline]

    def has_delete_permission(self, request, obj=None):
        return False
