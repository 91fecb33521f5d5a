from django.contrib import admin

from clients.models import Advance90Phase, Client, OnboardingChecklistItem


class OnboardingChecklistItemInline(admin.TabularInline):
    model = OnboardingChecklistItem
    extra = 0
    fields = ("position", "label", "completed", "completed_at", "completed_by")
    readonly_fields = ("completed_at", "completed_by")


class Advance90PhaseInline(admin.TabularInline):
    model = Advance90Phase
    extra = 0
    fields = ("order", "phase_name", "start_date", "end_date", "status")


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ("business_name", "service", "status", "assigned_to", "created_at")
    list_filter = ("status", "service")
    search_fields = ("business_name", "contact_name", "ig", "whatsapp")
    list_select_related = ("assigned_to",)
    readonly_fields = ("deal", "sales_set", "created_at", "updated_at")
    inlines = [OnboardingChecklistItemInline, Advance90PhaseInline]
