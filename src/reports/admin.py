from django.contrib import admin

from reports.models import ExchangeRate


@admin.register(ExchangeRate)
class ExchangeRateAdmin(admin.ModelAdmin):
    list_display = ("date", "usd_to_crc", "source")
    date_hierarchy = "date"
