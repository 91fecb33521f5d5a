"""Models for the reports app."""
from django.db import models

from core.models import TimeStampedModel


class ExchangeRate(TimeStampedModel):
    """Daily USD to CRC spot rate used to display summaries in colones.

    One row per day, refreshed by the ``refresh_exchange_rate`` Celery task.
    Ledger amounts stay in USD; the rate only converts figures for display.
    """

    date = models.DateField("fecha", unique=True)
    usd_to_crc = models.DecimalField("USD a CRC", max_digits=12, decimal_places=4)
    source = models.CharField("fuente", max_length=50, default="exchangerate-api")

    class Meta:
        ordering = ["-date"]
        verbose_name = "Tipo de cambio"
        verbose_name_plural = "Tipos de cambio"

    def __str__(self):
        return f"{self.date}: 1 USD = {self.usd_to_crc} CRC"
