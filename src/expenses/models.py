"""Operating costs and manual ledger adjustments."""
from __future__ import annotations

from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


class Expense(TimeStampedModel):
    """An operating cost dated on the day it was incurred."""

    class Category(models.TextChoices):
        ADS = "ads", "Publicidad"
        SOFTWARE = "software", "Software"
        OFICINA = "oficina", "Oficina"
        OTRO = "otro", "Otro"

    category = models.CharField("categoría", max_length=20, choices=Category.choices, db_index=True)
    description = models.CharField("descripción", max_length=255)
    amount_usd = models.DecimalField("monto (USD)", max_digits=12, decimal_places=2)
    date = models.DateField("fecha", db_index=True)
    recurring = models.BooleanField("recurrente", default=False)
    recurring_source = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="occurrences",
        help_text="Gasto recurrente del que se generó esta ocurrencia.",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="expenses_created",
    )

    class Meta:
        verbose_name = "gasto"
        verbose_name_plural = "gastos"
        ordering = ["-date", "-created_at"]

    def __str__(self) -> str:
        return f"{self.description} ({self.amount_usd} USD)"


class AdSpend(TimeStampedModel):
    """Advertising budget spent on a platform over a period."""

    platform = models.CharField("plataforma", max_length=50, default="meta")
    period_start = models.DateField("inicio", db_index=True)
    period_end = models.DateField("fin")
    amount_usd = models.DecimalField("monto (USD)", max_digits=12, decimal_places=2)
    notes = models.TextField(blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="ad_spend_created",
    )

    class Meta:
        verbose_name = "inversión publicitaria"
        verbose_name_plural = "inversión publicitaria"
        ordering = ["-period_start"]

    def __str__(self) -> str:
        return f"{self.platform} {self.period_start}..{self.period_end}: {self.amount_usd} USD"


class ManualTransaction(TimeStampedModel):
    """Admin-entered income or deduction outside the payment flow."""

    class Type(models.TextChoices):
        INGRESO = "ingreso", "Ingreso"
        EGRESO = "egreso", "Egreso"

    type = models.CharField("tipo", max_length=10, choices=Type.choices, db_index=True)
    description = models.CharField("descripción", max_length=255)
    amount_usd = models.DecimalField("monto (USD)", max_digits=12, decimal_places=2)
    date = models.DateField("fecha", db_index=True)
    notes = models.TextField(blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="manual_transactions_created",
    )

    class Meta:
        verbose_name = "transacción manual"
        verbose_name_plural = "transacciones manuales"
        ordering = ["-date", "-created_at"]

    def __str__(self) -> str:
        return f"{self.get_type_display()}: {self.description} ({self.amount_usd} USD)"
