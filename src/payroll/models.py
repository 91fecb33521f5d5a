"""Monthly salary payouts to team members."""
from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


class SalaryPayment(TimeStampedModel):
    class Status(models.TextChoices):
        PENDIENTE = "pendiente", "Pendiente"
        PAGADO = "pagado", "Pagado"

    team_member = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="salary_payments",
    )
    amount = models.DecimalField("monto (USD)", max_digits=12, decimal_places=2)
    period_label = models.CharField("periodo", max_length=50, help_text="Ej. 'Octubre 2026'.")
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDIENTE,
        db_index=True,
    )
    paid_date = models.DateField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Pago de salario"
        verbose_name_plural = "Pagos de salario"
        constraints = [
            models.UniqueConstraint(
                fields=["team_member", "period_label"],
                name="salary_payment_unique_period",
            ),
        ]

    def __str__(self):
        return f"{self.team_member} - {self.period_label} ({self.get_status_display()})"
