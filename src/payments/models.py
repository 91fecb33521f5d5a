"""Money received from clients and the commissions it generates."""
from decimal import Decimal

from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


class Payment(TimeStampedModel):
    """One cash receipt against a set. Never deleted once recorded."""

    class Method(models.TextChoices):
        TRANSFERENCIA = "transferencia", "Transferencia"
        SINPE = "sinpe", "SINPE Móvil"
        TILOPAY = "tilopay", "Tilopay"
        CRYPTO = "crypto", "Crypto"
        OTRO = "otro", "Otro"

    # Only the card processor supports installment plans (and charges for them).
    INSTALLMENT_METHODS = frozenset({Method.TILOPAY})

    sales_set = models.ForeignKey(
        "pipeline.SalesSet",
        on_delete=models.PROTECT,
        related_name="payments",
    )
    client = models.ForeignKey(
        "clients.Client",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
    )
    amount_gross = models.DecimalField("monto bruto (USD)", max_digits=12, decimal_places=2)
    payment_method = models.CharField("método", max_length=20, choices=Method.choices)
    installment_months = models.PositiveSmallIntegerField("cuotas", null=True, blank=True)
    fee_percentage = models.DecimalField(max_digits=6, decimal_places=4, default=Decimal("0"))
    fee_amount = models.DecimalField(max_digits=17, decimal_places=5, default=Decimal("0"))
    amount_net = models.DecimalField("monto neto (USD)", max_digits=17, decimal_places=5)
    payment_date = models.DateField("fecha de pago", db_index=True)
    notes = models.TextField(blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments_recorded",
    )

    class Meta:
        ordering = ["-payment_date", "-created_at"]
        verbose_name = "Pago"
        verbose_name_plural = "Pagos"
        indexes = [
            models.Index(fields=["sales_set", "payment_date"], name="payment_set_date_idx"),
        ]

    def __str__(self):
        return f"{self.amount_gross} USD ({self.get_payment_method_display()}) {self.payment_date}"


class Commission(TimeStampedModel):
    """Payout owed to the setter or closer on a payment, settled separately."""

    class Role(models.TextChoices):
        SETTER = "setter", "Setter"
        CLOSER = "closer", "Closer"

    payment = models.ForeignKey(
        Payment,
        on_delete=models.PROTECT,
        related_name="commissions",
    )
    team_member = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="commissions",
    )
    role = models.CharField(max_length=10, choices=Role.choices)
    percentage = models.DecimalField(max_digits=6, decimal_places=4)
    amount = models.DecimalField(max_digits=19, decimal_places=7)
    is_paid = models.BooleanField("pagada", default=False, db_index=True)
    paid_date = models.DateField("fecha de pago", null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Comisión"
        verbose_name_plural = "Comisiones"
        constraints = [
            models.UniqueConstraint(fields=["payment", "role"], name="commission_unique_role_per_payment"),
        ]

    def __str__(self):
        return f"{self.team_member} {self.get_role_display()} {self.amount}"
