"""Client delivery models: the client record, onboarding checklist and program phases."""
from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


class Client(TimeStampedModel):
    """A customer created from a closed deal."""

    class Status(models.TextChoices):
        ONBOARDING = "onboarding", "Onboarding"
        ACTIVO = "activo", "Activo"
        PAUSADO = "pausado", "Pausado"
        COMPLETADO = "completado", "Completado"

    deal = models.OneToOneField(
        "pipeline.Deal",
        on_delete=models.PROTECT,
        related_name="client",
    )
    sales_set = models.ForeignKey(
        "pipeline.SalesSet",
        on_delete=models.PROTECT,
        related_name="clients",
    )
    business_name = models.CharField("negocio", max_length=255)
    contact_name = models.CharField("contacto", max_length=255)
    whatsapp = models.CharField("WhatsApp", max_length=30, blank=True, default="")
    ig = models.CharField("Instagram", max_length=100, blank=True, default="")
    web = models.CharField("web", max_length=255, blank=True, default="")
    service = models.CharField("servicio", max_length=20, blank=True, default="")
    status = models.CharField(
        "estado",
        max_length=20,
        choices=Status.choices,
        default=Status.ONBOARDING,
        db_index=True,
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="clients_assigned",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Cliente"
        verbose_name_plural = "Clientes"

    def __str__(self):
        return self.business_name


_C = Client.Status

CLIENT_STATUS_TRANSITIONS = {
    _C.ONBOARDING: frozenset({_C.ACTIVO, _C.PAUSADO}),
    _C.ACTIVO: frozenset({_C.PAUSADO, _C.COMPLETADO}),
    _C.PAUSADO: frozenset({_C.ACTIVO, _C.COMPLETADO}),
    _C.COMPLETADO: frozenset(),
}


class OnboardingChecklistItem(TimeStampedModel):
    client = models.ForeignKey(
        Client,
        on_delete=models.CASCADE,
        related_name="onboarding_items",
    )
    item_key = models.CharField(max_length=50)
    label = models.CharField(max_length=255)
    position = models.PositiveSmallIntegerField(default=0)
    completed = models.BooleanField(default=False)
    completed_at = models.DateTimeField(null=True, blank=True)
    completed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        ordering = ["position"]
        verbose_name = "Tarea de onboarding"
        verbose_name_plural = "Checklist de onboarding"
        constraints = [
            models.UniqueConstraint(fields=["client", "item_key"], name="onboarding_item_unique_key"),
        ]

    def __str__(self):
        return f"{self.client}: {self.label}"


class Advance90Phase(TimeStampedModel):
    """One step of the 90-day program, dated from the closing day."""

    class Status(models.TextChoices):
        PENDIENTE = "pendiente", "Pendiente"
        EN_PROGRESO = "en_progreso", "En progreso"
        COMPLETADO = "completado", "Completado"

    client = models.ForeignKey(
        Client,
        on_delete=models.CASCADE,
        related_name="phases",
    )
    phase_name = models.CharField(max_length=100)
    start_day = models.PositiveSmallIntegerField()
    end_day = models.PositiveSmallIntegerField()
    start_date = models.DateField()
    end_date = models.DateField()
    order = models.PositiveSmallIntegerField()
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDIENTE,
    )

    class Meta:
        ordering = ["order"]
        verbose_name = "Fase Advance 90"
        verbose_name_plural = "Fases Advance 90"
        constraints = [
            models.UniqueConstraint(fields=["client", "order"], name="advance90_phase_unique_order"),
        ]

    def __str__(self):
        return f"{self.client}: {self.phase_name}"
