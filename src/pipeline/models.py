"""Sales pipeline models: booked calls (sets), their status trail and outcomes."""
from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


class SalesSet(TimeStampedModel):
    """A booked sales call with a prospect, tracked from booking to outcome."""

    class Status(models.TextChoices):
        AGENDADO = "agendado", "Agendado"
        PRECALL_ENVIADO = "precall_enviado", "Pre-call enviado"
        REAGENDO = "reagendo", "Re-agendó"
        NO_SHOW = "no_show", "No show"
        SEGUIMIENTO = "seguimiento", "Seguimiento"
        DESCALIFICADO = "descalificado", "Descalificado"
        CLOSED = "closed", "Cerrado"
        CLOSED_PENDIENTE = "closed_pendiente", "Cerrado (pago pendiente)"

    class Service(models.TextChoices):
        ADVANCE90 = "advance90", "Advance 90"
        META_ADVANCE = "meta_advance", "Meta Advance"
        RETENCION = "retencion", "Retención"

    TERMINAL_STATUSES = frozenset({Status.DESCALIFICADO, Status.CLOSED})

    prospect_name = models.CharField("prospecto", max_length=255)
    prospect_whatsapp = models.CharField("WhatsApp", max_length=30)
    prospect_ig = models.CharField("Instagram", max_length=100, blank=True, default="", db_index=True)
    prospect_web = models.CharField("web", max_length=255, blank=True, default="")
    setter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="sets_booked",
    )
    closer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="sets_assigned",
    )
    scheduled_at = models.DateTimeField("fecha de la llamada")
    summary = models.TextField("resumen", blank=True, default="")
    service_offered = models.CharField(
        "servicio ofrecido",
        max_length=20,
        choices=Service.choices,
        blank=True,
        default="",
    )
    status = models.CharField(
        "estado",
        max_length=20,
        choices=Status.choices,
        default=Status.AGENDADO,
        db_index=True,
    )
    is_duplicate = models.BooleanField("duplicado", default=False)

    class Meta:
        ordering = ["-scheduled_at"]
        verbose_name = "Set"
        verbose_name_plural = "Sets"
        indexes = [
            models.Index(fields=["status", "scheduled_at"], name="set_status_sched_idx"),
            models.Index(fields=["closer", "status"], name="set_closer_status_idx"),
        ]

    def __str__(self):
        return f"{self.prospect_name} ({self.get_status_display()})"

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in VALID_STATUS_TRANSITIONS.get(self.status, frozenset())


_S = SalesSet.Status

VALID_STATUS_TRANSITIONS = {
    _S.AGENDADO: frozenset({
        _S.PRECALL_ENVIADO, _S.REAGENDO, _S.NO_SHOW, _S.SEGUIMIENTO,
        _S.DESCALIFICADO, _S.CLOSED, _S.CLOSED_PENDIENTE,
    }),
    _S.PRECALL_ENVIADO: frozenset({
        _S.REAGENDO, _S.NO_SHOW, _S.SEGUIMIENTO,
        _S.DESCALIFICADO, _S.CLOSED, _S.CLOSED_PENDIENTE,
    }),
    _S.REAGENDO: frozenset({
        _S.AGENDADO, _S.PRECALL_ENVIADO, _S.NO_SHOW, _S.SEGUIMIENTO,
        _S.DESCALIFICADO, _S.CLOSED, _S.CLOSED_PENDIENTE,
    }),
    _S.NO_SHOW: frozenset({_S.REAGENDO, _S.SEGUIMIENTO, _S.DESCALIFICADO}),
    _S.SEGUIMIENTO: frozenset({
        _S.AGENDADO, _S.REAGENDO, _S.DESCALIFICADO, _S.CLOSED, _S.CLOSED_PENDIENTE,
    }),
    _S.DESCALIFICADO: frozenset(),
    _S.CLOSED: frozenset(),
    _S.CLOSED_PENDIENTE: frozenset({_S.CLOSED}),
}


class SetStatusHistory(TimeStampedModel):
    """Immutable status transition log for sets."""

    sales_set = models.ForeignKey(
        SalesSet,
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status = models.CharField(max_length=20, choices=SalesSet.Status.choices, blank=True, default="")
    new_status = models.CharField(max_length=20, choices=SalesSet.Status.choices)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="set_status_changes",
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["created_at"]
        verbose_name = "Historial de estado"
        verbose_name_plural = "Historial de estados"
        indexes = [
            models.Index(fields=["sales_set", "created_at"], name="set_history_created_idx"),
        ]

    def __str__(self):
        return f"{self.sales_set_id}: {self.old_status or '-'} -> {self.new_status}"


class Deal(TimeStampedModel):
    """Result of a sales call: closed, parked for follow up, or disqualified."""

    class Outcome(models.TextChoices):
        CLOSED = "closed", "Cerrado"
        FOLLOW_UP = "follow_up", "Seguimiento"
        DESCALIFICADO = "descalificado", "Descalificado"

    sales_set = models.ForeignKey(
        SalesSet,
        on_delete=models.PROTECT,
        related_name="deals",
    )
    outcome = models.CharField("resultado", max_length=20, choices=Outcome.choices, db_index=True)
    service_sold = models.CharField(
        "servicio vendido",
        max_length=20,
        choices=SalesSet.Service.choices,
        blank=True,
        default="",
    )
    revenue_total = models.DecimalField(
        "revenue total (USD)",
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
    )
    phantom_link = models.URLField("link de la llamada", max_length=500, blank=True, default="")
    closer_notes = models.TextField("notas del closer", blank=True, default="")
    follow_up_date = models.DateField("fecha de seguimiento", null=True, blank=True, db_index=True)
    follow_up_notes = models.TextField("notas de seguimiento", blank=True, default="")
    disqualified_reason = models.TextField("motivo de descalificación", blank=True, default="")
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="deals_recorded",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Resultado de llamada"
        verbose_name_plural = "Resultados de llamada"
        constraints = [
            models.UniqueConstraint(
                fields=["sales_set"],
                condition=models.Q(outcome="closed"),
                name="deal_single_closed_per_set",
            ),
        ]

    def __str__(self):
        return f"{self.sales_set} - {self.get_outcome_display()}"
