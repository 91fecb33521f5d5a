"""In-app notifications addressed to a team member."""
from django.conf import settings
from django.db import models
from django.utils import timezone

from core.models import TimeStampedModel


class Notification(TimeStampedModel):
    """A message shown in the recipient's notification tray.

    Created by service functions when a pipeline event concerns someone
    (a deal they closed, a follow up due today). Delivery beyond the tray
    is out of scope.
    """

    class Type(models.TextChoices):
        DEAL_CLOSED = "deal_closed", "Deal cerrado"
        FOLLOW_UP = "follow_up", "Seguimiento"
        FOLLOW_UP_TODAY = "follow_up_today", "Seguimiento hoy"
        SET_ASSIGNED = "set_assigned", "Set asignado"
        CLIENT_ASSIGNED = "client_assigned", "Cliente asignado"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    type = models.CharField(max_length=30, choices=Type.choices, db_index=True)
    title = models.CharField(max_length=200)
    message = models.TextField(blank=True, default="")
    action_url = models.CharField(max_length=255, blank=True, default="")
    payload = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False, db_index=True)
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Notificación"
        verbose_name_plural = "Notificaciones"
        indexes = [
            models.Index(fields=["user", "is_read"], name="notification_user_read_idx"),
        ]

    def __str__(self):
        return f"{self.user}: {self.title}"

    def mark_as_read(self):
        if self.is_read:
            return
        self.is_read = True
        self.read_at = timezone.now()
        self.save(update_fields=["is_read", "read_at", "updated_at"])
