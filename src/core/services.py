"""Helpers shared by the service layer of every app."""
from __future__ import annotations

from typing import Any

from core.exceptions import UnauthorizedError
from core.models import ActivityLog


def require_actor(actor) -> None:
    """Raise :class:`UnauthorizedError` unless *actor* is an authenticated user."""
    if actor is None or not getattr(actor, "is_authenticated", False):
        raise UnauthorizedError()


def log_activity(
    user,
    action: str,
    entity_type: str,
    entity_id: Any,
    details: dict[str, Any] | None = None,
) -> ActivityLog:
    """Create and return a new :class:`~core.models.ActivityLog` entry."""
    return ActivityLog.objects.create(
        user=user,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        details=details or {},
    )
