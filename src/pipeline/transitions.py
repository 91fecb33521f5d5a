"""
Guarded status changes for sets.

Every status change goes through :func:`transition_set_status`, which is the
only code allowed to write ``SalesSet.status``. A change is valid only when
the target appears in ``VALID_STATUS_TRANSITIONS`` for the current status,
and it always leaves one history row and one activity entry behind.
"""
from __future__ import annotations

import logging
from datetime import datetime

from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from core.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from core.services import log_activity, require_actor
from pipeline.models import SalesSet, SetStatusHistory

logger = logging.getLogger("agency")


def lock_set(set_id) -> SalesSet:
    """Fetch a set with a row lock. Must run inside a transaction."""
    set_id = getattr(set_id, "pk", set_id)
    sales_set = SalesSet.objects.select_for_update().filter(pk=set_id).first()
    if sales_set is None:
        raise NotFoundError("SalesSet", set_id)
    return sales_set


def coerce_datetime(value) -> datetime:
    if isinstance(value, str):
        parsed = parse_datetime(value)
        if parsed is None:
            raise ValidationError("scheduled_at", "Fecha y hora inválidas.")
        value = parsed
    if timezone.is_naive(value):
        value = timezone.make_aware(value)
    return value


@transaction.atomic
def transition_set_status(
    set_id,
    new_status: str,
    *,
    actor,
    notes: str = "",
    expected_status: str | None = None,
    scheduled_at=None,
) -> SetStatusHistory:
    """Move a set to *new_status*.

    Parameters
    ----------
    set_id:
        Primary key (or instance) of the set.
    new_status:
        Target ``SalesSet.Status`` value.
    actor:
        Authenticated user performing the change.
    notes:
        Free text stored on the history row.
    expected_status:
        Status the caller last saw. When given and the stored status differs,
        the change is refused instead of being applied on stale data.
    scheduled_at:
        New call time, recorded when the set is rescheduled.

    Returns
    -------
    SetStatusHistory
        The history row written for this change.

    Raises
    ------
    UnauthorizedError
        No authenticated actor.
    NotFoundError
        The set does not exist.
    InvalidTransitionError
        *new_status* is not reachable from the current status.
    ConflictError
        The set changed underneath the caller.
    """
    require_actor(actor)
    if new_status not in SalesSet.Status.values:
        raise ValidationError("status", f"Estado desconocido: {new_status}.")

    sales_set = lock_set(set_id)
    old_status = sales_set.status

    if expected_status is not None and old_status != expected_status:
        raise ConflictError(
            f"El set cambió de estado ({expected_status} -> {old_status}) antes de aplicar el cambio.",
            entity_id=sales_set.pk,
        )
    if not sales_set.can_transition_to(new_status):
        raise InvalidTransitionError(sales_set.pk, old_status, new_status)

    updates = {"status": new_status, "updated_at": timezone.now()}
    if scheduled_at:
        scheduled_at = coerce_datetime(scheduled_at)
        updates["scheduled_at"] = scheduled_at
        if not notes:
            notes = f"Re-agendado para {timezone.localtime(scheduled_at):%d/%m/%Y %H:%M}"

    # Conditional write: a concurrent change that slipped past the lock
    # (e.g. on backends without SELECT ... FOR UPDATE) matches zero rows.
    updated = SalesSet.objects.filter(pk=sales_set.pk, status=old_status).update(**updates)
    if updated != 1:
        raise ConflictError(
            f"El set {sales_set.pk} fue modificado por otro usuario.",
            entity_id=sales_set.pk,
        )

    history = SetStatusHistory.objects.create(
        sales_set=sales_set,
        old_status=old_status,
        new_status=new_status,
        changed_by=actor,
        notes=notes or "",
    )
    log_activity(actor, "status_changed", "set", sales_set.pk, {
        "old_status": old_status,
        "new_status": new_status,
        "notes": notes or "",
    })
    logger.info("Set %s moved %s -> %s by %s", sales_set.pk, old_status, new_status, actor)
    return history
