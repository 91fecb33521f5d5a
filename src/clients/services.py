"""Client creation scaffolding and delivery-side updates."""
from __future__ import annotations

import logging
from datetime import date, timedelta

from django.db import transaction
from django.utils import timezone

from clients.constants import ADVANCE90_PHASES, ONBOARDING_CHECKLIST_TEMPLATE
from clients.models import (
    CLIENT_STATUS_TRANSITIONS,
    Advance90Phase,
    Client,
    OnboardingChecklistItem,
)
from core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from core.services import log_activity, require_actor

logger = logging.getLogger("agency")


# ---------------------------------------------------------------------------
# Seeding (called from deal closure, inside its transaction)
# ---------------------------------------------------------------------------

def create_client_for_deal(deal, sales_set) -> Client:
    """Create the client record for a closed deal, copying prospect contact data."""
    return Client.objects.create(
        deal=deal,
        sales_set=sales_set,
        business_name=sales_set.prospect_name,
        contact_name=sales_set.prospect_name,
        whatsapp=sales_set.prospect_whatsapp,
        ig=sales_set.prospect_ig,
        web=sales_set.prospect_web,
        service=deal.service_sold,
        status=Client.Status.ONBOARDING,
    )


def seed_onboarding_checklist(client: Client) -> list[OnboardingChecklistItem]:
    return OnboardingChecklistItem.objects.bulk_create([
        OnboardingChecklistItem(client=client, item_key=key, label=label, position=position)
        for position, (key, label) in enumerate(ONBOARDING_CHECKLIST_TEMPLATE, start=1)
    ])


def seed_advance90_phases(client: Client, start: date) -> list[Advance90Phase]:
    """Lay out the 90-day program from *start*, every phase pending."""
    return Advance90Phase.objects.bulk_create([
        Advance90Phase(
            client=client,
            phase_name=name,
            start_day=start_day,
            end_day=end_day,
            start_date=start + timedelta(days=start_day),
            end_date=start + timedelta(days=end_day),
            order=order,
        )
        for order, (name, start_day, end_day) in enumerate(ADVANCE90_PHASES, start=1)
    ])


# ---------------------------------------------------------------------------
# Delivery updates
# ---------------------------------------------------------------------------

def _get_client(client_id, *, lock=False) -> Client:
    qs = Client.objects.select_for_update() if lock else Client.objects.all()
    client = qs.filter(pk=client_id).first()
    if client is None:
        raise NotFoundError("Client", client_id)
    return client


@transaction.atomic
def toggle_onboarding_item(item_id, completed: bool, *, actor) -> OnboardingChecklistItem:
    require_actor(actor)
    item = OnboardingChecklistItem.objects.select_for_update().filter(pk=item_id).first()
    if item is None:
        raise NotFoundError("OnboardingChecklistItem", item_id)

    item.completed = bool(completed)
    item.completed_at = timezone.now() if item.completed else None
    item.completed_by = actor if item.completed else None
    item.save(update_fields=["completed", "completed_at", "completed_by", "updated_at"])
    log_activity(actor, "onboarding_item_toggled", "client", item.client_id, {
        "item_key": item.item_key,
        "completed": item.completed,
    })
    return item


@transaction.atomic
def update_client_status(client_id, new_status: str, *, actor) -> Client:
    """Move a client along its delivery lifecycle.

    ``onboarding`` leads to ``activo`` or ``pausado``; active and paused
    clients can swap or finish; ``completado`` is final.
    """
    require_actor(actor)
    if new_status not in Client.Status.values:
        raise ValidationError("status", f"Estado desconocido: {new_status}.")
    client = _get_client(client_id, lock=True)
    old_status = client.status
    if new_status not in CLIENT_STATUS_TRANSITIONS.get(old_status, frozenset()):
        raise InvalidTransitionError(client.pk, old_status, new_status)

    client.status = new_status
    client.save(update_fields=["status", "updated_at"])
    log_activity(actor, "status_changed", "client", client.pk, {
        "old_status": old_status,
        "new_status": new_status,
    })
    logger.info("Client %s moved %s -> %s by %s", client.pk, old_status, new_status, actor)
    return client


@transaction.atomic
def assign_client(client_id, assignee, *, actor) -> Client:
    """Hand a client to a delivery team member and let them know."""
    from notifications.models import Notification
    from notifications.services import create_notification

    require_actor(actor)
    client = _get_client(client_id, lock=True)
    client.assigned_to = assignee
    client.save(update_fields=["assigned_to", "updated_at"])
    log_activity(actor, "assigned", "client", client.pk, {"assigned_to": str(assignee.pk)})
    if assignee.pk != actor.pk:
        create_notification(
            user=assignee,
            type=Notification.Type.CLIENT_ASSIGNED,
            title="Cliente asignado",
            message=client.business_name,
            action_url=f"/clientes/{client.pk}",
            payload={"client_id": str(client.pk)},
        )
    return client


@transaction.atomic
def update_phase_status(phase_id, new_status: str, *, actor) -> Advance90Phase:
    require_actor(actor)
    if new_status not in Advance90Phase.Status.values:
        raise ValidationError("status", f"Estado desconocido: {new_status}.")
    phase = Advance90Phase.objects.select_for_update().filter(pk=phase_id).first()
    if phase is None:
        raise NotFoundError("Advance90Phase", phase_id)
    old_status = phase.status
    phase.status = new_status
    phase.save(update_fields=["status", "updated_at"])
    log_activity(actor, "phase_updated", "client", phase.client_id, {
        "phase": phase.phase_name,
        "old_status": old_status,
        "new_status": new_status,
    })
    return phase


def add_client_note(client_id, note_type: str, content: str, *, actor):
    """Store a free-form note on the client's activity trail."""
    require_actor(actor)
    content = (content or "").strip()
    if not content:
        raise ValidationError("content", "La nota no puede estar vacía.")
    client = _get_client(client_id)
    return log_activity(actor, note_type or "note", "client", client.pk, {"content": content})
