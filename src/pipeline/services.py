"""Pipeline workflows: booking sets and recording call outcomes."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from clients.models import Client
from clients.services import (
    create_client_for_deal,
    seed_advance90_phases,
    seed_onboarding_checklist,
)
from core.exceptions import ConflictError, InvalidTransitionError, ValidationError
from core.services import log_activity, require_actor
from notifications.models import Notification
from notifications.services import create_notification
from payments.models import Payment
from payments.services import parse_amount, record_payment, validate_payment_terms
from pipeline.models import Deal, SalesSet, SetStatusHistory
from pipeline.transitions import coerce_datetime, lock_set, transition_set_status

logger = logging.getLogger("agency")

EDITABLE_SET_FIELDS = (
    "prospect_name",
    "prospect_whatsapp",
    "prospect_ig",
    "prospect_web",
    "closer",
    "scheduled_at",
    "summary",
    "service_offered",
)


@dataclass(frozen=True)
class ClosureResult:
    deal: Deal
    client: Client
    payment: Payment | None = None


# ---------------------------------------------------------------------------
# Booking
# ---------------------------------------------------------------------------

def normalize_instagram(handle: str) -> str:
    return (handle or "").strip().lower().replace("@", "")


def find_duplicate_sets(instagram: str, exclude_id=None):
    """Sets already booked for the same Instagram handle."""
    handle = normalize_instagram(instagram)
    if not handle:
        return SalesSet.objects.none()
    qs = SalesSet.objects.filter(prospect_ig=handle)
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    return qs


def _validate_service(service: str, field_name: str) -> str:
    if service and service not in SalesSet.Service.values:
        raise ValidationError(field_name, f"Servicio desconocido: {service}.")
    return service or ""


@transaction.atomic
def create_set(
    *,
    prospect_name: str,
    prospect_whatsapp: str,
    closer,
    scheduled_at,
    actor,
    prospect_ig: str = "",
    prospect_web: str = "",
    summary: str = "",
    service_offered: str = "",
    setter=None,
) -> SalesSet:
    """Book a call. The booking user is the setter unless one is given.

    A prospect whose Instagram handle was already booked is still accepted,
    flagged as duplicate.
    """
    require_actor(actor)
    prospect_name = (prospect_name or "").strip()
    if not prospect_name:
        raise ValidationError("prospect_name", "El nombre del prospecto es obligatorio.")
    if not (prospect_whatsapp or "").strip():
        raise ValidationError("prospect_whatsapp", "El WhatsApp del prospecto es obligatorio.")
    if closer is None:
        raise ValidationError("closer", "Hay que asignar un closer.")
    if not scheduled_at:
        raise ValidationError("scheduled_at", "La fecha de la llamada es obligatoria.")

    handle = normalize_instagram(prospect_ig)
    is_duplicate = find_duplicate_sets(handle).exists()

    sales_set = SalesSet.objects.create(
        prospect_name=prospect_name,
        prospect_whatsapp=prospect_whatsapp.strip(),
        prospect_ig=handle,
        prospect_web=(prospect_web or "").strip(),
        setter=setter or actor,
        closer=closer,
        scheduled_at=coerce_datetime(scheduled_at),
        summary=summary or "",
        service_offered=_validate_service(service_offered, "service_offered"),
        is_duplicate=is_duplicate,
    )
    SetStatusHistory.objects.create(
        sales_set=sales_set,
        old_status="",
        new_status=sales_set.status,
        changed_by=actor,
        notes="Set creado",
    )
    log_activity(actor, "created", "set", sales_set.pk, {
        "prospect_name": prospect_name,
        "service": sales_set.service_offered,
        "is_duplicate": is_duplicate,
    })
    if closer.pk != actor.pk:
        create_notification(
            user=closer,
            type=Notification.Type.SET_ASSIGNED,
            title="Nuevo set agendado",
            message=f"{prospect_name} - {timezone.localtime(sales_set.scheduled_at):%d/%m/%Y %H:%M}",
            action_url=f"/sets/{sales_set.pk}",
            payload={"set_id": str(sales_set.pk)},
        )
    if is_duplicate:
        logger.warning("Set %s booked for an Instagram handle already in the pipeline: %s", sales_set.pk, handle)
    logger.info("Set %s booked by %s for closer %s", sales_set.pk, actor, closer)
    return sales_set


@transaction.atomic
def update_set(set_id, *, actor, **changes) -> SalesSet:
    """Edit booking details. Status only changes through transitions."""
    require_actor(actor)
    if "status" in changes:
        raise ValidationError("status", "El estado solo cambia mediante una transición.")
    unknown = set(changes) - set(EDITABLE_SET_FIELDS)
    if unknown:
        raise ValidationError(sorted(unknown)[0], "Campo no editable.")

    sales_set = lock_set(set_id)
    if "prospect_ig" in changes:
        changes["prospect_ig"] = normalize_instagram(changes["prospect_ig"])
        sales_set.is_duplicate = find_duplicate_sets(changes["prospect_ig"], exclude_id=sales_set.pk).exists()
        changes["is_duplicate"] = sales_set.is_duplicate
    if "service_offered" in changes:
        _validate_service(changes["service_offered"], "service_offered")
    if changes.get("scheduled_at"):
        changes["scheduled_at"] = coerce_datetime(changes["scheduled_at"])

    before = {name: str(getattr(sales_set, name)) for name in changes}
    for name, value in changes.items():
        setattr(sales_set, name, value)
    sales_set.save(update_fields=[*changes.keys(), "updated_at"])
    log_activity(actor, "updated", "set", sales_set.pk, {
        "before": before,
        "after": {name: str(getattr(sales_set, name)) for name in changes},
    })
    return sales_set


# ---------------------------------------------------------------------------
# Call outcomes
# ---------------------------------------------------------------------------

@transaction.atomic
def close_deal(
    set_id,
    *,
    service_sold: str,
    revenue_total,
    actor,
    amount_collected=None,
    payment_method: str | None = None,
    installment_months: int | None = None,
    phantom_link: str = "",
    closer_notes: str = "",
) -> ClosureResult:
    """Turn a set into a paying client.

    Creates the closed deal, the client with its onboarding checklist (and
    the 90-day phases for ``advance90``), the first payment with its
    commissions when money was collected, and moves the set to ``closed``
    or ``closed_pendiente`` depending on whether the revenue is covered.
    Everything happens in one transaction: any failure leaves no trace.

    Raises
    ------
    ValidationError
        Bad service, amount, method or installment plan.
    NotFoundError
        The set does not exist.
    InvalidTransitionError
        The set cannot be closed from its current status.
    ConflictError
        The set already has a closed deal.
    """
    require_actor(actor)
    if service_sold not in SalesSet.Service.values:
        raise ValidationError("service_sold", f"Servicio desconocido: {service_sold}.")
    revenue = parse_amount(revenue_total, "revenue_total")
    collected = Decimal("0")
    if amount_collected not in (None, ""):
        collected = parse_amount(amount_collected, "amount_collected", allow_zero=True)
    if collected > 0:
        if not payment_method:
            raise ValidationError("payment_method", "Indicá el método del pago cobrado.")
        installment_months = validate_payment_terms(payment_method, installment_months)

    sales_set = lock_set(set_id)
    target = SalesSet.Status.CLOSED if collected >= revenue else SalesSet.Status.CLOSED_PENDIENTE
    if sales_set.is_terminal or not sales_set.can_transition_to(target):
        raise InvalidTransitionError(sales_set.pk, sales_set.status, target)
    if sales_set.deals.filter(outcome=Deal.Outcome.CLOSED).exists():
        raise ConflictError(f"El set {sales_set.pk} ya tiene un deal cerrado.", entity_id=sales_set.pk)

    today = timezone.localdate()
    deal = Deal.objects.create(
        sales_set=sales_set,
        outcome=Deal.Outcome.CLOSED,
        service_sold=service_sold,
        revenue_total=revenue,
        phantom_link=phantom_link or "",
        closer_notes=closer_notes or "",
        recorded_by=actor,
    )
    client = create_client_for_deal(deal, sales_set)
    seed_onboarding_checklist(client)
    if service_sold == SalesSet.Service.ADVANCE90:
        seed_advance90_phases(client, today)

    payment = None
    if collected > 0:
        payment = record_payment(
            sales_set=sales_set,
            client=client,
            gross=collected,
            payment_method=payment_method,
            installment_months=installment_months,
            payment_date=today,
            notes="Cobro al cierre",
            actor=actor,
        )

    transition_set_status(
        sales_set.pk,
        target,
        actor=actor,
        notes=f"Deal cerrado. Revenue: ${revenue}",
        expected_status=sales_set.status,
    )
    log_activity(actor, "deal_closed", "set", sales_set.pk, {
        "deal_id": str(deal.pk),
        "client_id": str(client.pk),
        "service_sold": service_sold,
        "revenue_total": str(revenue),
        "amount_collected": str(collected),
    })
    create_notification(
        user=sales_set.closer,
        type=Notification.Type.DEAL_CLOSED,
        title="Deal cerrado",
        message=f"{sales_set.prospect_name} - {deal.get_service_sold_display()}",
        action_url=f"/clientes/{client.pk}",
        payload={"client_id": str(client.pk), "deal_id": str(deal.pk)},
    )
    logger.info(
        "Deal closed on set %s: client=%s revenue=%s collected=%s status=%s by=%s",
        sales_set.pk,
        client.pk,
        revenue,
        collected,
        target,
        actor,
    )
    return ClosureResult(deal=deal, client=client, payment=payment)


@transaction.atomic
def register_follow_up(set_id, *, follow_up_date: date, actor, notes: str = "") -> Deal:
    """Park a set for a later follow up call.

    A set already in ``seguimiento`` keeps its status; the new outcome is
    still recorded.
    """
    require_actor(actor)
    if not follow_up_date:
        raise ValidationError("follow_up_date", "La fecha de seguimiento es obligatoria.")

    sales_set = lock_set(set_id)
    if sales_set.status != SalesSet.Status.SEGUIMIENTO:
        transition_set_status(
            sales_set.pk,
            SalesSet.Status.SEGUIMIENTO,
            actor=actor,
            notes=notes or f"Seguimiento para {follow_up_date}",
            expected_status=sales_set.status,
        )

    deal = Deal.objects.create(
        sales_set=sales_set,
        outcome=Deal.Outcome.FOLLOW_UP,
        follow_up_date=follow_up_date,
        follow_up_notes=notes or "",
        recorded_by=actor,
    )
    log_activity(actor, "follow_up_created", "set", sales_set.pk, {
        "deal_id": str(deal.pk),
        "follow_up_date": str(follow_up_date),
    })
    create_notification(
        user=sales_set.closer,
        type=Notification.Type.FOLLOW_UP,
        title="Follow up programado",
        message=notes or f"{sales_set.prospect_name} - {follow_up_date}",
        action_url=f"/sets/{sales_set.pk}",
        payload={"deal_id": str(deal.pk), "set_id": str(sales_set.pk)},
    )
    return deal


@transaction.atomic
def register_disqualification(set_id, *, reason: str, actor) -> Deal:
    """Close a set as disqualified. The set cannot move afterwards."""
    require_actor(actor)
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("reason", "Indicá el motivo de la descalificación.")

    sales_set = lock_set(set_id)
    transition_set_status(
        sales_set.pk,
        SalesSet.Status.DESCALIFICADO,
        actor=actor,
        notes=reason,
        expected_status=sales_set.status,
    )
    deal = Deal.objects.create(
        sales_set=sales_set,
        outcome=Deal.Outcome.DESCALIFICADO,
        disqualified_reason=reason,
        recorded_by=actor,
    )
    log_activity(actor, "disqualified", "set", sales_set.pk, {
        "deal_id": str(deal.pk),
        "reason": reason,
    })
    return deal
