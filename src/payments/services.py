"""Payment registration and commission settlement."""
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.db.models import Q, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from core.exceptions import NotFoundError, ValidationError
from core.services import log_activity, require_actor
from payments.fees import COMMISSION_RATES, INSTALLMENT_FEE_TABLE, compute_commission, compute_fee
from payments.models import Commission, Payment
from pipeline.models import Deal, SalesSet
from pipeline.transitions import lock_set, transition_set_status

logger = logging.getLogger("agency")


def parse_amount(value, field_name: str, *, allow_zero: bool = False) -> Decimal:
    """Validate and return *value* as a Decimal amount."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError):
        raise ValidationError(field_name, "Monto inválido.")
    if not amount.is_finite() or amount < 0 or (amount == 0 and not allow_zero):
        raise ValidationError(field_name, "El monto debe ser mayor a 0.")
    if amount != amount.quantize(Decimal("0.01")):
        raise ValidationError(field_name, "El monto admite como máximo 2 decimales.")
    return amount


def validate_payment_terms(payment_method: str, installment_months: int | None) -> int | None:
    """Check the method and installment plan; returns the plan length to store."""
    if payment_method not in Payment.Method.values:
        raise ValidationError("payment_method", f"Método de pago no soportado: {payment_method}.")
    if not installment_months:
        return None
    if payment_method not in Payment.INSTALLMENT_METHODS:
        raise ValidationError("installment_months", "Las cuotas solo aplican a pagos con Tilopay.")
    if int(installment_months) not in INSTALLMENT_FEE_TABLE:
        raise ValidationError(
            "installment_months",
            f"Plan de cuotas no soportado: {installment_months}. "
            f"Opciones: {', '.join(str(m) for m in sorted(INSTALLMENT_FEE_TABLE))}.",
        )
    return int(installment_months)


def record_payment(
    *,
    sales_set: SalesSet,
    client,
    gross: Decimal,
    payment_method: str,
    installment_months: int | None,
    payment_date: date,
    notes: str,
    actor,
) -> Payment:
    """Insert a payment and its setter and closer commissions.

    Callers own the transaction and the validation of the inputs.
    """
    breakdown = compute_fee(gross, installment_months)
    payment = Payment.objects.create(
        sales_set=sales_set,
        client=client,
        amount_gross=gross,
        payment_method=payment_method,
        installment_months=installment_months,
        fee_percentage=breakdown.fee_percentage,
        fee_amount=breakdown.fee_amount,
        amount_net=breakdown.net_amount,
        payment_date=payment_date,
        notes=notes or "",
        created_by=actor,
    )
    beneficiaries = (
        (Commission.Role.SETTER, sales_set.setter_id),
        (Commission.Role.CLOSER, sales_set.closer_id),
    )
    for role, member_id in beneficiaries:
        Commission.objects.create(
            payment=payment,
            team_member_id=member_id,
            role=role,
            percentage=COMMISSION_RATES[role],
            amount=compute_commission(breakdown.net_amount, role),
        )
    log_activity(actor, "payment_registered", "payment", payment.pk, {
        "set_id": str(sales_set.pk),
        "client_id": str(client.pk) if client else None,
        "amount_gross": str(gross),
        "amount_net": str(breakdown.net_amount),
        "payment_method": payment_method,
    })
    logger.info(
        "Payment %s recorded on set %s: gross=%s net=%s method=%s by=%s",
        payment.pk,
        sales_set.pk,
        gross,
        breakdown.net_amount,
        payment_method,
        actor,
    )
    return payment


def total_collected(set_id) -> Decimal:
    return Payment.objects.filter(sales_set_id=set_id).aggregate(
        total=Coalesce(Sum("amount_gross"), Value(Decimal("0.00"))),
    )["total"]


@transaction.atomic
def register_payment(
    set_id,
    *,
    amount_gross,
    payment_method: str,
    actor,
    client_id=None,
    installment_months: int | None = None,
    payment_date: date | None = None,
    notes: str = "",
) -> Payment:
    """Register money received on a set.

    Produces the two commission rows. When the set is waiting on its balance
    (``closed_pendiente``) and the payments now cover the closed deal's
    revenue, the set moves to ``closed``.
    """
    require_actor(actor)
    gross = parse_amount(amount_gross, "amount_gross")
    installment_months = validate_payment_terms(payment_method, installment_months)

    sales_set = lock_set(set_id)
    client = _resolve_client(sales_set, client_id)

    payment = record_payment(
        sales_set=sales_set,
        client=client,
        gross=gross,
        payment_method=payment_method,
        installment_months=installment_months,
        payment_date=payment_date or timezone.localdate(),
        notes=notes,
        actor=actor,
    )

    if sales_set.status == SalesSet.Status.CLOSED_PENDIENTE:
        closed_deal = sales_set.deals.filter(outcome=Deal.Outcome.CLOSED).first()
        if closed_deal and closed_deal.revenue_total is not None:
            if total_collected(sales_set.pk) >= closed_deal.revenue_total:
                transition_set_status(
                    sales_set.pk,
                    SalesSet.Status.CLOSED,
                    actor=actor,
                    notes="Pago completado: saldo cubierto",
                    expected_status=SalesSet.Status.CLOSED_PENDIENTE,
                )
    return payment


def _resolve_client(sales_set: SalesSet, client_id):
    from clients.models import Client

    if client_id:
        client = Client.objects.filter(pk=client_id).first()
        if client is None:
            raise NotFoundError("Client", client_id)
        if client.sales_set_id != sales_set.pk:
            raise ValidationError("client_id", "El cliente no corresponde a este set.")
        return client
    return Client.objects.filter(sales_set=sales_set).first()


@transaction.atomic
def mark_commission_paid(commission_id, *, actor) -> Commission:
    """Settle a commission. Settling an already paid commission changes nothing."""
    require_actor(actor)
    commission = Commission.objects.select_for_update().filter(pk=commission_id).first()
    if commission is None:
        raise NotFoundError("Commission", commission_id)
    if commission.is_paid:
        return commission

    commission.is_paid = True
    commission.paid_date = timezone.localdate()
    commission.save(update_fields=["is_paid", "paid_date", "updated_at"])
    log_activity(actor, "commission_paid", "commission", commission.pk, {
        "team_member": str(commission.team_member_id),
        "role": commission.role,
        "amount": str(commission.amount),
    })
    logger.info("Commission %s marked paid by %s", commission.pk, actor)
    return commission


def commission_balances(team_member=None):
    """Owed and settled commission totals, per team member."""
    qs = Commission.objects.all()
    if team_member is not None:
        qs = qs.filter(team_member=team_member)
    zero = Value(Decimal("0.00"))
    return (
        qs.values("team_member_id", "team_member__email", "role")
        .annotate(
            owed=Coalesce(Sum("amount", filter=Q(is_paid=False)), zero),
            settled=Coalesce(Sum("amount", filter=Q(is_paid=True)), zero),
        )
        .order_by("team_member__email", "role")
    )


