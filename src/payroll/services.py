"""Salary generation and settlement."""
from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from accounts.models import User
from core.exceptions import NotFoundError, ValidationError
from core.services import log_activity, require_actor
from payroll.models import SalaryPayment

logger = logging.getLogger("agency")


@transaction.atomic
def generate_salary_payments(period_label: str, *, actor) -> list[SalaryPayment]:
    """Create one pending salary row per salaried team member for *period_label*.

    Members that already have a row for the period are skipped, so running
    the generation twice for the same label creates nothing new.
    """
    require_actor(actor)
    period_label = (period_label or "").strip()
    if not period_label:
        raise ValidationError("period_label", "El periodo es obligatorio.")

    already_paid = set(
        SalaryPayment.objects.filter(period_label=period_label)
        .values_list("team_member_id", flat=True)
    )
    created = []
    for member in User.objects.payroll():
        if member.pk in already_paid:
            continue
        created.append(SalaryPayment.objects.create(
            team_member=member,
            amount=member.salary,
            period_label=period_label,
        ))

    if created:
        log_activity(actor, "salaries_generated", "salary_payment", period_label, {
            "count": len(created),
            "ids": [str(row.pk) for row in created],
        })
    logger.info("Salary payments for %s: %d created by %s", period_label, len(created), actor)
    return created


@transaction.atomic
def mark_salary_paid(salary_payment_id, *, actor) -> SalaryPayment:
    """Settle a salary row. Settling an already paid row changes nothing."""
    require_actor(actor)
    salary = SalaryPayment.objects.select_for_update().filter(pk=salary_payment_id).first()
    if salary is None:
        raise NotFoundError("SalaryPayment", salary_payment_id)
    if salary.status == SalaryPayment.Status.PAGADO:
        return salary

    salary.status = SalaryPayment.Status.PAGADO
    salary.paid_date = timezone.localdate()
    salary.save(update_fields=["status", "paid_date", "updated_at"])
    log_activity(actor, "salary_paid", "salary_payment", salary.pk, {
        "team_member": str(salary.team_member_id),
        "amount": str(salary.amount),
        "period_label": salary.period_label,
    })
    logger.info("Salary %s marked paid by %s", salary.pk, actor)
    return salary
