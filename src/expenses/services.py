"""Business logic for costs and manual ledger adjustments."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from core.exceptions import NotFoundError, ValidationError
from core.services import log_activity, require_actor
from expenses.models import AdSpend, Expense, ManualTransaction

logger = logging.getLogger("agency")


@dataclass
class RecurringRunResult:
    generated_ids: list[str] = field(default_factory=list)
    skipped_count: int = 0

    @property
    def generated_count(self) -> int:
        return len(self.generated_ids)


def _positive_amount(value, field_name: str = "amount_usd") -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError):
        raise ValidationError(field_name, "Monto inválido.")
    if amount <= 0:
        raise ValidationError(field_name, "El monto debe ser mayor a 0.")
    return amount


def _choice(value: str, choices, field_name: str) -> str:
    if value not in choices.values:
        raise ValidationError(field_name, f"Valor no permitido: {value}.")
    return value


@transaction.atomic
def create_expense(
    *,
    category: str,
    description: str,
    amount_usd,
    expense_date: date | None = None,
    recurring: bool = False,
    actor,
) -> Expense:
    """Record an operating cost."""
    require_actor(actor)
    expense = Expense.objects.create(
        category=_choice(category, Expense.Category, "category"),
        description=(description or "").strip(),
        amount_usd=_positive_amount(amount_usd),
        date=expense_date or timezone.localdate(),
        recurring=recurring,
        created_by=actor,
    )
    log_activity(actor, "created", "expense", expense.pk, {
        "category": expense.category,
        "amount_usd": str(expense.amount_usd),
        "date": expense.date.isoformat(),
    })
    logger.info("Expense recorded: %s amount=%s by=%s", expense.pk, expense.amount_usd, actor)
    return expense


@transaction.atomic
def create_ad_spend(
    *,
    period_start: date,
    period_end: date,
    amount_usd,
    platform: str = "meta",
    notes: str = "",
    actor,
) -> AdSpend:
    """Record ad spend for a period. It counts toward the period it starts in."""
    require_actor(actor)
    if period_end < period_start:
        raise ValidationError("period_end", "El fin del periodo no puede ser anterior al inicio.")
    ad_spend = AdSpend.objects.create(
        platform=(platform or "meta").strip(),
        period_start=period_start,
        period_end=period_end,
        amount_usd=_positive_amount(amount_usd),
        notes=notes or "",
        created_by=actor,
    )
    log_activity(actor, "created", "ad_spend", ad_spend.pk, {
        "platform": ad_spend.platform,
        "amount_usd": str(ad_spend.amount_usd),
    })
    return ad_spend


@transaction.atomic
def create_manual_transaction(
    *,
    type: str,
    description: str,
    amount_usd,
    transaction_date: date | None = None,
    notes: str = "",
    actor,
) -> ManualTransaction:
    require_actor(actor)
    manual_tx = ManualTransaction.objects.create(
        type=_choice(type, ManualTransaction.Type, "type"),
        description=(description or "").strip(),
        amount_usd=_positive_amount(amount_usd),
        date=transaction_date or timezone.localdate(),
        notes=notes or "",
        created_by=actor,
    )
    log_activity(actor, "created", "manual_transaction", manual_tx.pk, {
        "type": manual_tx.type,
        "amount_usd": str(manual_tx.amount_usd),
    })
    return manual_tx


@transaction.atomic
def delete_manual_transaction(transaction_id, *, actor) -> None:
    """Delete a manual adjustment. The only ledger entry that supports deletion."""
    require_actor(actor)
    manual_tx = ManualTransaction.objects.select_for_update().filter(pk=transaction_id).first()
    if manual_tx is None:
        raise NotFoundError("ManualTransaction", transaction_id)
    snapshot = {
        "type": manual_tx.type,
        "description": manual_tx.description,
        "amount_usd": str(manual_tx.amount_usd),
        "date": manual_tx.date.isoformat(),
    }
    manual_tx.delete()
    log_activity(actor, "deleted", "manual_transaction", transaction_id, snapshot)
    logger.info("Manual transaction %s deleted by %s", transaction_id, actor)


def _month_start(target: date) -> date:
    return target.replace(day=1)


def _previous_month_start(target: date) -> date:
    first = _month_start(target)
    if first.month == 1:
        return first.replace(year=first.year - 1, month=12)
    return first.replace(month=first.month - 1)


def generate_recurring_expenses(*, run_date: date | None = None, actor=None) -> RecurringRunResult:
    """Copy last month's recurring expenses into the month of *run_date*.

    Each template expense produces at most one occurrence per month, dated
    on the first day of the month.
    """
    run_date = run_date or timezone.localdate()
    month_start = _month_start(run_date)
    previous_start = _previous_month_start(run_date)
    result = RecurringRunResult()

    templates = Expense.objects.filter(
        recurring=True,
        date__gte=previous_start,
        date__lt=month_start,
    )
    for template in templates:
        root_id = template.recurring_source_id or template.pk
        exists = Expense.objects.filter(
            recurring_source_id=root_id,
            date__gte=month_start,
        ).exists()
        if exists:
            result.skipped_count += 1
            continue
        with transaction.atomic():
            occurrence = Expense.objects.create(
                category=template.category,
                description=template.description,
                amount_usd=template.amount_usd,
                date=month_start,
                recurring=True,
                recurring_source_id=root_id,
                created_by=actor,
            )
            log_activity(actor, "recurring_generated", "expense", occurrence.pk, {
                "source": str(root_id),
                "amount_usd": str(occurrence.amount_usd),
            })
        result.generated_ids.append(str(occurrence.pk))

    logger.info(
        "Recurring expenses for %s: generated=%s skipped=%s",
        month_start,
        result.generated_count,
        result.skipped_count,
    )
    return result
