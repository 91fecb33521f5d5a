from datetime import date, timedelta

import pytest
from django.utils import timezone

from core.exceptions import NotFoundError, ValidationError
from core.models import ActivityLog
from expenses.models import Expense, ManualTransaction
from expenses.services import (
    create_ad_spend,
    create_expense,
    create_manual_transaction,
    delete_manual_transaction,
    generate_recurring_expenses,
)
from expenses.tasks import generate_recurring_expenses_task


@pytest.mark.django_db
def test_create_expense_defaults_to_today(admin_user):
    expense = create_expense(category="software", description=" Canva ", amount_usd="12.99", actor=admin_user)

    assert expense.date == timezone.localdate()
    assert expense.description == "Canva"
    assert ActivityLog.objects.filter(action="created", entity_type="expense").count() == 1


@pytest.mark.django_db
@pytest.mark.parametrize(
    "kwargs,field",
    [
        ({"category": "viajes", "amount_usd": "10"}, "category"),
        ({"category": "otro", "amount_usd": "0"}, "amount_usd"),
        ({"category": "otro", "amount_usd": "diez"}, "amount_usd"),
    ],
)
def test_create_expense_validation(admin_user, kwargs, field):
    with pytest.raises(ValidationError) as excinfo:
        create_expense(description="x", actor=admin_user, **kwargs)
    assert excinfo.value.field == field


@pytest.mark.django_db
def test_ad_spend_period_must_be_ordered(admin_user):
    today = timezone.localdate()
    with pytest.raises(ValidationError):
        create_ad_spend(period_start=today, period_end=today - timedelta(days=1), amount_usd="10", actor=admin_user)


@pytest.mark.django_db
def test_manual_transaction_delete_keeps_a_snapshot(admin_user):
    manual_tx = create_manual_transaction(type="egreso", description="Multa", amount_usd="15", actor=admin_user)

    delete_manual_transaction(manual_tx.pk, actor=admin_user)

    assert not ManualTransaction.objects.exists()
    log = ActivityLog.objects.get(action="deleted")
    assert log.details["description"] == "Multa"
    with pytest.raises(NotFoundError):
        delete_manual_transaction(manual_tx.pk, actor=admin_user)


@pytest.mark.django_db
def test_recurring_expenses_roll_into_next_month_once(admin_user):
    create_expense(
        category="software",
        description="Hosting",
        amount_usd="25",
        expense_date=date(2026, 9, 12),
        recurring=True,
        actor=admin_user,
    )
    create_expense(
        category="oficina",
        description="Café",
        amount_usd="8",
        expense_date=date(2026, 9, 3),
        actor=admin_user,
    )

    first = generate_recurring_expenses(run_date=date(2026, 10, 1))
    second = generate_recurring_expenses(run_date=date(2026, 10, 15))

    assert first.generated_count == 1
    assert second.generated_count == 0
    assert second.skipped_count == 1
    occurrence = Expense.objects.get(date=date(2026, 10, 1))
    assert occurrence.description == "Hosting"
    assert occurrence.recurring_source is not None


@pytest.mark.django_db
def test_recurring_chain_keeps_pointing_at_the_first_expense(admin_user):
    template = create_expense(
        category="software",
        description="Hosting",
        amount_usd="25",
        expense_date=date(2026, 8, 5),
        recurring=True,
        actor=admin_user,
    )

    generate_recurring_expenses(run_date=date(2026, 9, 1))
    generate_recurring_expenses(run_date=date(2026, 10, 1))

    occurrences = Expense.objects.filter(recurring_source=template).order_by("date")
    assert [e.date for e in occurrences] == [date(2026, 9, 1), date(2026, 10, 1)]


@pytest.mark.django_db
def test_recurring_task_reports_counts(admin_user):
    last_month = timezone.localdate().replace(day=1) - timedelta(days=1)
    create_expense(
        category="software",
        description="CRM",
        amount_usd="40",
        expense_date=last_month,
        recurring=True,
        actor=admin_user,
    )

    result = generate_recurring_expenses_task()

    assert result["generated_count"] == 1
    assert result["skipped_count"] == 0
