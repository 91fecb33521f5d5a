from decimal import Decimal

import pytest

from core.exceptions import NotFoundError, ValidationError
from core.models import ActivityLog
from payroll.models import SalaryPayment
from payroll.services import generate_salary_payments, mark_salary_paid


@pytest.mark.django_db
def test_generation_covers_salaried_members_once(admin_user, setter_user, closer_user):
    created = generate_salary_payments("Octubre 2026", actor=admin_user)

    assert {row.team_member for row in created} == {admin_user, setter_user}
    assert {row.amount for row in created} == {Decimal("2000.00"), Decimal("800.00")}
    assert all(row.status == SalaryPayment.Status.PENDIENTE for row in created)

    assert generate_salary_payments("Octubre 2026", actor=admin_user) == []
    assert SalaryPayment.objects.count() == 2


@pytest.mark.django_db
def test_inactive_members_are_skipped(admin_user, setter_user):
    setter_user.is_active = False
    setter_user.save(update_fields=["is_active"])

    created = generate_salary_payments("Noviembre 2026", actor=admin_user)

    assert [row.team_member for row in created] == [admin_user]


@pytest.mark.django_db
def test_generation_requires_period(admin_user):
    with pytest.raises(ValidationError):
        generate_salary_payments("  ", actor=admin_user)


@pytest.mark.django_db
def test_mark_salary_paid_is_idempotent(admin_user, setter_user):
    row = generate_salary_payments("Octubre 2026", actor=admin_user)[0]

    paid = mark_salary_paid(row.pk, actor=admin_user)
    again = mark_salary_paid(row.pk, actor=admin_user)

    assert paid.status == SalaryPayment.Status.PAGADO
    assert again.paid_date == paid.paid_date
    assert ActivityLog.objects.filter(action="salary_paid").count() == 1


@pytest.mark.django_db
def test_mark_missing_salary_paid(admin_user):
    with pytest.raises(NotFoundError):
        mark_salary_paid("00000000-0000-0000-0000-000000000000", actor=admin_user)
