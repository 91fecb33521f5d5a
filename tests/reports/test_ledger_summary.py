from datetime import timedelta
from decimal import Decimal
from io import BytesIO

import pytest
import requests
from django.utils import timezone
from openpyxl import load_workbook

from expenses.services import create_ad_spend, create_expense, create_manual_transaction
from payments.services import register_payment
from payroll.services import generate_salary_payments
from pipeline.models import SalesSet
from pipeline.services import close_deal
from reports.models import ExchangeRate
from reports.services import (
    AccountingSummary,
    export_summary_to_excel,
    get_latest_exchange_rate,
    refresh_exchange_rate,
    summarize_ledger,
)
from reports.tasks import refresh_exchange_rate as refresh_exchange_rate_task


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        return self.payload


@pytest.mark.django_db
def test_empty_ledger_is_all_zeros():
    summary = summarize_ledger()

    for name in AccountingSummary.money_fields():
        assert getattr(summary, name) == 0, name
    assert summary.total_sets == 0
    assert summary.closed_deals_count == 0
    assert summary.currency == "USD"


@pytest.mark.django_db
def test_period_without_payments_still_counts_costs(admin_user, setter_user):
    today = timezone.localdate()
    create_expense(category="software", description="CRM", amount_usd="49.50", actor=admin_user)
    generate_salary_payments("Octubre", actor=admin_user)

    summary = summarize_ledger(today, today)

    assert summary.cash_collected == 0
    assert summary.revenue == 0
    assert summary.total_expenses == Decimal("49.50")
    assert summary.total_salaries == Decimal("2800.00")
    assert summary.margin == Decimal("-2849.50")


@pytest.mark.django_db
def test_margin_reconciles_every_ledger_component(sales_set, admin_user):
    today = timezone.localdate()
    register_payment(
        sales_set.pk,
        amount_gross="100",
        payment_method="tilopay",
        installment_months=3,
        actor=admin_user,
    )
    create_expense(category="oficina", description="Internet", amount_usd="10", actor=admin_user)
    create_ad_spend(period_start=today, period_end=today + timedelta(days=6), amount_usd="20", actor=admin_user)
    create_manual_transaction(type="ingreso", description="Reembolso", amount_usd="5", actor=admin_user)
    create_manual_transaction(type="egreso", description="Ajuste", amount_usd="2", actor=admin_user)

    summary = summarize_ledger(today, today)

    assert summary.cash_collected == Decimal("100")
    assert summary.bank_fees == Decimal("7.5")
    assert summary.cash_net == Decimal("92.5")
    assert summary.total_commissions == Decimal("13.875")
    assert summary.unpaid_commissions == Decimal("13.875")
    assert summary.margin == (
        summary.cash_net
        + summary.manual_income
        - summary.total_expenses
        - summary.total_salaries
        - summary.total_commissions
        - summary.total_ad_spend
        - summary.manual_deductions
    )
    assert summary.margin == Decimal("51.625")
    assert summary.total_sets == 1
    assert summary.cost_per_set == Decimal("20.00")
    assert summary.cost_per_client == 0


@pytest.mark.django_db
def test_revenue_follows_payment_date_while_counts_follow_creation(sales_set, closer_user, admin_user):
    today = timezone.localdate()
    paid_on = today - timedelta(days=60)
    close_deal(
        sales_set.pk,
        service_sold=SalesSet.Service.META_ADVANCE,
        revenue_total="1000",
        actor=closer_user,
    )
    register_payment(
        sales_set.pk,
        amount_gross="1000",
        payment_method="transferencia",
        payment_date=paid_on,
        actor=admin_user,
    )

    then = summarize_ledger(paid_on - timedelta(days=5), paid_on + timedelta(days=5))
    assert then.revenue == Decimal("1000")
    assert then.cash_collected == Decimal("1000")
    assert then.total_commissions == Decimal("150")
    assert then.closed_deals_count == 0

    now = summarize_ledger(today - timedelta(days=5), today)
    assert now.revenue == 0
    assert now.cash_collected == 0
    assert now.closed_deals_count == 1
    assert now.total_clients == 1

    all_time = summarize_ledger()
    assert all_time.revenue == Decimal("1000")
    assert all_time.closed_deals_count == 1


@pytest.mark.django_db
def test_all_time_revenue_ignores_deals_without_payments(sales_set, closer_user):
    close_deal(sales_set.pk, service_sold=SalesSet.Service.ADVANCE90, revenue_total="1000", actor=closer_user)

    summary = summarize_ledger()

    assert summary.cash_collected == 0
    assert summary.revenue == 0
    assert summary.total_commissions == 0
    assert summary.closed_deals_count == 1


@pytest.mark.django_db
def test_converted_summary_multiplies_money_only(sales_set, admin_user):
    register_payment(sales_set.pk, amount_gross="10", payment_method="sinpe", actor=admin_user)
    summary = summarize_ledger()

    crc = summary.converted(Decimal("500"))

    assert crc.currency == "CRC"
    assert crc.cash_collected == Decimal("5000")
    assert crc.total_sets == summary.total_sets
    assert summary.currency == "USD"


@pytest.mark.django_db
def test_exchange_rate_falls_back_to_setting():
    assert get_latest_exchange_rate() == Decimal("530")

    ExchangeRate.objects.create(date=timezone.localdate(), usd_to_crc=Decimal("512.25"))
    assert get_latest_exchange_rate() == Decimal("512.25")


@pytest.mark.django_db
def test_refresh_exchange_rate_stores_todays_rate(monkeypatch):
    calls = []

    def fake_get(url, timeout):
        calls.append(url)
        return FakeResponse({"rates": {"CRC": 508.12}})

    monkeypatch.setattr("reports.services.requests.get", fake_get)

    first = refresh_exchange_rate()
    second = refresh_exchange_rate()

    assert calls == ["https://rates.invalid/latest/USD"] * 2
    assert first.pk == second.pk
    assert ExchangeRate.objects.count() == 1
    assert ExchangeRate.objects.get().usd_to_crc == Decimal("508.12")


@pytest.mark.django_db
def test_refresh_exchange_rate_without_crc_stores_fallback(monkeypatch):
    monkeypatch.setattr("reports.services.requests.get", lambda url, timeout: FakeResponse({"rates": {}}))

    assert refresh_exchange_rate().usd_to_crc == Decimal("530")


@pytest.mark.django_db
def test_exchange_rate_task_reports_provider_outage(monkeypatch):
    def unreachable(url, timeout):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr("reports.services.requests.get", unreachable)

    result = refresh_exchange_rate_task()

    assert result["status"] == "error"
    assert "connection refused" in result["message"]
    assert not ExchangeRate.objects.exists()


@pytest.mark.django_db
def test_exchange_rate_task_ok(monkeypatch):
    monkeypatch.setattr(
        "reports.services.requests.get",
        lambda url, timeout: FakeResponse({"rates": {"CRC": 510}}),
    )

    result = refresh_exchange_rate_task()

    assert result["status"] == "ok"
    assert Decimal(result["usd_to_crc"]) == Decimal("510")


@pytest.mark.django_db
def test_summary_excel_export(sales_set, admin_user):
    today = timezone.localdate()
    register_payment(sales_set.pk, amount_gross="250", payment_method="sinpe", actor=admin_user)

    response = export_summary_to_excel(summarize_ledger(today, today))

    assert response["Content-Disposition"] == f'attachment; filename="resumen_{today}_{today}.xlsx"'
    sheet = load_workbook(BytesIO(response.content)).active
    values = {row[0]: row[1] for row in sheet.iter_rows(values_only=True)}
    assert values["Cobrado (bruto)"] == 250
    assert values["Sets"] == 1
