from datetime import timedelta

import pytest
from django.utils import timezone

from expenses.models import ManualTransaction
from payments.models import Commission, Payment
from reports.models import ExchangeRate

pytestmark = pytest.mark.django_db


def _pay(client, sales_set, **overrides):
    payload = {"sales_set": str(sales_set.pk), "amount_gross": "100.00", "payment_method": "sinpe"}
    payload.update(overrides)
    return client.post("/api/v1/payments/", payload, format="json")


def test_closer_registers_payment_on_own_set(sales_set, closer_client):
    response = _pay(closer_client, sales_set, payment_method="tilopay", installment_months=6)

    assert response.status_code == 201
    assert response.data["fee_amount"].startswith("10.0")
    assert {c["role"] for c in response.data["commissions"]} == {"setter", "closer"}


def test_payment_on_invisible_set_is_404(sales_set, admin_user, api_client):
    from accounts.models import User

    stranger = User.objects.create_user(email="ajeno@test.com", password="testpass123", role=User.Role.SETTER)
    api_client.force_authenticate(user=stranger)

    response = _pay(api_client, sales_set)

    assert response.status_code == 404
    assert response.data["code"] == "NOT_FOUND"
    assert not Payment.objects.exists()


def test_delivery_cannot_register_payments(sales_set, delivery_user, api_client):
    api_client.force_authenticate(user=delivery_user)
    assert _pay(api_client, sales_set).status_code == 403


def test_installments_only_with_tilopay(sales_set, admin_client):
    response = _pay(admin_client, sales_set, installment_months=3)

    assert response.status_code == 400
    assert response.data["code"] == "VALIDATION_ERROR"
    assert response.data["field"] == "installment_months"


def test_payments_cannot_be_deleted(sales_set, admin_client):
    payment_id = _pay(admin_client, sales_set).data["id"]

    response = admin_client.delete(f"/api/v1/payments/{payment_id}/")

    assert response.status_code == 405
    assert Payment.objects.filter(pk=payment_id).exists()


def test_payment_csv_export(sales_set, admin_client):
    _pay(admin_client, sales_set, payment_method="transferencia")

    response = admin_client.get("/api/v1/payments/export-csv/")

    assert response.status_code == 200
    assert response["Content-Disposition"] == 'attachment; filename="pagos.csv"'
    lines = response.content.decode("utf-8-sig").splitlines()
    assert lines[0].startswith("Fecha,Prospecto,Cliente,Método")
    assert "Transferencia" in lines[1]
    assert sales_set.prospect_name in lines[1]


def test_commissions_are_scoped_and_settled_by_admin(sales_set, admin_client, setter_client):
    _pay(admin_client, sales_set)

    mine = setter_client.get("/api/v1/commissions/").data["results"]
    assert [c["role"] for c in mine] == ["setter"]

    commission_id = mine[0]["id"]
    assert setter_client.post(f"/api/v1/commissions/{commission_id}/mark-paid/").status_code == 403

    response = admin_client.post(f"/api/v1/commissions/{commission_id}/mark-paid/")
    assert response.status_code == 200
    assert response.data["is_paid"] is True
    assert Commission.objects.get(pk=commission_id).paid_date == timezone.localdate()

    balances = setter_client.get("/api/v1/commissions/balances/").data
    assert len(balances) == 1
    assert balances[0]["owed"] == 0


def test_salary_generation_endpoint(admin_client, setter_user, setter_client):
    response = admin_client.post("/api/v1/salary-payments/generate/", {"period_label": "Octubre 2026"}, format="json")

    assert response.status_code == 201
    assert len(response.data) == 2
    assert setter_client.get("/api/v1/salary-payments/").status_code == 403


def test_manual_transaction_delete(admin_client):
    created = admin_client.post(
        "/api/v1/manual-transactions/",
        {"type": "ingreso", "description": "Devolución proveedor", "amount_usd": "30.00"},
        format="json",
    )
    assert created.status_code == 201
    assert created.data["date"] == timezone.localdate().isoformat()

    response = admin_client.delete(f"/api/v1/manual-transactions/{created.data['id']}/")
    assert response.status_code == 204
    assert not ManualTransaction.objects.exists()


def test_expense_creation_rejects_non_positive_amount(admin_client):
    response = admin_client.post(
        "/api/v1/expenses/",
        {"category": "software", "description": "Gratis", "amount_usd": "0"},
        format="json",
    )
    assert response.status_code == 400


def test_summary_is_admin_only(setter_client, closer_client):
    assert setter_client.get("/api/v1/ledger/summary/").status_code == 403
    assert closer_client.get("/api/v1/ledger/summary/").status_code == 403


def test_summary_for_period(sales_set, admin_client):
    _pay(admin_client, sales_set, amount_gross="200.00")
    today = timezone.localdate()

    response = admin_client.get(
        "/api/v1/ledger/summary/",
        {"period_start": (today - timedelta(days=1)).isoformat(), "period_end": today.isoformat()},
    )

    assert response.status_code == 200
    assert response.data["currency"] == "USD"
    assert response.data["cash_collected"] == 200
    assert response.data["total_commissions"] == 30
    assert response.data["margin"] == 170
    assert "exchange_rate" not in response.data


def test_summary_in_colones_uses_latest_rate(sales_set, admin_client):
    ExchangeRate.objects.create(date=timezone.localdate(), usd_to_crc="500")
    _pay(admin_client, sales_set, amount_gross="10.00")

    response = admin_client.get("/api/v1/ledger/summary/", {"currency": "CRC"})

    assert response.data["currency"] == "CRC"
    assert response.data["exchange_rate"] == 500
    assert response.data["cash_collected"] == 5000


def test_summary_rejects_inverted_period(admin_client):
    today = timezone.localdate()
    response = admin_client.get(
        "/api/v1/ledger/summary/",
        {"period_start": today.isoformat(), "period_end": (today - timedelta(days=3)).isoformat()},
    )
    assert response.status_code == 400
    assert "period_end" in response.data


def test_summary_export(admin_client):
    response = admin_client.get("/api/v1/ledger/summary/export/")

    assert response.status_code == 200
    assert response["Content-Type"].startswith("application/vnd.openxmlformats")
    assert response["Content-Disposition"] == 'attachment; filename="resumen_inicio_hoy.xlsx"'


@pytest.mark.parametrize(
    "url",
    [
        "/api/v1/commissions/no-es-un-id/mark-paid/",
        "/api/v1/salary-payments/no-es-un-id/mark-paid/",
        "/api/v1/notifications/no-es-un-id/mark-read/",
    ],
)
def test_malformed_ids_are_404(admin_client, url):
    assert admin_client.post(url).status_code == 404
