from datetime import timedelta

import pytest
from django.utils import timezone

from accounts.models import User
from clients.models import Client
from pipeline.models import SalesSet

pytestmark = pytest.mark.django_db


def _set_url(sales_set, suffix=""):
    return f"/api/v1/sets/{sales_set.pk}/{suffix}"


def test_setter_books_a_set(setter_client, setter_user, closer_user):
    response = setter_client.post(
        "/api/v1/sets/",
        {
            "prospect_name": "Barbería Norte",
            "prospect_whatsapp": "+50670002222",
            "prospect_ig": "@BarberiaNorte",
            "closer": str(closer_user.pk),
            "scheduled_at": (timezone.now() + timedelta(days=1)).isoformat(),
        },
        format="json",
    )

    assert response.status_code == 201
    assert response.data["status"] == SalesSet.Status.AGENDADO
    assert response.data["prospect_ig"] == "barberianorte"
    assert str(response.data["setter"]) == str(setter_user.pk)


def test_users_only_see_their_own_sets(sales_set, api_client):
    outsider = User.objects.create_user(email="otro@test.com", password="testpass123", role=User.Role.CLOSER)
    api_client.force_authenticate(user=outsider)

    assert api_client.get("/api/v1/sets/").data["count"] == 0
    assert api_client.get(_set_url(sales_set)).status_code == 404


def test_delivery_cannot_move_sets(sales_set, delivery_user, api_client):
    api_client.force_authenticate(user=delivery_user)

    assert api_client.get(_set_url(sales_set)).status_code == 200
    response = api_client.post(_set_url(sales_set, "transition/"), {"status": "no_show"}, format="json")
    assert response.status_code == 403


def test_transition_endpoint(sales_set, closer_client):
    response = closer_client.post(
        _set_url(sales_set, "transition/"),
        {"status": "no_show", "notes": "No se conectó"},
        format="json",
    )

    assert response.status_code == 200
    assert response.data["old_status"] == "agendado"
    assert response.data["new_status"] == "no_show"

    history = closer_client.get(_set_url(sales_set, "history/"))
    assert [row["new_status"] for row in history.data] == ["no_show"]


def test_forbidden_transition_is_409_with_code(sales_set, closer_client):
    SalesSet.objects.filter(pk=sales_set.pk).update(status=SalesSet.Status.DESCALIFICADO)

    response = closer_client.post(_set_url(sales_set, "transition/"), {"status": "agendado"}, format="json")

    assert response.status_code == 409
    assert response.data["code"] == "INVALID_TRANSITION"
    assert response.data["from_status"] == "descalificado"
    assert response.data["to_status"] == "agendado"


def test_stale_expected_status_is_409_conflict(sales_set, closer_client):
    response = closer_client.post(
        _set_url(sales_set, "transition/"),
        {"status": "no_show", "expected_status": "reagendo"},
        format="json",
    )

    assert response.status_code == 409
    assert response.data["code"] == "CONFLICT"


def test_reschedule_requires_new_time(sales_set, setter_client):
    response = setter_client.post(_set_url(sales_set, "transition/"), {"status": "reagendo"}, format="json")

    assert response.status_code == 400
    assert "scheduled_at" in response.data


def test_update_cannot_change_status(sales_set, setter_client):
    response = setter_client.patch(
        _set_url(sales_set),
        {"status": "closed", "summary": "Quiere pauta"},
        format="json",
    )

    assert response.status_code == 200
    sales_set.refresh_from_db()
    assert sales_set.status == SalesSet.Status.AGENDADO
    assert sales_set.summary == "Quiere pauta"


def test_close_deal_endpoint(sales_set, closer_client):
    response = closer_client.post(
        _set_url(sales_set, "close-deal/"),
        {
            "service_sold": "meta_advance",
            "revenue_total": "100.00",
            "amount_collected": "100.00",
            "payment_method": "tilopay",
            "installment_months": 3,
        },
        format="json",
    )

    assert response.status_code == 201
    assert response.data["set_status"] == "closed"
    assert response.data["client"]["status"] == Client.Status.ONBOARDING
    assert response.data["payment"]["amount_net"].startswith("92.5")
    assert len(response.data["payment"]["commissions"]) == 2


def test_close_deal_rejects_unsupported_installments(sales_set, closer_client):
    response = closer_client.post(
        _set_url(sales_set, "close-deal/"),
        {
            "service_sold": "meta_advance",
            "revenue_total": "100.00",
            "amount_collected": "100.00",
            "payment_method": "tilopay",
            "installment_months": 5,
        },
        format="json",
    )

    assert response.status_code == 400
    assert not Client.objects.exists()


def test_disqualify_then_follow_up_is_409(sales_set, closer_client):
    response = closer_client.post(_set_url(sales_set, "disqualify/"), {"reason": "No califica"}, format="json")
    assert response.status_code == 201

    response = closer_client.post(
        _set_url(sales_set, "follow-up/"),
        {"follow_up_date": timezone.localdate().isoformat()},
        format="json",
    )
    assert response.status_code == 409


def test_unknown_set_is_404(closer_client):
    response = closer_client.post(
        "/api/v1/sets/00000000-0000-0000-0000-000000000000/transition/",
        {"status": "no_show"},
        format="json",
    )
    assert response.status_code == 404


def test_anonymous_requests_are_rejected(sales_set, api_client):
    assert api_client.get("/api/v1/sets/").status_code == 401


def test_client_onboarding_toggle(sales_set, closer_client, delivery_user, api_client):
    closer_client.post(
        _set_url(sales_set, "close-deal/"),
        {"service_sold": "retencion", "revenue_total": "500.00"},
        format="json",
    )
    client = Client.objects.get()
    api_client.force_authenticate(user=delivery_user)

    items = api_client.get(f"/api/v1/clients/{client.pk}/onboarding/").data
    response = api_client.post(
        f"/api/v1/clients/{client.pk}/onboarding/",
        {"item_id": items[0]["id"], "completed": True},
        format="json",
    )
    assert response.status_code == 200
    assert response.data["completed"] is True

    response = api_client.post(f"/api/v1/clients/{client.pk}/status/", {"status": "completado"}, format="json")
    assert response.status_code == 409


def test_notification_tray(sales_set, closer_client, closer_user):
    closer_client.post(
        _set_url(sales_set, "follow-up/"),
        {"follow_up_date": timezone.localdate().isoformat()},
        format="json",
    )

    tray = closer_client.get("/api/v1/notifications/")
    assert tray.data["count"] == 1

    response = closer_client.post("/api/v1/notifications/mark-all-read/")
    assert response.data == {"updated": 1}
