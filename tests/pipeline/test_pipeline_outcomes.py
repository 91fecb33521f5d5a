from datetime import timedelta

import pytest
from django.utils import timezone

from core.exceptions import InvalidTransitionError, ValidationError
from core.models import ActivityLog
from notifications.models import Notification
from pipeline.models import Deal, SalesSet, SetStatusHistory
from pipeline.services import (
    create_set,
    find_duplicate_sets,
    register_disqualification,
    register_follow_up,
    update_set,
)


@pytest.mark.django_db
def test_follow_up_parks_the_set_and_notifies_closer(sales_set, setter_user, closer_user):
    follow_up_date = timezone.localdate() + timedelta(days=7)

    deal = register_follow_up(sales_set.pk, follow_up_date=follow_up_date, actor=setter_user, notes="Llamar el lunes")

    sales_set.refresh_from_db()
    assert sales_set.status == SalesSet.Status.SEGUIMIENTO
    assert deal.outcome == Deal.Outcome.FOLLOW_UP
    assert deal.follow_up_date == follow_up_date
    assert Notification.objects.filter(user=closer_user, type=Notification.Type.FOLLOW_UP).count() == 1
    assert ActivityLog.objects.filter(action="follow_up_created").count() == 1


@pytest.mark.django_db
def test_second_follow_up_keeps_status_without_new_transition(sales_set, closer_user):
    first = timezone.localdate() + timedelta(days=2)
    register_follow_up(sales_set.pk, follow_up_date=first, actor=closer_user)

    register_follow_up(sales_set.pk, follow_up_date=first + timedelta(days=5), actor=closer_user)

    assert SetStatusHistory.objects.filter(sales_set=sales_set).count() == 1
    assert Deal.objects.filter(sales_set=sales_set, outcome=Deal.Outcome.FOLLOW_UP).count() == 2


@pytest.mark.django_db
def test_follow_up_requires_a_date(sales_set, closer_user):
    with pytest.raises(ValidationError):
        register_follow_up(sales_set.pk, follow_up_date=None, actor=closer_user)


@pytest.mark.django_db
def test_disqualification_is_terminal(sales_set, closer_user):
    deal = register_disqualification(sales_set.pk, reason="Sin presupuesto", actor=closer_user)

    sales_set.refresh_from_db()
    assert sales_set.status == SalesSet.Status.DESCALIFICADO
    assert deal.disqualified_reason == "Sin presupuesto"
    with pytest.raises(InvalidTransitionError):
        register_follow_up(sales_set.pk, follow_up_date=timezone.localdate(), actor=closer_user)


@pytest.mark.django_db
def test_disqualification_requires_reason(sales_set, closer_user):
    with pytest.raises(ValidationError) as excinfo:
        register_disqualification(sales_set.pk, reason="   ", actor=closer_user)
    assert excinfo.value.field == "reason"
    sales_set.refresh_from_db()
    assert sales_set.status == SalesSet.Status.AGENDADO


@pytest.mark.django_db
def test_create_set_records_history_and_notifies_closer(setter_user, closer_user):
    sales_set = create_set(
        prospect_name="Gimnasio Fuerza",
        prospect_whatsapp="+50670001111",
        prospect_ig="@GimnasioFuerza ",
        closer=closer_user,
        scheduled_at=timezone.now() + timedelta(days=2),
        actor=setter_user,
    )

    assert sales_set.setter == setter_user
    assert sales_set.prospect_ig == "gimnasiofuerza"
    assert sales_set.status == SalesSet.Status.AGENDADO
    assert not sales_set.is_duplicate
    history = SetStatusHistory.objects.get(sales_set=sales_set)
    assert history.old_status == ""
    assert history.notes == "Set creado"
    assert Notification.objects.filter(user=closer_user, type=Notification.Type.SET_ASSIGNED).exists()


@pytest.mark.django_db
def test_create_set_flags_duplicate_instagram(sales_set, setter_user, closer_user):
    duplicate = create_set(
        prospect_name="La Espiga (otra vez)",
        prospect_whatsapp="+50688880000",
        prospect_ig="@LaEspiga",
        closer=closer_user,
        scheduled_at=timezone.now() + timedelta(days=4),
        actor=setter_user,
    )

    assert duplicate.is_duplicate
    assert set(find_duplicate_sets("laespiga", exclude_id=duplicate.pk)) == {sales_set}


@pytest.mark.django_db
def test_create_set_requires_prospect_name(setter_user, closer_user):
    with pytest.raises(ValidationError) as excinfo:
        create_set(
            prospect_name=" ",
            prospect_whatsapp="+50670001111",
            closer=closer_user,
            scheduled_at=timezone.now(),
            actor=setter_user,
        )
    assert excinfo.value.field == "prospect_name"


@pytest.mark.django_db
def test_update_set_never_touches_status(sales_set, setter_user):
    with pytest.raises(ValidationError):
        update_set(sales_set.pk, actor=setter_user, status=SalesSet.Status.CLOSED)

    updated = update_set(sales_set.pk, actor=setter_user, summary="Dueño interesado en pauta")
    assert updated.summary == "Dueño interesado en pauta"
    assert updated.status == SalesSet.Status.AGENDADO
    assert ActivityLog.objects.filter(action="updated", entity_id=str(sales_set.pk)).count() == 1
