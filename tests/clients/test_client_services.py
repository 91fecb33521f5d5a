import pytest

from clients.models import Advance90Phase, Client, OnboardingChecklistItem
from clients.services import (
    add_client_note,
    assign_client,
    toggle_onboarding_item,
    update_client_status,
    update_phase_status,
)
from core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from core.models import ActivityLog
from notifications.models import Notification
from pipeline.models import SalesSet
from pipeline.services import close_deal


@pytest.fixture
def client_record(sales_set, closer_user):
    result = close_deal(
        sales_set.pk,
        service_sold=SalesSet.Service.ADVANCE90,
        revenue_total="3000",
        actor=closer_user,
    )
    return result.client


@pytest.mark.django_db
def test_client_lifecycle(client_record, delivery_user):
    update_client_status(client_record.pk, Client.Status.ACTIVO, actor=delivery_user)
    update_client_status(client_record.pk, Client.Status.PAUSADO, actor=delivery_user)
    client = update_client_status(client_record.pk, Client.Status.COMPLETADO, actor=delivery_user)

    assert client.status == Client.Status.COMPLETADO
    with pytest.raises(InvalidTransitionError):
        update_client_status(client_record.pk, Client.Status.ACTIVO, actor=delivery_user)


@pytest.mark.django_db
def test_onboarding_client_cannot_jump_to_completed(client_record, delivery_user):
    with pytest.raises(InvalidTransitionError) as excinfo:
        update_client_status(client_record.pk, Client.Status.COMPLETADO, actor=delivery_user)
    assert excinfo.value.from_status == Client.Status.ONBOARDING


@pytest.mark.django_db
def test_unknown_client_status(client_record, delivery_user):
    with pytest.raises(ValidationError):
        update_client_status(client_record.pk, "archivado", actor=delivery_user)


@pytest.mark.django_db
def test_toggle_onboarding_item_records_who_and_when(client_record, delivery_user):
    item = OnboardingChecklistItem.objects.filter(client=client_record).first()

    done = toggle_onboarding_item(item.pk, True, actor=delivery_user)
    assert done.completed
    assert done.completed_by == delivery_user
    assert done.completed_at is not None

    undone = toggle_onboarding_item(item.pk, False, actor=delivery_user)
    assert not undone.completed
    assert undone.completed_by is None
    assert undone.completed_at is None


@pytest.mark.django_db
def test_assign_client_notifies_assignee(client_record, admin_user, delivery_user):
    client = assign_client(client_record.pk, delivery_user, actor=admin_user)

    assert client.assigned_to == delivery_user
    assert Notification.objects.filter(user=delivery_user, type=Notification.Type.CLIENT_ASSIGNED).count() == 1


@pytest.mark.django_db
def test_update_phase_status(client_record, delivery_user):
    phase = Advance90Phase.objects.filter(client=client_record).order_by("order").first()

    updated = update_phase_status(phase.pk, Advance90Phase.Status.EN_PROGRESO, actor=delivery_user)

    assert updated.status == Advance90Phase.Status.EN_PROGRESO
    assert ActivityLog.objects.filter(action="phase_updated", entity_id=str(client_record.pk)).exists()


@pytest.mark.django_db
def test_missing_phase(delivery_user):
    with pytest.raises(NotFoundError):
        update_phase_status("00000000-0000-0000-0000-000000000000", "completado", actor=delivery_user)


@pytest.mark.django_db
def test_client_note_is_kept_in_activity_trail(client_record, delivery_user):
    entry = add_client_note(client_record.pk, "kickoff", "Kickoff agendado para el jueves", actor=delivery_user)

    assert entry.entity_type == "client"
    assert entry.details["content"] == "Kickoff agendado para el jueves"
    with pytest.raises(ValidationError):
        add_client_note(client_record.pk, "kickoff", "  ", actor=delivery_user)
