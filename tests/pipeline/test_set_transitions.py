from datetime import timedelta

import pytest
from django.contrib.auth.models import AnonymousUser
from django.utils import timezone

from core.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from core.models import ActivityLog
from pipeline.models import VALID_STATUS_TRANSITIONS, SalesSet, SetStatusHistory
from pipeline.services import transition_set_status

ALL_STATUSES = list(SalesSet.Status.values)
ALLOWED_PAIRS = [
    (source, target)
    for source in ALL_STATUSES
    for target in ALL_STATUSES
    if target in VALID_STATUS_TRANSITIONS[source]
]
FORBIDDEN_PAIRS = [
    (source, target)
    for source in ALL_STATUSES
    for target in ALL_STATUSES
    if target not in VALID_STATUS_TRANSITIONS[source]
]


def _force_status(sales_set, status):
    SalesSet.objects.filter(pk=sales_set.pk).update(status=status)
    sales_set.refresh_from_db()


def test_transition_table_is_exhaustive():
    assert set(VALID_STATUS_TRANSITIONS) == set(ALL_STATUSES)
    assert VALID_STATUS_TRANSITIONS[SalesSet.Status.CLOSED] == frozenset()
    assert VALID_STATUS_TRANSITIONS[SalesSet.Status.DESCALIFICADO] == frozenset()
    assert VALID_STATUS_TRANSITIONS[SalesSet.Status.CLOSED_PENDIENTE] == {SalesSet.Status.CLOSED}


@pytest.mark.django_db
@pytest.mark.parametrize("source,target", FORBIDDEN_PAIRS)
def test_forbidden_transition_changes_nothing(sales_set, closer_user, source, target):
    _force_status(sales_set, source)

    with pytest.raises(InvalidTransitionError) as excinfo:
        transition_set_status(sales_set.pk, target, actor=closer_user)

    assert excinfo.value.from_status == source
    assert excinfo.value.to_status == target
    sales_set.refresh_from_db()
    assert sales_set.status == source
    assert not SetStatusHistory.objects.filter(sales_set=sales_set).exists()
    assert not ActivityLog.objects.filter(entity_type="set", entity_id=str(sales_set.pk)).exists()


@pytest.mark.django_db
@pytest.mark.parametrize("source,target", ALLOWED_PAIRS)
def test_allowed_transition_writes_one_history_row_and_one_log(sales_set, closer_user, source, target):
    _force_status(sales_set, source)

    history = transition_set_status(sales_set.pk, target, actor=closer_user, notes="ok")

    sales_set.refresh_from_db()
    assert sales_set.status == target
    rows = SetStatusHistory.objects.filter(sales_set=sales_set)
    assert rows.count() == 1
    assert history.old_status == source
    assert history.new_status == target
    assert history.changed_by == closer_user
    logs = ActivityLog.objects.filter(action="status_changed", entity_id=str(sales_set.pk))
    assert logs.count() == 1
    assert logs.get().details["old_status"] == source
    assert logs.get().details["new_status"] == target


@pytest.mark.django_db
def test_transition_requires_an_actor(sales_set):
    with pytest.raises(UnauthorizedError):
        transition_set_status(sales_set.pk, SalesSet.Status.NO_SHOW, actor=None)
    with pytest.raises(UnauthorizedError):
        transition_set_status(sales_set.pk, SalesSet.Status.NO_SHOW, actor=AnonymousUser())

    sales_set.refresh_from_db()
    assert sales_set.status == SalesSet.Status.AGENDADO


@pytest.mark.django_db
def test_transition_unknown_status_is_a_validation_error(sales_set, closer_user):
    with pytest.raises(ValidationError) as excinfo:
        transition_set_status(sales_set.pk, "ganado", actor=closer_user)
    assert excinfo.value.field == "status"


@pytest.mark.django_db
def test_transition_missing_set(closer_user):
    missing = "00000000-0000-0000-0000-000000000000"
    with pytest.raises(NotFoundError) as excinfo:
        transition_set_status(missing, SalesSet.Status.NO_SHOW, actor=closer_user)
    assert excinfo.value.entity == "SalesSet"


@pytest.mark.django_db
def test_stale_expected_status_is_a_conflict(sales_set, closer_user):
    transition_set_status(sales_set.pk, SalesSet.Status.NO_SHOW, actor=closer_user)

    # A second user still looking at the set as "agendado".
    with pytest.raises(ConflictError):
        transition_set_status(
            sales_set.pk,
            SalesSet.Status.SEGUIMIENTO,
            actor=closer_user,
            expected_status=SalesSet.Status.AGENDADO,
        )

    sales_set.refresh_from_db()
    assert sales_set.status == SalesSet.Status.NO_SHOW
    assert SetStatusHistory.objects.filter(sales_set=sales_set).count() == 1


@pytest.mark.django_db
def test_reschedule_updates_time_and_default_note(sales_set, setter_user):
    new_time = timezone.now() + timedelta(days=3)

    history = transition_set_status(
        sales_set.pk,
        SalesSet.Status.REAGENDO,
        actor=setter_user,
        scheduled_at=new_time,
    )

    sales_set.refresh_from_db()
    assert sales_set.scheduled_at == new_time
    assert history.notes.startswith("Re-agendado para ")
    assert timezone.localtime(new_time).strftime("%d/%m/%Y") in history.notes
