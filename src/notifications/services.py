"""Service functions for creating and reading notifications."""
from __future__ import annotations

import logging
from datetime import date

from django.utils import timezone

from core.exceptions import NotFoundError
from core.services import require_actor
from notifications.models import Notification

logger = logging.getLogger("agency")


def create_notification(user, type, title, message="", action_url="", payload=None):
    """Create and return a new Notification.

    Parameters
    ----------
    user : accounts.models.User
        Recipient.
    type : str
        One of ``Notification.Type`` values.
    title : str
        Short title (max 200 chars).
    message : str, optional
        Body text.
    action_url : str, optional
        Front-end path the notification links to.
    payload : dict, optional
        Extra JSON-serialisable data, used to de-duplicate reminders.

    Returns
    -------
    Notification
    """
    notification = Notification.objects.create(
        user=user,
        type=type,
        title=title,
        message=message,
        action_url=action_url,
        payload=payload or {},
    )
    logger.debug("Notification %s (%s) created for %s", notification.pk, type, user)
    return notification


def mark_notification_read(notification_id, *, actor) -> Notification:
    """Mark one of the actor's notifications as read."""
    require_actor(actor)
    notification = Notification.objects.filter(pk=notification_id, user=actor).first()
    if notification is None:
        raise NotFoundError("Notification", notification_id)
    notification.mark_as_read()
    return notification


def mark_all_notifications_read(*, actor) -> int:
    require_actor(actor)
    return Notification.objects.filter(user=actor, is_read=False).update(
        is_read=True,
        read_at=timezone.now(),
        updated_at=timezone.now(),
    )


def send_follow_up_reminders(day: date | None = None) -> int:
    """Remind closers of follow ups due on *day*.

    At most one reminder per deal per day, so the job can run several times.
    Returns the number of notifications created.
    """
    from pipeline.models import Deal

    day = day or timezone.localdate()
    deals = list(
        Deal.objects.filter(outcome=Deal.Outcome.FOLLOW_UP, follow_up_date=day)
        .select_related("sales_set", "sales_set__closer")
    )
    already_sent = set(
        Notification.objects.filter(
            type=Notification.Type.FOLLOW_UP_TODAY,
            payload__deal_id__in=[str(deal.pk) for deal in deals],
            created_at__date=day,
        ).values_list("payload__deal_id", flat=True)
    )

    created = 0
    for deal in deals:
        deal_id = str(deal.pk)
        if deal_id in already_sent:
            continue
        sales_set = deal.sales_set
        create_notification(
            user=sales_set.closer,
            type=Notification.Type.FOLLOW_UP_TODAY,
            title="Follow up hoy",
            message=f"Tenés un follow up con {sales_set.prospect_name} hoy.",
            action_url=f"/sets/{sales_set.pk}",
            payload={"deal_id": deal_id, "set_id": str(sales_set.pk)},
        )
        created += 1
    return created
