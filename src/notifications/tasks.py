"""Celery tasks for the notifications app."""
import logging

from celery import shared_task

logger = logging.getLogger("agency")


@shared_task(name="notifications.tasks.send_follow_up_reminders")
def send_follow_up_reminders():
    """Notify closers about follow ups scheduled for today."""
    from notifications.services import send_follow_up_reminders as send_reminders

    created = send_reminders()
    logger.info("send_follow_up_reminders completed: %d notifications created.", created)
    return f"{created} notifications created"
