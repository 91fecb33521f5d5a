"""Celery tasks for the reports app."""
import logging

import requests
from celery import shared_task

logger = logging.getLogger("agency")


@shared_task(name="reports.tasks.refresh_exchange_rate")
def refresh_exchange_rate():
    """Store today's USD to CRC rate.

    Runs once per day from the ``CELERY_BEAT_SCHEDULE`` setting. A provider
    outage is logged and reported; the summary keeps using the last stored
    rate.
    """
    from reports.services import refresh_exchange_rate as fetch_rate

    try:
        exchange_rate = fetch_rate()
    except requests.RequestException as exc:
        logger.error("Exchange rate refresh failed: %s", exc)
        return {"status": "error", "message": str(exc)[:500]}
    return {
        "status": "ok",
        "date": exchange_rate.date.isoformat(),
        "usd_to_crc": str(exchange_rate.usd_to_crc),
    }
