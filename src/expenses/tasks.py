"""Celery tasks for the expenses app."""
from __future__ import annotations

from celery import shared_task

from expenses.services import generate_recurring_expenses


@shared_task(name="expenses.tasks.generate_recurring_expenses")
def generate_recurring_expenses_task():
    """Roll recurring expenses into the current month."""
    result = generate_recurring_expenses()
    return {
        "generated_count": result.generated_count,
        "generated_ids": result.generated_ids,
        "skipped_count": result.skipped_count,
    }
