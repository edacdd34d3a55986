"""
Celery Tasks
Background tasks for the scheduled jobs and manual maintenance.
"""

import asyncio
import logging
from datetime import datetime

from hotel_orders.celery_worker import celery_app, scheduler
from hotel_orders.jobs import build_worker_store
from hotel_orders.scheduler import RUN_JOB_TASK

logger = logging.getLogger(__name__)


@celery_app.task(name=RUN_JOB_TASK)
def run_scheduled_job(job_name: str) -> dict:
    """
    Fire one registered job.

    Beat sends the job name; overlapping triggers of the same job are
    skipped by the scheduler's lock.
    """
    return scheduler.run(job_name)


@celery_app.task
def clear_all_orders() -> dict:
    """
    Delete EVERY order regardless of status or date.

    Destructive and never scheduled. Only run it by hand, e.g.
    `celery -A hotel_orders.celery_worker call hotel_orders.tasks.clear_all_orders`.
    """
    logger.warning("Clearing ALL orders (manual request)")
    deleted = asyncio.run(build_worker_store().delete_all())
    logger.warning(f"Deleted {deleted} orders")
    return {
        'success': True,
        'deleted': deleted,
        'timestamp': datetime.now().isoformat()
    }
