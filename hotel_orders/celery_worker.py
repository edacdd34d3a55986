"""
Celery Worker Configuration
Sets up Celery with Redis as message broker and result backend, and
registers the scheduled jobs with beat.

Run:
    celery -A hotel_orders.celery_worker worker --loglevel=info
    celery -A hotel_orders.celery_worker beat --loglevel=info
"""

from celery import Celery

from hotel_orders.core.config import get_settings, setup_logging
from hotel_orders.jobs import register_default_jobs
from hotel_orders.scheduler import JobScheduler

settings = get_settings()
setup_logging()

# Create Celery app
celery_app = Celery(
    'hotel_orders_worker',
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=['hotel_orders.tasks']  # Module containing our tasks
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',

    # Beat reads cron fields in the reference timezone
    timezone=settings.reference_timezone,
    enable_utc=True,

    # Worker settings
    worker_prefetch_multiplier=1,  # Process one task at a time
    worker_concurrency=2,

    # Result settings
    result_expires=3600,  # Results expire after 1 hour

    # Scheduled jobs are never retried
    task_acks_late=False,

    broker_connection_retry_on_startup=True,
)

scheduler = JobScheduler(celery_app, lock_directory=settings.lock_directory)
register_default_jobs(scheduler)


if __name__ == '__main__':
    celery_app.start()
