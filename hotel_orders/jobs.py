"""
Scheduled Jobs

The two recurring jobs of the billing day:

    - daily-total-notifier: at 23:00 reference time, SMS the operator the
      completed revenue of the current reference day.
    - order-reset: every 5 minutes; between 00:00 and 00:05 reference time
      delete the completed orders dated in the day that just started.

The reset only ever removes completed orders of the current day window,
and deletes them by id, so orders that arrive after the candidate set
was fetched are left alone.
"""

import logging
from datetime import datetime, tzinfo
from functools import lru_cache
from typing import Callable, Optional

from hotel_orders.core.config import get_settings
from hotel_orders.database import build_engine, build_session_maker
from hotel_orders.models import OrderStatus
from hotel_orders.scheduler import JobScheduler
from hotel_orders.services.aggregation import AggregationService
from hotel_orders.services.daily_window import (
    current_day_window,
    is_within_reset_window,
    reference_now,
)
from hotel_orders.services.notifications import (
    BaseNotificationService,
    get_notification_service,
)
from hotel_orders.services.order_store import OrderStore

logger = logging.getLogger(__name__)

DAILY_TOTAL_JOB = "daily-total-notifier"
ORDER_RESET_JOB = "order-reset"


# =============================================================================
# DAILY TOTAL
# =============================================================================

def format_daily_total_message(day: datetime, total: float, currency_symbol: str = "₹") -> str:
    """Daily Total for 19/10/2026: ₹1234.50"""
    return f"Daily Total for {day.strftime('%d/%m/%Y')}: {currency_symbol}{total:.2f}"


async def send_daily_total(
    store: OrderStore,
    notifier: BaseNotificationService,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
    currency_symbol: Optional[str] = None,
) -> str:
    """
    Compute today's completed total and SMS it to the operator.

    A failed SMS is logged by the notifier; the job itself still succeeds.

    Returns:
        The message body that was sent (or attempted)
    """
    if currency_symbol is None:
        currency_symbol = get_settings().currency_symbol

    logger.info("Sending daily total SMS notification...")
    window = current_day_window(now, tz)
    total = await AggregationService(store).daily_total(window.start, window.end)

    message = format_daily_total_message(window.start, total, currency_symbol)
    await notifier.notify_operator(message)
    return message


# =============================================================================
# ORDER RESET
# =============================================================================

async def reset_completed_orders(
    store: OrderStore,
    now: Optional[datetime] = None,
    window_minutes: Optional[int] = None,
    tz: Optional[tzinfo] = None,
) -> int:
    """
    Delete today's completed orders, but only just after midnight.

    Args:
        store: Order store
        now: Current instant (defaults to now)
        window_minutes: Length of the post-midnight window
        tz: Override for the reference zone

    Returns:
        Number of orders deleted (0 outside the window)
    """
    if window_minutes is None:
        window_minutes = get_settings().reset_window_minutes

    local_now = reference_now(now, tz)
    logger.info("Scheduled check: clearing completed orders if it is just past midnight")

    if not is_within_reset_window(local_now, window_minutes, tz):
        logger.info(f"Current reference time is {local_now:%H:%M}. Not time to clear yet.")
        return 0

    window = current_day_window(local_now, tz)
    logger.info(f"Target deletion range: {window.start.isoformat()} to {window.end.isoformat()}")

    orders = await store.find_by_date_range_and_status(window.start, window.end, OrderStatus.COMPLETED)
    logger.info(f"Found {len(orders)} completed orders to delete.")

    if not orders:
        logger.info("No completed orders found for today. Nothing deleted.")
        return 0

    deleted = await store.delete_by_ids(order.id for order in orders)
    logger.info(f"Deleted {deleted} orders.")
    return deleted


# =============================================================================
# WIRING
# =============================================================================

@lru_cache()
def build_worker_store() -> OrderStore:
    """
    Order store for Celery processes.

    NullPool, because each task run drives its own event loop.
    """
    engine = build_engine(get_settings().database_url, pooled=False)
    return OrderStore(build_session_maker(engine))


def register_default_jobs(
    scheduler: JobScheduler,
    store_factory: Callable[[], OrderStore] = build_worker_store,
    notifier_factory: Callable[[], BaseNotificationService] = get_notification_service,
) -> None:
    """Register the daily-total and reset jobs with their configured schedules."""
    settings = get_settings()

    async def daily_total_job() -> str:
        return await send_daily_total(store_factory(), notifier_factory())

    async def order_reset_job() -> int:
        return await reset_completed_orders(store_factory(), window_minutes=settings.reset_window_minutes)

    scheduler.register(DAILY_TOTAL_JOB, settings.daily_total_schedule, daily_total_job)
    scheduler.register(ORDER_RESET_JOB, settings.reset_check_schedule, order_reset_job)
