"""
Aggregation Service

Completed-order revenue, all-time or for one reference day.
"""

import logging
from datetime import datetime

from hotel_orders.models import OrderStatus
from hotel_orders.services.order_store import OrderStore

logger = logging.getLogger(__name__)


class AggregationService:
    """Sums of `total` over completed orders."""

    def __init__(self, store: OrderStore):
        self.store = store

    async def total_completed(self) -> float:
        """All-time completed revenue, computed in the database."""
        return await self.store.sum_by_status(OrderStatus.COMPLETED)

    async def daily_total(self, day_start: datetime, day_end: datetime) -> float:
        """Completed revenue for orders dated in [day_start, day_end)."""
        orders = await self.store.find_by_date_range_and_status(
            day_start, day_end, OrderStatus.COMPLETED
        )
        total = sum(order.total or 0 for order in orders)
        logger.debug(f"Daily total over {len(orders)} completed orders: {total}")
        return total
