"""
Order Store

Persistence for order records on top of an async SQLAlchemy session
factory. Every method opens its own short session; there is no
transaction spanning two calls, so a scheduled delete can interleave
with an insert coming in over HTTP.
"""

import logging
from datetime import datetime
from typing import Iterable, List

from sqlalchemy import delete, func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hotel_orders.models import Order, OrderStatus

logger = logging.getLogger(__name__)


class OrderStore:
    """
    Insert, query, aggregate and delete orders.

    Date ranges are half-open: `start` inclusive, `end` exclusive.

    Example:
        >>> store = OrderStore(async_session_maker)
        >>> completed = await store.find_by_status(OrderStatus.COMPLETED)
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    # =========================================================================
    # WRITES
    # =========================================================================

    async def insert(self, order: Order) -> Order:
        """Persist a new order and return it with its generated id."""
        async with self._session_maker() as session:
            session.add(order)
            await session.commit()
            await session.refresh(order)
        logger.debug(f"Inserted order #{order.order_id} as id={order.id}")
        return order

    async def delete_by_ids(self, ids: Iterable[int]) -> int:
        """Delete the given rows. Returns the number removed."""
        ids = list(ids)
        if not ids:
            return 0
        return await self._execute_delete(delete(Order).where(Order.id.in_(ids)))

    async def delete_by_date_range_and_status(
        self,
        start: datetime,
        end: datetime,
        status: OrderStatus,
    ) -> int:
        """Delete every order with `status` dated in [start, end)."""
        stmt = delete(Order).where(
            Order.status == status,
            Order.date >= start,
            Order.date < end,
        )
        return await self._execute_delete(stmt)

    async def delete_all(self) -> int:
        """Delete every order regardless of status or date."""
        return await self._execute_delete(delete(Order))

    async def _execute_delete(self, stmt) -> int:
        async with self._session_maker() as session:
            result = await session.execute(stmt)
            await session.commit()
        return result.rowcount or 0

    # =========================================================================
    # READS
    # =========================================================================

    async def find_all(self) -> List[Order]:
        return await self._fetch(select(Order).order_by(Order.id))

    async def find_by_status(self, status: OrderStatus) -> List[Order]:
        return await self._fetch(
            select(Order).where(Order.status == status).order_by(Order.id)
        )

    async def find_by_date_range_and_status(
        self,
        start: datetime,
        end: datetime,
        status: OrderStatus,
    ) -> List[Order]:
        """Orders with `status` dated in [start, end)."""
        stmt = (
            select(Order)
            .where(
                Order.status == status,
                Order.date >= start,
                Order.date < end,
            )
            .order_by(Order.id)
        )
        return await self._fetch(stmt)

    async def sum_by_status(self, status: OrderStatus) -> float:
        """Sum of `total` over orders with `status`; 0 when none match."""
        stmt = select(func.coalesce(func.sum(Order.total), 0)).where(Order.status == status)
        async with self._session_maker() as session:
            result = await session.execute(stmt)
            total = result.scalar()
        return total or 0

    async def _fetch(self, stmt) -> List[Order]:
        async with self._session_maker() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    # =========================================================================
    # CONNECTIVITY
    # =========================================================================

    async def ping(self) -> bool:
        """True if the database answers a trivial query."""
        try:
            async with self._session_maker() as session:
                await session.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"Database ping failed: {e}")
            return False
