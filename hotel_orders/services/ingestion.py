"""
Order Ingestion

Turns an arbitrary JSON payload into a stored order:

    1. `id` -> `orderId` (older clients send `id`)
    2. missing `status` -> "completed"
    3. missing `date` -> now
    4. explicit validation, then insert

Walk-in and cash bills arrive already settled, which is why a missing
status means "completed": they show up in the daily total without a
separate completion step.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError
from sqlalchemy.exc import DataError, IntegrityError

from hotel_orders.models import Order, OrderStatus
from hotel_orders.schemas import OrderCreate
from hotel_orders.services.order_store import OrderStore

logger = logging.getLogger(__name__)

DEFAULT_ORDER_STATUS = OrderStatus.COMPLETED


class OrderValidationError(ValueError):
    """Payload is missing required fields or has the wrong types."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def normalize_order_payload(payload: Any, now: Optional[datetime] = None) -> dict[str, Any]:
    """
    Apply the ingestion defaults to a raw payload.

    The input is not modified; a new dict is returned.

    Raises:
        OrderValidationError: payload is not a JSON object
    """
    if not isinstance(payload, dict):
        raise OrderValidationError("Order validation failed: payload must be a JSON object")

    data = dict(payload)

    if "id" in data:
        legacy_id = data.pop("id")
        if data.get("orderId") is None:
            data["orderId"] = legacy_id

    if not data.get("status"):
        data["status"] = DEFAULT_ORDER_STATUS.value

    if not data.get("date"):
        data["date"] = now or datetime.now(timezone.utc)

    return data


def validate_order(data: dict[str, Any]) -> OrderCreate:
    """Check a normalized payload against the order contract."""
    try:
        return OrderCreate.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'order'}: {err['msg']}"
            for err in e.errors()
        )
        raise OrderValidationError(f"Order validation failed: {problems}") from e


async def ingest_order(
    store: OrderStore,
    payload: Any,
    now: Optional[datetime] = None,
) -> Order:
    """
    Normalize, validate and store one order.

    Args:
        store: Where the order goes
        payload: Decoded request body
        now: Creation time used when the payload has no date

    Returns:
        The stored order, including its generated id

    Raises:
        OrderValidationError: bad payload, or the database rejected the row
    """
    order_data = validate_order(normalize_order_payload(payload, now))

    order = Order(
        order_id=order_data.order_id,
        items=[item.model_dump(by_alias=True) for item in order_data.items],
        total=order_data.total,
        date=order_data.date,
        status=order_data.status,
        table_number=order_data.table_number,
        customer_name=order_data.customer_name,
    )

    try:
        stored = await store.insert(order)
    except (IntegrityError, DataError) as e:
        raise OrderValidationError(f"Order validation failed: {e.orig}") from e

    logger.info(
        f"Order #{stored.order_id} stored (id={stored.id}, "
        f"status={stored.status.value}, total={stored.total})"
    )
    return stored
