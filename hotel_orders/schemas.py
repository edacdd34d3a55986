"""
Pydantic Schemas for Request/Response Validation

The wire format is camelCase (orderId, menuItem, tableNumber, ...),
the Python side stays snake_case through an alias generator.
"""

from datetime import datetime, timezone
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from hotel_orders.models import OrderStatus

# Clients send whole numbers and decimals interchangeably
Number = Union[int, float]


class CamelModel(BaseModel):
    """Base schema: camelCase aliases, accepts field names and ORM objects too.

    NaN and Infinity are rejected; one of them would poison every sum.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        allow_inf_nan=False,
    )


# =============================================================================
# ORDER LINES
# =============================================================================

class MenuItem(CamelModel):
    """Menu entry as the client knows it. Not checked against any catalog."""
    id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Number] = None
    category: Optional[str] = None


class OrderItem(CamelModel):
    """Single line of a bill. `subtotal` is caller-computed."""
    menu_item: Optional[MenuItem] = None
    quantity: Optional[Number] = None
    subtotal: Optional[Number] = None


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class OrderCreate(CamelModel):
    """
    A normalized order, ready to be stored.

    Ingestion fills `status` and `date` before validating, so both are
    required here.
    """
    order_id: int = Field(..., examples=[7])
    items: List[OrderItem] = Field(default_factory=list)
    total: Optional[Number] = Field(None, examples=[42.5])
    date: datetime
    status: OrderStatus
    table_number: Optional[int] = Field(None, examples=[4])
    customer_name: Optional[str] = Field(None, max_length=100, examples=["Walk-in"])

    @field_validator("date")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Naive timestamps are taken as UTC; aware ones must fit in UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        try:
            return v.astimezone(timezone.utc)
        except OverflowError:
            raise ValueError("date is out of range once converted to UTC")


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class OrderResponse(CamelModel):
    """Response schema for a stored order."""
    id: int
    order_id: int
    items: List[OrderItem]
    total: Optional[Number]
    date: datetime
    status: OrderStatus
    table_number: Optional[int]
    customer_name: Optional[str]


class TotalResponse(CamelModel):
    """All-time completed revenue."""
    total_amount: Number
    timestamp: datetime


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Standard error response."""
    message: str
