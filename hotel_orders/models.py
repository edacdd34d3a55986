"""
SQLAlchemy Database Models

A single `orders` table holds everything the billing desk sends in.
Item lines and totals are stored exactly as the client computed them.
"""

import enum

from sqlalchemy import Column, Integer, String, Float, Enum, JSON
from hotel_orders.database import Base, UTCDateTime


class OrderStatus(str, enum.Enum):
    """Order status workflow."""
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Order(Base):
    """
    Main Order table - one row per bill.

    `order_id` is the number the client assigned; it is not unique.
    `id` is the identity the database generates on insert.
    """
    __tablename__ = "orders"

    # Primary Key
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    order_id = Column(Integer, nullable=False, index=True)

    # JSON list of {menuItem, quantity, subtotal}
    items = Column(JSON, nullable=False, default=list)

    total = Column(Float, nullable=True)

    date = Column(UTCDateTime, nullable=False, index=True)

    status = Column(
        Enum(
            OrderStatus,
            name="order_status",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True
    )

    table_number = Column(Integer, nullable=True)
    customer_name = Column(String(100), nullable=True)

    def __repr__(self):
        return f"<Order #{self.order_id} (id={self.id}) - {self.status.value} - {self.total}>"
