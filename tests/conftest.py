"""
Shared fixtures: an in-memory SQLite order store, a silent mock SMS
service and an HTTP client wired to the FastAPI app.
"""

import os
import tempfile
from datetime import datetime, timezone

# Settings are read once; pin them before the package is imported.
os.environ["ENV_MODE"] = "development"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ADMIN_PHONE_NUMBER"] = "+919999999999"
os.environ["REFERENCE_TIMEZONE"] = "Asia/Kolkata"
os.environ["LOCK_DIRECTORY"] = tempfile.mkdtemp(prefix="hotel-orders-locks-")

import httpx
import pytest

from hotel_orders.database import build_engine, build_session_maker, init_db
from hotel_orders.main import app, get_order_store
from hotel_orders.models import Order, OrderStatus
from hotel_orders.services.notifications import MockNotificationService
from hotel_orders.services.order_store import OrderStore

OPERATOR_PHONE = "+919999999999"


@pytest.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def store(engine) -> OrderStore:
    return OrderStore(build_session_maker(engine))


@pytest.fixture
async def unreachable_store():
    """Store whose database file can never be opened."""
    engine = build_engine("sqlite+aiosqlite:////nonexistent-dir/missing/orders.db")
    yield OrderStore(build_session_maker(engine))
    await engine.dispose()


@pytest.fixture
def notifier() -> MockNotificationService:
    return MockNotificationService(
        operator_phone=OPERATOR_PHONE,
        failure_rate=0.0,
        min_latency=0.0,
        max_latency=0.0,
    )


@pytest.fixture
def make_order():
    """Build an unsaved Order with sensible defaults."""
    def _make_order(
        order_id: int = 1,
        total: float = 10.0,
        status: OrderStatus = OrderStatus.COMPLETED,
        date: datetime = None,
        **fields,
    ) -> Order:
        return Order(
            order_id=order_id,
            items=fields.pop("items", []),
            total=total,
            status=status,
            date=date or datetime.now(timezone.utc),
            **fields,
        )
    return _make_order


@pytest.fixture
async def client(store):
    app.dependency_overrides[get_order_store] = lambda: store
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()
