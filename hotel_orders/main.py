"""
FastAPI Application Entry Point

Hotel Orders Backend - order intake and revenue totals for the billing desk.

Endpoints:
    - POST /api/orders: Store an order
    - GET /api/orders: List all orders
    - GET /api/orders/completed: List completed orders
    - GET /api/orders/total: Completed revenue, all time
    - GET /health: System health check

The nightly SMS and the order reset run in the Celery worker
(see hotel_orders.celery_worker), never inside a request.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import List
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from hotel_orders.core.config import get_settings, setup_logging
from hotel_orders.database import async_session_maker, connect_with_retry, engine
from hotel_orders.models import OrderStatus
from hotel_orders.schemas import (
    ErrorResponse,
    HealthResponse,
    OrderResponse,
    TotalResponse,
)
from hotel_orders.services.aggregation import AggregationService
from hotel_orders.services.ingestion import OrderValidationError, ingest_order
from hotel_orders.services.notifications import get_notification_service
from hotel_orders.services.order_store import OrderStore

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

AVAILABLE_ROUTES = [
    "GET /health",
    "GET /api/orders",
    "GET /api/orders/completed",
    "GET /api/orders/total",
    "POST /api/orders",
]

_order_store = OrderStore(async_session_maker)


def get_order_store() -> OrderStore:
    """Dependency: the process-wide order store."""
    return _order_store


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.

    The database connection is retried in the background so the server
    answers (and /health reports "disconnected") while it is down.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Reference timezone: {settings.reference_timezone}")
    logger.info("=" * 60)

    connect_task = asyncio.create_task(connect_with_retry(engine))

    notification_service = get_notification_service()
    logger.info(f"✅ Notification Service: {notification_service.provider_name}")

    missing = settings.validate_production_config()
    if missing:
        logger.warning(f"⚠️ Missing SMS config (daily total SMS will fail): {missing}")

    logger.info(f"Server is running on port {settings.api_port}")
    logger.info("Available routes:")
    for route in AVAILABLE_ROUTES:
        logger.info(f"- {route}")

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    connect_task.cancel()
    try:
        await connect_task
    except asyncio.CancelledError:
        pass
    await engine.dispose()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Order intake, completed-revenue totals and health for the billing desk.",
    version=settings.app_version,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every incoming request."""
    logger.info(f"{request.method} {request.url.path}")
    return await call_next(request)


# =============================================================================
# HEALTH ENDPOINT
# =============================================================================

@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    store: OrderStore = Depends(get_order_store),
) -> HealthResponse:
    """Report whether the database is reachable right now."""
    logger.info("Health check requested")
    connected = await store.ping()

    return HealthResponse(
        status="ok",
        database="connected" if connected else "disconnected",
        timestamp=datetime.now(timezone.utc),
    )


# =============================================================================
# ORDER API ENDPOINTS
# =============================================================================

@app.post(
    "/api/orders",
    status_code=201,
    response_model=OrderResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["Orders"],
    summary="Create Order",
)
async def create_order(
    request: Request,
    store: OrderStore = Depends(get_order_store),
) -> OrderResponse:
    """
    Store an order exactly as the billing client sent it.

    Accepts the legacy `id` field in place of `orderId`; a missing
    status means "completed" and a missing date means now.
    """
    logger.info("Received POST request to /api/orders")

    try:
        payload = await request.json()
    except ValueError:
        raise OrderValidationError("Request body must be valid JSON")

    order = await ingest_order(store, payload)
    return OrderResponse.model_validate(order)


@app.get(
    "/api/orders",
    response_model=List[OrderResponse],
    tags=["Orders"],
    summary="List Orders",
)
async def list_orders(
    store: OrderStore = Depends(get_order_store),
) -> List[OrderResponse]:
    """Every stored order."""
    orders = await store.find_all()
    return [OrderResponse.model_validate(order) for order in orders]


@app.get(
    "/api/orders/completed",
    response_model=List[OrderResponse],
    tags=["Orders"],
    summary="List Completed Orders",
)
async def list_completed_orders(
    store: OrderStore = Depends(get_order_store),
) -> List[OrderResponse]:
    """Orders with status "completed"."""
    orders = await store.find_by_status(OrderStatus.COMPLETED)
    logger.info(f"Found {len(orders)} completed orders")
    return [OrderResponse.model_validate(order) for order in orders]


@app.get(
    "/api/orders/total",
    response_model=TotalResponse,
    tags=["Orders"],
    summary="Completed Revenue",
)
async def completed_total(
    store: OrderStore = Depends(get_order_store),
) -> TotalResponse:
    """Sum of `total` over all completed orders."""
    total = await AggregationService(store).total_completed()

    return TotalResponse(
        total_amount=total,
        timestamp=datetime.now(timezone.utc),
    )


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(OrderValidationError)
async def order_validation_handler(request: Request, exc: OrderValidationError) -> JSONResponse:
    """Bad order payloads are the client's problem."""
    logger.warning(f"Error saving order: {exc.message}")
    return JSONResponse(status_code=400, content={"message": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes and wrong methods both answer 404."""
    if exc.status_code in (404, 405):
        logger.info(f"404 - Route not found: {request.method} {request.url.path}")
        return JSONResponse(status_code=404, content={"message": "Route not found"})

    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler. Details stay in the server log."""
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")

    return JSONResponse(
        status_code=500,
        content={"message": "Something went wrong!"},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("hotel_orders.main:app", host=settings.api_host, port=settings.api_port)
