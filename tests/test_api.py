from datetime import datetime, timedelta, timezone

import pytest

from hotel_orders.main import app, get_order_store


def _parse(timestamp: str) -> datetime:
    return datetime.fromisoformat(timestamp.replace("Z", "+00:00"))


class BrokenStore:
    async def find_all(self):
        raise RuntimeError("connection pool exploded")


# =============================================================================
# POST /api/orders
# =============================================================================

async def test_create_order_with_legacy_id(client):
    before = datetime.now(timezone.utc)
    response = await client.post("/api/orders", json={"id": 7, "total": 42, "items": []})

    assert response.status_code == 201
    body = response.json()
    assert body["orderId"] == 7
    assert body["status"] == "completed"
    assert body["total"] == 42
    assert body["items"] == []
    assert isinstance(body["id"], int)
    assert abs(_parse(body["date"]) - before) < timedelta(seconds=1)


async def test_create_order_camel_case_fields(client):
    payload = {
        "orderId": 12,
        "items": [
            {
                "menuItem": {"id": 1, "name": "Paneer Tikka", "description": "Starter", "price": 220, "category": "Starters"},
                "quantity": 1,
                "subtotal": 220,
            }
        ],
        "total": 220,
        "status": "pending",
        "tableNumber": 6,
        "customerName": "Mr. Rao",
    }

    response = await client.post("/api/orders", json=payload)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["tableNumber"] == 6
    assert body["customerName"] == "Mr. Rao"
    assert body["items"][0]["menuItem"]["name"] == "Paneer Tikka"


async def test_create_order_without_id_is_400(client):
    response = await client.post("/api/orders", json={"total": 42, "items": []})

    assert response.status_code == 400
    assert "orderId" in response.json()["message"]


async def test_create_order_with_bad_status_is_400(client):
    response = await client.post("/api/orders", json={"orderId": 1, "status": "shipped"})

    assert response.status_code == 400
    assert "status" in response.json()["message"]


async def test_create_order_with_invalid_json_is_400(client):
    response = await client.post(
        "/api/orders",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    assert "message" in response.json()


@pytest.mark.parametrize("token", [b"Infinity", b"-Infinity", b"NaN"])
async def test_create_order_with_non_finite_total_is_400(client, token):
    response = await client.post(
        "/api/orders",
        content=b'{"orderId": 1, "total": ' + token + b"}",
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    assert "total" in response.json()["message"]

    total = await client.get("/api/orders/total")
    assert total.json()["totalAmount"] == 0


async def test_create_order_with_out_of_range_date_is_400(client):
    response = await client.post("/api/orders", json={"orderId": 1, "date": "0001-01-01T00:00:00+05:30"})

    assert response.status_code == 400
    assert "date" in response.json()["message"]


# =============================================================================
# GET /api/orders*
# =============================================================================

async def test_list_orders(client):
    await client.post("/api/orders", json={"orderId": 1, "total": 10})
    await client.post("/api/orders", json={"orderId": 2, "total": 20, "status": "pending"})

    response = await client.get("/api/orders")

    assert response.status_code == 200
    assert [o["orderId"] for o in response.json()] == [1, 2]


async def test_list_completed_orders(client):
    await client.post("/api/orders", json={"orderId": 1, "total": 10})
    await client.post("/api/orders", json={"orderId": 2, "total": 20, "status": "pending"})
    await client.post("/api/orders", json={"orderId": 3, "total": 30, "status": "cancelled"})

    response = await client.get("/api/orders/completed")

    assert response.status_code == 200
    assert [o["orderId"] for o in response.json()] == [1]


async def test_total_is_zero_without_orders(client):
    response = await client.get("/api/orders/total")

    assert response.status_code == 200
    body = response.json()
    assert body["totalAmount"] == 0
    assert _parse(body["timestamp"]).tzinfo is not None


async def test_total_sums_completed_orders(client):
    await client.post("/api/orders", json={"orderId": 1, "total": 100.50})
    await client.post("/api/orders", json={"orderId": 2, "total": 200.25})
    await client.post("/api/orders", json={"orderId": 3, "total": 50.00, "status": "pending"})

    response = await client.get("/api/orders/total")

    assert response.json()["totalAmount"] == 300.75


# =============================================================================
# HEALTH
# =============================================================================

async def test_health_connected(client):
    response = await client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["database"] == "connected"
    assert "timestamp" in body


async def test_health_disconnected(client, unreachable_store):
    app.dependency_overrides[get_order_store] = lambda: unreachable_store

    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["database"] == "disconnected"


# =============================================================================
# ERRORS
# =============================================================================

async def test_unknown_route_is_404(client):
    response = await client.get("/api/menu")

    assert response.status_code == 404
    assert response.json() == {"message": "Route not found"}


async def test_wrong_method_is_404(client):
    response = await client.delete("/api/orders")

    assert response.status_code == 404
    assert response.json() == {"message": "Route not found"}


async def test_unhandled_error_is_generic_500(client):
    app.dependency_overrides[get_order_store] = lambda: BrokenStore()

    response = await client.get("/api/orders")

    assert response.status_code == 500
    assert response.json() == {"message": "Something went wrong!"}
    assert "exploded" not in response.text
