"""
Billing Desk Simulation Script

Fires a burst of concurrent orders at a running server and compares the
server's completed total with what was sent.
Run from project root: python scripts/simulate.py

Version: 1.0.0
"""

import asyncio
import sys
import random
import time
import argparse
from datetime import datetime
from typing import Any

import httpx

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:3000"
TOTAL_ORDERS = 50

MENU_ITEMS = [
    {"id": 1, "name": "Masala Dosa", "description": "Rice crepe, potato filling", "price": 90, "category": "Breakfast"},
    {"id": 2, "name": "Idli Vada", "description": "Two idli, one vada", "price": 70, "category": "Breakfast"},
    {"id": 3, "name": "Paneer Butter Masala", "description": "", "price": 240, "category": "Mains"},
    {"id": 4, "name": "Veg Biryani", "description": "", "price": 210, "category": "Mains"},
    {"id": 5, "name": "Butter Naan", "description": "", "price": 45, "category": "Breads"},
    {"id": 6, "name": "Filter Coffee", "description": "", "price": 35, "category": "Beverages"},
    {"id": 7, "name": "Gulab Jamun", "description": "Two pieces", "price": 60, "category": "Desserts"},
]
CUSTOMERS = [None, "Walk-in", "Room 101", "Room 204", "Mr. Rao", "Ms. Iyer"]


def generate_items() -> list[dict[str, Any]]:
    """Random bill lines with caller-computed subtotals."""
    items = []
    for menu_item in random.sample(MENU_ITEMS, random.randint(1, 4)):
        quantity = random.randint(1, 3)
        items.append({
            "menuItem": menu_item,
            "quantity": quantity,
            "subtotal": menu_item["price"] * quantity,
        })
    return items


def generate_order_payload(order_num: int) -> dict[str, Any]:
    """Payload for POST /api/orders. Odd orders use the legacy `id` field."""
    items = generate_items()
    payload: dict[str, Any] = {
        "items": items,
        "total": sum(item["subtotal"] for item in items),
        "tableNumber": random.choice([None, 1, 2, 3, 4, 5, 6]),
        "customerName": random.choice(CUSTOMERS),
    }
    payload["id" if order_num % 2 else "orderId"] = order_num
    if random.random() < 0.2:
        payload["status"] = random.choice(["pending", "cancelled"])
    return payload


async def send_order(client: httpx.AsyncClient, order_num: int) -> dict[str, Any]:
    """Send one order and time it."""
    payload = generate_order_payload(order_num)
    start_time = time.time()

    try:
        response = await client.post(f"{API_BASE_URL}/api/orders", json=payload, timeout=30.0)
        elapsed = round(time.time() - start_time, 3)

        if response.status_code == 201:
            data = response.json()
            return {
                "order_num": order_num,
                "success": True,
                "status": data.get("status"),
                "total": data.get("total") or 0,
                "time": elapsed,
            }
        return {
            "order_num": order_num,
            "success": False,
            "error": response.text[:100],
            "time": elapsed,
        }
    except httpx.HTTPError as e:
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": round(time.time() - start_time, 3),
        }


async def run_simulation(num_orders: int = TOTAL_ORDERS) -> dict[str, Any]:
    """Health check, a burst of orders, then a totals comparison."""
    print("=" * 70)
    print("🔥 BILLING DESK SIMULATION")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    async with httpx.AsyncClient() as client:
        health = (await client.get(f"{API_BASE_URL}/health")).json()
        print(f"\n🩺 Health: {health.get('status')} (database: {health.get('database')})")

        before = (await client.get(f"{API_BASE_URL}/api/orders/total")).json()["totalAmount"]

        start_time = time.time()
        results = await asyncio.gather(*(send_order(client, i + 1) for i in range(num_orders)))
        total_time = round(time.time() - start_time, 2)

        after = (await client.get(f"{API_BASE_URL}/api/orders/total")).json()["totalAmount"]

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]
    completed_revenue = sum(r["total"] for r in successful if r["status"] == "completed")

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Stored Orders: {len(successful)}/{num_orders}")
    print(f"❌ Rejected Orders: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        print(f"\n📈 Average Response: {avg_time}s")

    print(f"\n💰 Completed revenue sent: ₹{completed_revenue:.2f}")
    print(f"💰 Server total moved by:  ₹{after - before:.2f}")

    if failed:
        print("\n⚠️  Failed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Billing Desk Simulation Script")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--url", default=API_BASE_URL, help="Server base URL")
    args = parser.parse_args()

    API_BASE_URL = args.url
    asyncio.run(run_simulation(args.orders))
