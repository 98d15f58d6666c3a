"""Tests for merchant and root administration endpoints."""

import pytest
from httpx import AsyncClient
from tests.helpers import (
    CUSTOMER_CLAIMS,
    CUSTOMER_DETAILS,
    ROOT_CLAIMS,
    SELLER_CLAIMS,
    seed_product,
    seed_store,
)

BASE = "/api/v1/sessions"


@pytest.fixture
async def rice(app_db):
    await seed_store(app_db, "Acme", owner_email="asha@acme.test")
    return await seed_product(app_db, "Acme", "Basmati Rice", 40.0)


async def _merchant(client: AsyncClient, claims: dict) -> str:
    sid = (await client.post(BASE, json={"url": "/"})).json()["session_id"]
    data = (await client.post(f"{BASE}/{sid}/admin")).json()
    assert data["screen"] == "admin_login"
    await client.post(f"{BASE}/{sid}/sign-in", json={"claims": claims})
    return sid


async def _customer_order(client: AsyncClient, product_id: str) -> tuple[str, dict]:
    sid = (await client.post(BASE, json={"url": "/"})).json()["session_id"]
    await client.post(f"{BASE}/{sid}/navigate", json={"store_id": "Acme"})
    await client.post(f"{BASE}/{sid}/sign-in", json={"claims": CUSTOMER_CLAIMS})
    response = await client.post(
        f"{BASE}/{sid}/orders",
        json={"items": [{"product_id": product_id, "quantity": 1}], "customer": CUSTOMER_DETAILS},
    )
    assert response.status_code == 201
    return sid, response.json()["order"]


async def test_seller_lands_on_own_dashboard(client: AsyncClient, rice) -> None:
    sid = await _merchant(client, SELLER_CLAIMS)
    data = (await client.get(f"{BASE}/{sid}")).json()
    assert data["screen"] == "store_admin"
    assert data["user"]["role"] == "seller"
    assert data["user"]["managed_store_ids"] == ["Acme"]
    assert data["store"]["vpa"] == "acme@okaxis"

    stores = (await client.get(f"{BASE}/{sid}/admin/managed-stores")).json()
    assert [s["store_id"] for s in stores] == ["Acme"]


async def test_product_management(client: AsyncClient, rice) -> None:
    sid = await _merchant(client, SELLER_CLAIMS)
    response = await client.post(
        f"{BASE}/{sid}/admin/products", json={"name": "Toor Dal", "price": 120, "unit": "kg"}
    )
    assert response.status_code == 201
    dal = response.json()
    assert dal["store_id"] == "Acme"

    response = await client.patch(f"{BASE}/{sid}/admin/products/{dal['id']}", json={"price": 110})
    assert response.status_code == 200
    assert response.json()["price"] == 110.0
    assert response.json()["name"] == "Toor Dal"

    response = await client.patch(f"{BASE}/{sid}/admin/products/{dal['id']}", json={"price": -1})
    assert response.status_code == 400

    assert (await client.delete(f"{BASE}/{sid}/admin/products/{dal['id']}")).status_code == 204
    products = (await client.get(f"{BASE}/{sid}")).json()["products"]
    assert [p["name"] for p in products] == ["Basmati Rice"]


async def test_product_with_blank_name_is_rejected(client: AsyncClient, rice) -> None:
    sid = await _merchant(client, SELLER_CLAIMS)
    response = await client.post(f"{BASE}/{sid}/admin/products", json={"name": " ", "price": 1})
    assert response.status_code == 400
    assert response.json()["details"] == {"field": "name"}


async def test_customer_cannot_manage_products(client: AsyncClient, rice) -> None:
    sid, _ = await _customer_order(client, rice.id)
    response = await client.post(f"{BASE}/{sid}/admin/products", json={"name": "X", "price": 1})
    assert response.status_code == 401
    assert response.json()["error"] == "LOGIN_REQUIRED"


async def test_order_transitions(client: AsyncClient, rice) -> None:
    customer_sid, order = await _customer_order(client, rice.id)
    sid = await _merchant(client, SELLER_CLAIMS)
    url = f"{BASE}/{sid}/admin/orders/{order['firestore_id']}/transitions"

    response = await client.post(url, json={"action": "ship", "tracking_number": "IN12345"})
    assert response.status_code == 409
    assert response.json()["error"] == "INVALID_TRANSITION"

    assert (await client.post(url, json={"action": "mark_paid"})).json()["status"] == "paid"
    assert (await client.post(url, json={"action": "confirm"})).json()["status"] == "confirmed"

    response = await client.post(url, json={"action": "ship"})
    assert response.status_code == 400
    assert response.json()["details"] == {"field": "tracking_number"}

    shipped = (await client.post(url, json={"action": "ship", "tracking_number": "IN12345"})).json()
    assert shipped["status"] == "shipped"
    assert shipped["tracking_number"] == "IN12345"

    tracked = (await client.get(f"{BASE}/{customer_sid}")).json()["tracked_order"]
    assert tracked["status"] == "shipped"
    assert tracked["tracking_number"] == "IN12345"

    await client.post(url, json={"action": "deliver"})
    view = (await client.get(f"{BASE}/{sid}")).json()
    assert view["active_orders"] == []
    assert [o["status"] for o in view["completed_orders"]] == ["delivered"]


async def test_unknown_action_is_rejected(client: AsyncClient, rice) -> None:
    _, order = await _customer_order(client, rice.id)
    sid = await _merchant(client, SELLER_CLAIMS)
    response = await client.post(
        f"{BASE}/{sid}/admin/orders/{order['firestore_id']}/transitions", json={"action": "refund"}
    )
    assert response.status_code == 422


async def test_delete_order(client: AsyncClient, rice) -> None:
    _, order = await _customer_order(client, rice.id)
    sid = await _merchant(client, SELLER_CLAIMS)
    response = await client.delete(f"{BASE}/{sid}/admin/orders/{order['firestore_id']}")
    assert response.status_code == 204
    assert (await client.get(f"{BASE}/{sid}")).json()["active_orders"] == []
    response = await client.delete(f"{BASE}/{sid}/admin/orders/{order['firestore_id']}")
    assert response.status_code == 404


async def test_pausing_store_blocks_checkout(client: AsyncClient, rice) -> None:
    sid = await _merchant(client, SELLER_CLAIMS)
    response = await client.put(
        f"{BASE}/{sid}/admin/store/availability", json={"accepting_orders": False}
    )
    assert response.status_code == 200
    assert response.json()["temporarily_closed"] is True

    customer = (await client.post(BASE, json={"url": "/"})).json()["session_id"]
    await client.post(f"{BASE}/{customer}/navigate", json={"store_id": "Acme"})
    await client.post(f"{BASE}/{customer}/sign-in", json={"claims": CUSTOMER_CLAIMS})
    response = await client.post(
        f"{BASE}/{customer}/orders",
        json={"items": [{"product_id": rice.id, "quantity": 1}], "customer": CUSTOMER_DETAILS},
    )
    assert response.status_code == 409
    assert response.json()["error"] == "STORE_CLOSED"


async def test_update_store_settings(client: AsyncClient, rice) -> None:
    sid = await _merchant(client, SELLER_CLAIMS)
    response = await client.patch(
        f"{BASE}/{sid}/admin/store", json={"vpa": "acme@ybl", "merchant_name": "Acme Foods"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["vpa"] == "acme@ybl"
    assert data["merchant_name"] == "Acme Foods"
    assert data["store_id"] == "Acme"


async def test_seller_cannot_use_root_console(client: AsyncClient, rice) -> None:
    sid = await _merchant(client, SELLER_CLAIMS)
    response = await client.get(f"{BASE}/{sid}/admin/stores")
    assert response.status_code == 403
    assert response.json()["error"] == "PERMISSION_DENIED"


async def test_seller_cannot_open_foreign_store(client: AsyncClient, app_db, rice) -> None:
    await seed_store(app_db, "Bolt", owner_email="bolt@bolt.test")
    sid = await _merchant(client, SELLER_CLAIMS)
    response = await client.post(f"{BASE}/{sid}/admin/managed-stores/Bolt/open")
    assert response.status_code == 403


async def test_root_store_lifecycle(client: AsyncClient, rice) -> None:
    sid = await _merchant(client, ROOT_CLAIMS)
    view = (await client.get(f"{BASE}/{sid}")).json()
    assert view["screen"] == "root_console"

    body = {"store_id": "TejaShop2024", "vpa": "teja@okaxis", "merchant_name": "Teja Traders"}
    response = await client.post(f"{BASE}/{sid}/admin/stores", json=body)
    assert response.status_code == 201
    assert response.json()["is_active"] is True

    response = await client.post(
        f"{BASE}/{sid}/admin/stores", json={**body, "store_id": "tejashop2024"}
    )
    assert response.status_code == 409
    assert response.json()["error"] == "STORE_ALREADY_EXISTS"

    response = await client.post(f"{BASE}/{sid}/admin/stores", json={**body, "store_id": "Teja Shop"})
    assert response.status_code == 400

    stores = (await client.get(f"{BASE}/{sid}/admin/stores")).json()
    assert [s["store_id"] for s in stores] == ["Acme", "TejaShop2024"]

    assert (await client.post(f"{BASE}/{sid}/admin/managed-stores/Acme/open")).status_code == 204
    assert (await client.get(f"{BASE}/{sid}")).json()["screen"] == "store_admin"

    assert (await client.delete(f"{BASE}/{sid}/admin/stores/Acme")).status_code == 204
    view = (await client.get(f"{BASE}/{sid}")).json()
    assert view["screen"] == "root_console"
    assert view["products"] == []
    assert (await client.get("/api/v1/stores/Acme")).status_code == 404
