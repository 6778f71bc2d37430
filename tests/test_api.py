import logging

import pytest
from fastapi.testclient import TestClient

from auth import get_app_user
from clock import get_clock
from main import app
from services.cart_store import get_cart_store
from supabase_client import get_supabase

STUDENT = {"id": "u-student", "role": "student", "status": "active", "email": "budi@campus.ac.id"}
VENDOR = {"id": "vendor-1", "role": "vendor", "status": "active"}
ADMIN = {"id": "u-admin", "role": "admin", "status": "active"}


@pytest.fixture
def api(catalog, clock, store):
    current = {"user": STUDENT}
    app.dependency_overrides[get_app_user] = lambda: current["user"]
    app.dependency_overrides[get_supabase] = lambda: catalog
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_cart_store] = lambda: store
    client = TestClient(app)
    client.login_as = lambda user: current.update(user=user)
    yield client
    app.dependency_overrides.clear()


def _fill_cart(api):
    api.post("/api/cart/items", json={"menu_item_id": "item-rice"})
    api.post("/api/cart/items", json={"menu_item_id": "item-rice"})
    return api.post("/api/cart/items", json={"menu_item_id": "item-tea"})


def test_pickup_locations_carry_fee(api):
    response = api.get("/api/checkout/pickup-locations")
    assert response.status_code == 200
    fees = {item["id"]: item["service_fee"] for item in response.json()["items"]}
    assert fees == {"loc-lobby": 2500, "loc-third": 2900}


def test_time_slots_for_today(api):
    response = api.get("/api/checkout/time-slots", params={"day": "today"})
    body = response.json()
    assert body["date"] == "2024-05-15"
    assert [slot["id"] for slot in body["slots"]] == ["slot-11", "slot-13", "slot-15", "slot-17"]


def test_cart_flow(api):
    body = _fill_cart(api).json()
    assert body["vendor_id"] == "vendor-1"
    assert body["item_count"] == 3
    assert body["subtotal"] == 35000

    body = api.patch("/api/cart/items/item-tea", json={"quantity": 0}).json()
    assert [line["menu_item_id"] for line in body["items"]] == ["item-rice"]

    assert api.patch("/api/cart/items/item-tea", json={"quantity": 2}).status_code == 404
    assert api.delete("/api/cart").json()["items"] == []


def test_cart_rejects_unorderable_items(api):
    assert api.post("/api/cart/items", json={"menu_item_id": "item-soldout"}).status_code == 404
    assert api.post("/api/cart/items", json={"menu_item_id": "item-hidden"}).status_code == 404


def test_quote_uses_cart_and_location(api):
    _fill_cart(api)
    body = api.get("/api/checkout/quote", params={"pickup_location_id": "loc-third"}).json()
    assert body == {"subtotal": 35000, "service_fee": 2900, "total": 37900}
    assert api.get("/api/checkout/quote").json()["service_fee"] == 0


def test_place_order(api, catalog):
    _fill_cart(api)
    response = api.post(
        "/api/checkout/orders",
        json={
            "pickup_location_id": "loc-third",
            "time_slot_id": "slot-11",
            "pickup_day": "today",
            "payment_method": "cash",
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body["order_number"].startswith("BG-")
    assert body["service_fee"] == 2900
    assert body["total"] == 37900
    assert body["status"] == "scheduled"
    assert body["payment_status"] == "pending"
    assert len(catalog.tables["order_items"]) == 2
    assert api.get("/api/cart").json()["item_count"] == 0


def test_place_order_without_slot(api, catalog):
    _fill_cart(api)
    response = api.post("/api/checkout/orders", json={"pickup_location_id": "loc-third"})
    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "missing_selection"
    assert "orders" not in catalog.tables


def test_place_order_items_failure(api, catalog):
    _fill_cart(api)
    catalog.fail("order_items", "insert")
    response = api.post(
        "/api/checkout/orders",
        json={"pickup_location_id": "loc-third", "time_slot_id": "slot-11"},
    )
    assert response.status_code == 502
    detail = response.json()["detail"]
    assert detail["code"] == "items_failed"
    assert detail["rolled_back"] is True
    assert catalog.tables["orders"] == []
    assert api.get("/api/cart").json()["item_count"] == 3


def test_student_routes_reject_vendors(api):
    api.login_as(VENDOR)
    assert api.get("/api/cart").status_code == 403
    assert api.get("/api/checkout/pickup-locations").status_code == 403


def test_vendor_moves_order_along(api, catalog):
    catalog.seed("orders", {"id": "order-1", "vendor_id": "vendor-1", "status": "scheduled", "subtotal": 15000})
    api.login_as(VENDOR)
    response = api.post("/api/vendor/orders/order-1/advance")
    assert response.status_code == 200
    assert response.json() == {"id": "order-1", "status": "confirmed", "status_label": "Confirmed"}

    response = api.post("/api/vendor/orders/order-1/status", json={"status": "missed"})
    assert response.json()["status"] == "missed"
    assert api.post("/api/vendor/orders/order-1/advance").status_code == 409


def test_vendor_cannot_touch_other_vendors_orders(api, catalog):
    catalog.seed("orders", {"id": "order-2", "vendor_id": "vendor-2", "status": "scheduled"})
    api.login_as(VENDOR)
    assert api.post("/api/vendor/orders/order-2/advance").status_code == 404


def test_vendor_history_and_export(api, catalog, clock):
    catalog.seed(
        "orders",
        {"id": "order-1", "vendor_id": "vendor-1", "status": "completed", "subtotal": 15000,
         "total": 17500, "created_at": clock.now().isoformat()},
        {"id": "order-2", "vendor_id": "vendor-1", "status": "cancelled", "subtotal": 9000,
         "total": 11500, "created_at": clock.now().isoformat()},
    )
    api.login_as(VENDOR)
    body = api.get("/api/vendor/orders/history", params={"status_filter": "completed"}).json()
    assert body["summary"] == {"count": 1, "revenue": 17500, "completed": 1}

    earnings = api.get("/api/vendor/earnings").json()
    assert earnings["total_revenue"] == 15000
    assert earnings["total_orders"] == 1

    export = api.get("/api/vendor/orders/history/export")
    assert export.status_code == 200
    assert export.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert export.content[:2] == b"PK"


def test_vendor_menu_management(api, catalog):
    api.login_as(VENDOR)
    created = api.post("/api/vendor/menu", json={"name": " Soto ", "price": 12000})
    assert created.status_code == 201
    item_id = created.json()["id"]
    assert created.json()["name"] == "Soto"

    toggled = api.post(f"/api/vendor/menu/{item_id}/toggle").json()
    assert toggled["is_available"] is False
    assert api.patch("/api/vendor/menu/item-coffee", json={"price": 1000}).status_code == 404
    assert api.delete(f"/api/vendor/menu/{item_id}").status_code == 204


def test_admin_cannot_suspend_admin(api, catalog):
    catalog.seed("users", {"id": "u-admin", "auth_user_id": "auth-admin", "role": "admin", "status": "active"})
    api.login_as(ADMIN)
    response = api.post("/api/admin/users/u-admin/status", json={"status": "suspended"})
    assert response.status_code == 403


def test_admin_sweeper_status(api):
    api.login_as(ADMIN)
    response = api.get("/api/admin/orphan-sweeper/status")
    assert response.status_code == 200
    body = response.json()
    assert body["running"] is False


def test_admin_routes_reject_students(api):
    assert api.get("/api/admin/users").status_code == 403


def test_payment_methods_listing_and_rejection(api):
    items = api.get("/api/checkout/payment-methods").json()["items"]
    assert {item["id"]: item["available"] for item in items} == {
        "cash": True,
        "qris": True,
        "gopay": False,
        "ovo": False,
    }
    _fill_cart(api)
    response = api.post(
        "/api/checkout/orders",
        json={"pickup_location_id": "loc-third", "time_slot_id": "slot-11", "payment_method": "ovo"},
    )
    assert response.status_code == 422


def test_cors_preflight_is_logged_and_reported(api, caplog):
    with caplog.at_level(logging.INFO, logger="beegrub"):
        response = api.options(
            "/api/cart",
            headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "GET"},
        )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert "CORS preflight OPTIONS /api/cart origin=http://localhost:3000" in caplog.text

    assert api.get("/api/diag/cors").json() == {
        "allow_origins": ["http://localhost:3000"],
        "allow_credentials": True,
    }
