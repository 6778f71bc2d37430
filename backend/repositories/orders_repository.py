from datetime import datetime
from typing import Any, Dict, List, Optional

from constants import ORDER_ITEMS_TABLE, ORDERS_TABLE, PAYMENT_STATUS_COMPLETED, PAYMENTS_TABLE


def insert_order(client, record: Dict[str, Any]) -> Dict[str, Any]:
    response = client.table(ORDERS_TABLE).insert(record).execute()
    if not response.data:
        raise RuntimeError("Failed to create order")
    return response.data[0]


def insert_order_items(client, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    response = client.table(ORDER_ITEMS_TABLE).insert(records).execute()
    if not response.data:
        raise RuntimeError("Failed to create order items")
    return response.data


def insert_payment(client, record: Dict[str, Any]) -> Dict[str, Any]:
    response = client.table(PAYMENTS_TABLE).insert(record).execute()
    if not response.data:
        raise RuntimeError("Failed to create payment")
    return response.data[0]


def delete_order(client, order_id: str) -> bool:
    response = client.table(ORDERS_TABLE).delete().eq("id", order_id).execute()
    return bool(response.data)


def fetch_order(client, order_id: str) -> Optional[Dict[str, Any]]:
    response = (
        client.table(ORDERS_TABLE)
        .select(
            "*, "
            "vendor:vendors(business_name, location, contact_phone), "
            "student:students(full_name, phone), "
            "pickup_location:pickup_locations(name, building, description), "
            "order_items(*, menu_item:menu_items(name, price)), "
            "payments(*)"
        )
        .eq("id", order_id)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def fetch_student_orders(client, student_id: str) -> List[Dict[str, Any]]:
    response = (
        client.table(ORDERS_TABLE)
        .select(
            "*, "
            "vendor:vendors(business_name, location), "
            "pickup_location:pickup_locations(name, building), "
            "order_items(*, menu_item:menu_items(name, price))"
        )
        .eq("student_id", student_id)
        .order("created_at", desc=True)
        .execute()
    )
    return response.data or []


def fetch_vendor_orders(client, vendor_id: str) -> List[Dict[str, Any]]:
    response = (
        client.table(ORDERS_TABLE)
        .select(
            "*, "
            "student:students(full_name, phone), "
            "pickup_location:pickup_locations(name, building), "
            "order_items(*, menu_item:menu_items(name, price))"
        )
        .eq("vendor_id", vendor_id)
        .order("created_at", desc=True)
        .execute()
    )
    return response.data or []


def update_order_status(
    client,
    order_id: str,
    *,
    status_value: str,
    updated_at: datetime,
) -> Optional[Dict[str, Any]]:
    response = (
        client.table(ORDERS_TABLE)
        .update({"status": status_value, "updated_at": updated_at.isoformat()})
        .eq("id", order_id)
        .execute()
    )
    data = response.data or []
    return data[0] if data else None


def fetch_stale_orders(client, *, status_value: str, created_before: datetime) -> List[Dict[str, Any]]:
    response = (
        client.table(ORDERS_TABLE)
        .select("id, order_number, created_at")
        .eq("status", status_value)
        .lt("created_at", created_before.isoformat())
        .execute()
    )
    return response.data or []


def order_has_items(client, order_id: str) -> bool:
    # One row per order keeps the answer exact under the server max-rows cap.
    response = (
        client.table(ORDER_ITEMS_TABLE)
        .select("order_id")
        .eq("order_id", order_id)
        .limit(1)
        .execute()
    )
    return bool(response.data)


def fetch_order_payment(client, order_id: str) -> Optional[Dict[str, Any]]:
    response = (
        client.table(PAYMENTS_TABLE)
        .select("*")
        .eq("order_id", order_id)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def mark_payment_completed(client, order_id: str, *, paid_at: datetime) -> Optional[Dict[str, Any]]:
    response = (
        client.table(PAYMENTS_TABLE)
        .update({"status": PAYMENT_STATUS_COMPLETED, "paid_at": paid_at.isoformat()})
        .eq("order_id", order_id)
        .execute()
    )
    data = response.data or []
    return data[0] if data else None
