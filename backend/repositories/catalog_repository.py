from typing import Any, Dict, List, Optional

from constants import (
    MENU_ITEMS_TABLE,
    PICKUP_LOCATIONS_TABLE,
    TIME_SLOTS_TABLE,
    VENDOR_STATUS_APPROVED,
    VENDORS_TABLE,
)


def _first(response) -> Optional[Dict[str, Any]]:
    items = response.data or []
    return items[0] if items else None


def fetch_active_pickup_locations(client) -> List[Dict[str, Any]]:
    response = (
        client.table(PICKUP_LOCATIONS_TABLE)
        .select("*")
        .eq("is_active", True)
        .order("floor")
        .execute()
    )
    return response.data or []


def fetch_active_pickup_location(client, location_id: str) -> Optional[Dict[str, Any]]:
    response = (
        client.table(PICKUP_LOCATIONS_TABLE)
        .select("*")
        .eq("id", location_id)
        .eq("is_active", True)
        .limit(1)
        .execute()
    )
    return _first(response)


def fetch_active_time_slots(client) -> List[Dict[str, Any]]:
    response = (
        client.table(TIME_SLOTS_TABLE)
        .select("*")
        .eq("is_active", True)
        .order("start_time")
        .execute()
    )
    return response.data or []


def fetch_active_time_slot(client, slot_id: str) -> Optional[Dict[str, Any]]:
    response = (
        client.table(TIME_SLOTS_TABLE)
        .select("*")
        .eq("id", slot_id)
        .eq("is_active", True)
        .limit(1)
        .execute()
    )
    return _first(response)


def fetch_approved_vendors(client) -> List[Dict[str, Any]]:
    response = (
        client.table(VENDORS_TABLE)
        .select("*")
        .eq("status", VENDOR_STATUS_APPROVED)
        .execute()
    )
    return response.data or []


def fetch_vendor(client, vendor_id: str) -> Optional[Dict[str, Any]]:
    response = client.table(VENDORS_TABLE).select("*").eq("id", vendor_id).limit(1).execute()
    return _first(response)


def fetch_menu_items(client, vendor_id: str, *, available_only: bool) -> List[Dict[str, Any]]:
    query = client.table(MENU_ITEMS_TABLE).select("*").eq("vendor_id", vendor_id)
    if available_only:
        query = query.eq("is_available", True)
    else:
        query = query.order("created_at", desc=True)
    return query.execute().data or []


def fetch_menu_item(client, item_id: str) -> Optional[Dict[str, Any]]:
    response = client.table(MENU_ITEMS_TABLE).select("*").eq("id", item_id).limit(1).execute()
    return _first(response)


def insert_menu_item(client, record: Dict[str, Any]) -> Dict[str, Any]:
    response = client.table(MENU_ITEMS_TABLE).insert(record).execute()
    if not response.data:
        raise RuntimeError("Failed to create menu item")
    return response.data[0]


def update_menu_item(client, item_id: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    response = client.table(MENU_ITEMS_TABLE).update(payload).eq("id", item_id).execute()
    return _first(response)


def delete_menu_item(client, item_id: str) -> bool:
    response = client.table(MENU_ITEMS_TABLE).delete().eq("id", item_id).execute()
    return bool(response.data)
