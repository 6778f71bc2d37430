from datetime import datetime
from typing import Any, Dict, List, Optional

from constants import USERS_TABLE, VENDORS_TABLE


def fetch_user_by_auth_id(client, auth_user_id: str) -> Optional[Dict[str, Any]]:
    response = (
        client.table(USERS_TABLE)
        .select("id, auth_user_id, email, role, status")
        .eq("auth_user_id", auth_user_id)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def fetch_user(client, user_id: str) -> Optional[Dict[str, Any]]:
    response = (
        client.table(USERS_TABLE)
        .select("id, auth_user_id, email, role, status")
        .eq("id", user_id)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def fetch_users(client, role: Optional[str] = None) -> List[Dict[str, Any]]:
    query = client.table(USERS_TABLE).select("*").order("created_at", desc=True)
    if role:
        query = query.eq("role", role)
    return query.execute().data or []


def update_user_status(
    client,
    user_id: str,
    *,
    status_value: str,
    updated_at: datetime,
) -> List[Dict[str, Any]]:
    response = (
        client.table(USERS_TABLE)
        .update({"status": status_value, "updated_at": updated_at.isoformat()})
        .eq("id", user_id)
        .execute()
    )
    return response.data or []


def fetch_vendors(client, status: Optional[str] = None) -> List[Dict[str, Any]]:
    query = (
        client.table(VENDORS_TABLE)
        .select("*, user:users(email, created_at)")
        .order("created_at", desc=True)
    )
    if status:
        query = query.eq("status", status)
    return query.execute().data or []


def insert_vendor(client, record: Dict[str, Any]) -> Dict[str, Any]:
    response = client.table(VENDORS_TABLE).insert(record).execute()
    if not response.data:
        raise RuntimeError("Failed to create vendor")
    return response.data[0]


def update_vendor(client, vendor_id: str, payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    response = client.table(VENDORS_TABLE).update(payload).eq("id", vendor_id).execute()
    return response.data or []
