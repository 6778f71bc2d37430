import asyncio
import logging
from typing import Any, Dict, List, Optional

from constants import (
    ROLE_ADMIN,
    ROLE_VENDOR,
    USER_STATUS_INACTIVE,
    USER_STATUS_SUSPENDED,
    VENDOR_STATUS_APPROVED,
    VENDOR_STATUS_REJECTED,
    VENDOR_STATUS_SUSPENDED,
)
from repositories.catalog_repository import fetch_vendor
from repositories.users_repository import (
    fetch_user,
    fetch_users,
    fetch_vendors,
    insert_vendor,
    update_user_status as repo_update_user_status,
    update_vendor,
)

logger = logging.getLogger("beegrub")


class ProtectedAccountError(PermissionError):
    pass


async def list_vendors(client, status: Optional[str] = None) -> List[Dict[str, Any]]:
    return await asyncio.to_thread(fetch_vendors, client, status)


async def list_users(client, role: Optional[str] = None) -> List[Dict[str, Any]]:
    return await asyncio.to_thread(fetch_users, client, role)


def _vendor_from_metadata(vendor_id: str, metadata: Dict[str, Any], approved_at: str) -> Dict[str, Any]:
    return {
        "id": vendor_id,
        "business_name": metadata.get("canteenName") or "New Vendor",
        "location": metadata.get("canteenLocation") or "TBD",
        "contact_phone": metadata.get("phone") or "",
        "status": VENDOR_STATUS_APPROVED,
        "approved_at": approved_at,
    }


def _fetch_auth_metadata(client, auth_user_id: str) -> Dict[str, Any]:
    response = client.auth.admin.get_user_by_id(auth_user_id)
    user = getattr(response, "user", None)
    if user is None:
        raise ValueError("Auth user not found")
    return dict(getattr(user, "user_metadata", None) or {})


async def approve_vendor(client, clock, vendor_id: str) -> Dict[str, Any]:
    approved_at = clock.now().isoformat()
    existing = await asyncio.to_thread(fetch_vendor, client, vendor_id)
    if existing:
        rows = await asyncio.to_thread(
            update_vendor,
            client,
            vendor_id,
            {"status": VENDOR_STATUS_APPROVED, "approved_at": approved_at},
        )
        logger.info("Vendor %s approved", vendor_id)
        return rows[0] if rows else {**existing, "status": VENDOR_STATUS_APPROVED}

    # Vendors who signed up but never got a row: build it from signup metadata.
    user = await asyncio.to_thread(fetch_user, client, vendor_id)
    if not user or not user.get("auth_user_id"):
        raise ValueError("User not found")
    metadata = await asyncio.to_thread(_fetch_auth_metadata, client, str(user["auth_user_id"]))
    row = await asyncio.to_thread(
        insert_vendor,
        client,
        _vendor_from_metadata(vendor_id, metadata, approved_at),
    )
    logger.info("Vendor %s created from signup metadata and approved", vendor_id)
    return row


async def _set_vendor_status(client, clock, vendor_id: str, status_value: str) -> Dict[str, Any]:
    rows = await asyncio.to_thread(
        update_vendor,
        client,
        vendor_id,
        {"status": status_value, "updated_at": clock.now().isoformat()},
    )
    if not rows:
        raise ValueError("Vendor not found")
    logger.info("Vendor %s set to %s", vendor_id, status_value)
    return rows[0]


async def reject_vendor(client, clock, vendor_id: str) -> Dict[str, Any]:
    return await _set_vendor_status(client, clock, vendor_id, VENDOR_STATUS_REJECTED)


async def suspend_vendor(client, clock, vendor_id: str) -> Dict[str, Any]:
    return await _set_vendor_status(client, clock, vendor_id, VENDOR_STATUS_SUSPENDED)


async def _load_modifiable_user(client, user_id: str) -> Dict[str, Any]:
    user = await asyncio.to_thread(fetch_user, client, user_id)
    if not user:
        raise ValueError("User not found")
    if user.get("role") == ROLE_ADMIN:
        raise ProtectedAccountError("Admin accounts cannot be modified by this action.")
    return user


async def _apply_user_status(
    client,
    clock,
    user: Dict[str, Any],
    status_value: str,
    vendor_status: str,
) -> Dict[str, Any]:
    now = clock.now()
    rows = await asyncio.to_thread(
        repo_update_user_status,
        client,
        str(user["id"]),
        status_value=status_value,
        updated_at=now,
    )
    if not rows:
        raise ValueError("User not found")
    if user.get("role") == ROLE_VENDOR:
        await asyncio.to_thread(
            update_vendor,
            client,
            str(user["id"]),
            {"status": vendor_status, "updated_at": now.isoformat()},
        )
    logger.info("User %s set to %s", user["id"], status_value)
    return rows[0]


async def update_user_status(client, clock, user_id: str, status_value: str) -> Dict[str, Any]:
    user = await _load_modifiable_user(client, user_id)
    vendor_status = (
        VENDOR_STATUS_SUSPENDED if status_value == USER_STATUS_SUSPENDED else VENDOR_STATUS_APPROVED
    )
    return await _apply_user_status(client, clock, user, status_value, vendor_status)


async def delete_user(client, clock, user_id: str) -> Dict[str, Any]:
    user = await _load_modifiable_user(client, user_id)
    return await _apply_user_status(
        client,
        clock,
        user,
        USER_STATUS_INACTIVE,
        VENDOR_STATUS_SUSPENDED,
    )
