import asyncio
import logging
from typing import Any, Dict, List

from constants import VENDOR_STATUS_APPROVED
from repositories.catalog_repository import (
    delete_menu_item as repo_delete_menu_item,
    fetch_approved_vendors,
    fetch_menu_item,
    fetch_menu_items,
    fetch_vendor,
    insert_menu_item,
    update_menu_item as repo_update_menu_item,
)
from schemas import MenuItemCreate, MenuItemUpdate

logger = logging.getLogger("beegrub")


async def list_vendors(client) -> List[Dict[str, Any]]:
    return await asyncio.to_thread(fetch_approved_vendors, client)


async def get_approved_vendor(client, vendor_id: str) -> Dict[str, Any]:
    vendor = await asyncio.to_thread(fetch_vendor, client, vendor_id)
    if not vendor or vendor.get("status") != VENDOR_STATUS_APPROVED:
        raise ValueError("Vendor not found")
    return vendor


async def list_available_menu(client, vendor_id: str) -> List[Dict[str, Any]]:
    await get_approved_vendor(client, vendor_id)
    return await asyncio.to_thread(fetch_menu_items, client, vendor_id, available_only=True)


async def get_orderable_item(client, item_id: str) -> Dict[str, Any]:
    """Menu item plus its vendor, provided both can take orders."""
    item = await asyncio.to_thread(fetch_menu_item, client, item_id)
    if not item or not item.get("is_available"):
        raise ValueError("Menu item not available")
    vendor = await get_approved_vendor(client, str(item.get("vendor_id")))
    return {"item": item, "vendor": vendor}


async def list_vendor_menu(client, vendor_id: str) -> List[Dict[str, Any]]:
    return await asyncio.to_thread(fetch_menu_items, client, vendor_id, available_only=False)


async def _owned_item(client, vendor_id: str, item_id: str) -> Dict[str, Any]:
    item = await asyncio.to_thread(fetch_menu_item, client, item_id)
    if not item or str(item.get("vendor_id")) != vendor_id:
        raise ValueError("Menu item not found")
    return item


async def create_menu_item(client, vendor_id: str, payload: MenuItemCreate) -> Dict[str, Any]:
    record = {
        "vendor_id": vendor_id,
        "name": payload.name.strip(),
        "price": payload.price,
        "description": payload.description,
        "is_available": payload.is_available,
    }
    row = await asyncio.to_thread(insert_menu_item, client, record)
    logger.info("Vendor %s added menu item %s", vendor_id, row.get("id"))
    return row


async def update_menu_item(
    client,
    vendor_id: str,
    item_id: str,
    payload: MenuItemUpdate,
) -> Dict[str, Any]:
    item = await _owned_item(client, vendor_id, item_id)
    changes = payload.model_dump(exclude_none=True)
    if "name" in changes:
        changes["name"] = changes["name"].strip()
    if not changes:
        return item
    row = await asyncio.to_thread(repo_update_menu_item, client, item_id, changes)
    if not row:
        raise ValueError("Menu item not found")
    return row


async def toggle_menu_item(client, vendor_id: str, item_id: str) -> Dict[str, Any]:
    item = await _owned_item(client, vendor_id, item_id)
    row = await asyncio.to_thread(
        repo_update_menu_item,
        client,
        item_id,
        {"is_available": not item.get("is_available")},
    )
    if not row:
        raise ValueError("Menu item not found")
    return row


async def delete_menu_item(client, vendor_id: str, item_id: str) -> bool:
    await _owned_item(client, vendor_id, item_id)
    return await asyncio.to_thread(repo_delete_menu_item, client, item_id)
