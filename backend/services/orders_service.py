import asyncio
import logging
from typing import Any, Dict, List

from constants import ORDER_STATUS_COMPLETED
from repositories.orders_repository import (
    fetch_order,
    fetch_student_orders,
    fetch_vendor_orders,
    update_order_status,
)
from schemas import OrderStatusResponse
from services.order_status import (
    TERMINAL_STATUSES,
    InvalidTransition,
    ensure_transition,
    next_status,
    status_label,
)

logger = logging.getLogger("beegrub")

ORDER_SCOPES = ("active", "completed", "all")


def _with_label(order: Dict[str, Any]) -> Dict[str, Any]:
    status = str(order.get("status") or "")
    return {**order, "status_label": status_label(status)}


def filter_by_scope(orders: List[Dict[str, Any]], scope: str) -> List[Dict[str, Any]]:
    if scope == "active":
        return [order for order in orders if order.get("status") not in TERMINAL_STATUSES]
    if scope == "completed":
        return [order for order in orders if order.get("status") == ORDER_STATUS_COMPLETED]
    return list(orders)


async def list_student_orders(client, student_id: str) -> List[Dict[str, Any]]:
    rows = await asyncio.to_thread(fetch_student_orders, client, student_id)
    return [_with_label(row) for row in rows]


async def get_student_order(client, student_id: str, order_id: str) -> Dict[str, Any]:
    order = await asyncio.to_thread(fetch_order, client, order_id)
    if not order or str(order.get("student_id")) != student_id:
        raise ValueError("Order not found")
    return _with_label(order)


async def list_vendor_orders(client, vendor_id: str, scope: str = "active") -> List[Dict[str, Any]]:
    rows = await asyncio.to_thread(fetch_vendor_orders, client, vendor_id)
    return [_with_label(row) for row in filter_by_scope(rows, scope)]


async def get_order(client, order_id: str) -> Dict[str, Any]:
    order = await asyncio.to_thread(fetch_order, client, order_id)
    if not order:
        raise ValueError("Order not found")
    return _with_label(order)


async def _load_vendor_order(client, vendor_id: str, order_id: str) -> Dict[str, Any]:
    order = await asyncio.to_thread(fetch_order, client, order_id)
    if not order or str(order.get("vendor_id")) != vendor_id:
        raise ValueError("Order not found")
    return order


async def _apply_status(client, clock, order: Dict[str, Any], target: str) -> OrderStatusResponse:
    current = str(order.get("status") or "")
    ensure_transition(current, target)
    updated = await asyncio.to_thread(
        update_order_status,
        client,
        str(order["id"]),
        status_value=target,
        updated_at=clock.now(),
    )
    if not updated:
        raise ValueError("Order not found")
    logger.info("Order %s moved %s -> %s", order.get("order_number") or order["id"], current, target)
    return OrderStatusResponse(id=str(order["id"]), status=target, status_label=status_label(target))


async def advance_order(client, clock, vendor_id: str, order_id: str) -> OrderStatusResponse:
    order = await _load_vendor_order(client, vendor_id, order_id)
    current = str(order.get("status") or "")
    target = next_status(current)
    if target is None:
        raise InvalidTransition(current, "next")
    return await _apply_status(client, clock, order, target)


async def set_order_status(
    client,
    clock,
    vendor_id: str,
    order_id: str,
    target: str,
) -> OrderStatusResponse:
    order = await _load_vendor_order(client, vendor_id, order_id)
    return await _apply_status(client, clock, order, target)

