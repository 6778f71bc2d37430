import asyncio
import logging
from typing import Any, Dict

import httpx

from config import settings
from constants import PAYMENT_METHOD_QRIS
from repositories.orders_repository import fetch_order, fetch_order_payment, mark_payment_completed

logger = logging.getLogger("beegrub")


class PaymentGatewayError(RuntimeError):
    pass


async def _post(path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    url = f"{settings.payments_api_base_url.rstrip('/')}{path}"
    try:
        async with httpx.AsyncClient(timeout=settings.payments_api_timeout_seconds) as client:
            response = await client.post(url, json=payload)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPStatusError as exc:
        raise PaymentGatewayError(
            f"Payment gateway returned {exc.response.status_code}: {exc.response.text}"
        ) from exc
    except httpx.HTTPError as exc:
        raise PaymentGatewayError(f"Payment gateway unreachable: {exc}") from exc


async def _load_student_order(client, student_id: str, order_id: str) -> Dict[str, Any]:
    order = await asyncio.to_thread(fetch_order, client, order_id)
    if not order or str(order.get("student_id")) != student_id:
        raise ValueError("Order not found")
    return order


async def create_qris_payment(
    client,
    student: Dict[str, Any],
    order_id: str,
) -> Dict[str, Any]:
    order = await _load_student_order(client, str(student["id"]), order_id)
    payload = {
        "orderId": order.get("order_number") or order_id,
        "amount": int(float(order.get("total") or 0)),
        "customer": {"email": student.get("email")},
    }
    data = await _post("/payments/qris", payload)
    logger.info("QRIS session created for order %s", payload["orderId"])
    return data


async def complete_qris_demo(
    client,
    clock,
    student: Dict[str, Any],
    order_id: str,
) -> Dict[str, Any]:
    order = await _load_student_order(client, str(student["id"]), order_id)
    payment = await asyncio.to_thread(fetch_order_payment, client, order_id)
    if payment and payment.get("payment_method") != PAYMENT_METHOD_QRIS:
        raise ValueError("Order is not paid with QRIS")
    data = await _post("/demo/payments/complete", {"orderId": order.get("order_number") or order_id})
    if payment:
        await asyncio.to_thread(mark_payment_completed, client, order_id, paid_at=clock.now())
    else:
        logger.warning("Order %s has no payment record to complete", order_id)
    return data
