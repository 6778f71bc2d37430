from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from auth import require_student
from schemas import OrderListResponse
from services import orders_service
from supabase_client import get_supabase

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("", response_model=OrderListResponse)
async def read_my_orders(
    user: Dict[str, Any] = Depends(require_student),
    client=Depends(get_supabase),
) -> OrderListResponse:
    items = await orders_service.list_student_orders(client, str(user["id"]))
    return OrderListResponse(items=items)


@router.get("/{order_id}")
async def read_my_order(
    order_id: str,
    user: Dict[str, Any] = Depends(require_student),
    client=Depends(get_supabase),
) -> Dict[str, Any]:
    try:
        return await orders_service.get_student_order(client, str(user["id"]), order_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
