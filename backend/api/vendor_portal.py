import asyncio
from datetime import date, timedelta
from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status

from auth import require_vendor
from clock import get_clock
from schemas import (
    EarningsResponse,
    MenuItemCreate,
    MenuItemListResponse,
    MenuItemUpdate,
    OrderHistoryResponse,
    OrderListResponse,
    OrderStatusRequest,
    OrderStatusResponse,
)
from services import catalog_service, orders_service
from services.order_history import (
    earnings_in_range,
    filter_history,
    history_workbook_bytes,
    summarize_history,
)
from services.order_status import InvalidTransition
from supabase_client import get_supabase

router = APIRouter(prefix="/api/vendor", tags=["vendor"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
EARNINGS_DEFAULT_DAYS = 6


def _not_found(exc: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("/menu", response_model=MenuItemListResponse)
async def read_menu(
    user: Dict[str, Any] = Depends(require_vendor),
    client=Depends(get_supabase),
) -> MenuItemListResponse:
    items = await catalog_service.list_vendor_menu(client, str(user["id"]))
    return MenuItemListResponse(items=items)


@router.post("/menu", status_code=status.HTTP_201_CREATED)
async def create_menu_item(
    payload: MenuItemCreate,
    user: Dict[str, Any] = Depends(require_vendor),
    client=Depends(get_supabase),
) -> Dict[str, Any]:
    try:
        return await catalog_service.create_menu_item(client, str(user["id"]), payload)
    except RuntimeError as exc:  # pragma: no cover - network/database error
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create menu item",
        ) from exc


@router.patch("/menu/{item_id}")
async def update_menu_item(
    item_id: str,
    payload: MenuItemUpdate,
    user: Dict[str, Any] = Depends(require_vendor),
    client=Depends(get_supabase),
) -> Dict[str, Any]:
    try:
        return await catalog_service.update_menu_item(client, str(user["id"]), item_id, payload)
    except ValueError as exc:
        raise _not_found(exc) from exc


@router.post("/menu/{item_id}/toggle")
async def toggle_menu_item(
    item_id: str,
    user: Dict[str, Any] = Depends(require_vendor),
    client=Depends(get_supabase),
) -> Dict[str, Any]:
    try:
        return await catalog_service.toggle_menu_item(client, str(user["id"]), item_id)
    except ValueError as exc:
        raise _not_found(exc) from exc


@router.delete("/menu/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_menu_item(
    item_id: str,
    user: Dict[str, Any] = Depends(require_vendor),
    client=Depends(get_supabase),
) -> Response:
    try:
        deleted = await catalog_service.delete_menu_item(client, str(user["id"]), item_id)
    except ValueError as exc:
        raise _not_found(exc) from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/orders", response_model=OrderListResponse)
async def read_orders(
    scope: Literal["active", "completed", "all"] = "active",
    user: Dict[str, Any] = Depends(require_vendor),
    client=Depends(get_supabase),
) -> OrderListResponse:
    items = await orders_service.list_vendor_orders(client, str(user["id"]), scope)
    return OrderListResponse(items=items)


@router.post("/orders/{order_id}/advance", response_model=OrderStatusResponse)
async def advance_order(
    order_id: str,
    user: Dict[str, Any] = Depends(require_vendor),
    client=Depends(get_supabase),
    clock=Depends(get_clock),
) -> OrderStatusResponse:
    try:
        return await orders_service.advance_order(client, clock, str(user["id"]), order_id)
    except InvalidTransition as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise _not_found(exc) from exc


@router.post("/orders/{order_id}/status", response_model=OrderStatusResponse)
async def change_order_status(
    order_id: str,
    payload: OrderStatusRequest,
    user: Dict[str, Any] = Depends(require_vendor),
    client=Depends(get_supabase),
    clock=Depends(get_clock),
) -> OrderStatusResponse:
    try:
        return await orders_service.set_order_status(
            client,
            clock,
            str(user["id"]),
            order_id,
            payload.status,
        )
    except InvalidTransition as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise _not_found(exc) from exc


async def _filtered_history(
    client,
    clock,
    vendor_id: str,
    status_filter: str,
    date_filter: str,
    start: Optional[date],
    end: Optional[date],
    search: str,
):
    orders = await orders_service.list_vendor_orders(client, vendor_id, "all")
    return filter_history(
        orders,
        now=clock.now(),
        status=status_filter,
        date_filter=date_filter,
        start=start,
        end=end,
        search=search,
    )


@router.get("/orders/history", response_model=OrderHistoryResponse)
async def read_history(
    status_filter: Literal["all", "completed", "cancelled", "missed"] = "all",
    date_filter: Literal["all", "today", "week", "month", "custom"] = "all",
    start: Optional[date] = None,
    end: Optional[date] = None,
    search: str = "",
    user: Dict[str, Any] = Depends(require_vendor),
    client=Depends(get_supabase),
    clock=Depends(get_clock),
) -> OrderHistoryResponse:
    orders = await _filtered_history(
        client, clock, str(user["id"]), status_filter, date_filter, start, end, search
    )
    return OrderHistoryResponse(summary=summarize_history(orders), items=orders)


@router.get("/orders/history/export")
async def export_history(
    status_filter: Literal["all", "completed", "cancelled", "missed"] = "all",
    date_filter: Literal["all", "today", "week", "month", "custom"] = "all",
    start: Optional[date] = None,
    end: Optional[date] = None,
    search: str = "",
    user: Dict[str, Any] = Depends(require_vendor),
    client=Depends(get_supabase),
    clock=Depends(get_clock),
) -> Response:
    orders = await _filtered_history(
        client, clock, str(user["id"]), status_filter, date_filter, start, end, search
    )
    content = await asyncio.to_thread(history_workbook_bytes, orders)
    filename = f"order_history_{clock.now():%Y%m%d}.xlsx"
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/earnings", response_model=EarningsResponse)
async def read_earnings(
    start: Optional[date] = None,
    end: Optional[date] = None,
    user: Dict[str, Any] = Depends(require_vendor),
    client=Depends(get_supabase),
    clock=Depends(get_clock),
) -> EarningsResponse:
    now = clock.now()
    end = end or now.date()
    start = start or end - timedelta(days=EARNINGS_DEFAULT_DAYS)
    if start > end:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start must not be after end",
        )
    orders = await orders_service.list_vendor_orders(client, str(user["id"]), "all")
    return earnings_in_range(orders, start=start, end=end, tzinfo=now.tzinfo)
