from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from auth import require_admin
from clock import get_clock
from schemas import (
    OrphanSweepStatusResponse,
    UserListResponse,
    UserStatusRequest,
    VendorListResponse,
)
from services import admin_service, orders_service
from services.admin_service import ProtectedAccountError
from services.orphan_sweeper import OrphanOrderSweeper, get_orphan_sweeper
from supabase_client import get_supabase

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


def _translate(exc: Exception) -> HTTPException:
    if isinstance(exc, ProtectedAccountError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("/vendors", response_model=VendorListResponse)
async def read_vendors(
    status_filter: Optional[str] = None,
    client=Depends(get_supabase),
) -> VendorListResponse:
    items = await admin_service.list_vendors(client, status_filter)
    return VendorListResponse(items=items)


@router.post("/vendors/{vendor_id}/approve")
async def approve_vendor(
    vendor_id: str,
    client=Depends(get_supabase),
    clock=Depends(get_clock),
) -> Dict[str, Any]:
    try:
        return await admin_service.approve_vendor(client, clock, vendor_id)
    except ValueError as exc:
        raise _translate(exc) from exc


@router.post("/vendors/{vendor_id}/reject")
async def reject_vendor(
    vendor_id: str,
    client=Depends(get_supabase),
    clock=Depends(get_clock),
) -> Dict[str, Any]:
    try:
        return await admin_service.reject_vendor(client, clock, vendor_id)
    except ValueError as exc:
        raise _translate(exc) from exc


@router.post("/vendors/{vendor_id}/suspend")
async def suspend_vendor(
    vendor_id: str,
    client=Depends(get_supabase),
    clock=Depends(get_clock),
) -> Dict[str, Any]:
    try:
        return await admin_service.suspend_vendor(client, clock, vendor_id)
    except ValueError as exc:
        raise _translate(exc) from exc


@router.get("/users", response_model=UserListResponse)
async def read_users(
    role: Optional[str] = None,
    client=Depends(get_supabase),
) -> UserListResponse:
    items = await admin_service.list_users(client, role)
    return UserListResponse(items=items)


@router.post("/users/{user_id}/status")
async def update_user_status(
    user_id: str,
    payload: UserStatusRequest,
    client=Depends(get_supabase),
    clock=Depends(get_clock),
) -> Dict[str, Any]:
    try:
        return await admin_service.update_user_status(client, clock, user_id, payload.status)
    except (ValueError, ProtectedAccountError) as exc:
        raise _translate(exc) from exc


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    client=Depends(get_supabase),
    clock=Depends(get_clock),
) -> Dict[str, Any]:
    try:
        return await admin_service.delete_user(client, clock, user_id)
    except (ValueError, ProtectedAccountError) as exc:
        raise _translate(exc) from exc


@router.get("/orders/{order_id}")
async def read_order(
    order_id: str,
    client=Depends(get_supabase),
) -> Dict[str, Any]:
    try:
        return await orders_service.get_order(client, order_id)
    except ValueError as exc:
        raise _translate(exc) from exc


@router.get("/orphan-sweeper/status", response_model=OrphanSweepStatusResponse)
async def read_sweeper_status(
    sweeper: OrphanOrderSweeper = Depends(get_orphan_sweeper),
) -> OrphanSweepStatusResponse:
    return OrphanSweepStatusResponse(**sweeper.get_status())


@router.post("/orphan-sweeper/start", response_model=OrphanSweepStatusResponse)
async def start_sweeper(
    sweeper: OrphanOrderSweeper = Depends(get_orphan_sweeper),
) -> OrphanSweepStatusResponse:
    await sweeper.start()
    return OrphanSweepStatusResponse(**sweeper.get_status())


@router.post("/orphan-sweeper/stop", response_model=OrphanSweepStatusResponse)
async def stop_sweeper(
    sweeper: OrphanOrderSweeper = Depends(get_orphan_sweeper),
) -> OrphanSweepStatusResponse:
    await sweeper.stop()
    return OrphanSweepStatusResponse(**sweeper.get_status())


@router.post("/orphan-sweeper/run", response_model=List[str])
async def run_sweeper_once(
    sweeper: OrphanOrderSweeper = Depends(get_orphan_sweeper),
) -> List[str]:
    try:
        return await sweeper.run_once()
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
