from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from auth import get_app_user
from schemas import MenuItemListResponse, VendorListResponse
from services import catalog_service
from supabase_client import get_supabase

router = APIRouter(prefix="/api/vendors", tags=["vendors"])


@router.get("", response_model=VendorListResponse)
async def read_vendors(
    user: Dict[str, Any] = Depends(get_app_user),
    client=Depends(get_supabase),
) -> VendorListResponse:
    _ = user
    items = await catalog_service.list_vendors(client)
    return VendorListResponse(items=items)


@router.get("/{vendor_id}")
async def read_vendor(
    vendor_id: str,
    user: Dict[str, Any] = Depends(get_app_user),
    client=Depends(get_supabase),
) -> Dict[str, Any]:
    _ = user
    try:
        return await catalog_service.get_approved_vendor(client, vendor_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/{vendor_id}/menu", response_model=MenuItemListResponse)
async def read_vendor_menu(
    vendor_id: str,
    user: Dict[str, Any] = Depends(get_app_user),
    client=Depends(get_supabase),
) -> MenuItemListResponse:
    _ = user
    try:
        items = await catalog_service.list_available_menu(client, vendor_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return MenuItemListResponse(items=items)
