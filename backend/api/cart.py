from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from auth import require_student
from schemas import CartAddRequest, CartQuantityRequest, CartResponse
from services.cart_service import add_to_cart, change_quantity, drop_item, format_cart
from services.cart_store import CartStore, get_cart_store
from supabase_client import get_supabase

router = APIRouter(prefix="/api/cart", tags=["cart"])


@router.get("", response_model=CartResponse)
async def read_cart(
    user: Dict[str, Any] = Depends(require_student),
    store: CartStore = Depends(get_cart_store),
) -> CartResponse:
    return format_cart(store.get(str(user["id"])))


@router.post("/items", response_model=CartResponse)
async def add_cart_item(
    payload: CartAddRequest,
    user: Dict[str, Any] = Depends(require_student),
    store: CartStore = Depends(get_cart_store),
    client=Depends(get_supabase),
) -> CartResponse:
    try:
        return await add_to_cart(client, store, str(user["id"]), payload.menu_item_id)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc


@router.patch("/items/{menu_item_id}", response_model=CartResponse)
async def update_cart_item(
    menu_item_id: str,
    payload: CartQuantityRequest,
    user: Dict[str, Any] = Depends(require_student),
    store: CartStore = Depends(get_cart_store),
) -> CartResponse:
    try:
        return change_quantity(store, str(user["id"]), menu_item_id, payload.quantity)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc


@router.delete("/items/{menu_item_id}", response_model=CartResponse)
async def remove_cart_item(
    menu_item_id: str,
    user: Dict[str, Any] = Depends(require_student),
    store: CartStore = Depends(get_cart_store),
) -> CartResponse:
    return drop_item(store, str(user["id"]), menu_item_id)


@router.delete("", response_model=CartResponse)
async def clear_cart(
    user: Dict[str, Any] = Depends(require_student),
    store: CartStore = Depends(get_cart_store),
) -> CartResponse:
    return format_cart(store.clear(str(user["id"])))
