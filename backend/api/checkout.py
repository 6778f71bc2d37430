from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from auth import require_student
from clock import get_clock
from constants import AVAILABLE_PAYMENT_METHODS, UNAVAILABLE_PAYMENT_METHODS
from schemas import (
    CheckoutQuoteResponse,
    CheckoutRequest,
    PaymentMethodListResponse,
    PaymentMethodOption,
    PickupDay,
    PickupLocationListResponse,
    PlacedOrderResponse,
    TimeSlotListResponse,
)
from services import checkout_service
from services.cart_store import CartStore, get_cart_store
from services.checkout.errors import ItemsFailed, OrderError
from supabase_client import get_supabase

router = APIRouter(prefix="/api/checkout", tags=["checkout"])


def _order_error_detail(exc: OrderError) -> Dict[str, Any]:
    detail: Dict[str, Any] = {"code": exc.code, "message": exc.message}
    if isinstance(exc, ItemsFailed):
        detail["order_id"] = exc.order_id
        detail["rolled_back"] = exc.rolled_back
    return detail


@router.get("/pickup-locations", response_model=PickupLocationListResponse)
async def read_pickup_locations(
    user: Dict[str, Any] = Depends(require_student),
    client=Depends(get_supabase),
) -> PickupLocationListResponse:
    _ = user
    items = await checkout_service.list_pickup_locations(client)
    return PickupLocationListResponse(items=items)


@router.get("/time-slots", response_model=TimeSlotListResponse)
async def read_time_slots(
    day: PickupDay = PickupDay.TODAY,
    user: Dict[str, Any] = Depends(require_student),
    client=Depends(get_supabase),
    clock=Depends(get_clock),
) -> TimeSlotListResponse:
    _ = user
    return await checkout_service.list_time_slots(client, clock, day)


@router.get("/quote", response_model=CheckoutQuoteResponse)
async def read_quote(
    pickup_location_id: Optional[str] = None,
    user: Dict[str, Any] = Depends(require_student),
    store: CartStore = Depends(get_cart_store),
    client=Depends(get_supabase),
) -> CheckoutQuoteResponse:
    return await checkout_service.quote(client, store, str(user["id"]), pickup_location_id)


@router.post("/orders", response_model=PlacedOrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: CheckoutRequest,
    user: Dict[str, Any] = Depends(require_student),
    store: CartStore = Depends(get_cart_store),
    client=Depends(get_supabase),
    clock=Depends(get_clock),
) -> PlacedOrderResponse:
    try:
        return await checkout_service.submit_order(client, clock, store, str(user["id"]), payload)
    except OrderError as exc:
        status_code = (
            status.HTTP_422_UNPROCESSABLE_ENTITY if exc.precondition else status.HTTP_502_BAD_GATEWAY
        )
        raise HTTPException(status_code=status_code, detail=_order_error_detail(exc)) from exc


@router.get("/payment-methods", response_model=PaymentMethodListResponse)
async def read_payment_methods() -> PaymentMethodListResponse:
    items = [PaymentMethodOption(id=method, available=True) for method in AVAILABLE_PAYMENT_METHODS]
    items += [PaymentMethodOption(id=method, available=False) for method in UNAVAILABLE_PAYMENT_METHODS]
    return PaymentMethodListResponse(items=items)
