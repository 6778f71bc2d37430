import asyncio
from typing import Any, Dict, List, Optional

from repositories.catalog_repository import (
    fetch_active_pickup_location,
    fetch_active_pickup_locations,
    fetch_active_time_slot,
    fetch_active_time_slots,
)
from schemas import (
    CheckoutQuoteResponse,
    CheckoutRequest,
    PickupDay,
    PickupLocation,
    PickupLocationOption,
    PlacedOrderResponse,
    TimeSlot,
    TimeSlotListResponse,
)
from services.cart_store import CartStore, cart_totals
from services.checkout.fees import calculate_service_fee
from services.checkout.placement import OrderDraft, PlacedOrder, place_order
from services.checkout.slots import available_slots, target_date_for


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _amount(value: Any) -> int:
    try:
        return int(float(value or 0))
    except (TypeError, ValueError):
        return 0


def to_pickup_location(row: Dict[str, Any]) -> PickupLocation:
    return PickupLocation(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        floor=int(row.get("floor") or 1),
        building=row.get("building"),
        description=row.get("description"),
    )


def to_time_slot(row: Dict[str, Any]) -> TimeSlot:
    return TimeSlot(
        id=str(row["id"]),
        label=str(row.get("label") or row.get("time_range") or ""),
        start_time=_optional_str(row.get("start_time")),
        end_time=_optional_str(row.get("end_time")),
    )


async def list_pickup_locations(client) -> List[PickupLocationOption]:
    rows = await asyncio.to_thread(fetch_active_pickup_locations, client)
    options = []
    for row in rows:
        location = to_pickup_location(row)
        options.append(
            PickupLocationOption(
                **location.model_dump(),
                service_fee=calculate_service_fee(location),
            )
        )
    return options


async def list_time_slots(client, clock, day: PickupDay) -> TimeSlotListResponse:
    rows = await asyncio.to_thread(fetch_active_time_slots, client)
    now = clock.now()
    slots = available_slots([to_time_slot(row) for row in rows], now, day)
    return TimeSlotListResponse(
        day=day,
        date=target_date_for(now, day).isoformat(),
        slots=slots,
    )


async def _load_location(client, location_id: Optional[str]) -> Optional[PickupLocation]:
    if not location_id:
        return None
    row = await asyncio.to_thread(fetch_active_pickup_location, client, location_id)
    return to_pickup_location(row) if row else None


async def _load_slot(client, slot_id: Optional[str]) -> Optional[TimeSlot]:
    if not slot_id:
        return None
    row = await asyncio.to_thread(fetch_active_time_slot, client, slot_id)
    return to_time_slot(row) if row else None


async def quote(
    client,
    store: CartStore,
    student_id: str,
    pickup_location_id: Optional[str],
) -> CheckoutQuoteResponse:
    subtotal = cart_totals(store.get(student_id)).subtotal
    location = await _load_location(client, pickup_location_id)
    service_fee = calculate_service_fee(location)
    return CheckoutQuoteResponse(
        subtotal=subtotal,
        service_fee=service_fee,
        total=subtotal + service_fee,
    )


def _format_placed(placed: PlacedOrder, payment_method: str) -> PlacedOrderResponse:
    order = placed.order
    payment = placed.payment or {}
    return PlacedOrderResponse(
        id=placed.id,
        order_number=placed.order_number,
        status=order.get("status"),
        subtotal=_amount(order.get("subtotal")),
        service_fee=_amount(order.get("service_fee")),
        total=_amount(order.get("total")),
        scheduled_pickup_time=order.get("scheduled_pickup_time"),
        time_slot=order.get("time_slot"),
        payment_method=payment_method,
        payment_status=payment.get("status"),
        items=placed.items,
    )


async def submit_order(
    client,
    clock,
    store: CartStore,
    student_id: str,
    payload: CheckoutRequest,
) -> PlacedOrderResponse:
    location = await _load_location(client, payload.pickup_location_id)
    slot = await _load_slot(client, payload.time_slot_id)
    draft = OrderDraft(
        student_id=student_id,
        cart=store.get(student_id),
        pickup_location=location,
        time_slot=slot,
        pickup_day=payload.pickup_day,
        special_instructions=payload.special_instructions,
        payment_method=payload.payment_method,
    )
    placed = await asyncio.to_thread(
        place_order,
        draft,
        client=client,
        clock=clock,
        cart_store=store,
    )
    return _format_placed(placed, payload.payment_method)
