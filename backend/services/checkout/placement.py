import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from constants import (
    INSTANT_PAYMENT_METHODS,
    MIN_LEAD_TIME_HOURS,
    ORDER_NUMBER_PREFIX,
    ORDER_STATUS_SCHEDULED,
    ORDER_TYPE_PRE_ORDER,
    PAYMENT_METHOD_CASH,
    PAYMENT_STATUS_COMPLETED,
    PAYMENT_STATUS_PENDING,
)
from repositories.orders_repository import (
    delete_order,
    insert_order,
    insert_order_items,
    insert_payment,
)
from schemas import PickupDay, PickupLocation, TimeSlot
from services.cart_store import Cart, CartStore, cart_totals

from .errors import (
    CreateFailed,
    EmptyCart,
    InvalidTime,
    ItemsFailed,
    MissingSelection,
    SlotUnavailable,
    TooSoon,
    UnavailableDay,
)
from .fees import calculate_service_fee
from .saga import Saga, SagaStep
from .slots import (
    eligible_start_labels,
    is_business_day,
    lead_time_hours,
    pickup_datetime,
    slot_start_label,
    target_date_for,
)

logger = logging.getLogger("beegrub")

CREATE_ORDER = "create_order"
INSERT_ITEMS = "insert_items"
RECORD_PAYMENT = "record_payment"
# PostgreSQL unique_violation, as reported by PostgREST.
UNIQUE_VIOLATION = "23505"


@dataclass(frozen=True)
class OrderDraft:
    student_id: str
    cart: Cart
    pickup_location: Optional[PickupLocation] = None
    time_slot: Optional[TimeSlot] = None
    pickup_day: PickupDay = PickupDay.TODAY
    special_instructions: Optional[str] = None
    payment_method: str = PAYMENT_METHOD_CASH


@dataclass
class PlacedOrder:
    order: Dict[str, Any]
    items: List[Dict[str, Any]]
    payment: Optional[Dict[str, Any]]

    @property
    def id(self) -> str:
        return str(self.order["id"])

    @property
    def order_number(self) -> str:
        return str(self.order.get("order_number") or "")


def generate_order_number(now: datetime) -> str:
    # orders.order_number is unique in the database; a same-millisecond
    # collision fails the insert and surfaces as CreateFailed.
    return f"{ORDER_NUMBER_PREFIX}-{int(now.timestamp() * 1000)}"


def validate_draft(draft: OrderDraft, now: datetime) -> datetime:
    """Check every precondition and return the pickup datetime."""
    if draft.pickup_location is None or draft.time_slot is None:
        raise MissingSelection()
    if draft.cart.is_empty:
        raise EmptyCart()

    target = target_date_for(now, draft.pickup_day)
    if not is_business_day(target):
        raise UnavailableDay()

    pickup_at = pickup_datetime(target, draft.time_slot, now.tzinfo)
    if pickup_at is None:
        raise InvalidTime()
    if slot_start_label(draft.time_slot) not in eligible_start_labels(target):
        raise SlotUnavailable()
    if lead_time_hours(now, pickup_at) < MIN_LEAD_TIME_HOURS:
        raise TooSoon()
    return pickup_at


def build_order_record(draft: OrderDraft, pickup_at: datetime, now: datetime) -> Dict[str, Any]:
    subtotal = cart_totals(draft.cart).subtotal
    service_fee = calculate_service_fee(draft.pickup_location)
    return {
        "order_number": generate_order_number(now),
        "student_id": draft.student_id,
        "vendor_id": draft.cart.vendor_id,
        "pickup_location_id": draft.pickup_location.id,
        "time_slot_id": draft.time_slot.id,
        "order_type": ORDER_TYPE_PRE_ORDER,
        "subtotal": subtotal,
        "service_fee": service_fee,
        "total": subtotal + service_fee,
        "status": ORDER_STATUS_SCHEDULED,
        "scheduled_pickup_time": pickup_at.isoformat(),
        "time_slot": draft.time_slot.label,
        "special_instructions": (draft.special_instructions or "").strip() or None,
    }


def build_item_records(order_id: str, cart: Cart) -> List[Dict[str, Any]]:
    return [
        {
            "order_id": order_id,
            "menu_item_id": line.menu_item_id,
            "quantity": line.quantity,
            "unit_price": line.unit_price,
            "total_price": line.total_price,
        }
        for line in cart.lines
    ]


def build_payment_record(order_id: str, amount: int, method: str, now: datetime) -> Dict[str, Any]:
    instant = method in INSTANT_PAYMENT_METHODS
    return {
        "order_id": order_id,
        "amount": amount,
        "payment_method": method,
        "status": PAYMENT_STATUS_COMPLETED if instant else PAYMENT_STATUS_PENDING,
        "paid_at": now.isoformat() if instant else None,
    }


def _rollback_order(client, order_id: str) -> None:
    if not delete_order(client, order_id):
        raise RuntimeError(f"Order {order_id} was not deleted")


def _build_saga(client, clock, draft: OrderDraft, order_record: Dict[str, Any]) -> Saga:
    def order_id(ctx: Dict[str, Any]) -> str:
        return str(ctx[CREATE_ORDER]["id"])

    return Saga(
        "place-order",
        [
            SagaStep(
                CREATE_ORDER,
                lambda ctx: insert_order(client, order_record),
                compensation=lambda ctx: _rollback_order(client, order_id(ctx)),
            ),
            SagaStep(
                INSERT_ITEMS,
                lambda ctx: insert_order_items(client, build_item_records(order_id(ctx), draft.cart)),
            ),
            SagaStep(
                RECORD_PAYMENT,
                lambda ctx: insert_payment(
                    client,
                    build_payment_record(
                        order_id(ctx),
                        order_record["total"],
                        draft.payment_method,
                        clock.now(),
                    ),
                ),
                critical=False,
            ),
        ],
    )


def place_order(
    draft: OrderDraft,
    *,
    client,
    clock,
    cart_store: Optional[CartStore] = None,
) -> PlacedOrder:
    now = clock.now()
    pickup_at = validate_draft(draft, now)
    order_record = build_order_record(draft, pickup_at, now)

    result = _build_saga(client, clock, draft, order_record).run()
    if result.failed_step == CREATE_ORDER:
        if getattr(result.error, "code", None) == UNIQUE_VIOLATION:
            logger.warning("Order number %s already taken", order_record["order_number"])
        raise CreateFailed() from result.error
    if result.failed_step == INSERT_ITEMS:
        failed_order_id = str(result.context[CREATE_ORDER]["id"])
        rolled_back = CREATE_ORDER in result.compensated
        if not rolled_back:
            logger.error(
                "Order %s has no items and could not be deleted; left for the orphan sweeper",
                failed_order_id,
            )
        raise ItemsFailed(failed_order_id, rolled_back) from result.error

    if RECORD_PAYMENT in result.tolerated:
        logger.warning(
            "Order %s placed without a payment record",
            result.context[CREATE_ORDER].get("order_number"),
        )
    if cart_store is not None and not cart_store.clear_if(draft.student_id, draft.cart):
        logger.info(
            "Cart of student %s changed while order %s was placed; keeping it",
            draft.student_id,
            result.context[CREATE_ORDER].get("order_number"),
        )

    placed = PlacedOrder(
        order=result.context[CREATE_ORDER],
        items=result.context[INSERT_ITEMS],
        payment=result.context.get(RECORD_PAYMENT),
    )
    logger.info("Order %s placed for student %s", placed.order_number, draft.student_id)
    return placed
