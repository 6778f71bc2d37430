from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class PickupDay(str, Enum):
    TODAY = "today"
    TOMORROW = "tomorrow"


class PickupLocation(BaseModel):
    id: str
    name: str
    floor: int = Field(..., description="Building floor, drives the service fee")
    building: Optional[str] = None
    description: Optional[str] = None


class TimeSlot(BaseModel):
    id: str
    label: str = Field(..., description="Pickup window, e.g. 11:00-13:00")
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class PickupLocationOption(PickupLocation):
    service_fee: int


class TimeSlotListResponse(BaseModel):
    day: PickupDay
    date: str
    slots: List[TimeSlot]


class PickupLocationListResponse(BaseModel):
    items: List[PickupLocationOption]


class CartLineResponse(BaseModel):
    menu_item_id: str
    name: str
    unit_price: int
    quantity: int
    total_price: int


class CartResponse(BaseModel):
    vendor_id: Optional[str]
    vendor_name: Optional[str]
    items: List[CartLineResponse]
    item_count: int
    subtotal: int


class CartAddRequest(BaseModel):
    menu_item_id: str


class CartQuantityRequest(BaseModel):
    quantity: int = Field(..., description="Zero or less removes the line")


class PaymentMethodOption(BaseModel):
    id: str
    available: bool


class PaymentMethodListResponse(BaseModel):
    items: List[PaymentMethodOption]


class CheckoutQuoteResponse(BaseModel):
    subtotal: int
    service_fee: int
    total: int


class CheckoutRequest(BaseModel):
    pickup_location_id: Optional[str] = None
    time_slot_id: Optional[str] = None
    pickup_day: PickupDay = PickupDay.TODAY
    special_instructions: Optional[str] = Field(default=None, max_length=500)
    payment_method: Literal["cash", "qris"] = "cash"


class PlacedOrderResponse(BaseModel):
    id: str
    order_number: str
    status: str
    subtotal: int
    service_fee: int
    total: int
    scheduled_pickup_time: Optional[datetime]
    time_slot: Optional[str]
    payment_method: str
    payment_status: Optional[str]
    items: List[Dict[str, Any]]


class OrderListResponse(BaseModel):
    items: List[Dict[str, Any]]


class OrderStatusRequest(BaseModel):
    status: Literal["cancelled", "missed"]


class OrderStatusResponse(BaseModel):
    id: str
    status: str
    status_label: str


class OrderHistorySummary(BaseModel):
    count: int
    revenue: int
    completed: int


class OrderHistoryResponse(BaseModel):
    summary: OrderHistorySummary
    items: List[Dict[str, Any]]


class EarningsResponse(BaseModel):
    total_revenue: int
    total_orders: int
    average_order_value: float


class VendorListResponse(BaseModel):
    items: List[Dict[str, Any]]


class MenuItemCreate(BaseModel):
    name: str = Field(..., min_length=1)
    price: int = Field(..., gt=0, description="Price in IDR")
    description: Optional[str] = None
    is_available: bool = True


class MenuItemUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    price: Optional[int] = Field(default=None, gt=0)
    description: Optional[str] = None
    is_available: Optional[bool] = None


class MenuItemListResponse(BaseModel):
    items: List[Dict[str, Any]]


class UserListResponse(BaseModel):
    items: List[Dict[str, Any]]


class UserStatusRequest(BaseModel):
    status: Literal["active", "suspended", "inactive"]


class QrisPaymentRequest(BaseModel):
    order_id: str


class QrisPaymentResponse(BaseModel):
    order_id: str
    gateway: Dict[str, Any]


class OrphanSweepStatusResponse(BaseModel):
    running: bool
    interval_seconds: int
    last_run_at: Optional[datetime]
    last_success_at: Optional[datetime]
    last_error: Optional[str]
    last_swept: List[str] = []
