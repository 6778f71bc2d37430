from typing import Optional


class OrderError(Exception):
    code = "order_error"
    default_message = "Order could not be placed"
    # Preconditions are the caller's to fix; the rest are upstream failures.
    precondition = True

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingSelection(OrderError):
    code = "missing_selection"
    default_message = "Please select pickup location and time"


class EmptyCart(OrderError):
    code = "empty_cart"
    default_message = "Your cart is empty"


class UnavailableDay(OrderError):
    code = "unavailable_day"
    default_message = "Orders are not accepted on Sundays"


class InvalidTime(OrderError):
    code = "invalid_time"
    default_message = "The selected pickup time could not be read"


class SlotUnavailable(OrderError):
    code = "slot_unavailable"
    default_message = "The selected pickup time is not offered on that day"


class TooSoon(OrderError):
    code = "too_soon"
    default_message = "Pickup time must be at least 2 hours from now"


class CreateFailed(OrderError):
    code = "create_failed"
    default_message = "Failed to create order. Please try again."
    precondition = False


class ItemsFailed(OrderError):
    code = "items_failed"
    default_message = "Failed to save order items. Please try again."
    precondition = False

    def __init__(self, order_id: str, rolled_back: bool, message: Optional[str] = None) -> None:
        super().__init__(message)
        self.order_id = order_id
        self.rolled_back = rolled_back
