ORDERS_TABLE = "orders"
ORDER_ITEMS_TABLE = "order_items"
PAYMENTS_TABLE = "payments"
PICKUP_LOCATIONS_TABLE = "pickup_locations"
TIME_SLOTS_TABLE = "time_slots"
VENDORS_TABLE = "vendors"
MENU_ITEMS_TABLE = "menu_items"
USERS_TABLE = "users"

# Service fee in IDR, driven by the pickup floor only.
BASE_SERVICE_FEE = 2500
SERVICE_FEE_PER_FLOOR = 200
MIN_FLOOR = 1
MAX_FLOOR = 9

MAX_LINE_QUANTITY = 10

MIN_LEAD_TIME_HOURS = 2
WEEKDAY_SLOT_STARTS = ("09:00", "11:00", "13:00", "15:00", "17:00")
SATURDAY_SLOT_STARTS = ("09:00", "11:00", "13:00")

ORDER_NUMBER_PREFIX = "BG"
ORDER_TYPE_PRE_ORDER = "pre_order"

ORDER_STATUS_SCHEDULED = "scheduled"
ORDER_STATUS_PENDING = "pending"
ORDER_STATUS_CONFIRMED = "confirmed"
ORDER_STATUS_PREPARING = "preparing"
ORDER_STATUS_READY = "ready"
ORDER_STATUS_COMPLETED = "completed"
ORDER_STATUS_CANCELLED = "cancelled"
ORDER_STATUS_MISSED = "missed"
ORDER_STATUS_LABELS = {
    ORDER_STATUS_SCHEDULED: "Scheduled",
    ORDER_STATUS_PENDING: "New order",
    ORDER_STATUS_CONFIRMED: "Confirmed",
    ORDER_STATUS_PREPARING: "Preparing",
    ORDER_STATUS_READY: "Ready for pickup",
    ORDER_STATUS_COMPLETED: "Completed",
    ORDER_STATUS_CANCELLED: "Cancelled",
    ORDER_STATUS_MISSED: "Missed pickup",
}

PAYMENT_STATUS_PENDING = "pending"
PAYMENT_STATUS_COMPLETED = "completed"
PAYMENT_METHOD_CASH = "cash"
PAYMENT_METHOD_QRIS = "qris"
AVAILABLE_PAYMENT_METHODS = (PAYMENT_METHOD_CASH, PAYMENT_METHOD_QRIS)
UNAVAILABLE_PAYMENT_METHODS = ("gopay", "ovo")
# QRIS runs in demo mode: the payment is recorded as already settled.
INSTANT_PAYMENT_METHODS = {PAYMENT_METHOD_QRIS}

VENDOR_STATUS_PENDING = "pending"
VENDOR_STATUS_APPROVED = "approved"
VENDOR_STATUS_REJECTED = "rejected"
VENDOR_STATUS_SUSPENDED = "suspended"

USER_STATUS_ACTIVE = "active"
USER_STATUS_SUSPENDED = "suspended"
USER_STATUS_INACTIVE = "inactive"
ROLE_STUDENT = "student"
ROLE_VENDOR = "vendor"
ROLE_ADMIN = "admin"
