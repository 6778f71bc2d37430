from .admin import router as admin_router
from .cart import router as cart_router
from .checkout import router as checkout_router
from .orders import router as orders_router
from .payments import router as payments_router
from .vendor_portal import router as vendor_portal_router
from .vendors import router as vendors_router

__all__ = [
    "admin_router",
    "cart_router",
    "checkout_router",
    "orders_router",
    "payments_router",
    "vendor_portal_router",
    "vendors_router",
]
