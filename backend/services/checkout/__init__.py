"""
Checkout rules split by responsibility: fees, pickup slots, the placement saga.
HTTP-facing callers go through services.checkout_service.
"""
