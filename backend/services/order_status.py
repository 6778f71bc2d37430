from typing import Optional

from constants import (
    ORDER_STATUS_CANCELLED,
    ORDER_STATUS_COMPLETED,
    ORDER_STATUS_CONFIRMED,
    ORDER_STATUS_LABELS,
    ORDER_STATUS_MISSED,
    ORDER_STATUS_PENDING,
    ORDER_STATUS_PREPARING,
    ORDER_STATUS_READY,
    ORDER_STATUS_SCHEDULED,
)

TERMINAL_STATUSES = frozenset(
    {ORDER_STATUS_COMPLETED, ORDER_STATUS_CANCELLED, ORDER_STATUS_MISSED}
)
FAILURE_STATUSES = frozenset({ORDER_STATUS_CANCELLED, ORDER_STATUS_MISSED})
VENDOR_FLOW = {
    ORDER_STATUS_SCHEDULED: ORDER_STATUS_CONFIRMED,
    ORDER_STATUS_PENDING: ORDER_STATUS_CONFIRMED,
    ORDER_STATUS_CONFIRMED: ORDER_STATUS_PREPARING,
    ORDER_STATUS_PREPARING: ORDER_STATUS_READY,
    ORDER_STATUS_READY: ORDER_STATUS_COMPLETED,
}


class InvalidTransition(ValueError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Order cannot move from {current} to {target}")
        self.current = current
        self.target = target


def status_label(status: str) -> str:
    return ORDER_STATUS_LABELS.get(status, status)


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def next_status(current: str) -> Optional[str]:
    return VENDOR_FLOW.get(current)


def can_transition(current: str, target: str) -> bool:
    if is_terminal(current):
        return False
    if target in FAILURE_STATUSES:
        return True
    return VENDOR_FLOW.get(current) == target


def ensure_transition(current: str, target: str) -> None:
    if not can_transition(current, target):
        raise InvalidTransition(current, target)
