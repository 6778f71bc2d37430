from typing import Optional

from constants import BASE_SERVICE_FEE, MAX_FLOOR, MIN_FLOOR, SERVICE_FEE_PER_FLOOR
from schemas import PickupLocation


def clamp_floor(floor: int) -> int:
    return max(MIN_FLOOR, min(MAX_FLOOR, int(floor)))


def calculate_service_fee(location: Optional[PickupLocation]) -> int:
    if location is None:
        return 0
    floor = clamp_floor(location.floor)
    return BASE_SERVICE_FEE + (floor - MIN_FLOOR) * SERVICE_FEE_PER_FLOOR
