import re
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Tuple

from constants import MIN_LEAD_TIME_HOURS, SATURDAY_SLOT_STARTS, WEEKDAY_SLOT_STARTS
from schemas import PickupDay, TimeSlot

# datetime.weekday(): Monday is 0, Sunday is 6.
SATURDAY = 5
SUNDAY = 6

_HHMM = re.compile(r"^\s*(\d{1,2}):(\d{2})")


def target_date_for(reference_now: datetime, pickup_day: PickupDay) -> date:
    target = reference_now.date()
    if pickup_day == PickupDay.TOMORROW:
        target += timedelta(days=1)
    return target


def is_business_day(target: date) -> bool:
    return target.weekday() != SUNDAY


def eligible_start_labels(target: date) -> Tuple[str, ...]:
    weekday = target.weekday()
    if weekday == SUNDAY:
        return ()
    if weekday == SATURDAY:
        return SATURDAY_SLOT_STARTS
    return WEEKDAY_SLOT_STARTS


def parse_slot_start(slot: TimeSlot) -> Optional[time]:
    """Start of the pickup window; `start_time` wins over the label."""
    for raw in (slot.start_time, (slot.label or "").split("-", 1)[0]):
        if not raw:
            continue
        match = _HHMM.match(raw)
        if not match:
            continue
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour > 23 or minute > 59:
            continue
        return time(hour, minute)
    return None


def slot_start_label(slot: TimeSlot) -> Optional[str]:
    start = parse_slot_start(slot)
    if start is None:
        return None
    return start.strftime("%H:%M")


def pickup_datetime(target: date, slot: TimeSlot, tzinfo=None) -> Optional[datetime]:
    start = parse_slot_start(slot)
    if start is None:
        return None
    return datetime.combine(target, start, tzinfo=tzinfo)


def lead_time_hours(reference_now: datetime, pickup_at: datetime) -> float:
    return (pickup_at - reference_now).total_seconds() / 3600


def available_slots(
    all_slots: Iterable[TimeSlot],
    reference_now: datetime,
    pickup_day: PickupDay,
) -> List[TimeSlot]:
    target = target_date_for(reference_now, pickup_day)
    eligible = eligible_start_labels(target)
    if not eligible:
        return []

    result: List[TimeSlot] = []
    for slot in all_slots:
        if slot_start_label(slot) not in eligible:
            continue
        pickup_at = pickup_datetime(target, slot, reference_now.tzinfo)
        if lead_time_hours(reference_now, pickup_at) >= MIN_LEAD_TIME_HOURS:
            result.append(slot)
    return result
