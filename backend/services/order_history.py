from datetime import date, datetime, time, timedelta, timezone
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill

from constants import ORDER_STATUS_COMPLETED
from schemas import EarningsResponse, OrderHistorySummary
from services.order_status import FAILURE_STATUSES, status_label

STATUS_FILTERS = ("all", "completed", "cancelled", "missed")
DATE_FILTERS = ("all", "today", "week", "month", "custom")
WEEK_DAYS = 7
MONTH_DAYS = 30

HISTORY_COLUMNS = [
    "Order No.",
    "Created At",
    "Student",
    "Status",
    "Pickup Time",
    "Pickup Location",
    "Items",
    "Subtotal",
    "Service Fee",
    "Total",
]
STATUS_FILLS = {
    "completed": PatternFill(start_color="E2EFDA", end_color="E2EFDA", fill_type="solid"),
    "cancelled": PatternFill(start_color="FCE4D6", end_color="FCE4D6", fill_type="solid"),
    "missed": PatternFill(start_color="FFF2CC", end_color="FFF2CC", fill_type="solid"),
}


def parse_created_at(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _amount(value: Any) -> int:
    try:
        return int(float(value or 0))
    except (TypeError, ValueError):
        return 0


def _student_name(order: Dict[str, Any]) -> str:
    student = order.get("student") or order.get("students") or {}
    if isinstance(student, dict):
        return str(student.get("full_name") or "")
    return ""


def _display_number(order: Dict[str, Any]) -> str:
    return str(order.get("order_number") or str(order.get("id") or "")[:8])


def _day_bounds(start: date, end: date, tzinfo) -> tuple[datetime, datetime]:
    return (
        datetime.combine(start, time.min, tzinfo=tzinfo),
        datetime.combine(end + timedelta(days=1), time.min, tzinfo=tzinfo),
    )


def _matches_date(
    created: Optional[datetime],
    date_filter: str,
    now: datetime,
    start: Optional[date],
    end: Optional[date],
) -> bool:
    if date_filter == "all":
        return True
    if created is None:
        return False
    local = created.astimezone(now.tzinfo) if now.tzinfo else created.replace(tzinfo=None)
    if date_filter == "today":
        return local.date() == now.date()
    if date_filter == "week":
        return local >= now - timedelta(days=WEEK_DAYS)
    if date_filter == "month":
        return local >= now - timedelta(days=MONTH_DAYS)
    if date_filter == "custom":
        lower, upper = _day_bounds(start or now.date(), end or now.date(), now.tzinfo)
        if not now.tzinfo:
            lower, upper = lower.replace(tzinfo=None), upper.replace(tzinfo=None)
        return lower <= local < upper
    return True


def filter_history(
    orders: Iterable[Dict[str, Any]],
    *,
    now: datetime,
    status: str = "all",
    date_filter: str = "all",
    start: Optional[date] = None,
    end: Optional[date] = None,
    search: str = "",
) -> List[Dict[str, Any]]:
    query = (search or "").strip().lower()
    result = []
    for order in orders:
        if status != "all" and order.get("status") != status:
            continue
        created = parse_created_at(order.get("created_at"))
        if not _matches_date(created, date_filter, now, start, end):
            continue
        if query:
            haystack = (_student_name(order).lower(), _display_number(order).lower())
            if not any(query in text for text in haystack):
                continue
        result.append(order)
    return result


def summarize_history(orders: List[Dict[str, Any]]) -> OrderHistorySummary:
    return OrderHistorySummary(
        count=len(orders),
        revenue=sum(_amount(order.get("total")) for order in orders),
        completed=sum(1 for order in orders if order.get("status") == ORDER_STATUS_COMPLETED),
    )


def earnings_in_range(
    orders: Iterable[Dict[str, Any]],
    *,
    start: date,
    end: date,
    tzinfo=None,
) -> EarningsResponse:
    lower, upper = _day_bounds(start, end, tzinfo or timezone.utc)
    counted = []
    for order in orders:
        if order.get("status") in FAILURE_STATUSES:
            continue
        created = parse_created_at(order.get("created_at"))
        if created is None or not lower <= created < upper:
            continue
        counted.append(order)
    # Vendors earn the menu subtotal; the service fee belongs to the platform.
    revenue = sum(_amount(order.get("subtotal")) for order in counted)
    return EarningsResponse(
        total_revenue=revenue,
        total_orders=len(counted),
        average_order_value=revenue / len(counted) if counted else 0.0,
    )


def _format_items(order: Dict[str, Any]) -> str:
    parts = []
    for item in order.get("order_items") or []:
        menu_item = item.get("menu_item") or item.get("menu_items") or {}
        name = menu_item.get("name") if isinstance(menu_item, dict) else None
        parts.append(f"{item.get('quantity') or 0}x {name or 'Item'}")
    return ", ".join(parts)


def _format_created(value: Any) -> str:
    created = parse_created_at(value)
    if created is None:
        return ""
    return created.strftime("%Y-%m-%d %H:%M")


def _history_row(order: Dict[str, Any]) -> List[Any]:
    location = order.get("pickup_location") or {}
    return [
        _display_number(order),
        _format_created(order.get("created_at")),
        _student_name(order),
        status_label(str(order.get("status") or "")),
        order.get("time_slot") or "",
        location.get("name") if isinstance(location, dict) else "",
        _format_items(order),
        _amount(order.get("subtotal")),
        _amount(order.get("service_fee")),
        _amount(order.get("total")),
    ]


def build_history_workbook(orders: List[Dict[str, Any]], title: str = "Order History") -> Workbook:
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]
    ws.append(HISTORY_COLUMNS)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for order in orders:
        ws.append(_history_row(order))
        fill = STATUS_FILLS.get(str(order.get("status") or ""))
        if fill:
            for cell in ws[ws.max_row]:
                cell.fill = fill
    return wb


def history_workbook_bytes(orders: List[Dict[str, Any]]) -> bytes:
    buffer = BytesIO()
    build_history_workbook(orders).save(buffer)
    return buffer.getvalue()


def save_history_workbook(orders: List[Dict[str, Any]], output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    build_history_workbook(orders).save(output_path)
    return output_path
