import sys
from pathlib import Path
from pprint import pprint

from dotenv import load_dotenv

from clock import system_clock
from repositories.orders_repository import fetch_vendor_orders
from repositories.users_repository import fetch_vendors
from services.order_history import filter_history, save_history_workbook
from supabase_client import supabase

RESULTS_DIR = Path("exports")


def resolve_vendor_id(argument: str) -> str:
    if argument != "--first":
        return argument
    vendors = fetch_vendors(supabase, None)
    if not vendors:
        raise SystemExit("No vendors found in vendors table.")
    return str(vendors[0]["id"])


def export_history(vendor_id: str, status: str = "all", date_filter: str = "all") -> Path:
    orders = fetch_vendor_orders(supabase, vendor_id)
    selected = filter_history(orders, now=system_clock.now(), status=status, date_filter=date_filter)
    stamp = system_clock.now().strftime("%Y%m%d_%H%M%S")
    path = save_history_workbook(selected, RESULTS_DIR / f"history_{vendor_id[:8]}_{stamp}.xlsx")
    pprint({"saved": str(path), "orders": len(selected)})
    return path


def main() -> None:
    load_dotenv()
    if len(sys.argv) < 2:
        raise SystemExit(
            "Usage: python -m tools.export_vendor_history <vendor_id|--first> [status] [date_filter]"
        )
    vendor_id = resolve_vendor_id(sys.argv[1])
    status = sys.argv[2] if len(sys.argv) > 2 else "all"
    date_filter = sys.argv[3] if len(sys.argv) > 3 else "all"
    export_history(vendor_id, status, date_filter)


if __name__ == "__main__":
    main()
