import copy
import itertools
import os
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "header.payload.signature")
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:3000")

import pytest
from postgrest.exceptions import APIError

from clock import FixedClock
from services.cart_store import CartStore

WIB = timezone(timedelta(hours=7))
# 2024-05-15 is a Wednesday.
WEDNESDAY_MORNING = datetime(2024, 5, 15, 8, 0, tzinfo=WIB)


def _comparable(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return value


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self.db = db
        self.table = table
        self.op = "select"
        self.payload: Any = None
        self.filters: List[Any] = []
        self.sort: Optional[tuple] = None
        self.row_limit: Optional[int] = None

    def select(self, *_columns, **_kwargs) -> "FakeQuery":
        return self

    def insert(self, payload) -> "FakeQuery":
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload) -> "FakeQuery":
        self.op = "update"
        self.payload = payload
        return self

    def delete(self) -> "FakeQuery":
        self.op = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column: str, values) -> "FakeQuery":
        allowed = set(values)
        self.filters.append(lambda row: row.get(column) in allowed)
        return self

    def lt(self, column: str, value: Any) -> "FakeQuery":
        bound = _comparable(value)
        self.filters.append(
            lambda row: row.get(column) is not None and _comparable(row.get(column)) < bound
        )
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.sort = (column, desc)
        return self

    def limit(self, count: int) -> "FakeQuery":
        self.row_limit = count
        return self

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(check(row) for check in self.filters)

    def execute(self) -> SimpleNamespace:
        self.db.calls.append((self.table, self.op))
        key = (self.table, self.op)
        for hook in self.db.hooks.get(key, []):
            hook()
        if key in self.db.failures:
            raise APIError({"message": self.db.failures[key], "code": "500"})
        if key in self.db.empty_results:
            return SimpleNamespace(data=[])
        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "insert":
            records = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = []
            for record in records:
                self.db.check_unique(self.table, record)
                row = {"id": self.db.next_id(self.table), "created_at": self.db.created_at, **record}
                rows.append(row)
                inserted.append(copy.deepcopy(row))
            self.db.inserted.append((self.table, inserted))
            return SimpleNamespace(data=inserted)

        matched = [row for row in rows if self._matches(row)]
        if self.op == "update":
            for row in matched:
                row.update(self.payload)
            return SimpleNamespace(data=copy.deepcopy(matched))
        if self.op == "delete":
            self.db.tables[self.table] = [row for row in rows if not self._matches(row)]
            self.db.deleted.append((self.table, [row.get("id") for row in matched]))
            return SimpleNamespace(data=copy.deepcopy(matched))

        if self.sort:
            column, desc = self.sort
            matched = sorted(matched, key=lambda row: str(row.get(column) or ""), reverse=desc)
        if self.row_limit is not None:
            matched = matched[: self.row_limit]
        if self.db.max_rows is not None:
            matched = matched[: self.db.max_rows]
        return SimpleNamespace(data=copy.deepcopy(matched))


class FakeAuthAdmin:
    def __init__(self) -> None:
        self.metadata: Dict[str, Dict[str, Any]] = {}

    def get_user_by_id(self, auth_user_id: str) -> SimpleNamespace:
        if auth_user_id not in self.metadata:
            return SimpleNamespace(user=None)
        return SimpleNamespace(
            user=SimpleNamespace(id=auth_user_id, user_metadata=self.metadata[auth_user_id])
        )


class FakeSupabase:
    """In-memory stand-in for the supabase client's table query builder."""

    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self.inserted: List[tuple] = []
        self.deleted: List[tuple] = []
        self.failures: Dict[tuple, str] = {}
        self.empty_results: set = set()
        self.created_at = WEDNESDAY_MORNING.isoformat()
        self.auth = SimpleNamespace(admin=FakeAuthAdmin())
        self._ids = itertools.count(1)
        self.hooks: Dict[tuple, List[Any]] = {}
        self.unique: Dict[str, str] = {}
        # PostgREST truncates every select at the server max-rows setting.
        self.max_rows: Optional[int] = None

    def next_id(self, table: str) -> str:
        return f"{table}-{next(self._ids)}"

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def seed(self, table: str, *rows: Dict[str, Any]) -> None:
        self.tables.setdefault(table, []).extend(copy.deepcopy(list(rows)))

    def on_execute(self, table: str, op: str, hook) -> None:
        self.hooks.setdefault((table, op), []).append(hook)

    def check_unique(self, table: str, record: Dict[str, Any]) -> None:
        column = self.unique.get(table)
        if column is None:
            return
        if any(row.get(column) == record.get(column) for row in self.tables.get(table, [])):
            raise APIError({"message": f"duplicate key value violates unique constraint on {column}", "code": "23505"})

    def fail(self, table: str, op: str, message: str = "boom") -> None:
        self.failures[(table, op)] = message

    def return_nothing(self, table: str, op: str) -> None:
        self.empty_results.add((table, op))


@pytest.fixture
def db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(WEDNESDAY_MORNING)


@pytest.fixture
def store() -> CartStore:
    return CartStore()


@pytest.fixture
def catalog(db: FakeSupabase) -> FakeSupabase:
    db.seed(
        "pickup_locations",
        {"id": "loc-lobby", "name": "Lobby", "floor": 1, "building": "A", "is_active": True},
        {"id": "loc-third", "name": "Library", "floor": 3, "building": "B", "is_active": True},
        {"id": "loc-closed", "name": "Roof", "floor": 9, "building": "B", "is_active": False},
    )
    db.seed(
        "time_slots",
        {"id": "slot-09", "label": "09:00-11:00", "start_time": "09:00:00", "end_time": "11:00:00", "is_active": True},
        {"id": "slot-11", "label": "11:00-13:00", "start_time": "11:00:00", "end_time": "13:00:00", "is_active": True},
        {"id": "slot-13", "label": "13:00-15:00", "start_time": "13:00:00", "end_time": "15:00:00", "is_active": True},
        {"id": "slot-15", "label": "15:00-17:00", "start_time": "15:00:00", "end_time": "17:00:00", "is_active": True},
        {"id": "slot-17", "label": "17:00-19:00", "start_time": "17:00:00", "end_time": "19:00:00", "is_active": True},
    )
    db.seed(
        "vendors",
        {"id": "vendor-1", "business_name": "Warung Bee", "status": "approved", "location": "Canteen A"},
        {"id": "vendor-2", "business_name": "Kopi Hive", "status": "approved", "location": "Canteen B"},
        {"id": "vendor-3", "business_name": "Pending Place", "status": "pending", "location": "Canteen C"},
    )
    db.seed(
        "menu_items",
        {"id": "item-rice", "vendor_id": "vendor-1", "name": "Nasi Goreng", "price": 15000, "is_available": True},
        {"id": "item-tea", "vendor_id": "vendor-1", "name": "Es Teh", "price": "5000.00", "is_available": True},
        {"id": "item-soldout", "vendor_id": "vendor-1", "name": "Sate", "price": 20000, "is_available": False},
        {"id": "item-coffee", "vendor_id": "vendor-2", "name": "Kopi Susu", "price": 18000, "is_available": True},
        {"id": "item-hidden", "vendor_id": "vendor-3", "name": "Mie", "price": 12000, "is_available": True},
    )
    return db
