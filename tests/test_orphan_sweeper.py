import asyncio
from datetime import timedelta

import pytest
from postgrest.exceptions import APIError

from services.orphan_sweeper import OrphanOrderSweeper, sweep_orphan_orders


def _seed(db, clock):
    now = clock.now()
    db.seed(
        "orders",
        {"id": "orphan", "status": "scheduled", "created_at": (now - timedelta(hours=1)).isoformat()},
        {"id": "with-items", "status": "scheduled", "created_at": (now - timedelta(hours=1)).isoformat()},
        {"id": "fresh", "status": "scheduled", "created_at": (now - timedelta(minutes=1)).isoformat()},
        {"id": "done", "status": "completed", "created_at": (now - timedelta(days=2)).isoformat()},
    )
    db.seed("order_items", {"id": "line-1", "order_id": "with-items", "quantity": 1})


def test_only_old_scheduled_orders_without_items_are_deleted(db, clock):
    _seed(db, clock)
    swept = sweep_orphan_orders(db, clock.now(), grace_seconds=600)
    assert swept == ["orphan"]
    assert sorted(row["id"] for row in db.tables["orders"]) == ["done", "fresh", "with-items"]


def test_nothing_to_sweep_skips_item_lookup(db, clock):
    assert sweep_orphan_orders(db, clock.now(), grace_seconds=600) == []
    assert ("order_items", "select") not in db.calls


def test_run_once_records_status(db, clock):
    _seed(db, clock)
    sweeper = OrphanOrderSweeper(db, clock, interval_seconds=60, grace_seconds=600)
    assert asyncio.run(sweeper.run_once()) == ["orphan"]
    status = sweeper.get_status()
    assert status["running"] is False
    assert status["last_swept"] == ["orphan"]
    assert status["last_run_at"] == clock.now()
    assert status["last_error"] is None


def test_run_once_keeps_the_error(db, clock):
    db.fail("orders", "select", "database unavailable")
    sweeper = OrphanOrderSweeper(db, clock, interval_seconds=60, grace_seconds=600)
    with pytest.raises(APIError):
        asyncio.run(sweeper.run_once())
    assert sweeper.get_status()["last_error"]
    assert sweeper.get_status()["last_success_at"] is None


def test_start_and_stop(db, clock):
    sweeper = OrphanOrderSweeper(db, clock, interval_seconds=60, grace_seconds=600)

    async def scenario():
        await sweeper.start()
        running = sweeper.is_running
        await asyncio.sleep(0)
        await sweeper.stop()
        return running

    assert asyncio.run(scenario()) is True
    assert sweeper.is_running is False


def test_orders_with_items_survive_the_row_cap(db, clock):
    db.max_rows = 1000
    stale = (clock.now() - timedelta(hours=3)).isoformat()
    for index in range(400):
        db.seed("orders", {"id": f"o{index}", "status": "scheduled", "created_at": stale})
        db.seed(
            "order_items",
            *({"id": f"o{index}-line{line}", "order_id": f"o{index}", "quantity": 1} for line in range(3)),
        )
    db.seed("orders", {"id": "lonely", "status": "scheduled", "created_at": stale})

    assert sweep_orphan_orders(db, clock.now(), grace_seconds=600) == ["lonely"]
    assert len(db.tables["orders"]) == 400
