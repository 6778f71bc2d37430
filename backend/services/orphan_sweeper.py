import asyncio
import contextlib
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from clock import system_clock
from config import settings
from constants import ORDER_STATUS_SCHEDULED
from repositories.orders_repository import delete_order, fetch_stale_orders, order_has_items
from supabase_client import supabase

logger = logging.getLogger("beegrub")


def sweep_orphan_orders(client, now: datetime, grace_seconds: int) -> List[str]:
    """Delete scheduled orders past the grace period that never got any items."""
    cutoff = now - timedelta(seconds=grace_seconds)
    candidates = fetch_stale_orders(client, status_value=ORDER_STATUS_SCHEDULED, created_before=cutoff)
    ids = [str(row["id"]) for row in candidates if row.get("id")]
    swept = []
    for order_id in ids:
        if order_has_items(client, order_id):
            continue
        if delete_order(client, order_id):
            logger.info("Deleted orphan order %s", order_id)
            swept.append(order_id)
        else:
            logger.warning("Orphan order %s could not be deleted", order_id)
    return swept


class OrphanOrderSweeper:
    def __init__(
        self,
        client,
        clock,
        interval_seconds: int = settings.orphan_sweep_interval_seconds,
        grace_seconds: int = settings.orphan_order_grace_seconds,
    ) -> None:
        self.client = client
        self.clock = clock
        self.interval_seconds = interval_seconds
        self.grace_seconds = grace_seconds
        self._task: Optional[asyncio.Task] = None
        self._last_run_at: Optional[datetime] = None
        self._last_success_at: Optional[datetime] = None
        self._last_error: Optional[str] = None
        self._last_swept: List[str] = []

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if not self._task:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def run_once(self) -> List[str]:
        self._last_run_at = self.clock.now()
        try:
            swept = await asyncio.to_thread(
                sweep_orphan_orders,
                self.client,
                self._last_run_at,
                self.grace_seconds,
            )
        except Exception as exc:
            self._last_error = str(exc)
            raise
        self._last_success_at = self.clock.now()
        self._last_error = None
        self._last_swept = swept
        return swept

    async def _run(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception as exc:  # pragma: no cover - background guard
                logger.exception("Orphan order sweep failed: %s", exc)
            await asyncio.sleep(self.interval_seconds)

    def get_status(self) -> Dict[str, Any]:
        return {
            "running": self.is_running,
            "interval_seconds": self.interval_seconds,
            "last_run_at": self._last_run_at,
            "last_success_at": self._last_success_at,
            "last_error": self._last_error,
            "last_swept": list(self._last_swept),
        }


orphan_sweeper = OrphanOrderSweeper(supabase, system_clock)


def get_orphan_sweeper() -> OrphanOrderSweeper:
    return orphan_sweeper
