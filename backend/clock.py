from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from config import settings


class SystemClock:
    def __init__(self, timezone_name: str) -> None:
        self._tz = ZoneInfo(timezone_name)

    def now(self) -> datetime:
        return datetime.now(self._tz)


class FixedClock:
    """Clock pinned to one instant; `advance` moves it forward."""

    def __init__(self, instant: datetime) -> None:
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def advance(self, **delta: float) -> None:
        self._instant = self._instant + timedelta(**delta)


system_clock = SystemClock(settings.campus_timezone)


def get_clock() -> SystemClock:
    return system_clock
