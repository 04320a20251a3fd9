"""Injectable time sources."""
import time
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching the stored columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Clock:
    """Wall-clock time source used by the attendance services."""

    def time(self) -> float:
        """Seconds since the Unix epoch."""
        return time.time()

    def utcnow(self) -> datetime:
        return datetime.fromtimestamp(self.time(), tz=timezone.utc).replace(tzinfo=None)

    def today(self, tz_name: str = 'UTC') -> date:
        """Calendar date in the given timezone."""
        return datetime.fromtimestamp(self.time(), tz=ZoneInfo(tz_name)).date()


class FrozenClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, timestamp: float):
        self.timestamp = float(timestamp)

    def time(self) -> float:
        return self.timestamp

    def advance(self, seconds: float = 0, **kwargs) -> None:
        """Move forward by seconds plus any timedelta keyword arguments."""
        self.timestamp += seconds + timedelta(**kwargs).total_seconds()
