import time
from datetime import datetime, timedelta, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from app.core.config import settings

MILLIS_PER_HOUR = 1000 * 60 * 60
MILLIS_PER_DAY = MILLIS_PER_HOUR * 24


class Clock:
    """Wall-clock time source. Timestamps are epoch milliseconds."""

    def __init__(self, tz: Optional[tzinfo] = None):
        self.tz = tz or ZoneInfo(settings.TIMEZONE)

    def now_ms(self) -> int:
        return int(time.time() * 1000)

    def to_datetime(self, ms: int) -> datetime:
        return datetime.fromtimestamp(ms / 1000, tz=self.tz)

    def start_of_day(self, ms: int) -> datetime:
        return self.to_datetime(ms).replace(hour=0, minute=0, second=0, microsecond=0)

    def start_of_week(self, ms: int) -> datetime:
        """Monday 00:00 of the week containing ``ms``."""
        day = self.start_of_day(ms)
        return day - timedelta(days=day.weekday())


def to_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)
