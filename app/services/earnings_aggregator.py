"""
Weekly earnings summaries built from a driver's trips and work sessions.

Computed on every request; nothing is cached, so the current week changes as
trips land.
"""

import logging
import math
from datetime import timedelta
from typing import List

from app.core.clock import Clock, MILLIS_PER_HOUR, to_ms
from app.db.stores import TripStore, WorkSessionStore
from app.schemas.earnings import DailyEarnings, WeeklyEarnings

logger = logging.getLogger(__name__)

WEEKS = 4
DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class EarningsAggregator:
    def __init__(self, trips: TripStore, work_sessions: WorkSessionStore, clock: Clock):
        self.trips = trips
        self.work_sessions = work_sessions
        self.clock = clock

    def get_weekly_earnings(self, driver_id: int) -> List[WeeklyEarnings]:
        """The last four Monday-start weeks, current week first."""
        now = self.clock.now_ms()
        current_week = self.clock.start_of_week(now)
        today = self.clock.start_of_day(now)
        today_start, today_end = to_ms(today), to_ms(today + timedelta(days=1))

        weeks = []
        for i in range(WEEKS):
            week_start = current_week - timedelta(days=7 * i)
            day_starts = [to_ms(week_start + timedelta(days=d)) for d in range(8)]
            start_ms, end_ms = day_starts[0], day_starts[7]

            trips = self.trips.started_between(driver_id, start_ms, end_ms)
            sessions = self.work_sessions.finished_started_between(driver_id, start_ms, end_ms)

            earnings = sum(t.fare for t in trips)
            hours_online = sum((s.end_time - s.start_time) / MILLIS_PER_HOUR for s in sessions)

            daily = []
            for d, day in enumerate(DAY_NAMES):
                day_total = sum(t.fare for t in trips if day_starts[d] <= t.start_time < day_starts[d + 1])
                daily.append(DailyEarnings(day=day, earnings=round_half_up(day_total)))

            today_earnings = 0
            if i == 0:
                today_earnings = sum(t.fare for t in trips if today_start <= t.start_time < today_end)

            weeks.append(WeeklyEarnings(
                dateRangeStart=start_ms,
                earnings=earnings,
                hoursOnline=round_half_up(hours_online),
                averagePerHour=round_half_up(earnings / hours_online) if hours_online > 0 else 0,
                reservations=sum(1 for t in trips if t.reservation),
                dailyData=daily,
                todayEarnings=round_half_up(today_earnings),
            ))

        logger.info(f"Computed {WEEKS}-week earnings for driver {driver_id}: current week {weeks[0].earnings}")
        return weeks
