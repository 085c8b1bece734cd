from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from app.api import deps
from app.core.clock import MILLIS_PER_DAY, MILLIS_PER_HOUR, to_ms
from app.models import Trip, WorkSession
from app.services.earnings_aggregator import round_half_up
from conftest import FixedClock


def at(*args):
    return to_ms(datetime(*args, tzinfo=timezone.utc))


# Clock sits at Wednesday 2024-06-12 12:00 UTC; that week starts Monday 2024-06-10
MONDAY = at(2024, 6, 10)


@pytest.fixture
def add_trip(db):
    def _add(driver_id, start, fare, reservation=False):
        db.add(Trip(driver_id=driver_id, start_time=start, end_time=start + MILLIS_PER_HOUR,
                    fare=fare, reservation=reservation))
        db.commit()
    return _add


@pytest.fixture
def add_work_session(db):
    def _add(driver_id, start, end):
        db.add(WorkSession(driver_id=driver_id, start_time=start, end_time=end))
        db.commit()
    return _add


def test_current_week_summary(db, clock, driver, add_trip, add_work_session):
    add_trip(driver.id, at(2024, 6, 10, 10), 100, reservation=True)
    add_trip(driver.id, at(2024, 6, 12, 9), 50, reservation=False)
    add_work_session(driver.id, MONDAY, MONDAY + MILLIS_PER_DAY)
    add_work_session(driver.id, MONDAY + MILLIS_PER_DAY, MONDAY + 2 * MILLIS_PER_DAY)

    weeks = deps.get_earnings(db=db, clock=clock).get_weekly_earnings(driver.id)

    current = weeks[0]
    assert current.dateRangeStart == MONDAY
    assert current.earnings == 150
    assert current.hoursOnline == 48
    assert current.averagePerHour == 3
    assert current.reservations == 1
    assert current.todayEarnings == 50
    assert [(d.day, d.earnings) for d in current.dailyData] == [
        ("Mon", 100), ("Tue", 0), ("Wed", 50), ("Thu", 0), ("Fri", 0), ("Sat", 0), ("Sun", 0),
    ]


def test_four_weeks_newest_first(db, clock, driver, add_trip):
    # Sunday night belongs to the previous week
    add_trip(driver.id, at(2024, 6, 9, 23), 80)

    weeks = deps.get_earnings(db=db, clock=clock).get_weekly_earnings(driver.id)

    assert len(weeks) == 4
    assert [w.dateRangeStart for w in weeks] == [MONDAY - 7 * i * MILLIS_PER_DAY for i in range(4)]
    assert weeks[0].earnings == 0
    assert weeks[1].earnings == 80
    assert weeks[1].dailyData[6].earnings == 80
    assert weeks[1].todayEarnings == 0


def test_empty_week_has_no_average(db, clock, driver):
    weeks = deps.get_earnings(db=db, clock=clock).get_weekly_earnings(driver.id)
    assert all(w.averagePerHour == 0 and w.hoursOnline == 0 for w in weeks)


def test_open_work_session_is_not_counted(db, clock, driver, add_trip):
    add_trip(driver.id, at(2024, 6, 11, 8), 60)
    db.add(WorkSession(driver_id=driver.id, start_time=MONDAY, end_time=None))
    db.commit()

    current = deps.get_earnings(db=db, clock=clock).get_weekly_earnings(driver.id)[0]
    assert current.hoursOnline == 0
    assert current.averagePerHour == 0


def test_other_drivers_are_excluded(db, clock, driver, make_user, add_trip):
    other = make_user("driver")
    add_trip(other.id, at(2024, 6, 11, 8), 500)

    assert deps.get_earnings(db=db, clock=clock).get_weekly_earnings(driver.id)[0].earnings == 0


def test_weeks_follow_configured_timezone(db, driver, add_trip):
    # 23:00 UTC on Sunday is already Monday 01:00 in Johannesburg
    add_trip(driver.id, at(2024, 6, 9, 23), 80)
    clock = FixedClock(tz=ZoneInfo("Africa/Johannesburg"))

    weeks = deps.get_earnings(db=db, clock=clock).get_weekly_earnings(driver.id)
    assert weeks[0].earnings == 80
    assert weeks[0].dailyData[0].earnings == 80
    assert weeks[0].dateRangeStart == at(2024, 6, 9, 22)


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(3.125) == 3
    assert round_half_up(47.5) == 48
