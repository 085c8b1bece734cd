import pytest
from sqlalchemy.exc import IntegrityError

from app.api import deps
from app.core.clock import MILLIS_PER_HOUR
from app.core.exceptions import ConflictError, InvalidStateError, NotFoundError
from app.models import AccountType, DeviceSession


@pytest.fixture
def registry(db, clock):
    return deps.get_device_sessions(db=db, clock=clock)


def test_driver_limited_to_one_active_device(registry, driver):
    first = registry.login(driver.id, "device-A", "android", "driver")
    assert first.is_active

    with pytest.raises(ConflictError, match="already active on another device"):
        registry.login(driver.id, "device-B", "ios", "driver")

    assert registry.logout("device-A") == 1
    second = registry.login(driver.id, "device-B", "ios", "driver")
    assert second.is_active
    assert [s.device_id for s in registry.active_sessions(driver.id)] == ["device-B"]


def test_same_device_login_refreshes_session(registry, driver, clock):
    registry.login(driver.id, "device-A", "android", "driver")
    clock.advance(MILLIS_PER_HOUR)

    session = registry.login(driver.id, "device-A", "android", "driver", device_name="Pixel 8")
    assert session.last_activity_at == clock.now_ms()
    assert session.device_name == "Pixel 8"
    assert len(registry.active_sessions(driver.id)) == 1


def test_passenger_may_use_several_devices(registry, passenger):
    registry.login(passenger.id, "phone", "ios", "passenger")
    registry.login(passenger.id, "tablet", "ios", "passenger")
    assert len(registry.active_sessions(passenger.id)) == 2


def test_database_rejects_second_active_driver_session(db, driver, clock):
    db.add(DeviceSession(user_id=driver.id, device_id="A", platform="ios", role="driver",
                         is_active=True, last_activity_at=clock.now_ms()))
    db.commit()

    db.add(DeviceSession(user_id=driver.id, device_id="B", platform="ios", role="driver",
                         is_active=True, last_activity_at=clock.now_ms()))
    with pytest.raises(IntegrityError):
        db.flush()
    db.rollback()

    # Inactive rows are outside the index
    db.add(DeviceSession(user_id=driver.id, device_id="C", platform="ios", role="driver",
                         is_active=False, last_activity_at=clock.now_ms()))
    db.commit()


def test_sweep_deactivates_idle_sessions(registry, make_user, clock):
    idle = make_user(AccountType.DRIVER)
    busy = make_user(AccountType.PASSENGER)
    registry.login(idle.id, "idle-device", "android", "driver")
    clock.advance(25 * MILLIS_PER_HOUR)
    registry.login(busy.id, "busy-device", "android", "passenger")

    assert registry.sweep_stale() == 1
    assert registry.active_sessions(idle.id) == []
    assert len(registry.active_sessions(busy.id)) == 1

    clock.advance(2 * MILLIS_PER_HOUR)
    assert registry.sweep_stale(max_inactivity_hours=1) == 1


def test_force_logout_all(registry, passenger):
    registry.login(passenger.id, "phone", "ios", "passenger")
    registry.login(passenger.id, "web", "web", "passenger")

    assert registry.force_logout_all(passenger.id) == 2
    assert registry.force_logout_all(passenger.id) == 0


def test_heartbeat_requires_active_session(registry, passenger, clock):
    registry.login(passenger.id, "phone", "ios", "passenger")
    clock.advance(5000)
    assert registry.heartbeat("phone").last_activity_at == clock.now_ms()

    registry.logout("phone")
    with pytest.raises(NotFoundError):
        registry.heartbeat("phone")


def test_login_requires_a_user_who_can_take_the_role(registry, passenger, db):
    with pytest.raises(NotFoundError):
        registry.login(424242, "device-A", "android", "driver")
    with pytest.raises(InvalidStateError):
        registry.login(passenger.id, "device-A", "android", "driver")

    assert db.query(DeviceSession).count() == 0


def test_sweep_with_zero_hours_is_not_the_default(registry, passenger, clock):
    registry.login(passenger.id, "phone", "ios", "passenger")
    clock.advance(1)

    assert registry.sweep_stale(max_inactivity_hours=0) == 1
    assert registry.active_sessions(passenger.id) == []
