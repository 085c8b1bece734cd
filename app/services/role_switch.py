"""
Passenger/driver role changes, guarded against rides still in flight.

Two kinds of change exist: toggling ``current_active_role`` on a ``both``
account, and changing ``account_type`` itself (upgrade to ``both`` or
downgrade to a single role). Profiles a role needs are created through the
``ensure_*`` operations, which are safe to call repeatedly.
"""

import logging
from typing import Tuple

from sqlalchemy.exc import IntegrityError

from app.core.clock import Clock
from app.core.exceptions import InvalidStateError, NotFoundError
from app.db.stores import ProfileStore, RideStore, UserStore
from app.models import AccountType, Driver, Location, Passenger, Role, User
from app.schemas.user import AccountSwitchResult, RoleSwitchResult

logger = logging.getLogger(__name__)


class RoleSwitchGuard:
    def __init__(self, users: UserStore, rides: RideStore, profiles: ProfileStore, clock: Clock):
        self.users = users
        self.rides = rides
        self.profiles = profiles
        self.clock = clock

    def _get_user(self, user_id: int) -> User:
        user = self.users.get(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def _ensure_no_active_driver_rides(self, user_id: int, target: str) -> None:
        if self.rides.first_active_as_driver(user_id):
            logger.warning(f"User {user_id} blocked from switching to {target}: active driver ride")
            raise InvalidStateError(f"Cannot switch to {target} while you have active rides as a driver")

    def _ensure_no_active_passenger_rides(self, user_id: int, target: str) -> None:
        if self.rides.first_active_as_passenger(user_id):
            logger.warning(f"User {user_id} blocked from switching to {target}: active passenger ride")
            raise InvalidStateError(f"Cannot switch to {target} while you have active rides as a passenger")

    def _stamp(self, user: User, account_type: str, role: str) -> None:
        now = self.clock.now_ms()
        user.account_type = account_type
        user.current_active_role = role
        user.last_role_switch_at = now
        user.updated_at_ms = now
        self.users.flush()

    # -- active role -------------------------------------------------------

    def switch_active_role(self, user_id: int, new_role: str) -> RoleSwitchResult:
        user = self._get_user(user_id)
        if user.account_type != AccountType.BOTH:
            raise InvalidStateError("User must have both account types to switch active roles")
        if user.current_active_role == new_role:
            raise InvalidStateError(f"User is already in {new_role} mode")

        if new_role == Role.PASSENGER:
            self._ensure_no_active_driver_rides(user_id, "passenger mode")
        elif new_role == Role.DRIVER:
            self._ensure_no_active_passenger_rides(user_id, "driver mode")
        else:
            raise ValueError(f"Unknown role: {new_role}")

        self._stamp(user, AccountType.BOTH, new_role)
        if new_role == Role.DRIVER:
            self.ensure_location(user_id, Role.DRIVER, commit=False)
        self.users.commit()

        logger.info(f"User {user_id} switched to {new_role} mode")
        return RoleSwitchResult(success=True, message=f"Successfully switched to {new_role} mode", newRole=new_role)

    # -- account type ------------------------------------------------------

    def switch_both_to_driver(self, user_id: int) -> AccountSwitchResult:
        user = self._get_user(user_id)
        if user.account_type != AccountType.BOTH:
            raise InvalidStateError("User does not currently have both account types")
        self._ensure_no_active_passenger_rides(user_id, "driver-only")

        self._stamp(user, AccountType.DRIVER, Role.DRIVER)
        self.ensure_location(user_id, Role.DRIVER, commit=False)
        self.users.commit()
        logger.info(f"User {user_id} downgraded to driver only")
        return AccountSwitchResult(success=True, message="Account switched to driver only")

    def switch_both_to_passenger(self, user_id: int) -> AccountSwitchResult:
        user = self._get_user(user_id)
        if user.account_type != AccountType.BOTH:
            raise InvalidStateError("User does not currently have both account types")
        self._ensure_no_active_driver_rides(user_id, "passenger-only")

        self._stamp(user, AccountType.PASSENGER, Role.PASSENGER)
        self.users.commit()
        logger.info(f"User {user_id} downgraded to passenger only")
        return AccountSwitchResult(success=True, message="Account switched to passenger only")

    def switch_driver_to_both(self, user_id: int) -> AccountSwitchResult:
        user = self._get_user(user_id)
        if user.account_type != AccountType.DRIVER:
            raise InvalidStateError("User is not currently a driver")

        self._stamp(user, AccountType.BOTH, Role.DRIVER)
        self.ensure_passenger_profile(user_id, commit=False)
        self.ensure_location(user_id, AccountType.BOTH, commit=False)
        self.users.commit()
        logger.info(f"User {user_id} upgraded from driver to both")
        return AccountSwitchResult(success=True, message="Account upgraded to both driver and passenger")

    def switch_passenger_to_both(self, user_id: int) -> AccountSwitchResult:
        user = self._get_user(user_id)
        if user.account_type != AccountType.PASSENGER:
            raise InvalidStateError("User is not currently a passenger")

        self._stamp(user, AccountType.BOTH, Role.PASSENGER)
        self.ensure_driver_profile(user_id, commit=False)
        self.ensure_location(user_id, AccountType.BOTH, commit=False)
        self.users.commit()
        logger.info(f"User {user_id} upgraded from passenger to both")
        return AccountSwitchResult(success=True, message="Account upgraded to both passenger and driver")

    # -- profiles ----------------------------------------------------------

    def _ensure(self, user_id: int, find, build, commit: bool) -> Tuple[object, bool]:
        self._get_user(user_id)
        existing = find(user_id)
        if existing:
            return existing, False
        if not commit:
            return self.profiles.add(build()), True
        try:
            record = self.profiles.add(build())
            self.profiles.commit()
        except IntegrityError:
            # Created by a concurrent call between the lookup and the insert
            self.profiles.rollback()
            return find(user_id), False
        return record, True

    def ensure_location(self, user_id: int, role: str = Role.DRIVER, commit: bool = True) -> Tuple[Location, bool]:
        """Location row at (0, 0) so proximity queries always find the user."""
        return self._ensure(
            user_id,
            self.profiles.location_for,
            lambda: Location(user_id=user_id, latitude=0, longitude=0, role=role),
            commit,
        )

    def ensure_passenger_profile(self, user_id: int, commit: bool = True) -> Tuple[Passenger, bool]:
        return self._ensure(
            user_id,
            self.profiles.passenger_for,
            lambda: Passenger(user_id=user_id, number_of_rides_taken=0, total_distance=0, total_fare=0),
            commit,
        )

    def ensure_driver_profile(self, user_id: int, commit: bool = True) -> Tuple[Driver, bool]:
        return self._ensure(
            user_id,
            self.profiles.driver_for,
            lambda: Driver(user_id=user_id, number_of_rides_completed=0, total_distance=0, total_fare=0),
            commit,
        )
