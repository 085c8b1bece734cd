"""
Per-device login sessions with one-active-device-per-driver enforcement.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from app.core.clock import Clock, MILLIS_PER_HOUR
from app.core.config import settings
from app.core.exceptions import ConflictError, InvalidStateError, NotFoundError
from app.db.stores import DeviceSessionStore, UserStore
from app.models import DeviceSession, Role

logger = logging.getLogger(__name__)

DEVICE_CONFLICT_MESSAGE = (
    "This driver account is already active on another device. "
    "Log out there first or contact support."
)


class DeviceSessionRegistry:
    def __init__(self, sessions: DeviceSessionStore, users: UserStore, clock: Clock):
        self.sessions = sessions
        self.users = users
        self.clock = clock

    def login(
        self,
        user_id: int,
        device_id: str,
        platform: str,
        role: str,
        device_name: Optional[str] = None,
        commit: bool = True,
    ) -> DeviceSession:
        """
        Activate the session for ``device_id``. A driver already active on a
        different device is rejected, never silently moved.
        """
        user = self.users.get(user_id)
        if not user:
            raise NotFoundError("User not found")
        if not user.can_act_as(role):
            raise InvalidStateError(f"Account type {user.account_type} cannot log in as {role}")

        if role == Role.DRIVER:
            others = [s for s in self.sessions.active_for_user(user_id) if s.device_id != device_id]
            if others:
                logger.warning(
                    f"Rejected driver login for user {user_id} on {device_id}: "
                    f"active on {', '.join(s.device_id for s in others)}"
                )
                raise ConflictError(DEVICE_CONFLICT_MESSAGE)

        now = self.clock.now_ms()
        session = self.sessions.get_by_device(device_id)
        try:
            if session:
                session.user_id = user_id
                session.platform = platform
                session.role = role
                session.device_name = device_name or session.device_name
                session.is_active = True
                session.last_activity_at = now
                self.sessions.flush()
            else:
                session = self.sessions.add(DeviceSession(
                    user_id=user_id,
                    device_id=device_id,
                    device_name=device_name,
                    platform=platform,
                    role=role,
                    is_active=True,
                    last_activity_at=now,
                ))
        except IntegrityError:
            self.sessions.rollback()
            others = [s for s in self.sessions.active_for_user(user_id) if s.device_id != device_id]
            if role == Role.DRIVER and others:
                # Partial unique index on active driver sessions
                logger.warning(f"Concurrent driver login for user {user_id} on {device_id} lost the race")
                raise ConflictError(DEVICE_CONFLICT_MESSAGE)
            logger.warning(f"Session for device {device_id} was written concurrently")
            raise ConflictError(f"Session for device {device_id} changed during login. Try again.")

        if commit:
            self.sessions.commit()
        logger.info(f"User {user_id} logged in as {role} on device {device_id} ({platform})")
        return session

    def logout(self, device_id: str) -> int:
        count = self.sessions.deactivate_device(device_id)
        self.sessions.commit()
        logger.info(f"Deactivated {count} session(s) for device {device_id}")
        return count

    def force_logout_all(self, user_id: int) -> int:
        count = self.sessions.deactivate_user(user_id)
        self.sessions.commit()
        logger.info(f"Force-logged out user {user_id} from {count} session(s)")
        return count

    def sweep_stale(self, max_inactivity_hours: Optional[int] = None) -> int:
        """Deactivate active sessions idle for longer than ``max_inactivity_hours``."""
        hours = settings.SESSION_MAX_INACTIVITY_HOURS if max_inactivity_hours is None else max_inactivity_hours
        cutoff = self.clock.now_ms() - hours * MILLIS_PER_HOUR
        count = self.sessions.deactivate_idle_since(cutoff)
        self.sessions.commit()
        logger.info(f"Stale session sweep ({hours}h) deactivated {count} session(s)")
        return count

    def heartbeat(self, device_id: str) -> DeviceSession:
        session = self.sessions.get_by_device(device_id)
        if not session or not session.is_active:
            raise NotFoundError(f"No active session for device {device_id}")
        session.last_activity_at = self.clock.now_ms()
        self.sessions.commit()
        return session

    def active_sessions(self, user_id: int) -> List[DeviceSession]:
        return self.sessions.active_for_user(user_id)
