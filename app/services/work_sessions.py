import logging

from app.core.clock import Clock
from app.core.exceptions import ConflictError, NotFoundError
from app.db.stores import WorkSessionStore
from app.models import WorkSession

logger = logging.getLogger(__name__)


class WorkSessions:
    """A driver's online intervals, the source of hours-online in earnings."""

    def __init__(self, work_sessions: WorkSessionStore, clock: Clock):
        self.work_sessions = work_sessions
        self.clock = clock

    def start_work_session(self, driver_id: int) -> int:
        if self.work_sessions.open_for_driver(driver_id):
            raise ConflictError("A work session is already active for this driver.")

        session = self.work_sessions.add(WorkSession(driver_id=driver_id, start_time=self.clock.now_ms()))
        self.work_sessions.commit()
        logger.info(f"Driver {driver_id} went online (work session {session.id})")
        return session.id

    def end_work_session(self, driver_id: int) -> int:
        latest = self.work_sessions.newest_for_driver(driver_id)
        if not latest or latest.end_time is not None:
            raise NotFoundError("No active work session found.")

        latest.end_time = self.clock.now_ms()
        self.work_sessions.commit()
        logger.info(f"Driver {driver_id} went offline (work session {latest.id})")
        return latest.id
