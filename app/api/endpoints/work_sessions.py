from fastapi import APIRouter, Depends, status

from app.api.deps import get_work_sessions
from app.schemas.trip import WorkSessionRequest, WorkSessionResult
from app.services.work_sessions import WorkSessions

router = APIRouter()


@router.post("/start", response_model=WorkSessionResult, status_code=status.HTTP_201_CREATED)
def start_work_session(body: WorkSessionRequest, sessions: WorkSessions = Depends(get_work_sessions)):
    """Driver goes online."""
    return WorkSessionResult(sessionId=sessions.start_work_session(body.driverId))


@router.post("/end", response_model=WorkSessionResult)
def end_work_session(body: WorkSessionRequest, sessions: WorkSessions = Depends(get_work_sessions)):
    """Driver goes offline. Closes the newest open work session."""
    return WorkSessionResult(sessionId=sessions.end_work_session(body.driverId))
