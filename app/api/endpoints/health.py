from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import text

from app.api.deps import get_clock
from app.core.clock import Clock
from app.core.config import settings
from app.db.session import get_db

router = APIRouter()

@router.get("/")
def health_check(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    """
    Liveness of the API and reachability of the ride database.

    Returns:
        dict: status, database state, and the server time in epoch
        milliseconds together with the timezone earnings weeks are cut in
    """
    health_status = {
        "status": "healthy",
        "api": "online",
        "database": "online",
        "server_time": clock.now_ms(),
        "timezone": settings.TIMEZONE,
    }

    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        health_status["database"] = "offline"
        health_status["status"] = "unhealthy"
        health_status["database_error"] = str(e)

    return health_status
