from fastapi import APIRouter

from app.api.endpoints import (
    auth,
    earnings,
    feedback,
    health,
    notifications,
    rides,
    sessions,
    trips,
    users,
    work_sessions,
)

# Create API router
api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
api_router.include_router(rides.router, prefix="/rides", tags=["rides"])
api_router.include_router(trips.router, prefix="/trips", tags=["trips"])
api_router.include_router(work_sessions.router, prefix="/work-sessions", tags=["work sessions"])
api_router.include_router(earnings.router, prefix="/earnings", tags=["earnings"])
api_router.include_router(feedback.router, prefix="/feedback", tags=["feedback"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
