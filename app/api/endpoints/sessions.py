from typing import List, Optional

from fastapi import APIRouter, Depends, status

from app.api.deps import get_device_sessions
from app.schemas.session import CleanupRequest, DeviceSessionResponse, SessionCountResult, SessionCreate
from app.services.device_sessions import DeviceSessionRegistry

router = APIRouter()


@router.post("", response_model=DeviceSessionResponse, status_code=status.HTTP_201_CREATED)
def create_session(body: SessionCreate, registry: DeviceSessionRegistry = Depends(get_device_sessions)):
    """
    Register or reactivate the session of a device.

    Drivers may only be active on one device; a login from a second device
    answers 409 until the first one logs out.
    """
    return registry.login(body.userId, body.deviceId, body.platform, body.role, device_name=body.deviceName)


@router.post("/cleanup", response_model=SessionCountResult)
def cleanup_expired_sessions(
    body: Optional[CleanupRequest] = None,
    registry: DeviceSessionRegistry = Depends(get_device_sessions),
):
    return SessionCountResult(count=registry.sweep_stale(body.maxInactivityHours if body else None))


@router.get("/user/{user_id}", response_model=List[DeviceSessionResponse])
def list_active_sessions(user_id: int, registry: DeviceSessionRegistry = Depends(get_device_sessions)):
    return registry.active_sessions(user_id)


@router.post("/user/{user_id}/logout-all", response_model=SessionCountResult)
def force_logout_all(user_id: int, registry: DeviceSessionRegistry = Depends(get_device_sessions)):
    """Support tool: deactivate every session of a user."""
    return SessionCountResult(count=registry.force_logout_all(user_id))


@router.post("/{device_id}/deactivate", response_model=SessionCountResult)
def deactivate_session(device_id: str, registry: DeviceSessionRegistry = Depends(get_device_sessions)):
    return SessionCountResult(count=registry.logout(device_id))


@router.post("/{device_id}/heartbeat", response_model=DeviceSessionResponse)
def heartbeat(device_id: str, registry: DeviceSessionRegistry = Depends(get_device_sessions)):
    return registry.heartbeat(device_id)
