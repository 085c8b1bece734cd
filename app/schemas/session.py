from typing import Literal, Optional
from pydantic import BaseModel, Field

class SessionCreate(BaseModel):
    """Schema for registering a device session."""
    userId: int
    deviceId: str = Field(..., min_length=1)
    platform: str = Field("unknown", description="ios | android | web")
    role: Literal["passenger", "driver"]
    deviceName: Optional[str] = None

class DeviceSessionResponse(BaseModel):
    id: int
    user_id: int
    device_id: str
    device_name: Optional[str] = None
    platform: str
    role: str
    is_active: bool
    last_activity_at: int

    model_config = {
        "from_attributes": True
    }

class SessionCountResult(BaseModel):
    count: int = Field(..., description="Number of sessions deactivated")

class CleanupRequest(BaseModel):
    maxInactivityHours: Optional[int] = Field(None, gt=0, description="Defaults to SESSION_MAX_INACTIVITY_HOURS")
