from typing import Literal, Optional
from pydantic import BaseModel, Field

AccountTypeName = Literal["passenger", "driver", "both"]
RoleName = Literal["passenger", "driver"]

class SignUpRequest(BaseModel):
    phoneNumber: str = Field(..., min_length=5)
    name: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)
    accountType: AccountTypeName
    email: Optional[str] = None
    age: Optional[int] = Field(None, ge=0)

class SignUpResult(BaseModel):
    success: bool
    userId: int

class LoginRequest(BaseModel):
    phoneNumber: str
    password: str
    deviceId: Optional[str] = Field(None, description="Registers a device session when given")
    deviceName: Optional[str] = None
    platform: Optional[str] = None

class UserSummary(BaseModel):
    id: int
    phone_number: str
    name: str
    account_type: str
    current_active_role: Optional[str] = None
    is_verified: bool

    model_config = {
        "from_attributes": True
    }

class LoginResult(BaseModel):
    user: UserSummary
    access_token: str
    token_type: str = "bearer"

class RoleSwitchRequest(BaseModel):
    newRole: RoleName

class RoleSwitchResult(BaseModel):
    success: bool
    message: str
    newRole: RoleName

class AccountSwitchResult(BaseModel):
    success: bool
    message: str

class ProfileResult(BaseModel):
    """Outcome of an ensure-profile call."""
    profile: Literal["passenger", "driver", "location"]
    id: int
    created: bool = Field(..., description="False when the record already existed")
