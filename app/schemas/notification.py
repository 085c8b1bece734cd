from typing import Optional
from pydantic import BaseModel

class NotificationResponse(BaseModel):
    id: int
    user_id: int
    type: str
    title: str
    message: str
    priority: str
    ride_id: Optional[str] = None
    is_read: bool
    sent_at: int
    read_at: Optional[int] = None

    model_config = {
        "from_attributes": True
    }

class ReadAllResult(BaseModel):
    count: int
