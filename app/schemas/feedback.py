from typing import Optional
from pydantic import BaseModel, Field

class FeedbackCreate(BaseModel):
    """Schema for a passenger rating a ride."""
    rideId: str
    passengerId: int
    driverId: int
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=1000)
    startLocation: Optional[str] = None
    endLocation: Optional[str] = None

class FeedbackResponse(BaseModel):
    id: int
    ride_id: str
    passenger_id: int
    driver_id: int
    rating: int
    comment: Optional[str] = None
    start_location: Optional[str] = None
    end_location: Optional[str] = None
    submitted_at: int
    driver_name: Optional[str] = None

    model_config = {
        "from_attributes": True
    }

class AverageRating(BaseModel):
    driverId: int
    averageRating: float = Field(..., description="Mean of positive ratings to one decimal, 0 without ratings")
