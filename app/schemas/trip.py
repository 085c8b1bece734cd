from typing import Optional
from pydantic import BaseModel, Field

class TripStartRequest(BaseModel):
    passengerId: int
    driverId: int
    reservation: bool = Field(False, description="Whether the trip fulfils a seat reservation")

class TripStartResult(BaseModel):
    tripId: int

class TripEndRequest(BaseModel):
    passengerId: int

class TripEndResult(BaseModel):
    endTime: int = Field(..., description="Epoch milliseconds the trip was closed at")
    fare: float = Field(..., description="Settled fare copied from the ride's estimate")

class LatestFare(BaseModel):
    fare: Optional[float] = Field(None, description="Fare of the newest trip, null if the user has none")

class WorkSessionRequest(BaseModel):
    driverId: int

class WorkSessionResult(BaseModel):
    sessionId: int
