from typing import List, Optional
from pydantic import BaseModel, Field

class Coordinates(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

class RideLocation(BaseModel):
    """Pickup or drop-off point of a ride."""
    coordinates: Coordinates
    address: str = Field(..., min_length=1, description="Human readable address")

class RideRequestCreate(BaseModel):
    """Schema for a passenger requesting a ride."""
    passengerId: int = Field(..., description="User ID of the passenger")
    driverId: Optional[int] = Field(None, description="Driver whose taxi was chosen, if any")
    startLocation: RideLocation
    endLocation: RideLocation
    estimatedFare: Optional[float] = Field(None, ge=0, description="Fare quoted to the passenger")
    estimatedDistance: Optional[float] = Field(None, ge=0, description="Passenger displacement in km")

class RideRequestResult(BaseModel):
    rideId: str
    message: str
    estimatedFare: Optional[float] = None
    isDuplicate: bool = False

class RideResponse(BaseModel):
    """Schema for returning a ride."""
    ride_id: str = Field(..., description="External ride identifier")
    passenger_id: int
    driver_id: Optional[int] = None
    status: str = Field(..., description="requested | accepted | in_progress | completed | cancelled | declined")
    start_address: str
    end_address: str
    ride_pin: Optional[str] = Field(None, description="4-digit pickup PIN, set once accepted")
    pin_regenerated_at: Optional[int] = None
    pin_verified_at: Optional[int] = None
    requested_at: int
    accepted_at: Optional[int] = None
    started_at: Optional[int] = None
    completed_at: Optional[int] = None
    estimated_fare: Optional[float] = None
    final_fare: Optional[float] = None
    estimated_distance: Optional[float] = None
    trip_id: Optional[int] = None
    trip_paid: Optional[bool] = None
    payment_confirmed_at: Optional[int] = None

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "example": {
                "ride_id": "ride_1718000000000_k3j9x0a1b",
                "passenger_id": 12,
                "driver_id": 7,
                "status": "accepted",
                "start_address": "Bree Street Taxi Rank",
                "end_address": "Sandton City",
                "ride_pin": "4821",
                "requested_at": 1718000000000,
                "accepted_at": 1718000030000,
                "estimated_fare": 25.0
            }
        }
    }

class DriverAction(BaseModel):
    driverId: int = Field(..., description="User ID of the driver performing the action")

class PassengerAction(BaseModel):
    passengerId: int = Field(..., description="User ID of the passenger performing the action")

class UserAction(BaseModel):
    userId: int = Field(..., description="User ID of either party of the ride")

class RideActionResult(BaseModel):
    """Acknowledgement of a lifecycle action."""
    id: str = Field(..., alias="_id", description="External ride identifier")
    message: str

    model_config = {"populate_by_name": True}

class PinRegenerationResult(BaseModel):
    success: bool
    newPin: str
    ride: RideResponse
    message: str

class PinVerificationRequest(BaseModel):
    requesterId: int = Field(..., description="User ID of the party typing the PIN")
    enteredPin: str = Field(..., description="PIN as typed, compared verbatim")
    driverId: Optional[int] = Field(None, description="Expected driver, checked on passenger-initiated verification")

class PinVerificationResult(BaseModel):
    """A wrong PIN is reported here with success=false, not as an error."""
    success: bool
    message: str
    ride: Optional[RideResponse] = None
    tripId: Optional[int] = None

class PaymentConfirmationRequest(BaseModel):
    passengerId: int
    paid: bool

class PaymentConfirmationResult(BaseModel):
    success: bool
    message: str
    rideId: str

class PassengerFare(BaseModel):
    name: str
    phoneNumber: str
    fare: float
    tripPaid: Optional[bool] = None
    requestedAt: Optional[int] = None

class ActiveTripsSummary(BaseModel):
    """Driver dashboard: rides in progress and who still owes a fare."""
    activeCount: int
    paidCount: int
    unpaidCount: int
    noResponseCount: int
    passengers: List[PassengerFare]
    passengersUnpaid: List[PassengerFare]
