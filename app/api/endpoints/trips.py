from fastapi import APIRouter, Depends, status

from app.api.deps import get_trip_settlement
from app.schemas.trip import LatestFare, TripEndRequest, TripEndResult, TripStartRequest, TripStartResult
from app.services.trip_settlement import TripSettlement

router = APIRouter()


@router.post("/start", response_model=TripStartResult, status_code=status.HTTP_201_CREATED)
def start_trip(body: TripStartRequest, settlement: TripSettlement = Depends(get_trip_settlement)) -> TripStartResult:
    """
    Open a trip for a passenger and driver.

    The trip is linked to the pair's newest ride that has no trip yet, if any.
    """
    return TripStartResult(tripId=settlement.start_trip(body.passengerId, body.driverId, body.reservation))


@router.post("/end", response_model=TripEndResult)
def end_trip(body: TripEndRequest, settlement: TripSettlement = Depends(get_trip_settlement)) -> TripEndResult:
    """Close the passenger's ongoing trip at the linked ride's estimated fare."""
    return settlement.end_trip(body.passengerId)


@router.get("/fare/{user_id}", response_model=LatestFare)
def get_latest_fare(user_id: int, settlement: TripSettlement = Depends(get_trip_settlement)) -> LatestFare:
    return LatestFare(fare=settlement.get_fare_for_latest_trip(user_id))
