from typing import Optional

from fastapi import APIRouter, Depends, status

from app.api.deps import get_ride_ledger
from app.core.exceptions import UnauthorizedError
from app.core.security import TokenData, get_current_user
from app.models import Role
from app.schemas.ride import (
    ActiveTripsSummary,
    DriverAction,
    PassengerAction,
    PaymentConfirmationRequest,
    PaymentConfirmationResult,
    PinRegenerationResult,
    PinVerificationRequest,
    PinVerificationResult,
    RideActionResult,
    RideRequestCreate,
    RideRequestResult,
    RideResponse,
    UserAction,
)
from app.services.ride_ledger import RideLedger

router = APIRouter()


def _require_caller(current_user: TokenData, user_id: int) -> None:
    """The id named in the body must be the one the bearer token was issued to."""
    if current_user.user_id != user_id:
        raise UnauthorizedError("Token does not belong to the acting user")


@router.post("", response_model=RideRequestResult, status_code=status.HTTP_201_CREATED)
def request_ride(
    ride_request: RideRequestCreate,
    ledger: RideLedger = Depends(get_ride_ledger),
    current_user: TokenData = Depends(get_current_user),
) -> RideRequestResult:
    """
    Request a ride from a pickup to a drop-off point.

    A second request for the same passenger and driver while the first is
    still pending returns the existing ride with ``isDuplicate`` set.
    """
    _require_caller(current_user, ride_request.passengerId)
    return ledger.request_ride(ride_request)


@router.get("/driver/{driver_id}/active", response_model=Optional[RideResponse])
def get_active_ride_for_driver(driver_id: int, ledger: RideLedger = Depends(get_ride_ledger)):
    """Newest accepted or in-progress ride of a driver, or null."""
    return ledger.get_active_ride_for_driver(driver_id)


@router.get("/driver/{driver_id}/trips", response_model=ActiveTripsSummary)
def get_active_trips(driver_id: int, ledger: RideLedger = Depends(get_ride_ledger)) -> ActiveTripsSummary:
    """Driver dashboard: rides in progress and unpaid passengers."""
    return ledger.get_active_trips(driver_id)


@router.get("/{ride_id}", response_model=RideResponse)
def get_ride(ride_id: str, ledger: RideLedger = Depends(get_ride_ledger)):
    return ledger.get_ride(ride_id)


@router.post("/{ride_id}/accept", response_model=RideResponse)
def accept_ride(
    ride_id: str,
    action: DriverAction,
    ledger: RideLedger = Depends(get_ride_ledger),
    current_user: TokenData = Depends(get_current_user),
):
    """Accept a requested ride. The response carries the pickup PIN."""
    _require_caller(current_user, action.driverId)
    return ledger.accept_ride(ride_id, action.driverId)


@router.post("/{ride_id}/decline", response_model=RideActionResult, response_model_by_alias=True)
def decline_ride(
    ride_id: str,
    action: DriverAction,
    ledger: RideLedger = Depends(get_ride_ledger),
    current_user: TokenData = Depends(get_current_user),
):
    _require_caller(current_user, action.driverId)
    return ledger.decline_ride(ride_id, action.driverId)


@router.post("/{ride_id}/cancel", response_model=RideActionResult, response_model_by_alias=True)
def cancel_ride(
    ride_id: str,
    action: UserAction,
    ledger: RideLedger = Depends(get_ride_ledger),
    current_user: TokenData = Depends(get_current_user),
):
    """Cancel a ride that has not finished yet. Either party may cancel."""
    _require_caller(current_user, action.userId)
    return ledger.cancel_ride(ride_id, action.userId)


@router.post("/{ride_id}/pin", response_model=PinRegenerationResult)
def regenerate_pin(
    ride_id: str,
    ledger: RideLedger = Depends(get_ride_ledger),
    current_user: TokenData = Depends(get_current_user),
):
    ride = ledger.get_ride(ride_id)
    if current_user.user_id not in (ride.passenger_id, ride.driver_id):
        raise UnauthorizedError("Only a party of the ride can regenerate its PIN")
    return ledger.regenerate_pin(ride_id)


@router.post("/{ride_id}/verify-pin", response_model=PinVerificationResult)
def verify_ride_pin(
    ride_id: str,
    body: PinVerificationRequest,
    ledger: RideLedger = Depends(get_ride_ledger),
    current_user: TokenData = Depends(get_current_user),
):
    """
    Driver enters the passenger's PIN to start the ride.

    A wrong PIN answers 200 with ``success: false``; nothing changes.
    """
    _require_caller(current_user, body.requesterId)
    return ledger.verify_pin(ride_id, body.requesterId, body.enteredPin, Role.DRIVER)


@router.post("/{ride_id}/verify-driver-pin", response_model=PinVerificationResult)
def verify_driver_pin(
    ride_id: str,
    body: PinVerificationRequest,
    ledger: RideLedger = Depends(get_ride_ledger),
    current_user: TokenData = Depends(get_current_user),
):
    """Passenger enters the PIN shown to the driver to start the ride."""
    _require_caller(current_user, body.requesterId)
    return ledger.verify_pin(ride_id, body.requesterId, body.enteredPin, Role.PASSENGER, driver_id=body.driverId)


@router.post("/{ride_id}/complete", response_model=RideActionResult, response_model_by_alias=True)
def complete_ride(
    ride_id: str,
    action: DriverAction,
    ledger: RideLedger = Depends(get_ride_ledger),
    current_user: TokenData = Depends(get_current_user),
):
    _require_caller(current_user, action.driverId)
    return ledger.complete_ride(ride_id, action.driverId)


@router.post("/{ride_id}/end", response_model=RideActionResult, response_model_by_alias=True)
def end_ride(
    ride_id: str,
    action: PassengerAction,
    ledger: RideLedger = Depends(get_ride_ledger),
    current_user: TokenData = Depends(get_current_user),
):
    _require_caller(current_user, action.passengerId)
    return ledger.end_ride(ride_id, action.passengerId)


@router.post("/{ride_id}/payment", response_model=PaymentConfirmationResult)
def confirm_payment(
    ride_id: str,
    body: PaymentConfirmationRequest,
    ledger: RideLedger = Depends(get_ride_ledger),
    current_user: TokenData = Depends(get_current_user),
) -> PaymentConfirmationResult:
    """Passenger reports whether the fare was paid. Repeating the same answer is a no-op."""
    _require_caller(current_user, body.passengerId)
    return ledger.confirm_payment(ride_id, body.passengerId, body.paid)
