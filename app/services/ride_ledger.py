"""
Ride lifecycle: request, accept, PIN-gated start, completion, cancellation
and payment confirmation.

Status changes are written with ``RideStore.transition`` so the status check
and the write happen in one conditional UPDATE; a caller that loses a race
gets ``InvalidStateError`` instead of repeating the side effects.
"""

import logging
import re
import secrets
from typing import Optional

from app.core.clock import Clock
from app.core.exceptions import InvalidStateError, NotFoundError, UnauthorizedError, ValidationError
from app.db.stores import ProfileStore, RideStore, UserStore
from app.models import Ride, RideStatus, Role
from app.schemas.ride import (
    ActiveTripsSummary,
    PassengerFare,
    PaymentConfirmationResult,
    PinRegenerationResult,
    PinVerificationResult,
    RideActionResult,
    RideRequestCreate,
    RideRequestResult,
    RideResponse,
)
from app.services.notification_gateway import NotificationGateway
from app.services.trip_settlement import TripSettlement

logger = logging.getLogger(__name__)

PIN_PATTERN = re.compile(r"^\d{4}$")


def generate_ride_pin() -> str:
    """Random 4-digit PIN in 1000..9999."""
    return str(1000 + secrets.randbelow(9000))


class RideLedger:
    def __init__(
        self,
        rides: RideStore,
        users: UserStore,
        profiles: ProfileStore,
        settlement: TripSettlement,
        notifier: NotificationGateway,
        clock: Clock,
    ):
        self.rides = rides
        self.users = users
        self.profiles = profiles
        self.settlement = settlement
        self.notifier = notifier
        self.clock = clock

    # -- lookups -----------------------------------------------------------

    def get_ride(self, ride_id: str) -> Ride:
        ride = self.rides.get_by_ride_id(ride_id)
        if not ride:
            raise NotFoundError("Ride not found")
        return ride

    def get_active_ride_for_driver(self, driver_id: int) -> Optional[Ride]:
        return self.rides.newest_active_for_driver(driver_id)

    def _transition(self, ride: Ride, expected, values: dict) -> None:
        previous = ride.status
        if not self.rides.transition(ride, expected, values):
            # Re-read after expire shows who won the race
            raise InvalidStateError(f"Ride status changed concurrently. Current status: {ride.status}")
        logger.info(f"Ride {ride.ride_id}: {previous} -> {ride.status}")

    # -- lifecycle ---------------------------------------------------------

    def request_ride(self, request: RideRequestCreate) -> RideRequestResult:
        if not self.users.get(request.passengerId):
            raise NotFoundError("Passenger not found")
        if request.driverId is not None:
            driver = self.users.get(request.driverId)
            if not driver or not driver.can_act_as(Role.DRIVER):
                raise NotFoundError("Driver not found")
            if request.driverId == request.passengerId:
                raise InvalidStateError("Cannot request a ride from yourself")

        existing = self.rides.find_pending(request.passengerId, request.driverId)
        if existing:
            logger.info(f"Duplicate ride request for passenger {request.passengerId} and driver {request.driverId}")
            return RideRequestResult(
                rideId=existing.ride_id,
                message=f"Ride request already exists from {existing.start_address} to {existing.end_address}",
                estimatedFare=existing.estimated_fare,
                isDuplicate=True,
            )

        now = self.clock.now_ms()
        ride = self.rides.add(Ride(
            ride_id=f"ride_{now}_{secrets.token_hex(5)[:9]}",
            passenger_id=request.passengerId,
            driver_id=request.driverId,
            status=RideStatus.REQUESTED,
            start_address=request.startLocation.address,
            start_latitude=request.startLocation.coordinates.latitude,
            start_longitude=request.startLocation.coordinates.longitude,
            end_address=request.endLocation.address,
            end_latitude=request.endLocation.coordinates.latitude,
            end_longitude=request.endLocation.coordinates.longitude,
            requested_at=now,
            estimated_fare=round(request.estimatedFare, 2) if request.estimatedFare is not None else None,
            estimated_distance=round(request.estimatedDistance, 2) if request.estimatedDistance is not None else None,
        ))
        self.notifier.notify("ride_requested", ride, ride.driver_id)
        self.rides.commit()

        logger.info(f"Ride {ride.ride_id} requested by passenger {ride.passenger_id}")
        return RideRequestResult(
            rideId=ride.ride_id,
            message=f"Ride requested successfully from {ride.start_address} to {ride.end_address}",
            estimatedFare=ride.estimated_fare,
        )

    def accept_ride(self, ride_id: str, driver_id: int) -> Ride:
        driver = self.users.get(driver_id)
        if not driver or not driver.can_act_as(Role.DRIVER):
            raise NotFoundError("Driver not found")

        ride = self.get_ride(ride_id)
        if ride.status != RideStatus.REQUESTED:
            raise InvalidStateError("Ride is not available for acceptance")
        if ride.driver_id is not None and ride.driver_id != driver_id:
            raise UnauthorizedError("Ride was requested from a different driver")

        now = self.clock.now_ms()
        self._transition(ride, [RideStatus.REQUESTED], {
            Ride.status: RideStatus.ACCEPTED,
            Ride.driver_id: driver_id,
            Ride.accepted_at: now,
            Ride.ride_pin: generate_ride_pin(),
            Ride.pin_regenerated_at: now,
        })
        self.notifier.notify("ride_accepted", ride, ride.passenger_id)
        self.rides.commit()
        return ride

    def regenerate_pin(self, ride_id: str) -> PinRegenerationResult:
        ride = self.get_ride(ride_id)
        ride.ride_pin = generate_ride_pin()
        ride.pin_regenerated_at = self.clock.now_ms()
        self.rides.commit()

        logger.info(f"PIN regenerated for ride {ride.ride_id}")
        return PinRegenerationResult(
            success=True,
            newPin=ride.ride_pin,
            ride=RideResponse.model_validate(ride),
            message="PIN regenerated successfully",
        )

    def verify_pin(
        self,
        ride_id: str,
        requester_id: int,
        entered_pin: str,
        initiated_by: str,
        driver_id: Optional[int] = None,
    ) -> PinVerificationResult:
        """
        Start the ride if ``entered_pin`` matches.

        ``initiated_by="driver"``: the assigned driver types the passenger's PIN.
        ``initiated_by="passenger"``: the passenger types it on their own device;
        ``driver_id``, when given, must be the assigned driver.
        """
        if not PIN_PATTERN.match(entered_pin):
            raise ValidationError("PIN must be exactly 4 digits")

        ride = self.get_ride(ride_id)
        if initiated_by == Role.DRIVER:
            if ride.driver_id != requester_id:
                raise UnauthorizedError("Unauthorized: You are not the driver for this ride")
            counterpart = "passenger"
        elif initiated_by == Role.PASSENGER:
            if ride.passenger_id != requester_id:
                raise UnauthorizedError("Unauthorized: You are not the passenger for this ride")
            if driver_id is not None and ride.driver_id != driver_id:
                raise UnauthorizedError("Driver mismatch")
            counterpart = "driver"
        else:
            raise ValueError(f"Unknown PIN initiator: {initiated_by}")

        if ride.status != RideStatus.ACCEPTED:
            raise InvalidStateError(f"Cannot start ride. Current status: {ride.status}")

        if not ride.ride_pin or ride.ride_pin != entered_pin:
            logger.info(f"Wrong PIN entered for ride {ride.ride_id} by user {requester_id}")
            return PinVerificationResult(
                success=False,
                message=f"Invalid PIN. Please check with the {counterpart}.",
            )

        now = self.clock.now_ms()
        self._transition(ride, [RideStatus.ACCEPTED], {
            Ride.status: RideStatus.IN_PROGRESS,
            Ride.started_at: now,
            Ride.pin_verified_at: now,
        })
        # A reservation may already have started the trip for this ride
        trip = ride.trip or self.settlement.open_trip(ride.passenger_id, ride.driver_id, reservation=False, ride=ride)
        self.notifier.notify("ride_started", ride, ride.passenger_id)
        self.rides.commit()

        return PinVerificationResult(
            success=True,
            message="PIN verified successfully! Ride started.",
            ride=RideResponse.model_validate(ride),
            tripId=trip.id,
        )

    def decline_ride(self, ride_id: str, driver_id: int) -> RideActionResult:
        ride = self.get_ride(ride_id)
        if ride.driver_id != driver_id:
            raise UnauthorizedError("Only the assigned driver can decline this ride")
        if ride.status not in (RideStatus.REQUESTED, RideStatus.ACCEPTED):
            raise InvalidStateError("Ride is not pending")

        self._transition(ride, [RideStatus.REQUESTED, RideStatus.ACCEPTED], {Ride.status: RideStatus.DECLINED})
        self.notifier.notify("ride_declined", ride, ride.passenger_id)
        self.rides.commit()
        return RideActionResult(id=ride.ride_id, message="Ride declined by driver.")

    def cancel_ride(self, ride_id: str, user_id: int) -> RideActionResult:
        ride = self.get_ride(ride_id)
        if user_id not in (ride.passenger_id, ride.driver_id):
            raise UnauthorizedError("User is not authorized to cancel this ride")
        if ride.is_terminal():
            raise InvalidStateError(f"Ride can no longer be cancelled. Current status: {ride.status}")

        self._transition(ride, RideStatus.PRE_TERMINAL, {Ride.status: RideStatus.CANCELLED})
        trip = ride.trip
        if trip is not None and trip.is_ongoing:
            # Cancelled rides settle no fare
            self.settlement.settle_trip(trip, 0)
        if user_id == ride.passenger_id:
            self.notifier.notify("ride_cancelled", ride, ride.driver_id)
        else:
            self.notifier.notify("ride_declined", ride, ride.passenger_id)
        self.rides.commit()
        return RideActionResult(id=ride.ride_id, message="Ride cancelled successfully")

    def complete_ride(self, ride_id: str, driver_id: int) -> RideActionResult:
        """Driver marks an in-progress ride as finished."""
        ride = self.get_ride(ride_id)
        if ride.driver_id != driver_id:
            raise UnauthorizedError("Only the assigned driver can complete this ride")
        self._finish(ride)
        return RideActionResult(id=ride.ride_id, message="Ride marked as completed.")

    def end_ride(self, ride_id: str, passenger_id: int) -> RideActionResult:
        """Passenger ends an in-progress ride from their device."""
        ride = self.get_ride(ride_id)
        if ride.passenger_id != passenger_id:
            raise UnauthorizedError("Only the assigned passenger can end this ride")
        self._finish(ride)
        return RideActionResult(id=ride.ride_id, message="Ride completed successfully")

    def _finish(self, ride: Ride) -> None:
        if ride.status != RideStatus.IN_PROGRESS:
            raise InvalidStateError("Ride is not in progress")

        fare = ride.estimated_fare
        self._transition(ride, [RideStatus.IN_PROGRESS], {
            Ride.status: RideStatus.COMPLETED,
            Ride.completed_at: self.clock.now_ms(),
            Ride.final_fare: fare,
        })

        trip = ride.trip
        if trip is not None and trip.is_ongoing:
            if fare is None:
                logger.warning(f"Ride {ride.ride_id} has no estimated fare; trip {trip.id} left open")
            else:
                self.settlement.settle_trip(trip, fare)

        self.profiles.record_completed_ride(ride.passenger_id, ride.driver_id, fare or 0, ride.estimated_distance or 0)
        self.notifier.notify("ride_completed", ride, ride.passenger_id)
        self.rides.commit()

    def confirm_payment(self, ride_id: str, passenger_id: int, paid: bool) -> PaymentConfirmationResult:
        ride = self.get_ride(ride_id)
        if ride.passenger_id != passenger_id:
            raise UnauthorizedError("Only the passenger can confirm payment for this ride")

        if ride.trip_paid is not paid:
            ride.trip_paid = paid
            ride.payment_confirmed_at = self.clock.now_ms()
            if paid:
                self.notifier.notify("payment_received", ride, ride.driver_id)
            self.rides.commit()
            logger.info(f"Ride {ride.ride_id} payment recorded as {'paid' if paid else 'unpaid'}")

        return PaymentConfirmationResult(
            success=True,
            message="Payment confirmed" if paid else "Payment marked as not made",
            rideId=ride.ride_id,
        )

    # -- driver dashboard --------------------------------------------------

    def get_active_trips(self, driver_id: int) -> ActiveTripsSummary:
        active = self.rides.in_progress_for_driver(driver_id)
        unpaid = self.rides.unpaid_for_driver(driver_id)

        passengers = []
        paid_count = 0
        no_response_count = 0
        for ride in active:
            if ride.trip_paid is True:
                paid_count += 1
            elif ride.trip_paid is None:
                no_response_count += 1
            if ride.passenger:
                passengers.append(self._passenger_fare(ride))

        return ActiveTripsSummary(
            activeCount=len(active),
            paidCount=paid_count,
            unpaidCount=len(unpaid),
            noResponseCount=no_response_count,
            passengers=passengers,
            passengersUnpaid=[self._passenger_fare(r, with_requested_at=True) for r in unpaid if r.passenger],
        )

    @staticmethod
    def _passenger_fare(ride: Ride, with_requested_at: bool = False) -> PassengerFare:
        fare = ride.final_fare if ride.final_fare is not None else ride.estimated_fare
        return PassengerFare(
            name=ride.passenger.name,
            phoneNumber=ride.passenger.phone_number,
            fare=fare or 0,
            tripPaid=ride.trip_paid,
            requestedAt=ride.requested_at if with_requested_at else None,
        )
