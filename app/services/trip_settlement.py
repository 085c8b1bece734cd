"""
Opening and closing the billable Trip behind a ride.
"""

import logging
from typing import Optional

from app.core.clock import Clock
from app.core.exceptions import EstimatedFareMissingError, NoOngoingTripError
from app.db.stores import RideStore, TripStore
from app.models import ONGOING, Ride, Trip
from app.schemas.trip import TripEndResult

logger = logging.getLogger(__name__)


class TripSettlement:
    def __init__(self, trips: TripStore, rides: RideStore, clock: Clock):
        self.trips = trips
        self.rides = rides
        self.clock = clock

    def open_trip(self, passenger_id: int, driver_id: int, reservation: bool, ride: Optional[Ride] = None) -> Trip:
        """
        Insert an ongoing trip and link it to ``ride``, or when no ride is
        given, to the pair's newest ride that has no trip yet. Flushes but
        does not commit.
        """
        trip = self.trips.add(Trip(
            driver_id=driver_id,
            passenger_id=passenger_id,
            start_time=self.clock.now_ms(),
            end_time=ONGOING,
            fare=0,
            reservation=reservation,
        ))

        candidates = [ride] if ride is not None else self.rides.without_trip_newest_first(passenger_id, driver_id)
        for candidate in candidates:
            if self.rides.claim_trip(candidate, trip.id):
                logger.info(f"Linked trip {trip.id} to ride {candidate.ride_id}")
                break
        else:
            logger.info(f"Trip {trip.id} started without a ride to link (reservation={reservation})")

        return trip

    def start_trip(self, passenger_id: int, driver_id: int, reservation: bool) -> int:
        trip = self.open_trip(passenger_id, driver_id, reservation)
        self.trips.commit()
        return trip.id

    def settle_trip(self, trip: Trip, fare: float) -> Optional[int]:
        """Close ``trip`` with ``fare``. Returns the end time, or None if it was already closed."""
        end_time = self.clock.now_ms()
        if not self.trips.close(trip, end_time, fare):
            logger.warning(f"Trip {trip.id} was already closed; keeping its settled fare")
            return None
        logger.info(f"Trip {trip.id} settled with fare {fare}")
        return end_time

    def end_trip(self, passenger_id: int) -> TripEndResult:
        trip = self.trips.newest_ongoing_for_passenger(passenger_id)
        if not trip:
            raise NoOngoingTripError()

        ride = self.rides.get_by_trip_id(trip.id)
        if not ride or ride.estimated_fare is None:
            raise EstimatedFareMissingError()

        fare = ride.estimated_fare
        end_time = self.settle_trip(trip, fare)
        if end_time is None:
            # Closed concurrently between the read above and the update
            raise NoOngoingTripError()
        self.trips.commit()
        return TripEndResult(endTime=end_time, fare=fare)

    def get_fare_for_latest_trip(self, user_id: int) -> Optional[float]:
        """Fare of the user's newest trip as passenger, falling back to driver."""
        trip = self.trips.newest_for_passenger(user_id) or self.trips.newest_for_driver(user_id)
        return trip.fare if trip else None
