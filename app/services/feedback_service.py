import logging
from typing import List

from sqlalchemy.exc import IntegrityError

from app.core.clock import Clock
from app.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from app.db.stores import FeedbackStore, RideStore
from app.models import Feedback
from app.schemas.feedback import FeedbackCreate, FeedbackResponse

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "Feedback already submitted for this ride."


class FeedbackService:
    def __init__(self, feedback: FeedbackStore, rides: RideStore, clock: Clock):
        self.feedback = feedback
        self.rides = rides
        self.clock = clock

    def save_feedback(self, data: FeedbackCreate) -> Feedback:
        ride = self.rides.get_by_ride_id(data.rideId)
        if not ride:
            raise NotFoundError("Ride not found")
        if ride.passenger_id != data.passengerId:
            raise UnauthorizedError("Only the ride's passenger can rate it")
        if ride.driver_id != data.driverId:
            raise UnauthorizedError("Driver did not serve this ride")
        if self.feedback.get_by_ride(data.rideId):
            raise ConflictError(DUPLICATE_MESSAGE)

        try:
            record = self.feedback.add(Feedback(
                ride_id=data.rideId,
                passenger_id=data.passengerId,
                driver_id=data.driverId,
                rating=data.rating,
                comment=data.comment,
                start_location=data.startLocation or ride.start_address,
                end_location=data.endLocation or ride.end_address,
                submitted_at=self.clock.now_ms(),
            ))
            self.feedback.commit()
        except IntegrityError:
            self.feedback.rollback()
            raise ConflictError(DUPLICATE_MESSAGE)

        logger.info(f"Feedback {record.id} saved for ride {data.rideId} (rating {data.rating})")
        return record

    def list_for_passenger(self, passenger_id: int) -> List[FeedbackResponse]:
        """Passenger's feedback history, each entry carrying the driver's name."""
        results = []
        for fb in self.feedback.for_passenger(passenger_id):
            item = FeedbackResponse.model_validate(fb)
            item.driver_name = fb.driver.name if fb.driver else "Unknown"
            results.append(item)
        return results

    def list_for_driver(self, driver_id: int) -> List[Feedback]:
        return self.feedback.for_driver(driver_id)

    def average_rating(self, driver_id: int) -> float:
        ratings = [fb.rating for fb in self.feedback.for_driver(driver_id) if fb.rating and fb.rating > 0]
        if not ratings:
            return 0
        return round(sum(ratings) / len(ratings), 1)
