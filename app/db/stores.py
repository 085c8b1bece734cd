"""
Per-entity storage interfaces over a SQLAlchemy session.

Every component receives only the stores it needs. All stores built for one
request share that request's session, so ``commit`` on any of them ends the
unit of work. Methods that guard a state change return ``bool`` and perform
the check and the write in one conditional UPDATE.
"""

from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from app.models import (
    DeviceSession,
    Driver,
    Feedback,
    Location,
    Notification,
    ONGOING,
    Passenger,
    Ride,
    RideStatus,
    Trip,
    User,
    WorkSession,
)


class _Store:
    def __init__(self, db: Session):
        self.db = db

    def add(self, obj):
        self.db.add(obj)
        self.db.flush()
        return obj

    def flush(self) -> None:
        self.db.flush()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()


class UserStore(_Store):
    def get(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_phone(self, phone_number: str) -> Optional[User]:
        return self.db.query(User).filter(User.phone_number == phone_number).first()


class ProfileStore(_Store):
    def passenger_for(self, user_id: int) -> Optional[Passenger]:
        return self.db.query(Passenger).filter(Passenger.user_id == user_id).first()

    def driver_for(self, user_id: int) -> Optional[Driver]:
        return self.db.query(Driver).filter(Driver.user_id == user_id).first()

    def location_for(self, user_id: int) -> Optional[Location]:
        return self.db.query(Location).filter(Location.user_id == user_id).first()

    def record_completed_ride(self, passenger_id: int, driver_id: int, fare: float, distance: float) -> None:
        """Bump both parties' counters in SQL so concurrent completions do not lose updates."""
        self.db.query(Passenger)\
            .filter(Passenger.user_id == passenger_id)\
            .update({
                Passenger.number_of_rides_taken: Passenger.number_of_rides_taken + 1,
                Passenger.total_fare: Passenger.total_fare + fare,
                Passenger.total_distance: Passenger.total_distance + distance,
            }, synchronize_session=False)
        self.db.query(Driver)\
            .filter(Driver.user_id == driver_id)\
            .update({
                Driver.number_of_rides_completed: Driver.number_of_rides_completed + 1,
                Driver.total_fare: Driver.total_fare + fare,
                Driver.total_distance: Driver.total_distance + distance,
            }, synchronize_session=False)


class RideStore(_Store):
    def get_by_ride_id(self, ride_id: str) -> Optional[Ride]:
        return self.db.query(Ride).filter(Ride.ride_id == ride_id).first()

    def get_by_trip_id(self, trip_id: int) -> Optional[Ride]:
        return self.db.query(Ride).filter(Ride.trip_id == trip_id).first()

    def find_pending(self, passenger_id: int, driver_id: Optional[int]) -> Optional[Ride]:
        return self.db.query(Ride).filter(
            Ride.passenger_id == passenger_id,
            Ride.driver_id == driver_id,
            Ride.status == RideStatus.REQUESTED,
        ).first()

    def transition(self, ride: Ride, expected: Iterable[str], values: dict) -> bool:
        """Apply ``values`` only if the ride is still in one of the ``expected`` statuses."""
        updated = self.db.query(Ride)\
            .filter(Ride.id == ride.id, Ride.status.in_(tuple(expected)))\
            .update(values, synchronize_session=False)
        self.db.expire(ride)
        return updated == 1

    def claim_trip(self, ride: Ride, trip_id: int) -> bool:
        """Link ``trip_id`` to the ride unless another trip got there first."""
        updated = self.db.query(Ride)\
            .filter(Ride.id == ride.id, Ride.trip_id.is_(None))\
            .update({Ride.trip_id: trip_id}, synchronize_session=False)
        self.db.expire(ride)
        return updated == 1

    def without_trip_newest_first(self, passenger_id: int, driver_id: int) -> List[Ride]:
        return self.db.query(Ride)\
            .filter(
                Ride.passenger_id == passenger_id,
                Ride.driver_id == driver_id,
                Ride.trip_id.is_(None),
            )\
            .order_by(Ride.requested_at.desc(), Ride.id.desc())\
            .all()

    def first_active_as_driver(self, user_id: int) -> Optional[Ride]:
        return self.db.query(Ride).filter(
            Ride.driver_id == user_id,
            Ride.status.in_((RideStatus.ACCEPTED, RideStatus.IN_PROGRESS)),
        ).first()

    def first_active_as_passenger(self, user_id: int) -> Optional[Ride]:
        return self.db.query(Ride).filter(
            Ride.passenger_id == user_id,
            Ride.status.in_(RideStatus.PRE_TERMINAL),
        ).first()

    def newest_active_for_driver(self, driver_id: int) -> Optional[Ride]:
        return self.db.query(Ride)\
            .filter(
                Ride.driver_id == driver_id,
                Ride.status.in_((RideStatus.ACCEPTED, RideStatus.IN_PROGRESS)),
            )\
            .order_by(Ride.requested_at.desc(), Ride.id.desc())\
            .first()

    def in_progress_for_driver(self, driver_id: int) -> List[Ride]:
        return self.db.query(Ride).filter(
            Ride.driver_id == driver_id,
            Ride.status == RideStatus.IN_PROGRESS,
        ).all()

    def unpaid_for_driver(self, driver_id: int) -> List[Ride]:
        return self.db.query(Ride).filter(
            Ride.driver_id == driver_id,
            Ride.trip_paid.is_(False),
        ).all()


class TripStore(_Store):
    def get(self, trip_id: int) -> Optional[Trip]:
        return self.db.get(Trip, trip_id)

    def newest_ongoing_for_passenger(self, passenger_id: int) -> Optional[Trip]:
        return self.db.query(Trip)\
            .filter(Trip.passenger_id == passenger_id, Trip.end_time == ONGOING)\
            .order_by(Trip.start_time.desc(), Trip.id.desc())\
            .first()

    def newest_for_passenger(self, passenger_id: int) -> Optional[Trip]:
        return self.db.query(Trip)\
            .filter(Trip.passenger_id == passenger_id)\
            .order_by(Trip.start_time.desc(), Trip.id.desc())\
            .first()

    def newest_for_driver(self, driver_id: int) -> Optional[Trip]:
        return self.db.query(Trip)\
            .filter(Trip.driver_id == driver_id)\
            .order_by(Trip.start_time.desc(), Trip.id.desc())\
            .first()

    def started_between(self, driver_id: int, start_ms: int, end_ms: int) -> List[Trip]:
        """Driver's trips with ``start_ms <= start_time < end_ms``."""
        return self.db.query(Trip).filter(
            Trip.driver_id == driver_id,
            Trip.start_time >= start_ms,
            Trip.start_time < end_ms,
        ).all()

    def close(self, trip: Trip, end_time: int, fare: float) -> bool:
        """Close an ongoing trip; False if it was already closed."""
        updated = self.db.query(Trip)\
            .filter(Trip.id == trip.id, Trip.end_time == ONGOING)\
            .update({Trip.end_time: end_time, Trip.fare: fare}, synchronize_session=False)
        self.db.expire(trip)
        return updated == 1


class WorkSessionStore(_Store):
    def newest_for_driver(self, driver_id: int) -> Optional[WorkSession]:
        return self.db.query(WorkSession)\
            .filter(WorkSession.driver_id == driver_id)\
            .order_by(WorkSession.start_time.desc(), WorkSession.id.desc())\
            .first()

    def open_for_driver(self, driver_id: int) -> Optional[WorkSession]:
        return self.db.query(WorkSession).filter(
            WorkSession.driver_id == driver_id,
            WorkSession.end_time.is_(None),
        ).first()

    def finished_started_between(self, driver_id: int, start_ms: int, end_ms: int) -> List[WorkSession]:
        return self.db.query(WorkSession).filter(
            WorkSession.driver_id == driver_id,
            WorkSession.start_time >= start_ms,
            WorkSession.start_time < end_ms,
            WorkSession.end_time.isnot(None),
        ).all()


class DeviceSessionStore(_Store):
    def get_by_device(self, device_id: str) -> Optional[DeviceSession]:
        return self.db.query(DeviceSession).filter(DeviceSession.device_id == device_id).first()

    def active_for_user(self, user_id: int) -> List[DeviceSession]:
        return self.db.query(DeviceSession).filter(
            DeviceSession.user_id == user_id,
            DeviceSession.is_active.is_(True),
        ).all()

    def deactivate_device(self, device_id: str) -> int:
        return self.db.query(DeviceSession)\
            .filter(DeviceSession.device_id == device_id, DeviceSession.is_active.is_(True))\
            .update({DeviceSession.is_active: False}, synchronize_session=False)

    def deactivate_user(self, user_id: int) -> int:
        return self.db.query(DeviceSession)\
            .filter(DeviceSession.user_id == user_id, DeviceSession.is_active.is_(True))\
            .update({DeviceSession.is_active: False}, synchronize_session=False)

    def deactivate_idle_since(self, cutoff_ms: int) -> int:
        return self.db.query(DeviceSession)\
            .filter(DeviceSession.is_active.is_(True), DeviceSession.last_activity_at < cutoff_ms)\
            .update({DeviceSession.is_active: False}, synchronize_session=False)


class FeedbackStore(_Store):
    def get_by_ride(self, ride_id: str) -> Optional[Feedback]:
        return self.db.query(Feedback).filter(Feedback.ride_id == ride_id).first()

    def for_passenger(self, passenger_id: int) -> List[Feedback]:
        return self.db.query(Feedback)\
            .filter(Feedback.passenger_id == passenger_id)\
            .order_by(Feedback.submitted_at.desc(), Feedback.id.desc())\
            .all()

    def for_driver(self, driver_id: int) -> List[Feedback]:
        return self.db.query(Feedback)\
            .filter(Feedback.driver_id == driver_id)\
            .order_by(Feedback.submitted_at.desc(), Feedback.id.desc())\
            .all()


class NotificationStore(_Store):
    def get(self, notification_id: int) -> Optional[Notification]:
        return self.db.get(Notification, notification_id)

    def for_user(self, user_id: int, unread_only: bool = False, limit: int = 50) -> List[Notification]:
        query = self.db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))
        return query.order_by(Notification.sent_at.desc(), Notification.id.desc()).limit(limit).all()

    def mark_all_read(self, user_id: int, read_at: int) -> int:
        return self.db.query(Notification)\
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))\
            .update({Notification.is_read: True, Notification.read_at: read_at}, synchronize_session=False)
