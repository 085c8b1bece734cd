from sqlalchemy import Column, String, Float, BigInteger, Integer, Boolean, ForeignKey, Text, Index
from sqlalchemy.orm import relationship

from app.db.session import Base
from app.db.base_model import BaseModel


class RideStatus:
    REQUESTED = "requested"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    DECLINED = "declined"

    TERMINAL = (COMPLETED, CANCELLED, DECLINED)
    PRE_TERMINAL = (REQUESTED, ACCEPTED, IN_PROGRESS)


class Ride(Base, BaseModel):
    """
    A passenger's request for transport and its progress through the
    requested -> accepted -> in_progress -> completed lifecycle.

    ``ride_id`` is the external key every API call uses; ``id`` stays internal.
    """
    __tablename__ = "rides"

    ride_id = Column(String, nullable=False, unique=True, index=True)
    passenger_id = Column(Integer, ForeignKey("taxiTap_users.id"), nullable=False, index=True)
    driver_id = Column(Integer, ForeignKey("taxiTap_users.id"), nullable=True, index=True)
    status = Column(String, nullable=False, default=RideStatus.REQUESTED, index=True)

    start_address = Column(String, nullable=False)
    start_latitude = Column(Float, nullable=False)
    start_longitude = Column(Float, nullable=False)
    end_address = Column(String, nullable=False)
    end_latitude = Column(Float, nullable=False)
    end_longitude = Column(Float, nullable=False)

    ride_pin = Column(String(4), nullable=True)
    pin_regenerated_at = Column(BigInteger, nullable=True)
    pin_verified_at = Column(BigInteger, nullable=True)

    requested_at = Column(BigInteger, nullable=False, index=True)
    accepted_at = Column(BigInteger, nullable=True)
    started_at = Column(BigInteger, nullable=True)
    completed_at = Column(BigInteger, nullable=True)

    estimated_fare = Column(Float, nullable=True)
    final_fare = Column(Float, nullable=True)
    estimated_distance = Column(Float, nullable=True)

    # At most one trip per ride; claimed with a conditional update
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=True, unique=True)
    trip_paid = Column(Boolean, nullable=True)
    payment_confirmed_at = Column(BigInteger, nullable=True)

    passenger = relationship("User", foreign_keys=[passenger_id])
    driver = relationship("User", foreign_keys=[driver_id])
    trip = relationship("Trip")

    __table_args__ = (
        Index("ix_rides_passenger_driver", "passenger_id", "driver_id"),
    )

    def is_terminal(self) -> bool:
        return self.status in RideStatus.TERMINAL

    def __repr__(self):
        return f"<Ride {self.ride_id} {self.status}>"


class Feedback(Base, BaseModel):
    """A passenger's rating of a ride. One per ride."""
    __tablename__ = "feedback"

    ride_id = Column(String, ForeignKey("rides.ride_id"), nullable=False, unique=True)
    passenger_id = Column(Integer, ForeignKey("taxiTap_users.id"), nullable=False, index=True)
    driver_id = Column(Integer, ForeignKey("taxiTap_users.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    start_location = Column(String, nullable=True)
    end_location = Column(String, nullable=True)
    submitted_at = Column(BigInteger, nullable=False)

    driver = relationship("User", foreign_keys=[driver_id])
