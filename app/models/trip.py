from sqlalchemy import Column, Float, BigInteger, Integer, Boolean, ForeignKey, Index

from app.db.session import Base
from app.db.base_model import BaseModel

# end_time value of a trip that has not been closed yet
ONGOING = 0


class Trip(Base, BaseModel):
    """
    The billable part of a ride: opened on PIN verification (or when a
    reservation starts) and closed once with the settled fare.
    """
    __tablename__ = "trips"

    driver_id = Column(Integer, ForeignKey("taxiTap_users.id"), nullable=False)
    passenger_id = Column(Integer, ForeignKey("taxiTap_users.id"), nullable=True)
    start_time = Column(BigInteger, nullable=False)
    end_time = Column(BigInteger, nullable=False, default=ONGOING)
    fare = Column(Float, nullable=False, default=0)
    reservation = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("ix_trips_driver_start_time", "driver_id", "start_time"),
        Index("ix_trips_passenger_start_time", "passenger_id", "start_time"),
    )

    @property
    def is_ongoing(self) -> bool:
        return self.end_time == ONGOING


class WorkSession(Base, BaseModel):
    """An interval during which a driver was online. Open while end_time is NULL."""
    __tablename__ = "work_sessions"

    driver_id = Column(Integer, ForeignKey("taxiTap_users.id"), nullable=False)
    start_time = Column(BigInteger, nullable=False)
    end_time = Column(BigInteger, nullable=True)

    __table_args__ = (
        Index("ix_work_sessions_driver_start_time", "driver_id", "start_time"),
    )
