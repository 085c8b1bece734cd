"""
SQLAlchemy models for accounts and the per-role profiles hanging off them.
"""

from sqlalchemy import Column, String, Integer, BigInteger, Float, Boolean, ForeignKey
from sqlalchemy.orm import relationship

from app.db.session import Base
from app.db.base_model import BaseModel


class AccountType:
    PASSENGER = "passenger"
    DRIVER = "driver"
    BOTH = "both"


class Role:
    PASSENGER = "passenger"
    DRIVER = "driver"


class User(Base, BaseModel):
    """
    A TaxiTap account. ``account_type`` is what the account may do,
    ``current_active_role`` is what it is doing right now.
    """
    __tablename__ = "taxiTap_users"

    name = Column(String, nullable=False)
    email = Column(String, nullable=False, default="")
    phone_number = Column(String, nullable=False, unique=True, index=True)
    password = Column(String, nullable=False)  # passlib hash, never the raw password
    age = Column(Integer, nullable=False, default=18)

    is_verified = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    account_type = Column(String, nullable=False, index=True)  # passenger | driver | both
    current_active_role = Column(String, nullable=True, index=True)  # passenger | driver

    last_role_switch_at = Column(BigInteger, nullable=True)
    last_login_at = Column(BigInteger, nullable=True)
    updated_at_ms = Column(BigInteger, nullable=True)

    passenger_profile = relationship("Passenger", back_populates="user", uselist=False)
    driver_profile = relationship("Driver", back_populates="user", uselist=False)

    def can_act_as(self, role: str) -> bool:
        return self.account_type == AccountType.BOTH or self.account_type == role

    def __repr__(self):
        return f"<User {self.id} {self.account_type}/{self.current_active_role}>"


class Passenger(Base, BaseModel):
    """Passenger-side counters for a user."""
    __tablename__ = "passengers"

    user_id = Column(Integer, ForeignKey("taxiTap_users.id"), nullable=False, unique=True)
    number_of_rides_taken = Column(Integer, nullable=False, default=0)
    total_distance = Column(Float, nullable=False, default=0)
    total_fare = Column(Float, nullable=False, default=0)
    average_rating = Column(Float, nullable=True)

    user = relationship("User", back_populates="passenger_profile")


class Driver(Base, BaseModel):
    """Driver-side counters for a user."""
    __tablename__ = "drivers"

    user_id = Column(Integer, ForeignKey("taxiTap_users.id"), nullable=False, unique=True)
    number_of_rides_completed = Column(Integer, nullable=False, default=0)
    total_distance = Column(Float, nullable=False, default=0)
    total_fare = Column(Float, nullable=False, default=0)
    average_rating = Column(Float, nullable=True)
    taxi_association = Column(String, nullable=False, default="")

    user = relationship("User", back_populates="driver_profile")


class Location(Base, BaseModel):
    """Last known position of a user, read by proximity queries."""
    __tablename__ = "locations"

    user_id = Column(Integer, ForeignKey("taxiTap_users.id"), nullable=False, unique=True)
    latitude = Column(Float, nullable=False, default=0)
    longitude = Column(Float, nullable=False, default=0)
    role = Column(String, nullable=False)  # passenger | driver | both
