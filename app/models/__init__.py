"""
Import all models from their respective modules.
"""

# Accounts and profiles
from app.models.user import User, Passenger, Driver, Location, AccountType, Role

# Ride lifecycle
from app.models.ride import Ride, RideStatus, Feedback
from app.models.trip import Trip, WorkSession, ONGOING

# Sessions and notifications
from app.models.device_session import DeviceSession
from app.models.notification import Notification

# Export all models
__all__ = [
    "User",
    "Passenger",
    "Driver",
    "Location",
    "AccountType",
    "Role",

    "Ride",
    "RideStatus",
    "Feedback",
    "Trip",
    "WorkSession",
    "ONGOING",

    "DeviceSession",
    "Notification",
]
