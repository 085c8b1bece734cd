"""
Dependency providers wiring request-scoped stores into the services.

Every store built for a request shares that request's database session, so a
service commit covers everything the request wrote.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.clock import Clock
from app.db.session import get_db
from app.db.stores import (
    DeviceSessionStore,
    FeedbackStore,
    NotificationStore,
    ProfileStore,
    RideStore,
    TripStore,
    UserStore,
    WorkSessionStore,
)
from app.services.device_sessions import DeviceSessionRegistry
from app.services.earnings_aggregator import EarningsAggregator
from app.services.feedback_service import FeedbackService
from app.services.notification_gateway import InAppNotificationGateway
from app.services.ride_ledger import RideLedger
from app.services.role_switch import RoleSwitchGuard
from app.services.trip_settlement import TripSettlement
from app.services.user_accounts import UserAccounts
from app.services.work_sessions import WorkSessions

_clock = Clock()


def get_clock() -> Clock:
    return _clock


def get_notifier(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)) -> InAppNotificationGateway:
    return InAppNotificationGateway(NotificationStore(db), clock)


def get_trip_settlement(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)) -> TripSettlement:
    return TripSettlement(TripStore(db), RideStore(db), clock)


def get_ride_ledger(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    settlement: TripSettlement = Depends(get_trip_settlement),
    notifier: InAppNotificationGateway = Depends(get_notifier),
) -> RideLedger:
    return RideLedger(RideStore(db), UserStore(db), ProfileStore(db), settlement, notifier, clock)


def get_device_sessions(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)) -> DeviceSessionRegistry:
    return DeviceSessionRegistry(DeviceSessionStore(db), UserStore(db), clock)


def get_role_switch(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)) -> RoleSwitchGuard:
    return RoleSwitchGuard(UserStore(db), RideStore(db), ProfileStore(db), clock)


def get_earnings(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)) -> EarningsAggregator:
    return EarningsAggregator(TripStore(db), WorkSessionStore(db), clock)


def get_work_sessions(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)) -> WorkSessions:
    return WorkSessions(WorkSessionStore(db), clock)


def get_feedback(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)) -> FeedbackService:
    return FeedbackService(FeedbackStore(db), RideStore(db), clock)


def get_user_accounts(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    device_sessions: DeviceSessionRegistry = Depends(get_device_sessions),
) -> UserAccounts:
    return UserAccounts(UserStore(db), device_sessions, clock)
