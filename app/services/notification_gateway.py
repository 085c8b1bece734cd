"""
Side-effect notifications for ride lifecycle events.

Ride handlers only talk to ``NotificationGateway``. The default implementation
records an in-app notification row; delivering it as a push message is left
to whatever transport reads the table.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from app.core.clock import Clock
from app.core.exceptions import NotFoundError
from app.db.stores import NotificationStore
from app.models import Notification, Ride

logger = logging.getLogger(__name__)

# event -> (title, message, priority)
TEMPLATES = {
    "ride_requested": ("New Ride Request", "New ride request from {start} to {end}", "high"),
    "ride_accepted": ("Ride Accepted", "Your ride has been accepted. Driver is on the way!", "high"),
    "ride_started": ("Ride Started", "Your ride has started. Enjoy your journey!", "medium"),
    "ride_completed": ("Ride Completed", "Your ride has been completed. Thank you for using TaxiTap!", "medium"),
    "ride_cancelled": ("Ride Cancelled", "The passenger cancelled the ride from {start}.", "high"),
    "ride_declined": ("Ride Declined", "Your driver is unable to take the ride from {start}.", "high"),
    "payment_received": ("Payment Received", "The passenger confirmed payment of R{fare}.", "medium"),
}


class NotificationGateway(ABC):
    """Interface the ride components notify through."""

    @abstractmethod
    def notify(self, event: str, ride: Ride, recipient_id: Optional[int]) -> None:
        ...


class InAppNotificationGateway(NotificationGateway):
    """Stores notifications in the ``notifications`` table. Does not commit."""

    def __init__(self, notifications: NotificationStore, clock: Clock):
        self.notifications = notifications
        self.clock = clock

    def notify(self, event: str, ride: Ride, recipient_id: Optional[int]) -> None:
        if recipient_id is None:
            return
        if event not in TEMPLATES:
            raise ValueError(f"Unknown notification event: {event}")

        title, template, priority = TEMPLATES[event]
        fare = ride.final_fare if ride.final_fare is not None else ride.estimated_fare
        message = template.format(
            start=ride.start_address,
            end=ride.end_address,
            fare=f"{fare or 0:.2f}",
        )
        self.notifications.add(Notification(
            user_id=recipient_id,
            type=event,
            title=title,
            message=message,
            priority=priority,
            ride_id=ride.ride_id,
            is_read=False,
            sent_at=self.clock.now_ms(),
        ))
        logger.info(f"Queued '{event}' notification for user {recipient_id} (ride {ride.ride_id})")

    def list_notifications(self, user_id: int, unread_only: bool = False) -> List[Notification]:
        return self.notifications.for_user(user_id, unread_only=unread_only)

    def mark_as_read(self, notification_id: int) -> Notification:
        notification = self.notifications.get(notification_id)
        if not notification:
            raise NotFoundError(f"Notification with id {notification_id} not found")
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = self.clock.now_ms()
            self.notifications.commit()
        return notification

    def mark_all_as_read(self, user_id: int) -> int:
        count = self.notifications.mark_all_read(user_id, self.clock.now_ms())
        self.notifications.commit()
        return count
