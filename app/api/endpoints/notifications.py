from typing import List

from fastapi import APIRouter, Depends

from app.api.deps import get_notifier
from app.schemas.notification import NotificationResponse, ReadAllResult
from app.services.notification_gateway import InAppNotificationGateway

router = APIRouter()


@router.get("/{user_id}", response_model=List[NotificationResponse])
def list_notifications(
    user_id: int,
    unread_only: bool = False,
    notifier: InAppNotificationGateway = Depends(get_notifier),
):
    """Newest first, at most 50."""
    return notifier.list_notifications(user_id, unread_only=unread_only)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
def mark_as_read(notification_id: int, notifier: InAppNotificationGateway = Depends(get_notifier)):
    return notifier.mark_as_read(notification_id)


@router.post("/user/{user_id}/read-all", response_model=ReadAllResult)
def mark_all_as_read(user_id: int, notifier: InAppNotificationGateway = Depends(get_notifier)):
    return ReadAllResult(count=notifier.mark_all_as_read(user_id))
