from typing import List
from fastapi import APIRouter, Depends
from sqlmodel import Session
from src.api.common.utils.database import get_db
from src.api.notifications.schemas.notification import NotificationRead
from src.api.notifications.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


def get_notification_service(db: Session = Depends(get_db)):
    return NotificationService(db)


@router.get("/", response_model=List[NotificationRead])
def get_notifications(
    user_id: int,
    unread_only: bool = False,
    skip: int = 0,
    limit: int = 100,
    notification_service: NotificationService = Depends(get_notification_service)
):
    """Get the notifications addressed to a user"""
    return notification_service.get_notifications(user_id, unread_only, skip, limit)


@router.post("/{notification_id}/read", response_model=NotificationRead)
def mark_notification_read(
    notification_id: int,
    notification_service: NotificationService = Depends(get_notification_service)
):
    """Mark a notification as read"""
    return notification_service.mark_read(notification_id)
