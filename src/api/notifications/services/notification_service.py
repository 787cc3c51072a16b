from typing import List, Optional
from fastapi.logger import logger
from sqlmodel import Session, select
from src.api.common.exceptions import NotFoundError
from src.api.notifications.models.notification import Notification
from src.api.notifications.schemas.notification import NotificationEvent


class NotificationService:
    def __init__(self, db: Session):
        self.db = db

    def send(self, event: NotificationEvent) -> Optional[Notification]:
        """
        Record a notification inside the caller's transaction.

        The insert runs in a savepoint: any failure is logged and rolled back
        on its own, so the surrounding state transition still commits.
        """
        try:
            with self.db.begin_nested():
                notification = Notification(**event.model_dump())
                self.db.add(notification)
            return notification
        except Exception as e:
            logger.warning(
                f"Could not notify user {event.target_user_id} ({event.title}): {str(e)}")
            return None

    def send_many(self, user_ids: List[int], title: str, message: str, **kwargs) -> int:
        sent = 0
        for user_id in user_ids:
            try:
                event = NotificationEvent(target_user_id=user_id, title=title, message=message, **kwargs)
            except Exception as e:
                logger.warning(f"Could not build notification for user {user_id} ({title}): {str(e)}")
                continue
            if self.send(event):
                sent += 1
        return sent

    def get_notifications(self, target_user_id: int, unread_only: bool = False,
                          skip: int = 0, limit: int = 100) -> List[Notification]:
        """Get the notifications of a user, newest first"""
        statement = select(Notification).where(Notification.target_user_id == target_user_id)
        if unread_only:
            statement = statement.where(Notification.read == False)  # noqa: E712
        statement = statement.order_by(Notification.id.desc())
        return self.db.exec(statement.offset(skip).limit(limit)).all()

    def mark_read(self, notification_id: int) -> Notification:
        notification = self.db.get(Notification, notification_id)
        if not notification:
            raise NotFoundError("Notification", notification_id)
        notification.read = True
        notification.touch()
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification
