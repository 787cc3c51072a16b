from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict
from src.api.common.constants.notifications import NotificationKind


class NotificationEvent(BaseModel):
    """Event to be delivered to a user"""
    target_user_id: int
    title: str
    message: str
    kind: NotificationKind = NotificationKind.INFO
    reference_type: Optional[str] = None
    reference_id: Optional[int] = None


class NotificationRead(NotificationEvent):
    """Schema for reading notification data"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    read: bool
    created_at: datetime
