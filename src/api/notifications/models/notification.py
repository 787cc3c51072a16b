from typing import Optional
from sqlmodel import Field
from src.api.common.constants.notifications import NotificationKind
from src.api.common.models.base import BaseModel, TimestampMixin


class Notification(BaseModel, TimestampMixin, table=True):
    """Outbound event addressed to a user; delivery happens elsewhere."""
    id: Optional[int] = Field(default=None, primary_key=True)
    target_user_id: int = Field(index=True)
    title: str
    message: str
    kind: NotificationKind = NotificationKind.INFO
    reference_type: Optional[str] = None
    reference_id: Optional[int] = None
    read: bool = False
