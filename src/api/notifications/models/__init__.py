"""Notifications models package."""
from src.api.notifications.models.notification import Notification

__all__ = ["Notification"]
