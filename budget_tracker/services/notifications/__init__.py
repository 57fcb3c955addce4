"""Notification hooks package."""

from budget_tracker.services.notifications.hooks import CollectingNotificationHook
from budget_tracker.services.notifications.interface import NotificationHookInterface

__all__ = [
    "CollectingNotificationHook",
    "NotificationHookInterface",
]
