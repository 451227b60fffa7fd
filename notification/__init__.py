"""
Notification Module

In-app notification records for match lifecycle events, with
deduplication so each event is recorded at most once.

Usage:
    from notification import NotificationService

    service = NotificationService(base_url='https://app.example.com')
    with unit_of_work() as uow:
        service.notify(uow.notifications, service.builder.new_match(user_id, match_id, 72.5), now)
"""

from notification.message_builder import (
    NotificationMessageBuilder,
    NotificationRequest,
    NotificationType,
)

from notification.tracker import NotificationTracker

from notification.service import NotificationService

__all__ = [
    # Messages
    'NotificationMessageBuilder',
    'NotificationRequest',
    'NotificationType',
    # Tracker
    'NotificationTracker',
    # Service
    'NotificationService',
]
