#!/usr/bin/env python3
"""
Notification Service with Deduplication

Records in-app notifications for match lifecycle events. Delivery (email,
push) happens elsewhere; this service only writes notification rows.

notify() runs inside the caller's unit of work, so a notification is
committed exactly when the state change that caused it is committed. The
dedup hash makes repeated or concurrent emits of the same event a no-op.

Usage:
    from notification.service import NotificationService

    service = NotificationService(base_url="https://app.example.com")

    with unit_of_work() as uow:
        ...
        request = service.builder.mutual_match(user_id, match_id, "Ada")
        service.notify(uow.notifications, request, now)
"""

import logging
import uuid
from typing import Any, Dict, Optional

from sqlalchemy.orm import sessionmaker

from core.errors import ValidationError
from core.utils import Clock, ensure_utc, parse_uuid, utcnow
from database.repositories import NotificationRepository
from database.uow import unit_of_work
from notification.message_builder import NotificationMessageBuilder, NotificationRequest
from notification.tracker import NotificationTracker

logger = logging.getLogger(__name__)


class NotificationService:
    """
    In-app notification writer and reader.

    Args:
        base_url: Prefix for action links
        enabled: When False, notify() records nothing
        session_factory: SQLAlchemy sessionmaker for the read/mark paths
        clock: Returns the current UTC time
        tracker: Dedup hash generator
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        enabled: bool = True,
        session_factory: Optional[sessionmaker] = None,
        clock: Clock = utcnow,
        tracker: Optional[NotificationTracker] = None
    ):
        self.builder = NotificationMessageBuilder(base_url or "")
        self.enabled = enabled
        self.session_factory = session_factory
        self.clock = clock
        self.tracker = tracker or NotificationTracker()

    def notify(self, repo: NotificationRepository, request: NotificationRequest, now=None) -> bool:
        """Record a notification unless the same event was already recorded.

        Returns:
            True if a row was inserted
        """
        if not self.enabled:
            logger.debug(f"Notifications disabled, dropping {request.type} for {request.user_id}")
            return False

        dedup_hash = self.tracker.hash_for(request)
        inserted = repo.insert_if_absent(
            user_id=uuid.UUID(request.user_id),
            type=request.type,
            title=request.title,
            content=request.content,
            dedup_hash=dedup_hash,
            now=now or self.clock(),
            match_id=uuid.UUID(request.match_id) if request.match_id else None,
            action_url=request.action_url,
            action_text=request.action_text,
        )
        if inserted:
            logger.info(f"Queued {request.type} notification for user {request.user_id}")
        else:
            logger.info(f"Duplicate {request.type} notification for user {request.user_id} suppressed")
        return inserted

    def list_notifications(self, user_id: Any, limit: int = 30) -> Dict[str, Any]:
        uid = parse_uuid(user_id, "user id")
        with unit_of_work(self.session_factory) as uow:
            rows = uow.notifications.list_for_user(uid, limit=limit)
            return {
                'notifications': [self._to_dict(n) for n in rows],
                'unread_count': uow.notifications.count_unread(uid),
            }

    def mark_read(self, user_id: Any, notification_id: Optional[Any] = None, mark_all: bool = False) -> int:
        """Mark one notification, or all of them, as read. Returns the number updated.

        Raises:
            ValidationError: if neither a notification id nor mark_all is given
        """
        uid = parse_uuid(user_id, "user id")
        if not mark_all and notification_id is None:
            raise ValidationError("Provide a notification id or mark_all")
        nid = None if mark_all else parse_uuid(notification_id, "notification id")

        with unit_of_work(self.session_factory) as uow:
            return uow.notifications.mark_read(uid, self.clock(), notification_id=nid)

    @staticmethod
    def _to_dict(notification) -> Dict[str, Any]:
        created_at = ensure_utc(notification.created_at)
        read_at = ensure_utc(notification.read_at)
        return {
            'id': str(notification.id),
            'type': notification.type,
            'title': notification.title,
            'content': notification.content,
            'action_url': notification.action_url,
            'action_text': notification.action_text,
            'match_id': str(notification.match_id) if notification.match_id else None,
            'is_read': bool(notification.is_read),
            'read_at': read_at.isoformat() if read_at else None,
            'created_at': created_at.isoformat() if created_at else None,
        }
