import logging
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import select, update, func

from database.models import Notification
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class NotificationRepository(BaseRepository):
    def insert_if_absent(
        self,
        user_id: Any,
        type: str,
        title: str,
        content: str,
        dedup_hash: str,
        now: datetime,
        match_id: Optional[Any] = None,
        action_url: Optional[str] = None,
        action_text: Optional[str] = None
    ) -> bool:
        """Insert unless a notification with the same dedup hash exists. Returns True if inserted."""
        stmt = self._insert(Notification).values(
            user_id=user_id,
            match_id=match_id,
            type=type,
            title=title,
            content=content,
            action_url=action_url,
            action_text=action_text,
            dedup_hash=dedup_hash,
            is_read=False,
            created_at=now,
        ).on_conflict_do_nothing(index_elements=['dedup_hash'])
        result = self.db.execute(stmt)
        return result.rowcount == 1

    def list_for_user(self, user_id: Any, limit: int = 30) -> List[Notification]:
        stmt = (
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def count_unread(self, user_id: Any) -> int:
        stmt = select(func.count()).select_from(Notification).where(
            Notification.user_id == user_id,
            Notification.is_read.is_(False)
        )
        return int(self.db.execute(stmt).scalar_one())

    def mark_read(self, user_id: Any, now: datetime, notification_id: Optional[Any] = None) -> int:
        """Mark one (or, without an id, every) unread notification of the user as read."""
        stmt = update(Notification).where(
            Notification.user_id == user_id,
            Notification.is_read.is_(False)
        )
        if notification_id is not None:
            stmt = stmt.where(Notification.id == notification_id)
        stmt = stmt.values(is_read=True, read_at=now).execution_options(synchronize_session=False)
        result = self.db.execute(stmt)
        return result.rowcount
