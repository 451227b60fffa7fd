#!/usr/bin/env python3
"""
Notification Tracker - Deduplication keys.

A notification is identified by (user, match, event type, cycle). The hash
of that key is stored in notification.dedup_hash under a unique constraint,
so two workers racing to emit the same event insert exactly one row.

Usage:
    from notification.tracker import NotificationTracker

    tracker = NotificationTracker()
    dedup_hash = tracker.generate_dedup_hash(
        user_id="user123",
        match_id="match456",
        event_type="mutual_match",
    )
"""

import hashlib
import logging
from typing import Any, Optional

from notification.message_builder import NotificationRequest

logger = logging.getLogger(__name__)


class NotificationTracker:
    """Derives the dedup hash for notification events."""

    def generate_dedup_hash(
        self,
        user_id: Any,
        match_id: Optional[Any],
        event_type: str,
        cycle: Optional[str] = None
    ) -> str:
        key = f"{user_id}:{match_id}:{event_type}:{cycle or ''}"
        return hashlib.sha256(key.encode('utf-8')).hexdigest()[:32]

    def hash_for(self, request: NotificationRequest) -> str:
        return self.generate_dedup_hash(request.user_id, request.match_id, request.type, request.cycle)
