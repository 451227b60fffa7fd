#!/usr/bin/env python3
"""
Tests for the in-app notification system.

Tests cover:
1. Message building (anonymous interest signal, action links)
2. Deduplication tracker
3. NotificationService recording, listing and mark-read
"""

import unittest
import uuid
from datetime import timedelta

import pytest

from core.errors import ValidationError
from database.uow import unit_of_work
from notification import (
    NotificationMessageBuilder, NotificationRequest, NotificationService,
    NotificationTracker, NotificationType,
)
from tests import START_TIME, create_user


class TestMessageBuilder(unittest.TestCase):

    def setUp(self):
        self.builder = NotificationMessageBuilder("https://app.example.com")
        self.user_id = uuid.uuid4()
        self.match_id = uuid.uuid4()

    def test_new_match(self):
        request = self.builder.new_match(self.user_id, self.match_id, 72.46, cycle="c1")

        self.assertEqual(request.type, NotificationType.NEW_MATCH)
        self.assertIn("72", request.content)
        self.assertEqual(request.action_url, "https://app.example.com/match")
        self.assertEqual(request.user_id, str(self.user_id))
        self.assertEqual(request.match_id, str(self.match_id))
        self.assertEqual(request.cycle, "c1")

    def test_interest_signal_is_anonymous(self):
        request = self.builder.someone_interested(self.user_id, self.match_id)

        self.assertEqual(request.type, NotificationType.MATCH_INTEREST)
        self.assertEqual(request.title, "Someone is interested")

    def test_mutual_match_names_partner(self):
        request = self.builder.mutual_match(self.user_id, self.match_id, "Grace")

        self.assertEqual(request.type, NotificationType.MUTUAL_MATCH)
        self.assertIn("Grace", request.content)
        self.assertIsNone(request.cycle)

    def test_action_url_variants(self):
        self.assertEqual(NotificationMessageBuilder("")._matches_url(), "/match")
        self.assertEqual(
            NotificationMessageBuilder("https://example.com/app/")._matches_url(),
            "https://example.com/app/match",
        )
        self.assertEqual(
            NotificationMessageBuilder("https://example.com/app")._matches_url(),
            "https://example.com/app/match",
        )

    def test_format_score(self):
        self.assertEqual(NotificationMessageBuilder.format_score(85.4), "85")
        self.assertEqual(NotificationMessageBuilder.format_score(None), "?")


class TestNotificationTracker(unittest.TestCase):

    def setUp(self):
        self.tracker = NotificationTracker()

    def test_hash_is_stable(self):
        first = self.tracker.generate_dedup_hash("u1", "m1", "mutual_match")
        second = self.tracker.generate_dedup_hash("u1", "m1", "mutual_match")

        self.assertEqual(first, second)
        self.assertEqual(len(first), 32)

    def test_hash_depends_on_every_part(self):
        base = self.tracker.generate_dedup_hash("u1", "m1", "new_match", "c1")

        self.assertNotEqual(base, self.tracker.generate_dedup_hash("u2", "m1", "new_match", "c1"))
        self.assertNotEqual(base, self.tracker.generate_dedup_hash("u1", "m2", "new_match", "c1"))
        self.assertNotEqual(base, self.tracker.generate_dedup_hash("u1", "m1", "match_interest", "c1"))
        self.assertNotEqual(base, self.tracker.generate_dedup_hash("u1", "m1", "new_match", "c2"))

    def test_hash_for_request(self):
        request = NotificationRequest(
            user_id="u1", type="new_match", title="t", content="c", match_id="m1", cycle="c1"
        )

        self.assertEqual(
            self.tracker.hash_for(request),
            self.tracker.generate_dedup_hash("u1", "m1", "new_match", "c1"),
        )


@pytest.fixture
def recipient(session_factory):
    return create_user(session_factory, first_name="Rita")


def record(service, session_factory, request, now=START_TIME):
    with unit_of_work(session_factory) as uow:
        return service.notify(uow.notifications, request, now)


class TestNotificationService:

    def test_notify_records_once(self, notification_service, session_factory, recipient):
        request = notification_service.builder.mutual_match(recipient, uuid.uuid4(), "Grace")

        assert record(notification_service, session_factory, request) is True
        assert record(notification_service, session_factory, request) is False

        listed = notification_service.list_notifications(recipient)
        assert len(listed['notifications']) == 1
        assert listed['unread_count'] == 1

    def test_new_cycle_is_a_new_event(self, notification_service, session_factory, recipient):
        match_id = uuid.uuid4()
        builder = notification_service.builder

        record(notification_service, session_factory, builder.new_match(recipient, match_id, 80, cycle="first"))
        record(notification_service, session_factory, builder.new_match(recipient, match_id, 80, cycle="second"))

        assert notification_service.list_notifications(recipient)['unread_count'] == 2

    def test_disabled_service_records_nothing(self, session_factory, recipient):
        service = NotificationService(enabled=False, session_factory=session_factory)

        request = service.builder.mutual_match(recipient, uuid.uuid4())

        assert record(service, session_factory, request) is False
        assert service.list_notifications(recipient)['notifications'] == []

    def test_list_is_newest_first_and_limited(self, notification_service, session_factory, recipient):
        builder = notification_service.builder
        for hours in range(5):
            request = builder.mutual_match(recipient, uuid.uuid4(), f"Partner {hours}")
            record(notification_service, session_factory, request, START_TIME + timedelta(hours=hours))

        listed = notification_service.list_notifications(recipient, limit=3)

        assert [n['content'].split(" are ")[0] for n in listed['notifications']] == [
            "You and Partner 4", "You and Partner 3", "You and Partner 2",
        ]
        assert listed['unread_count'] == 5
        assert listed['notifications'][0]['action_url'] == "https://app.example.com/match"

    def test_list_only_shows_own_notifications(self, notification_service, session_factory, recipient):
        other = create_user(session_factory)
        record(notification_service, session_factory, notification_service.builder.mutual_match(other, uuid.uuid4()))

        assert notification_service.list_notifications(recipient)['notifications'] == []

    def test_mark_single_read(self, notification_service, session_factory, recipient, clock):
        builder = notification_service.builder
        record(notification_service, session_factory, builder.mutual_match(recipient, uuid.uuid4()))
        record(notification_service, session_factory, builder.mutual_match(recipient, uuid.uuid4()))
        target = notification_service.list_notifications(recipient)['notifications'][0]

        updated = notification_service.mark_read(recipient, notification_id=target['id'])

        assert updated == 1
        listed = notification_service.list_notifications(recipient)
        assert listed['unread_count'] == 1
        marked = next(n for n in listed['notifications'] if n['id'] == target['id'])
        assert marked['is_read'] is True
        assert marked['read_at'] == clock().isoformat()

    def test_mark_all_read(self, notification_service, session_factory, recipient):
        builder = notification_service.builder
        for _ in range(3):
            record(notification_service, session_factory, builder.mutual_match(recipient, uuid.uuid4()))

        assert notification_service.mark_read(recipient, mark_all=True) == 3
        assert notification_service.mark_read(recipient, mark_all=True) == 0
        assert notification_service.list_notifications(recipient)['unread_count'] == 0

    def test_cannot_mark_someone_elses_notification(self, notification_service, session_factory, recipient):
        other = create_user(session_factory)
        record(notification_service, session_factory, notification_service.builder.mutual_match(other, uuid.uuid4()))
        theirs = notification_service.list_notifications(other)['notifications'][0]

        assert notification_service.mark_read(recipient, notification_id=theirs['id']) == 0
        assert notification_service.list_notifications(other)['unread_count'] == 1

    def test_mark_read_requires_target(self, notification_service, recipient):
        with pytest.raises(ValidationError):
            notification_service.mark_read(recipient)
        with pytest.raises(ValidationError):
            notification_service.mark_read(recipient, notification_id="nope")


if __name__ == '__main__':
    unittest.main()
