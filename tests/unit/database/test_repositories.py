#!/usr/bin/env python3
"""
Repository and unit-of-work behaviour on SQLite: conditional upserts,
the compare-and-swap profile write and constraint translation.
"""

from datetime import timedelta

import pytest

from core.dimensions import DIMENSIONS
from core.errors import IntegrityFailure
from database.models import MatchStatus
from database.uow import conflict_retrying, unit_of_work
from tests import START_TIME, create_user

NOW = START_TIME
LATER = START_TIME + timedelta(days=14)


@pytest.fixture
def users(session_factory):
    return create_user(session_factory), create_user(session_factory), create_user(session_factory)


def suggest(uow, owner, candidate, now=NOW, expires_at=LATER, score=60.0):
    return uow.matches.upsert_suggestion(owner, candidate, score, {'score': score}, expires_at, now)


class TestMatchRepository:

    def test_upsert_creates_then_skips_live_row(self, session_factory, users):
        a, b, _ = users
        with unit_of_work(session_factory) as uow:
            assert suggest(uow, a, b) is True
        with unit_of_work(session_factory) as uow:
            assert suggest(uow, a, b, score=90.0) is False
            assert uow.matches.get_by_pair(a, b).match_score == 60.0

    def test_upsert_refreshes_expired_unanswered_row(self, session_factory, users):
        a, b, _ = users
        with unit_of_work(session_factory) as uow:
            suggest(uow, a, b)
            row = uow.matches.get_by_pair(a, b)
            row.status = MatchStatus.VIEWED.value
            row.viewed_at = NOW

        after_expiry = LATER + timedelta(days=1)
        with unit_of_work(session_factory) as uow:
            assert suggest(uow, a, b, now=after_expiry, expires_at=after_expiry + timedelta(days=14), score=75.0)
            row = uow.matches.get_by_pair(a, b)
            assert row.status == MatchStatus.SUGGESTED.value
            assert row.viewed_at is None
            assert row.match_score == 75.0

    def test_upsert_refreshes_rejected_row(self, session_factory, users):
        a, b, _ = users
        with unit_of_work(session_factory) as uow:
            suggest(uow, a, b)
            row = uow.matches.get_by_pair(a, b)
            row.status = MatchStatus.REJECTED.value
            row.responded_at = NOW

        with unit_of_work(session_factory) as uow:
            assert suggest(uow, a, b, now=NOW + timedelta(days=1), score=70.0) is True
            row = uow.matches.get_by_pair(a, b)
            assert row.status == MatchStatus.SUGGESTED.value
            assert row.responded_at is None
            assert row.match_score == 70.0

    def test_upsert_never_refreshes_accepted_rows(self, session_factory, users):
        a, b, _ = users
        with unit_of_work(session_factory) as uow:
            suggest(uow, a, b)
            row = uow.matches.get_by_pair(a, b)
            row.status = MatchStatus.ACCEPTED.value
            row.expires_at = None

        with unit_of_work(session_factory) as uow:
            assert suggest(uow, a, b, now=LATER + timedelta(days=30)) is False
            assert uow.matches.get_by_pair(a, b).status == MatchStatus.ACCEPTED.value

    def test_upsert_skips_unexpired_interest(self, session_factory, users):
        a, b, _ = users
        with unit_of_work(session_factory) as uow:
            suggest(uow, a, b)
            uow.matches.get_by_pair(a, b).status = MatchStatus.INTERESTED.value

        with unit_of_work(session_factory) as uow:
            assert suggest(uow, a, b, now=LATER - timedelta(days=1)) is False
            assert uow.matches.get_by_pair(a, b).status == MatchStatus.INTERESTED.value

    def test_linked_users(self, session_factory, users):
        a, b, c = users
        with unit_of_work(session_factory) as uow:
            suggest(uow, a, b)
            suggest(uow, c, a, expires_at=NOW - timedelta(days=1))

        with unit_of_work(session_factory) as uow:
            # the row owned by c expired unanswered, so c is back in a's pool
            assert uow.matches.get_linked_user_ids(a, NOW) == {b}
            assert uow.matches.get_linked_user_ids(b, NOW) == {a}

    def test_rejected_rows_do_not_link(self, session_factory, users):
        a, b, c = users
        with unit_of_work(session_factory) as uow:
            suggest(uow, a, b)
            suggest(uow, b, a)
            suggest(uow, a, c)
            uow.matches.get_by_pair(a, b).status = MatchStatus.REJECTED.value
            uow.matches.get_by_pair(b, a).status = MatchStatus.REJECTED.value

        with unit_of_work(session_factory) as uow:
            assert uow.matches.get_linked_user_ids(a, NOW) == {c}
            assert uow.matches.get_linked_user_ids(b, NOW) == set()

    def test_promote_requires_both_rows_interested(self, session_factory, users):
        a, b, _ = users
        with unit_of_work(session_factory) as uow:
            suggest(uow, a, b)
            suggest(uow, b, a)
            mine = uow.matches.get_by_pair(a, b)
            mine.status = MatchStatus.INTERESTED.value
            ids = [mine.id, uow.matches.get_by_pair(b, a).id]

            assert uow.matches.promote_to_accepted(ids, NOW) == 1

    def test_lock_pair_returns_both_directions(self, session_factory, users):
        a, b, c = users
        with unit_of_work(session_factory) as uow:
            suggest(uow, a, b)
            suggest(uow, b, a)
            suggest(uow, a, c)

        with unit_of_work(session_factory) as uow:
            rows = uow.matches.lock_pair(a, b)
            assert set(rows) == {a, b}
            assert rows[a].candidate_id == b


class TestAssessmentRepository:

    def _write(self, uow, user_id, sessions_count):
        scores = {d: 55.0 for d in DIMENSIONS}
        return uow.assessments.upsert_working_style(
            user_id, scores, sessions_count / (sessions_count + 1), sessions_count, NOW, LATER
        )

    def test_working_style_compare_and_swap(self, session_factory, users):
        a, _, _ = users
        with unit_of_work(session_factory) as uow:
            assert self._write(uow, a, 1) is True
        with unit_of_work(session_factory) as uow:
            # a concurrent submit already moved the row to 1; blending from 0 again must fail
            assert self._write(uow, a, 1) is False
            assert self._write(uow, a, 2) is True
            assert uow.assessments.get_working_style(a).sessions_count == 2

    def test_second_open_session_violates_index(self, session_factory, users):
        a, _, _ = users
        with unit_of_work(session_factory) as uow:
            uow.assessments.create_session(a, ["q1"], 1)

        with pytest.raises(IntegrityFailure):
            with unit_of_work(session_factory) as uow:
                uow.assessments.create_session(a, ["q2"], 2)

    def test_complete_session_only_once(self, session_factory, users):
        a, _, _ = users
        with unit_of_work(session_factory) as uow:
            session = uow.assessments.create_session(a, ["q1"], 1)
            assert uow.assessments.complete_session(session.id, NOW) is True
            assert uow.assessments.complete_session(session.id, NOW) is False


class TestConflictRetrying:

    def test_retries_integrity_failures(self):
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise IntegrityFailure("lost the race")
            return "done"

        assert conflict_retrying(3)(flaky) == "done"
        assert len(calls) == 3

    def test_gives_up_and_reraises(self):
        def always_conflicts():
            raise IntegrityFailure("lost the race")

        with pytest.raises(IntegrityFailure):
            conflict_retrying(2)(always_conflicts)

    def test_other_errors_are_not_retried(self):
        calls = []

        def broken():
            calls.append(1)
            raise ValueError("bug")

        with pytest.raises(ValueError):
            conflict_retrying(5)(broken)
        assert len(calls) == 1
