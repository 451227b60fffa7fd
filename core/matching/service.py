#!/usr/bin/env python3
"""
Matching Service - Match lifecycle state machine.

A pair of users is stored as two directed rows (user -> candidate and the
mirror candidate -> user). Status per row:

    suggested -> viewed -> interested -> accepted
                      \\-> rejected

A row is answered at most once per cycle. Expiry is derived from expires_at and never
stored as a status; a later run may re-suggest a pair whose rows are
rejected or expired, which starts a fresh cycle for both rows.

Every multi-row change runs in one unit of work and is retried on
IntegrityFailure, so callers never observe half a pair:
- run_matching writes both directed rows of a new pair together
- respond locks both rows of the pair before deciding on mutual interest,
  which makes two users answering each other at the same time converge on
  exactly one mutual-acceptance event
"""

import logging
from datetime import timedelta
from typing import Any, List, Optional, Tuple

from sqlalchemy.orm import sessionmaker

from core.config_loader import MatchingConfig
from core.errors import ConflictError, IntegrityFailure, NotFoundError, ValidationError
from core.matching.dto import MatchView, RespondResult, RunResult
from core.matching.snapshots import display_name, snapshot_from_user
from core.scorer import BidirectionalScore, CompatibilityScorer
from core.utils import Clock, ensure_utc, parse_uuid, utcnow
from database.models import MatchStatus, RESPONDABLE_STATUSES
from database.uow import UnitOfWork, conflict_retrying, unit_of_work
from notification.service import NotificationService

logger = logging.getLogger(__name__)

RESPONSE_ACTIONS = (MatchStatus.INTERESTED.value, MatchStatus.REJECTED.value)


class MatchingService:
    """
    Orchestrates candidate scoring, match persistence and status transitions.

    Args:
        config: Threshold, top-N, expiry and scorer settings
        session_factory: SQLAlchemy sessionmaker; defaults to the app engine
        notifier: In-app notification writer (None disables notifications)
        clock: Returns the current UTC time
    """

    def __init__(
        self,
        config: Optional[MatchingConfig] = None,
        session_factory: Optional[sessionmaker] = None,
        notifier: Optional[NotificationService] = None,
        clock: Clock = utcnow
    ):
        self.config = config or MatchingConfig()
        self.session_factory = session_factory
        self.notifier = notifier
        self.clock = clock
        self.scorer = CompatibilityScorer(self.config.scorer)

    def _run(self, fn, *args):
        return conflict_retrying(self.config.max_attempts)(fn, *args)

    # ------------------------------------------------------------------
    # run matching
    # ------------------------------------------------------------------

    def run_matching(self, user_id: Any) -> RunResult:
        """
        Score the user's candidate pool and create match rows for the best candidates.

        The pool excludes the user and anyone linked by an active row
        (suggested, viewed, interested or accepted, and unexpired) in
        either direction. Candidates scoring at least the
        threshold are ranked and capped at top_n; each kept pair is written
        in its own unit of work.

        Returns:
            RunResult with the rows created by this run and the number of
            candidates that qualified
        """
        uid = parse_uuid(user_id, "user id")
        now = self.clock()

        ranked = self._rank_candidates(uid, now)
        kept = ranked[:self.config.top_n]
        expires_at = now + timedelta(days=self.config.expiry_days)

        result = RunResult(total=len(ranked))
        for candidate_id, scored in kept:
            try:
                view = self._run(self._create_pair, uid, candidate_id, scored, expires_at)
            except IntegrityFailure as e:
                logger.error(f"Could not create match {uid} -> {candidate_id}: {e}")
                continue
            if view is not None:
                result.matches.append(view)

        logger.info(
            f"Matching run for {uid}: {result.total} qualified, {result.shown} created "
            f"(threshold={self.config.threshold}, top_n={self.config.top_n})"
        )
        return result

    def _rank_candidates(self, uid, now) -> List[Tuple[Any, BidirectionalScore]]:
        with unit_of_work(self.session_factory) as uow:
            me = uow.users.get_by_id(uid)
            if me is None:
                raise NotFoundError("User not found")

            excluded = uow.matches.get_linked_user_ids(uid, now)
            excluded.add(uid)
            candidates = uow.users.get_eligible_candidates(excluded)

            my_snapshot = snapshot_from_user(me)
            scored = []
            for candidate in candidates:
                result = self.scorer.score(my_snapshot, snapshot_from_user(candidate))
                if result.score >= self.config.threshold:
                    scored.append((candidate.id, result))

        logger.debug(f"Scored {len(candidates)} candidates for {uid}, {len(scored)} above threshold")
        scored.sort(key=lambda item: (-item[1].score, str(item[0])))
        return scored

    def _create_pair(self, uid, candidate_id, scored: BidirectionalScore, expires_at) -> Optional[MatchView]:
        now = self.clock()
        with unit_of_work(self.session_factory) as uow:
            created = uow.matches.upsert_suggestion(
                uid, candidate_id, scored.score, scored.compatibility_for(a_is_owner=True), expires_at, now
            )
            if not created:
                # The candidate's own run linked us in the meantime
                logger.info(f"Match {uid} -> {candidate_id} already exists, skipping")
                return None

            mirror_created = uow.matches.upsert_suggestion(
                candidate_id, uid, scored.score, scored.compatibility_for(a_is_owner=False), expires_at, now
            )
            if mirror_created:
                mirror = uow.matches.get_by_pair(candidate_id, uid)
                self._notify(
                    uow,
                    'new_match',
                    candidate_id,
                    mirror.id,
                    score=scored.score,
                    cycle=expires_at.isoformat(),
                )

            mine = uow.matches.get_by_pair(uid, candidate_id)
            return MatchView.from_row(mine)

    # ------------------------------------------------------------------
    # read / view
    # ------------------------------------------------------------------

    def list_active(self, user_id: Any) -> List[MatchView]:
        """Rows owned by the user that are in an active status and not expired."""
        uid = parse_uuid(user_id, "user id")
        now = self.clock()
        with unit_of_work(self.session_factory) as uow:
            return [MatchView.from_row(m) for m in uow.matches.list_active_for_user(uid, now)]

    def view_match(self, user_id: Any, match_id: Any) -> MatchView:
        """Mark a suggested match as viewed and return it."""
        uid = parse_uuid(user_id, "user id")
        mid = parse_uuid(match_id, "match id")
        return self._run(self._view_match, uid, mid)

    def _view_match(self, uid, mid) -> MatchView:
        now = self.clock()
        with unit_of_work(self.session_factory) as uow:
            match = uow.matches.get_owned(mid, uid)
            if match is None or not match.is_active(now):
                raise NotFoundError("Match not found")

            if match.viewed_at is None:
                match.viewed_at = now
            if match.status == MatchStatus.SUGGESTED.value:
                match.status = MatchStatus.VIEWED.value
                match.updated_at = now
                logger.info(f"Match {mid} viewed by {uid}")
            uow.flush()
            return MatchView.from_row(match)

    # ------------------------------------------------------------------
    # respond
    # ------------------------------------------------------------------

    def respond(self, user_id: Any, match_id: Any, action: str) -> RespondResult:
        """
        Record the owner's answer to a suggested or viewed match.

        interested: if the mirror row is already interested both rows become
        accepted and both users get a mutual-match notification; otherwise
        the other user gets an anonymous "someone is interested" signal.
        rejected: a mirror still in suggested/viewed is rejected too.

        Raises:
            ValidationError: malformed ids or unknown action
            NotFoundError: match missing, owned by someone else, or expired
            ConflictError: match already answered
        """
        if action not in RESPONSE_ACTIONS:
            raise ValidationError(f"Invalid action {action!r}; expected one of {', '.join(RESPONSE_ACTIONS)}")
        uid = parse_uuid(user_id, "user id")
        mid = parse_uuid(match_id, "match id")
        return self._run(self._respond, uid, mid, action)

    def _respond(self, uid, mid, action: str) -> RespondResult:
        now = self.clock()
        with unit_of_work(self.session_factory) as uow:
            match = uow.matches.get_owned(mid, uid)
            if match is None or match.is_expired(now):
                raise NotFoundError("Match not found")

            candidate_id = match.candidate_id
            rows = uow.matches.lock_pair(uid, candidate_id)
            mine = rows.get(uid)
            mirror = rows.get(candidate_id)
            if mine is None:
                raise NotFoundError("Match not found")
            if mine.status not in RESPONDABLE_STATUSES:
                raise ConflictError(f"Match already {mine.status}")

            mine.status = action
            mine.responded_at = now
            mine.viewed_at = mine.viewed_at or now
            mine.updated_at = now

            if action == MatchStatus.INTERESTED.value:
                mutual = self._handle_interest(uow, mine, mirror, now)
            else:
                self._cascade_rejection(mirror, now)
                mutual = False

            status = MatchStatus.ACCEPTED.value if mutual else action
            logger.info(f"User {uid} responded {action} to match {mid} (mutual={mutual})")
            return RespondResult(status=status, mutual=mutual)

    def _handle_interest(self, uow: UnitOfWork, mine, mirror, now) -> bool:
        if mirror is None or mirror.is_expired(now):
            return False

        if mirror.status == MatchStatus.INTERESTED.value:
            flipped = uow.matches.promote_to_accepted([mine.id, mirror.id], now)
            if flipped != 2:
                raise IntegrityFailure(f"Mutual promotion of {mine.id}/{mirror.id} flipped {flipped} row(s)")
            uow.matches.refresh(mine)
            uow.matches.refresh(mirror)

            self._notify(uow, 'mutual_match', mine.user_id, mine.id, partner=display_name(mine.candidate))
            self._notify(uow, 'mutual_match', mirror.user_id, mirror.id, partner=display_name(mirror.candidate))
            logger.info(f"Mutual match between {mine.user_id} and {mirror.user_id}")
            return True

        if mirror.status in RESPONDABLE_STATUSES:
            mirror.viewed_at = now
            mirror.updated_at = now
            expires_at = ensure_utc(mirror.expires_at)
            cycle = expires_at.isoformat() if expires_at else None
            self._notify(uow, 'match_interest', mirror.user_id, mirror.id, cycle=cycle)
        return False

    @staticmethod
    def _cascade_rejection(mirror, now) -> None:
        if mirror is not None and mirror.status in RESPONDABLE_STATUSES:
            mirror.status = MatchStatus.REJECTED.value
            mirror.updated_at = now
            logger.info(f"Cascade-rejected mirror match {mirror.id}")

    # ------------------------------------------------------------------
    # notifications
    # ------------------------------------------------------------------

    def _notify(self, uow: UnitOfWork, kind: str, user_id, match_id, **kwargs) -> None:
        if self.notifier is None:
            return
        builder = self.notifier.builder
        if kind == 'new_match':
            request = builder.new_match(user_id, match_id, kwargs['score'], cycle=kwargs.get('cycle'))
        elif kind == 'match_interest':
            request = builder.someone_interested(user_id, match_id, cycle=kwargs.get('cycle'))
        else:
            request = builder.mutual_match(user_id, match_id, kwargs.get('partner'))
        self.notifier.notify(uow.notifications, request, self.clock())
