#!/usr/bin/env python3
"""
Assessment Service - Working-style estimator entry points.

start_or_resume hands out a fixed question list per session, save_responses
stores partial progress, and submit completes the session and blends its
scores into the user's profile. Every operation runs in its own unit of
work; a submit either completes the session and updates the profile, or
changes nothing.
"""

import logging
import random
from typing import Any, Callable, List, Optional, Sequence

from sqlalchemy.orm import sessionmaker

from core.config_loader import AssessmentConfig
from core.errors import ConflictError, IntegrityFailure, NotFoundError, ValidationError
from core.utils import Clock, default_rng, ensure_utc, parse_uuid, utcnow
from core.assessment.models import OPTIONS, ProfileState, ResponseInput, StartedAssessment
from core.assessment.question_bank import QuestionBank, QuestionSpec
from core.assessment.scoring import blend, score_session
from core.assessment.selection import select_questions
from database.models import UserWorkingStyle
from database.uow import UnitOfWork, conflict_retrying, unit_of_work

logger = logging.getLogger(__name__)


def profile_from_row(row: Optional[UserWorkingStyle]) -> Optional[ProfileState]:
    if row is None:
        return None
    return ProfileState(
        scores=row.scores,
        confidence=float(row.confidence),
        sessions_count=int(row.sessions_count),
        last_assessed_at=ensure_utc(row.last_assessed_at),
        next_refresh_at=ensure_utc(row.next_refresh_at),
    )


def _validate_responses(responses: Sequence[ResponseInput]) -> List[ResponseInput]:
    if not responses:
        raise ValidationError("At least one response is required")

    cleaned = {}
    for response in responses:
        if not response.question_id:
            raise ValidationError("Response is missing question_id")
        if response.selected_option not in OPTIONS:
            raise ValidationError(
                f"Invalid option {response.selected_option!r} for {response.question_id}; expected A or B"
            )
        if response.response_time_ms is not None and response.response_time_ms < 0:
            raise ValidationError(f"Negative response time for {response.question_id}")
        # Last answer wins when a client repeats a question in one payload
        cleaned[response.question_id] = ResponseInput(
            question_id=response.question_id,
            selected_option=response.selected_option,
            response_time_ms=response.response_time_ms or None,
        )
    return list(cleaned.values())


class AssessmentService:
    """
    Quiz lifecycle for one user at a time.

    Args:
        config: Assessment configuration (session length, refresh cadence)
        session_factory: SQLAlchemy sessionmaker; defaults to the app engine
        rng_factory: Returns the random source for question selection
        clock: Returns the current UTC time
        max_attempts: Attempts for units of work that lose a race
    """

    def __init__(
        self,
        config: Optional[AssessmentConfig] = None,
        session_factory: Optional[sessionmaker] = None,
        rng_factory: Callable[[], random.Random] = default_rng,
        clock: Clock = utcnow,
        max_attempts: int = 3
    ):
        self.config = config or AssessmentConfig()
        self.session_factory = session_factory
        self.rng_factory = rng_factory
        self.clock = clock
        self.max_attempts = max_attempts

    def _run(self, fn, *args):
        return conflict_retrying(self.max_attempts)(fn, *args)

    # ------------------------------------------------------------------
    # start / resume
    # ------------------------------------------------------------------

    def start_or_resume(self, user_id: Any) -> StartedAssessment:
        """Return the user's open session, creating one if none exists.

        Calling this repeatedly without submitting returns the same session
        and question list. Two concurrent first calls race on the
        one-open-session index; the loser retries and resumes the winner's
        session.

        Raises:
            ValidationError: malformed user id, or no active questions
            NotFoundError: user does not exist
        """
        uid = parse_uuid(user_id, "user id")
        return self._run(self._start_or_resume, uid)

    def _start_or_resume(self, uid) -> StartedAssessment:
        with unit_of_work(self.session_factory) as uow:
            if uow.users.get_by_id(uid) is None:
                raise NotFoundError("User not found")

            open_session = uow.assessments.get_open_session(uid)
            if open_session is not None:
                return self._resume(uow, open_session)

            bank = QuestionBank.from_records(uow.assessments.get_active_questions())
            seen = uow.assessments.get_seen_question_ids(uid)
            question_ids = select_questions(
                bank, seen, self.rng_factory(), target=self.config.questions_per_session
            )
            if not question_ids:
                raise ValidationError("No assessment questions available")

            version = uow.assessments.count_sessions(uid) + 1
            session = uow.assessments.create_session(uid, question_ids, version)
            logger.info(
                f"Started assessment session {session.id} (v{version}) for user {uid} "
                f"with {len(question_ids)} questions"
            )
            return StartedAssessment(
                session_id=str(session.id),
                version=version,
                questions=bank.ordered(question_ids),
                existing_responses=[],
                resumed=False,
            )

    def _resume(self, uow: UnitOfWork, session) -> StartedAssessment:
        # Deactivated questions stay answerable inside sessions that already include them
        bank = QuestionBank.from_records(uow.assessments.get_questions_by_ids(session.question_ids))
        responses = [
            ResponseInput(
                question_id=r.question_id,
                selected_option=r.selected_option,
                response_time_ms=r.response_time_ms,
            )
            for r in uow.assessments.get_responses(session.id)
        ]
        logger.info(f"Resuming assessment session {session.id} ({len(responses)} answered)")
        return StartedAssessment(
            session_id=str(session.id),
            version=session.version,
            questions=bank.ordered(session.question_ids),
            existing_responses=responses,
            resumed=True,
        )

    # ------------------------------------------------------------------
    # partial save / submit
    # ------------------------------------------------------------------

    def save_responses(self, user_id: Any, session_id: Any, responses: Sequence[ResponseInput]) -> int:
        """Upsert answers without completing the session. Returns the number stored."""
        uid = parse_uuid(user_id, "user id")
        sid = parse_uuid(session_id, "session id")
        cleaned = _validate_responses(responses)
        return self._run(self._save_responses, uid, sid, cleaned)

    def _save_responses(self, uid, sid, responses: List[ResponseInput]) -> int:
        with unit_of_work(self.session_factory) as uow:
            session = self._load_open_session(uow, uid, sid)
            self._store_responses(uow, session, responses)
            return len(responses)

    def submit(self, user_id: Any, session_id: Any, responses: Sequence[ResponseInput]) -> ProfileState:
        """Store final answers, complete the session and blend it into the profile.

        The session is scored from every response stored for it, so answers
        saved earlier count even if the final payload omits them. Retrying a
        submit that failed mid-flight is safe: responses are upserted and
        nothing is committed unless the profile update succeeds too.

        Raises:
            ValidationError: malformed ids, empty responses, bad option or
                a question that is not part of the session
            NotFoundError: session missing or owned by someone else
            ConflictError: session already completed
        """
        uid = parse_uuid(user_id, "user id")
        sid = parse_uuid(session_id, "session id")
        cleaned = _validate_responses(responses)
        return self._run(self._submit, uid, sid, cleaned)

    def _submit(self, uid, sid, responses: List[ResponseInput]) -> ProfileState:
        with unit_of_work(self.session_factory) as uow:
            session = self._load_open_session(uow, uid, sid)
            self._store_responses(uow, session, responses)

            now = self.clock()
            if not uow.assessments.complete_session(session.id, now):
                raise ConflictError("Assessment session already completed")

            bank = QuestionBank.from_records(uow.assessments.get_questions_by_ids(session.question_ids))
            questions = {q.id: q for q in bank.ordered(session.question_ids)}
            stored = [
                ResponseInput(question_id=r.question_id, selected_option=r.selected_option)
                for r in uow.assessments.get_responses(session.id)
            ]
            session_scores = score_session(questions, stored)

            existing = profile_from_row(uow.assessments.get_working_style(uid))
            profile = blend(
                existing,
                session_scores,
                now,
                first_refresh_months=self.config.first_refresh_months,
                refresh_months=self.config.refresh_months,
            )
            written = uow.assessments.upsert_working_style(
                uid,
                profile.scores,
                profile.confidence,
                profile.sessions_count,
                profile.last_assessed_at,
                profile.next_refresh_at,
            )
            if not written:
                raise IntegrityFailure(f"Working-style profile for {uid} changed during submit")

            logger.info(
                f"Completed assessment session {session.id} for user {uid}: "
                f"{len(stored)} responses, sessions={profile.sessions_count}, "
                f"confidence={profile.confidence:.3f}"
            )
            return profile

    def get_profile(self, user_id: Any) -> Optional[ProfileState]:
        uid = parse_uuid(user_id, "user id")
        with unit_of_work(self.session_factory) as uow:
            return profile_from_row(uow.assessments.get_working_style(uid))

    # ------------------------------------------------------------------
    # catalog
    # ------------------------------------------------------------------

    def seed_questions(self, specs: Sequence[QuestionSpec]) -> int:
        """Insert catalog questions. Ids already present are left as they are.

        Returns:
            Number of questions inserted
        """
        with unit_of_work(self.session_factory) as uow:
            inserted = sum(
                1 for spec in specs if uow.assessments.insert_question_if_absent(**spec.to_record())
            )
        logger.info(f"Seeded {inserted} new questions ({len(specs) - inserted} already present)")
        return inserted

    def set_question_active(self, question_id: str, active: bool) -> None:
        """Retire or restore a question for future sessions.

        Raises:
            NotFoundError: unknown question id
        """
        with unit_of_work(self.session_factory) as uow:
            if not uow.assessments.set_question_active(question_id, active):
                raise NotFoundError(f"Question {question_id} not found")
        logger.info(f"Question {question_id} {'activated' if active else 'deactivated'}")

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _load_open_session(uow: UnitOfWork, uid, sid):
        session = uow.assessments.get_session_for_update(sid)
        if session is None or session.user_id != uid:
            raise NotFoundError("Assessment session not found")
        if session.completed_at is not None:
            raise ConflictError("Assessment session already completed")
        return session

    def _store_responses(self, uow: UnitOfWork, session, responses: List[ResponseInput]) -> None:
        allowed = set(session.question_ids or [])
        unknown = [r.question_id for r in responses if r.question_id not in allowed]
        if unknown:
            raise ValidationError(f"Questions not part of this session: {', '.join(sorted(unknown))}")

        now = self.clock()
        for response in responses:
            uow.assessments.upsert_response(
                session.id,
                response.question_id,
                response.selected_option,
                response.response_time_ms,
                now,
            )
