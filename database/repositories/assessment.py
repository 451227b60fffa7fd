import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set

from sqlalchemy import select, update, func

from database.models import AssessmentQuestion, AssessmentSession, AssessmentResponse, UserWorkingStyle
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class AssessmentRepository(BaseRepository):
    # ---- question catalog -------------------------------------------------

    def get_active_questions(self) -> List[AssessmentQuestion]:
        stmt = select(AssessmentQuestion).where(
            AssessmentQuestion.is_active.is_(True)
        ).order_by(AssessmentQuestion.id)
        return list(self.db.execute(stmt).scalars().all())

    def get_questions_by_ids(self, question_ids: Iterable[str]) -> List[AssessmentQuestion]:
        ids = list(question_ids)
        if not ids:
            return []
        stmt = select(AssessmentQuestion).where(AssessmentQuestion.id.in_(ids))
        return list(self.db.execute(stmt).scalars().all())

    def insert_question_if_absent(self, **fields) -> bool:
        """Insert a catalog question; existing ids are left untouched. Returns True if inserted."""
        stmt = self._insert(AssessmentQuestion).values(**fields).on_conflict_do_nothing(
            index_elements=['id']
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1

    def set_question_active(self, question_id: str, is_active: bool) -> bool:
        stmt = (
            update(AssessmentQuestion)
            .where(AssessmentQuestion.id == question_id)
            .values(is_active=is_active)
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1

    # ---- sessions ---------------------------------------------------------

    def get_open_session(self, user_id: Any) -> Optional[AssessmentSession]:
        stmt = select(AssessmentSession).where(
            AssessmentSession.user_id == user_id,
            AssessmentSession.completed_at.is_(None)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_session_for_update(self, session_id: Any) -> Optional[AssessmentSession]:
        stmt = (
            select(AssessmentSession)
            .where(AssessmentSession.id == session_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_seen_question_ids(self, user_id: Any) -> Set[str]:
        """Question ids asked in the user's completed sessions."""
        stmt = select(AssessmentSession.question_ids).where(
            AssessmentSession.user_id == user_id,
            AssessmentSession.completed_at.is_not(None)
        )
        seen: Set[str] = set()
        for question_ids in self.db.execute(stmt).scalars().all():
            seen.update(question_ids or [])
        return seen

    def count_sessions(self, user_id: Any) -> int:
        stmt = select(func.count()).select_from(AssessmentSession).where(
            AssessmentSession.user_id == user_id
        )
        return int(self.db.execute(stmt).scalar_one())

    def create_session(self, user_id: Any, question_ids: List[str], version: int) -> AssessmentSession:
        session = AssessmentSession(user_id=user_id, question_ids=list(question_ids), version=version)
        self.db.add(session)
        # Flush now so a racing creator hits the unique indexes inside this unit of work
        self.db.flush()
        return session

    def complete_session(self, session_id: Any, completed_at: datetime) -> bool:
        """Mark a session complete only if it is still open. Returns False if already completed."""
        stmt = (
            update(AssessmentSession)
            .where(AssessmentSession.id == session_id, AssessmentSession.completed_at.is_(None))
            .values(completed_at=completed_at)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1

    # ---- responses --------------------------------------------------------

    def get_responses(self, session_id: Any) -> List[AssessmentResponse]:
        stmt = select(AssessmentResponse).where(
            AssessmentResponse.session_id == session_id
        ).order_by(AssessmentResponse.created_at, AssessmentResponse.question_id)
        return list(self.db.execute(stmt).scalars().all())

    def upsert_response(
        self,
        session_id: Any,
        question_id: str,
        selected_option: str,
        response_time_ms: Optional[int],
        now: datetime
    ) -> None:
        stmt = self._insert(AssessmentResponse).values(
            session_id=session_id,
            question_id=question_id,
            selected_option=selected_option,
            response_time_ms=response_time_ms,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=['session_id', 'question_id'],
            set_={
                'selected_option': stmt.excluded.selected_option,
                'response_time_ms': stmt.excluded.response_time_ms,
                'updated_at': stmt.excluded.updated_at,
            }
        )
        self.db.execute(stmt)

    # ---- working style ----------------------------------------------------

    def get_working_style(self, user_id: Any) -> Optional[UserWorkingStyle]:
        stmt = (
            select(UserWorkingStyle)
            .where(UserWorkingStyle.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def upsert_working_style(
        self,
        user_id: Any,
        scores: Dict[Any, float],
        confidence: float,
        sessions_count: int,
        last_assessed_at: datetime,
        next_refresh_at: datetime
    ) -> bool:
        """Write the blended profile if nobody else blended in between.

        The update only applies when the stored sessions_count is exactly
        sessions_count - 1, i.e. the row we blended from is still current.
        Returns False when that compare-and-swap fails.
        """
        values = dict(
            user_id=user_id,
            confidence=confidence,
            sessions_count=sessions_count,
            last_assessed_at=last_assessed_at,
            next_refresh_at=next_refresh_at,
            created_at=last_assessed_at,
            updated_at=last_assessed_at,
            **UserWorkingStyle.score_columns(scores),
        )
        stmt = self._insert(UserWorkingStyle).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=['user_id'],
            set_={key: getattr(stmt.excluded, key) for key in values if key not in ('user_id', 'created_at')},
            where=UserWorkingStyle.sessions_count == sessions_count - 1,
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1
