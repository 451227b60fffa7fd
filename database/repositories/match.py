import logging
from datetime import datetime
from typing import List, Optional, Any, Set, Dict

from sqlalchemy import select, update, and_, or_

from database.models import Match, MatchStatus
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class MatchRepository(BaseRepository):
    def get_owned(self, match_id: Any, user_id: Any) -> Optional[Match]:
        stmt = select(Match).where(Match.id == match_id, Match.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_pair(self, user_id: Any, candidate_id: Any) -> Optional[Match]:
        stmt = (
            select(Match)
            .where(Match.user_id == user_id, Match.candidate_id == candidate_id)
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def lock_pair(self, user_a: Any, user_b: Any) -> Dict[Any, Match]:
        """Lock both directed rows of a pair, in id order, and return them keyed by owner.

        Locking in a fixed order keeps two users responding to each other at
        the same time from deadlocking; the second one waits and then sees
        the first one's committed status.
        """
        stmt = (
            select(Match)
            .where(or_(
                and_(Match.user_id == user_a, Match.candidate_id == user_b),
                and_(Match.user_id == user_b, Match.candidate_id == user_a),
            ))
            .order_by(Match.id)
            .with_for_update(of=Match)
            .execution_options(populate_existing=True)
        )
        rows = self.db.execute(stmt).scalars().unique().all()
        return {row.user_id: row for row in rows}

    def get_linked_user_ids(self, user_id: Any, now: datetime) -> Set[Any]:
        """Users connected to user_id by a row that should keep them out of the pool.

        Only an active row blocks: suggested, viewed, interested or accepted,
        and not expired. Rejected and expired rows are refreshed in place by
        upsert_suggestion.
        """
        stmt = select(Match.user_id, Match.candidate_id).where(
            or_(Match.user_id == user_id, Match.candidate_id == user_id),
            Match.active_clause(now),
        )
        linked: Set[Any] = set()
        for owner_id, candidate_id in self.db.execute(stmt).all():
            linked.add(candidate_id if owner_id == user_id else owner_id)
        return linked

    def upsert_suggestion(
        self,
        user_id: Any,
        candidate_id: Any,
        match_score: float,
        compatibility: Dict[str, Any],
        expires_at: datetime,
        now: datetime
    ) -> bool:
        """Create the directed row, or refresh the existing one if it is no longer active.

        Returns True when this call wrote the row, False when an active row
        for the same ordered pair already exists. A refresh starts a new
        suggestion cycle, so an earlier answer on a rejected or expired row
        is cleared.
        """
        stmt = self._insert(Match).values(
            user_id=user_id,
            candidate_id=candidate_id,
            match_score=match_score,
            compatibility=compatibility,
            status=MatchStatus.SUGGESTED.value,
            expires_at=expires_at,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=['user_id', 'candidate_id'],
            set_={
                'match_score': stmt.excluded.match_score,
                'compatibility': stmt.excluded.compatibility,
                'status': MatchStatus.SUGGESTED.value,
                'expires_at': stmt.excluded.expires_at,
                'viewed_at': None,
                'responded_at': None,
                'updated_at': stmt.excluded.updated_at,
            },
            where=Match.inactive_clause(now),
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1

    def promote_to_accepted(self, match_ids: List[Any], now: datetime) -> int:
        """Flip rows that are still 'interested' to 'accepted'. Returns the number flipped.

        Accepted rows no longer expire.
        """
        self.db.flush()
        stmt = (
            update(Match)
            .where(Match.id.in_(match_ids), Match.status == MatchStatus.INTERESTED.value)
            .values(status=MatchStatus.ACCEPTED.value, expires_at=None, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount

    def list_active_for_user(self, user_id: Any, now: datetime) -> List[Match]:
        stmt = (
            select(Match)
            .where(Match.user_id == user_id, Match.active_clause(now))
            .order_by(Match.match_score.desc(), Match.created_at)
        )
        return list(self.db.execute(stmt).scalars().unique().all())

    def get_rows_between(self, user_a: Any, user_b: Any) -> List[Match]:
        stmt = select(Match).where(or_(
            and_(Match.user_id == user_a, Match.candidate_id == user_b),
            and_(Match.user_id == user_b, Match.candidate_id == user_a),
        )).execution_options(populate_existing=True)
        return list(self.db.execute(stmt).scalars().unique().all())

    def refresh(self, match: Match) -> Match:
        self.db.refresh(match)
        return match
