import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Column, Text, Float, TIMESTAMP, ForeignKey, Uuid, UniqueConstraint, Index, and_, or_
from sqlalchemy.orm import relationship

from core.utils import ensure_utc
from .base import Base, JSONType, utcnow


class MatchStatus(str, Enum):
    SUGGESTED = "suggested"
    VIEWED = "viewed"
    INTERESTED = "interested"
    REJECTED = "rejected"
    ACCEPTED = "accepted"


# Statuses a user may still respond from
RESPONDABLE_STATUSES = (MatchStatus.SUGGESTED.value, MatchStatus.VIEWED.value)
# Statuses shown to the owner while the row has not expired
ACTIVE_STATUSES = (
    MatchStatus.SUGGESTED.value,
    MatchStatus.VIEWED.value,
    MatchStatus.INTERESTED.value,
    MatchStatus.ACCEPTED.value,
)


class Match(Base):
    """
    Directed match edge from user_id's point of view.

    A pair of users is represented by two rows, one per direction (the
    "mirror pair"), so that each side stores its own breakdown and status.
    Expiry is never stored as a status; it is derived from expires_at.
    """
    __tablename__ = 'user_match'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    candidate_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)

    match_score = Column(Float, nullable=False)
    # {"breakdown_of_user": {...}, "breakdown_of_candidate": {...}, "score": float}
    compatibility = Column(JSONType, nullable=False, default=dict)

    status = Column(Text, nullable=False, default=MatchStatus.SUGGESTED.value)
    expires_at = Column(TIMESTAMP(timezone=True), nullable=True)
    viewed_at = Column(TIMESTAMP(timezone=True), nullable=True)
    responded_at = Column(TIMESTAMP(timezone=True), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    candidate = relationship("User", foreign_keys=[candidate_id], lazy="joined")

    __table_args__ = (
        # One directed edge per ordered pair; expired edges are refreshed in place
        UniqueConstraint('user_id', 'candidate_id', name='uq_match_user_candidate'),
        Index('idx_match_user_status', 'user_id', 'status'),
        Index('idx_match_candidate', 'candidate_id'),
        Index('idx_match_score', 'match_score'),
    )

    def is_expired(self, now: datetime) -> bool:
        expires_at = ensure_utc(self.expires_at)
        return expires_at is not None and expires_at <= now

    def is_active(self, now: datetime) -> bool:
        return self.status in ACTIVE_STATUSES and not self.is_expired(now)

    @classmethod
    def not_expired_clause(cls, now: datetime):
        return or_(cls.expires_at.is_(None), cls.expires_at > now)

    @classmethod
    def active_clause(cls, now: datetime):
        return and_(cls.status.in_(ACTIVE_STATUSES), cls.not_expired_clause(now))

    @classmethod
    def inactive_clause(cls, now: datetime):
        """Rows that no longer link the pair: rejected, or expired before acceptance."""
        return or_(
            cls.status.not_in(ACTIVE_STATUSES),
            and_(cls.expires_at.is_not(None), cls.expires_at <= now),
        )
