import uuid

from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Boolean, Uuid, UniqueConstraint, Index

from .base import Base, utcnow


class Notification(Base):
    """
    In-app notification record emitted by the match lifecycle.

    dedup_hash is unique, so racing writers that produce the same event
    (e.g. both sides detecting a mutual match) leave exactly one row.
    """
    __tablename__ = 'notification'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    match_id = Column(Uuid, ForeignKey('user_match.id', ondelete='SET NULL'), nullable=True)

    type = Column(Text, nullable=False)  # new_match, match_interest, mutual_match
    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    action_url = Column(Text, nullable=True)
    action_text = Column(Text, nullable=True)

    dedup_hash = Column(Text, nullable=False)

    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(TIMESTAMP(timezone=True), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint('dedup_hash', name='uq_notification_dedup'),
        Index('idx_notification_user', 'user_id', 'created_at'),
        Index('idx_notification_unread', 'user_id', 'is_read'),
    )
