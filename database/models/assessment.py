import uuid

from sqlalchemy import Column, Text, Boolean, Integer, Float, TIMESTAMP, ForeignKey, Uuid, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from core.dimensions import DIMENSIONS, Dimension
from .base import Base, JSONType, utcnow


class AssessmentQuestion(Base):
    """
    Forced-choice quiz item.

    Rows are never updated or deleted once inserted; retiring a question only
    flips is_active so that completed sessions stay replayable.
    Option score columns hold raw {dimension: delta} maps and are validated
    when the question bank is loaded.
    """
    __tablename__ = 'assessment_question'

    id = Column(Text, primary_key=True)
    dimension = Column(Text, nullable=False)
    option_a_text = Column(Text, nullable=False)
    option_b_text = Column(Text, nullable=False)
    option_a_scores = Column(JSONType, nullable=False, default=dict)
    option_b_scores = Column(JSONType, nullable=False, default=dict)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_assessment_question_active', 'is_active', 'dimension'),
    )


class AssessmentSession(Base):
    """
    One quiz attempt. question_ids is fixed at creation so the attempt can be resumed.
    """
    __tablename__ = 'assessment_session'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    question_ids = Column(JSONType, nullable=False, default=list)
    version = Column(Integer, nullable=False)
    completed_at = Column(TIMESTAMP(timezone=True), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    responses = relationship("AssessmentResponse", back_populates="session", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint('user_id', 'version', name='uq_assessment_session_version'),
        # At most one incomplete session per user
        Index(
            'uq_assessment_session_open', 'user_id', unique=True,
            postgresql_where=completed_at.is_(None),
            sqlite_where=completed_at.is_(None),
        ),
    )


class AssessmentResponse(Base):
    __tablename__ = 'assessment_response'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id = Column(Uuid, ForeignKey('assessment_session.id', ondelete='CASCADE'), nullable=False)
    question_id = Column(Text, ForeignKey('assessment_question.id'), nullable=False)
    selected_option = Column(Text, nullable=False)  # A | B
    response_time_ms = Column(Integer, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    session = relationship("AssessmentSession", back_populates="responses")

    __table_args__ = (
        UniqueConstraint('session_id', 'question_id', name='uq_assessment_response_question'),
    )


class UserWorkingStyle(Base):
    """
    Blended working-style estimate, one row per user.

    confidence = sessions_count / (sessions_count + 1); only the assessment
    submit path writes this table.
    """
    __tablename__ = 'user_working_style'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True)

    risk_tolerance = Column(Float, nullable=False, default=50.0)
    decision_style = Column(Float, nullable=False, default=50.0)
    pace = Column(Float, nullable=False, default=50.0)
    conflict_approach = Column(Float, nullable=False, default=50.0)
    role_gravity = Column(Float, nullable=False, default=50.0)
    communication = Column(Float, nullable=False, default=50.0)

    confidence = Column(Float, nullable=False)
    sessions_count = Column(Integer, nullable=False)
    last_assessed_at = Column(TIMESTAMP(timezone=True), nullable=False)
    next_refresh_at = Column(TIMESTAMP(timezone=True), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="working_style")

    @property
    def scores(self) -> dict:
        return {dimension: float(getattr(self, dimension.value)) for dimension in DIMENSIONS}

    @staticmethod
    def score_columns(scores: dict) -> dict:
        """Flatten a {Dimension: value} map into column keyword arguments."""
        return {Dimension(key).value: float(value) for key, value in scores.items()}
