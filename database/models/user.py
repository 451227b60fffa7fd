import uuid

from sqlalchemy import Column, Text, Boolean, TIMESTAMP, ForeignKey, Uuid, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from .base import Base, JSONType, utcnow


class User(Base):
    """
    Matching-relevant slice of a user account.

    Profile editing and onboarding live outside this service; these columns
    are read to build scoring snapshots and to decide pool eligibility.
    """
    __tablename__ = 'users'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(Text, unique=True)
    first_name = Column(Text)
    last_name = Column(Text)
    display_name = Column(Text)
    avatar_url = Column(Text)
    bio = Column(Text)

    # Logistics
    location = Column(Text)
    timezone = Column(Text)
    is_remote = Column(Boolean, nullable=False, default=False)
    availability = Column(Text)  # full-time | part-time | weekends

    industries = Column(JSONType, nullable=False, default=list)
    roles_looking_for = Column(JSONType, nullable=False, default=list)

    # Pool eligibility
    looking_for_team = Column(Boolean, nullable=False, default=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_banned = Column(Boolean, nullable=False, default=False)
    onboarding_completed_at = Column(TIMESTAMP(timezone=True))
    deleted_at = Column(TIMESTAMP(timezone=True))

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    skills = relationship("UserSkill", back_populates="user", cascade="all, delete-orphan", lazy="selectin")
    working_style = relationship("UserWorkingStyle", back_populates="user", uselist=False, lazy="selectin")

    __table_args__ = (
        Index('idx_users_pool', 'looking_for_team', 'is_active', 'is_banned'),
    )


class Skill(Base):
    """Catalog skill, e.g. ("Python", "technical")."""
    __tablename__ = 'skill'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False, unique=True)
    category = Column(Text, nullable=False)  # technical | business | creative | operations


class UserSkill(Base):
    __tablename__ = 'user_skill'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    skill_id = Column(Uuid, ForeignKey('skill.id', ondelete='CASCADE'), nullable=False)
    proficiency = Column(Text, nullable=False, default='intermediate')
    is_verified = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="skills")
    skill = relationship("Skill", lazy="joined")

    __table_args__ = (
        UniqueConstraint('user_id', 'skill_id', name='uq_user_skill'),
    )
