from .base import Base
from .user import User, Skill, UserSkill
from .assessment import AssessmentQuestion, AssessmentSession, AssessmentResponse, UserWorkingStyle
from .match import (
    Match, MatchStatus, ACTIVE_STATUSES, RESPONDABLE_STATUSES
)
from .notification import Notification

__all__ = [
    'Base',
    'User',
    'Skill',
    'UserSkill',
    'AssessmentQuestion',
    'AssessmentSession',
    'AssessmentResponse',
    'UserWorkingStyle',
    'Match',
    'MatchStatus',
    'ACTIVE_STATUSES',
    'RESPONDABLE_STATUSES',
    'Notification',
]
