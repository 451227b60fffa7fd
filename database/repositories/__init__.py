from database.repositories.base import BaseRepository
from database.repositories.user import UserRepository
from database.repositories.assessment import AssessmentRepository
from database.repositories.match import MatchRepository
from database.repositories.notification import NotificationRepository

__all__ = [
    'BaseRepository',
    'UserRepository',
    'AssessmentRepository',
    'MatchRepository',
    'NotificationRepository',
]
