from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import sessionmaker

from core.assessment.service import AssessmentService
from core.config_loader import AppConfig, NotificationConfig
from core.matching.service import MatchingService
from core.utils import Clock, utcnow
from database.database import get_session_factory
from notification.service import NotificationService


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    This eliminates duplicate wiring code and provides a single source
    of truth for service instantiation. DB access happens through
    unit_of_work() inside each service operation.
    """
    config: AppConfig
    session_factory: sessionmaker
    assessment_service: AssessmentService
    matching_service: MatchingService
    notification_service: NotificationService

    @classmethod
    def build(
        cls,
        config: AppConfig,
        session_factory: Optional[sessionmaker] = None,
        clock: Clock = utcnow
    ) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            session_factory: Overrides the engine built from config.database.url
            clock: Time source shared by all services

        Returns:
            Fully wired AppContext instance
        """
        session_factory = session_factory or get_session_factory(config.database.url)

        notification_service = cls._build_notification_service(
            config.notifications or NotificationConfig(), session_factory, clock
        )

        assessment_service = AssessmentService(
            config=config.assessment,
            session_factory=session_factory,
            clock=clock,
            max_attempts=config.matching.max_attempts,
        )

        matching_service = MatchingService(
            config=config.matching,
            session_factory=session_factory,
            notifier=notification_service,
            clock=clock,
        )

        return cls(
            config=config,
            session_factory=session_factory,
            assessment_service=assessment_service,
            matching_service=matching_service,
            notification_service=notification_service,
        )

    @staticmethod
    def _build_notification_service(
        notification_config: NotificationConfig,
        session_factory: sessionmaker,
        clock: Clock
    ) -> NotificationService:
        """Build the notification service.

        A disabled service is still built so the in-app bell keeps working;
        it simply stops recording new notifications.
        """
        return NotificationService(
            base_url=notification_config.base_url,
            enabled=notification_config.enabled,
            session_factory=session_factory,
            clock=clock,
        )
