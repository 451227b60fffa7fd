import contextlib
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker
from tenacity import Retrying, before_sleep_log, retry_if_exception_type, stop_after_attempt, wait_random

from core.errors import IntegrityFailure
from database.database import get_session_factory
from database.repositories import (
    UserRepository,
    AssessmentRepository,
    MatchRepository,
    NotificationRepository,
)

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Repositories sharing one Session, and therefore one transaction."""

    def __init__(self, session: Session):
        self.session = session
        self.users = UserRepository(session)
        self.assessments = AssessmentRepository(session)
        self.matches = MatchRepository(session)
        self.notifications = NotificationRepository(session)

    def flush(self) -> None:
        self.session.flush()


@contextlib.contextmanager
def unit_of_work(session_factory: Optional[sessionmaker] = None):
    """Per-unit-of-work transaction scope.

    Yields a UnitOfWork bound to a fresh Session. Commits on success,
    rolls back on exception, always closes. Constraint violations and
    lock/serialization errors surface as IntegrityFailure so callers can
    retry the whole unit.

    Usage:
        with unit_of_work() as uow:
            match = uow.matches.get_owned(match_id, user_id)
            # perform operations...
        # commit happens automatically on successful exit
    """
    session = (session_factory or get_session_factory())()
    try:
        yield UnitOfWork(session)
        session.commit()
    except (IntegrityError, OperationalError) as e:
        session.rollback()
        logger.warning(f"Unit of work rolled back: {e.__class__.__name__}: {e.orig}")
        raise IntegrityFailure(f"Concurrent update conflict: {e.orig}") from e
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def conflict_retrying(max_attempts: int = 3) -> Retrying:
    """Retry controller for operations built on unit_of_work().

    Only IntegrityFailure is retried; each attempt runs a fresh unit of work
    against the committed state left by whoever won the race.

    Usage:
        conflict_retrying(3)(self._respond, user_id, match_id, action)
    """
    return Retrying(
        retry=retry_if_exception_type(IntegrityFailure),
        stop=stop_after_attempt(max_attempts),
        wait=wait_random(min=0, max=0.05),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
