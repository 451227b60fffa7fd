"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import os
import random

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from core.assessment.question_bank import parse_specs
from core.assessment.service import AssessmentService
from core.config_loader import AssessmentConfig, MatchingConfig
from core.matching.service import MatchingService
from database.database import build_session_factory
from database.models import Base
from notification.service import NotificationService
from tests import FixedClock, balanced_catalog


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring database (deselect with '-m \"not db\"')"
    )


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test. StaticPool keeps every session on one connection."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def assessment_service(session_factory, clock):
    service = AssessmentService(
        config=AssessmentConfig(),
        session_factory=session_factory,
        rng_factory=lambda: random.Random(7),
        clock=clock,
    )
    service.seed_questions(parse_specs(balanced_catalog()))
    return service


@pytest.fixture
def notification_service(session_factory, clock):
    return NotificationService(
        base_url="https://app.example.com",
        session_factory=session_factory,
        clock=clock,
    )


@pytest.fixture
def matching_service(session_factory, clock, notification_service):
    return MatchingService(
        config=MatchingConfig(),
        session_factory=session_factory,
        notifier=notification_service,
        clock=clock,
    )


@pytest.fixture(scope="session")
def test_database():
    """
    Session-scoped fixture that automatically manages the test database container.

    Uses testcontainers to start PostgreSQL before DB tests and stops it
    after all tests complete. Falls back to an external database if
    TEST_DATABASE_URL is set.
    """
    # If TEST_DATABASE_URL is set, use external database
    external_url = os.environ.get("TEST_DATABASE_URL")
    if external_url:
        from tests import check_db_available
        if check_db_available():
            engine = create_engine(external_url)
            Base.metadata.create_all(engine)
            engine.dispose()
            yield external_url
            return
        else:
            pytest.skip("External database not available")

    # Try to use testcontainers for automatic container management
    try:
        from testcontainers.postgres import PostgresContainer

        postgres = PostgresContainer(
            image="postgres:16-alpine",
            username="testuser",
            password="testpass",
            dbname="cofounder_test",
        )
        postgres.start()
    except Exception as e:
        pytest.skip(f"Could not start test database container: {e}")

    try:
        db_url = postgres.get_connection_url()
        engine = create_engine(db_url)
        Base.metadata.create_all(engine)
        engine.dispose()

        print(f"\n✓ Test database started: {db_url}")
        yield db_url
    finally:
        postgres.stop()
        print("\n✓ Test database stopped")


@pytest.fixture
def pg_session_factory(test_database):
    """Session factory on the PostgreSQL test database, emptied after each test."""
    engine = create_engine(test_database, pool_size=10)
    yield build_session_factory(engine)
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
    engine.dispose()
