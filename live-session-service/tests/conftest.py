# tests/conftest.py

import pytest
from starlette.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from unittest.mock import MagicMock

from live_sessions.main import app
from live_sessions.db.session import get_db
from live_sessions.db.base_class import Base
from live_sessions.core.kafka_producer import get_kafka_producer
from live_sessions.core.limiter import limiter
import live_sessions.models  # noqa: F401


# --- Test Database Setup ---
@pytest.fixture(scope="function")
def engine(tmp_path):
    """
    A fresh SQLite database file per test.

    File-backed rather than in-memory so that several threads can each open
    their own connection and race on the same session rows.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'live_sessions_test.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


# --- Mock Dependencies Setup ---
@pytest.fixture(scope="function")
def kafka_producer():
    """A mock Kafka producer that records what was published."""
    return MagicMock()


# --- Test Client Fixtures ---
@pytest.fixture(scope="function")
def client(session_factory, kafka_producer):
    """
    Provides a TestClient backed by the per-test database with Kafka mocked.
    Authentication goes through the real JWT dependency.
    """

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    def override_get_kafka_producer():
        yield kafka_producer

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_kafka_producer] = override_get_kafka_producer
    limiter.enabled = False

    with TestClient(app) as test_client:
        yield test_client

    limiter.enabled = True
    app.dependency_overrides.clear()
