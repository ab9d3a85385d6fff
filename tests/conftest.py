"""Shared test fixtures for the Interface Traffic Store tests.

Provides a test database (in-memory SQLite with foreign keys enabled), a
test session, a FastAPI test client with the database dependency
overridden, and a pre-populated interface.
"""

import os
from datetime import datetime

# Keep the application's module-level engine off the filesystem.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from trafficstore.database import Base, _build_engine, get_db
from trafficstore.main import app
from trafficstore.services.traffic import record_traffic

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

# 2024-03-15 14:37:00 local time, the worked example for bucket rounding
EVENT_TIME = datetime(2024, 3, 15, 14, 37, 0)


@pytest.fixture()
def test_engine():
    """Create a test database engine with in-memory SQLite.

    Uses StaticPool so a single connection is shared across threads,
    which is required because TestClient dispatches requests in a
    separate thread while the test runs on the main thread.
    """
    engine = _build_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def test_session(test_engine):
    """Create a test database session."""
    TestSession = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSession()
    yield session
    session.close()


@pytest.fixture()
def client(test_session):
    """Create a FastAPI test client with the test database injected."""

    def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def sample_traffic(test_session):
    """Record traffic for two interfaces.

    Interfaces:
        - eth0: two samples in the same five-minute bucket (14:37 and 14:38)
          and one an hour later (15:02), for 600 rx / 300 tx in total.
        - wlan0: one sample of 1000 rx / 2000 tx at 14:37.
    """
    record_traffic(test_session, "eth0", 100, 50, EVENT_TIME)
    record_traffic(test_session, "eth0", 200, 100, datetime(2024, 3, 15, 14, 38, 30))
    record_traffic(test_session, "eth0", 300, 150, datetime(2024, 3, 15, 15, 2, 0))
    record_traffic(test_session, "wlan0", 1000, 2000, EVENT_TIME)
