# tests/conftest.py

import os

# Must be set before the app modules read their settings
os.environ["DATABASE_URL_LOCAL"] = "sqlite://"
os.environ["EVENT_BUS_ENABLED"] = "false"
os.environ["PROJECTOR_ENABLED"] = "false"
os.environ["USERS_API_BASE"] = ""
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from unittest.mock import MagicMock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from starlette.testclient import TestClient

from app import models  # noqa: F401
from app.api import deps
from app.core.kafka_producer import EventPublisher, get_event_publisher
from app.db.base_class import Base
from app.db.session import get_db
from app.main import app
from app.search_main import app as search_app
from app.services.users_client import UsersClient, get_users_client
from tests.utils.auth import ADMIN


# --- In-memory database shared by every thread of a test ---
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def session_factory():
    """Sessions for worker threads, bound to the same in-memory database."""
    return TestingSessionLocal


@pytest.fixture(scope="function")
def publisher():
    """A publisher whose producer records sends instead of talking to Kafka."""
    mock_publisher = MagicMock(spec=EventPublisher)
    mock_publisher.publish.return_value = True
    return mock_publisher


@pytest.fixture(scope="function")
def users_client():
    mock_client = MagicMock(spec=UsersClient)
    mock_client.enabled = True
    mock_client.user_exists.return_value = True
    return mock_client


# --- Mock Dependencies Setup ---
@pytest.fixture(scope="function")
def client(db_session, publisher, users_client):
    """
    Provides a TestClient for the activities service with the database,
    the event bus and the users service replaced. Requests run as an admin
    unless a test overrides `deps.get_current_user` itself.
    """

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_session_factory] = lambda: TestingSessionLocal
    app.dependency_overrides[get_event_publisher] = lambda: publisher
    app.dependency_overrides[get_users_client] = lambda: users_client
    app.dependency_overrides[deps.get_current_user] = lambda: ADMIN

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def search_service():
    return MagicMock()


@pytest.fixture(scope="function")
def search_client(search_service):
    search_app.dependency_overrides[deps.get_search_service] = lambda: search_service

    with TestClient(search_app) as test_client:
        yield test_client

    search_app.dependency_overrides.clear()
