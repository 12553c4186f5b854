"""Pytest fixtures for testing"""

import pytest
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from fundflow.api.dependencies import get_push_client
from fundflow.api.main import create_app
from fundflow.infrastructure.clients.push import PushClient
from fundflow.infrastructure.database.models import Base
from fundflow.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_USER = "user_1"


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def push_client() -> PushClient:
    """Push client with credentials; tests patch PushClient.send"""
    return PushClient(api_url="http://push.test/notifications", app_id="test-app", api_key="test-key")


@pytest.fixture
def app(db: Session, push_client: PushClient):
    """FastAPI app wired to the test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_push_client] = lambda: push_client
    return app


@pytest.fixture
def client(app) -> TestClient:
    """Create FastAPI test client acting as TEST_USER"""
    return TestClient(app, headers={"X-User-ID": TEST_USER})

