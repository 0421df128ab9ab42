# tests/conftest.py

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from payout_service.main import app
from payout_service.db.session import get_db
from payout_service.models import Base


# --- Test Database Setup ---
# A fresh in-memory SQLite database per test; StaticPool keeps every
# session on the same connection so all of them see the same data.
@pytest.fixture(scope="function")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


# --- Test Client Fixtures ---
@pytest.fixture(scope="function")
def test_client(db):
    """
    Provides a TestClient backed by the test database. Authentication is
    real: requests carry JWTs minted by tests.utils.auth.
    """

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
