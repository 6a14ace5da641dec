"""
Pytest configuration and shared fixtures for the Job Application Tracker tests.
"""
import os
import sys
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Settings are read once at import time, so the environment goes first
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-jwt-tokens-12345678901234567890")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

# Import application components
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from backend.main import app
from backend.models.db.database import get_db, Base
from backend.models.db.crud import create_user
from backend.models.db.application import JobApplication
from backend.models.db.resume import Resume
from backend.config.settings import Settings
from backend.security import get_password_hash
from backend.services import relationship_manager, resume_service
from backend.services.blob_storage import LocalBlobStorage, get_blob_storage
from backend.api import application as application_api
from backend.api import resumes as resumes_api
from backend import schemas


# Test Database Setup
@pytest.fixture(scope="function")
def test_db_engine():
    """A fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def test_db_session(test_db_engine):
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_db_engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def blob_storage(tmp_path):
    """Resume files land in a per-test directory."""
    return LocalBlobStorage(tmp_path / "uploads")


@pytest.fixture(scope="function")
def test_client(test_db_session, blob_storage):
    """Create a test client with overridden database and storage dependencies."""
    def override_get_db():
        try:
            yield test_db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_storage] = lambda: blob_storage
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def override_settings(monkeypatch):
    """Swap the settings seen by the relationship and resume services."""
    def _override(**values):
        settings = Settings(**values)
        for module in (relationship_manager, resume_service, application_api, resumes_api):
            monkeypatch.setattr(module, "get_settings", lambda: settings)
        return settings
    return _override


# User Fixtures
@pytest.fixture
def test_user_data():
    """Sample user data for testing."""
    return {
        "email": "test@example.com",
        "password": "testpassword123",
        "full_name": "Test User"
    }


@pytest.fixture
def test_user(test_db_session, test_user_data):
    """Create a test user in the database."""
    hashed_password = get_password_hash(test_user_data["password"])
    user_schema = schemas.UserCreate(**test_user_data)
    return create_user(test_db_session, user_schema, hashed_password)


@pytest.fixture
def other_user(test_db_session):
    """A second user whose records must stay invisible to the first."""
    user_schema = schemas.UserCreate(email="other@example.com", password="otherpassword123")
    return create_user(test_db_session, user_schema, get_password_hash(user_schema.password))


@pytest.fixture
def auth_headers(test_client, test_user_data):
    """Get authentication headers for API requests."""
    # Register and login user
    response = test_client.post("/api/auth/register", json=test_user_data)
    assert response.status_code == 200

    # Login to get token
    login_data = {
        "username": test_user_data["email"],
        "password": test_user_data["password"]
    }
    response = test_client.post("/api/auth/login", data=login_data)
    assert response.status_code == 200

    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


# Application Tracker Test Data
@pytest.fixture
def sample_application_data():
    """Sample job application data."""
    return {
        "company": "Acme Corp",
        "role": "Backend Engineer",
        "portal_url": "https://jobs.acme.example/123",
        "status": "applied",
        "location": "Remote",
        "application_date": "2024-01-01",
        "job_type": "full-time",
        "priority": "high",
        "notes": "Referred by a former colleague",
    }


@pytest.fixture
def make_application(test_db_session):
    """Insert an application row directly."""
    def _make(user, company="Acme Corp", role="Engineer", status="applied", created_at=None):
        created_at = created_at or datetime(2024, 1, 1, 12, 0, 0)
        db_application = JobApplication(
            user_id=user.id,
            company=company,
            role=role,
            status=status,
            job_type="full-time",
            priority="medium",
            created_at=created_at,
            updated_at=created_at,
        )
        test_db_session.add(db_application)
        test_db_session.commit()
        test_db_session.refresh(db_application)
        return db_application
    return _make


@pytest.fixture
def make_resume(test_db_session):
    """Insert resume metadata directly, without a stored file."""
    def _make(user, name="General Resume", is_default=False, file_path=None):
        now = datetime(2024, 1, 1, 12, 0, 0)
        db_resume = Resume(
            user_id=user.id,
            name=name,
            file_name=f"{name.lower().replace(' ', '_')}.pdf",
            file_path=file_path or f"{user.id}/{name.lower().replace(' ', '_')}.pdf",
            file_size=1024,
            file_type="application/pdf",
            version="1.0",
            is_default=is_default,
            created_at=now,
            updated_at=now,
        )
        test_db_session.add(db_resume)
        test_db_session.commit()
        test_db_session.refresh(db_resume)
        return db_resume
    return _make


@pytest.fixture
def sample_pdf_bytes():
    return b"%PDF-1.4 sample resume content for testing"
