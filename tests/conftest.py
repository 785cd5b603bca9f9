"""
Pytest configuration and fixtures.

API tests run against an in-memory SQLite database shared between the test
and the TestClient through a single session. Notification delivery is
replaced by a mock and uploads go to a temporary directory.
"""

import os
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

os.environ.setdefault("NOTIFICATION_DRY_RUN", "true")

from fastapi.testclient import TestClient

from core.context import RequestContext, utcnow
from core.lifecycle.states import JobStatus, UserRole
from core.storage import LocalFileStorage
from database.database import create_db_engine, create_session_factory, init_db
from database.models import Job
from database.repositories import UserRepository
from notification.service import NotificationService
from web.backend.auth import issue_token
from web.backend.config import get_config
from web.backend.dependencies import get_db, get_notification_service, get_storage


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring database (deselect with '-m \"not db\"')"
    )
    config.addinivalue_line(
        "markers", "api: marks tests that go through the HTTP layer"
    )


@pytest.fixture
def db_engine():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    session = create_session_factory(db_engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(root=str(tmp_path / "uploads"), base_url="/uploads")


@pytest.fixture
def notifier():
    return MagicMock(spec=NotificationService)


@pytest.fixture
def client(db_session, storage, notifier):
    from web.backend.app import app

    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_notification_service] = lambda: notifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    def _make(role="candidate", name=None, phone="5551234567", email=None):
        counter["n"] += 1
        n = counter["n"]
        user = UserRepository(db_session).create(
            email=email or f"{role}{n}@example.com",
            role=role,
            name=name or f"{role.title()} {n}",
            username=f"{role}{n}",
            phone=phone,
        )
        db_session.commit()
        return user

    return _make


@pytest.fixture
def make_job(db_session):
    def _make(employer, **overrides):
        now = utcnow()
        fields = dict(
            employer_id=employer.id,
            job_title="Backend Engineer",
            job_description="Build and run APIs",
            job_type="Full-time",
            salary_min=30000,
            salary_max=60000,
            country="USA",
            city="Austin",
            experience_level="3-5 years",
            education_level="Bachelor's Degree",
            job_category="Engineering",
            tags=["python", "sql"],
            benefits=[],
            posted_date=now,
            expiration_date=now + timedelta(days=30),
            status=JobStatus.ACTIVE.value,
        )
        fields.update(overrides)
        job = Job(**fields)
        db_session.add(job)
        db_session.commit()
        return job

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        auth = get_config().auth
        token = issue_token(user.id, user.role, auth.secret, ttl=timedelta(hours=auth.token_ttl_hours))
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def ctx_for():
    def _ctx(user, now=None):
        return RequestContext.build(user.id, UserRole(user.role), now=now)

    return _ctx
