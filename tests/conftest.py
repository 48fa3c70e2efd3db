"""
Shared fixtures: in-memory SQLite database, API client with the database
and blob store overridden, and factories for identities and jobs.
"""
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core import config
from app.core.auth_dependency import get_db
from app.core.rate_limit import reset_rate_limits
from app.core.timeutils import utcnow
from app.db.base import Base
from app.db.models import Job
from app.main import app
from app.schemas.auth import EmployerRegistration, JobSeekerRegistration
from app.services import identity_service
from app.services.blob_store import LocalBlobStore, get_blob_store

TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(autouse=True)
def no_email(monkeypatch):
    monkeypatch.setattr(config, "SMTP_HOST", None)


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=test_engine)
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def blob_store(tmp_path):
    return LocalBlobStore(str(tmp_path / "uploads"))


@pytest.fixture
def client(db, blob_store):
    def override_get_db():
        session = TestSessionLocal()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    reset_rate_limits()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        reset_rate_limits()


@pytest.fixture
def make_jobseeker(db):
    """Factory: registered job seeker identity (bypasses the rate-limited route)."""
    def _make(email="seeker@example.com", first_name="Ama", last_name="Mensah", password="secret123"):
        return identity_service.register(db, JobSeekerRegistration(
            email=email, password=password, role="jobseeker", first_name=first_name, last_name=last_name,
        ))
    return _make


@pytest.fixture
def make_employer(db):
    def _make(email="employer@example.com", company_name="Acme Ltd", password="secret123"):
        return identity_service.register(db, EmployerRegistration(
            email=email, password=password, role="employer",
            company_name=company_name, industry="Technology", company_size="11-50",
        ))
    return _make


@pytest.fixture
def make_job(db):
    """Factory: job posting owned by an employer identity."""
    def _make(employer, **overrides):
        values = dict(
            employer_id=employer.company_profile.id,
            title="Backend Engineer",
            department="Engineering",
            description="Build APIs",
            location="Accra",
            job_type="full-time",
            experience_level="mid",
            salary_min=3000,
            salary_max=6000,
            skills=["python", "sql"],
            status="active",
            application_deadline=utcnow() + timedelta(days=30),
        )
        values.update(overrides)
        job = Job(**values)
        db.add(job)
        db.commit()
        db.refresh(job)
        return job
    return _make


@pytest.fixture
def seeker(make_jobseeker):
    return make_jobseeker()


@pytest.fixture
def employer(make_employer):
    return make_employer()


@pytest.fixture
def job(make_job, employer):
    return make_job(employer)
