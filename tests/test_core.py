"""
Unit tests for the status lifecycle, rate limiter stores, blob store,
counter reconciliation, the health endpoint and app lifespan.
"""
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from app import main as main_module
from app.core import config
from app.core.application_states import (
    PIPELINE_STATUSES,
    ensure_employer_transition,
    ensure_withdrawable,
    is_terminal,
)
from app.core.auth_dependency import get_db
from app.core.errors import DependencyError, InvalidStateError, NotFoundError, ValidationError
from app.core.rate_limit import DatabaseRateLimitStore, InMemoryRateLimitStore
from app.db.models import Application, RateLimitHit
from app.main import app
from app.services import blob_store as blob_store_module
from app.services.blob_store import IMAGE, RESUME, LocalBlobStore
from app.services.job_service import reconcile_applications_count


# --- Application status lifecycle ---

def test_terminal_statuses():
    assert is_terminal("hired")
    assert is_terminal("rejected")
    assert is_terminal("withdrawn")
    assert not any(is_terminal(s) for s in PIPELINE_STATUSES[:-1])


def test_employer_may_move_backwards():
    ensure_employer_transition("interviewed", "under-review")
    ensure_employer_transition("applied", "offered")


def test_employer_cannot_withdraw():
    with pytest.raises(ValidationError):
        ensure_employer_transition("applied", "withdrawn")


def test_employer_rejects_unknown_status():
    with pytest.raises(ValidationError):
        ensure_employer_transition("applied", "ghosted")


@pytest.mark.parametrize("current", ["hired", "rejected", "withdrawn"])
def test_terminal_status_is_final(current):
    with pytest.raises(InvalidStateError):
        ensure_employer_transition(current, "under-review")
    with pytest.raises(InvalidStateError):
        ensure_withdrawable(current)


# --- Rate limiter stores ---

def test_in_memory_store_blocks_after_threshold():
    store = InMemoryRateLimitStore()
    for i in range(3):
        assert store.hit("login", "1.2.3.4", 3, 60, now=1000.0 + i) is None

    retry_after = store.hit("login", "1.2.3.4", 3, 60, now=1010.0)
    # oldest hit at 1000 leaves the window at 1060
    assert retry_after == 51


def test_in_memory_store_window_slides():
    store = InMemoryRateLimitStore()
    for i in range(3):
        store.hit("login", "1.2.3.4", 3, 60, now=1000.0 + i)

    assert store.hit("login", "1.2.3.4", 3, 60, now=1060.5) is None


def test_in_memory_store_keys_are_independent():
    store = InMemoryRateLimitStore()
    for _ in range(2):
        store.hit("login", "1.2.3.4", 2, 60, now=1000.0)

    assert store.hit("login", "1.2.3.4", 2, 60, now=1001.0) is not None
    assert store.hit("register", "1.2.3.4", 2, 60, now=1001.0) is None
    assert store.hit("login", "5.6.7.8", 2, 60, now=1001.0) is None


def test_in_memory_store_evicts_idle_keys():
    store = InMemoryRateLimitStore(shards=1, sweep_every=2)
    store.hit("login", "1.2.3.4", 3, 60, now=1000.0)
    assert store.tracked_keys() == 1

    # second call triggers a sweep; the first key's window closed at 1060
    store.hit("login", "5.6.7.8", 3, 60, now=1100.0)

    assert store.tracked_keys() == 1
    assert store.hit("login", "1.2.3.4", 1, 60, now=1101.0) is None


def test_in_memory_store_keeps_active_keys_on_sweep():
    store = InMemoryRateLimitStore(shards=1, sweep_every=2)
    store.hit("login", "1.2.3.4", 3, 60, now=1000.0)
    store.hit("login", "5.6.7.8", 3, 60, now=1030.0)

    assert store.tracked_keys() == 2


def test_database_store(db):
    store = DatabaseRateLimitStore(sessionmaker(bind=db.get_bind()))

    assert store.hit("password_reset", "1.2.3.4", 2, 60, now=1000.0) is None
    assert store.hit("password_reset", "1.2.3.4", 2, 60, now=1001.0) is None
    assert store.hit("password_reset", "1.2.3.4", 2, 60, now=1002.0) == 59

    # expired hits are pruned on the next check
    assert store.hit("password_reset", "1.2.3.4", 2, 60, now=1100.0) is None
    assert db.query(RateLimitHit).count() == 1

    store.clear()
    assert db.query(RateLimitHit).count() == 0


# --- Blob store ---

def test_blob_store_writes_file(tmp_path):
    store = LocalBlobStore(str(tmp_path))

    blob = store.store(b"%PDF-1.4 cv", "application/pdf", RESUME, 7, "cv.pdf")

    assert blob.ref.startswith("/uploads/resume/7-")
    assert blob.ref.endswith(".pdf")
    assert blob.filename == "cv.pdf"
    assert blob.size_bytes == 11
    assert (tmp_path / "resume" / blob.ref.rsplit("/", 1)[1]).read_bytes() == b"%PDF-1.4 cv"


def test_blob_store_rejects_wrong_type(tmp_path):
    store = LocalBlobStore(str(tmp_path))

    with pytest.raises(ValidationError, match="Only image files"):
        store.store(b"data", "application/pdf", IMAGE, 1)
    with pytest.raises(ValidationError, match="Only PDF"):
        store.store(b"data", "image/png", RESUME, 1)


def test_blob_store_size_limit(tmp_path):
    store = LocalBlobStore(str(tmp_path), max_bytes=4)

    with pytest.raises(ValidationError, match="File too large"):
        store.store(b"12345", "image/png", IMAGE, 1)
    with pytest.raises(ValidationError, match="empty"):
        store.store(b"", "image/png", IMAGE, 1)


def test_blob_store_write_failure(tmp_path):
    blocker = tmp_path / "blocked"
    blocker.write_text("not a directory")
    store = LocalBlobStore(str(blocker))

    with pytest.raises(DependencyError):
        store.store(b"img", "image/png", IMAGE, 1)


def test_blob_store_same_millisecond_uploads_do_not_collide(tmp_path, monkeypatch):
    monkeypatch.setattr(blob_store_module, "time", SimpleNamespace(time=lambda: 1700000000.0))
    store = LocalBlobStore(str(tmp_path))

    first = store.store(b"first", "image/png", IMAGE, 3)
    second = store.store(b"second", "image/png", IMAGE, 3)

    assert first.ref != second.ref
    assert len(list((tmp_path / "image").iterdir())) == 2


def test_blob_store_delete(tmp_path):
    store = LocalBlobStore(str(tmp_path))
    blob = store.store(b"img", "image/png", IMAGE, 1)

    store.delete(blob.ref)
    store.delete(blob.ref)
    store.delete("/uploads/../outside.txt")

    assert list((tmp_path / "image").iterdir()) == []


# --- Counter reconciliation ---

def test_reconcile_applications_count(db, make_jobseeker, employer, job):
    company_id = employer.company_profile.id
    for i, status in enumerate(["applied", "hired", "withdrawn"]):
        candidate = make_jobseeker(email=f"c{i}@example.com")
        db.add(Application(
            job_id=job.id,
            job_seeker_id=candidate.jobseeker_profile.id,
            employer_id=company_id,
            status=status,
        ))
    job.applications_count = 7
    db.commit()

    assert reconcile_applications_count(db, job.id) == (7, 2)
    db.refresh(job)
    assert job.applications_count == 2
    assert reconcile_applications_count(db, job.id) == (2, 2)


def test_reconcile_missing_job(db):
    with pytest.raises(NotFoundError):
        reconcile_applications_count(db, 999)


def test_application_keeps_employer_snapshot(db, seeker, employer, make_employer, job):
    """Re-pointing a job does not move its existing applications."""
    db.add(Application(
        job_id=job.id,
        job_seeker_id=seeker.jobseeker_profile.id,
        employer_id=job.employer_id,
    ))
    db.commit()
    original_employer = job.employer_id

    other = make_employer(email="other@example.com", company_name="Other Co")
    job.employer_id = other.company_profile.id
    db.commit()

    application = db.query(Application).one()
    assert application.employer_id == original_employer


# --- Health ---

def test_health_ok(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"


class _BrokenSession:
    def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))


def test_health_degraded(client):
    app.dependency_overrides[get_db] = lambda: _BrokenSession()

    response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"
    assert response.json()["database"] == "unavailable"


# --- Lifespan ---

def test_lifespan_prepares_schema(monkeypatch):
    calls = []
    monkeypatch.setattr(main_module, "setup_logging", lambda *args: calls.append("logging"))
    monkeypatch.setattr(main_module, "init_db", lambda: calls.append("init_db"))
    monkeypatch.setattr(main_module, "run_migrations", lambda: calls.append("migrations"))
    monkeypatch.setattr(config, "RUN_MIGRATIONS", False)

    with TestClient(app) as lifespan_client:
        assert lifespan_client.get("/").status_code == 200

    assert calls == ["logging", "init_db"]
    assert app.router.on_startup == []


def test_lifespan_runs_migrations_when_enabled(monkeypatch):
    calls = []
    monkeypatch.setattr(main_module, "setup_logging", lambda *args: None)
    monkeypatch.setattr(main_module, "init_db", lambda: calls.append("init_db"))
    monkeypatch.setattr(main_module, "run_migrations", lambda: calls.append("migrations"))
    monkeypatch.setattr(config, "RUN_MIGRATIONS", True)

    with TestClient(app):
        pass

    assert calls == ["migrations"]
