"""
Tests for the application lifecycle endpoints.
"""
import smtplib
from datetime import timedelta

import pytest

from app.core import config
from app.core.errors import ConflictError
from app.core.security import create_access_token
from app.core.timeutils import utcnow
from app.db.models import AnalyticsEvent, Application, Job, Notification
from app.services import application_service, notification_service, notifier


def auth_headers(identity) -> dict:
    return {"Authorization": f"Bearer {create_access_token(identity.id, identity.role)}"}


def _apply(client, seeker, job_id, **form):
    return client.post(f"/applications/apply/{job_id}", data=form, headers=auth_headers(seeker))


def _set_status(client, employer, application_id, **payload):
    return client.put(
        f"/employer/applications/{application_id}/status",
        json=payload,
        headers=auth_headers(employer),
    )


def _counter(db, job_id):
    db.expire_all()
    return db.get(Job, job_id).applications_count


def test_apply_creates_application_and_side_effects(client, db, seeker, employer, job):
    response = _apply(client, seeker, job.id, coverLetter="I would love to join")

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["status"] == "applied"
    assert body["data"]["coverLetter"] == "I would love to join"
    assert body["data"]["employerId"] == employer.company_profile.id

    assert _counter(db, job.id) == 1
    notification = db.query(Notification).filter(Notification.identity_id == employer.id).one()
    assert notification.type == "application_received"
    assert "Ama Mensah" in notification.message
    events = db.query(AnalyticsEvent).filter(
        AnalyticsEvent.entity_id == job.id, AnalyticsEvent.event_type == "application"
    ).all()
    assert len(events) == 1


def test_duplicate_apply_is_rejected_without_side_effects(client, db, seeker, employer, job):
    assert _apply(client, seeker, job.id).status_code == 201

    response = _apply(client, seeker, job.id)

    assert response.status_code == 400
    assert response.json()["message"] == "You have already applied for this job"
    assert _counter(db, job.id) == 1
    assert db.query(Application).count() == 1
    assert db.query(Notification).filter(Notification.identity_id == employer.id).count() == 1


def test_apply_with_custom_answers_and_resume(client, db, seeker, job, blob_store):
    response = client.post(
        f"/applications/apply/{job.id}",
        data={"customAnswers": '[{"question": "Notice period?", "answer": "2 weeks"}]'},
        files={"resume": ("cv.pdf", b"%PDF-1.4 test", "application/pdf")},
        headers=auth_headers(seeker),
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["customAnswers"] == [{"question": "Notice period?", "answer": "2 weeks"}]
    assert data["resumeRef"].startswith("/uploads/resume/")
    assert data["resumeFilename"] == "cv.pdf"


def test_apply_rejects_malformed_custom_answers(client, seeker, job):
    response = _apply(client, seeker, job.id, customAnswers="not json")
    assert response.status_code == 400


def test_apply_to_missing_job_returns_404(client, seeker):
    response = _apply(client, seeker, 9999)
    assert response.status_code == 404
    assert response.json()["message"] == "Job not found"


def test_apply_to_closed_job(client, db, seeker, employer, make_job):
    closed = make_job(employer, status="closed")
    response = _apply(client, seeker, closed.id)
    assert response.status_code == 400
    assert response.json()["message"] == "This job is no longer accepting applications"
    assert _counter(db, closed.id) == 0


def test_apply_after_deadline(client, seeker, employer, make_job):
    expired = make_job(employer, application_deadline=utcnow() - timedelta(days=1))
    response = _apply(client, seeker, expired.id)
    assert response.status_code == 400
    assert response.json()["message"] == "Application deadline has passed"


def test_employer_cannot_apply(client, employer, job):
    response = _apply(client, employer, job.id)
    assert response.status_code == 403
    assert response.json()["message"] == "Access denied. Job seeker account required."


def test_apply_requires_token(client, job):
    response = client.post(f"/applications/apply/{job.id}")
    assert response.status_code == 401
    assert response.json()["message"] == "Access token is required"


def test_reject_requires_reason(client, db, seeker, employer, job):
    application_id = _apply(client, seeker, job.id).json()["data"]["id"]

    missing = _set_status(client, employer, application_id, status="rejected")
    assert missing.status_code == 400

    response = _set_status(client, employer, application_id, status="rejected", rejectionReason="position filled internally")
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "rejected"
    assert response.json()["data"]["rejectionReason"] == "position filled internally"

    notification = db.query(Notification).filter(Notification.identity_id == seeker.id).one()
    assert notification.type == "application_status_changed"
    assert notification.data["status"] == "rejected"


def test_interview_requires_future_date(client, db, seeker, employer, job):
    application_id = _apply(client, seeker, job.id).json()["data"]["id"]

    past = _set_status(
        client, employer, application_id,
        status="interview-scheduled",
        interviewDetails={"scheduledDate": (utcnow() - timedelta(days=1)).isoformat(), "interviewType": "video"},
    )
    assert past.status_code == 400

    response = _set_status(
        client, employer, application_id,
        status="interview-scheduled",
        interviewDetails={"scheduledDate": (utcnow() + timedelta(days=2)).isoformat(), "interviewType": "video"},
    )
    assert response.status_code == 200
    assert response.json()["data"]["interviewDetails"]["interviewType"] == "video"
    notification = db.query(Notification).filter(Notification.identity_id == seeker.id).one()
    assert notification.type == "interview_scheduled"


def test_employer_cannot_set_withdrawn(client, seeker, employer, job):
    application_id = _apply(client, seeker, job.id).json()["data"]["id"]
    response = _set_status(client, employer, application_id, status="withdrawn")
    assert response.status_code == 400


def test_terminal_status_is_immutable(client, seeker, employer, job):
    application_id = _apply(client, seeker, job.id).json()["data"]["id"]
    assert _set_status(client, employer, application_id, status="hired").status_code == 200

    response = _set_status(client, employer, application_id, status="under-review")
    assert response.status_code == 400


def test_backward_move_between_non_terminal_statuses(client, seeker, employer, job):
    application_id = _apply(client, seeker, job.id).json()["data"]["id"]
    assert _set_status(client, employer, application_id, status="shortlisted").status_code == 200
    response = _set_status(client, employer, application_id, status="under-review")
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "under-review"


def test_other_employer_gets_404(client, seeker, employer, make_employer, job):
    application_id = _apply(client, seeker, job.id).json()["data"]["id"]
    rival = make_employer(email="rival@example.com", company_name="Rival Inc")

    response = _set_status(client, rival, application_id, status="shortlisted")

    assert response.status_code == 404
    assert response.json()["message"] == "Application not found"


def test_withdraw_decrements_counter_once(client, db, seeker, employer, job):
    application_id = _apply(client, seeker, job.id).json()["data"]["id"]
    assert _counter(db, job.id) == 1

    response = client.put(f"/applications/{application_id}/withdraw", headers=auth_headers(seeker))
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "withdrawn"
    assert _counter(db, job.id) == 0

    again = client.put(f"/applications/{application_id}/withdraw", headers=auth_headers(seeker))
    assert again.status_code == 400
    assert again.json()["message"] == "Cannot withdraw this application"
    assert _counter(db, job.id) == 0


def test_withdraw_terminal_application(client, db, seeker, employer, job):
    application_id = _apply(client, seeker, job.id).json()["data"]["id"]
    _set_status(client, employer, application_id, status="rejected", rejectionReason="position filled")

    response = client.put(f"/jobseeker/applications/{application_id}/withdraw", headers=auth_headers(seeker))

    assert response.status_code == 400
    assert _counter(db, job.id) == 1


def test_withdraw_someone_elses_application(client, seeker, make_jobseeker, job):
    application_id = _apply(client, seeker, job.id).json()["data"]["id"]
    other = make_jobseeker(email="other@example.com")

    response = client.put(f"/applications/{application_id}/withdraw", headers=auth_headers(other))
    assert response.status_code == 404
    assert client.get(f"/applications/{application_id}", headers=auth_headers(other)).status_code == 404


def test_accept_offer_requires_offered_status(client, seeker, employer, job):
    application_id = _apply(client, seeker, job.id).json()["data"]["id"]

    response = client.put(f"/applications/{application_id}/accept-offer", headers=auth_headers(seeker))
    assert response.status_code == 404
    assert response.json()["message"] == "Job offer not found"

    _set_status(client, employer, application_id, status="offered")
    response = client.put(f"/applications/{application_id}/accept-offer", headers=auth_headers(seeker))
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "hired"


def test_decline_offer(client, db, seeker, employer, job):
    application_id = _apply(client, seeker, job.id).json()["data"]["id"]
    _set_status(client, employer, application_id, status="offered")

    response = client.put(
        f"/applications/{application_id}/decline-offer",
        json={"reason": "Accepted another offer"},
        headers=auth_headers(seeker),
    )

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "rejected"
    assert response.json()["data"]["rejectionReason"] == "Accepted another offer"
    types = [n.type for n in db.query(Notification).filter(Notification.identity_id == employer.id)]
    assert types.count("application_status_changed") == 1


def test_rate_candidate(client, seeker, employer, job):
    application_id = _apply(client, seeker, job.id).json()["data"]["id"]

    response = client.put(
        f"/employer/applications/{application_id}/rating",
        json={"rating": 4, "notes": "Strong SQL"},
        headers=auth_headers(employer),
    )
    assert response.status_code == 200
    assert response.json()["data"]["rating"] == 4

    bad = client.put(
        f"/employer/applications/{application_id}/rating",
        json={"rating": 6},
        headers=auth_headers(employer),
    )
    assert bad.status_code == 400


def test_my_applications_and_stats(client, seeker, employer, make_job, job):
    second = make_job(employer, title="Data Analyst", department="Data")
    first_id = _apply(client, seeker, job.id).json()["data"]["id"]
    _apply(client, seeker, second.id)
    _set_status(client, employer, first_id, status="under-review")

    listing = client.get("/applications/my-applications", headers=auth_headers(seeker))
    assert listing.status_code == 200
    assert listing.json()["pagination"]["total"] == 2
    assert listing.json()["data"][0]["job"]["company"]["companyName"] == "Acme Ltd"

    filtered = client.get("/applications/my-applications?status=under-review", headers=auth_headers(seeker))
    assert [a["id"] for a in filtered.json()["data"]] == [first_id]

    stats = client.get("/applications/stats/overview", headers=auth_headers(seeker)).json()["data"]
    assert stats["overview"]["total"] == 2
    assert stats["overview"]["pending"] == 2
    assert stats["overview"]["responseRate"] == "50%"
    assert len(stats["recentApplications"]) == 2


def test_employer_lists_applications_with_candidate(client, seeker, employer, job):
    _apply(client, seeker, job.id)

    response = client.get(f"/employer/applications?jobId={job.id}", headers=auth_headers(employer))

    assert response.status_code == 200
    item = response.json()["data"][0]
    assert item["candidate"]["firstName"] == "Ama"
    assert item["job"]["title"] == "Backend Engineer"


def test_unique_constraint_stops_duplicate_that_passes_the_lookup(db, seeker, job, monkeypatch):
    profile = seeker.jobseeker_profile
    application_service.apply_to_job(db, profile, job.id)
    # a concurrent request that read "no application yet" before the first one committed
    monkeypatch.setattr(application_service, "_existing_application_id", lambda *args: None)

    with pytest.raises(ConflictError):
        application_service.apply_to_job(db, profile, job.id)

    assert db.query(Application).count() == 1
    assert _counter(db, job.id) == 1


def test_failed_email_does_not_fail_apply(client, db, seeker, employer, job, monkeypatch):
    monkeypatch.setattr(config, "SMTP_HOST", "smtp.example.com")

    def refuse(to_addr, msg):
        raise smtplib.SMTPException("connection refused")

    monkeypatch.setattr(notifier, "_smtp_send", refuse)
    results = []

    def recording_send_email(*args, **kwargs):
        results.append(notifier.send_email(*args, **kwargs))
        return results[-1]

    monkeypatch.setattr(notification_service, "send_email", recording_send_email)

    response = _apply(client, seeker, job.id)

    assert response.status_code == 201
    notification = db.query(Notification).filter(Notification.identity_id == employer.id).one()
    assert notification.type == "application_received"
    assert results == [False]


def test_send_email_reports_network_failure(monkeypatch):
    monkeypatch.setattr(config, "SMTP_HOST", "smtp.example.com")

    def unreachable(to_addr, msg):
        raise OSError("network unreachable")

    monkeypatch.setattr(notifier, "_smtp_send", unreachable)

    assert notifier.send_email("ama@example.com", "Hello", "Body") is False


def _stored_resumes(blob_store):
    directory = blob_store.root / "resume"
    return sorted(directory.iterdir()) if directory.exists() else []


def test_rejected_apply_leaves_no_resume_behind(client, db, seeker, employer, make_job, blob_store):
    closed = make_job(employer, status="closed")

    response = client.post(
        f"/applications/apply/{closed.id}",
        files={"resume": ("cv.pdf", b"%PDF-1.4 test", "application/pdf")},
        headers=auth_headers(seeker),
    )

    assert response.status_code == 400
    assert _stored_resumes(blob_store) == []


def test_duplicate_apply_keeps_only_first_resume(client, db, seeker, job, blob_store):
    def apply_with_resume():
        return client.post(
            f"/applications/apply/{job.id}",
            files={"resume": ("cv.pdf", b"%PDF-1.4 test", "application/pdf")},
            headers=auth_headers(seeker),
        )

    first = apply_with_resume()
    second = apply_with_resume()

    assert first.status_code == 201
    assert second.status_code == 400
    stored = _stored_resumes(blob_store)
    assert len(stored) == 1
    assert first.json()["data"]["resumeRef"].endswith(stored[0].name)
