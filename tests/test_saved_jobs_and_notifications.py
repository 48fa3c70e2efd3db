"""
Tests for saved jobs and the notification log.
"""
from app.core.security import create_access_token
from app.db.models import AnalyticsEvent, Notification, SavedJob


def auth_headers(identity) -> dict:
    return {"Authorization": f"Bearer {create_access_token(identity.id, identity.role)}"}


def test_save_job_twice(client, db, seeker, job):
    headers = auth_headers(seeker)

    first = client.post(f"/jobseeker/save-job/{job.id}", headers=headers)
    assert first.status_code == 201

    second = client.post(f"/jobseeker/save-job/{job.id}", headers=headers)
    assert second.status_code == 400
    assert second.json() == {"message": "Job already saved", "alreadySaved": True}

    assert db.query(SavedJob).count() == 1
    assert db.query(AnalyticsEvent).filter(AnalyticsEvent.event_type == "save").count() == 1


def test_save_missing_job(client, seeker):
    response = client.post("/jobseeker/save-job/4242", headers=auth_headers(seeker))
    assert response.status_code == 404


def test_list_and_unsave(client, db, seeker, employer, make_job, job):
    other = make_job(employer, title="Designer", department="Design")
    headers = auth_headers(seeker)
    client.post(f"/jobseeker/save-job/{job.id}", headers=headers)
    client.post(f"/jobseeker/save-job/{other.id}", headers=headers)

    listing = client.get("/jobseeker/saved-jobs", headers=headers).json()["data"]
    assert {item["job"]["title"] for item in listing} == {"Backend Engineer", "Designer"}
    assert listing[0]["job"]["company"]["companyName"] == "Acme Ltd"

    assert client.delete(f"/jobseeker/unsave-job/{job.id}", headers=headers).status_code == 200
    missing = client.delete(f"/jobseeker/unsave-job/{job.id}", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["message"] == "Saved job not found"
    assert db.query(SavedJob).count() == 1


def _notify(db, identity, title, is_read=False):
    notification = Notification(
        identity_id=identity.id,
        type="job_recommendation",
        title=title,
        message=f"{title} message",
        is_read=is_read,
    )
    db.add(notification)
    db.commit()
    return notification


def test_list_notifications_with_unread_count(client, db, seeker, employer):
    _notify(db, seeker, "First")
    _notify(db, seeker, "Second", is_read=True)
    _notify(db, employer, "Not yours")

    body = client.get("/notifications", headers=auth_headers(seeker)).json()
    assert body["pagination"]["total"] == 2
    assert body["unreadCount"] == 1

    unread = client.get("/notifications?unreadOnly=true", headers=auth_headers(seeker)).json()
    assert [n["title"] for n in unread["data"]] == ["First"]


def test_mark_read_only_own(client, db, seeker, employer):
    mine = _notify(db, seeker, "Mine")
    theirs = _notify(db, employer, "Theirs")

    assert client.put(f"/notifications/{theirs.id}/read", headers=auth_headers(seeker)).status_code == 404

    response = client.put(f"/notifications/{mine.id}/read", headers=auth_headers(seeker))
    assert response.status_code == 200
    assert response.json()["data"]["isRead"] is True


def test_mark_all_read(client, db, seeker, employer):
    _notify(db, seeker, "One")
    _notify(db, seeker, "Two")
    other = _notify(db, employer, "Other")

    response = client.put("/notifications/read-all", headers=auth_headers(seeker))

    assert response.json()["data"]["updated"] == 2
    db.expire_all()
    assert db.query(Notification).filter(Notification.is_read.is_(False)).all() == [other]
