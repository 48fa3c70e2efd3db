"""
Tests for the job catalog endpoints.
"""
from datetime import timedelta

from app.core.security import create_access_token
from app.core.timeutils import utcnow
from app.db.models import AnalyticsEvent, Application, Job, SavedJob


def auth_headers(identity) -> dict:
    return {"Authorization": f"Bearer {create_access_token(identity.id, identity.role)}"}


JOB_PAYLOAD = {
    "title": "Frontend Developer",
    "department": "Engineering",
    "description": "Build UIs",
    "location": "Kumasi",
    "jobType": "full-time",
    "experienceLevel": "junior",
    "salary": {"min": 2000, "max": 4000, "currency": "GHS", "negotiable": True},
    "skills": ["react", "typescript"],
}


def test_create_job(client, db, employer):
    response = client.post("/jobs", json=JOB_PAYLOAD, headers=auth_headers(employer))

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "active"
    assert data["salary"] == {"min": 2000, "max": 4000, "currency": "GHS", "negotiable": True}
    assert data["employerId"] == employer.company_profile.id
    assert data["applicationsCount"] == 0


def test_create_job_rejects_past_deadline(client, employer):
    payload = {**JOB_PAYLOAD, "applicationDeadline": (utcnow() - timedelta(days=1)).isoformat()}
    response = client.post("/jobs", json=payload, headers=auth_headers(employer))
    assert response.status_code == 400
    assert response.json()["message"] == "Application deadline must be in the future"


def test_jobseeker_cannot_create_job(client, seeker):
    response = client.post("/jobs", json=JOB_PAYLOAD, headers=auth_headers(seeker))
    assert response.status_code == 403


def test_browse_only_active_jobs_with_filters(client, employer, make_job):
    make_job(employer, title="Python Developer", location="Accra")
    make_job(employer, title="Accountant", department="Finance", location="Tema", skills=[])
    make_job(employer, title="Paused Python Role", status="paused")

    everything = client.get("/jobs").json()
    assert everything["pagination"]["total"] == 2

    python = client.get("/jobs?search=python").json()
    assert [j["title"] for j in python["data"]] == ["Python Developer"]

    tema = client.get("/jobs?location=tema").json()
    assert [j["title"] for j in tema["data"]] == ["Accountant"]


def test_browse_salary_filter_and_sort(client, employer, make_job):
    make_job(employer, title="Junior", salary_min=1000, salary_max=2000)
    make_job(employer, title="Senior", salary_min=8000, salary_max=12000)

    rich = client.get("/jobs?salaryMin=5000").json()["data"]
    assert [j["title"] for j in rich] == ["Senior"]

    cheap = client.get("/jobs?salaryMax=1500").json()["data"]
    assert [j["title"] for j in cheap] == ["Junior"]

    ordered = client.get("/jobs?sortBy=salary-desc").json()["data"]
    assert [j["title"] for j in ordered] == ["Senior", "Junior"]


def test_browse_pagination(client, employer, make_job):
    for i in range(3):
        make_job(employer, title=f"Role {i}")

    page = client.get("/jobs?page=2&limit=2").json()
    assert len(page["data"]) == 1
    assert page["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}


def test_browse_marks_saved_jobs_for_seeker(client, db, seeker, job):
    db.add(SavedJob(job_seeker_id=seeker.jobseeker_profile.id, job_id=job.id))
    db.commit()

    as_seeker = client.get("/jobs", headers=auth_headers(seeker)).json()["data"]
    assert as_seeker[0]["isSaved"] is True

    anonymous = client.get("/jobs").json()["data"]
    assert "isSaved" not in anonymous[0]


def test_detail_counts_view_and_records_event(client, db, seeker, job):
    response = client.get(f"/jobs/{job.id}", headers=auth_headers(seeker))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["views"] == 1
    assert data["isSaved"] is False
    assert data["hasApplied"] is False
    assert db.query(AnalyticsEvent).filter(
        AnalyticsEvent.entity_type == "job", AnalyticsEvent.event_type == "view"
    ).count() == 1


def test_detail_related_jobs(client, employer, make_employer, make_job, job):
    other = make_employer(email="other@example.com", company_name="Other Co")
    same_department = make_job(other, title="Platform Engineer")
    unrelated = make_job(other, title="Chef", department="Kitchen", skills=["cooking"])

    related = client.get(f"/jobs/{job.id}").json()["data"]["relatedJobs"]
    ids = [j["id"] for j in related]
    assert same_department.id in ids
    assert unrelated.id not in ids
    assert job.id not in ids


def test_detail_missing_job(client):
    response = client.get("/jobs/12345")
    assert response.status_code == 404
    assert response.json()["message"] == "Job not found"


def test_update_job_by_owner_only(client, employer, make_employer, job):
    rival = make_employer(email="rival@example.com", company_name="Rival")

    forbidden = client.put(f"/jobs/{job.id}", json={"title": "Hijacked"}, headers=auth_headers(rival))
    assert forbidden.status_code == 404

    response = client.put(f"/jobs/{job.id}", json={"title": "Senior Backend Engineer"}, headers=auth_headers(employer))
    assert response.status_code == 200
    assert response.json()["data"]["title"] == "Senior Backend Engineer"
    assert response.json()["data"]["department"] == "Engineering"


def test_set_job_status(client, employer, job):
    response = client.put(f"/jobs/{job.id}/status", json={"status": "paused"}, headers=auth_headers(employer))
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "paused"

    invalid = client.put(f"/jobs/{job.id}/status", json={"status": "archived"}, headers=auth_headers(employer))
    assert invalid.status_code == 400


def test_delete_job_removes_applications_and_bookmarks(client, db, seeker, employer, job):
    profile_id = seeker.jobseeker_profile.id
    db.add(Application(job_id=job.id, job_seeker_id=profile_id, employer_id=job.employer_id))
    db.add(SavedJob(job_seeker_id=profile_id, job_id=job.id))
    db.commit()
    job_id = job.id

    response = client.delete(f"/jobs/{job_id}", headers=auth_headers(employer))

    assert response.status_code == 200
    db.expire_all()
    assert db.get(Job, job_id) is None
    assert db.query(Application).count() == 0
    assert db.query(SavedJob).count() == 0


def test_featured_and_recommendations(client, seeker, employer, make_job):
    make_job(employer, title="Featured Role", featured=True)
    make_job(employer, title="Popular Role", views=50)

    featured = client.get("/jobs/featured").json()["data"]
    assert [j["title"] for j in featured] == ["Featured Role"]

    recommended = client.get("/jobs/recommendations", headers=auth_headers(seeker)).json()["data"]
    assert recommended[0]["title"] == "Popular Role"

    assert client.get("/jobs/recommendations", headers=auth_headers(employer)).status_code == 403


def test_market_stats(client, employer, make_job):
    make_job(employer, department="Engineering")
    make_job(employer, department="Engineering")
    make_job(employer, department="Sales", status="closed")

    stats = client.get("/jobs/stats/overview").json()["data"]
    assert stats["totalJobs"] == 3
    assert stats["activeJobs"] == 2
    assert stats["companiesHiring"] == 1
    assert stats["topDepartments"] == [{"name": "Engineering", "count": 2}]


def test_employer_lists_own_jobs(client, employer, make_employer, make_job):
    make_job(employer)
    make_job(employer, status="closed")
    other = make_employer(email="other@example.com", company_name="Other")
    make_job(other)

    response = client.get("/employer/jobs", headers=auth_headers(employer)).json()
    assert response["pagination"]["total"] == 2

    closed = client.get("/employer/jobs?status=closed", headers=auth_headers(employer)).json()
    assert len(closed["data"]) == 1
