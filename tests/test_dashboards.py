"""
Tests for dashboard aggregation.
"""
from datetime import datetime, timedelta

import pytest

from app.core.security import create_access_token
from app.db.models import Application
from app.services.dashboard_service import employer_analytics, employer_dashboard, percent, time_ago


def auth_headers(identity) -> dict:
    return {"Authorization": f"Bearer {create_access_token(identity.id, identity.role)}"}


NOW = datetime(2026, 3, 15, 12, 0, 0)


@pytest.mark.parametrize("elapsed, expected", [
    (timedelta(minutes=59, seconds=59), "Less than an hour ago"),
    (timedelta(hours=1), "1 hour ago"),
    (timedelta(hours=23, minutes=59), "23 hours ago"),
    (timedelta(hours=24), "1 day ago"),
    (timedelta(hours=47, minutes=59), "1 day ago"),
    (timedelta(hours=48), "2 days ago"),
])
def test_time_ago_boundaries(elapsed, expected):
    assert time_ago(NOW - elapsed, NOW) == expected


def test_percent_rounds_half_up():
    assert percent(1, 8) == 13  # 12.5
    assert percent(3, 10) == 30
    assert percent(0, 0) == 0
    assert percent(2, 3) == 67


def _applications(db, seeker_identity, employer_identity, jobs, statuses, **extra):
    seeker_id = seeker_identity.jobseeker_profile.id
    for job, status in zip(jobs, statuses):
        db.add(Application(
            job_id=job.id,
            job_seeker_id=seeker_id,
            employer_id=employer_identity.company_profile.id,
            status=status,
            **extra,
        ))
    db.commit()


def test_jobseeker_dashboard_response_rate(client, db, seeker, employer, make_job):
    jobs = [make_job(employer, title=f"Job {i}") for i in range(10)]
    statuses = ["applied"] * 7 + ["under-review", "rejected", "interview-scheduled"]
    _applications(db, seeker, employer, jobs, statuses)

    data = client.get("/jobseeker/dashboard-stats", headers=auth_headers(seeker)).json()["data"]

    assert data["totalApplications"] == 10
    assert data["responseRate"] == "30%"
    assert data["interviewsScheduled"] == 1
    assert data["savedJobs"] == 0
    assert len(data["recentApplications"]) == 3
    assert data["recentApplications"][0]["companyName"] == "Acme Ltd"


def test_jobseeker_dashboard_without_applications(client, seeker):
    data = client.get("/jobseeker/dashboard-stats", headers=auth_headers(seeker)).json()["data"]
    assert data["responseRate"] == "0%"
    assert data["recentApplications"] == []


def test_employer_dashboard_hired_this_month(db, make_jobseeker, employer, make_job):
    now = datetime(2026, 3, 15, 12, 0, 0)
    seekers = [make_jobseeker(email=f"s{i}@example.com") for i in range(3)]
    job = make_job(employer)
    company_id = employer.company_profile.id
    for seeker, status, changed in (
        (seekers[0], "hired", datetime(2026, 3, 1, 0, 0, 0)),
        (seekers[1], "hired", datetime(2026, 2, 28, 23, 59, 59)),
        (seekers[2], "applied", datetime(2026, 3, 10)),
    ):
        db.add(Application(
            job_id=job.id,
            job_seeker_id=seeker.jobseeker_profile.id,
            employer_id=company_id,
            status=status,
            applied_at=changed,
            last_status_update=changed,
        ))
    db.commit()

    data = employer_dashboard(db, employer.company_profile, now=now)

    assert data["totalJobs"] == 1
    assert data["activeJobs"] == 1
    assert data["totalApplications"] == 3
    assert data["hiredThisMonth"] == 1
    assert data["responseRate"] == "67%"
    assert [a["time"] for a in data["recentActivity"]] == ["5 days ago", "14 days ago", "15 days ago"]


def test_employer_analytics(db, make_jobseeker, employer, make_job):
    now = datetime(2026, 3, 15, 12, 0, 0)
    popular = make_job(employer, title="Popular")
    quiet = make_job(employer, title="Quiet")
    company_id = employer.company_profile.id
    rows = [
        (popular, "hired", datetime(2026, 3, 14, 9, 0), 5),
        (popular, "rejected", datetime(2026, 3, 14, 23, 30), 3),
        (popular, "applied", datetime(2026, 3, 10, 8, 0), None),
        (quiet, "withdrawn", datetime(2026, 1, 1, 8, 0), None),
    ]
    for i, (job, status, applied_at, rating) in enumerate(rows):
        seeker = make_jobseeker(email=f"a{i}@example.com")
        db.add(Application(
            job_id=job.id,
            job_seeker_id=seeker.jobseeker_profile.id,
            employer_id=company_id,
            status=status,
            applied_at=applied_at,
            last_status_update=applied_at,
            rating=rating,
        ))
    db.commit()

    data = employer_analytics(db, employer.company_profile, now=now)

    top = data["topPerformingJobs"]
    assert [j["title"] for j in top] == ["Popular", "Quiet"]
    assert top[0]["applicationsCount"] == 3
    assert top[0]["hiredCount"] == 1

    assert data["applicationTrends"] == [
        {"date": "2026-03-10", "count": 1},
        {"date": "2026-03-14", "count": 2},
    ]

    funnel = {row["status"]: row["count"] for row in data["hiringFunnel"]}
    assert [row["status"] for row in data["hiringFunnel"]][:7] == [
        "applied", "under-review", "shortlisted", "interview-scheduled", "interviewed", "offered", "hired",
    ]
    assert funnel["shortlisted"] == 0
    assert funnel["rejected"] == 1
    assert funnel["withdrawn"] == 1

    assert data["metrics"]["averageCandidateRating"] == 4.0
    assert data["metrics"]["applicationSuccessRate"] == 25


def test_employer_dashboard_endpoints(client, employer):
    stats = client.get("/employer/dashboard-stats", headers=auth_headers(employer))
    analytics = client.get("/employer/analytics", headers=auth_headers(employer))

    assert stats.status_code == 200
    assert stats.json()["data"]["responseRate"] == "0%"
    assert analytics.status_code == 200
    assert analytics.json()["data"]["metrics"]["averageCandidateRating"] is None
