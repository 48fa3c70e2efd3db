"""
Dashboard aggregation for job seekers and employers.

All times are UTC. Percentages round half up.
"""
import logging
from collections import OrderedDict
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session, joinedload

from app.core.application_states import PIPELINE_STATUSES, ApplicationStatus
from app.core.timeutils import start_of_month, utcnow
from app.db.models import Application, CompanyProfile, Job, JobSeekerProfile, SavedJob

logger = logging.getLogger(__name__)

TREND_DAYS = 30
FUNNEL_EXITS = [ApplicationStatus.REJECTED.value, ApplicationStatus.WITHDRAWN.value]


def percent(part: int, whole: int) -> int:
    """Integer percentage, half up; 0 when ``whole`` is 0."""
    if not whole:
        return 0
    value = Decimal(100 * part) / Decimal(whole)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def time_ago(then: datetime, now: Optional[datetime] = None) -> str:
    now = now or utcnow()
    elapsed_ms = int((now - then).total_seconds() * 1000)
    hours = elapsed_ms // 3_600_000
    days = hours // 24
    if hours < 1:
        return "Less than an hour ago"
    if hours < 24:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    if days == 1:
        return "1 day ago"
    return f"{days} days ago"


def _status_counts(db: Session, *criteria) -> Dict[str, int]:
    rows = (
        db.query(Application.status, func.count(Application.id))
        .filter(*criteria)
        .group_by(Application.status)
        .all()
    )
    return {status: count for status, count in rows}


def jobseeker_dashboard(db: Session, seeker: JobSeekerProfile) -> Dict[str, Any]:
    counts = _status_counts(db, Application.job_seeker_id == seeker.id)
    total = sum(counts.values())
    responded = total - counts.get(ApplicationStatus.APPLIED.value, 0)
    saved = db.query(func.count(SavedJob.id)).filter(SavedJob.job_seeker_id == seeker.id).scalar() or 0

    recent = (
        db.query(Application)
        .options(joinedload(Application.job).joinedload(Job.employer))
        .filter(Application.job_seeker_id == seeker.id)
        .order_by(Application.applied_at.desc(), Application.id.desc())
        .limit(3)
        .all()
    )
    return {
        "totalApplications": total,
        "savedJobs": saved,
        "interviewsScheduled": counts.get(ApplicationStatus.INTERVIEW_SCHEDULED.value, 0),
        "profileViews": seeker.profile_views,
        "responseRate": f"{percent(responded, total)}%",
        "recentApplications": [
            {
                "id": app.id,
                "status": app.status,
                "appliedAt": app.applied_at.isoformat(),
                "jobId": app.job_id,
                "jobTitle": app.job.title if app.job else None,
                "companyName": app.job.employer.company_name if app.job and app.job.employer else None,
            }
            for app in recent
        ],
    }


def employer_dashboard(db: Session, company: CompanyProfile, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or utcnow()
    total_jobs = db.query(func.count(Job.id)).filter(Job.employer_id == company.id).scalar() or 0
    active_jobs = (
        db.query(func.count(Job.id)).filter(Job.employer_id == company.id, Job.status == "active").scalar() or 0
    )
    counts = _status_counts(db, Application.employer_id == company.id)
    total = sum(counts.values())
    responded = total - counts.get(ApplicationStatus.APPLIED.value, 0)
    hired_this_month = (
        db.query(func.count(Application.id))
        .filter(
            Application.employer_id == company.id,
            Application.status == ApplicationStatus.HIRED.value,
            Application.last_status_update >= start_of_month(now),
        )
        .scalar()
    ) or 0

    recent = (
        db.query(Application)
        .options(joinedload(Application.job), joinedload(Application.job_seeker))
        .filter(Application.employer_id == company.id)
        .order_by(Application.applied_at.desc(), Application.id.desc())
        .limit(5)
        .all()
    )
    activity = []
    for app in recent:
        name = app.job_seeker.full_name if app.job_seeker else "A candidate"
        title = app.job.title if app.job else "a job"
        activity.append({
            "id": app.id,
            "type": "application",
            "title": "New application received",
            "description": f"{name} applied for {title}",
            "time": time_ago(app.applied_at, now),
        })

    return {
        "totalJobs": total_jobs,
        "activeJobs": active_jobs,
        "totalApplications": total,
        "interviewsScheduled": counts.get(ApplicationStatus.INTERVIEW_SCHEDULED.value, 0),
        "hiredThisMonth": hired_this_month,
        "responseRate": f"{percent(responded, total)}%",
        "recentActivity": activity,
    }


def _top_performing_jobs(db: Session, company: CompanyProfile) -> List[Dict[str, Any]]:
    hired = func.sum(case((Application.status == ApplicationStatus.HIRED.value, 1), else_=0))
    rows = (
        db.query(
            Job.id,
            Job.title,
            Job.department,
            Job.status,
            Job.views,
            Job.created_at,
            func.count(Application.id).label("applications"),
            hired.label("hired"),
        )
        .outerjoin(Application, Application.job_id == Job.id)
        .filter(Job.employer_id == company.id)
        .group_by(Job.id, Job.title, Job.department, Job.status, Job.views, Job.created_at)
        .order_by(func.count(Application.id).desc(), Job.id.desc())
        .limit(10)
        .all()
    )
    return [
        {
            "id": row.id,
            "title": row.title,
            "department": row.department,
            "status": row.status,
            "views": row.views,
            "createdAt": row.created_at.isoformat(),
            "applicationsCount": int(row.applications or 0),
            "hiredCount": int(row.hired or 0),
        }
        for row in rows
    ]


def _application_trends(db: Session, company: CompanyProfile, now: datetime) -> List[Dict[str, Any]]:
    since = now - timedelta(days=TREND_DAYS)
    applied = (
        db.query(Application.applied_at)
        .filter(Application.employer_id == company.id, Application.applied_at >= since)
        .order_by(Application.applied_at.asc())
        .all()
    )
    # applied_at is naive UTC, so its calendar day is the UTC day
    buckets: "OrderedDict[str, int]" = OrderedDict()
    for (applied_at,) in applied:
        day = applied_at.strftime("%Y-%m-%d")
        buckets[day] = buckets.get(day, 0) + 1
    return [{"date": day, "count": count} for day, count in buckets.items()]


def employer_analytics(db: Session, company: CompanyProfile, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or utcnow()
    counts = _status_counts(db, Application.employer_id == company.id)
    total = sum(counts.values())

    funnel = [{"status": s, "count": counts.get(s, 0)} for s in PIPELINE_STATUSES]
    funnel += [{"status": s, "count": counts.get(s, 0)} for s in FUNNEL_EXITS]

    average_rating = (
        db.query(func.avg(Application.rating))
        .filter(Application.employer_id == company.id, Application.rating.isnot(None))
        .scalar()
    )

    return {
        "topPerformingJobs": _top_performing_jobs(db, company),
        "applicationTrends": _application_trends(db, company, now),
        "hiringFunnel": funnel,
        "metrics": {
            "averageCandidateRating": round(float(average_rating), 2) if average_rating is not None else None,
            "applicationSuccessRate": percent(counts.get(ApplicationStatus.HIRED.value, 0), total),
        },
    }
