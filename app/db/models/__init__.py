"""
Database models module.

This module imports all database models to ensure they are registered with SQLAlchemy's Base.metadata
before table creation.

All models must be imported here to be included in database migrations and table creation.
"""
from app.db.models.identity import Identity, IdentityRole
from app.db.models.jobseeker_profile import JobSeekerProfile, Experience, Education, Certification
from app.db.models.company_profile import CompanyProfile, Office
from app.db.models.job import Job
from app.db.models.application import Application
from app.db.models.saved_job import SavedJob
from app.db.models.notification import Notification, NotificationType
from app.db.models.analytics_event import AnalyticsEvent
from app.db.models.rate_limit_hit import RateLimitHit

# Explicitly export all models for clarity
__all__ = [
    "Identity",
    "IdentityRole",
    "JobSeekerProfile",
    "Experience",
    "Education",
    "Certification",
    "CompanyProfile",
    "Office",
    "Job",
    "Application",
    "SavedJob",
    "Notification",
    "NotificationType",
    "AnalyticsEvent",
    "RateLimitHit",
]
