"""SQLAlchemy models package."""

# Import models to ensure they're registered with SQLAlchemy
from app.models.application_status import (
    ApplicationStatus,
    InterviewStatus,
    ActorRole,
)
from app.models.job_posting import JobPosting
from app.models.job_application import JobApplication

__all__ = [
    "ApplicationStatus",
    "InterviewStatus",
    "ActorRole",
    "JobPosting",
    "JobApplication",
]
