"""Pytest configuration and fixtures."""

import itertools
from datetime import datetime, timedelta

import jwt
import pytest
import sys
import os

# Add the parent directory to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from app import create_app, db as app_db
from config.testing import TestingConfig
from app.models import ApplicationStatus, JobApplication, JobPosting
from app.services.application_lifecycle_service import ApplicationLifecycleService
from app.services.application_store import ApplicationStore
from app.services.feedback_service import FeedbackService
from app.services.interview_service import InterviewService
from app.services.notification_emitter import NotificationEmitter


EMPLOYER_ID = 10
OTHER_EMPLOYER_ID = 11
APPLICANT_ID = 20
OTHER_APPLICANT_ID = 21


class RecordingEmitter(NotificationEmitter):
    """Keeps every emitted intent in memory."""

    def __init__(self):
        self.intents = []

    def emit(self, intent):
        self.intents.append(intent)

    def kinds(self):
        return [intent.kind for intent in self.intents]


@pytest.fixture(scope="session")
def app():
    """Create application for testing."""
    app = create_app(config=TestingConfig)
    return app


@pytest.fixture(scope="function")
def client(app, db):
    """Flask test client sharing the app context pushed by `db`."""
    with app.test_client() as client:
        yield client


@pytest.fixture(scope="function")
def db(app):
    """Database session for testing."""
    with app.app_context():
        # Create all tables
        app_db.create_all()
        yield app_db
        # Drop all tables
        app_db.session.remove()
        app_db.drop_all()


@pytest.fixture
def config(app, monkeypatch):
    """Override config values for a single test."""
    def _set(**values):
        for key, value in values.items():
            monkeypatch.setitem(app.config, key, value)
    return _set


# ==================== Services ====================

@pytest.fixture
def emitter():
    return RecordingEmitter()


@pytest.fixture
def store(db):
    return ApplicationStore()


@pytest.fixture
def lifecycle(store, emitter):
    return ApplicationLifecycleService(store=store, emitter=emitter)


@pytest.fixture
def interviews(store, emitter):
    return InterviewService(store=store, emitter=emitter)


@pytest.fixture
def feedback(store, emitter):
    return FeedbackService(store=store, emitter=emitter)


# ==================== Data ====================

@pytest.fixture
def job(db):
    """An open job owned by EMPLOYER_ID."""
    job = JobPosting(
        employer_id=EMPLOYER_ID,
        title="Backend Engineer",
        company="Acme Logistics",
        location="Remote",
        is_active=True,
    )
    db.session.add(job)
    db.session.commit()
    return job


@pytest.fixture
def other_job(db):
    """An open job owned by OTHER_EMPLOYER_ID."""
    job = JobPosting(
        employer_id=OTHER_EMPLOYER_ID,
        title="Data Analyst",
        company="Northwind",
        is_active=True,
    )
    db.session.add(job)
    db.session.commit()
    return job


@pytest.fixture
def make_application(db, job):
    """
    Factory for applications inserted directly in a given status.

    Applicants default to fresh ids so several applications can share a job.
    """
    applicant_ids = itertools.count(1000)

    def _make(status=ApplicationStatus.PENDING, applicant_id=None, job_posting=None, **fields):
        posting = job_posting or job
        application = JobApplication(
            job_posting_id=posting.id,
            applicant_id=applicant_id if applicant_id is not None else next(applicant_ids),
            employer_id=posting.employer_id,
            status=ApplicationStatus(status).value,
            applied_at=datetime.utcnow(),
            cover_letter_text="I would love to join.",
            **fields,
        )
        db.session.add(application)
        db.session.commit()
        return application

    return _make


@pytest.fixture
def application(make_application):
    """A pending application by APPLICANT_ID to EMPLOYER_ID's job."""
    return make_application(applicant_id=APPLICANT_ID)


# ==================== Auth ====================

def make_token(user_id: int, role: str, expires_in: timedelta = timedelta(hours=1)) -> str:
    payload = {
        "user_id": user_id,
        "role": role,
        "exp": datetime.utcnow() + expires_in,
    }
    return jwt.encode(payload, TestingConfig.SECRET_KEY, algorithm="HS256")


@pytest.fixture
def auth_headers():
    """Build Authorization headers for an actor."""
    def _headers(user_id: int, role: str) -> dict:
        return {"Authorization": f"Bearer {make_token(user_id, role)}"}
    return _headers


@pytest.fixture
def employer_headers(auth_headers):
    return auth_headers(EMPLOYER_ID, "employer")


@pytest.fixture
def applicant_headers(auth_headers):
    return auth_headers(APPLICANT_ID, "jobseeker")
