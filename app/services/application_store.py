"""
Application Store
Durable access to JobApplication records. The lifecycle services read and
write only through this narrow contract: get, list, create, compare_and_set,
the status-count projection and the job-removal detach.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, update, func, desc
from sqlalchemy.exc import IntegrityError

from app import db
from app.models.application_status import ApplicationStatus
from app.models.job_application import JobApplication
from app.models.job_posting import JobPosting
from app.services.application_errors import DuplicateApplicationError


logger = logging.getLogger(__name__)


# Columns a compare-and-set patch may touch. Identity, references,
# applied_at and the submitted documents are immutable after creation.
MUTABLE_FIELDS = frozenset({
    'status', 'status_changed_at', 'status_changed_by_id',
    'interview_status', 'interview_scheduled_at', 'interview_location',
    'interview_meeting_link', 'interview_notes',
    'feedback_message', 'feedback_category', 'feedback_provided_at',
})


class ApplicationStore:
    """
    SQLAlchemy-backed store for job applications.

    Every read goes to the database (no identity-map reuse across calls) and
    every write is a single conditional UPDATE, so a read-modify-write on one
    application is linearizable: a writer holding a stale snapshot matches
    zero rows and loses.
    """

    # ==================== Reads ====================

    def get(self, application_id: int) -> Optional[JobApplication]:
        """Load an application, refreshing any copy already in the session."""
        query = (
            select(JobApplication)
            .where(JobApplication.id == application_id)
            .execution_options(populate_existing=True)
        )
        return db.session.scalars(query).one_or_none()

    def get_job(self, job_posting_id: int) -> Optional[JobPosting]:
        return db.session.get(JobPosting, job_posting_id)

    def find_by_applicant_and_job(self, applicant_id: int, job_posting_id: int) -> Optional[JobApplication]:
        query = select(JobApplication).where(
            JobApplication.applicant_id == applicant_id,
            JobApplication.job_posting_id == job_posting_id,
        )
        return db.session.scalars(query).first()

    def _filtered(
        self,
        query,
        applicant_id: Optional[int] = None,
        employer_id: Optional[int] = None,
        job_posting_id: Optional[int] = None,
        status: Optional[str] = None,
        statuses: Optional[List[str]] = None,
        frozen: Optional[bool] = None,
    ):
        if applicant_id is not None:
            query = query.where(JobApplication.applicant_id == applicant_id)

        if employer_id is not None:
            query = query.where(JobApplication.employer_id == employer_id)

        if job_posting_id is not None:
            query = query.where(JobApplication.job_posting_id == job_posting_id)

        if status:
            query = query.where(JobApplication.status == status)

        if statuses:
            query = query.where(JobApplication.status.in_(statuses))

        if frozen is not None:
            if frozen:
                query = query.where(JobApplication.job_posting_id.is_(None))
            else:
                query = query.where(JobApplication.job_posting_id.is_not(None))

        return query

    def list(
        self,
        applicant_id: Optional[int] = None,
        employer_id: Optional[int] = None,
        job_posting_id: Optional[int] = None,
        status: Optional[str] = None,
        statuses: Optional[List[str]] = None,
        frozen: Optional[bool] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[JobApplication], int]:
        """
        List applications with filters and pagination.

        Args:
            applicant_id: Filter by applicant
            employer_id: Filter by employer
            job_posting_id: Filter by job posting
            status: Filter by single status
            statuses: Filter by multiple statuses
            frozen: True for frozen only, False to exclude frozen
            page: Page number (1-indexed)
            per_page: Items per page

        Returns:
            Tuple of (list of applications, total count)
        """
        query = self._filtered(
            select(JobApplication),
            applicant_id=applicant_id,
            employer_id=employer_id,
            job_posting_id=job_posting_id,
            status=status,
            statuses=statuses,
            frozen=frozen,
        )

        count_query = select(func.count()).select_from(query.subquery())
        total = db.session.scalar(count_query) or 0

        query = query.order_by(desc(JobApplication.applied_at), desc(JobApplication.id))
        query = query.offset((page - 1) * per_page).limit(per_page)

        return list(db.session.scalars(query)), total

    def count_by_status(
        self,
        applicant_id: Optional[int] = None,
        employer_id: Optional[int] = None,
        job_posting_id: Optional[int] = None,
    ) -> Dict[str, int]:
        """
        Status-count projection for a scope, recomputed on every call.

        Returns:
            Mapping of every status to its count (zero-filled)
        """
        query = self._filtered(
            select(JobApplication.status, func.count(JobApplication.id)),
            applicant_id=applicant_id,
            employer_id=employer_id,
            job_posting_id=job_posting_id,
        ).group_by(JobApplication.status)

        counts = {status: 0 for status in ApplicationStatus.all()}
        for status, count in db.session.execute(query):
            counts[status] = count
        return counts

    # ==================== Writes ====================

    def create(self, application: JobApplication) -> JobApplication:
        """
        Persist a new application.

        Raises:
            DuplicateApplicationError: If the applicant already applied to the job
        """
        db.session.add(application)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise DuplicateApplicationError(
                "You have already applied for this job",
                job_posting_id=application.job_posting_id,
            )

        logger.info(f"Created application {application.id} for job {application.job_posting_id}")
        return application

    def compare_and_set(
        self,
        application_id: int,
        expected_status: str,
        expected_version: int,
        patch: Dict[str, Any],
    ) -> Optional[JobApplication]:
        """
        Atomically apply `patch` if the record still has the expected status and version.

        Args:
            application_id: Application ID
            expected_status: Status the caller validated against
            expected_version: Version the caller read
            patch: Column values to write (may include a new status)

        Returns:
            The refreshed application, or None if the record changed (or vanished)
            since the caller read it
        """
        illegal = set(patch) - MUTABLE_FIELDS
        if illegal:
            raise ValueError(f"Fields not writable through compare_and_set: {', '.join(sorted(illegal))}")

        statement = (
            update(JobApplication)
            .where(
                JobApplication.id == application_id,
                JobApplication.status == expected_status,
                JobApplication.version == expected_version,
                JobApplication.job_posting_id.is_not(None),
            )
            .values(
                **patch,
                version=JobApplication.version + 1,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )

        result = db.session.execute(statement)
        if result.rowcount != 1:
            db.session.rollback()
            logger.warning(
                f"Compare-and-set lost on application {application_id} "
                f"(expected status={expected_status} version={expected_version})"
            )
            return None

        db.session.commit()
        return self.get(application_id)

    def rollback(self) -> None:
        """Discard a failed unit of work so the session can be reused."""
        db.session.rollback()

    def detach_job(self, job_posting_id: int) -> int:
        """
        Null the job reference on every application to a removed job.

        Returns:
            Number of applications frozen
        """
        statement = (
            update(JobApplication)
            .where(JobApplication.job_posting_id == job_posting_id)
            .values(
                job_posting_id=None,
                version=JobApplication.version + 1,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = db.session.execute(statement)
        db.session.commit()

        logger.info(f"Froze {result.rowcount} applications for removed job {job_posting_id}")
        return result.rowcount
