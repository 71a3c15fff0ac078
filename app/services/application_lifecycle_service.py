"""
Application Lifecycle Service
Validates and applies status transitions on job applications, single and
bulk, enforces actor permissions and produces notification intents.
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set, Tuple

from app.models.application_status import (
    ActorRole,
    ApplicationStatus,
    allowed_targets,
    can_transition,
)
from app.models.job_application import JobApplication
from app.services.application_errors import (
    ApplicationError,
    AlreadyWithdrawnError,
    ApplicationValidationError,
    DuplicateApplicationError,
    InternalApplicationError,
    InvalidTransitionError,
    NotFoundError,
    StaleStateError,
)
from app.services.application_guards import (
    config_value,
    require_application,
    require_not_frozen,
    require_owner,
    require_role,
)
from app.services.application_store import ApplicationStore
from app.services.notification_emitter import (
    NotificationEmitter,
    NotificationIntent,
    application_received_intent,
    get_notification_emitter,
    status_changed_intent,
)


logger = logging.getLogger(__name__)


@dataclass
class TransitionResult:
    """Outcome of one committed status transition."""
    application: JobApplication
    old_status: str
    new_status: str
    count_delta: Dict[str, int]
    notifications: List[NotificationIntent] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'application': self.application.to_dict(include_job=True),
            'old_status': self.old_status,
            'new_status': self.new_status,
            'count_delta': self.count_delta,
            'notifications': [intent.model_dump(mode="json") for intent in self.notifications],
        }


@dataclass
class BulkTransitionResult:
    """Per-id outcome of a best-effort batch; never all-or-nothing."""
    requested_status: str
    applied: Set[int] = field(default_factory=set)
    failed: Dict[int, ApplicationError] = field(default_factory=dict)
    count_delta: Dict[str, int] = field(default_factory=dict)
    notifications: List[NotificationIntent] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'requested_status': self.requested_status,
            'applied': sorted(self.applied),
            'failed': {str(app_id): error.to_dict() for app_id, error in sorted(self.failed.items())},
            'count_delta': self.count_delta,
        }


def _merge_deltas(total: Dict[str, int], delta: Dict[str, int]) -> Dict[str, int]:
    merged = Counter(total)
    merged.update(delta)
    return {status: count for status, count in merged.items() if count}


class ApplicationLifecycleService:
    """
    Lifecycle engine for job applications.

    Every operation re-reads the application from the store, validates the
    request against the status model and the actor's role and ownership, and
    writes through the store's compare-and-set. Notification intents are
    handed to the emitter after the write commits.
    """

    def __init__(
        self,
        store: Optional[ApplicationStore] = None,
        emitter: Optional[NotificationEmitter] = None,
    ):
        self.store = store or ApplicationStore()
        self.emitter = emitter or get_notification_emitter()

    @property
    def allow_skips(self) -> bool:
        return config_value("EMPLOYER_SKIP_TRANSITIONS", True)

    # ==================== Submission ====================

    def create_application(
        self,
        applicant_id: int,
        job_posting_id: int,
        cover_letter_text: Optional[str] = None,
        cover_letter_document: Optional[str] = None,
        resume_reference: Optional[str] = None,
        profile_resume_reference: Optional[str] = None,
    ) -> JobApplication:
        """
        Submit a new application; it always starts at `pending`.

        Args:
            applicant_id: ID of the applying user
            job_posting_id: Job being applied to
            cover_letter_text: Free-text cover letter
            cover_letter_document: Storage reference of an uploaded cover letter
            resume_reference: Reference of a freshly uploaded resume
            profile_resume_reference: Resume on the applicant's profile, used
                when no fresh upload is given

        Returns:
            Created JobApplication

        Raises:
            NotFoundError: Job does not exist or is closed
            ApplicationValidationError: Both cover letter forms given
            DuplicateApplicationError: Applicant already applied to this job
        """
        if cover_letter_text and cover_letter_document:
            raise ApplicationValidationError(
                "Provide the cover letter either as text or as a document, not both"
            )

        job = self.store.get_job(job_posting_id)
        if job is None or not job.is_active:
            raise NotFoundError("Job not found or no longer accepting applications", job_posting_id=job_posting_id)

        if self.store.find_by_applicant_and_job(applicant_id, job_posting_id):
            raise DuplicateApplicationError("You have already applied for this job", job_posting_id=job_posting_id)

        application = JobApplication(
            job_posting_id=job.id,
            applicant_id=applicant_id,
            employer_id=job.employer_id,
            status=ApplicationStatus.PENDING.value,
            applied_at=datetime.utcnow(),
            cover_letter_text=cover_letter_text or None,
            cover_letter_document=cover_letter_document or None,
            resume_reference=resume_reference or profile_resume_reference,
        )
        application = self.store.create(application)

        self.emitter.emit(application_received_intent(application))
        return application

    # ==================== Reads ====================

    def get_application(self, application_id: int, actor_role, actor_id: int) -> JobApplication:
        """Owner-checked read; frozen applications stay readable."""
        role = require_role(actor_role, "view")
        application = require_application(self.store, application_id)
        require_owner(application, role, actor_id)
        return application

    def list_applications(
        self,
        actor_role,
        actor_id: int,
        status: Optional[str] = None,
        job_posting_id: Optional[int] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[JobApplication], int, Dict[str, int]]:
        """
        List the actor's applications with the status-count projection for the same scope.

        Returns:
            Tuple of (applications, total, status counts)
        """
        role = require_role(actor_role, "view")
        scope = {'applicant_id': actor_id} if role == ActorRole.APPLICANT else {'employer_id': actor_id}
        if job_posting_id is not None:
            scope['job_posting_id'] = job_posting_id

        applications, total = self.store.list(status=status, page=page, per_page=per_page, **scope)
        counts = self.store.count_by_status(**scope)
        return applications, total, counts

    # ==================== Transitions ====================

    def apply_transition(
        self,
        application_id: int,
        requested_status,
        actor_role,
        actor_id: int,
        emit: bool = True,
    ) -> TransitionResult:
        """
        Move one application to a new status.

        Checks run in order: not found, frozen, forbidden, invalid transition.

        Args:
            application_id: Application ID
            requested_status: Target status
            actor_role: 'applicant' or 'employer'
            actor_id: ID of the acting user
            emit: Hand the notification intent to the emitter

        Returns:
            TransitionResult with the refreshed application, count delta and intents

        Raises:
            NotFoundError, FrozenApplicationError, ForbiddenError,
            InvalidTransitionError (StaleStateError if a concurrent write won)
        """
        application = require_application(self.store, application_id)
        require_not_frozen(application)
        role = require_role(actor_role, "apply_transition")
        require_owner(application, role, actor_id)

        old_status = application.status
        requested = self._parse_status(requested_status, application_id)

        if not can_transition(old_status, requested, role, allow_skips=self.allow_skips):
            raise self._transition_error(application, requested, role)

        now = datetime.utcnow()
        updated = self.store.compare_and_set(
            application_id,
            expected_status=old_status,
            expected_version=application.version,
            patch={
                'status': requested.value,
                'status_changed_at': now,
                'status_changed_by_id': actor_id,
            },
        )
        if updated is None:
            raise StaleStateError(
                "The application was changed by someone else; reload and try again",
                application_id=application_id,
            )

        new_status = updated.status
        logger.info(
            f"Application {application_id} status {old_status} -> {new_status} "
            f"by {role.value} {actor_id}"
        )

        notifications = self._status_notifications(updated, old_status, new_status, role)
        if emit:
            self.emitter.emit_all(notifications)

        return TransitionResult(
            application=updated,
            old_status=old_status,
            new_status=new_status,
            count_delta={old_status: -1, new_status: 1},
            notifications=notifications,
        )

    def apply_bulk_transition(
        self,
        application_ids: Iterable[int],
        requested_status,
        actor_role,
        actor_id: int,
    ) -> BulkTransitionResult:
        """
        Apply the same transition to many applications independently.

        A failure on one id never aborts the others; each id is reported in
        either `applied` or `failed`. Employers only.

        Raises:
            ForbiddenError: Actor role may not run bulk transitions
            ApplicationValidationError: Empty batch, batch too large, unknown status
        """
        require_role(actor_role, "apply_bulk_transition")
        ids = set(application_ids)

        if not ids:
            raise ApplicationValidationError("No applications selected")

        max_ids = config_value("BULK_TRANSITION_MAX_IDS", 100)
        if len(ids) > max_ids:
            raise ApplicationValidationError(f"At most {max_ids} applications can be updated at once")

        requested = self._parse_status(requested_status)
        result = BulkTransitionResult(requested_status=requested.value)

        for application_id in sorted(ids):
            try:
                outcome = self.apply_transition(application_id, requested, actor_role, actor_id, emit=False)
            except ApplicationError as e:
                result.failed[application_id] = e
                continue
            except Exception as e:
                logger.error(f"Bulk transition failed on application {application_id}: {e}", exc_info=True)
                self.store.rollback()
                result.failed[application_id] = InternalApplicationError(
                    "Failed to update application", application_id=application_id
                )
                continue

            result.applied.add(application_id)
            result.count_delta = _merge_deltas(result.count_delta, outcome.count_delta)
            result.notifications.extend(outcome.notifications)

        logger.info(
            f"Bulk transition to {requested.value} by employer {actor_id}: "
            f"{len(result.applied)} applied, {len(result.failed)} failed"
        )

        self.emitter.emit_all(result.notifications)
        return result

    def withdraw(self, application_id: int, actor_id: int) -> TransitionResult:
        """
        Applicant withdraws their own application.

        Raises:
            AlreadyWithdrawnError: Application is already withdrawn (forbidden, not invalid)
            InvalidTransitionError: Application is rejected or hired
        """
        application = require_application(self.store, application_id)
        require_not_frozen(application)
        require_owner(application, ActorRole.APPLICANT, actor_id)

        if application.status == ApplicationStatus.WITHDRAWN.value:
            raise AlreadyWithdrawnError(
                "This application has already been withdrawn",
                application_id=application_id,
            )

        return self.apply_transition(
            application_id,
            ApplicationStatus.WITHDRAWN,
            ActorRole.APPLICANT,
            actor_id,
        )

    def handle_job_removed(self, job_posting_id: int) -> int:
        """Freeze every application to a job that was removed elsewhere."""
        return self.store.detach_job(job_posting_id)

    # ==================== Helpers ====================

    @staticmethod
    def _parse_status(status, application_id: Optional[int] = None) -> ApplicationStatus:
        try:
            return ApplicationStatus(status)
        except ValueError:
            raise ApplicationValidationError(
                f"Invalid status: {status}. Must be one of: {', '.join(ApplicationStatus.all())}",
                application_id=application_id,
            )

    def _transition_error(self, application: JobApplication, requested: ApplicationStatus, role: ActorRole) -> InvalidTransitionError:
        current = application.status
        if current == requested.value:
            message = f"Application is already {current}"
        elif application.is_terminal:
            message = f"Application is {current} and can no longer change"
        else:
            message = f"{role.value.capitalize()} cannot move an application from {current} to {requested.value}"

        return InvalidTransitionError(
            message,
            application_id=application.id,
            current_status=current,
            requested_status=requested.value,
            allowed=sorted(s.value for s in allowed_targets(current, role, allow_skips=self.allow_skips)),
        )

    @staticmethod
    def _status_notifications(application, old_status: str, new_status: str, role: ActorRole) -> List[NotificationIntent]:
        if role == ActorRole.EMPLOYER:
            return [status_changed_intent(application, old_status, new_status, ActorRole.APPLICANT)]

        if config_value("NOTIFY_EMPLOYER_ON_WITHDRAWAL", True):
            return [status_changed_intent(application, old_status, new_status, ActorRole.EMPLOYER)]
        return []
