"""
Interview Service
Interview sub-workflow attached to an application: unscheduled -> scheduled
-> cancelled, driven by the employer only. Scheduling never changes the
application's top-level status.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from app.models.application_status import ActorRole, InterviewStatus
from app.models.job_application import JobApplication
from app.services.application_errors import (
    ApplicationValidationError,
    InvalidTransitionError,
    StaleStateError,
)
from app.services.application_guards import (
    config_value,
    require_application,
    require_not_frozen,
    require_not_terminal,
    require_owner,
)
from app.services.application_store import ApplicationStore
from app.services.notification_emitter import (
    NotificationEmitter,
    get_notification_emitter,
    interview_cancelled_intent,
    interview_scheduled_intent,
)


logger = logging.getLogger(__name__)


def _as_naive_utc(value: datetime) -> datetime:
    """Timestamps are stored as naive UTC."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class InterviewService:
    """Schedules and cancels interviews on applications."""

    def __init__(
        self,
        store: Optional[ApplicationStore] = None,
        emitter: Optional[NotificationEmitter] = None,
    ):
        self.store = store or ApplicationStore()
        self.emitter = emitter or get_notification_emitter()

    def schedule_interview(
        self,
        application_id: int,
        employer_id: int,
        scheduled_at: Optional[datetime],
        location: Optional[str] = None,
        meeting_link: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> JobApplication:
        """
        Schedule (or reschedule) the interview for an application.

        Args:
            application_id: Application ID
            employer_id: Employer owning the application's job
            scheduled_at: Interview date and time
            location: Where the interview takes place
            meeting_link: Video call link
            notes: Notes for the applicant

        Returns:
            Updated JobApplication with interview status `scheduled`

        Raises:
            ApplicationValidationError: Missing or (unless allowed) past timestamp
            NotFoundError, FrozenApplicationError, ForbiddenError,
            InvalidTransitionError: Application is terminal
        """
        if scheduled_at is None:
            raise ApplicationValidationError(
                "Interview date and time are required",
                application_id=application_id,
            )
        scheduled_at = _as_naive_utc(scheduled_at)

        application = require_application(self.store, application_id)
        require_not_frozen(application)
        require_owner(application, ActorRole.EMPLOYER, employer_id)
        require_not_terminal(application, "schedule an interview")

        if not config_value("INTERVIEW_ALLOW_PAST_DATES", False):
            grace = timedelta(seconds=config_value("INTERVIEW_PAST_GRACE_SECONDS", 300))
            if scheduled_at < datetime.utcnow() - grace:
                raise ApplicationValidationError(
                    "Interview time must not be in the past",
                    application_id=application_id,
                    scheduled_at=scheduled_at.isoformat(),
                )

        updated = self.store.compare_and_set(
            application_id,
            expected_status=application.status,
            expected_version=application.version,
            patch={
                'interview_status': InterviewStatus.SCHEDULED.value,
                'interview_scheduled_at': scheduled_at,
                'interview_location': location or None,
                'interview_meeting_link': meeting_link or None,
                'interview_notes': notes or None,
            },
        )
        if updated is None:
            raise StaleStateError(
                "The application was changed by someone else; reload and try again",
                application_id=application_id,
            )

        logger.info(f"Interview scheduled for application {application_id} at {scheduled_at.isoformat()}")

        self.emitter.emit(interview_scheduled_intent(updated))
        return updated

    def cancel_interview(self, application_id: int, employer_id: int) -> JobApplication:
        """
        Cancel the scheduled interview of an application.

        Allowed after the application reached a terminal status, so that a
        withdrawn or rejected candidate's interview can still be called off.

        Raises:
            InvalidTransitionError: No scheduled interview to cancel
        """
        application = require_application(self.store, application_id)
        require_not_frozen(application)
        require_owner(application, ActorRole.EMPLOYER, employer_id)

        if application.interview_status != InterviewStatus.SCHEDULED.value:
            raise InvalidTransitionError(
                "There is no scheduled interview to cancel",
                application_id=application_id,
                interview_status=application.interview_status,
            )

        updated = self.store.compare_and_set(
            application_id,
            expected_status=application.status,
            expected_version=application.version,
            patch={'interview_status': InterviewStatus.CANCELLED.value},
        )
        if updated is None:
            raise StaleStateError(
                "The application was changed by someone else; reload and try again",
                application_id=application_id,
            )

        logger.info(f"Interview cancelled for application {application_id}")

        self.emitter.emit(interview_cancelled_intent(updated))
        return updated
