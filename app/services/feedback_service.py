"""
Feedback Service
Single free-text employer feedback per application, overwritten in place.
"""
import logging
from datetime import datetime
from typing import Optional

from app.models.application_status import ActorRole
from app.models.job_application import JobApplication
from app.services.application_errors import ApplicationValidationError, StaleStateError
from app.services.application_guards import (
    require_application,
    require_not_frozen,
    require_not_terminal,
    require_owner,
)
from app.services.application_store import ApplicationStore
from app.services.notification_emitter import (
    NotificationEmitter,
    feedback_received_intent,
    get_notification_emitter,
)


logger = logging.getLogger(__name__)


class FeedbackService:

    def __init__(
        self,
        store: Optional[ApplicationStore] = None,
        emitter: Optional[NotificationEmitter] = None,
    ):
        self.store = store or ApplicationStore()
        self.emitter = emitter or get_notification_emitter()

    def provide_feedback(
        self,
        application_id: int,
        employer_id: int,
        message: Optional[str],
        category: Optional[str] = None,
    ) -> JobApplication:
        """
        Write the employer's feedback, replacing any earlier feedback entirely.

        Raises:
            ApplicationValidationError: Empty message
            NotFoundError, FrozenApplicationError, ForbiddenError,
            InvalidTransitionError: Application is terminal
        """
        message = (message or "").strip()
        if not message:
            raise ApplicationValidationError("Feedback message is required", application_id=application_id)

        application = require_application(self.store, application_id)
        require_not_frozen(application)
        require_owner(application, ActorRole.EMPLOYER, employer_id)
        require_not_terminal(application, "provide feedback")

        updated = self.store.compare_and_set(
            application_id,
            expected_status=application.status,
            expected_version=application.version,
            patch={
                'feedback_message': message,
                'feedback_category': (category or "").strip() or None,
                'feedback_provided_at': datetime.utcnow(),
            },
        )
        if updated is None:
            raise StaleStateError(
                "The application was changed by someone else; reload and try again",
                application_id=application_id,
            )

        logger.info(f"Feedback provided on application {application_id} by employer {employer_id}")

        self.emitter.emit(feedback_received_intent(updated))
        return updated
