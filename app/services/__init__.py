"""Business logic services package."""

from app.services.application_errors import (
    ApplicationError,
    NotFoundError,
    ForbiddenError,
    AlreadyWithdrawnError,
    InvalidTransitionError,
    StaleStateError,
    FrozenApplicationError,
    ApplicationValidationError,
    DuplicateApplicationError,
    InternalApplicationError,
)
from app.services.application_store import ApplicationStore
from app.services.notification_emitter import (
    NotificationEmitter,
    NotificationIntent,
    NotificationKind,
    LoggingNotificationEmitter,
    InngestNotificationEmitter,
    get_notification_emitter,
)
from app.services.application_lifecycle_service import (
    ApplicationLifecycleService,
    TransitionResult,
    BulkTransitionResult,
)
from app.services.interview_service import InterviewService
from app.services.feedback_service import FeedbackService

__all__ = [
    "ApplicationError",
    "NotFoundError",
    "ForbiddenError",
    "AlreadyWithdrawnError",
    "InvalidTransitionError",
    "StaleStateError",
    "FrozenApplicationError",
    "ApplicationValidationError",
    "DuplicateApplicationError",
    "InternalApplicationError",
    "ApplicationStore",
    "NotificationEmitter",
    "NotificationIntent",
    "NotificationKind",
    "LoggingNotificationEmitter",
    "InngestNotificationEmitter",
    "get_notification_emitter",
    "ApplicationLifecycleService",
    "TransitionResult",
    "BulkTransitionResult",
    "InterviewService",
    "FeedbackService",
]
