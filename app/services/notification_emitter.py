"""
Notification Emitter
Builds notification intents for lifecycle events and hands them off to the
event bus. Delivery (email, push, in-app feed) happens downstream; hand-off
is fire-and-forget and a failure never fails the lifecycle operation.
"""
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from flask import current_app, has_app_context
from pydantic import BaseModel, ConfigDict, Field

from app.models.application_status import ActorRole
from app.utils.circuit_breaker import CircuitBreaker, CircuitBreakerError, event_bus_circuit_breaker


logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    """Lifecycle events that must trigger a notification."""
    APPLICATION_RECEIVED = "application_received"
    STATUS_CHANGED = "status_changed"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    INTERVIEW_CANCELLED = "interview_cancelled"
    FEEDBACK_RECEIVED = "feedback_received"


class NotificationIntent(BaseModel):
    """Description of an event for the external notification system."""
    kind: NotificationKind
    application_id: int
    recipient_id: int
    recipient_role: ActorRole
    payload: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    model_config = ConfigDict(use_enum_values=True)

    @property
    def event_name(self) -> str:
        return f"applications/{self.kind}"


# ==================== Intent Builders ====================

def status_changed_intent(application, old_status: str, new_status: str, recipient_role: ActorRole) -> NotificationIntent:
    """Intent for a status transition, addressed to the counterpart actor."""
    recipient_id = (
        application.applicant_id if recipient_role == ActorRole.APPLICANT else application.employer_id
    )
    return NotificationIntent(
        kind=NotificationKind.STATUS_CHANGED,
        application_id=application.id,
        recipient_id=recipient_id,
        recipient_role=recipient_role,
        payload={
            'old_status': old_status,
            'new_status': new_status,
            'job_posting_id': application.job_posting_id,
        },
    )


def application_received_intent(application) -> NotificationIntent:
    return NotificationIntent(
        kind=NotificationKind.APPLICATION_RECEIVED,
        application_id=application.id,
        recipient_id=application.employer_id,
        recipient_role=ActorRole.EMPLOYER,
        payload={
            'job_posting_id': application.job_posting_id,
            'applicant_id': application.applicant_id,
        },
    )


def interview_scheduled_intent(application) -> NotificationIntent:
    return NotificationIntent(
        kind=NotificationKind.INTERVIEW_SCHEDULED,
        application_id=application.id,
        recipient_id=application.applicant_id,
        recipient_role=ActorRole.APPLICANT,
        payload={
            'job_posting_id': application.job_posting_id,
            'scheduled_at': application.interview_scheduled_at.isoformat(),
            'location': application.interview_location,
            'meeting_link': application.interview_meeting_link,
        },
    )


def interview_cancelled_intent(application) -> NotificationIntent:
    return NotificationIntent(
        kind=NotificationKind.INTERVIEW_CANCELLED,
        application_id=application.id,
        recipient_id=application.applicant_id,
        recipient_role=ActorRole.APPLICANT,
        payload={'job_posting_id': application.job_posting_id},
    )


def feedback_received_intent(application) -> NotificationIntent:
    return NotificationIntent(
        kind=NotificationKind.FEEDBACK_RECEIVED,
        application_id=application.id,
        recipient_id=application.applicant_id,
        recipient_role=ActorRole.APPLICANT,
        payload={
            'job_posting_id': application.job_posting_id,
            'category': application.feedback_category,
        },
    )


# ==================== Emitters ====================

class NotificationEmitter:
    """Hands intents off for delivery. Subclasses must never raise from `emit`."""

    def emit(self, intent: NotificationIntent) -> None:
        raise NotImplementedError

    def emit_all(self, intents: List[NotificationIntent]) -> None:
        for intent in intents:
            self.emit(intent)


class LoggingNotificationEmitter(NotificationEmitter):
    """Only logs intents; used in tests and when no event bus is configured."""

    def emit(self, intent: NotificationIntent) -> None:
        logger.info(
            f"Notification intent {intent.kind} for {intent.recipient_role} {intent.recipient_id} "
            f"(application {intent.application_id})"
        )


class InngestNotificationEmitter(NotificationEmitter):
    """Sends each intent as an `applications/<kind>` Inngest event."""

    def __init__(self, breaker: Optional[CircuitBreaker] = None):
        self.breaker = breaker or event_bus_circuit_breaker

    def emit(self, intent: NotificationIntent) -> None:
        try:
            from app.inngest import inngest_client
            import inngest

            event = inngest.Event(
                name=intent.event_name,
                data=intent.model_dump(mode="json"),
            )
            self.breaker.call(inngest_client.send_sync, event)
            logger.info(f"[INNGEST] Sent {intent.event_name} for application {intent.application_id}")
        except CircuitBreakerError as e:
            logger.warning(f"[INNGEST] Dropped {intent.event_name} for application {intent.application_id}: {e}")
        except Exception as e:
            logger.error(
                f"[INNGEST] Failed to send {intent.event_name} for application {intent.application_id}: {e}",
                exc_info=True
            )


def get_notification_emitter() -> NotificationEmitter:
    """Emitter selected by the NOTIFICATIONS_BACKEND setting."""
    backend = "inngest"
    if has_app_context():
        backend = current_app.config.get("NOTIFICATIONS_BACKEND", "inngest")

    if backend == "log":
        return LoggingNotificationEmitter()
    return InngestNotificationEmitter()
