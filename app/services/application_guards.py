"""Shared precondition checks for application lifecycle operations."""
from typing import Any

from flask import current_app, has_app_context

from app.models.application_status import ActorRole, role_may
from app.models.job_application import JobApplication, FROZEN_MESSAGE
from app.services.application_errors import (
    NotFoundError,
    ForbiddenError,
    FrozenApplicationError,
    InvalidTransitionError,
)


def config_value(key: str, default: Any) -> Any:
    """Read a lifecycle setting from the active Flask config, if any."""
    if has_app_context():
        return current_app.config.get(key, default)
    return default


def parse_role(role) -> ActorRole:
    try:
        return ActorRole(role)
    except ValueError:
        raise ForbiddenError(f"Unknown actor role: {role}")


def require_role(role, operation: str) -> ActorRole:
    """The actor role must be allowed to invoke the operation at all."""
    role = parse_role(role)
    if not role_may(role, operation):
        raise ForbiddenError(f"{role.value.capitalize()}s cannot {operation.replace('_', ' ')}")
    return role


def require_application(store, application_id: int) -> JobApplication:
    application = store.get(application_id)
    if application is None:
        raise NotFoundError("Application not found", application_id=application_id)
    return application


def require_not_frozen(application: JobApplication) -> None:
    if application.is_frozen:
        raise FrozenApplicationError(FROZEN_MESSAGE, application_id=application.id)


def require_owner(application: JobApplication, role: ActorRole, actor_id: int) -> None:
    """The actor must be the application's applicant or its job's employer."""
    owner_id = application.applicant_id if role == ActorRole.APPLICANT else application.employer_id
    if owner_id != actor_id:
        raise ForbiddenError(
            "You do not have access to this application",
            application_id=application.id,
        )


def require_not_terminal(application: JobApplication, action: str) -> None:
    if application.is_terminal:
        raise InvalidTransitionError(
            f"Cannot {action} once the application is {application.status}",
            application_id=application.id,
            current_status=application.status,
        )
