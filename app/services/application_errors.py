"""
Application lifecycle errors.

Each error carries a stable machine code and the HTTP status the route layer
answers with, so callers can tell "you can't do this" (forbidden) from
"this doesn't make sense right now" (invalid transition) from "this thing
doesn't exist" (not found).
"""
from typing import Any, Dict, Optional


class ApplicationError(Exception):
    """Base class for every lifecycle error."""

    code = "application_error"
    http_status = 400

    def __init__(self, message: str, application_id: Optional[int] = None, **details: Any):
        super().__init__(message)
        self.message = message
        self.application_id = application_id
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for API responses and bulk results."""
        result = {
            'code': self.code,
            'message': self.message,
        }
        if self.application_id is not None:
            result['application_id'] = self.application_id
        if self.details:
            result.update(self.details)
        return result

    def __repr__(self):
        return f'<{self.__class__.__name__} code={self.code} application={self.application_id}>'


class NotFoundError(ApplicationError):
    """No such application (or job, at submission time)."""
    code = "not_found"
    http_status = 404


class ForbiddenError(ApplicationError):
    """Actor lacks ownership or role for the operation."""
    code = "forbidden"
    http_status = 403


class AlreadyWithdrawnError(ForbiddenError):
    """Withdraw requested on an application that is already withdrawn."""
    code = "already_withdrawn"


class InvalidTransitionError(ApplicationError):
    """Edge not permitted by the status model, or the application is terminal."""
    code = "invalid_transition"
    http_status = 409


class StaleStateError(InvalidTransitionError):
    """The application changed between read and write; the write lost the race."""
    code = "stale_state"


class FrozenApplicationError(ApplicationError):
    """The job (and employer) behind the application no longer exists."""
    code = "frozen"
    http_status = 410


class ApplicationValidationError(ApplicationError):
    """Malformed input, e.g. an empty feedback message."""
    code = "validation_error"
    http_status = 400


class DuplicateApplicationError(ApplicationValidationError):
    """The applicant already applied to this job."""
    code = "duplicate_application"
    http_status = 409


class InternalApplicationError(ApplicationError):
    """Unexpected failure (database, connection) while handling one application."""
    code = "internal_error"
    http_status = 500
