"""
Application routes for the job application lifecycle.
Applicants submit and withdraw; employers move applications through the
pipeline, schedule interviews and leave feedback.
"""
from flask import Blueprint, request, jsonify, g
from pydantic import ValidationError
import logging

from app.models.application_status import ActorRole
from app.services.application_errors import ApplicationError
from app.services.application_lifecycle_service import ApplicationLifecycleService
from app.services.interview_service import InterviewService
from app.services.feedback_service import FeedbackService
from app.schemas.application_schema import (
    ApplicationCreateSchema,
    ApplicationStatusUpdateSchema,
    BulkStatusUpdateSchema,
    InterviewScheduleSchema,
    FeedbackCreateSchema,
    ApplicationFilterSchema,
)
from app.middleware.actor_auth import require_actor, require_role

logger = logging.getLogger(__name__)

application_bp = Blueprint('applications', __name__, url_prefix='/api/applications')


def error_response(message: str, status: int = 400, details: dict = None):
    """Helper to create error responses"""
    return jsonify({
        'error': 'Error',
        'message': message,
        'status': status,
        'details': details or {}
    }), status


def application_error_response(e: ApplicationError):
    """Map a lifecycle error onto its HTTP status and machine code."""
    return error_response(e.message, e.http_status, e.to_dict())


def validation_error_response(e: ValidationError):
    return error_response(
        "Validation error",
        400,
        {'code': 'validation_error', 'errors': e.errors(include_url=False, include_context=False)},
    )


def request_body() -> dict:
    return request.get_json(silent=True) or {}


def list_response(applications, total: int, counts: dict, filters: ApplicationFilterSchema):
    pages = (total + filters.per_page - 1) // filters.per_page if total else 0
    return jsonify({
        'applications': [a.to_dict(include_job=True) for a in applications],
        'total': total,
        'page': filters.page,
        'per_page': filters.per_page,
        'pages': pages,
        'status_counts': counts,
    }), 200


# ==================== Applicant Endpoints ====================

@application_bp.route('', methods=['POST'])
@require_actor
@require_role(ActorRole.APPLICANT)
def create_application():
    """
    Apply to a job.

    Request Body: ApplicationCreateSchema
    Returns: Created application
    """
    try:
        data = ApplicationCreateSchema.model_validate(request_body())

        service = ApplicationLifecycleService()
        application = service.create_application(
            applicant_id=g.actor_id,
            job_posting_id=data.job_posting_id,
            cover_letter_text=data.cover_letter_text,
            cover_letter_document=data.cover_letter_document,
            resume_reference=None if data.use_profile_resume else data.resume_reference,
            profile_resume_reference=data.profile_resume_reference if data.use_profile_resume else None,
        )

        logger.info(f"Created application {application.id} by applicant {g.actor_id}")

        return jsonify(application.to_dict(include_job=True)), 201

    except ValidationError as e:
        logger.warning(f"Validation error creating application: {e}")
        return validation_error_response(e)

    except ApplicationError as e:
        logger.warning(f"Error creating application: {e.message}")
        return application_error_response(e)

    except Exception as e:
        logger.error(f"Error creating application: {e}", exc_info=True)
        return error_response(f"Failed to create application: {str(e)}", 500)


@application_bp.route('', methods=['GET'])
@require_actor
@require_role(ActorRole.APPLICANT)
def list_my_applications():
    """
    List the applicant's own applications.

    Query Params:
    - status: Filter by status ('all' for no filter)
    - page, per_page: Pagination

    Returns: Applications with status_counts over all of the applicant's applications
    """
    try:
        filters = ApplicationFilterSchema.model_validate(request.args.to_dict())

        service = ApplicationLifecycleService()
        applications, total, counts = service.list_applications(
            actor_role=g.actor_role,
            actor_id=g.actor_id,
            status=filters.status,
            page=filters.page,
            per_page=filters.per_page,
        )

        return list_response(applications, total, counts, filters)

    except ValidationError as e:
        return validation_error_response(e)

    except ApplicationError as e:
        return application_error_response(e)

    except Exception as e:
        logger.error(f"Error listing applications: {e}", exc_info=True)
        return error_response(f"Failed to list applications: {str(e)}", 500)


@application_bp.route('/<int:application_id>/withdraw', methods=['PUT'])
@require_actor
@require_role(ActorRole.APPLICANT)
def withdraw_application(application_id: int):
    """Withdraw one of the applicant's own applications."""
    try:
        service = ApplicationLifecycleService()
        result = service.withdraw(application_id, g.actor_id)

        return jsonify({
            'message': 'Application withdrawn successfully',
            'application': result.application.to_dict(include_job=True),
        }), 200

    except ApplicationError as e:
        logger.warning(f"Error withdrawing application {application_id}: {e.message}")
        return application_error_response(e)

    except Exception as e:
        logger.error(f"Error withdrawing application {application_id}: {e}", exc_info=True)
        return error_response(f"Failed to withdraw application: {str(e)}", 500)


# ==================== Employer Endpoints ====================

@application_bp.route('/employer', methods=['GET'])
@require_actor
@require_role(ActorRole.EMPLOYER)
def list_employer_applications():
    """
    List applications received for the employer's jobs.

    Query Params:
    - status: Filter by status ('all' for no filter)
    - job_posting_id: Restrict to one job
    - page, per_page: Pagination

    Returns: Applications with status_counts for the same scope
    """
    try:
        filters = ApplicationFilterSchema.model_validate(request.args.to_dict())

        service = ApplicationLifecycleService()
        applications, total, counts = service.list_applications(
            actor_role=g.actor_role,
            actor_id=g.actor_id,
            status=filters.status,
            job_posting_id=filters.job_posting_id,
            page=filters.page,
            per_page=filters.per_page,
        )

        return list_response(applications, total, counts, filters)

    except ValidationError as e:
        return validation_error_response(e)

    except ApplicationError as e:
        return application_error_response(e)

    except Exception as e:
        logger.error(f"Error listing employer applications: {e}", exc_info=True)
        return error_response(f"Failed to list applications: {str(e)}", 500)


@application_bp.route('/bulk-status', methods=['PUT'])
@require_actor
@require_role(ActorRole.EMPLOYER)
def bulk_update_status():
    """
    Move several applications to the same status.

    Each id succeeds or fails on its own; the response lists both.

    Request Body: BulkStatusUpdateSchema
    """
    try:
        data = BulkStatusUpdateSchema.model_validate(request_body())

        service = ApplicationLifecycleService()
        result = service.apply_bulk_transition(
            application_ids=data.application_ids,
            requested_status=data.status,
            actor_role=g.actor_role,
            actor_id=g.actor_id,
        )

        response = result.to_dict()
        response['message'] = f"Updated {len(result.applied)} application(s)"
        return jsonify(response), 200

    except ValidationError as e:
        return validation_error_response(e)

    except ApplicationError as e:
        logger.warning(f"Error in bulk status update: {e.message}")
        return application_error_response(e)

    except Exception as e:
        logger.error(f"Error in bulk status update: {e}", exc_info=True)
        return error_response(f"Failed to update applications: {str(e)}", 500)


@application_bp.route('/<int:application_id>/interview', methods=['POST'])
@require_actor
@require_role(ActorRole.EMPLOYER)
def schedule_interview(application_id: int):
    """
    Schedule or reschedule the interview for an application.

    Request Body: InterviewScheduleSchema
    """
    try:
        data = InterviewScheduleSchema.model_validate(request_body())

        service = InterviewService()
        application = service.schedule_interview(
            application_id=application_id,
            employer_id=g.actor_id,
            scheduled_at=data.scheduled_at,
            location=data.location,
            meeting_link=data.meeting_link,
            notes=data.notes,
        )

        return jsonify({
            'message': 'Interview scheduled successfully',
            'application': application.to_dict(include_job=True),
        }), 200

    except ValidationError as e:
        return validation_error_response(e)

    except ApplicationError as e:
        logger.warning(f"Error scheduling interview for application {application_id}: {e.message}")
        return application_error_response(e)

    except Exception as e:
        logger.error(f"Error scheduling interview for application {application_id}: {e}", exc_info=True)
        return error_response(f"Failed to schedule interview: {str(e)}", 500)


@application_bp.route('/<int:application_id>/interview', methods=['DELETE'])
@require_actor
@require_role(ActorRole.EMPLOYER)
def cancel_interview(application_id: int):
    """Cancel the scheduled interview of an application."""
    try:
        service = InterviewService()
        application = service.cancel_interview(application_id, g.actor_id)

        return jsonify({
            'message': 'Interview cancelled',
            'application': application.to_dict(include_job=True),
        }), 200

    except ApplicationError as e:
        logger.warning(f"Error cancelling interview for application {application_id}: {e.message}")
        return application_error_response(e)

    except Exception as e:
        logger.error(f"Error cancelling interview for application {application_id}: {e}", exc_info=True)
        return error_response(f"Failed to cancel interview: {str(e)}", 500)


@application_bp.route('/<int:application_id>/feedback', methods=['POST'])
@require_actor
@require_role(ActorRole.EMPLOYER)
def provide_feedback(application_id: int):
    """
    Leave feedback on an application, replacing any earlier feedback.

    Request Body: FeedbackCreateSchema
    """
    try:
        data = FeedbackCreateSchema.model_validate(request_body())

        service = FeedbackService()
        application = service.provide_feedback(
            application_id=application_id,
            employer_id=g.actor_id,
            message=data.message,
            category=data.category,
        )

        return jsonify({
            'message': 'Feedback saved',
            'application': application.to_dict(include_job=True),
        }), 200

    except ValidationError as e:
        return validation_error_response(e)

    except ApplicationError as e:
        logger.warning(f"Error saving feedback for application {application_id}: {e.message}")
        return application_error_response(e)

    except Exception as e:
        logger.error(f"Error saving feedback for application {application_id}: {e}", exc_info=True)
        return error_response(f"Failed to save feedback: {str(e)}", 500)


# ==================== Shared Endpoints ====================

@application_bp.route('/<int:application_id>', methods=['GET'])
@require_actor
def get_application(application_id: int):
    """Get one application; visible to its applicant and its job's employer."""
    try:
        service = ApplicationLifecycleService()
        application = service.get_application(application_id, g.actor_role, g.actor_id)

        return jsonify(application.to_dict(include_job=True)), 200

    except ApplicationError as e:
        return application_error_response(e)

    except Exception as e:
        logger.error(f"Error getting application {application_id}: {e}", exc_info=True)
        return error_response(f"Failed to get application: {str(e)}", 500)


@application_bp.route('/<int:application_id>/status', methods=['PUT'])
@require_actor
def update_status(application_id: int):
    """
    Move an application to a new status.

    Employers advance or reject; applicants may only withdraw.

    Request Body: ApplicationStatusUpdateSchema
    """
    try:
        data = ApplicationStatusUpdateSchema.model_validate(request_body())

        service = ApplicationLifecycleService()
        result = service.apply_transition(
            application_id=application_id,
            requested_status=data.status,
            actor_role=g.actor_role,
            actor_id=g.actor_id,
        )

        response = result.to_dict()
        response['message'] = f"Application status updated to {result.new_status}"
        return jsonify(response), 200

    except ValidationError as e:
        return validation_error_response(e)

    except ApplicationError as e:
        logger.warning(f"Error updating status of application {application_id}: {e.message}")
        return application_error_response(e)

    except Exception as e:
        logger.error(f"Error updating status of application {application_id}: {e}", exc_info=True)
        return error_response(f"Failed to update status: {str(e)}", 500)
