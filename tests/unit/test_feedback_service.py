"""
Unit tests for FeedbackService
Tests the single, overwritten-in-place feedback record
"""
import pytest

from app.services.application_errors import (
    ApplicationValidationError,
    ForbiddenError,
    FrozenApplicationError,
    InvalidTransitionError,
)
from conftest import EMPLOYER_ID, OTHER_EMPLOYER_ID


@pytest.mark.unit
class TestProvideFeedback:
    """Test employer feedback."""

    def test_feedback_is_stored_and_applicant_notified(self, feedback, emitter, application):
        updated = feedback.provide_feedback(application.id, EMPLOYER_ID, "  Strong portfolio  ", "Skills assessment")

        assert updated.feedback == {
            "message": "Strong portfolio",
            "category": "Skills assessment",
            "provided_at": updated.feedback_provided_at.isoformat(),
        }
        assert emitter.kinds() == ["feedback_received"]
        assert emitter.intents[0].payload["category"] == "Skills assessment"

    def test_second_write_replaces_first(self, feedback, store, application):
        feedback.provide_feedback(application.id, EMPLOYER_ID, "First impression", "General feedback")
        feedback.provide_feedback(application.id, EMPLOYER_ID, "Second thoughts")

        stored = store.get(application.id)
        assert stored.feedback_message == "Second thoughts"
        assert stored.feedback_category is None

    @pytest.mark.parametrize("message", ["", "   ", None])
    def test_empty_message(self, feedback, application, message):
        with pytest.raises(ApplicationValidationError):
            feedback.provide_feedback(application.id, EMPLOYER_ID, message)

    def test_empty_message_checked_before_lookup(self, feedback, db):
        with pytest.raises(ApplicationValidationError):
            feedback.provide_feedback(404, EMPLOYER_ID, "")

    @pytest.mark.parametrize("terminal", ["rejected", "hired", "withdrawn"])
    def test_terminal_application(self, feedback, make_application, terminal):
        application = make_application(status=terminal)

        with pytest.raises(InvalidTransitionError):
            feedback.provide_feedback(application.id, EMPLOYER_ID, "Too late")

    def test_frozen_application(self, feedback, lifecycle, application, job):
        lifecycle.handle_job_removed(job.id)

        with pytest.raises(FrozenApplicationError):
            feedback.provide_feedback(application.id, EMPLOYER_ID, "Anything")

    def test_other_employer(self, feedback, application):
        with pytest.raises(ForbiddenError):
            feedback.provide_feedback(application.id, OTHER_EMPLOYER_ID, "Not yours")
