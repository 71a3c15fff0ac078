"""
Unit tests for ApplicationLifecycleService
Tests single and bulk transitions, withdrawal, frozen applications,
concurrent writers and the status-count projection
"""
from datetime import datetime, timedelta

import pytest
from sqlalchemy import update

from app import db as app_db
from app.models import ActorRole, ApplicationStatus, JobApplication
from app.services.application_errors import (
    AlreadyWithdrawnError,
    ApplicationValidationError,
    DuplicateApplicationError,
    ForbiddenError,
    FrozenApplicationError,
    InternalApplicationError,
    InvalidTransitionError,
    NotFoundError,
    StaleStateError,
)
from app.services.application_lifecycle_service import ApplicationLifecycleService
from app.services.application_store import ApplicationStore
from conftest import APPLICANT_ID, EMPLOYER_ID, OTHER_APPLICANT_ID, OTHER_EMPLOYER_ID


class RacingStore(ApplicationStore):
    """
    Store whose first read hands out a snapshot and then lets a competing
    writer move the record on, as if two requests interleaved.
    """

    def __init__(self, competing_status: str):
        self.competing_status = competing_status
        self.raced = False

    def get(self, application_id):
        application = super().get(application_id)
        if application is None or self.raced:
            return application

        self.raced = True
        app_db.session.expunge(application)
        app_db.session.execute(
            update(JobApplication)
            .where(JobApplication.id == application_id)
            .values(status=self.competing_status, version=JobApplication.version + 1)
        )
        app_db.session.commit()
        return application


class BrokenConnectionStore(ApplicationStore):
    """Store whose reads of one application fail like a dropped connection."""

    def __init__(self, broken_id: int):
        self.broken_id = broken_id

    def get(self, application_id):
        if application_id == self.broken_id:
            raise RuntimeError("connection reset")
        return super().get(application_id)


# ==================== Create ====================

@pytest.mark.unit
class TestCreateApplication:
    """Test submitting applications."""

    def test_starts_pending_and_notifies_employer(self, lifecycle, emitter, job):
        application = lifecycle.create_application(
            applicant_id=APPLICANT_ID,
            job_posting_id=job.id,
            cover_letter_text="Hello",
            profile_resume_reference="resumes/20.pdf",
        )

        assert application.status == "pending"
        assert application.employer_id == EMPLOYER_ID
        assert application.resume_reference == "resumes/20.pdf"
        assert emitter.kinds() == ["application_received"]
        assert emitter.intents[0].recipient_id == EMPLOYER_ID

    def test_fresh_upload_wins_over_profile_resume(self, lifecycle, job):
        application = lifecycle.create_application(
            applicant_id=APPLICANT_ID,
            job_posting_id=job.id,
            resume_reference="uploads/new.pdf",
            profile_resume_reference="resumes/20.pdf",
        )

        assert application.resume_reference == "uploads/new.pdf"

    def test_duplicate_application(self, lifecycle, job, application):
        with pytest.raises(DuplicateApplicationError):
            lifecycle.create_application(applicant_id=APPLICANT_ID, job_posting_id=job.id)

    def test_both_cover_letter_forms(self, lifecycle, job):
        with pytest.raises(ApplicationValidationError):
            lifecycle.create_application(
                applicant_id=APPLICANT_ID,
                job_posting_id=job.id,
                cover_letter_text="Hello",
                cover_letter_document="letters/1.pdf",
            )

    def test_missing_job(self, lifecycle, db):
        with pytest.raises(NotFoundError):
            lifecycle.create_application(applicant_id=APPLICANT_ID, job_posting_id=404)

    def test_closed_job(self, lifecycle, job, db):
        job.is_active = False
        db.session.commit()

        with pytest.raises(NotFoundError):
            lifecycle.create_application(applicant_id=APPLICANT_ID, job_posting_id=job.id)


# ==================== Single Transitions ====================

@pytest.mark.unit
class TestApplyTransition:
    """Test single status transitions."""

    def test_employer_advances_and_applicant_is_notified(self, lifecycle, emitter, application):
        result = lifecycle.apply_transition(application.id, "reviewed", ActorRole.EMPLOYER, EMPLOYER_ID)

        assert result.old_status == "pending"
        assert result.new_status == "reviewed"
        assert result.application.status == "reviewed"
        assert result.application.status_changed_by_id == EMPLOYER_ID
        assert result.count_delta == {"pending": -1, "reviewed": 1}

        assert len(emitter.intents) == 1
        intent = emitter.intents[0]
        assert intent.kind == "status_changed"
        assert intent.recipient_role == "applicant"
        assert intent.recipient_id == APPLICANT_ID
        assert intent.payload["old_status"] == "pending"
        assert intent.payload["new_status"] == "reviewed"

    def test_employer_skip_edge(self, lifecycle, application):
        result = lifecycle.apply_transition(application.id, "rejected", ActorRole.EMPLOYER, EMPLOYER_ID)

        assert result.new_status == "rejected"

    def test_skip_edges_can_be_disabled(self, lifecycle, application, config):
        config(EMPLOYER_SKIP_TRANSITIONS=False)

        with pytest.raises(InvalidTransitionError) as exc_info:
            lifecycle.apply_transition(application.id, "rejected", ActorRole.EMPLOYER, EMPLOYER_ID)

        assert exc_info.value.details["allowed"] == ["reviewed", "shortlisted"]

    def test_not_found(self, lifecycle, db):
        with pytest.raises(NotFoundError):
            lifecycle.apply_transition(12345, "reviewed", ActorRole.EMPLOYER, EMPLOYER_ID)

    def test_other_employer_is_forbidden(self, lifecycle, application):
        with pytest.raises(ForbiddenError):
            lifecycle.apply_transition(application.id, "reviewed", ActorRole.EMPLOYER, OTHER_EMPLOYER_ID)

    def test_other_applicant_is_forbidden(self, lifecycle, application):
        with pytest.raises(ForbiddenError):
            lifecycle.apply_transition(application.id, "withdrawn", ActorRole.APPLICANT, OTHER_APPLICANT_ID)

    def test_applicant_cannot_advance(self, lifecycle, application):
        with pytest.raises(InvalidTransitionError):
            lifecycle.apply_transition(application.id, "reviewed", ActorRole.APPLICANT, APPLICANT_ID)

    def test_unknown_role(self, lifecycle, application):
        with pytest.raises(ForbiddenError):
            lifecycle.apply_transition(application.id, "reviewed", "recruiter", EMPLOYER_ID)

    def test_unknown_status(self, lifecycle, application):
        with pytest.raises(ApplicationValidationError):
            lifecycle.apply_transition(application.id, "archived", ActorRole.EMPLOYER, EMPLOYER_ID)

    def test_same_status_is_reported_not_ignored(self, lifecycle, application):
        lifecycle.apply_transition(application.id, "reviewed", ActorRole.EMPLOYER, EMPLOYER_ID)

        with pytest.raises(InvalidTransitionError) as exc_info:
            lifecycle.apply_transition(application.id, "reviewed", ActorRole.EMPLOYER, EMPLOYER_ID)

        assert "already reviewed" in exc_info.value.message

    @pytest.mark.parametrize("terminal", ["rejected", "hired", "withdrawn"])
    def test_terminal_has_no_way_out(self, lifecycle, make_application, terminal):
        application = make_application(status=terminal, applicant_id=APPLICANT_ID)

        for target in ApplicationStatus.all():
            with pytest.raises(InvalidTransitionError):
                lifecycle.apply_transition(application.id, target, ActorRole.EMPLOYER, EMPLOYER_ID)

    def test_failed_transition_leaves_record_untouched(self, lifecycle, store, emitter, application):
        with pytest.raises(InvalidTransitionError):
            lifecycle.apply_transition(application.id, "hired", ActorRole.APPLICANT, APPLICANT_ID)

        assert store.get(application.id).status == "pending"
        assert store.get(application.id).version == 1
        assert emitter.intents == []


# ==================== Frozen ====================

@pytest.mark.unit
class TestFrozenApplications:
    """Test applications whose job was removed."""

    def test_frozen_rejects_transitions(self, lifecycle, application, job):
        lifecycle.handle_job_removed(job.id)

        with pytest.raises(FrozenApplicationError):
            lifecycle.apply_transition(application.id, "reviewed", ActorRole.EMPLOYER, EMPLOYER_ID)

    def test_frozen_checked_before_ownership(self, lifecycle, application, job):
        lifecycle.handle_job_removed(job.id)

        with pytest.raises(FrozenApplicationError):
            lifecycle.apply_transition(application.id, "reviewed", ActorRole.EMPLOYER, OTHER_EMPLOYER_ID)

    def test_frozen_rejects_withdraw_whatever_its_status(self, lifecycle, make_application, job):
        application = make_application(status="interview", applicant_id=APPLICANT_ID)
        lifecycle.handle_job_removed(job.id)

        with pytest.raises(FrozenApplicationError):
            lifecycle.withdraw(application.id, APPLICANT_ID)

    def test_frozen_stays_readable(self, lifecycle, application, job):
        lifecycle.handle_job_removed(job.id)

        frozen = lifecycle.get_application(application.id, ActorRole.APPLICANT, APPLICANT_ID)

        assert frozen.is_frozen
        assert frozen.status == "pending"

    def test_bulk_reports_frozen_per_id(self, lifecycle, make_application, job, other_job):
        live_job_app = make_application(job_posting=other_job)
        frozen_app = make_application()
        lifecycle.handle_job_removed(job.id)

        result = lifecycle.apply_bulk_transition(
            [live_job_app.id, frozen_app.id], "reviewed", ActorRole.EMPLOYER, EMPLOYER_ID,
        )

        assert isinstance(result.failed[frozen_app.id], FrozenApplicationError)
        assert isinstance(result.failed[live_job_app.id], ForbiddenError)


# ==================== Withdraw ====================

@pytest.mark.unit
class TestWithdraw:
    """Test applicant withdrawal."""

    def test_withdraw_notifies_employer(self, lifecycle, emitter, application):
        result = lifecycle.withdraw(application.id, APPLICANT_ID)

        assert result.new_status == "withdrawn"
        assert emitter.intents[0].recipient_role == "employer"
        assert emitter.intents[0].recipient_id == EMPLOYER_ID

    def test_withdraw_notification_can_be_disabled(self, lifecycle, emitter, application, config):
        config(NOTIFY_EMPLOYER_ON_WITHDRAWAL=False)

        result = lifecycle.withdraw(application.id, APPLICANT_ID)

        assert result.notifications == []
        assert emitter.intents == []

    def test_already_withdrawn_is_forbidden(self, lifecycle, application):
        lifecycle.withdraw(application.id, APPLICANT_ID)

        with pytest.raises(AlreadyWithdrawnError) as exc_info:
            lifecycle.withdraw(application.id, APPLICANT_ID)

        assert isinstance(exc_info.value, ForbiddenError)
        assert exc_info.value.code == "already_withdrawn"

    @pytest.mark.parametrize("terminal", ["rejected", "hired"])
    def test_withdraw_after_decision_is_invalid(self, lifecycle, make_application, terminal):
        application = make_application(status=terminal, applicant_id=APPLICANT_ID)

        with pytest.raises(InvalidTransitionError) as exc_info:
            lifecycle.withdraw(application.id, APPLICANT_ID)

        assert not isinstance(exc_info.value, ForbiddenError)

    def test_only_owner_can_withdraw(self, lifecycle, application):
        with pytest.raises(ForbiddenError):
            lifecycle.withdraw(application.id, OTHER_APPLICANT_ID)


# ==================== Bulk ====================

@pytest.mark.unit
class TestBulkTransition:
    """Test best-effort batches."""

    def test_partial_success(self, lifecycle, store, emitter, make_application):
        a = make_application()
        b = make_application(status="hired")
        c = make_application(status="reviewed")

        result = lifecycle.apply_bulk_transition({a.id, b.id, c.id}, "shortlisted", ActorRole.EMPLOYER, EMPLOYER_ID)

        assert result.applied == {a.id, c.id}
        assert set(result.failed) == {b.id}
        assert isinstance(result.failed[b.id], InvalidTransitionError)
        assert store.get(a.id).status == "shortlisted"
        assert store.get(b.id).status == "hired"
        assert store.get(c.id).status == "shortlisted"
        assert len(emitter.intents) == 2

    def test_unexpected_error_on_one_id_does_not_abort_batch(self, emitter, make_application):
        a = make_application()
        b = make_application()
        c = make_application()
        service = ApplicationLifecycleService(store=BrokenConnectionStore(b.id), emitter=emitter)

        result = service.apply_bulk_transition([a.id, b.id, c.id], "reviewed", ActorRole.EMPLOYER, EMPLOYER_ID)

        assert result.applied == {a.id, c.id}
        assert isinstance(result.failed[b.id], InternalApplicationError)
        assert result.to_dict()["failed"][str(b.id)]["code"] == "internal_error"

        store = ApplicationStore()
        assert [store.get(x.id).status for x in (a, b, c)] == ["reviewed", "pending", "reviewed"]
        assert sorted(intent.application_id for intent in emitter.intents) == sorted([a.id, c.id])

    def test_count_delta_is_sum_of_individual_deltas(self, lifecycle, make_application):
        a = make_application()
        b = make_application()
        c = make_application(status="reviewed")

        result = lifecycle.apply_bulk_transition([a.id, b.id, c.id], "rejected", ActorRole.EMPLOYER, EMPLOYER_ID)

        assert result.count_delta == {"pending": -2, "reviewed": -1, "rejected": 3}

    def test_missing_id_is_reported(self, lifecycle, application):
        result = lifecycle.apply_bulk_transition([application.id, 999], "reviewed", ActorRole.EMPLOYER, EMPLOYER_ID)

        assert result.applied == {application.id}
        assert isinstance(result.failed[999], NotFoundError)
        assert result.to_dict()["failed"]["999"]["code"] == "not_found"

    def test_applicants_cannot_bulk(self, lifecycle, application):
        with pytest.raises(ForbiddenError):
            lifecycle.apply_bulk_transition([application.id], "withdrawn", ActorRole.APPLICANT, APPLICANT_ID)

    def test_empty_batch(self, lifecycle, db):
        with pytest.raises(ApplicationValidationError):
            lifecycle.apply_bulk_transition([], "reviewed", ActorRole.EMPLOYER, EMPLOYER_ID)

    def test_batch_size_limit(self, lifecycle, make_application, config):
        config(BULK_TRANSITION_MAX_IDS=2)
        ids = [make_application().id for _ in range(3)]

        with pytest.raises(ApplicationValidationError):
            lifecycle.apply_bulk_transition(ids, "reviewed", ActorRole.EMPLOYER, EMPLOYER_ID)


# ==================== Concurrency ====================

@pytest.mark.unit
class TestConcurrentTransitions:
    """Test that two writers on one application never both win."""

    def test_stale_snapshot_loses(self, emitter, application):
        service = ApplicationLifecycleService(store=RacingStore("rejected"), emitter=emitter)

        with pytest.raises(StaleStateError) as exc_info:
            service.apply_transition(application.id, "shortlisted", ActorRole.EMPLOYER, EMPLOYER_ID)

        assert isinstance(exc_info.value, InvalidTransitionError)
        assert ApplicationStore().get(application.id).status == "rejected"
        assert emitter.intents == []

    def test_second_request_sees_first_result(self, lifecycle, application):
        lifecycle.apply_transition(application.id, "shortlisted", ActorRole.EMPLOYER, EMPLOYER_ID)
        lifecycle.apply_transition(application.id, "rejected", ActorRole.EMPLOYER, EMPLOYER_ID)

        with pytest.raises(InvalidTransitionError):
            lifecycle.apply_transition(application.id, "interview", ActorRole.EMPLOYER, EMPLOYER_ID)


# ==================== Reads ====================

@pytest.mark.unit
class TestListApplications:
    """Test listing with status counts."""

    def test_applicant_sees_only_own(self, lifecycle, make_application, other_job):
        make_application(applicant_id=APPLICANT_ID)
        make_application(applicant_id=APPLICANT_ID, job_posting=other_job)
        make_application(applicant_id=OTHER_APPLICANT_ID)

        items, total, counts = lifecycle.list_applications(ActorRole.APPLICANT, APPLICANT_ID)

        assert total == 2
        assert all(a.applicant_id == APPLICANT_ID for a in items)
        assert counts["pending"] == 2

    def test_counts_ignore_status_filter(self, lifecycle, make_application):
        make_application()
        make_application(status="reviewed")

        items, total, counts = lifecycle.list_applications(ActorRole.EMPLOYER, EMPLOYER_ID, status="reviewed")

        assert total == 1
        assert counts["pending"] == 1
        assert counts["reviewed"] == 1

    def test_get_requires_ownership(self, lifecycle, application):
        with pytest.raises(ForbiddenError):
            lifecycle.get_application(application.id, ActorRole.EMPLOYER, OTHER_EMPLOYER_ID)


# ==================== End to End ====================

@pytest.mark.unit
class TestLifecycleScenario:
    """Walk one application through its whole life."""

    def test_shortlist_interview_withdraw_then_hire_fails(self, lifecycle, interviews, application):
        lifecycle.apply_transition(application.id, "shortlisted", ActorRole.EMPLOYER, EMPLOYER_ID)

        scheduled = interviews.schedule_interview(
            application.id, EMPLOYER_ID, datetime.utcnow() + timedelta(days=1), location="Office",
        )
        assert scheduled.interview_status == "scheduled"
        assert scheduled.status == "shortlisted"

        lifecycle.apply_transition(application.id, "interview", ActorRole.EMPLOYER, EMPLOYER_ID)

        withdrawn = lifecycle.withdraw(application.id, APPLICANT_ID)
        assert withdrawn.application.status == "withdrawn"

        with pytest.raises(InvalidTransitionError):
            lifecycle.apply_transition(application.id, "hired", ActorRole.EMPLOYER, EMPLOYER_ID)

    def test_every_status_is_reached_by_legal_edges(self, lifecycle, application):
        path = ["reviewed", "shortlisted", "interview", "hired"]
        previous = "pending"

        for target in path:
            result = lifecycle.apply_transition(application.id, target, ActorRole.EMPLOYER, EMPLOYER_ID)
            assert result.old_status == previous
            previous = target

        assert result.application.version == len(path) + 1
