"""
Unit tests for the application status model
Tests the transition graph, role permissions and skip edges
"""
import pytest

from app.models.application_status import (
    ActorRole,
    ApplicationStatus,
    TRANSITIONS,
    allowed_targets,
    can_transition,
    is_terminal,
    role_may,
)


S = ApplicationStatus


@pytest.mark.unit
class TestStatusSets:
    """Test status classification."""

    def test_terminal_statuses_are_known(self):
        assert set(S.terminal()) < set(S.all())

    @pytest.mark.parametrize("status", ["rejected", "hired", "withdrawn"])
    def test_terminal_statuses(self, status):
        assert is_terminal(status)

    @pytest.mark.parametrize("status", ["pending", "reviewed", "shortlisted", "interview"])
    def test_non_terminal_statuses(self, status):
        assert not is_terminal(status)

    def test_terminal_statuses_have_no_outgoing_edges(self):
        for source, _ in TRANSITIONS:
            assert source.value not in S.terminal()


@pytest.mark.unit
class TestEmployerTransitions:
    """Test the employer side of the graph."""

    @pytest.mark.parametrize("current,requested", [
        (S.PENDING, S.REVIEWED),
        (S.PENDING, S.SHORTLISTED),
        (S.REVIEWED, S.SHORTLISTED),
        (S.REVIEWED, S.REJECTED),
        (S.SHORTLISTED, S.INTERVIEW),
        (S.SHORTLISTED, S.REJECTED),
        (S.INTERVIEW, S.HIRED),
        (S.INTERVIEW, S.REJECTED),
    ])
    def test_explicit_edges_allowed(self, current, requested):
        assert can_transition(current, requested, ActorRole.EMPLOYER, allow_skips=False)
        assert can_transition(current, requested, ActorRole.EMPLOYER, allow_skips=True)

    def test_skip_edges_follow_forward_closure(self):
        assert can_transition(S.PENDING, S.REJECTED, ActorRole.EMPLOYER)
        assert can_transition(S.PENDING, S.INTERVIEW, ActorRole.EMPLOYER)
        assert can_transition(S.PENDING, S.HIRED, ActorRole.EMPLOYER)
        assert can_transition(S.REVIEWED, S.HIRED, ActorRole.EMPLOYER)

    def test_skip_edges_disabled(self):
        assert not can_transition(S.PENDING, S.REJECTED, ActorRole.EMPLOYER, allow_skips=False)
        assert not can_transition(S.PENDING, S.HIRED, ActorRole.EMPLOYER, allow_skips=False)

    def test_no_backwards_moves(self):
        assert not can_transition(S.SHORTLISTED, S.PENDING, ActorRole.EMPLOYER)
        assert not can_transition(S.INTERVIEW, S.REVIEWED, ActorRole.EMPLOYER)

    def test_employer_cannot_withdraw(self):
        for status in (S.PENDING, S.REVIEWED, S.SHORTLISTED, S.INTERVIEW):
            assert not can_transition(status, S.WITHDRAWN, ActorRole.EMPLOYER)

    def test_same_status_is_not_a_transition(self):
        for status in S:
            assert not can_transition(status, status, ActorRole.EMPLOYER)

    def test_pending_closure(self):
        assert allowed_targets(S.PENDING, ActorRole.EMPLOYER) == {
            S.REVIEWED, S.SHORTLISTED, S.INTERVIEW, S.REJECTED, S.HIRED,
        }


@pytest.mark.unit
class TestApplicantTransitions:
    """Test the applicant side of the graph."""

    @pytest.mark.parametrize("status", [S.PENDING, S.REVIEWED, S.SHORTLISTED, S.INTERVIEW])
    def test_withdraw_from_any_active_status(self, status):
        assert allowed_targets(status, ActorRole.APPLICANT) == {S.WITHDRAWN}

    @pytest.mark.parametrize("status", [S.REJECTED, S.HIRED, S.WITHDRAWN])
    def test_nothing_from_terminal(self, status):
        assert allowed_targets(status, ActorRole.APPLICANT) == set()
        assert allowed_targets(status, ActorRole.EMPLOYER) == set()

    def test_applicant_cannot_advance(self):
        assert not can_transition(S.PENDING, S.REVIEWED, ActorRole.APPLICANT)
        assert not can_transition(S.INTERVIEW, S.HIRED, ActorRole.APPLICANT)

    def test_unknown_requested_status(self):
        assert not can_transition(S.PENDING, "archived", ActorRole.EMPLOYER)

    def test_accepts_plain_strings(self):
        assert can_transition("pending", "reviewed", "employer")
        assert can_transition("interview", "withdrawn", "applicant")


@pytest.mark.unit
class TestRolePermissions:
    """Test which roles may invoke which operations."""

    def test_bulk_is_employer_only(self):
        assert role_may(ActorRole.EMPLOYER, "apply_bulk_transition")
        assert not role_may(ActorRole.APPLICANT, "apply_bulk_transition")

    def test_interview_and_feedback_are_employer_only(self):
        for operation in ("schedule_interview", "cancel_interview", "provide_feedback"):
            assert role_may(ActorRole.EMPLOYER, operation)
            assert not role_may(ActorRole.APPLICANT, operation)

    def test_withdraw_is_applicant_only(self):
        assert role_may(ActorRole.APPLICANT, "withdraw")
        assert not role_may(ActorRole.EMPLOYER, "withdraw")

    def test_unknown_operation(self):
        assert not role_may(ActorRole.EMPLOYER, "delete_everything")
