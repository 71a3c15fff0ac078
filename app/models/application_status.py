"""
Application Status Model
Finite set of application states, actor roles and the legal transition graph.
Pure data and validation, no database access.
"""
from collections import deque
from enum import Enum
from typing import Dict, FrozenSet, Set, Tuple


class ApplicationStatus(str, Enum):
    """Top-level status of a job application."""
    PENDING = "pending"           # Submitted, not yet looked at
    REVIEWED = "reviewed"         # Employer has reviewed it
    SHORTLISTED = "shortlisted"   # Employer shortlisted the candidate
    INTERVIEW = "interview"       # Candidate is in the interview stage
    REJECTED = "rejected"         # Employer rejected the application
    HIRED = "hired"               # Candidate was hired
    WITHDRAWN = "withdrawn"       # Applicant withdrew the application

    @classmethod
    def all(cls) -> list[str]:
        return [status.value for status in cls]

    @classmethod
    def terminal(cls) -> list[str]:
        """Final statuses (no outgoing transitions)."""
        return [cls.REJECTED.value, cls.HIRED.value, cls.WITHDRAWN.value]


class InterviewStatus(str, Enum):
    """Micro-state of the interview attached to an application."""
    UNSCHEDULED = "unscheduled"
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"


class ActorRole(str, Enum):
    """Capacity under which a lifecycle operation is invoked."""
    APPLICANT = "applicant"
    EMPLOYER = "employer"


# Directed edges of the transition graph and the role allowed to take them.
TRANSITIONS: Dict[Tuple[ApplicationStatus, ApplicationStatus], ActorRole] = {
    (ApplicationStatus.PENDING, ApplicationStatus.REVIEWED): ActorRole.EMPLOYER,
    (ApplicationStatus.PENDING, ApplicationStatus.SHORTLISTED): ActorRole.EMPLOYER,
    (ApplicationStatus.PENDING, ApplicationStatus.WITHDRAWN): ActorRole.APPLICANT,
    (ApplicationStatus.REVIEWED, ApplicationStatus.SHORTLISTED): ActorRole.EMPLOYER,
    (ApplicationStatus.REVIEWED, ApplicationStatus.REJECTED): ActorRole.EMPLOYER,
    (ApplicationStatus.REVIEWED, ApplicationStatus.WITHDRAWN): ActorRole.APPLICANT,
    (ApplicationStatus.SHORTLISTED, ApplicationStatus.INTERVIEW): ActorRole.EMPLOYER,
    (ApplicationStatus.SHORTLISTED, ApplicationStatus.REJECTED): ActorRole.EMPLOYER,
    (ApplicationStatus.SHORTLISTED, ApplicationStatus.WITHDRAWN): ActorRole.APPLICANT,
    (ApplicationStatus.INTERVIEW, ApplicationStatus.HIRED): ActorRole.EMPLOYER,
    (ApplicationStatus.INTERVIEW, ApplicationStatus.REJECTED): ActorRole.EMPLOYER,
    (ApplicationStatus.INTERVIEW, ApplicationStatus.WITHDRAWN): ActorRole.APPLICANT,
}

TERMINAL_STATUSES: FrozenSet[ApplicationStatus] = frozenset({
    ApplicationStatus.REJECTED,
    ApplicationStatus.HIRED,
    ApplicationStatus.WITHDRAWN,
})


# Operations each actor role may invoke at all; ownership is checked separately.
OPERATION_ROLES: Dict[str, FrozenSet[ActorRole]] = {
    "create_application": frozenset({ActorRole.APPLICANT}),
    "apply_transition": frozenset({ActorRole.APPLICANT, ActorRole.EMPLOYER}),
    "apply_bulk_transition": frozenset({ActorRole.EMPLOYER}),
    "withdraw": frozenset({ActorRole.APPLICANT}),
    "schedule_interview": frozenset({ActorRole.EMPLOYER}),
    "cancel_interview": frozenset({ActorRole.EMPLOYER}),
    "provide_feedback": frozenset({ActorRole.EMPLOYER}),
    "view": frozenset({ActorRole.APPLICANT, ActorRole.EMPLOYER}),
}


def is_terminal(status) -> bool:
    """Check whether a status has no outgoing transitions."""
    return ApplicationStatus(status) in TERMINAL_STATUSES


def role_may(role, operation: str) -> bool:
    """Check whether an actor role is allowed to invoke an operation."""
    return ActorRole(role) in OPERATION_ROLES.get(operation, frozenset())


def _edges_for(role: ActorRole) -> Dict[ApplicationStatus, Set[ApplicationStatus]]:
    edges: Dict[ApplicationStatus, Set[ApplicationStatus]] = {}
    for (source, target), edge_role in TRANSITIONS.items():
        if edge_role == role:
            edges.setdefault(source, set()).add(target)
    return edges


def _forward_closure(
    edges: Dict[ApplicationStatus, Set[ApplicationStatus]],
    start: ApplicationStatus,
) -> Set[ApplicationStatus]:
    reachable: Set[ApplicationStatus] = set()
    queue = deque(edges.get(start, ()))
    while queue:
        status = queue.popleft()
        if status in reachable:
            continue
        reachable.add(status)
        queue.extend(edges.get(status, ()))
    reachable.discard(start)
    return reachable


_EMPLOYER_EDGES = _edges_for(ActorRole.EMPLOYER)
_EMPLOYER_CLOSURE = {
    status: _forward_closure(_EMPLOYER_EDGES, status)
    for status in ApplicationStatus
    if status not in TERMINAL_STATUSES
}


def allowed_targets(current, role, allow_skips: bool = True) -> Set[ApplicationStatus]:
    """
    Statuses an actor may move an application to from its current status.

    Args:
        current: Current application status
        role: Actor role requesting the change
        allow_skips: Let employers jump along the forward closure of their
            edges (e.g. pending -> rejected) instead of single steps only

    Returns:
        Set of legal target statuses (empty for terminal statuses)
    """
    current = ApplicationStatus(current)
    role = ActorRole(role)
    if current in TERMINAL_STATUSES:
        return set()

    if role == ActorRole.APPLICANT:
        return {ApplicationStatus.WITHDRAWN}

    if allow_skips:
        return set(_EMPLOYER_CLOSURE[current])
    return set(_EMPLOYER_EDGES.get(current, set()))


def can_transition(current, requested, role, allow_skips: bool = True) -> bool:
    """Pure predicate: may `role` move an application from `current` to `requested`?"""
    try:
        requested = ApplicationStatus(requested)
    except ValueError:
        return False
    return requested in allowed_targets(current, role, allow_skips=allow_skips)

