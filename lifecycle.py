"""Status lifecycles for properties, rental applications and visit requests.

Each lifecycle is a :class:`StateMachine` holding an explicit transition
table. Handlers never assign a status directly; they ask the machine for the
next state, and an unlisted ``current -> requested`` pair is refused.
"""
from typing import Dict, FrozenSet, Iterable, Mapping

from errors import BadRequestError
from models import ApplicationStatus, PropertyStatus, VisitRequestStatus


class InvalidTransitionError(BadRequestError):
    def __init__(self, entity: str, current: str, requested: str):
        self.entity = entity
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change {entity} status from '{current}' to '{requested}'")


class StateMachine:
    def __init__(self, entity: str, initial: str, transitions: Mapping[str, Iterable[str]]):
        self.entity = entity
        self.initial = initial
        self.transitions: Dict[str, FrozenSet[str]] = {
            state: frozenset(targets) for state, targets in transitions.items()
        }
        if initial not in self.transitions:
            raise ValueError(f"Initial state '{initial}' is missing from the transition table")

    @property
    def states(self) -> FrozenSet[str]:
        return frozenset(self.transitions)

    def targets(self, current: str) -> FrozenSet[str]:
        return self.transitions.get(current, frozenset())

    def is_terminal(self, state: str) -> bool:
        return not self.targets(state)

    def can_transition(self, current: str, requested: str) -> bool:
        return requested in self.targets(current)

    def transition(self, current: str, requested: str) -> str:
        """Returns ``requested`` if the move is allowed, otherwise raises."""
        if not self.can_transition(current, requested):
            raise InvalidTransitionError(self.entity, current, requested)
        return requested


def _values(*members):
    return [m.value for m in members]


_ALL_PROPERTY_STATES = _values(*PropertyStatus)

# Owners assign listing status freely, including re-asserting the current one.
PROPERTY_LIFECYCLE = StateMachine(
    "property",
    PropertyStatus.ACTIVE.value,
    {state: _ALL_PROPERTY_STATES for state in _ALL_PROPERTY_STATES},
)

APPLICATION_LIFECYCLE = StateMachine(
    "application",
    ApplicationStatus.PENDING.value,
    {
        ApplicationStatus.PENDING.value: _values(
            ApplicationStatus.SHORTLISTED,
            ApplicationStatus.ACCEPTED,
            ApplicationStatus.REJECTED,
            ApplicationStatus.CANCELLED,
        ),
        ApplicationStatus.SHORTLISTED.value: _values(
            ApplicationStatus.ACCEPTED,
            ApplicationStatus.REJECTED,
            ApplicationStatus.CANCELLED,
        ),
        ApplicationStatus.ACCEPTED.value: [],
        ApplicationStatus.REJECTED.value: [],
        ApplicationStatus.CANCELLED.value: [],
    },
)

VISIT_REQUEST_LIFECYCLE = StateMachine(
    "visit request",
    VisitRequestStatus.PENDING.value,
    {
        VisitRequestStatus.PENDING.value: _values(
            VisitRequestStatus.ACCEPTED,
            VisitRequestStatus.REJECTED,
            VisitRequestStatus.CANCELLED,
        ),
        VisitRequestStatus.ACCEPTED.value: _values(
            VisitRequestStatus.COMPLETED,
            VisitRequestStatus.CANCELLED,
        ),
        VisitRequestStatus.COMPLETED.value: [],
        VisitRequestStatus.REJECTED.value: [],
        VisitRequestStatus.CANCELLED.value: [],
    },
)
