import pytest

from lifecycle import (
    APPLICATION_LIFECYCLE,
    PROPERTY_LIFECYCLE,
    VISIT_REQUEST_LIFECYCLE,
    InvalidTransitionError,
    StateMachine,
)


def test_initial_states():
    assert PROPERTY_LIFECYCLE.initial == "active"
    assert APPLICATION_LIFECYCLE.initial == "pending"
    assert VISIT_REQUEST_LIFECYCLE.initial == "pending"


@pytest.mark.parametrize("requested", ["shortlisted", "accepted", "rejected", "cancelled"])
def test_pending_application_can_be_answered(requested):
    assert APPLICATION_LIFECYCLE.transition("pending", requested) == requested


@pytest.mark.parametrize("terminal", ["accepted", "rejected", "cancelled"])
def test_answered_application_is_final(terminal):
    assert APPLICATION_LIFECYCLE.is_terminal(terminal)
    with pytest.raises(InvalidTransitionError) as exc:
        APPLICATION_LIFECYCLE.transition(terminal, "shortlisted")
    assert exc.value.status_code == 400
    assert exc.value.message == f"Cannot change application status from '{terminal}' to 'shortlisted'"


def test_visit_completion_needs_acceptance():
    assert not VISIT_REQUEST_LIFECYCLE.can_transition("pending", "completed")
    assert VISIT_REQUEST_LIFECYCLE.can_transition("accepted", "completed")
    assert VISIT_REQUEST_LIFECYCLE.targets("completed") == frozenset()


def test_property_status_is_freely_assignable():
    for current in PROPERTY_LIFECYCLE.states:
        for requested in PROPERTY_LIFECYCLE.states:
            assert PROPERTY_LIFECYCLE.transition(current, requested) == requested


def test_unknown_state_has_no_targets():
    assert not APPLICATION_LIFECYCLE.can_transition("archived", "pending")


def test_initial_state_must_be_in_table():
    with pytest.raises(ValueError):
        StateMachine("thing", "start", {"other": []})
