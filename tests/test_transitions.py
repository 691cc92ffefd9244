from itertools import product

import pytest

from taskflow.tasks.enums import TaskStatus
from taskflow.tasks.transitions import allowed_transitions, validate_transition
from taskflow.utils import Forbidden, InvalidTransition

OPEN = TaskStatus.OPEN
IN_PROGRESS = TaskStatus.IN_PROGRESS
PENDING_APPROVAL = TaskStatus.PENDING_APPROVAL
CLOSED = TaskStatus.CLOSED
REOPENED = TaskStatus.REOPENED

# who may request each workflow step
WORKFLOW = {
    (OPEN, IN_PROGRESS): {"assignee"},
    (IN_PROGRESS, PENDING_APPROVAL): {"assignee"},
    (PENDING_APPROVAL, CLOSED): {"manager"},
    (PENDING_APPROVAL, REOPENED): {"manager"},
    (CLOSED, REOPENED): {"manager"},
    (IN_PROGRESS, OPEN): {"assignee", "manager"},
}

COMBINATIONS = list(product(TaskStatus, TaskStatus, (False, True), (False, True)))


def _permitted(actors, is_assignee, is_manager):
    return ("assignee" in actors and is_assignee) or ("manager" in actors and is_manager)


@pytest.mark.parametrize("current,requested,is_assignee,is_manager", COMBINATIONS)
def test_every_status_pair(current, requested, is_assignee, is_manager):
    actors = WORKFLOW.get((current, requested))

    if actors is None:
        with pytest.raises(InvalidTransition):
            validate_transition(
                current, requested, is_assignee=is_assignee, is_manager=is_manager,
            )
    elif _permitted(actors, is_assignee, is_manager):
        validate_transition(
            current, requested, is_assignee=is_assignee, is_manager=is_manager,
        )
    else:
        with pytest.raises(Forbidden):
            validate_transition(
                current, requested, is_assignee=is_assignee, is_manager=is_manager,
            )


@pytest.mark.parametrize(
    "current,is_assignee,is_manager",
    list(product(TaskStatus, (False, True), (False, True))),
)
def test_allowed_transitions_agree_with_workflow(current, is_assignee, is_manager):
    expected = {
        target
        for (source, target), actors in WORKFLOW.items()
        if source == current and _permitted(actors, is_assignee, is_manager)
    }
    got = allowed_transitions(current, is_assignee=is_assignee, is_manager=is_manager)
    assert set(got) == expected


def test_invalid_change_is_reported_before_authorization():
    # a developer asking for an impossible jump is told it is impossible, not forbidden
    with pytest.raises(InvalidTransition, match="Invalid status change from OPEN to CLOSED"):
        validate_transition(OPEN, CLOSED, is_assignee=False, is_manager=False)


def test_denial_names_who_may_close():
    with pytest.raises(Forbidden, match="Only managers can close tasks"):
        validate_transition(PENDING_APPROVAL, CLOSED, is_assignee=True, is_manager=False)


def test_same_status_is_not_a_transition():
    with pytest.raises(InvalidTransition):
        validate_transition(OPEN, OPEN, is_assignee=True, is_manager=True)


def test_reopened_has_no_way_out():
    assert allowed_transitions(REOPENED, is_assignee=True, is_manager=True) == []
