"""
Task status workflow.

Every allowed status change is one row of ``TRANSITIONS``; a change that is
not a row is an invalid status change, whoever asks for it. A row says who
may request it: the task's assignee, a manager, or either.

    OPEN -> IN_PROGRESS -> PENDING_APPROVAL -> CLOSED -> REOPENED
              |                    |
              v                    v
             OPEN               REOPENED
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from taskflow.tasks.enums import TaskStatus
from taskflow.utils import Forbidden, InvalidTransition


@dataclass(frozen=True)
class TransitionRule:
    assignee: bool
    manager: bool
    denial: str

    def permits(self, *, is_assignee: bool, is_manager: bool) -> bool:
        return (self.assignee and is_assignee) or (self.manager and is_manager)


TRANSITIONS: Dict[Tuple[TaskStatus, TaskStatus], TransitionRule] = {
    (TaskStatus.OPEN, TaskStatus.IN_PROGRESS): TransitionRule(
        assignee=True, manager=False,
        denial="Only the assignee can start progress on a task",
    ),
    (TaskStatus.IN_PROGRESS, TaskStatus.PENDING_APPROVAL): TransitionRule(
        assignee=True, manager=False,
        denial="Only the assignee can mark a task as pending approval",
    ),
    (TaskStatus.PENDING_APPROVAL, TaskStatus.CLOSED): TransitionRule(
        assignee=False, manager=True,
        denial="Only managers can close tasks",
    ),
    (TaskStatus.PENDING_APPROVAL, TaskStatus.REOPENED): TransitionRule(
        assignee=False, manager=True,
        denial="Only managers can reopen tasks",
    ),
    (TaskStatus.CLOSED, TaskStatus.REOPENED): TransitionRule(
        assignee=False, manager=True,
        denial="Only managers can reopen tasks",
    ),
    (TaskStatus.IN_PROGRESS, TaskStatus.OPEN): TransitionRule(
        assignee=True, manager=True,
        denial="Only the assignee or a manager can move a task back to open",
    ),
}


def validate_transition(
    current: TaskStatus,
    requested: TaskStatus,
    *,
    is_assignee: bool,
    is_manager: bool,
) -> None:
    """
    Raise unless the actor may move a task from ``current`` to ``requested``.

    :raises InvalidTransition: the pair is not part of the workflow.
    :raises Forbidden: the pair exists but the actor is not allowed to request it.
    """
    rule = TRANSITIONS.get((current, requested))
    if rule is None:
        raise InvalidTransition(
            f"Invalid status change from {current.value} to {requested.value}"
        )
    if not rule.permits(is_assignee=is_assignee, is_manager=is_manager):
        raise Forbidden(rule.denial)


def allowed_transitions(
    current: TaskStatus,
    *,
    is_assignee: bool,
    is_manager: bool,
) -> List[TaskStatus]:
    """Statuses the actor may move a task to from ``current``."""
    return [
        target
        for (source, target), rule in TRANSITIONS.items()
        if source == current
        and rule.permits(is_assignee=is_assignee, is_manager=is_manager)
    ]
