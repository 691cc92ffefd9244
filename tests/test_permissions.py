import pytest

from taskflow.tasks.enums import Priority, TaskStatus, UserRole
from taskflow.tasks.models import Task, User
from taskflow.tasks.permissions import (
    PermissionChecker,
    verify_task_assignee,
    verify_task_delete,
    verify_time_entries_view,
)
from taskflow.utils import Forbidden

MANAGER = User(id=1, name="Manager", email="manager@fealtyx.com", role=UserRole.MANAGER)
CREATOR = User(id=2, name="Creator", email="creator@fealtyx.com", role=UserRole.DEVELOPER)
ASSIGNEE = User(id=3, name="Assignee", email="assignee@fealtyx.com", role=UserRole.DEVELOPER)
OUTSIDER = User(id=4, name="Outsider", email="outsider@fealtyx.com", role=UserRole.DEVELOPER)


def _task(assignee_id=ASSIGNEE.id):
    return Task(
        id=10,
        title="t",
        description="d",
        status=TaskStatus.OPEN,
        priority=Priority.LOW,
        creator_id=CREATOR.id,
        assignee_id=assignee_id,
    )


@pytest.mark.parametrize(
    "user,allowed",
    [(MANAGER, True), (CREATOR, True), (ASSIGNEE, True), (OUTSIDER, False)],
)
def test_delete_allowed_for_manager_creator_and_assignee(user, allowed):
    task = _task()
    assert PermissionChecker.can_delete_task(user, task) is allowed
    if allowed:
        verify_task_delete(user, task)
    else:
        with pytest.raises(Forbidden, match="Not authorized to delete this task"):
            verify_task_delete(user, task)


def test_time_entries_visible_to_the_same_people():
    task = _task()
    for user in (MANAGER, CREATOR, ASSIGNEE):
        verify_time_entries_view(user, task)
    with pytest.raises(Forbidden):
        verify_time_entries_view(OUTSIDER, task)


def test_nobody_is_assignee_of_unassigned_task():
    task = _task(assignee_id=None)
    assert not PermissionChecker.is_assignee(ASSIGNEE, task)
    with pytest.raises(Forbidden, match="Only the assignee can log time"):
        verify_task_assignee(ASSIGNEE, task, "log time")


def test_manager_is_not_assignee_by_role():
    task = _task()
    assert PermissionChecker.is_manager(MANAGER)
    assert not PermissionChecker.is_assignee(MANAGER, task)
