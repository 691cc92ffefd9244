from loguru import logger

from taskflow.tasks.enums import UserRole
from taskflow.tasks.models import Task, User
from taskflow.utils import Forbidden


class PermissionChecker:
    """Role and relationship checks between a user and a task"""

    @staticmethod
    def is_manager(user: User) -> bool:
        return user.role == UserRole.MANAGER

    @staticmethod
    def is_creator(user: User, task: Task) -> bool:
        return task.creator_id == user.id

    @staticmethod
    def is_assignee(user: User, task: Task) -> bool:
        # unassigned tasks have no assignee to match
        return task.assignee_id is not None and task.assignee_id == user.id

    @staticmethod
    def can_delete_task(user: User, task: Task) -> bool:
        """Managers, the creator and the assignee may delete a task"""
        return (
            PermissionChecker.is_manager(user)
            or PermissionChecker.is_creator(user, task)
            or PermissionChecker.is_assignee(user, task)
        )

    @staticmethod
    def can_view_time_entries(user: User, task: Task) -> bool:
        """Managers, the creator and the assignee may see a task's time log"""
        return PermissionChecker.can_delete_task(user, task)


def _deny(user: User, task: Task, message: str) -> None:
    logger.warning(
        "Denied user {} ({}) on task {}: {}", user.id, user.role.value, task.id, message,
    )
    raise Forbidden(message)


def verify_task_delete(user: User, task: Task) -> None:
    if not PermissionChecker.can_delete_task(user, task):
        _deny(user, task, "Not authorized to delete this task")


def verify_time_entries_view(user: User, task: Task) -> None:
    if not PermissionChecker.can_view_time_entries(user, task):
        _deny(user, task, "Not authorized to view time entries")


def verify_task_assignee(user: User, task: Task, action: str) -> None:
    """Only the task's assignee may ``action`` (e.g. "log time")."""
    if not PermissionChecker.is_assignee(user, task):
        _deny(user, task, f"Only the assignee can {action}")
