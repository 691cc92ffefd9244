from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy import case, delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskflow.auth import security
from taskflow.tasks.enums import Priority, TaskStatus, UserRole
from taskflow.tasks.models import Task, User
from taskflow.tasks.permissions import PermissionChecker, verify_task_delete
from taskflow.tasks.transitions import allowed_transitions, validate_transition
from taskflow.time_tracking.models import TimeEntry
from taskflow.utils import (
    Conflict,
    Forbidden,
    NotFound,
    ServiceError,
    _get_or_404,
    as_utc,
)


def _declaration_rank(column, enum_cls):
    """Order enum columns as their members are declared, not alphabetically."""
    return case(*((column == member, rank) for rank, member in enumerate(enum_cls)))


SORTABLE_FIELDS = {
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
    "dueDate": Task.due_date,
    "priority": _declaration_rank(Task.priority, Priority),
    "status": _declaration_rank(Task.status, TaskStatus),
    "title": Task.title,
}

# columns a task update may not set to null
_REQUIRED_FIELDS = ("title", "description", "priority", "status")


# ---- Authentication ----
async def authenticate_user(
    session: AsyncSession, email: str, password: str
) -> Optional[User]:
    """
    Authenticate a user by email and password.
    Returns the user object if authentication is successful, otherwise None.
    """
    user = await get_user_by_email(session, email)
    if not user or not user.password_hash:
        return None
    if not security.verify_password(password, user.password_hash):
        return None
    return user


# ---- Users ----
async def create_user(
    session: AsyncSession,
    *,
    name: str,
    email: str,
    password: str,
    role: UserRole = UserRole.DEVELOPER,
) -> User:
    """Creates a new user with a hashed password."""
    if await get_user_by_email(session, email) is not None:
        raise Conflict("User with this email already exists")

    user = User(
        name=name,
        email=email,
        password_hash=security.get_password_hash(password),
        role=role,
    )
    session.add(user)
    try:
        await session.flush()  # push so integrity errors surface
    except IntegrityError as exc:
        raise Conflict("User with this email already exists") from exc
    await session.refresh(user)
    logger.info("Registered user {} <{}> as {}", user.id, user.email, user.role.value)
    return user


async def get_user(session: AsyncSession, user_id: int) -> User:
    return await _get_or_404(session, User, user_id)


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    q = select(User).where(User.email == email)
    result = await session.execute(q)
    return result.scalars().first()


async def list_users(session: AsyncSession) -> List[User]:
    result = await session.execute(select(User).order_by(User.name, User.id))
    return list(result.scalars().all())


# ---- Tasks ----
async def _ensure_assignee_exists(session: AsyncSession, assignee_id: int) -> None:
    if await session.get(User, assignee_id) is None:
        raise ServiceError("Invalid assignee ID provided")


async def create_task(
    session: AsyncSession,
    *,
    title: str,
    description: str,
    priority: Priority,
    assignee_id: int,
    creator_id: int,
    due_date: Optional[datetime] = None,
) -> Task:
    """Create a task. New tasks always start OPEN."""
    await _ensure_assignee_exists(session, assignee_id)
    task = Task(
        title=title,
        description=description,
        priority=priority,
        status=TaskStatus.OPEN,
        assignee_id=assignee_id,
        creator_id=creator_id,
        due_date=as_utc(due_date),
    )
    session.add(task)
    await session.flush()
    logger.info(
        "User {} created task {} assigned to {}", creator_id, task.id, assignee_id,
    )
    return await get_task(session, task.id)


async def get_task(
    session: AsyncSession,
    task_id: int,
    /,
    *,
    load_relations: bool = True,
) -> Task:
    if load_relations:
        q = (
            select(Task)
            .options(
                selectinload(Task.assignee),
                selectinload(Task.creator),
            )
            .where(Task.id == task_id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(q)
        task = result.scalars().first()
        if task is None:
            raise NotFound("Task not found")
        return task
    task = await session.get(Task, task_id)
    if task is None:
        raise NotFound("Task not found")
    return task


def _filter_tasks(
    q,
    *,
    status: Optional[TaskStatus] = None,
    priority: Optional[Priority] = None,
    assignee_id: Optional[int] = None,
    search: Optional[str] = None,
):
    if status is not None:
        q = q.where(Task.status == status)
    if priority is not None:
        q = q.where(Task.priority == priority)
    if assignee_id is not None:
        q = q.where(Task.assignee_id == assignee_id)
    if search:
        like_term = f"%{search}%"
        q = q.where(or_(Task.title.ilike(like_term), Task.description.ilike(like_term)))
    return q


async def list_tasks(
    session: AsyncSession,
    *,
    status: Optional[TaskStatus] = None,
    priority: Optional[Priority] = None,
    assignee_id: Optional[int] = None,
    search: Optional[str] = None,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
    limit: int = 100,
    offset: int = 0,
) -> List[Task]:
    column = SORTABLE_FIELDS.get(sort_by)
    if column is None:
        raise ServiceError(
            f"Cannot sort by {sort_by!r}; choose one of {', '.join(SORTABLE_FIELDS)}"
        )
    if sort_order not in ("asc", "desc"):
        raise ServiceError("sortOrder must be 'asc' or 'desc'")

    q = _filter_tasks(
        select(Task).options(selectinload(Task.assignee), selectinload(Task.creator)),
        status=status,
        priority=priority,
        assignee_id=assignee_id,
        search=search,
    )
    if sort_order == "asc":
        q = q.order_by(column.asc(), Task.id.asc())
    else:
        q = q.order_by(column.desc(), Task.id.desc())
    q = q.offset(offset).limit(limit)
    result = await session.execute(q)
    return list(result.scalars().all())


async def count_tasks_by_status(
    session: AsyncSession,
    *,
    priority: Optional[Priority] = None,
    assignee_id: Optional[int] = None,
    search: Optional[str] = None,
) -> List[Tuple[TaskStatus, int]]:
    q = _filter_tasks(
        select(Task.status, func.count(Task.id)),
        priority=priority,
        assignee_id=assignee_id,
        search=search,
    ).group_by(Task.status)
    res = await session.execute(q)
    return [(row[0], row[1]) for row in res.all()]


async def update_task(
    session: AsyncSession,
    task_id: int,
    actor: User,
    **patch: Any,
) -> Task:
    """
    Merge ``patch`` into the task.

    A status change is checked against the workflow before anything is
    written, so a rejected change leaves every field as it was.
    """
    task = await get_task(session, task_id, load_relations=False)

    for field in _REQUIRED_FIELDS:
        if field in patch and patch[field] is None:
            raise ServiceError(f"{field} cannot be null")

    new_status = patch.get("status")
    if new_status is not None and new_status != task.status:
        try:
            validate_transition(
                task.status,
                new_status,
                is_assignee=PermissionChecker.is_assignee(actor, task),
                is_manager=PermissionChecker.is_manager(actor),
            )
        except Forbidden as exc:
            logger.warning(
                "Denied user {} ({}) moving task {} from {} to {}: {}",
                actor.id, actor.role.value, task.id,
                task.status.value, new_status.value, exc,
            )
            raise

    if patch.get("assignee_id") is not None and patch["assignee_id"] != task.assignee_id:
        await _ensure_assignee_exists(session, patch["assignee_id"])
    if "due_date" in patch:
        patch["due_date"] = as_utc(patch["due_date"])

    previous_status = task.status
    for k, v in patch.items():
        if hasattr(task, k):
            setattr(task, k, v)
    session.add(task)
    await session.flush()

    if task.status != previous_status:
        logger.info(
            "User {} moved task {} from {} to {}",
            actor.id, task.id, previous_status.value, task.status.value,
        )
    else:
        logger.info("User {} updated task {}", actor.id, task.id)
    return await get_task(session, task.id)


async def get_allowed_transitions(
    session: AsyncSession,
    task_id: int,
    actor: User,
) -> Tuple[Task, List[TaskStatus]]:
    task = await get_task(session, task_id, load_relations=False)
    allowed = allowed_transitions(
        task.status,
        is_assignee=PermissionChecker.is_assignee(actor, task),
        is_manager=PermissionChecker.is_manager(actor),
    )
    return task, allowed


async def delete_task(session: AsyncSession, task_id: int, actor: User) -> None:
    task = await get_task(session, task_id, load_relations=False)
    verify_task_delete(actor, task)
    # time entries go with their task
    await session.execute(delete(TimeEntry).where(TimeEntry.task_id == task.id))
    await session.delete(task)
    await session.flush()
    logger.info("User {} deleted task {}", actor.id, task_id)


def stats_payload(counts: List[Tuple[TaskStatus, int]]) -> Dict[str, Any]:
    by_status = {task_status: 0 for task_status in TaskStatus}
    for task_status, count in counts:
        by_status[task_status] = count
    return {"total": sum(by_status.values()), "by_status": by_status}
