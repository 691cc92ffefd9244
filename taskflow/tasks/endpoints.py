from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth.dependencies import get_current_user_db
from taskflow.db.dependencies import get_db_session
from taskflow.tasks import services
from taskflow.tasks.enums import Priority, TaskStatus
from taskflow.tasks.models import User
from taskflow.tasks.schemas import (
    TaskCreate,
    TaskOut,
    TaskStatsOut,
    TaskTransitionsOut,
    TaskUpdate,
)
from taskflow.utils import translate_service_errors

router = APIRouter()


# -----------------------
# Task endpoints
# -----------------------
@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
@translate_service_errors
async def create_task(
    payload: TaskCreate,
    current_user: User = Depends(get_current_user_db),
    session: AsyncSession = Depends(get_db_session),
):
    """Create task. Any signed-in user; the task starts OPEN."""
    return await services.create_task(
        session,
        title=payload.title,
        description=payload.description,
        priority=payload.priority,
        assignee_id=payload.assignee_id,
        creator_id=current_user.id,
        due_date=payload.due_date,
    )


@router.get("", response_model=List[TaskOut])
@translate_service_errors
async def list_tasks(
    task_status: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[Priority] = None,
    assignee: Optional[int] = None,
    search: Optional[str] = None,
    mine: bool = False,
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user_db),
    session: AsyncSession = Depends(get_db_session),
):
    """List tasks. ``mine=true`` keeps only tasks assigned to the caller."""
    return await services.list_tasks(
        session,
        status=task_status,
        priority=priority,
        assignee_id=current_user.id if mine else assignee,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )


@router.get("/stats", response_model=TaskStatsOut)
@translate_service_errors
async def task_stats(
    priority: Optional[Priority] = None,
    assignee: Optional[int] = None,
    search: Optional[str] = None,
    mine: bool = False,
    current_user: User = Depends(get_current_user_db),
    session: AsyncSession = Depends(get_db_session),
):
    """Task counts per status, for the dashboard."""
    counts = await services.count_tasks_by_status(
        session,
        priority=priority,
        assignee_id=current_user.id if mine else assignee,
        search=search,
    )
    return services.stats_payload(counts)


@router.get("/{task_id}", response_model=TaskOut)
@translate_service_errors
async def get_task(
    task_id: int,
    current_user: User = Depends(get_current_user_db),
    session: AsyncSession = Depends(get_db_session),
):
    return await services.get_task(session, task_id)


@router.api_route("/{task_id}", methods=["PUT", "PATCH"], response_model=TaskOut)
@translate_service_errors
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    current_user: User = Depends(get_current_user_db),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Update task fields. A status change must follow the workflow and be
    requested by someone allowed to make it; otherwise nothing is saved.
    """
    data = payload.model_dump(exclude_unset=True)
    return await services.update_task(session, task_id, current_user, **data)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
@translate_service_errors
async def delete_task(
    task_id: int,
    current_user: User = Depends(get_current_user_db),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete task. Manager, creator or assignee only."""
    await services.delete_task(session, task_id, current_user)


@router.get("/{task_id}/transitions", response_model=TaskTransitionsOut)
@translate_service_errors
async def get_task_transitions(
    task_id: int,
    current_user: User = Depends(get_current_user_db),
    session: AsyncSession = Depends(get_db_session),
):
    """Statuses the caller may move this task to."""
    task, allowed = await services.get_allowed_transitions(session, task_id, current_user)
    return TaskTransitionsOut(task_id=task.id, status=task.status, allowed=allowed)
