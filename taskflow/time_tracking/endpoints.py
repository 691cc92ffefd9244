from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth.dependencies import get_current_user_db
from taskflow.db.dependencies import get_db_session
from taskflow.tasks.models import User
from taskflow.time_tracking import services
from taskflow.time_tracking.schemas import (
    TaskTimeEntryCreate,
    TaskTimeEntryUpdate,
    TimeEntryStart,
    TimeEntryStop,
    TimeEntryWithTaskOut,
    TimeEntryWithUserOut,
)
from taskflow.utils import ServiceError, translate_service_errors

router = APIRouter()


# -----------------------
# Time entries of the signed-in user
# -----------------------
@router.post(
    "/time-entries",
    response_model=TimeEntryWithTaskOut,
    status_code=status.HTTP_201_CREATED,
)
@translate_service_errors
async def start_time_entry(
    payload: TimeEntryStart,
    current_user: User = Depends(get_current_user_db),
    session: AsyncSession = Depends(get_db_session),
):
    """Start working on a task. Fails if the caller already has a running entry."""
    return await services.start_time_entry(
        session,
        actor=current_user,
        task_id=payload.task_id,
        start_time=payload.start_time,
        description=payload.description,
    )


@router.get("/time-entries", response_model=List[TimeEntryWithTaskOut])
@translate_service_errors
async def list_time_entries(
    task_id: Optional[int] = Query(None, alias="taskId"),
    current_user: User = Depends(get_current_user_db),
    session: AsyncSession = Depends(get_db_session),
):
    return await services.list_time_entries(
        session, user_id=current_user.id, task_id=task_id,
    )


@router.get("/time-entries/active", response_model=Optional[TimeEntryWithTaskOut])
@translate_service_errors
async def get_active_time_entry(
    current_user: User = Depends(get_current_user_db),
    session: AsyncSession = Depends(get_db_session),
):
    """The caller's running entry, or null."""
    return await services.get_active_time_entry(session, current_user.id)


@router.patch("/time-entries/{entry_id}", response_model=TimeEntryWithTaskOut)
@translate_service_errors
async def stop_time_entry(
    entry_id: int,
    payload: TimeEntryStop,
    current_user: User = Depends(get_current_user_db),
    session: AsyncSession = Depends(get_db_session),
):
    """Stop a running entry; only its owner may."""
    return await services.stop_time_entry(
        session,
        actor=current_user,
        entry_id=entry_id,
        end_time=payload.end_time,
    )


# -----------------------
# Time entries of one task
# -----------------------
@router.get("/tasks/{task_id}/time", response_model=List[TimeEntryWithUserOut])
@translate_service_errors
async def list_task_time_entries(
    task_id: int,
    current_user: User = Depends(get_current_user_db),
    session: AsyncSession = Depends(get_db_session),
):
    """Time logged on a task. Manager, creator or assignee only."""
    return await services.list_task_time_entries(
        session, actor=current_user, task_id=task_id,
    )


@router.post(
    "/tasks/{task_id}/time",
    response_model=TimeEntryWithUserOut,
    status_code=status.HTTP_201_CREATED,
)
@translate_service_errors
async def log_task_time_entry(
    task_id: int,
    payload: TaskTimeEntryCreate,
    current_user: User = Depends(get_current_user_db),
    session: AsyncSession = Depends(get_db_session),
):
    """Log time on a task. Assignee only."""
    return await services.log_task_time_entry(
        session,
        actor=current_user,
        task_id=task_id,
        start_time=payload.start_time,
        end_time=payload.end_time,
        description=payload.description,
    )


@router.put("/tasks/{task_id}/time", response_model=TimeEntryWithUserOut)
@translate_service_errors
async def update_task_time_entry(
    task_id: int,
    payload: TaskTimeEntryUpdate,
    current_user: User = Depends(get_current_user_db),
    session: AsyncSession = Depends(get_db_session),
):
    return await services.update_task_time_entry(
        session,
        actor=current_user,
        task_id=task_id,
        entry_id=payload.id,
        start_time=payload.start_time,
        end_time=payload.end_time,
        description=payload.description,
    )


@router.delete("/tasks/{task_id}/time", status_code=status.HTTP_204_NO_CONTENT)
@translate_service_errors
async def delete_task_time_entry(
    task_id: int,
    entry_id: Optional[int] = Query(None, alias="id"),
    current_user: User = Depends(get_current_user_db),
    session: AsyncSession = Depends(get_db_session),
):
    if entry_id is None:
        raise ServiceError("Time entry ID is required")
    await services.delete_task_time_entry(
        session, actor=current_user, task_id=task_id, entry_id=entry_id,
    )
