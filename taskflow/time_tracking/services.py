from __future__ import annotations

import math
from datetime import datetime
from typing import List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskflow.tasks.models import Task, User
from taskflow.tasks.permissions import verify_task_assignee, verify_time_entries_view
from taskflow.time_tracking.models import TimeEntry
from taskflow.utils import Forbidden, NotFound, ServiceError, _get_or_404, as_utc, utcnow

ACTIVE_ENTRY_EXISTS = "You already have an active time entry"


def duration_minutes(start_time: datetime, end_time: datetime) -> int:
    """Whole minutes between two instants, halves rounded up."""
    start, end = as_utc(start_time), as_utc(end_time)
    if end < start:
        raise ServiceError("End time cannot be before start time")
    minutes = (end - start).total_seconds() / 60
    return math.floor(minutes + 0.5)


async def _get_task(session: AsyncSession, task_id: int) -> Task:
    task = await session.get(Task, task_id)
    if task is None:
        raise NotFound("Task not found")
    return task


async def _get_entry(session: AsyncSession, entry_id: int) -> TimeEntry:
    entry = await session.get(TimeEntry, entry_id)
    if entry is None:
        raise NotFound("Time entry not found")
    return entry


async def _load_entry(session: AsyncSession, entry_id: int) -> TimeEntry:
    q = (
        select(TimeEntry)
        .options(selectinload(TimeEntry.task), selectinload(TimeEntry.user))
        .where(TimeEntry.id == entry_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(q)
    return result.scalar_one()


async def get_active_time_entry(
    session: AsyncSession,
    user_id: int,
) -> Optional[TimeEntry]:
    q = (
        select(TimeEntry)
        .options(selectinload(TimeEntry.task))
        .where(TimeEntry.user_id == user_id, TimeEntry.end_time.is_(None))
    )
    result = await session.execute(q)
    return result.scalars().first()


async def _add_entry(session: AsyncSession, entry: TimeEntry) -> TimeEntry:
    """
    Insert ``entry``, reporting a second running entry for the same user as
    a service error. The pre-check gives the common case a clean message;
    the unique index catches two requests racing past it.
    """
    if entry.end_time is None:
        if await get_active_time_entry(session, entry.user_id) is not None:
            raise ServiceError(ACTIVE_ENTRY_EXISTS)
    session.add(entry)
    try:
        await session.flush()
    except IntegrityError as exc:
        raise ServiceError(ACTIVE_ENTRY_EXISTS) from exc
    return await _load_entry(session, entry.id)


# ---- Global time entries (the actor's own work log) ----
async def start_time_entry(
    session: AsyncSession,
    *,
    actor: User,
    task_id: int,
    start_time: Optional[datetime] = None,
    description: Optional[str] = None,
) -> TimeEntry:
    """Start work on a task. A user can only have one running entry."""
    task = await _get_task(session, task_id)
    verify_task_assignee(actor, task, "log time")
    entry = await _add_entry(
        session,
        TimeEntry(
            task_id=task.id,
            user_id=actor.id,
            start_time=as_utc(start_time) or utcnow(),
            description=description,
        ),
    )
    logger.info("User {} started time entry {} on task {}", actor.id, entry.id, task.id)
    return entry


async def stop_time_entry(
    session: AsyncSession,
    *,
    actor: User,
    entry_id: int,
    end_time: Optional[datetime] = None,
) -> TimeEntry:
    entry = await _get_entry(session, entry_id)
    if entry.user_id != actor.id:
        raise Forbidden("Unauthorized to update this time entry")
    if entry.end_time is not None:
        raise ServiceError("Time entry is already stopped")

    end = as_utc(end_time) or utcnow()
    entry.duration = duration_minutes(entry.start_time, end)
    entry.end_time = end
    await session.flush()
    logger.info(
        "User {} stopped time entry {} after {} min", actor.id, entry.id, entry.duration,
    )
    return await _load_entry(session, entry.id)


async def list_time_entries(
    session: AsyncSession,
    *,
    user_id: int,
    task_id: Optional[int] = None,
) -> List[TimeEntry]:
    q = (
        select(TimeEntry)
        .options(selectinload(TimeEntry.task))
        .where(TimeEntry.user_id == user_id)
    )
    if task_id is not None:
        q = q.where(TimeEntry.task_id == task_id)
    q = q.order_by(TimeEntry.start_time.desc(), TimeEntry.id.desc())
    result = await session.execute(q)
    return list(result.scalars().all())


# ---- Task-scoped time entries ----
async def list_task_time_entries(
    session: AsyncSession,
    *,
    actor: User,
    task_id: int,
) -> List[TimeEntry]:
    task = await _get_task(session, task_id)
    verify_time_entries_view(actor, task)
    q = (
        select(TimeEntry)
        .options(selectinload(TimeEntry.user))
        .where(TimeEntry.task_id == task.id)
        .order_by(TimeEntry.start_time.desc(), TimeEntry.id.desc())
    )
    result = await session.execute(q)
    return list(result.scalars().all())


async def log_task_time_entry(
    session: AsyncSession,
    *,
    actor: User,
    task_id: int,
    start_time: datetime,
    end_time: Optional[datetime] = None,
    description: Optional[str] = None,
) -> TimeEntry:
    """
    Record time against a task. Without ``end_time`` this starts a running
    entry; with it, the entry is logged already finished.
    """
    task = await _get_task(session, task_id)
    verify_task_assignee(actor, task, "log time")
    entry = TimeEntry(
        task_id=task.id,
        user_id=actor.id,
        start_time=as_utc(start_time),
        end_time=as_utc(end_time),
        description=description,
    )
    if end_time is not None:
        entry.duration = duration_minutes(start_time, end_time)
    entry = await _add_entry(session, entry)
    logger.info("User {} logged time entry {} on task {}", actor.id, entry.id, task.id)
    return entry


async def _get_task_entry(
    session: AsyncSession,
    *,
    actor: User,
    task_id: int,
    entry_id: int,
    action: str,
) -> TimeEntry:
    entry = await _get_entry(session, entry_id)
    if entry.task_id != task_id:
        raise NotFound("Time entry not found")
    task = await _get_or_404(session, Task, entry.task_id)
    verify_task_assignee(actor, task, action)
    return entry


async def update_task_time_entry(
    session: AsyncSession,
    *,
    actor: User,
    task_id: int,
    entry_id: int,
    start_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
    description: Optional[str] = None,
) -> TimeEntry:
    entry = await _get_task_entry(
        session, actor=actor, task_id=task_id, entry_id=entry_id,
        action="update time entries",
    )
    new_start = as_utc(start_time) or entry.start_time
    new_end = as_utc(end_time) or entry.end_time
    if new_end is not None:
        entry.duration = duration_minutes(new_start, new_end)
    entry.start_time = new_start
    entry.end_time = new_end
    if description is not None:
        entry.description = description
    await session.flush()
    logger.info("User {} updated time entry {}", actor.id, entry.id)
    return await _load_entry(session, entry.id)


async def delete_task_time_entry(
    session: AsyncSession,
    *,
    actor: User,
    task_id: int,
    entry_id: int,
) -> None:
    entry = await _get_task_entry(
        session, actor=actor, task_id=task_id, entry_id=entry_id,
        action="delete time entries",
    )
    await session.delete(entry)
    await session.flush()
    logger.info("User {} deleted time entry {}", actor.id, entry_id)
