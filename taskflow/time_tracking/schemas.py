from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from taskflow.tasks.schemas import CamelModel, UserSummary


class TimeEntryStart(CamelModel):
    task_id: int
    start_time: Optional[datetime] = None
    description: Optional[str] = None


class TimeEntryStop(CamelModel):
    end_time: Optional[datetime] = None


class TaskTimeEntryCreate(CamelModel):
    start_time: datetime
    end_time: Optional[datetime] = None
    description: Optional[str] = None


class TaskTimeEntryUpdate(CamelModel):
    id: int
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    description: Optional[str] = None


class TaskTitle(BaseModel):
    title: str

    class Config:
        from_attributes = True


class TimeEntryOut(CamelModel):
    id: int
    task_id: int
    user_id: int
    start_time: datetime
    end_time: Optional[datetime]
    description: Optional[str]
    duration: Optional[int]
    is_active: bool


class TimeEntryWithTaskOut(TimeEntryOut):
    task: TaskTitle


class TimeEntryWithUserOut(TimeEntryOut):
    user: UserSummary
