from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from taskflow.tasks.enums import Priority, TaskStatus


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class UserSummary(CamelModel):
    id: int
    name: str
    email: str


class TaskCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: str = Field(..., min_length=1)
    priority: Priority
    assignee_id: int
    due_date: Optional[datetime] = None


class TaskUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = Field(None, min_length=1)
    priority: Optional[Priority] = None
    status: Optional[TaskStatus] = None
    assignee_id: Optional[int] = None
    due_date: Optional[datetime] = None


class TaskOut(CamelModel):
    id: int
    title: str
    description: str
    status: TaskStatus
    priority: Priority
    assignee_id: Optional[int]
    creator_id: int
    due_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    assignee: Optional[UserSummary] = None
    creator: Optional[UserSummary] = None


class TaskTransitionsOut(CamelModel):
    task_id: int
    status: TaskStatus
    allowed: List[TaskStatus]


class TaskStatsOut(CamelModel):
    total: int
    by_status: Dict[TaskStatus, int]
