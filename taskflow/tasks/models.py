from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, Relationship, mapped_column, relationship

from taskflow.db.base import Base
from taskflow.tasks.enums import Priority, TaskStatus, UserRole

if TYPE_CHECKING:
    from taskflow.time_tracking.models import TimeEntry


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole), default=UserRole.DEVELOPER, nullable=False, index=True,
    )

    # relationships
    created_tasks: Relationship[List["Task"]] = relationship(
        "Task", foreign_keys="Task.creator_id", back_populates="creator",
    )
    assigned_tasks: Relationship[List["Task"]] = relationship(
        "Task", foreign_keys="Task.assignee_id", back_populates="assignee",
    )


class Task(Base):
    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[TaskStatus] = mapped_column(
        SQLEnum(TaskStatus), default=TaskStatus.OPEN, index=True, nullable=False,
    )
    priority: Mapped[Priority] = mapped_column(
        SQLEnum(Priority), default=Priority.MEDIUM, index=True, nullable=False,
    )
    assignee_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    creator_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True,
    )
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # relationships
    assignee: Relationship[Optional[User]] = relationship(
        "User", foreign_keys=[assignee_id], back_populates="assigned_tasks",
    )
    creator: Relationship[User] = relationship(
        "User", foreign_keys=[creator_id], back_populates="created_tasks",
    )
    time_entries: Relationship[List["TimeEntry"]] = relationship(
        "TimeEntry", back_populates="task", passive_deletes=True,
    )
