from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text, text
from sqlalchemy.orm import Mapped, Relationship, mapped_column, relationship

from taskflow.db.base import Base

if TYPE_CHECKING:
    from taskflow.tasks.models import Task, User

ACTIVE_ENTRY_INDEX = "uq_time_entries_active_user"


class TimeEntry(Base):
    __tablename__ = "time_entries"
    __table_args__ = (
        # at most one running entry per user
        Index(
            ACTIVE_ENTRY_INDEX,
            "user_id",
            unique=True,
            postgresql_where=text("end_time IS NULL"),
            sqlite_where=text("end_time IS NULL"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    task_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True,
    )
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    description: Mapped[Optional[str]] = mapped_column(Text)
    duration: Mapped[Optional[int]] = mapped_column(Integer)  # minutes

    # relationships
    task: Relationship["Task"] = relationship("Task", back_populates="time_entries")
    user: Relationship["User"] = relationship("User")

    @property
    def is_active(self) -> bool:
        return self.end_time is None
