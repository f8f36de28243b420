"""
Task Models
===========

SQLAlchemy model for to-do tasks.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional
import uuid

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    String,
    Uuid,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from todolist.db.base import Base, TimestampMixin
from todolist.utils.helpers import as_utc, utc_now

if TYPE_CHECKING:
    from todolist.models.user import User


# =============================================================================
# Enums
# =============================================================================

class TaskStatus(str, Enum):
    """Task progress status. Any status may follow any other."""
    TO_DO = "TO_DO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


# =============================================================================
# Models
# =============================================================================

class Task(Base, TimestampMixin):
    """
    Task model.

    Owned by exactly one user. Deleting through the API only flags the row
    (``is_deleted``/``deleted_at``); the purge job removes it for good once
    the retention window has passed.
    """

    __tablename__ = "tasks"

    # Primary Key
    task_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # Foreign Keys
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
    )

    # Task details
    title: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    status: Mapped[TaskStatus] = mapped_column(
        SQLEnum(TaskStatus, name="taskstatus", create_constraint=True),
        nullable=False,
        default=TaskStatus.TO_DO,
    )

    # Soft delete
    is_deleted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="tasks",
        lazy="joined",
        innerjoin=True,
    )

    # Indexes
    __table_args__ = (
        Index("idx_task_user_deleted_created", "user_id", "is_deleted", "created_at"),
        Index("idx_task_user_status", "user_id", "status"),
        Index("idx_task_deleted_at", "is_deleted", "deleted_at"),
    )

    def __repr__(self) -> str:
        return f"<Task(task_id={self.task_id}, title={self.title[:30]})>"

    def mark_deleted(self) -> None:
        """Flag the task as soft-deleted."""
        self.is_deleted = True
        self.deleted_at = utc_now()

    def restore(self) -> None:
        """Clear the soft-delete flag."""
        self.is_deleted = False
        self.deleted_at = None

    def to_api_dict(self) -> dict:
        """
        Serialize to the API response format.

        Maps internal field names to the API contract:
            task_id → id
            user.user_id → userId
            user.email → userEmail
        """
        return {
            "id": str(self.task_id),
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "createdAt": as_utc(self.created_at).isoformat() if self.created_at else None,
            "updatedAt": as_utc(self.updated_at).isoformat() if self.updated_at else None,
            "userId": str(self.user_id),
            "userEmail": self.user.email,
        }
