"""
Task Repository
===============

Persistence queries for tasks.

Soft-deleted rows are filtered explicitly: every query that serves a user
adds ``is_deleted = false`` itself. Only ``get_by_id_including_deleted``,
``get_owned_including_deleted`` and ``delete_soft_deleted_before`` can see
flagged rows.
"""

from datetime import datetime
from typing import Optional
import uuid

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from todolist.models.task import Task, TaskStatus

# API sort field → mapped column
SORT_COLUMNS = {
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
    "title": Task.title,
    "status": Task.status,
}


class TaskRepository:
    """Async queries over the ``tasks`` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, task: Task) -> Task:
        """Stage a new task, flush it and load its owner for serialization."""
        self.db.add(task)
        await self.db.flush()
        await self.db.refresh(task, ["user"])
        return task

    async def get_visible_for_owner(
        self,
        task_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Optional[Task]:
        """Get a non-deleted task by ID ensuring it belongs to user."""
        stmt = select(Task).where(
            Task.task_id == task_id,
            Task.user_id == user_id,
            Task.is_deleted.is_(False),
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_owned_including_deleted(
        self,
        task_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Optional[Task]:
        """Get a task owned by user whether or not it is soft-deleted."""
        stmt = select(Task).where(
            Task.task_id == task_id,
            Task.user_id == user_id,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id_including_deleted(
        self,
        task_id: uuid.UUID,
    ) -> Optional[Task]:
        """Owner-bypassing lookup that also sees soft-deleted tasks."""
        stmt = select(Task).where(Task.task_id == task_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def page_visible_for_owner(
        self,
        user_id: uuid.UUID,
        status: Optional[TaskStatus],
        offset: int,
        limit: int,
        sort_field: str = "createdAt",
        sort_direction: str = "desc",
    ) -> tuple[list[Task], int]:
        """
        Return one page of the user's visible tasks and the total count.

        Args:
            user_id: Owner
            status: Optional status filter
            offset: Rows to skip
            limit: Page size
            sort_field: Key of ``SORT_COLUMNS``
            sort_direction: "asc" or "desc"

        Returns:
            Tuple of (tasks on the page, total matching tasks)
        """
        conditions = [
            Task.user_id == user_id,
            Task.is_deleted.is_(False),
        ]
        if status is not None:
            conditions.append(Task.status == status)

        count_stmt = select(func.count()).select_from(Task).where(*conditions)
        total = (await self.db.execute(count_stmt)).scalar_one()

        column = SORT_COLUMNS[sort_field]
        order = column.desc() if sort_direction == "desc" else column.asc()

        stmt = (
            select(Task)
            .where(*conditions)
            .order_by(order, Task.task_id)
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total

    async def delete_soft_deleted_before(self, cutoff: datetime) -> int:
        """
        Permanently delete tasks soft-deleted before *cutoff*.

        Returns:
            Number of rows removed
        """
        stmt = (
            delete(Task)
            .where(
                Task.is_deleted.is_(True),
                Task.deleted_at < cutoff,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount or 0
