"""
Task Service
============

Business logic for the task lifecycle: create, read, update, soft delete and
restore, always scoped to the task's owner.
"""

import logging
from typing import Optional
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from todolist.core.errors import TaskNotFoundError
from todolist.models.task import Task, TaskStatus
from todolist.models.user import User
from todolist.repositories.tasks import TaskRepository
from todolist.utils.helpers import is_blank
from todolist.utils.validators import parse_sort

logger = logging.getLogger(__name__)


class TaskService:
    """Service for task operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tasks = TaskRepository(db)

    async def _get_owned_task(self, user: User, task_id: uuid.UUID) -> Task:
        """
        Get a visible task belonging to *user*.

        Missing, soft-deleted and foreign tasks all raise the same error.
        """
        task = await self.tasks.get_visible_for_owner(task_id, user.user_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    # =========================================================================
    # Core CRUD
    # =========================================================================

    async def create_task(
        self,
        user: User,
        title: str,
        description: str,
    ) -> Task:
        """Create a new task for *user*. New tasks always start as TO_DO."""
        task = Task(
            user_id=user.user_id,
            title=title,
            description=description,
            status=TaskStatus.TO_DO,
        )
        await self.tasks.add(task)

        logger.info("Created task %s for user %s", task.task_id, user.user_id)
        return task

    async def get_task(self, user: User, task_id: uuid.UUID) -> Task:
        """Get one of the user's visible tasks."""
        return await self._get_owned_task(user, task_id)

    async def list_tasks(
        self,
        user: User,
        status: Optional[TaskStatus] = None,
        page: int = 1,
        size: int = 10,
        sort: Optional[str] = None,
    ) -> dict:
        """
        List the user's visible tasks.

        Args:
            user: Owner
            status: Optional status filter
            page: 1-based page number
            size: Page size
            sort: ``field[,asc|desc]``; defaults to newest first

        Returns:
            Dict with ``items`` and ``pagination`` metadata
        """
        sort_field, sort_direction = parse_sort(sort)

        items, total = await self.tasks.page_visible_for_owner(
            user.user_id,
            status,
            offset=(page - 1) * size,
            limit=size,
            sort_field=sort_field,
            sort_direction=sort_direction,
        )

        total_pages = (total + size - 1) // size if total > 0 else 1

        return {
            "items": items,
            "pagination": {
                "current_page": page,
                "total_pages": total_pages,
                "total_items": total,
                "per_page": size,
                "has_next": page < total_pages,
                "has_previous": page > 1,
            },
        }

    async def update_task(
        self,
        user: User,
        task_id: uuid.UUID,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[TaskStatus] = None,
    ) -> Task:
        """
        Update an existing task.

        Blank title/description and a null status leave the stored value
        unchanged.
        """
        task = await self._get_owned_task(user, task_id)

        if not is_blank(title):
            task.title = title
        if not is_blank(description):
            task.description = description
        if status is not None:
            task.status = status

        await self.db.flush()
        return task

    async def delete_task(self, user: User, task_id: uuid.UUID) -> None:
        """Soft delete a task. The row stays until the purge job removes it."""
        task = await self._get_owned_task(user, task_id)
        task.mark_deleted()
        await self.db.flush()

        logger.info("Soft deleted task %s", task.task_id)

    async def restore_task(self, user: User, task_id: uuid.UUID) -> Task:
        """
        Undo a soft delete.

        Restoring a task that is not deleted returns it unchanged.
        """
        task = await self.tasks.get_owned_including_deleted(task_id, user.user_id)
        if task is None:
            raise TaskNotFoundError(task_id)

        if task.is_deleted:
            task.restore()
            await self.db.flush()
            logger.info("Restored task %s", task.task_id)

        return task
