"""
Scheduled Jobs
==============

Background tasks for maintenance operations:
- Purge of soft-deleted tasks past the retention window
"""

import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from todolist.config import settings
from todolist.repositories.tasks import TaskRepository
from todolist.utils.helpers import utc_now

logger = logging.getLogger(__name__)

PURGE_JOB_NAME = "purge_deleted_tasks"


class ScheduledJobService:
    """Service for scheduled background jobs."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tasks = TaskRepository(db)

    async def purge_deleted_tasks(self, retention_days: Optional[int] = None) -> dict:
        """
        Permanently delete tasks soft-deleted longer than the retention window.

        Run daily at 02:00 (see ``PurgeScheduler``).

        Args:
            retention_days: Override for ``TASK_RETENTION_DAYS``

        Returns:
            Summary of the run

        Raises:
            ValueError: If retention_days is less than 1
        """
        if retention_days is None:
            retention_days = settings.TASK_RETENTION_DAYS
        if retention_days < 1:
            raise ValueError("retention_days must be at least 1")

        now = utc_now()
        cutoff = now - timedelta(days=retention_days)

        logger.info("Starting purge of soft-deleted tasks")
        logger.debug("Purging tasks deleted before %s", cutoff.isoformat())

        purged = await self.tasks.delete_soft_deleted_before(cutoff)
        await self.db.flush()

        logger.info(
            "Purged %d soft-deleted tasks older than %d days",
            purged,
            retention_days,
        )

        return {
            "job": PURGE_JOB_NAME,
            "purged": purged,
            "cutoff": cutoff.isoformat(),
            "retention_days": retention_days,
            "run_at": now.isoformat(),
        }


# =============================================================================
# Job Runner Functions
# =============================================================================

async def run_task_purge(db: AsyncSession) -> dict:
    """Run the soft-deleted task purge."""
    service = ScheduledJobService(db)
    return await service.purge_deleted_tasks()
