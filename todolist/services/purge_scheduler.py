"""
Purge Scheduler
===============

Background asyncio worker that runs the soft-deleted task purge once a day
at a fixed wall-clock time (``TASK_PURGE_HOUR``:``TASK_PURGE_MINUTE`` in
``TASK_PURGE_TIMEZONE``, 02:00 UTC by default).

Lifecycle:
    1. ``start()`` is called during the FastAPI lifespan startup.
    2. The worker sleeps until the next slot, runs the purge in its own
       session and transaction, then sleeps again.
    3. ``stop()`` is called during shutdown. It wakes the sleeping loop and
       waits for it to exit.

Runs never overlap inside one process because the loop awaits each run.
Across replicas a Redis lock keyed by the slot lets only one of them purge.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from todolist.config import settings
from todolist.db.session import get_session_factory
from todolist.services.cache import acquire_job_lock
from todolist.services.scheduled_jobs import PURGE_JOB_NAME, run_task_purge
from todolist.utils.helpers import utc_now

logger = logging.getLogger(__name__)

STOP_TIMEOUT_SECONDS = 10


def compute_next_run(
    now: datetime,
    hour: int,
    minute: int,
    tz: ZoneInfo,
) -> datetime:
    """
    Next occurrence of ``hour:minute`` in *tz* strictly after *now*.

    Args:
        now: Timezone-aware current time
        hour: Hour of day (0-23)
        minute: Minute (0-59)
        tz: Zone the wall-clock time is expressed in

    Returns:
        Timezone-aware datetime in *tz*
    """
    local_now = now.astimezone(tz)
    candidate = datetime(
        local_now.year,
        local_now.month,
        local_now.day,
        hour,
        minute,
        tzinfo=tz,
    )
    if candidate <= local_now:
        tomorrow = local_now.date() + timedelta(days=1)
        candidate = datetime(
            tomorrow.year,
            tomorrow.month,
            tomorrow.day,
            hour,
            minute,
            tzinfo=tz,
        )
    return candidate


class PurgeScheduler:
    """Daily timer for the soft-deleted task purge."""

    def __init__(
        self,
        hour: Optional[int] = None,
        minute: Optional[int] = None,
        timezone_name: Optional[str] = None,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.hour = settings.TASK_PURGE_HOUR if hour is None else hour
        self.minute = settings.TASK_PURGE_MINUTE if minute is None else minute
        self.tz = ZoneInfo(timezone_name or settings.TASK_PURGE_TIMEZONE)
        self._session_factory = session_factory
        self._clock = clock
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # -- lifecycle ---------------------------------------------------------

    async def start(self) -> None:
        """Start the scheduling loop."""
        if self.running:
            return

        self._stop_event.clear()
        self._task = asyncio.create_task(self._schedule_loop())
        logger.info(
            "PurgeScheduler started (daily at %02d:%02d %s)",
            self.hour,
            self.minute,
            self.tz.key,
        )

    async def stop(self) -> None:
        """Signal the loop to stop and wait for it to finish."""
        self._stop_event.set()
        if self._task is not None:
            try:
                await asyncio.wait_for(self._task, timeout=STOP_TIMEOUT_SECONDS)
            except asyncio.TimeoutError:
                logger.warning("PurgeScheduler did not stop in time; cancelling")
                self._task.cancel()
            self._task = None
        logger.info("PurgeScheduler stopped")

    # -- main loop ---------------------------------------------------------

    async def _schedule_loop(self) -> None:
        """Sleep until each slot, then run the purge."""
        while not self._stop_event.is_set():
            next_run = compute_next_run(self._clock(), self.hour, self.minute, self.tz)
            delay = max((next_run - self._clock()).total_seconds(), 0)
            logger.debug("Next task purge at %s", next_run.isoformat())

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
                break
            except asyncio.TimeoutError:
                pass

            try:
                await self.run_once(slot=next_run.isoformat())
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Task purge failed; retrying at the next slot")

    async def run_once(self, slot: Optional[str] = None) -> Optional[dict]:
        """
        Run one purge in its own transaction.

        Args:
            slot: Identifier of the scheduled run used for the replica lock

        Returns:
            The job summary, or None if another replica holds the lock
        """
        slot = slot or self._clock().isoformat()
        if not await acquire_job_lock(PURGE_JOB_NAME, slot):
            logger.info("Skipping task purge for %s; another instance holds the lock", slot)
            return None

        session_factory = self._session_factory or get_session_factory()
        async with session_factory() as session:
            try:
                summary = await run_task_purge(session)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        return summary
