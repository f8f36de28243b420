"""
Purge Scheduler Tests
=====================

Tests for the daily purge timer including:
- Next-run computation across day and DST boundaries
- Replica lock handling
- Start/stop lifecycle
"""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch
from zoneinfo import ZoneInfo

import pytest

from todolist.services.purge_scheduler import PurgeScheduler, compute_next_run

UTC = ZoneInfo("UTC")


class TestComputeNextRun:

    def test_later_today(self):
        now = datetime(2026, 3, 10, 1, 30, tzinfo=timezone.utc)

        assert compute_next_run(now, 2, 0, UTC) == datetime(2026, 3, 10, 2, 0, tzinfo=UTC)

    def test_already_passed_today(self):
        now = datetime(2026, 3, 10, 2, 30, tzinfo=timezone.utc)

        assert compute_next_run(now, 2, 0, UTC) == datetime(2026, 3, 11, 2, 0, tzinfo=UTC)

    def test_exactly_at_slot_moves_to_tomorrow(self):
        now = datetime(2026, 3, 10, 2, 0, tzinfo=timezone.utc)

        assert compute_next_run(now, 2, 0, UTC) == datetime(2026, 3, 11, 2, 0, tzinfo=UTC)

    def test_end_of_month(self):
        now = datetime(2026, 1, 31, 23, 0, tzinfo=timezone.utc)

        assert compute_next_run(now, 2, 0, UTC) == datetime(2026, 2, 1, 2, 0, tzinfo=UTC)

    def test_local_timezone(self):
        berlin = ZoneInfo("Europe/Berlin")
        # 00:30 UTC is 01:30 in Berlin (winter time)
        now = datetime(2026, 1, 15, 0, 30, tzinfo=timezone.utc)

        next_run = compute_next_run(now, 2, 0, berlin)

        assert next_run == datetime(2026, 1, 15, 2, 0, tzinfo=berlin)
        assert next_run.astimezone(timezone.utc).hour == 1

    def test_result_is_strictly_after_now(self):
        now = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)

        for hour in range(24):
            assert compute_next_run(now, hour, 0, UTC) > now
            assert compute_next_run(now, hour, 0, UTC) - now <= timedelta(days=1)


class TestRunOnce:

    @pytest.mark.asyncio
    async def test_runs_purge_and_commits(self, session_maker):
        scheduler = PurgeScheduler(session_factory=session_maker)

        summary = await scheduler.run_once(slot="2026-03-10T02:00:00+00:00")

        assert summary["purged"] == 0

    @pytest.mark.asyncio
    async def test_skips_when_another_replica_holds_lock(self, session_maker):
        scheduler = PurgeScheduler(session_factory=session_maker)

        with patch(
            "todolist.services.purge_scheduler.acquire_job_lock",
            AsyncMock(return_value=False),
        ), patch(
            "todolist.services.purge_scheduler.run_task_purge",
            AsyncMock(),
        ) as mock_purge:
            result = await scheduler.run_once(slot="2026-03-10T02:00:00+00:00")

        assert result is None
        mock_purge.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_purge_propagates(self, session_maker):
        scheduler = PurgeScheduler(session_factory=session_maker)

        with patch(
            "todolist.services.purge_scheduler.run_task_purge",
            AsyncMock(side_effect=RuntimeError("db down")),
        ):
            with pytest.raises(RuntimeError):
                await scheduler.run_once()


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_start_and_stop(self, session_maker):
        scheduler = PurgeScheduler(hour=2, minute=0, session_factory=session_maker)

        await scheduler.start()
        assert scheduler.running

        await scheduler.stop()
        assert not scheduler.running

    @pytest.mark.asyncio
    async def test_runs_when_slot_arrives(self, session_maker):
        # Clock sits just before the slot so the loop fires almost immediately
        slot = datetime(2026, 3, 10, 2, 0, tzinfo=timezone.utc)
        ticks = iter([slot - timedelta(milliseconds=10)] * 2)

        def clock():
            return next(ticks, slot + timedelta(hours=1))

        scheduler = PurgeScheduler(
            hour=2,
            minute=0,
            timezone_name="UTC",
            session_factory=session_maker,
            clock=clock,
        )

        with patch.object(scheduler, "run_once", AsyncMock(return_value={})) as mock_run:
            await scheduler.start()
            for _ in range(50):
                if mock_run.await_count:
                    break
                await asyncio.sleep(0.01)
            await scheduler.stop()

        mock_run.assert_awaited_once()
        assert mock_run.await_args.kwargs["slot"] == slot.isoformat()
