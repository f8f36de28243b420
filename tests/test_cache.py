"""
Cache Service Tests
===================

Tests for the fail-open cache helpers and the distributed job lock.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest

from todolist.services.cache import (
    CacheKeys,
    CacheManager,
    CacheNotConfiguredError,
    acquire_job_lock,
    get_redis,
)

REDIS_URL = "redis://cache:6379/0"


class TestDisabledCache:
    """REDIS_URL is empty in the test environment."""

    @pytest.mark.asyncio
    async def test_get_is_a_miss(self):
        assert await CacheManager.get("cache:user:auth:a@x.com") is None

    @pytest.mark.asyncio
    async def test_set_is_skipped(self):
        assert await CacheManager.set("cache:user:auth:a@x.com", {"a": 1}) is False

    @pytest.mark.asyncio
    async def test_lock_is_always_granted(self):
        assert await acquire_job_lock("purge_deleted_tasks", "slot") is True

    @pytest.mark.asyncio
    async def test_client_is_unavailable(self):
        with pytest.raises(CacheNotConfiguredError):
            await get_redis()


class TestCacheManager:

    @pytest.mark.asyncio
    async def test_get_decodes_json(self):
        mock_client = AsyncMock()
        mock_client.get.return_value = json.dumps({"email": "a@x.com"})

        with patch("todolist.services.cache.settings.REDIS_URL", REDIS_URL), \
                patch("todolist.services.cache.get_redis", return_value=mock_client):
            assert await CacheManager.get("k") == {"email": "a@x.com"}

    @pytest.mark.asyncio
    async def test_set_uses_ttl(self):
        mock_client = AsyncMock()

        with patch("todolist.services.cache.settings.REDIS_URL", REDIS_URL), \
                patch("todolist.services.cache.get_redis", return_value=mock_client):
            assert await CacheManager.set("k", {"a": 1}, ttl=60) is True

        mock_client.setex.assert_awaited_once_with("k", 60, json.dumps({"a": 1}))

    @pytest.mark.asyncio
    async def test_errors_are_reported_as_miss(self):
        mock_client = AsyncMock()
        mock_client.get.side_effect = ConnectionError("redis down")

        with patch("todolist.services.cache.settings.REDIS_URL", REDIS_URL), \
                patch("todolist.services.cache.get_redis", return_value=mock_client):
            assert await CacheManager.get("k") is None


class TestJobLock:

    @pytest.mark.asyncio
    async def test_first_caller_wins(self):
        mock_client = AsyncMock()
        mock_client.set.side_effect = [True, None]

        with patch("todolist.services.cache.settings.REDIS_URL", REDIS_URL), \
                patch("todolist.services.cache.get_redis", return_value=mock_client):
            first = await acquire_job_lock("purge_deleted_tasks", "2026-03-10T02:00:00+00:00")
            second = await acquire_job_lock("purge_deleted_tasks", "2026-03-10T02:00:00+00:00")

        assert first is True
        assert second is False
        mock_client.set.assert_awaited_with(
            CacheKeys.job_lock("purge_deleted_tasks", "2026-03-10T02:00:00+00:00"),
            "1",
            ex=3600,
            nx=True,
        )

    @pytest.mark.asyncio
    async def test_unreachable_redis_grants_lock(self):
        mock_client = AsyncMock()
        mock_client.set.side_effect = ConnectionError("redis down")

        with patch("todolist.services.cache.settings.REDIS_URL", REDIS_URL), \
                patch("todolist.services.cache.get_redis", return_value=mock_client):
            assert await acquire_job_lock("purge_deleted_tasks", "slot") is True
