"""Unit tests for salon_booking/utils/ttl_store.py."""

import asyncio
import json
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from salon_booking.core.enums import EvictionStrategy
from salon_booking.utils.ttl_store import (
    InMemoryKeyValueBackend,
    RedisKeyValueBackend,
    create_backend,
)
from tests.support import FakeClock


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 11, 2, 8, 0, tzinfo=timezone.utc))


class TestInMemoryBackend:
    @pytest.mark.asyncio
    async def test_save_and_get(self, clock):
        backend = InMemoryKeyValueBackend(clock=clock)
        await backend.save("k", {"a": 1}, ttl_seconds=60)
        assert await backend.get("k") == {"a": 1}
        assert await backend.get("missing") is None

    @pytest.mark.asyncio
    async def test_values_are_copied(self, clock):
        backend = InMemoryKeyValueBackend(clock=clock)
        value = {"items": [1]}
        await backend.save("k", value, ttl_seconds=60)
        value["items"].append(2)
        fetched = await backend.get("k")
        fetched["items"].append(3)
        assert await backend.get("k") == {"items": [1]}

    @pytest.mark.asyncio
    async def test_expired_entry_is_evicted_on_read(self, clock):
        backend = InMemoryKeyValueBackend(clock=clock)
        await backend.save("k", {"a": 1}, ttl_seconds=60)
        clock.advance(seconds=61)
        assert await backend.get("k") is None
        assert len(backend) == 0

    @pytest.mark.asyncio
    async def test_entry_is_live_at_its_expiry_instant(self, clock):
        backend = InMemoryKeyValueBackend(clock=clock)
        await backend.save("k", {"a": 1}, ttl_seconds=60)
        clock.advance(seconds=60)
        assert await backend.get("k") == {"a": 1}
        assert await backend.cleanup_expired() == 0
        clock.advance(microseconds=1)
        assert await backend.get("k") is None

    @pytest.mark.asyncio
    async def test_save_restarts_ttl(self, clock):
        backend = InMemoryKeyValueBackend(clock=clock)
        await backend.save("k", {"v": 1}, ttl_seconds=60)
        clock.advance(seconds=50)
        await backend.save("k", {"v": 2}, ttl_seconds=60)
        clock.advance(seconds=50)
        assert await backend.get("k") == {"v": 2}

    @pytest.mark.asyncio
    async def test_delete(self, clock):
        backend = InMemoryKeyValueBackend(clock=clock)
        await backend.save("k", {}, ttl_seconds=60)
        assert await backend.delete("k") is True
        assert await backend.delete("k") is False

    @pytest.mark.asyncio
    async def test_cleanup_expired_counts_removed(self, clock):
        backend = InMemoryKeyValueBackend(clock=clock)
        await backend.save("short", {}, ttl_seconds=10)
        await backend.save("long", {}, ttl_seconds=100)
        clock.advance(seconds=30)
        assert await backend.cleanup_expired() == 1
        assert len(backend) == 1
        assert not backend.is_distributed

    @pytest.mark.asyncio
    async def test_lazy_strategy_starts_no_sweeper(self, clock):
        backend = InMemoryKeyValueBackend(eviction=EvictionStrategy.LAZY, clock=clock)
        await backend.start()
        assert backend._sweeper is None
        await backend.stop()

    @pytest.mark.asyncio
    async def test_sweep_strategy_removes_unread_entries(self, clock):
        backend = InMemoryKeyValueBackend(
            eviction=EvictionStrategy.SWEEP, sweep_interval=0.01, clock=clock
        )
        await backend.save("k", {}, ttl_seconds=10)
        await backend.start()
        try:
            clock.advance(seconds=11)
            for _ in range(50):
                if len(backend) == 0:
                    break
                await asyncio.sleep(0.01)
            assert len(backend) == 0
        finally:
            await backend.stop()
        assert backend._sweeper is None


class TestRedisBackend:
    @pytest.mark.asyncio
    async def test_save_uses_setex_with_namespace(self):
        client = MagicMock()
        backend = RedisKeyValueBackend(client, namespace="test")
        await backend.save("draft:1", {"a": 1}, ttl_seconds=90)
        client.setex.assert_called_once_with("test:draft:1", 90, json.dumps({"a": 1}))

    @pytest.mark.asyncio
    async def test_get_decodes_json(self):
        client = MagicMock()
        client.get.return_value = '{"a": 1}'
        backend = RedisKeyValueBackend(client)
        assert await backend.get("k") == {"a": 1}
        client.get.assert_called_once_with("salon_booking:k")

    @pytest.mark.asyncio
    async def test_get_missing(self):
        client = MagicMock()
        client.get.return_value = None
        assert await RedisKeyValueBackend(client).get("k") is None

    @pytest.mark.asyncio
    async def test_undecodable_entry_is_dropped(self):
        client = MagicMock()
        client.get.return_value = "{not json"
        backend = RedisKeyValueBackend(client)
        assert await backend.get("k") is None
        client.delete.assert_called_once_with("salon_booking:k")

    @pytest.mark.asyncio
    async def test_delete_and_cleanup(self):
        client = MagicMock()
        client.delete.return_value = 1
        backend = RedisKeyValueBackend(client)
        assert await backend.delete("k") is True
        assert await backend.cleanup_expired() == 0
        assert backend.is_distributed


class TestCreateBackend:
    def test_memory_without_url(self):
        assert isinstance(create_backend(None), InMemoryKeyValueBackend)

    def test_redis_when_reachable(self):
        with patch(
            "salon_booking.core.infra.redis_manager.RedisManager.get_client",
            return_value=MagicMock(),
        ):
            assert isinstance(create_backend("redis://localhost:6379"), RedisKeyValueBackend)

    def test_falls_back_to_memory_when_unreachable(self):
        with patch(
            "salon_booking.core.infra.redis_manager.RedisManager.get_client", return_value=None
        ):
            backend = create_backend("redis://localhost:6379", eviction=EvictionStrategy.SWEEP)
        assert isinstance(backend, InMemoryKeyValueBackend)
