"""Key-value storage with per-entry time-to-live for drafts and one-time codes."""

import asyncio
import copy
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from loguru import logger

from salon_booking.core.enums import EvictionStrategy

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class KeyValueBackend(ABC):
    """Abstract TTL key-value backend. Values are JSON-compatible dictionaries."""

    @abstractmethod
    async def save(self, key: str, value: Dict[str, Any], ttl_seconds: int) -> None:
        """
        Store value under key, replacing any previous entry and restarting its TTL.

        Args:
            key: Entry key
            value: JSON-compatible dictionary
            ttl_seconds: Time-to-live in seconds (must be positive)
        """
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Get value for key.

        Returns:
            Stored value, or None if absent or expired (expired entries are evicted)
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Delete entry.

        Returns:
            True if an entry was removed
        """
        pass

    @abstractmethod
    async def cleanup_expired(self) -> int:
        """
        Remove expired entries.

        Returns:
            Number of entries removed
        """
        pass

    @property
    @abstractmethod
    def is_distributed(self) -> bool:
        """Check if backend uses distributed storage."""
        pass

    async def start(self) -> None:
        """Start background work, if any."""

    async def stop(self) -> None:
        """Stop background work, if any."""


@dataclass
class _Entry:
    value: Dict[str, Any]
    expires_at: datetime


class InMemoryKeyValueBackend(KeyValueBackend):
    """
    Process-local backend (single worker only).

    Expired entries are always evicted when read. With the ``sweep`` strategy a
    background task also calls ``cleanup_expired`` every ``sweep_interval``
    seconds, so unread entries do not accumulate.
    """

    def __init__(
        self,
        eviction: EvictionStrategy = EvictionStrategy.LAZY,
        sweep_interval: float = 60.0,
        clock: Clock = utc_now,
    ):
        self._store: Dict[str, _Entry] = {}
        self._lock = asyncio.Lock()
        self._eviction = eviction
        self._sweep_interval = sweep_interval
        self._clock = clock
        self._sweeper: Optional["asyncio.Task[None]"] = None

    async def save(self, key: str, value: Dict[str, Any], ttl_seconds: int) -> None:
        async with self._lock:
            self._store[key] = _Entry(
                value=copy.deepcopy(value),
                expires_at=self._clock() + timedelta(seconds=ttl_seconds),
            )

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        async with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expires_at:
                del self._store[key]
                return None
            return copy.deepcopy(entry.value)

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._store.pop(key, None) is not None

    async def cleanup_expired(self) -> int:
        async with self._lock:
            now = self._clock()
            expired_keys = [k for k, v in self._store.items() if now > v.expires_at]
            for key in expired_keys:
                del self._store[key]

        if expired_keys:
            logger.debug(f"Cleaned up {len(expired_keys)} expired entries")
        return len(expired_keys)

    @property
    def is_distributed(self) -> bool:
        return False

    def __len__(self) -> int:
        return len(self._store)

    async def start(self) -> None:
        if self._eviction != EvictionStrategy.SWEEP or self._sweeper is not None:
            return
        self._sweeper = asyncio.create_task(self._sweep_loop())
        logger.info(f"Expiry sweeper started (interval: {self._sweep_interval}s)")

    async def stop(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
        logger.info("Expiry sweeper stopped")

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            try:
                await self.cleanup_expired()
            except Exception as e:
                logger.error(f"Expiry sweep failed: {e}")


class RedisKeyValueBackend(KeyValueBackend):
    """Redis-based distributed backend. Expiry is native Redis TTL."""

    def __init__(self, redis_client: Any, namespace: str = "salon_booking"):
        """
        Initialize Redis backend.

        Args:
            redis_client: Synchronous Redis client (``decode_responses=True``)
            namespace: Prefix for every key
        """
        self._redis = redis_client
        self._namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    async def save(self, key: str, value: Dict[str, Any], ttl_seconds: int) -> None:
        data = json.dumps(value, default=str)
        await asyncio.to_thread(self._redis.setex, self._key(key), ttl_seconds, data)

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        data = await asyncio.to_thread(self._redis.get, self._key(key))
        if not data:
            return None
        try:
            return json.loads(data)
        except json.JSONDecodeError:
            logger.warning(f"Discarding undecodable entry: {key[:24]}...")
            await self.delete(key)
            return None

    async def delete(self, key: str) -> bool:
        removed = await asyncio.to_thread(self._redis.delete, self._key(key))
        return bool(removed)

    async def cleanup_expired(self) -> int:
        """Redis expires keys itself; nothing to do."""
        return 0

    @property
    def is_distributed(self) -> bool:
        return True


def create_backend(
    redis_url: Optional[str] = None,
    eviction: EvictionStrategy = EvictionStrategy.LAZY,
    sweep_interval: float = 60.0,
) -> KeyValueBackend:
    """
    Pick Redis when configured and reachable, process memory otherwise.

    Args:
        redis_url: Redis URL (None disables Redis)
        eviction: Eviction strategy for the in-memory backend
        sweep_interval: Sweep period in seconds for ``EvictionStrategy.SWEEP``

    Returns:
        KeyValueBackend instance
    """
    if redis_url:
        from salon_booking.core.infra.redis_manager import RedisManager

        client = RedisManager.get_client(redis_url)
        if client is not None:
            logger.info("Ephemeral store using Redis backend")
            return RedisKeyValueBackend(client)
        logger.warning(
            "Failed to connect to Redis, falling back to in-memory backend. "
            "Drafts and codes will NOT be shared across workers!"
        )

    logger.info(f"Ephemeral store using in-memory backend (eviction: {eviction.value})")
    return InMemoryKeyValueBackend(eviction=eviction, sweep_interval=sweep_interval)
