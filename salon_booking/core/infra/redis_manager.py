"""Centralized Redis connection manager with singleton pattern."""

import threading
from typing import Optional

import redis
from loguru import logger

from salon_booking.utils.masking import mask_database_url


class RedisManager:
    """
    Singleton factory for the shared Redis client.

    The URL comes from ``settings.redis_url`` unless one is passed explicitly.
    Returns None when Redis is not configured or does not answer PING, so
    callers can fall back to process-local storage.

    Example:
        ```python
        client = RedisManager.get_client()
        if client is not None:
            client.ping()
        ```
    """

    _instance: Optional[redis.Redis] = None
    _lock = threading.Lock()
    _initialized = False

    @classmethod
    def get_client(cls, redis_url: Optional[str] = None) -> Optional[redis.Redis]:
        """
        Get shared Redis client instance.

        Args:
            redis_url: Connection URL overriding settings (first call only)

        Returns:
            Redis client instance, or None if unavailable
        """
        if cls._initialized:
            return cls._instance

        with cls._lock:
            if cls._initialized:
                return cls._instance

            if redis_url is None:
                from salon_booking.core.config import get_settings

                redis_url = get_settings().redis_url
            cls._instance = cls._create_client(redis_url)
            cls._initialized = True

        return cls._instance

    @classmethod
    def _create_client(cls, redis_url: Optional[str]) -> Optional[redis.Redis]:
        if not redis_url:
            logger.debug("REDIS_URL not set; drafts and codes stay in process memory")
            return None

        try:
            client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30,
            )
            client.ping()
        except redis.RedisError as e:
            logger.warning(
                f"RedisManager: cannot reach Redis ({mask_database_url(redis_url)}): {e}. "
                "Falling back to process-local storage."
            )
            return None
        logger.info(f"RedisManager connected: {mask_database_url(redis_url)}")
        return client

    @classmethod
    def health_check(cls) -> bool:
        """
        Perform a live health check against Redis.

        Returns:
            True if Redis responds to PING, False otherwise
        """
        client = cls.get_client()
        if client is None:
            return False
        try:
            client.ping()
            return True
        except redis.RedisError as e:
            logger.warning(f"RedisManager health check failed: {e}")
            return False

    @classmethod
    def reset(cls) -> None:
        """Close the client and clear the singleton (useful for testing)."""
        with cls._lock:
            if cls._instance is not None:
                try:
                    cls._instance.close()
                except redis.RedisError as e:
                    logger.debug(f"RedisManager: error closing client during reset: {e}")
            cls._instance = None
            cls._initialized = False
