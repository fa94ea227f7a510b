"""Infrastructure clients."""

from .redis_manager import RedisManager

__all__ = ["RedisManager"]
