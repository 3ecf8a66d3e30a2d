from typing import Any

import redis.asyncio as redis
from loguru import logger

from studymatch.core.config import settings


class RedisService:
    """Shared async Redis client with key prefixing and error logging."""

    def __init__(self, url: str | None = None, key_prefix: str | None = None) -> None:
        self._url = url or settings.REDIS_URL
        self._prefix = settings.REDIS_KEY_PREFIX if key_prefix is None else key_prefix
        self._client: redis.Redis | None = None
        if not self._url:
            logger.warning("REDIS_URL is not set. Redis operations will fail until configured.")

    def key(self, template: str, **params: Any) -> str:
        return f"{self._prefix}{template.format(**params)}"

    async def get_client(self) -> redis.Redis:
        if self._client is None:
            logger.info("Creating Redis client for RedisService")
            self._client = redis.from_url(
                self._url,
                decode_responses=True,
                encoding="utf-8",
                socket_connect_timeout=5,
                socket_timeout=5,
                max_connections=settings.REDIS_MAX_CONNECTIONS,
                health_check_interval=30,
                socket_keepalive=True,
            )
        return self._client

    async def close(self) -> None:
        """Close and disconnect the shared Redis client (call on shutdown)."""
        if self._client is None:
            return
        try:
            logger.info("Closing shared Redis client")
            await self._client.aclose()
        except Exception as e:
            logger.debug(f"Silent failure closing redis client: {e}")
        finally:
            self._client = None

    async def set(self, key: str, value: str) -> bool:
        """Store a value, replacing whatever was there.

        Returns:
            True if successful, False otherwise
        """
        try:
            client = await self.get_client()
            return bool(await client.set(key, value))
        except (redis.RedisError, OSError) as exc:
            logger.error(f"Failed to set key '{key}' in Redis: {exc}")
            return False

    async def get(self, key: str, raise_errors: bool = False) -> str | None:
        """Get a value by key, or None if missing.

        Errors are logged and read as a miss unless `raise_errors` is set.
        """
        try:
            client = await self.get_client()
            return await client.get(key)
        except (redis.RedisError, OSError) as exc:
            logger.error(f"Failed to get key '{key}' from Redis: {exc}")
            if raise_errors:
                raise
            return None

    async def delete(self, key: str) -> bool:
        try:
            client = await self.get_client()
            return bool(await client.delete(key))
        except (redis.RedisError, OSError) as exc:
            logger.error(f"Failed to delete key '{key}' from Redis: {exc}")
            return False

    # Hash helpers back the write-once quiz answers and propagate errors

    async def hsetnx(self, key: str, field: str, value: str) -> bool:
        """Set a hash field only if it is absent. Returns False when it already exists."""
        client = await self.get_client()
        return bool(await client.hsetnx(key, field, value))

    async def hdel(self, key: str, *fields: str) -> int:
        client = await self.get_client()
        return int(await client.hdel(key, *fields))

    async def hgetall(self, key: str) -> dict[str, str]:
        client = await self.get_client()
        return await client.hgetall(key) or {}

    async def sadd(self, key: str, *members: str) -> bool:
        try:
            client = await self.get_client()
            await client.sadd(key, *members)
            return True
        except (redis.RedisError, OSError) as exc:
            logger.error(f"Failed to add to set '{key}' in Redis: {exc}")
            return False

    # Quoted: `set` in the class body is the method above
    async def smembers(self, key: str) -> "set[str]":
        try:
            client = await self.get_client()
            return set(await client.smembers(key) or ())
        except (redis.RedisError, OSError) as exc:
            logger.error(f"Failed to read set '{key}' from Redis: {exc}")
            return set()

    async def incr(self, key: str) -> int:
        # Id allocation has no sensible fallback, so errors propagate
        client = await self.get_client()
        return int(await client.incr(key))
