"""Redis-backed JSON cache used for the win streak leaderboard.

Only connectivity failures are translated into :class:`CacheUnavailable`; the
caching layer turns those into direct computation.  Any other Redis error is a
bug worth surfacing and propagates unchanged.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Protocol, runtime_checkable

from redis.asyncio import Redis as RedisClient
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from fightstats.errors import CacheUnavailable
from fightstats.settings import AppSettings, get_settings

logger = logging.getLogger(__name__)

_DEFAULT_TTL_SECONDS = 600
WIN_STREAKS_PREFIX = "fighter_top_win_streaks"
WIN_STREAKS_KEY = f"{WIN_STREAKS_PREFIX}_all"

_CONNECTION_ERRORS = (RedisConnectionError, RedisTimeoutError, OSError)

_redis_client: RedisClient | None = None
_client_lock = asyncio.Lock()
_redis_disabled = False


@runtime_checkable
class CacheBackend(Protocol):
    """Key-value cache consumed by the services layer."""

    async def get_json(self, key: str) -> Any: ...

    async def set_json(self, key: str, value: Any, ttl: int | None = None) -> None: ...

    async def delete(self, *keys: str) -> None: ...

    async def delete_pattern(self, pattern: str) -> None: ...


@asynccontextmanager
async def _unavailable_on_disconnect(operation: str) -> AsyncIterator[None]:
    """Re-raise Redis connectivity failures inside the block as ``CacheUnavailable``."""

    try:
        yield
    except _CONNECTION_ERRORS as exc:
        logger.debug("Redis %s failed: %s", operation, exc)
        raise CacheUnavailable(f"{operation}: {exc}") from exc


async def get_redis(settings: AppSettings | None = None) -> RedisClient | None:
    """Return the shared Redis client, or ``None`` once a connection attempt failed.

    A failed ping disables Redis for the rest of the process so every later
    call degrades to the no-op cache without retrying the connection.
    """
    global _redis_client, _redis_disabled

    if _redis_disabled:
        return None

    resolved = settings or get_settings()

    async with _client_lock:
        if _redis_client is not None or _redis_disabled:
            return _redis_client

        client = RedisClient.from_url(
            resolved.redis_url, decode_responses=True, encoding="utf-8"
        )
        try:
            await client.ping()
        except _CONNECTION_ERRORS as exc:
            logger.warning("Redis unreachable at %s (%s); caching disabled", resolved.redis_url, exc)
            _redis_disabled = True
            await client.aclose()
            return None
        _redis_client = client
        logger.info("Connected to Redis at %s", resolved.redis_url)
        return _redis_client


class CacheClient:
    """JSON cache on top of an async Redis client."""

    def __init__(self, redis: RedisClient | Any) -> None:
        self._redis = redis

    async def get_json(self, key: str) -> Any:
        async with _unavailable_on_disconnect(f"get {key}"):
            payload = await self._redis.get(key)
        if payload is None:
            return None
        try:
            return json.loads(payload)
        except json.JSONDecodeError:
            logger.debug("Discarding undecodable cache payload for key %s", key)
            return None

    async def set_json(self, key: str, value: Any, ttl: int | None = None) -> None:
        encoded = json.dumps(value, default=str)
        async with _unavailable_on_disconnect(f"set {key}"):
            await self._redis.set(key, encoded, ex=ttl or _DEFAULT_TTL_SECONDS)

    async def delete(self, *keys: str) -> None:
        if keys:
            async with _unavailable_on_disconnect("delete"):
                await self._redis.delete(*keys)

    async def delete_pattern(self, pattern: str) -> None:
        """Delete every key matching ``pattern``; a no-op for backends that cannot scan."""

        scan_iter = getattr(self._redis, "scan_iter", None)
        if scan_iter is None:
            logger.debug("Cache backend cannot scan keys; skipping delete of %s", pattern)
            return
        async with _unavailable_on_disconnect(f"delete_pattern {pattern}"):
            matched = [key async for key in scan_iter(match=pattern)]
            if matched:
                await self._redis.delete(*matched)
        logger.debug("Deleted %d cache keys matching %s", len(matched), pattern)


class NullCacheClient:
    """Cache that stores nothing; every lookup misses."""

    async def get_json(self, key: str) -> Any:
        return None

    async def set_json(self, key: str, value: Any, ttl: int | None = None) -> None:
        return None

    async def delete(self, *keys: str) -> None:
        return None

    async def delete_pattern(self, pattern: str) -> None:
        return None


async def get_cache_client(settings: AppSettings | None = None) -> CacheBackend:
    """Return a Redis-backed client, or the no-op client when caching is off."""

    resolved = settings or get_settings()
    if not resolved.cache_enabled:
        return NullCacheClient()
    redis = await get_redis(resolved)
    if redis is None:
        return NullCacheClient()
    return CacheClient(redis)


async def close_redis() -> None:
    """Close the shared Redis client and allow the next call to reconnect."""
    global _redis_client, _redis_disabled
    client, _redis_client = _redis_client, None
    _redis_disabled = False
    if client is not None:
        await client.aclose()


async def invalidate_win_streaks(cache: CacheBackend) -> None:
    """Drop every cached longest-win-streak leaderboard."""

    try:
        await cache.delete_pattern(f"{WIN_STREAKS_PREFIX}_*")
    except CacheUnavailable as exc:
        logger.warning("Could not invalidate win streak cache: %s", exc)


__all__ = [
    "CacheBackend",
    "CacheClient",
    "NullCacheClient",
    "WIN_STREAKS_KEY",
    "WIN_STREAKS_PREFIX",
    "close_redis",
    "get_cache_client",
    "get_redis",
    "invalidate_win_streaks",
]
