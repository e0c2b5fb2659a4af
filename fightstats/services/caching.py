"""Read-through caching for service methods.

Services subclass :class:`CacheableService` and decorate expensive async
methods with :func:`cached`.  An unreachable cache never fails a call: reads
degrade to misses and writes are dropped, so the method computes directly.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, Concatenate, ParamSpec, TypeVar

from fightstats.cache import CacheBackend, NullCacheClient
from fightstats.errors import CacheUnavailable

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

KeyFunction = Callable[Concatenate["CacheableService", P], str | None]
TtlSource = int | Callable[["CacheableService"], int | None] | None
Encoder = Callable[[T], Any]
Decoder = Callable[[Any], T]
ServiceMethod = Callable[Concatenate["CacheableService", P], Awaitable[T]]

_MISS = object()


class CacheableService:
    """Base class for services holding an injected :class:`CacheBackend`.

    ``None`` selects the no-op client so an absent cache is configuration,
    not an error path.
    """

    def __init__(self, cache: CacheBackend | None = None) -> None:
        self._cache: CacheBackend = cache if cache is not None else NullCacheClient()

    async def _cache_get(self, key: str) -> Any:
        try:
            return await self._cache.get_json(key)
        except CacheUnavailable as exc:
            logger.warning("Cache unavailable reading %s; computing directly: %s", key, exc)
            return None

    async def _cache_set(self, key: str, value: Any, ttl: int | None = None) -> None:
        try:
            await self._cache.set_json(key, value, ttl=ttl)
        except CacheUnavailable as exc:
            logger.warning("Cache unavailable writing %s; result not stored: %s", key, exc)

    async def _cached_value(self, key: str, decode: Decoder[T] | None) -> Any:
        """Return the decoded entry for ``key`` or ``_MISS``."""

        raw = await self._cache_get(key)
        if raw is None:
            logger.debug("Cache miss for %s", key)
            return _MISS
        if decode is None:
            logger.debug("Cache hit for %s", key)
            return raw
        try:
            value = decode(raw)
        except (TypeError, ValueError) as exc:
            logger.warning("Discarding cached payload for %s: %s", key, exc)
            return _MISS
        logger.debug("Cache hit for %s", key)
        return value


def cached(
    key: KeyFunction[P],
    *,
    ttl: TtlSource = None,
    encode: Encoder[T] | None = None,
    decode: Decoder[T] | None = None,
) -> Callable[[ServiceMethod], ServiceMethod]:
    """Cache the result of an async :class:`CacheableService` method.

    ``key`` receives the service and the call arguments and returns the cache
    key; ``None`` bypasses the cache for that call.  ``ttl`` is either seconds
    or a callable reading them from the service.  ``encode``/``decode``
    convert between the method's return value and the JSON payload; a payload
    ``decode`` rejects with ``TypeError``/``ValueError`` counts as a miss.
    ``None`` results are never stored.
    """

    def decorator(method: ServiceMethod) -> ServiceMethod:
        @wraps(method)
        async def wrapper(service: CacheableService, *args: P.args, **kwargs: P.kwargs) -> T:
            cache_key = key(service, *args, **kwargs)
            if not cache_key:
                return await method(service, *args, **kwargs)

            hit = await service._cached_value(cache_key, decode)
            if hit is not _MISS:
                return hit

            result = await method(service, *args, **kwargs)
            if result is not None:
                lifetime = ttl(service) if callable(ttl) else ttl
                payload = encode(result) if encode is not None else result
                await service._cache_set(cache_key, payload, ttl=lifetime)
            return result

        return wrapper

    return decorator


__all__ = ["CacheableService", "cached"]
