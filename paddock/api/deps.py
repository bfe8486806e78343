from __future__ import annotations

from collections.abc import Generator

import redis

from paddock.infra.redis_client import create_redis
from paddock.runtime import SessionRegistry, registry

_REDIS: redis.Redis | None = None


def get_redis() -> Generator[redis.Redis, None, None]:
    """Shared client: live sessions keep it for save/load, so it is never closed per request."""

    global _REDIS
    if _REDIS is None:
        _REDIS = create_redis()
    yield _REDIS


def get_registry() -> SessionRegistry:
    return registry
