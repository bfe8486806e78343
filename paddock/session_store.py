from __future__ import annotations

import redis

from paddock.models import SessionSnapshot

SAVES_KEY_PREFIX = "paddock:saves:"  # + {profile}


def _saves_key(profile: str) -> str:
    return f"{SAVES_KEY_PREFIX}{profile}"


def save_snapshot(*, r: redis.Redis, profile: str, snapshot: SessionSnapshot) -> int:
    """Append a snapshot to the profile's save slots; returns its 1-based slot number."""

    # redis-py is synchronous; explicit alias helps some IDEs avoid thinking these are coroutines.
    r_sync = r  # type: ignore[assignment]
    return int(r_sync.rpush(_saves_key(profile), snapshot.model_dump_json()))


def list_snapshots(*, r: redis.Redis, profile: str) -> list[SessionSnapshot]:
    raws = r.lrange(_saves_key(profile), 0, -1)
    return [SessionSnapshot.model_validate_json(raw) for raw in raws]


def load_snapshot(*, r: redis.Redis, profile: str, slot: int) -> SessionSnapshot | None:
    if slot < 1:
        return None
    raw = r.lindex(_saves_key(profile), slot - 1)
    if not raw:
        return None
    return SessionSnapshot.model_validate_json(raw)
