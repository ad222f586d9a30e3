from __future__ import annotations

import time
from typing import Any

from .models import UserPreferenceProfile

_DEFAULT_TTL = 300  # 5 minutes


class ProfileCache:
    """Per-user preference profiles kept for ``ttl`` seconds. ``ttl <= 0`` disables it."""

    def __init__(self, ttl: float = _DEFAULT_TTL) -> None:
        self.ttl = ttl
        self._entries: dict[int, dict[str, Any]] = {}
        self._hits = 0
        self._misses = 0

    @property
    def enabled(self) -> bool:
        return self.ttl > 0

    def get(self, user_id: int) -> UserPreferenceProfile | None:
        if not self.enabled:
            return None
        entry = self._entries.get(user_id)
        if entry and time.monotonic() - entry["created_at"] < self.ttl:
            self._hits += 1
            # Copies, so callers cannot mutate the cached profile
            return entry["value"].model_copy(deep=True)
        if entry:
            del self._entries[user_id]
        self._misses += 1
        return None

    def set(self, user_id: int, profile: UserPreferenceProfile) -> None:
        if not self.enabled:
            return
        self._entries[user_id] = {
            "value": profile.model_copy(deep=True),
            "created_at": time.monotonic(),
        }

    def invalidate(self, user_id: int) -> None:
        self._entries.pop(user_id, None)

    def stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "size": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }

    def clear(self) -> None:
        self._entries.clear()
        self._hits = 0
        self._misses = 0
