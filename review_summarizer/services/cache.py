from __future__ import annotations

from time import monotonic
from typing import Callable, Generic, Hashable, TypeVar

T = TypeVar("T")


class TTLCache(Generic[T]):
    """In-process key/value cache whose entries expire after a fixed duration."""

    def __init__(self, ttl_seconds: float, *, clock: Callable[[], float] = monotonic) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive.")
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, T]] = {}

    def get(self, key: Hashable) -> T | None:
        entry = self._entries.get(key)
        if entry is None:
            return None

        stored_at, value = entry
        if self._clock() - stored_at > self._ttl_seconds:
            del self._entries[key]
            return None
        return value

    def set(self, key: Hashable, value: T) -> None:
        now = self._clock()
        self._purge_expired(now)
        self._entries[key] = (now, value)

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, (stored_at, _) in self._entries.items() if now - stored_at > self._ttl_seconds]
        for key in expired:
            del self._entries[key]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
