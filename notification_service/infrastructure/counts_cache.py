"""In-process cache of per-recipient badge counts."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from notification_service.domain.entities import NotificationCounts


class CountsCache:
    """Memoise :class:`NotificationCounts` per recipient until invalidated.

    Entries also age out after ``ttl_seconds`` so writes made by other
    processes become visible; a TTL of zero disables caching. A value computed
    while an invalidation was in flight is never stored.
    """

    def __init__(
        self, ttl_seconds: float = 60, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[int, tuple[float, NotificationCounts]] = {}
        self._generations: dict[int, int] = {}
        self._epoch = 0
        self._lock = threading.Lock()

    def get_or_compute(
        self, recipient_id: int, compute: Callable[[], NotificationCounts]
    ) -> NotificationCounts:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(recipient_id)
            if entry is not None and now - entry[0] < self.ttl_seconds:
                return entry[1]
            token = (self._epoch, self._generations.get(recipient_id, 0))

        counts = compute()
        if self.ttl_seconds > 0:
            with self._lock:
                if token == (self._epoch, self._generations.get(recipient_id, 0)):
                    self._entries[recipient_id] = (now, counts)
        return counts

    def invalidate(self, recipient_id: int) -> None:
        with self._lock:
            self._entries.pop(recipient_id, None)
            self._generations[recipient_id] = self._generations.get(recipient_id, 0) + 1

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._epoch += 1

    def __contains__(self, recipient_id: object) -> bool:
        with self._lock:
            return recipient_id in self._entries


def _build_default_cache() -> CountsCache:
    from notification_service.config import get_settings

    return CountsCache(ttl_seconds=get_settings().counts_cache_ttl_seconds)


counts_cache = _build_default_cache()


__all__ = ["CountsCache", "counts_cache"]
