from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import threading
from typing import Callable, Dict, Optional

from .base import CacheError

"""In-process rate cache.

Purpose:
    Keep recently resolved rates in memory for a bounded TTL so repeated
    conversions skip the store and the upstream feed.

Design:
    - Plain dict of code -> entry guarded by a lock; safe to share across the
      request threadpool.
    - Expired entries are dropped on read and swept on every write, so codes
      that are never read again do not linger.
    - Never a source of truth: clearing it loses nothing, the resolver rebuilds
      entries from the store or the provider.
"""


@dataclass
class _CacheEntry:
    rate: float
    expires_at: datetime


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryRateCache:
    """TTL-bound rate cache satisfying the RateCache contract."""

    def __init__(self, clock: Callable[[], datetime] = _utc_now):
        self._clock = clock
        self._entries: Dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()

    def _is_entry_valid(self, entry: _CacheEntry) -> bool:
        return self._clock() < entry.expires_at

    def get(self, code: str) -> Optional[float]:
        code = code.upper()
        with self._lock:
            entry = self._entries.get(code)
            if entry is None:
                return None
            if not self._is_entry_valid(entry):
                self._entries.pop(code, None)
                return None
            return entry.rate

    def set(self, code: str, rate: float, ttl: timedelta) -> None:
        if rate <= 0:
            raise CacheError("cached rate must be positive")
        if ttl.total_seconds() <= 0:
            raise CacheError("cache ttl must be positive")
        now = self._clock()
        with self._lock:
            self._purge_expired(now)
            self._entries[code.upper()] = _CacheEntry(rate=rate, expires_at=now + ttl)

    def delete(self, code: str) -> None:
        with self._lock:
            self._entries.pop(code.upper(), None)

    def _purge_expired(self, now: datetime) -> None:
        # caller holds self._lock
        expired = [k for k, v in self._entries.items() if v.expires_at <= now]
        for k in expired:
            del self._entries[k]
