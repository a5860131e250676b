"""Per-principal TTL cache of resolution results.

Entry lifecycle: absent → fresh (on put) → expired (time passes) → absent
(on the next read, or explicit invalidation).  Eviction is lazy; there is no
background sweep and no "refreshing" state.
"""

from __future__ import annotations

import dataclasses
import threading
from datetime import datetime

from directory_rbac.kernel.errors import PrincipalId
from directory_rbac.kernel.time import Clock, SystemClock
from directory_rbac.rbac.models import CacheEntry, ResolutionResult, principal_key


@dataclasses.dataclass(frozen=True)
class CacheStats:
    size: int
    principal_ids: tuple[str, ...]


class ResolutionCache:
    """Thread-safe map of principal → :class:`CacheEntry`."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or SystemClock()
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, principal_id: PrincipalId) -> ResolutionResult | None:
        """Return the cached result, or ``None`` if absent or expired.

        An expired entry is deleted by the read that discovers it.
        """
        key = principal_key(principal_id)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock.now()):
                del self._entries[key]
                return None
            return entry.result

    def put(
        self,
        principal_id: PrincipalId,
        result: ResolutionResult,
        expires_at: datetime | None = None,
    ) -> CacheEntry:
        entry = CacheEntry(result=result, expires_at=expires_at or result.expires_at)
        with self._lock:
            self._entries[principal_key(principal_id)] = entry
        return entry

    def invalidate(self, principal_id: PrincipalId) -> bool:
        """Drop the entry for *principal_id*; return whether one existed."""
        with self._lock:
            return self._entries.pop(principal_key(principal_id), None) is not None

    def clear(self) -> int:
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
            return removed

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(size=len(self._entries), principal_ids=tuple(self._entries))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["CacheStats", "ResolutionCache"]
