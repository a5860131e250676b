"""Unit tests for the per-principal resolution cache."""

from __future__ import annotations

from datetime import timedelta

import pytest

from directory_rbac.kernel.time import FrozenClock
from directory_rbac.rbac import ResolutionCache, ResolutionResult


def _result(clock: FrozenClock, principal_id: int | str = 1, ttl_seconds: int = 60) -> ResolutionResult:
    now = clock.now()
    return ResolutionResult(
        principal_id=principal_id,
        roles=("AUDITOR",),
        permissions={"audit:read": True},
        resolved_at=now,
        expires_at=now + timedelta(seconds=ttl_seconds),
    )


@pytest.fixture
def cache(clock: FrozenClock) -> ResolutionCache:
    return ResolutionCache(clock)


class TestResolutionCache:
    def test_miss(self, cache: ResolutionCache) -> None:
        assert cache.get(1) is None

    def test_hit_before_expiry(self, cache: ResolutionCache, clock: FrozenClock) -> None:
        result = _result(clock)
        cache.put(1, result)
        clock.advance(seconds=59)
        assert cache.get(1) is result

    def test_hit_at_exact_expiry(self, cache: ResolutionCache, clock: FrozenClock) -> None:
        cache.put(1, _result(clock))
        clock.advance(seconds=60)
        assert cache.get(1) is not None

    def test_expired_entry_evicted_on_read(self, cache: ResolutionCache, clock: FrozenClock) -> None:
        cache.put(1, _result(clock))
        clock.advance(seconds=61)
        assert len(cache) == 1
        assert cache.get(1) is None
        assert len(cache) == 0

    def test_explicit_expiry_overrides_result_expiry(self, cache: ResolutionCache, clock: FrozenClock) -> None:
        entry = cache.put(1, _result(clock), expires_at=clock.now() + timedelta(seconds=5))
        assert entry.expires_at == clock.now() + timedelta(seconds=5)
        clock.advance(seconds=6)
        assert cache.get(1) is None

    def test_int_and_str_principal_share_entry(self, cache: ResolutionCache, clock: FrozenClock) -> None:
        cache.put(15, _result(clock, 15))
        assert cache.get("15") is not None

    def test_put_replaces(self, cache: ResolutionCache, clock: FrozenClock) -> None:
        cache.put(1, _result(clock))
        newer = _result(clock, ttl_seconds=120)
        cache.put(1, newer)
        assert cache.get(1) is newer
        assert len(cache) == 1

    def test_invalidate(self, cache: ResolutionCache, clock: FrozenClock) -> None:
        cache.put(1, _result(clock))
        assert cache.invalidate(1) is True
        assert cache.invalidate(1) is False
        assert cache.get(1) is None

    def test_clear(self, cache: ResolutionCache, clock: FrozenClock) -> None:
        cache.put(1, _result(clock, 1))
        cache.put(2, _result(clock, 2))
        assert cache.clear() == 2
        assert len(cache) == 0

    def test_stats(self, cache: ResolutionCache, clock: FrozenClock) -> None:
        cache.put(1, _result(clock, 1))
        cache.put("alice", _result(clock, "alice"))
        stats = cache.stats()
        assert stats.size == 2
        assert stats.principal_ids == ("1", "alice")
