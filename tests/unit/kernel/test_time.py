"""Unit tests for kernel time utilities."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from directory_rbac.kernel.time import DEFAULT_FROZEN_INSTANT, FrozenClock, SystemClock


class TestSystemClock:
    def test_now_is_utc_aware(self) -> None:
        now = SystemClock().now()
        assert now.tzinfo is not None
        assert now.utcoffset() == timedelta(0)

    def test_now_is_current(self) -> None:
        assert abs((SystemClock().now() - datetime.now(UTC)).total_seconds()) < 1.0


class TestFrozenClock:
    def test_default_instant(self) -> None:
        assert FrozenClock().now() == DEFAULT_FROZEN_INSTANT == datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)

    def test_now_does_not_move(self) -> None:
        clk = FrozenClock()
        assert clk.now() == clk.now()

    def test_advance(self) -> None:
        start = datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)
        clk = FrozenClock(start)
        assert clk.advance(minutes=5) == start + timedelta(minutes=5)
        assert clk.now() == start + timedelta(minutes=5)
