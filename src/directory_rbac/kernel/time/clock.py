"""Kernel time: the clock every expiry decision is made against.

Cache entries and overrides compare against ``Clock.now()`` rather than
calling :func:`datetime.now` directly, so tests can pin and step time.
"""
from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Protocol

DEFAULT_FROZEN_INSTANT = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock; always timezone-aware UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class FrozenClock:
    """Clock that only moves when :meth:`advance` is called."""

    def __init__(self, fixed: datetime | None = None) -> None:
        self._fixed = fixed or DEFAULT_FROZEN_INSTANT

    def now(self) -> datetime:
        return self._fixed

    def advance(self, **kwargs: int | float) -> datetime:
        """Step forward by ``timedelta(**kwargs)`` and return the new instant."""
        self._fixed += timedelta(**kwargs)
        return self._fixed


__all__ = ["Clock", "DEFAULT_FROZEN_INSTANT", "FrozenClock", "SystemClock"]
