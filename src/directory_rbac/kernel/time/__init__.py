"""Kernel time – clock port used for TTL and override expiry."""
from directory_rbac.kernel.time.clock import DEFAULT_FROZEN_INSTANT, Clock, FrozenClock, SystemClock

__all__ = ["Clock", "DEFAULT_FROZEN_INSTANT", "FrozenClock", "SystemClock"]
