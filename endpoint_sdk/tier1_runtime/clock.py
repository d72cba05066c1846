"""
endpoint_sdk.tier1_runtime.clock
──────────────────────────────────
Mockable time source. The resolution cache measures TTLs against this clock
and probes stamp their results with it, so tests can move time forward
without sleeping.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable


# ── Clock implementation ───────────────────────────────────────────────────

class Clock:
    """Mockable clock. Override _now_fn to control time in tests."""

    def __init__(self, now_fn: Callable[[], datetime] | None = None) -> None:
        self._now_fn = now_fn or (lambda: datetime.now(tz=timezone.utc))

    def now(self) -> datetime:
        """Return the current UTC datetime."""
        return self._now_fn()

    def seconds_since(self, then: datetime) -> float:
        """Elapsed seconds between *then* and now."""
        return (self.now() - then).total_seconds()

    def freeze(self, dt: datetime) -> "Clock":
        """Return a new Clock frozen at the given datetime."""
        return Clock(now_fn=lambda: dt)


class ManualClock(Clock):
    """A clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self._current = start or datetime(2025, 1, 1, tzinfo=timezone.utc)
        super().__init__(now_fn=lambda: self._current)

    def advance(self, seconds: float) -> None:
        self._current = self._current + timedelta(seconds=seconds)

    def set(self, dt: datetime) -> None:
        self._current = dt


# ── Module-level default ───────────────────────────────────────────────────

_clock = Clock()


def get_clock() -> Clock:
    """Return the default wall clock."""
    return _clock


__all__ = ["Clock", "ManualClock", "get_clock"]
