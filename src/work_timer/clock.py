"""System clock wrapper.

Instants are monotonic seconds so elapsed time is immune to wall-clock jumps;
the wall clock is only read for the end time stored with a session.
"""

from __future__ import annotations

import time

from .errors import ClockError


class SystemClock:
    """Clock backed by time.monotonic() and time.time()."""

    def now(self) -> float:
        return time.monotonic()

    def elapsed_since(self, start: float) -> float:
        """Seconds elapsed since a previous now() instant."""
        elapsed = time.monotonic() - start
        if elapsed < 0:
            raise ClockError(f"monotonic clock went backwards by {-elapsed:.3f}s")
        return elapsed

    def unix_time(self) -> int:
        try:
            return int(time.time())
        except OSError as exc:  # pragma: no cover - platform dependent
            raise ClockError(f"cannot read system time: {exc}") from exc
