"""Timer engine: pure logic, no I/O.

All time values are whole seconds. Elapsed time is passed in by the caller,
so the engine is deterministic under test.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TimerMode(str, Enum):
    RUNNING = "running"
    PAUSED = "paused"
    QUIT = "quit"


@dataclass(frozen=True)
class SessionSnapshot:
    """Final totals of a session, ready to be stored."""

    work_seconds: int
    pause_seconds: int
    end_unix_time: int


def format_hms(seconds: int) -> str:
    """Format seconds as 'HH:MM:SS'."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


class TimerEngine:
    """Work/pause accounting for one session.

    Each tick recomputes the active bucket from the absolute elapsed time
    minus the other bucket, so a late or skipped tick never drifts the totals:
    after every tick work_seconds + pause_seconds == elapsed seconds.
    """

    def __init__(self) -> None:
        self._mode: TimerMode = TimerMode.RUNNING
        self._work_seconds: int = 0
        self._pause_seconds: int = 0
        self._paused_when_quit: bool = False
        self._snapshot: SessionSnapshot | None = None

    # ---- Read-only properties ----

    @property
    def mode(self) -> TimerMode:
        return self._mode

    @property
    def paused(self) -> bool:
        if self._mode == TimerMode.QUIT:
            return self._paused_when_quit
        return self._mode == TimerMode.PAUSED

    @property
    def is_finished(self) -> bool:
        return self._mode == TimerMode.QUIT

    @property
    def work_seconds(self) -> int:
        return self._work_seconds

    @property
    def pause_seconds(self) -> int:
        return self._pause_seconds

    @property
    def total_seconds(self) -> int:
        return self._work_seconds + self._pause_seconds

    # ---- Core methods ----

    def tick(self, elapsed_seconds: float) -> None:
        """Bring the active bucket up to date with the session's elapsed time.

        Args:
            elapsed_seconds: Time since the session started. Fractions are
                floored; a value below the already accounted total is ignored.
        """
        if self._mode == TimerMode.QUIT:
            return

        elapsed = int(elapsed_seconds)
        if elapsed < self.total_seconds:
            return

        if self._mode == TimerMode.RUNNING:
            self._work_seconds = elapsed - self._pause_seconds
        else:
            self._pause_seconds = elapsed - self._work_seconds

    def toggle_pause(self) -> bool:
        """Flip between running and paused. Returns the new paused flag."""
        if self._mode == TimerMode.RUNNING:
            self._mode = TimerMode.PAUSED
        elif self._mode == TimerMode.PAUSED:
            self._mode = TimerMode.RUNNING
        return self.paused

    def finalize(self, end_unix_time: int) -> SessionSnapshot:
        """Stop the session and return its totals.

        Only the first call takes effect; later calls return the same
        snapshot regardless of end_unix_time.
        """
        if self._snapshot is None:
            self._paused_when_quit = self._mode == TimerMode.PAUSED
            self._mode = TimerMode.QUIT
            self._snapshot = SessionSnapshot(
                work_seconds=self._work_seconds,
                pause_seconds=self._pause_seconds,
                end_unix_time=int(end_unix_time),
            )
        return self._snapshot
