"""Fixed-period loop driving a TimerEngine from clock and keyboard input."""

from __future__ import annotations

import logging
import signal
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .engine import SessionSnapshot, TimerEngine
from .errors import PersistenceError
from .history import HistoryRecord, HistoryStore

logger = logging.getLogger(__name__)

DEFAULT_TICK_SECONDS = 1.0


@contextmanager
def _sigint_ignored():
    """Ignore Ctrl+C while a finished session is being saved."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


class KeyEvent(Enum):
    PAUSE = "pause"
    QUIT = "quit"
    OTHER = "other"


class Clock(Protocol):
    def now(self) -> float: ...

    def elapsed_since(self, start: float) -> float: ...

    def unix_time(self) -> int: ...


class Renderer(Protocol):
    def draw(self, work_seconds: int, pause_seconds: int, paused: bool) -> None: ...


class KeySource(Protocol):
    def poll_event(self, max_wait: float) -> KeyEvent | None: ...


@dataclass(frozen=True)
class SessionOutcome:
    snapshot: SessionSnapshot
    saved: bool
    error: PersistenceError | None = None


class TickDriver:
    """Runs one interactive session until the quit key.

    Each period: tick the engine, redraw, then wait for a key for whatever is
    left of the period. The key wait is the loop's only sleep.
    """

    def __init__(
        self,
        engine: TimerEngine,
        clock: Clock,
        renderer: Renderer,
        keys: KeySource,
        store: HistoryStore | None = None,
        period: float = DEFAULT_TICK_SECONDS,
    ) -> None:
        self.engine = engine
        self.clock = clock
        self.renderer = renderer
        self.keys = keys
        self.store = store
        self.period = period

    def run(self) -> SessionOutcome:
        start = self.clock.now()
        try:
            while True:
                tick_started = self.clock.now()
                self.engine.tick(self.clock.elapsed_since(start))
                self._draw()

                remaining = max(0.0, self.period - self.clock.elapsed_since(tick_started))
                event = self.keys.poll_event(remaining)

                if event == KeyEvent.PAUSE:
                    paused = self.engine.toggle_pause()
                    logger.debug("Pause toggled, paused=%s", paused)
                elif event == KeyEvent.QUIT:
                    break
        except KeyboardInterrupt:
            logger.debug("Interrupted, finishing session")

        with _sigint_ignored():
            self.engine.tick(self.clock.elapsed_since(start))
            snapshot = self.engine.finalize(self.clock.unix_time())
            try:
                self._draw()
            except KeyboardInterrupt:
                logger.debug("Interrupted during final draw")
            return self._persist(snapshot)

    def _draw(self) -> None:
        try:
            self.renderer.draw(
                self.engine.work_seconds, self.engine.pause_seconds, self.engine.paused
            )
        except Exception as exc:
            logger.debug("Render failed: %s", exc)

    def _persist(self, snapshot: SessionSnapshot) -> SessionOutcome:
        if self.store is None:
            logger.info("No history file configured, session not saved")
            return SessionOutcome(snapshot=snapshot, saved=False)

        try:
            self.store.append(HistoryRecord.from_snapshot(snapshot))
        except PersistenceError as exc:
            logger.error("Failed to save session: %s", exc)
            return SessionOutcome(snapshot=snapshot, saved=False, error=exc)

        logger.info("Saved session to %s", self.store.path)
        return SessionOutcome(snapshot=snapshot, saved=True)
