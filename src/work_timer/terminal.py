"""Terminal backends for the timer display and key input."""

from __future__ import annotations

import os
import select
import sys
from typing import TextIO

from rich.console import Console, Group
from rich.live import Live
from rich.text import Text

from .driver import KeyEvent
from .engine import format_hms

CTRL_C = "\x03"

WORK_LABEL_STYLE = "bold white"
PLAY_LABEL_STYLE = "bold rgb(0,0,0) on rgb(249,109,0)"
VALUE_STYLE = "rgb(190,190,190)"


def build_display(work_seconds: int, pause_seconds: int, paused: bool, pause_key: str = "p", quit_key: str = "q") -> Group:
    """Two timer lines plus a key hint."""
    work = Text.assemble(("Work:", WORK_LABEL_STYLE), " ", (format_hms(work_seconds), VALUE_STYLE))
    play = Text.assemble(("Play:", PLAY_LABEL_STYLE), " ", (format_hms(pause_seconds), VALUE_STYLE))
    if paused:
        play.append("  PAUSED", style="bold yellow")
    hint = Text(f"{pause_key} pause/resume  {quit_key} quit", style="dim")
    return Group(work, play, hint)


class LiveRenderer:
    """Redraws the timer in place with rich.live.Live."""

    def __init__(self, console: Console | None = None, pause_key: str = "p", quit_key: str = "q") -> None:
        self.console = console or Console()
        self.pause_key = pause_key
        self.quit_key = quit_key
        self._live = Live(
            build_display(0, 0, False, pause_key, quit_key),
            console=self.console,
            auto_refresh=False,
            transient=False,
        )

    def __enter__(self) -> LiveRenderer:
        self._live.start(refresh=True)
        return self

    def __exit__(self, *exc_info) -> None:
        self._live.stop()

    def draw(self, work_seconds: int, pause_seconds: int, paused: bool) -> None:
        self._live.update(
            build_display(work_seconds, pause_seconds, paused, self.pause_key, self.quit_key),
            refresh=True,
        )


class RawKeyboard:
    """Single-key input with a bounded wait.

    Raw mode is only enabled while waiting, so the display is drawn with the
    terminal in its normal state.
    """

    def __init__(self, stream: TextIO | None = None, pause_key: str = "p", quit_key: str = "q") -> None:
        self.stream = stream or sys.stdin
        self.pause_key = pause_key
        self.quit_key = quit_key

    def classify(self, ch: str) -> KeyEvent:
        if ch == "" or ch == CTRL_C or ch == self.quit_key:
            return KeyEvent.QUIT
        if ch == self.pause_key:
            return KeyEvent.PAUSE
        return KeyEvent.OTHER

    def poll_event(self, max_wait: float) -> KeyEvent | None:
        if not self.stream.isatty():
            return self._poll(max_wait)

        import termios
        import tty

        fd = self.stream.fileno()
        old_settings = termios.tcgetattr(fd)
        try:
            tty.setraw(fd)
            return self._poll(max_wait)
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)

    def _poll(self, max_wait: float) -> KeyEvent | None:
        fd = self.stream.fileno()
        ready, _, _ = select.select([fd], [], [], max(0.0, max_wait))
        if not ready:
            return None
        data = os.read(fd, 1)
        return self.classify(data.decode("utf-8", errors="replace"))
