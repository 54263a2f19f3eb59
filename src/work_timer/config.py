"""Configuration resolved from command-line options and environment variables."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path

import click

from .driver import DEFAULT_TICK_SECONDS
from .errors import MissingHomeDirectoryError

DEFAULT_FILENAME = ".timer_data"

ENV_DATA_FILE = "WORK_TIMER_DATA_FILE"
ENV_VERBOSE = "WORK_TIMER_VERBOSE"
ENV_PAUSE_KEY = "WORK_TIMER_PAUSE_KEY"
ENV_QUIT_KEY = "WORK_TIMER_QUIT_KEY"
ENV_TICK_SECONDS = "WORK_TIMER_TICK_SECONDS"


def default_history_path() -> Path:
    """~/.timer_data, or MissingHomeDirectoryError when there is no home."""
    try:
        home = Path.home()
    except (KeyError, RuntimeError) as exc:
        raise MissingHomeDirectoryError(f"cannot determine home directory: {exc}") from exc
    return home / DEFAULT_FILENAME


def resolve_history_path(override: str | Path | None = None) -> Path:
    """Option, then WORK_TIMER_DATA_FILE, then the home directory default."""
    if override:
        return Path(override).expanduser()
    env_path = os.environ.get(ENV_DATA_FILE)
    if env_path:
        return Path(env_path).expanduser()
    return default_history_path()


def _single_key(value: str, name: str) -> str:
    # Keys are read one byte at a time.
    if len(value) != 1 or not value.isascii() or not value.isprintable():
        raise click.BadParameter(f"must be a single printable ASCII character, got {value!r}", param_hint=name)
    return value


@dataclass
class Settings:
    """Settings for one CLI invocation.

    Only history location and verbosity are needed by every command; keys and
    the tick period are checked by validate(), which the timer calls.
    """

    data_file: str | None = None
    verbose: bool = False
    pause_key: str = "p"
    quit_key: str = "q"
    tick_raw: str | None = None

    @classmethod
    def from_env(cls, data_file: str | None = None, verbose: bool = False) -> Settings:
        return cls(
            data_file=data_file,
            verbose=verbose or os.environ.get(ENV_VERBOSE, "false").lower() == "true",
            pause_key=os.environ.get(ENV_PAUSE_KEY, "p"),
            quit_key=os.environ.get(ENV_QUIT_KEY, "q"),
            tick_raw=os.environ.get(ENV_TICK_SECONDS) or None,
        )

    @property
    def tick_seconds(self) -> float:
        if self.tick_raw is None:
            return DEFAULT_TICK_SECONDS
        try:
            return float(self.tick_raw)
        except ValueError as exc:
            raise click.ClickException(f"{ENV_TICK_SECONDS} must be a number, got {self.tick_raw!r}") from exc

    def validate(self) -> None:
        _single_key(self.pause_key, "pause key")
        _single_key(self.quit_key, "quit key")
        if self.pause_key == self.quit_key:
            raise click.ClickException("Pause and quit keys must differ.")
        tick = self.tick_seconds
        if not (math.isfinite(tick) and tick > 0):
            raise click.ClickException("Tick period must be a positive number.")

    def history_path(self) -> Path:
        return resolve_history_path(self.data_file)
