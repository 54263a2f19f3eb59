"""Error taxonomy for the timer and history commands."""

from __future__ import annotations


class WorkTimerError(Exception):
    """Base class for every error raised by work_timer."""


class PersistenceError(WorkTimerError):
    """The history file could not be created, opened, read or written."""

    def __init__(self, path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class CorruptRecordError(WorkTimerError):
    """A single history row could not be parsed."""

    def __init__(self, line_number: int, line: str, reason: str) -> None:
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"line {line_number}: {reason} ({line!r})")


class InvalidRangeError(WorkTimerError):
    """A query range is empty or reversed."""


class MissingHomeDirectoryError(WorkTimerError):
    """The default history location could not be determined."""


class ClockError(WorkTimerError):
    """The system clock could not be read or went backwards."""
