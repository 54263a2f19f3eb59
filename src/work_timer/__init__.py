"""Terminal work/break timer with a CSV session history and daily reports."""

from .aggregate import (
    DayBucket,
    aggregate_last_x_days,
    aggregate_range,
    aggregate_today,
    day_bucket_index,
    local_day,
    sum_buckets,
)
from .driver import KeyEvent, SessionOutcome, TickDriver
from .engine import SessionSnapshot, TimerEngine, TimerMode, format_hms
from .errors import (
    ClockError,
    CorruptRecordError,
    InvalidRangeError,
    MissingHomeDirectoryError,
    PersistenceError,
    WorkTimerError,
)
from .history import HistoryCursor, HistoryRecord, HistoryStore, ReadResult

__all__ = [
    "ClockError",
    "CorruptRecordError",
    "DayBucket",
    "HistoryCursor",
    "HistoryRecord",
    "HistoryStore",
    "InvalidRangeError",
    "KeyEvent",
    "MissingHomeDirectoryError",
    "PersistenceError",
    "ReadResult",
    "SessionOutcome",
    "SessionSnapshot",
    "TickDriver",
    "TimerEngine",
    "TimerMode",
    "WorkTimerError",
    "aggregate_last_x_days",
    "aggregate_range",
    "aggregate_today",
    "day_bucket_index",
    "format_hms",
    "local_day",
    "sum_buckets",
]
