"""Bucketing of history records into local calendar days.

A record belongs to the local day of its end time, evaluated when the query
runs. The same record can land on a different day after a timezone or DST
change; that is the intended behavior.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable

from .errors import InvalidRangeError
from .history import HistoryRecord


@dataclass
class DayBucket:
    day: date
    work_seconds: int = 0
    pause_seconds: int = 0

    def add(self, record: HistoryRecord) -> None:
        self.work_seconds += record.work_seconds
        self.pause_seconds += record.pause_seconds


def local_day(end_unix_time: int) -> date:
    """Local calendar day of a stored unix time."""
    return datetime.fromtimestamp(end_unix_time).date()


def day_bucket_index(reference_day: date, x: int, record_day: date) -> int | None:
    """Offset of record_day within the x days ending at reference_day.

    0 is reference_day itself, x - 1 the oldest day of the window. Days
    outside [reference_day - (x - 1), reference_day] give None.
    """
    offset = (reference_day - record_day).days
    if 0 <= offset < x:
        return offset
    return None


def aggregate_last_x_days(
    records: Iterable[HistoryRecord], x: int, today: date | None = None
) -> list[DayBucket]:
    """Per-day totals for the last x days, index 0 being today."""
    if x < 1:
        raise InvalidRangeError(f"number of days must be at least 1, got {x}")

    reference = today or date.today()
    buckets = [DayBucket(day=reference - timedelta(days=i)) for i in range(x)]
    for record in records:
        index = day_bucket_index(reference, x, local_day(record.end_unix_time))
        if index is not None:
            buckets[index].add(record)
    return buckets


def aggregate_today(records: Iterable[HistoryRecord], today: date | None = None) -> DayBucket:
    return aggregate_last_x_days(records, 1, today=today)[0]


def sum_buckets(buckets: Iterable[DayBucket]) -> tuple[int, int]:
    work_total = 0
    pause_total = 0
    for bucket in buckets:
        work_total += bucket.work_seconds
        pause_total += bucket.pause_seconds
    return work_total, pause_total


def aggregate_range(
    records: Iterable[HistoryRecord], start_date: date, end_date: date
) -> dict[date, DayBucket]:
    """Per-day totals for every day in [start_date, end_date], oldest first.

    Raises:
        InvalidRangeError: start_date is after end_date.
    """
    if start_date > end_date:
        raise InvalidRangeError(
            f"start date {start_date.isoformat()} is after end date {end_date.isoformat()}"
        )

    span = (end_date - start_date).days + 1
    buckets = {}
    for i in range(span):
        day = start_date + timedelta(days=i)
        buckets[day] = DayBucket(day=day)

    for record in records:
        bucket = buckets.get(local_day(record.end_unix_time))
        if bucket is not None:
            bucket.add(record)
    return buckets
