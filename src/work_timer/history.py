"""Append-only session history stored as a small CSV file.

The first line is the header ``Work,Play,End``; every following line is one
finished session: work seconds, pause seconds and the unix time it ended.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from .engine import SessionSnapshot
from .errors import CorruptRecordError, PersistenceError

logger = logging.getLogger(__name__)

HEADER = ("Work", "Play", "End")


@dataclass(frozen=True)
class HistoryRecord:
    work_seconds: int
    pause_seconds: int
    end_unix_time: int

    @classmethod
    def from_snapshot(cls, snapshot: SessionSnapshot) -> HistoryRecord:
        return cls(
            work_seconds=snapshot.work_seconds,
            pause_seconds=snapshot.pause_seconds,
            end_unix_time=snapshot.end_unix_time,
        )

    def to_row(self) -> list[str]:
        return [str(self.work_seconds), str(self.pause_seconds), str(self.end_unix_time)]


@dataclass(frozen=True)
class HistoryCursor:
    """Position just after the last complete line consumed by a read."""

    offset: int = 0
    line_number: int = 0


@dataclass
class ReadResult:
    records: list[HistoryRecord] = field(default_factory=list)
    errors: list[CorruptRecordError] = field(default_factory=list)
    cursor: HistoryCursor = field(default_factory=HistoryCursor)


def parse_row(line_number: int, line: str) -> HistoryRecord:
    """Parse one data line into a HistoryRecord.

    Raises:
        CorruptRecordError: the line is not three non-negative integers, or
            its end time is not a representable instant.
    """
    fields = next(csv.reader([line]), [])
    if len(fields) != 3:
        raise CorruptRecordError(line_number, line, f"expected 3 fields, got {len(fields)}")

    values = []
    for raw in fields:
        raw = raw.strip()
        if not (raw.isascii() and raw.isdigit()):
            raise CorruptRecordError(line_number, line, f"not a non-negative integer: {raw!r}")
        values.append(int(raw))

    work, pause, end = values
    try:
        datetime.fromtimestamp(end)
    except (OverflowError, OSError, ValueError) as exc:
        raise CorruptRecordError(line_number, line, f"end time out of range: {exc}") from exc

    return HistoryRecord(work_seconds=work, pause_seconds=pause, end_unix_time=end)


def _is_header(line: str) -> bool:
    fields = next(csv.reader([line]), [])
    return tuple(f.strip() for f in fields) == HEADER


class HistoryStore:
    """Reads and appends session rows in a single history file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def ensure_initialized(self) -> bool:
        """Create the file with its header if it does not exist yet.

        Returns True when the file was created by this call.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(self.path, f"cannot create directory: {exc}") from exc

        try:
            with self.path.open("x", newline="", encoding="utf-8") as handle:
                csv.writer(handle, lineterminator="\n").writerow(HEADER)
        except FileExistsError:
            return False
        except OSError as exc:
            raise PersistenceError(self.path, f"cannot create history file: {exc}") from exc

        logger.info("Created history file %s", self.path)
        return True

    def _ends_with_newline(self) -> bool:
        with self.path.open("rb") as handle:
            handle.seek(-1, io.SEEK_END)
            return handle.read(1) == b"\n"

    def append(self, record: HistoryRecord) -> None:
        """Append one row and flush it before returning.

        A last line left without its newline is terminated first so the new
        row never merges into it.
        """
        try:
            with self.path.open("a", newline="", encoding="utf-8") as handle:
                writer = csv.writer(handle, lineterminator="\n")
                if handle.tell() == 0:
                    writer.writerow(HEADER)
                elif not self._ends_with_newline():
                    handle.write("\n")
                writer.writerow(record.to_row())
                handle.flush()
        except OSError as exc:
            raise PersistenceError(self.path, f"cannot append session: {exc}") from exc

        logger.debug("Appended %s to %s", record, self.path)

    def read_all(self) -> ReadResult:
        """Parse every row of the file. Corrupt rows are skipped and reported."""
        return self.read_since(HistoryCursor())

    def read_since(self, cursor: HistoryCursor) -> ReadResult:
        """Parse rows appended after a previous read's cursor.

        A trailing line without a newline is left unconsumed so that a row
        still being written is picked up complete by the next call.
        """
        result = ReadResult(cursor=cursor)
        try:
            with self.path.open("rb") as handle:
                handle.seek(cursor.offset)
                data = handle.read()
        except FileNotFoundError:
            return result
        except OSError as exc:
            raise PersistenceError(self.path, f"cannot read history file: {exc}") from exc

        offset = cursor.offset
        line_number = cursor.line_number
        for raw in io.BytesIO(data):
            if not raw.endswith(b"\n"):
                break
            offset += len(raw)
            line_number += 1
            line = raw.decode("utf-8", errors="replace").strip()

            if not line:
                continue
            if line_number == 1 and _is_header(line):
                continue

            try:
                result.records.append(parse_row(line_number, line))
            except CorruptRecordError as exc:
                logger.warning("Skipping corrupt history row in %s: %s", self.path, exc)
                result.errors.append(exc)

        result.cursor = HistoryCursor(offset=offset, line_number=line_number)
        return result
