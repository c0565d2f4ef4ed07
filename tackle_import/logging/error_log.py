from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import PARSE_ERROR, RESOLUTION_MISS, ErrorRecord
from ..models.preview import PreviewResult

"""Structured error log (JSON Lines).

- fixed ErrorRecord schema, no extra keys
- one `logs/errors-YYYYMMDD-HHMMSS.log` (UTC) per run, created on first flush
- records are buffered and written once at the end of a run
- single-threaded use only
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "preview_error_records",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


def preview_error_records(preview: PreviewResult, source: str) -> list[ErrorRecord]:
    """ErrorRecords for every parse error and unresolved row in ``preview``."""
    records = [
        ErrorRecord.create(preview.surface, source, e.line, PARSE_ERROR, e.message)
        for e in preview.errors
    ]
    for row in preview.rows:
        for column, resolved in row.resolved.items():
            if resolved is None:
                records.append(
                    ErrorRecord.create(
                        preview.surface, source, row.line, RESOLUTION_MISS, f"no match for {column}"
                    )
                )
    return records


class ErrorLogBuffer:
    """In-memory buffer of ErrorRecords; flush() appends them as JSON Lines."""

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir or LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def extend(self, records: Iterable[ErrorRecord]) -> None:
        self._records.extend(records)

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the log path, or None if nothing was written."""
        if not self._records:
            return None
        fp = self.file_path
        fp.parent.mkdir(parents=True, exist_ok=True)
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
