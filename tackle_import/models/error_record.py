from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the structured error log.

Every parse error, resolution miss and commit failure of a run is written as
one JSON line. ``line=-1`` marks batch-level errors that have no source line.
"""

__all__ = [
    "ErrorRecord",
    "PARSE_ERROR",
    "RESOLUTION_MISS",
    "IDENTITY_ERROR",
    "REMOTE_ERROR",
    "TIMEOUT_ERROR",
]

PARSE_ERROR = "PARSE_ERROR"
RESOLUTION_MISS = "RESOLUTION_MISS"
IDENTITY_ERROR = "IDENTITY_ERROR"
REMOTE_ERROR = "REMOTE_ERROR"
TIMEOUT_ERROR = "TIMEOUT_ERROR"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        surface: Ingestion surface (reels / rods / combos)
        source: Paste source name (file name or "<stdin>")
        line: 1-based line in the original paste text, -1 for batch-level errors
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: User-facing message
    """
    timestamp: str
    surface: str
    source: str
    line: int
    error_type: str
    message: str

    @staticmethod
    def create(surface: str, source: str, line: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            surface=surface,
            source=source,
            line=line,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # no extra keys: dataclass -> dict -> json
        return json.dumps(asdict(self), ensure_ascii=False)
