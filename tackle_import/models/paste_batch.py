from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

"""PasteBatch domain model and BatchStatus enum.

A PasteBatch is the processing context for one paste source (file or stdin)
during a CLI run, from reading through preview to an optional commit.
"""


class BatchStatus(Enum):
    """Status for PasteBatch processing.

    State transitions: pending → previewed → (committed | rejected | failed)

    - PENDING: source read but not yet parsed
    - PREVIEWED: parsed, preview computed, commit not requested
    - COMMITTED: batch inserted into the record store
    - REJECTED: batch not insert-eligible, nothing sent to the store
    - FAILED: commit attempted and refused by identity or store
    """
    PENDING = "pending"
    PREVIEWED = "previewed"
    COMMITTED = "committed"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(frozen=True)
class PasteBatch:
    """Outcome of processing one paste source."""
    name: str                           # file name or "<stdin>"
    surface: str                        # reels / rods / combos
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: BatchStatus = BatchStatus.PENDING
    rows: int = 0                       # normalized rows in preview
    inserted_rows: int = 0              # rows committed
    parse_errors: int = 0
    missing: int = 0                    # rows with unresolved references
    error: str | None = None            # commit failure / rejection reason
