from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Processing result models for a bulk-paste CLI run.

Aggregates per-batch outcomes into the numbers rendered on the SUMMARY line.
"""


@dataclass(frozen=True)
class BatchStat:
    """Per-source processing statistics (internal helper for ProcessingResult)."""
    source_name: str
    status: str  # previewed/committed/rejected/failed
    rows: int
    inserted_rows: int
    elapsed_seconds: float


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results for one run over one or more paste sources."""
    committed_batches: int
    rejected_batches: int
    failed_batches: int
    previewed_batches: int
    total_rows: int  # normalized rows across all sources
    total_inserted_rows: int
    parse_errors: int
    missing: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    batch_stats: list[BatchStat] | None = None

    @property
    def total_batches(self) -> int:
        return (
            self.committed_batches
            + self.rejected_batches
            + self.failed_batches
            + self.previewed_batches
        )
