from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Preview models for one bulk-paste batch.

A PreviewResult is recomputed in full from (raw text, reference data) on every
change; nothing here is patched incrementally.
"""

__all__ = [
    "ParseError",
    "PreviewRow",
    "Eligibility",
    "PreviewResult",
    "REASON_PARSE_ERRORS",
    "REASON_NO_ROWS",
    "REASON_UNRESOLVED",
]

REASON_PARSE_ERRORS = "parse_errors"
REASON_NO_ROWS = "no_rows"
REASON_UNRESOLVED = "unresolved_references"


@dataclass(frozen=True)
class ParseError:
    """Per-line parse failure. ``line`` is 1-based in the original input."""
    line: int
    message: str

    def __str__(self) -> str:
        return f"Line {self.line}: {self.message}"


@dataclass(frozen=True)
class PreviewRow:
    """Normalized record plus resolved foreign ids (fk column -> id or None)."""
    line: int
    record: Any  # ReelRecord | RodRecord | ComboPair
    resolved: dict[str, str | None] = field(default_factory=dict)

    @property
    def missing(self) -> bool:
        return any(v is None for v in self.resolved.values())

    @property
    def valid(self) -> bool:
        return not self.missing

    def to_row(self) -> dict[str, Any]:
        row = dict(self.record.to_row())
        row.update(self.resolved)
        return row


@dataclass(frozen=True)
class Eligibility:
    insert_eligible: bool
    reason: str | None = None


@dataclass(frozen=True)
class PreviewResult:
    surface: str
    rows: list[PreviewRow]
    errors: list[ParseError]
    eligibility: Eligibility

    @property
    def missing(self) -> int:
        return sum(1 for r in self.rows if r.missing)

    @property
    def insert_eligible(self) -> bool:
        return self.eligibility.insert_eligible
