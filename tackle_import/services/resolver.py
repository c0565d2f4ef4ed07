from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..ingest.normalize import SurfaceSchema
from ..models.preview import PreviewRow
from ..models.records import ReferenceRecord

"""Cross-reference resolution for name-based foreign keys (combo pairing).

Existing rods / reels are indexed by MatchableKey (lowercased,
whitespace-collapsed display name, falling back to "brand model"). Lookups
are exact and case-insensitive: no fuzzy or partial matching. A miss yields
None and the row is reported as missing, never dropped.

Indexes are built once per reference load and reused for every line of the
batch. Colliding keys: last write wins.
"""

__all__ = [
    "ReferenceData",
    "matchable_key",
    "build_key_index",
    "resolve",
    "resolve_rows",
]

_WHITESPACE_RE = re.compile(r"\s+")


def _collapse(value: Any) -> str:
    return _WHITESPACE_RE.sub(" ", str(value or "")).strip()


@dataclass(frozen=True)
class ReferenceData:
    """Key indexes per reference gear_type ("rod" -> {key: id})."""
    indexes: dict[str, dict[str, str]] = field(default_factory=dict)

    def index_for(self, gear_type: str) -> dict[str, str]:
        return self.indexes.get(gear_type, {})

    @classmethod
    def from_records(cls, records: Mapping[str, Iterable[ReferenceRecord]]) -> ReferenceData:
        return cls(indexes={k: build_key_index(v) for k, v in records.items()})


def matchable_key(record: ReferenceRecord) -> str:
    """Derive the lookup key for one reference record.

    Prefers ``name``; if blank, falls back to "brand model".
    """
    name = _collapse(record.name)
    if name:
        return name.lower()
    parts = [p for p in (_collapse(record.brand), _collapse(record.model)) if p]
    return " ".join(parts).lower()


def build_key_index(records: Iterable[ReferenceRecord]) -> dict[str, str]:
    """Build MatchableKey -> id map. Records producing an empty key are skipped."""
    index: dict[str, str] = {}
    for record in records:
        key = matchable_key(record)
        if not key:
            continue
        index[key] = record.id  # last write wins
    return index


def resolve(name: str | None, index: Mapping[str, str]) -> str | None:
    """Exact, case-insensitive lookup of a pasted name."""
    key = _collapse(name).lower()
    if not key:
        return None
    return index.get(key)


def resolve_rows(
    records: Sequence[tuple[int, Any]],
    schema: SurfaceSchema,
    references: ReferenceData | None,
) -> list[PreviewRow]:
    """Attach resolved foreign ids to normalized records.

    Surfaces without references get rows with an empty ``resolved`` mapping.
    """
    refs = references or ReferenceData()
    rows: list[PreviewRow] = []
    for line_number, record in records:
        resolved: dict[str, str | None] = {}
        for spec in schema.references:
            resolved[spec.fk_column] = resolve(
                getattr(record, spec.field), refs.index_for(spec.gear_type)
            )
        rows.append(PreviewRow(line=line_number, record=record, resolved=resolved))
    return rows
