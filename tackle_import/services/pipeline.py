from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import pandas as pd

from ..ingest.normalize import SurfaceSchema, parse_paste
from ..models.preview import (
    REASON_NO_ROWS,
    REASON_PARSE_ERRORS,
    REASON_UNRESOLVED,
    Eligibility,
    ParseError,
    PreviewResult,
    PreviewRow,
)
from .resolver import ReferenceData, resolve_rows

"""Preview pipeline: raw text -> validated preview.

compute_preview() is a pure function of (raw text, surface, reference data).
Callers invoke it again on every relevant change; there is no incremental
state. The helpers below format a preview for display (bounded error list,
tabular row preview).
"""

__all__ = [
    "validate",
    "compute_preview",
    "bounded_messages",
    "preview_frame",
    "render_preview_table",
]


def validate(
    rows: Sequence[PreviewRow],
    errors: Sequence[ParseError],
    requires_resolution: bool = False,
) -> Eligibility:
    """Decide whether a batch may be committed.

    Requires zero parse errors, at least one row and, for surfaces with
    references, zero rows with unresolved ids.
    """
    if errors:
        return Eligibility(insert_eligible=False, reason=REASON_PARSE_ERRORS)
    if not rows:
        return Eligibility(insert_eligible=False, reason=REASON_NO_ROWS)
    if requires_resolution and any(r.missing for r in rows):
        return Eligibility(insert_eligible=False, reason=REASON_UNRESOLVED)
    return Eligibility(insert_eligible=True)


def compute_preview(
    raw_text: str | None,
    schema: SurfaceSchema,
    references: ReferenceData | None = None,
) -> PreviewResult:
    parsed = parse_paste(raw_text, schema)
    rows = resolve_rows(parsed.records, schema, references)
    eligibility = validate(rows, parsed.errors, requires_resolution=bool(schema.references))
    return PreviewResult(
        surface=schema.name,
        rows=rows,
        errors=list(parsed.errors),
        eligibility=eligibility,
    )


def bounded_messages(errors: Sequence[ParseError], limit: int = 20) -> list[str]:
    """First ``limit`` error messages plus a "(+ N more)" marker if truncated."""
    messages = [str(e) for e in errors[:limit]]
    remainder = len(errors) - limit
    if remainder > 0:
        messages.append(f"(+ {remainder} more)")
    return messages


def _display_value(value: Any) -> Any:
    if value is None or value == "":
        return "—"
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def preview_frame(preview: PreviewResult, schema: SurfaceSchema) -> pd.DataFrame:
    """Tabular view of the preview rows (one row per normalized line)."""
    records: list[dict[str, Any]] = []
    for row in preview.rows:
        data: dict[str, Any] = {"line": row.line}
        if schema.name_parts or schema.name_field:
            data["name"] = row.record.name
        for spec in schema.fields:
            if spec.name in schema.name_parts:
                continue
            data[spec.label] = _display_value(getattr(row.record, spec.name))
        if schema.references:
            data["match"] = "OK" if row.valid else "Missing"
        records.append(data)
    return pd.DataFrame.from_records(records)


def render_preview_table(preview: PreviewResult, schema: SurfaceSchema, limit: int = 50) -> str:
    """Render at most ``limit`` preview rows as a fixed-width table."""
    if not preview.rows:
        return ""
    frame = preview_frame(preview, schema)
    text = frame.head(limit).to_string(index=False)
    if len(frame) > limit:
        text += f"\nShowing first {limit}…"
    return text
