from __future__ import annotations

import math
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..models.preview import ParseError
from .text import clean, split_lines, tokenize

"""Row normalizer: tokens -> typed record, driven by a per-surface schema.

Rules:
- A line with fewer than MIN_FIELDS tokens is rejected before any field check.
- Required strings must be non-empty after cleaning.
- Optional numbers: blank -> None; unparsable or non-finite -> None (silent).
  Malformed numeric input never blocks the batch.
- Enums are matched case-insensitively; unknown values fall back to the
  field default.
- Status accepts synonyms (see normalize_status); anything else is "owned".
- Composed name: explicit name column wins, else name parts joined by single
  spaces; an empty result rejects the line.
- Tokens beyond the schema's columns are ignored.
"""

__all__ = [
    "FieldKind",
    "FieldSpec",
    "ReferenceSpec",
    "SurfaceSchema",
    "ParsedBatch",
    "MIN_FIELDS",
    "STATUS_OWNED",
    "STATUS_WISHLIST",
    "parse_optional_number",
    "normalize_status",
    "normalize_enum",
    "compose_name",
    "normalize",
    "parse_paste",
]

MIN_FIELDS = 2

STATUS_OWNED = "owned"
STATUS_WISHLIST = "wishlist"
_WISHLIST_SYNONYMS = frozenset({"wishlist", "wish list", "wish", "planned"})

# decimal notation, or an unsigned 0x / 0o / 0b integer literal
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_RADIX_RE = re.compile(r"0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")


class FieldKind(Enum):
    REQUIRED_STRING = "required_string"
    OPTIONAL_STRING = "optional_string"
    ENUM_STRING = "enum_string"
    OPTIONAL_NUMBER = "optional_number"
    STATUS = "status"


@dataclass(frozen=True)
class FieldSpec:
    """One positional paste column."""
    name: str  # record attribute
    kind: FieldKind
    label: str  # column name shown in the paste format hint
    allowed: tuple[str, ...] = ()  # ENUM_STRING canonical values
    default: Any = None  # ENUM_STRING fallback


@dataclass(frozen=True)
class ReferenceSpec:
    """Name-based foreign reference resolved against an existing collection."""
    field: str  # record attribute holding the free-text name
    fk_column: str  # payload column receiving the resolved id
    gear_type: str  # gear_items discriminator of the reference collection


@dataclass(frozen=True)
class SurfaceSchema:
    """Binding of the generic pipeline to one record shape."""
    name: str  # surface key, e.g. "reels"
    noun: str  # singular for messages, e.g. "reel"
    collection: str  # record store collection
    record_type: type
    fields: tuple[FieldSpec, ...]
    name_parts: tuple[str, ...] = ()
    name_field: str | None = None
    discriminator: dict[str, str] = field(default_factory=dict)
    references: tuple[ReferenceSpec, ...] = ()

    @property
    def labels(self) -> list[str]:
        return [f.label for f in self.fields]

    @property
    def format_hint(self) -> str:
        return " | ".join(self.labels)

    def label_for(self, field_name: str) -> str:
        for f in self.fields:
            if f.name == field_name:
                return f.label
        return field_name


@dataclass(frozen=True)
class ParsedBatch:
    records: list[tuple[int, Any]]  # (line number, record)
    errors: list[ParseError]


def parse_optional_number(token: str | None) -> float | None:
    """Parse a numeric token leniently.

    Blank -> None. Hex, octal and binary literals (``0x10``) are read as
    integers. Anything else that is not a finite decimal number -> None.
    """
    text = clean(token)
    if not text:
        return None
    if _RADIX_RE.fullmatch(text):
        return float(int(text, 0))
    if not _NUMBER_RE.fullmatch(text):
        return None
    value = float(text)
    if not math.isfinite(value):  # e.g. 1e999
        return None
    return value


def normalize_status(token: str | None) -> str:
    """Map a status token to owned / wishlist (default owned)."""
    value = clean(token).lower()
    if value == STATUS_OWNED:
        return STATUS_OWNED
    if value in _WISHLIST_SYNONYMS:
        return STATUS_WISHLIST
    return STATUS_OWNED


def normalize_enum(token: str | None, allowed: Sequence[str], default: Any) -> Any:
    """Case-insensitive match against ``allowed``; return the canonical spelling or ``default``."""
    value = clean(token).lower()
    if not value:
        return default
    for candidate in allowed:
        if candidate.lower() == value:
            return candidate
    return default


def compose_name(parts: Iterable[str | None]) -> str:
    return " ".join(p for p in (clean(x) for x in parts) if p)


def normalize(
    tokens: Sequence[str], schema: SurfaceSchema, line_number: int
) -> tuple[Any | None, ParseError | None]:
    """Normalize one tokenized line into ``schema.record_type``.

    Returns (record, None) on success or (None, ParseError) on rejection.
    """
    if len(tokens) < MIN_FIELDS:
        first, second = (schema.labels + ["", ""])[:2]
        return None, ParseError(
            line_number, f"needs at least two fields ({first} | {second})"
        )

    values: dict[str, Any] = {}
    for idx, spec in enumerate(schema.fields):
        token = clean(tokens[idx]) if idx < len(tokens) else ""
        if spec.kind is FieldKind.REQUIRED_STRING:
            if not token:
                return None, ParseError(line_number, f"missing {spec.label.lower()}")
            values[spec.name] = token
        elif spec.kind is FieldKind.OPTIONAL_STRING:
            values[spec.name] = token
        elif spec.kind is FieldKind.ENUM_STRING:
            values[spec.name] = normalize_enum(token, spec.allowed, spec.default)
        elif spec.kind is FieldKind.OPTIONAL_NUMBER:
            values[spec.name] = parse_optional_number(token)
        elif spec.kind is FieldKind.STATUS:
            values[spec.name] = normalize_status(token)
        else:  # pragma: no cover
            raise ValueError(f"unknown field kind: {spec.kind}")

    if schema.name_parts or schema.name_field:
        explicit = values.get(schema.name_field, "") if schema.name_field else ""
        name = explicit or compose_name(values.get(p) for p in schema.name_parts)
        if not name:
            parts = "/".join(schema.label_for(p) for p in schema.name_parts)
            return None, ParseError(line_number, f"{parts} produced empty name")
        values["name"] = name

    return schema.record_type(**values), None


def parse_paste(raw: str | None, schema: SurfaceSchema) -> ParsedBatch:
    """Run splitter -> tokenizer -> normalizer over the whole paste text.

    Errors are collected per line; a bad line never stops the following ones.
    """
    records: list[tuple[int, Any]] = []
    errors: list[ParseError] = []
    for raw_line in split_lines(raw):
        record, error = normalize(tokenize(raw_line.text), schema, raw_line.line_number)
        if error is not None:
            errors.append(error)
            continue
        records.append((raw_line.line_number, record))
    return ParsedBatch(records=records, errors=errors)
