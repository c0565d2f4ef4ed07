"""Bulk-paste parsing: splitter, tokenizer, normalizer and surface schemas."""

from .normalize import (
    ParsedBatch,
    SurfaceSchema,
    normalize,
    normalize_status,
    parse_optional_number,
    parse_paste,
)
from .surfaces import COMBOS, REELS, RODS, SURFACES, get_surface
from .text import split_lines, tokenize

__all__ = [
    "ParsedBatch",
    "SurfaceSchema",
    "normalize",
    "normalize_status",
    "parse_optional_number",
    "parse_paste",
    "split_lines",
    "tokenize",
    "REELS",
    "RODS",
    "COMBOS",
    "SURFACES",
    "get_surface",
]
