from __future__ import annotations

import re
from dataclasses import dataclass

"""Paste text splitting and tokenizing.

- One record per line (CRLF or LF). Blank lines and lines starting with '#'
  are skipped.
- Line numbers are 1-based positions in the original, unfiltered text so that
  error messages point at what the user sees in the editor.
- Delimiter is chosen per line by presence: '|' first, then tab, then ','.
  There is no escaping; a delimiter cannot appear inside a value.
"""

__all__ = [
    "RawLine",
    "split_lines",
    "tokenize",
    "clean",
    "DELIMITERS",
]

DELIMITERS = ("|", "\t", ",")
COMMENT_PREFIX = "#"

_LINE_BREAK_RE = re.compile(r"\r?\n")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class RawLine:
    line_number: int  # 1-based, original input position
    text: str  # trimmed, non-empty, not a comment


def split_lines(raw: str | None) -> list[RawLine]:
    """Split raw paste text into numbered logical lines.

    Parameters
    ----------
    raw: pasted text (None is treated as empty)

    Returns
    -------
    list[RawLine]: kept lines in input order
    """
    if not raw:
        return []
    lines: list[RawLine] = []
    for idx, part in enumerate(_LINE_BREAK_RE.split(raw), start=1):
        text = part.strip()
        if not text or text.startswith(COMMENT_PREFIX):
            continue
        lines.append(RawLine(line_number=idx, text=text))
    return lines


def tokenize(line_text: str) -> list[str]:
    """Split one line into trimmed tokens on its highest-priority delimiter."""
    for delimiter in DELIMITERS[:-1]:
        if delimiter in line_text:
            return [p.strip() for p in line_text.split(delimiter)]
    return [p.strip() for p in line_text.split(DELIMITERS[-1])]


def clean(value: object) -> str:
    """Trim and collapse inner whitespace to single spaces (None -> "")."""
    if value is None:
        return ""
    return _WHITESPACE_RE.sub(" ", str(value)).strip()
