from __future__ import annotations

import re
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

"""DB batch insert.

Uses psycopg2.extras.execute_values for a single multi-row INSERT per batch.
Transaction boundaries (COMMIT / ROLLBACK) belong to the caller.
Identifiers are validated before being quoted into SQL; values always go
through driver parameters.
"""

try:  # pragma: no cover - optional until psycopg2 present at runtime
    from psycopg2.extras import execute_values
except Exception:  # pragma: no cover
    execute_values = None  # type: ignore

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class BatchInsertError(Exception):
    pass


@dataclass(frozen=True)
class BatchMetrics:
    """Timing for a single batch insert operation."""
    batch_size: int  # Number of rows in this batch
    elapsed_seconds: float  # Time spent on execute_values call
    start_time: float  # Start timestamp (time.time())
    end_time: float  # End timestamp (time.time())


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int
    returned_values: list[tuple[Any, ...]] | None = None

    @property
    def inserted_ids(self) -> list[Any]:
        return [rv[0] for rv in (self.returned_values or []) if rv]


def check_identifier(name: str) -> str:
    """Return ``name`` if it is a plain SQL identifier, else raise BatchInsertError."""
    if not isinstance(name, str) or not _IDENTIFIER_RE.match(name):
        raise BatchInsertError(f"invalid identifier: {name!r}")
    return name


def batch_insert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    returning: str | None = None,
    page_size: int = 1000,
    metrics_callback: Callable[[BatchMetrics], None] | None = None,
) -> InsertResult:
    """Perform a batched INSERT using psycopg2.extras.execute_values.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: target table
    columns: insert columns, in the order of each row's values
    rows: row value sequences
    returning: column name to return (e.g. "id"); None for no RETURNING clause
    page_size: execute_values page size
    metrics_callback: receives BatchMetrics after the statement runs.
        Not invoked when ``rows`` is empty (the function returns early).
    """
    if execute_values is None:
        raise BatchInsertError("psycopg2 not available")

    rows_list = list(rows)
    if not rows_list:
        return InsertResult(inserted_rows=0, returned_values=[] if returning else None)

    check_identifier(table)
    cols_sql = ",".join(f'"{check_identifier(c)}"' for c in columns)
    sql = f'INSERT INTO "{table}" ({cols_sql}) VALUES %s'
    if returning:
        sql += f' RETURNING "{check_identifier(returning)}"'

    start_time = time.time()
    try:
        # fetch=True collects RETURNING rows across all pages
        returned = execute_values(
            cursor, sql, rows_list, page_size=page_size, fetch=bool(returning)
        )
    except Exception as e:
        raise BatchInsertError(str(e)) from e
    finally:
        end_time = time.time()
        if metrics_callback is not None:
            metrics_callback(
                BatchMetrics(
                    batch_size=len(rows_list),
                    elapsed_seconds=end_time - start_time,
                    start_time=start_time,
                    end_time=end_time,
                )
            )

    if returning:
        return InsertResult(inserted_rows=len(rows_list), returned_values=list(returned or []))
    return InsertResult(inserted_rows=len(rows_list), returned_values=None)
