from __future__ import annotations

import logging
import math
import os
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any, Protocol

from ..models.config_models import DatabaseConfig
from .batch_insert import BatchMetrics, InsertResult, batch_insert, check_identifier

"""Record store: named-collection read / batch insert over the backend's Postgres.

The pipeline only depends on the RecordStore protocol; PgRecordStore is the
psycopg2 implementation and is constructed explicitly by the CLI (no module
level client). Each operation borrows its own pooled connection so the rod
and reel reference queries can run concurrently.

Connection resolution (highest first):
    1. DATABASE_URL / PGDSN
    2. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
    3. config `database` section
"""

try:  # pragma: no cover - import guard
    import psycopg2
    import psycopg2.errors
    from psycopg2.extras import RealDictCursor
    from psycopg2.pool import ThreadedConnectionPool
except Exception:  # pragma: no cover
    psycopg2 = None  # type: ignore
    RealDictCursor = None  # type: ignore
    ThreadedConnectionPool = None  # type: ignore

logger = logging.getLogger(__name__)

__all__ = [
    "RecordStore",
    "RecordStoreError",
    "StoreTimeoutError",
    "PgRecordStore",
    "resolve_dsn",
]


class RecordStoreError(Exception):
    """The record store rejected a read or write (constraint, network, permission)."""


class StoreTimeoutError(RecordStoreError):
    """A record store call exceeded the request timeout."""


class RecordStore(Protocol):
    def query(
        self,
        collection: str,
        filters: Mapping[str, Any] | None = None,
        order_by: Sequence[str] | None = None,
        columns: Sequence[str] | None = None,
    ) -> list[dict[str, Any]]:
        """Rows of ``collection`` matching equality ``filters``.

        ``order_by`` entries are column names, "-" prefix for descending.
        """
        ...

    def insert_batch(self, collection: str, rows: Sequence[Mapping[str, Any]]) -> InsertResult:
        """Insert all rows in one atomic request."""
        ...


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


def _is_timeout(exc: BaseException | None) -> bool:
    while exc is not None:
        if psycopg2 is not None and isinstance(exc, psycopg2.errors.QueryCanceled):
            return True
        if "timeout expired" in str(exc):  # libpq connect_timeout
            return True
        exc = exc.__cause__
    return False


def _wrap(exc: BaseException) -> RecordStoreError:
    if _is_timeout(exc):
        return StoreTimeoutError(f"timed out: {exc}")
    return RecordStoreError(str(exc))


def _order_sql(order_by: Sequence[str] | None) -> str:
    if not order_by:
        return ""
    parts = []
    for entry in order_by:
        desc = entry.startswith("-")
        col = check_identifier(entry[1:] if desc else entry)
        parts.append(f'"{col}" {"DESC" if desc else "ASC"}')
    return " ORDER BY " + ", ".join(parts)


class PgRecordStore:
    """psycopg2-backed RecordStore.

    ``statement_timeout`` and ``connect_timeout`` come from the request
    timeout so a hung backend surfaces as StoreTimeoutError.
    """

    def __init__(self, pool: Any, page_size: int = 1000) -> None:
        self._pool = pool
        self._page_size = page_size

    @classmethod
    def connect(
        cls, db_cfg: DatabaseConfig, timeout_seconds: float = 8.0, max_connections: int = 4
    ) -> PgRecordStore:
        if ThreadedConnectionPool is None:
            raise RecordStoreError("psycopg2 not available")
        timeout_ms = int(timeout_seconds * 1000)
        try:
            pool = ThreadedConnectionPool(
                1,
                max_connections,
                dsn=resolve_dsn(db_cfg),
                connect_timeout=max(1, math.ceil(timeout_seconds)),
                options=f"-c statement_timeout={timeout_ms}",
            )
        except Exception as e:
            raise _wrap(e) from e
        return cls(pool)

    def close(self) -> None:
        if self._pool is not None:
            try:
                self._pool.closeall()
            finally:
                self._pool = None

    def __enter__(self) -> PgRecordStore:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    @contextmanager
    def _connection(self) -> Iterator[Any]:
        if self._pool is None:
            raise RecordStoreError("record store is closed")
        conn = self._pool.getconn()
        try:
            # `with conn` commits on success, rolls back on exception
            with conn:
                yield conn
        finally:
            self._pool.putconn(conn)

    def query(
        self,
        collection: str,
        filters: Mapping[str, Any] | None = None,
        order_by: Sequence[str] | None = None,
        columns: Sequence[str] | None = None,
    ) -> list[dict[str, Any]]:
        table = check_identifier(collection)
        cols_sql = ",".join(f'"{check_identifier(c)}"' for c in columns) if columns else "*"
        sql = f'SELECT {cols_sql} FROM "{table}"'
        params: list[Any] = []
        if filters:
            clauses = []
            for col, value in filters.items():
                clauses.append(f'"{check_identifier(col)}" = %s')
                params.append(value)
            sql += " WHERE " + " AND ".join(clauses)
        sql += _order_sql(order_by)
        try:
            with self._connection() as conn:
                with conn.cursor(cursor_factory=RealDictCursor) as cur:
                    cur.execute(sql, params)
                    rows = [dict(r) for r in cur.fetchall()]
        except RecordStoreError:
            raise
        except Exception as e:
            raise _wrap(e) from e
        logger.debug("query collection=%s filters=%s rows=%d", collection, dict(filters or {}), len(rows))
        return rows

    def insert_batch(self, collection: str, rows: Sequence[Mapping[str, Any]]) -> InsertResult:
        rows = list(rows)
        if not rows:
            return InsertResult(inserted_rows=0, returned_values=[])
        columns: list[str] = []
        for row in rows:
            for col in row:
                if col not in columns:
                    columns.append(col)
        values = [[row.get(c) for c in columns] for row in rows]

        def _metrics(m: BatchMetrics) -> None:
            logger.debug(
                "insert collection=%s batch_size=%d elapsed=%.3fs", collection, m.batch_size, m.elapsed_seconds
            )

        try:
            with self._connection() as conn:
                with conn.cursor() as cur:
                    return batch_insert(
                        cur,
                        table=collection,
                        columns=columns,
                        rows=values,
                        returning="id",
                        page_size=self._page_size,
                        metrics_callback=_metrics,
                    )
        except RecordStoreError:
            raise
        except Exception as e:
            raise _wrap(e) from e
