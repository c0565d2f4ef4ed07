from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import TextIO

from ..db.record_store import RecordStore, RecordStoreError
from ..identity import NOT_SIGNED_IN, IdentityProvider
from ..ingest.normalize import SurfaceSchema
from ..logging.error_log import ErrorLogBuffer, preview_error_records
from ..models.config_models import AppConfig
from ..models.error_record import REMOTE_ERROR, ErrorRecord
from ..models.paste_batch import BatchStatus, PasteBatch
from ..models.preview import REASON_NO_ROWS, PreviewResult
from ..models.processing_result import BatchStat, ProcessingResult
from .committer import REFUSAL_MESSAGES
from .pipeline import bounded_messages, render_preview_table
from .progress import ProgressTracker
from .references import load_references
from .resolver import ReferenceData
from .session import BulkSession

"""Run orchestration for the CLI.

Each paste source (file or stdin) is one batch: preview, then optionally a
single atomic commit. Reference collections are loaded once per run and
shared by all batches. A failed or rejected batch does not stop the next one.
"""

logger = logging.getLogger(__name__)

STDIN_NAME = "<stdin>"


class ProcessingError(Exception):
    """Fatal error that prevents the run from starting."""


@dataclass(frozen=True)
class PasteSource:
    name: str
    text: str


def read_paste_sources(paths: Sequence[str], stdin: TextIO | None = None) -> list[PasteSource]:
    """Read every paste source; "-" reads stdin.

    Raises:
        ProcessingError: a file is missing, is a directory, or can't be read
    """
    sources: list[PasteSource] = []
    for raw in paths:
        if raw == "-":
            sources.append(PasteSource(name=STDIN_NAME, text=(stdin or sys.stdin).read()))
            continue
        path = Path(raw)
        if not path.exists():
            raise ProcessingError(f"paste file not found: {path}")
        if path.is_dir():
            raise ProcessingError(f"paste path is a directory: {path}")
        try:
            sources.append(PasteSource(name=path.name, text=path.read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError) as e:
            raise ProcessingError(f"error reading {path}: {e}") from e
    return sources


def _load_run_references(
    schema: SurfaceSchema,
    store: RecordStore | None,
    identity: IdentityProvider,
    config: AppConfig,
) -> ReferenceData:
    if not schema.references:
        return ReferenceData()
    if store is None:
        logger.warning("no record store: %s references not loaded, every row will be missing", schema.name)
        return ReferenceData()
    user = identity.get_current_user()
    if user is None:
        raise ProcessingError(NOT_SIGNED_IN)
    try:
        return load_references(store, schema, user, config.request_timeout_seconds)
    except RecordStoreError as e:
        raise ProcessingError(f"failed to load references: {e}") from e


def format_preview_report(
    preview: PreviewResult, schema: SurfaceSchema, config: AppConfig, source_name: str
) -> str:
    lines = [f"== {source_name} ({schema.name}) =="]
    counts = f"Preview: {len(preview.rows)} {schema.noun}(s)"
    if schema.references:
        counts += f" • Missing matches: {preview.missing}"
    lines.append(counts)
    if preview.errors:
        lines.append("Parse errors:")
        lines.extend(f"  {m}" for m in bounded_messages(preview.errors, config.error_display_limit))
    table = render_preview_table(preview, schema, config.preview_limit)
    if table:
        lines.append(table)
    return "\n".join(lines)


def process_all(
    schema: SurfaceSchema,
    sources: Sequence[PasteSource],
    config: AppConfig,
    identity: IdentityProvider,
    store: RecordStore | None = None,
    *,
    commit: bool = False,
    error_log: ErrorLogBuffer | None = None,
    out: Callable[[str], None] | None = None,
) -> ProcessingResult:
    """Preview (and optionally commit) every paste source.

    Args:
        schema: ingestion surface
        sources: paste sources, one batch each
        config: application config
        identity: identity provider for reference loading and commit
        store: record store (None = preview-only mode)
        commit: commit insert-eligible batches
        error_log: structured error log buffer, flushed once at the end
        out: report sink (defaults to the progress-safe writer)

    Raises:
        ProcessingError: references could not be loaded
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    references = _load_run_references(schema, store, identity, config)

    batches: list[PasteBatch] = []
    stats: list[BatchStat] = []
    with ProgressTracker(len(sources)) as progress:
        writer = out or progress.write
        for source in sources:
            progress.start(source.name)
            batch = _process_single_source(
                source, schema, config, identity, store, references, commit, error_log, writer
            )
            batches.append(batch)
            elapsed = (
                (batch.end_time - batch.start_time).total_seconds()
                if batch.start_time and batch.end_time
                else 0.0
            )
            stats.append(
                BatchStat(
                    source_name=batch.name,
                    status=batch.status.value,
                    rows=batch.rows,
                    inserted_rows=batch.inserted_rows,
                    elapsed_seconds=elapsed,
                )
            )
            progress.finish(status=batch.status.value, rows=batch.rows)

    try:
        path = error_log.flush()
        if path is not None:
            logger.info("error log written: %s", path)
    except OSError as e:
        # the run result stands even if the error log can't be written
        logger.warning("failed to write error log: %s", e)

    end_time = datetime.now(UTC)

    def _count(status: BatchStatus) -> int:
        return sum(1 for b in batches if b.status is status)

    return ProcessingResult(
        committed_batches=_count(BatchStatus.COMMITTED),
        rejected_batches=_count(BatchStatus.REJECTED),
        failed_batches=_count(BatchStatus.FAILED),
        previewed_batches=_count(BatchStatus.PREVIEWED),
        total_rows=sum(b.rows for b in batches),
        total_inserted_rows=sum(b.inserted_rows for b in batches),
        parse_errors=sum(b.parse_errors for b in batches),
        missing=sum(b.missing for b in batches),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        batch_stats=stats,
    )


def _process_single_source(
    source: PasteSource,
    schema: SurfaceSchema,
    config: AppConfig,
    identity: IdentityProvider,
    store: RecordStore | None,
    references: ReferenceData,
    commit: bool,
    error_log: ErrorLogBuffer,
    out: Callable[[str], None],
) -> PasteBatch:
    start_time = datetime.now(UTC)
    session = BulkSession(
        schema,
        store,
        identity,
        timeout_seconds=config.request_timeout_seconds,
        success_message_seconds=config.success_message_seconds,
    )
    try:
        session.set_references(references)
        preview = session.set_text(source.text)
        error_log.extend(preview_error_records(preview, source.name))
        out(format_preview_report(preview, schema, config, source.name))

        status = BatchStatus.PREVIEWED
        inserted = 0
        error: str | None = None
        if not preview.insert_eligible:
            status = BatchStatus.REJECTED
            error = REFUSAL_MESSAGES[preview.eligibility.reason or REASON_NO_ROWS]
            logger.warning("source=%s not insert-eligible: %s", source.name, error)
        elif commit:
            result = session.commit()
            if result.ok:
                status = BatchStatus.COMMITTED
                inserted = result.inserted_count
                logger.info("source=%s %s", source.name, result.message)
            else:
                status = BatchStatus.FAILED
                error = result.message
                error_log.append(
                    ErrorRecord.create(
                        schema.name, source.name, -1, result.error_type or REMOTE_ERROR, result.message
                    )
                )
                logger.error("source=%s commit failed: %s", source.name, result.message)
        logger.debug(
            "source=%s status=%s rows=%d errors=%d missing=%d",
            source.name,
            status.value,
            len(preview.rows),
            len(preview.errors),
            preview.missing,
        )
        return PasteBatch(
            name=source.name,
            surface=schema.name,
            start_time=start_time,
            end_time=datetime.now(UTC),
            status=status,
            rows=len(preview.rows),
            inserted_rows=inserted,
            parse_errors=len(preview.errors),
            missing=preview.missing,
            error=error,
        )
    finally:
        session.close()
