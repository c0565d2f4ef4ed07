from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""SUMMARY line rendering for a bulk-paste run."""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: ProcessingResult) -> str:
    """Render the SUMMARY line.

    Format:
    SUMMARY files={n}/{n} committed={c} rejected={r} failed={f} rows={rows}
    parse_errors={e} missing={m} elapsed_sec={s}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     committed_batches=1, rejected_batches=0, failed_batches=0,
        ...     previewed_batches=0, total_rows=3, total_inserted_rows=3,
        ...     parse_errors=0, missing=0, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY files=1/1 committed=1 rejected=0 failed=0 rows=3 parse_errors=0 missing=0 elapsed_sec=2'
    """
    n = result.total_batches
    return (
        f"SUMMARY files={n}/{n} "
        f"committed={result.committed_batches} "
        f"rejected={result.rejected_batches} "
        f"failed={result.failed_batches} "
        f"rows={result.total_rows} "
        f"parse_errors={result.parse_errors} "
        f"missing={result.missing} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
