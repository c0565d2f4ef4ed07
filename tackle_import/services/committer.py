from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..db.record_store import RecordStore, RecordStoreError, StoreTimeoutError
from ..identity import NOT_SIGNED_IN, IdentityProvider
from ..ingest.normalize import SurfaceSchema
from ..models.error_record import IDENTITY_ERROR, REMOTE_ERROR, TIMEOUT_ERROR
from ..models.preview import (
    REASON_NO_ROWS,
    REASON_PARSE_ERRORS,
    REASON_UNRESOLVED,
    PreviewResult,
)

"""Batch committer.

One authenticated batch-insert request per commit:
- refuses (no store call) when the preview is not insert-eligible
- checks identity right before writing; no user -> IDENTITY_ERROR
- tags rows with owner_id and the surface discriminator
- the store insert is atomic: on failure nothing is assumed inserted
- no retry; the caller re-initiates
"""

logger = logging.getLogger(__name__)

__all__ = [
    "CommitResult",
    "REFUSAL_MESSAGES",
    "build_payload",
    "commit",
]

REFUSED = "REFUSED"

REFUSAL_MESSAGES = {
    REASON_PARSE_ERRORS: "Fix parse errors first.",
    REASON_NO_ROWS: "Nothing to insert yet.",
    REASON_UNRESOLVED: "Some lines did not match a rod/reel by name. Fix those first.",
}


@dataclass(frozen=True)
class CommitResult:
    ok: bool
    inserted_count: int = 0
    message: str = ""
    error_type: str | None = None  # REFUSED / IDENTITY_ERROR / REMOTE_ERROR / TIMEOUT_ERROR
    inserted_ids: list[Any] = field(default_factory=list)


def build_payload(preview: PreviewResult, schema: SurfaceSchema, owner_id: str) -> list[dict[str, Any]]:
    payload: list[dict[str, Any]] = []
    for row in preview.rows:
        data: dict[str, Any] = {"owner_id": owner_id}
        data.update(schema.discriminator)
        data.update(row.to_row())
        payload.append(data)
    return payload


def commit(
    preview: PreviewResult,
    schema: SurfaceSchema,
    store: RecordStore,
    identity: IdentityProvider,
) -> CommitResult:
    """Commit an insert-eligible preview as a single batch.

    Returns a CommitResult; failures are values, not exceptions.
    """
    if not preview.insert_eligible:
        reason = preview.eligibility.reason or REASON_NO_ROWS
        return CommitResult(ok=False, message=REFUSAL_MESSAGES[reason], error_type=REFUSED)

    user = identity.get_current_user()
    if user is None:
        logger.error("commit surface=%s: %s", schema.name, NOT_SIGNED_IN)
        return CommitResult(ok=False, message=NOT_SIGNED_IN, error_type=IDENTITY_ERROR)

    payload = build_payload(preview, schema, user.id)
    try:
        result = store.insert_batch(schema.collection, payload)
    except StoreTimeoutError as e:
        logger.error("commit surface=%s timed out: %s", schema.name, e)
        return CommitResult(ok=False, message=str(e), error_type=TIMEOUT_ERROR)
    except RecordStoreError as e:
        logger.error("commit surface=%s failed: %s", schema.name, e)
        return CommitResult(ok=False, message=str(e) or "Insert failed.", error_type=REMOTE_ERROR)

    logger.info("commit surface=%s inserted=%d", schema.name, result.inserted_rows)
    return CommitResult(
        ok=True,
        inserted_count=result.inserted_rows,
        message=f"Inserted {result.inserted_rows} {schema.noun}(s).",
        inserted_ids=result.inserted_ids,
    )
