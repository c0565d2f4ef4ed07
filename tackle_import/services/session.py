from __future__ import annotations

import logging
import time
from collections.abc import Callable

from ..db.record_store import RecordStore, RecordStoreError
from ..identity import NOT_SIGNED_IN, IdentityProvider
from ..ingest.normalize import SurfaceSchema
from ..models.config_models import DEFAULT_REQUEST_TIMEOUT_SECONDS, DEFAULT_SUCCESS_MESSAGE_SECONDS
from ..models.error_record import IDENTITY_ERROR, REMOTE_ERROR
from ..models.preview import PreviewResult
from .committer import CommitResult, commit
from .pipeline import compute_preview
from .references import load_references
from .resolver import ReferenceData

"""Bulk-paste editing session.

Holds the state a paste editor needs (raw text, loaded references, current
preview, error / success message) and recomputes the preview in full on
every text or reference change.

Reference loads and commits take tokens from separate generation counters.
A response is discarded when a newer request of the same kind was started
or the session was closed; close() invalidates both kinds.
"""

logger = logging.getLogger(__name__)

__all__ = ["BulkSession"]


class BulkSession:
    def __init__(
        self,
        schema: SurfaceSchema,
        store: RecordStore | None,
        identity: IdentityProvider,
        *,
        timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        success_message_seconds: float = DEFAULT_SUCCESS_MESSAGE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.schema = schema
        self.store = store
        self.identity = identity
        self.timeout_seconds = timeout_seconds
        self.success_message_seconds = success_message_seconds
        self._clock = clock

        self._text = ""
        self._references = ReferenceData()
        self._load_generation = 0
        self._commit_generation = 0
        self._closed = False

        self.loading = False
        self.saving = False
        self.error: str | None = None
        self._message: str | None = None
        self._message_expires_at: float | None = None

        self.preview: PreviewResult = compute_preview(self._text, schema, self._references)

    # -- state ---------------------------------------------------------------

    @property
    def text(self) -> str:
        return self._text

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def can_commit(self) -> bool:
        return not self._closed and not self.saving and self.preview.insert_eligible

    def set_text(self, text: str | None) -> PreviewResult:
        self._text = text or ""
        return self._recompute()

    def set_references(self, references: ReferenceData) -> PreviewResult:
        self._references = references
        return self._recompute()

    def _recompute(self) -> PreviewResult:
        self.preview = compute_preview(self._text, self.schema, self._references)
        return self.preview

    # -- request generations -------------------------------------------------

    def begin_load(self) -> int:
        self._load_generation += 1
        return self._load_generation

    def begin_commit(self) -> int:
        self._commit_generation += 1
        return self._commit_generation

    def is_current_load(self, token: int) -> bool:
        return not self._closed and token == self._load_generation

    def is_current_commit(self, token: int) -> bool:
        return not self._closed and token == self._commit_generation

    def apply_references(self, token: int, references: ReferenceData) -> bool:
        """Apply loaded references if ``token`` is still the latest load."""
        if not self.is_current_load(token):
            logger.debug(
                "discarding stale reference load token=%d current=%d", token, self._load_generation
            )
            return False
        self.loading = False
        self.set_references(references)
        return True

    def close(self) -> None:
        """Tear the session down; in-flight results are discarded."""
        self._closed = True
        self._load_generation += 1
        self._commit_generation += 1
        self.loading = False
        self.saving = False

    # -- operations ----------------------------------------------------------

    def load_references(self) -> bool:
        """Fetch and index the reference collections for this surface."""
        token = self.begin_load()
        self.loading = True
        self.error = None

        if self.store is None:
            self.loading = False
            self.error = "Record store unavailable."
            return False
        user = self.identity.get_current_user()
        if user is None:
            self.loading = False
            self.error = NOT_SIGNED_IN
            return False

        try:
            data = load_references(self.store, self.schema, user, self.timeout_seconds)
        except RecordStoreError as e:
            if self.is_current_load(token):
                self.loading = False
                self.error = str(e) or "Failed to load rods/reels."
            return False
        return self.apply_references(token, data)

    def commit(self) -> CommitResult:
        """Commit the current preview.

        Success clears the raw text and posts a message that auto-dismisses
        after ``success_message_seconds``. Failure keeps the raw text as is.
        """
        self.error = None
        self._message = None
        self._message_expires_at = None

        if self.store is None:
            result = CommitResult(ok=False, message="Record store unavailable.", error_type=REMOTE_ERROR)
            self.error = result.message
            return result

        token = self.begin_commit()
        self.saving = True
        try:
            result = commit(self.preview, self.schema, self.store, self.identity)
        finally:
            # a newer commit or close() owns the flag otherwise
            if token == self._commit_generation:
                self.saving = False

        if not self.is_current_commit(token):
            logger.debug("discarding stale commit result token=%d", token)
            return result

        if result.ok:
            self.set_text("")
            self._message = result.message
            self._message_expires_at = self._clock() + self.success_message_seconds
        else:
            self.error = result.message
            if result.error_type == IDENTITY_ERROR:
                logger.warning("commit aborted: %s", result.message)
        return result

    def visible_message(self, now: float | None = None) -> str | None:
        """Success message, or None once its display time has passed."""
        if self._message is None:
            return None
        current = self._clock() if now is None else now
        if self._message_expires_at is not None and current >= self._message_expires_at:
            self._message = None
            self._message_expires_at = None
            return None
        return self._message
