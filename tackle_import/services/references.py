from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import wait

from ..db.record_store import RecordStore, StoreTimeoutError
from ..ingest.normalize import SurfaceSchema
from ..ingest.surfaces import GEAR_ITEMS
from ..models.records import ReferenceRecord, User
from .resolver import ReferenceData

"""Reference collection loading for cross-reference resolution.

The rod and reel collections are fetched concurrently; both must complete
before indexes are built. Ordering between the two fetches does not matter.
"""

logger = logging.getLogger(__name__)

REFERENCE_COLUMNS = ("id", "name", "brand", "model")
REFERENCE_ORDER = ("-created_at",)


def fetch_reference_records(store: RecordStore, gear_type: str, owner: User) -> list[ReferenceRecord]:
    rows = store.query(
        GEAR_ITEMS,
        filters={"gear_type": gear_type, "owner_id": owner.id},
        order_by=REFERENCE_ORDER,
        columns=REFERENCE_COLUMNS,
    )
    return [ReferenceRecord.from_row(r) for r in rows]


def load_references(
    store: RecordStore,
    schema: SurfaceSchema,
    owner: User,
    timeout_seconds: float = 8.0,
) -> ReferenceData:
    """Load and index every reference collection ``schema`` needs.

    Raises
    ------
    StoreTimeoutError: a fetch did not finish within ``timeout_seconds``
    RecordStoreError: a fetch was rejected by the store
    """
    gear_types = [spec.gear_type for spec in schema.references]
    if not gear_types:
        return ReferenceData()

    executor = ThreadPoolExecutor(max_workers=len(gear_types), thread_name_prefix="refs")
    try:
        futures = {
            gear_type: executor.submit(fetch_reference_records, store, gear_type, owner)
            for gear_type in gear_types
        }
        _, pending = wait(futures.values(), timeout=timeout_seconds)
        if pending:
            for f in pending:
                f.cancel()
            raise StoreTimeoutError(f"timed out loading {', '.join(gear_types)} after {timeout_seconds:g}s")
        records = {gear_type: f.result() for gear_type, f in futures.items()}
    finally:
        # do not block on a hung fetch; its result is discarded
        executor.shutdown(wait=False, cancel_futures=True)

    for gear_type, recs in records.items():
        logger.debug("references gear_type=%s loaded=%d", gear_type, len(recs))
    return ReferenceData.from_records(records)
