"""Domain models for the bulk-paste gear importer.

This package contains the dataclasses passed between the ingest pipeline,
the services layer and the CLI.
"""

from .config_models import AppConfig, DatabaseConfig, IdentityConfig
from .paste_batch import BatchStatus, PasteBatch
from .preview import Eligibility, ParseError, PreviewResult, PreviewRow
from .records import ComboPair, ReelRecord, ReferenceRecord, RodRecord, User

__all__ = [
    # Configuration models
    "AppConfig",
    "DatabaseConfig",
    "IdentityConfig",
    # Records
    "ReelRecord",
    "RodRecord",
    "ComboPair",
    "ReferenceRecord",
    "User",
    # Preview / processing models
    "ParseError",
    "PreviewRow",
    "Eligibility",
    "PreviewResult",
    "BatchStatus",
    "PasteBatch",
]
