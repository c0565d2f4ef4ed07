from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from tackle_import.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from tackle_import.db.record_store import PgRecordStore, RecordStore, RecordStoreError
from tackle_import.identity import EnvIdentityProvider
from tackle_import.ingest.surfaces import SURFACES, get_surface
from tackle_import.logging.init import enable_debug, log_summary, setup_logging
from tackle_import.models.config_models import AppConfig
from tackle_import.services.orchestrator import ProcessingError, process_all, read_paste_sources
from tackle_import.services.summary import render_summary_line

"""CLI entrypoint.

    python -m tackle_import.cli SURFACE FILE [FILE ...] [--commit] [--debug] [--config PATH]

Flow:
- load .env (overrides the process environment) and the config file
- read paste sources ("-" = stdin), one batch per source
- connect the record store unless DISABLE_DB_CONNECT=1
- preview every batch, commit eligible batches with --commit
- print the SUMMARY line and exit 0 / 2 / 1
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env; its values take precedence over the existing environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Bulk-paste importer for the tackle catalog")
    p.add_argument("surface", choices=sorted(SURFACES), help="Ingestion surface")
    p.add_argument("files", nargs="+", help="Paste files ('-' reads stdin)")
    p.add_argument("--commit", action="store_true", help="Insert eligible batches")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=None, help=f"Config file (default: {DEFAULT_CONFIG_PATH})")
    return p.parse_args(argv)


def _connect_store(cfg: AppConfig) -> RecordStore:
    return PgRecordStore.connect(cfg.database, timeout_seconds=cfg.request_timeout_seconds)


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # only read sys.argv when no list is given; [] must stay empty
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        enable_debug(logger)
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config, required=args.config is not None)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    schema = get_surface(args.surface)
    try:
        sources = read_paste_sources(args.files)
    except ProcessingError as e:
        logger.error(f"input: {e}")
        return EXIT_FATAL

    identity = EnvIdentityProvider(cfg.identity)
    store: RecordStore | None = None
    if os.getenv("DISABLE_DB_CONNECT") == "1":
        logger.debug("DB connect disabled via DISABLE_DB_CONNECT=1 -> preview-only mode")
    else:
        try:
            store = _connect_store(cfg)
        except RecordStoreError as e:
            if args.commit or schema.references:
                logger.error(f"record store: {e}")
                return EXIT_FATAL
            logger.info(f"record store unavailable -> preview-only mode: {e}")

    mode = "live" if store is not None else "preview-only"
    logger.info(f"surface={schema.name} sources={len(sources)} mode={mode} commit={args.commit}")
    try:
        result = process_all(schema, sources, cfg, identity, store, commit=args.commit)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL
    finally:
        close = getattr(store, "close", None)
        if close is not None:
            close()

    # log_summary adds the label itself
    summary_line = render_summary_line(result)
    log_summary(summary_line[len("SUMMARY "):])

    if result.failed_batches or result.rejected_batches:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
