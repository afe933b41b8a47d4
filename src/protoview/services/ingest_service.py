"""Ingest service -- bridges parsers, classifier and writer to the store."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from protoview.exceptions import ProtoViewError
from protoview.ingestion.discovery import open_parser
from protoview.services.complex_assembler import refresh_complex_labels
from protoview.services.deduplication import deduplicate
from protoview.services.reconciliation import ReconciliationWriter

logger = logging.getLogger(__name__)


def ingest_file(
    db: Session,
    path: Path | str,
    writer: ReconciliationWriter,
    variant: str | None = None,
) -> dict:
    """Parse one file and write its store-eligible records as one unit.

    Commits on success (a dry run only flushes). On error the caller rolls
    back; nothing from this file persists.
    """
    parser = open_parser(path, variant=variant)
    ineligible = 0
    written = 0
    for record in parser:
        if not record.store_eligible:
            ineligible += 1
            continue
        writer.write(record)
        written += 1
    writer.commit()

    logger.info(
        "%s: %d parsed, %d written, %d below import threshold, %d skipped",
        parser.path, parser.stats.parsed, written, ineligible, parser.stats.skipped,
    )
    return {
        "file": str(parser.path),
        "format": parser.format_name,
        "parsed": parser.stats.parsed,
        "skipped_malformed": parser.stats.skipped_malformed,
        "skipped_unresolved": parser.stats.skipped_unresolved,
        "skipped_ineligible": ineligible,
        "written": written,
    }


def run_ingest(
    db: Session,
    paths: Iterable[Path | str],
    dry_run: bool = False,
    variant: str | None = None,
    dedupe: bool = True,
) -> dict:
    """Ingest every file in *paths*, then deduplicate the whole store.

    Files are independent units: a failing file is rolled back and counted
    in ``failed_files`` while the run continues with the next one. A dry run
    goes through the same steps and rolls the whole run back at the end.
    """
    writer = ReconciliationWriter(db, dry_run=dry_run)
    summary = {
        "files": 0,
        "failed_files": 0,
        "parsed": 0,
        "skipped_malformed": 0,
        "skipped_unresolved": 0,
        "skipped_ineligible": 0,
        "new": 0,
        "updated": 0,
        "superseded": 0,
        "deleted": 0,
        "duplicate_groups": 0,
        "dry_run": dry_run,
        "errors": [],
    }

    for path in paths:
        before = (writer.inserted, writer.updated, writer.superseded)
        unit = writer.begin_unit()
        try:
            result = ingest_file(db, path, writer, variant=variant)
        except (ProtoViewError, SQLAlchemyError) as exc:
            writer.rollback(unit)
            writer.inserted, writer.updated, writer.superseded = before
            summary["failed_files"] += 1
            summary["errors"].append(f"{path}: {exc}")
            logger.error("Failed to ingest %s: %s", path, exc)
            continue

        summary["files"] += 1
        for key in ("parsed", "skipped_malformed", "skipped_unresolved", "skipped_ineligible"):
            summary[key] += result[key]

    summary["new"] = writer.inserted
    summary["updated"] = writer.updated
    summary["superseded"] = writer.superseded

    if dedupe:
        result = deduplicate(db, writer)
        summary["deleted"] = result["deleted"]
        summary["duplicate_groups"] = result["duplicate_groups"]
    writer.finish()

    if not dry_run and summary["new"]:
        refresh_complex_labels(db)

    return summary
