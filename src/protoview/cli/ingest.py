"""protoview ingest / dedupe / classify / enrich -- store maintenance commands."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from protoview.config import config
from protoview.db import check_connection, get_session_factory
from protoview.exceptions import ConfigurationError, StoreUnavailableError
from protoview.ingestion.discovery import find_result_files
from protoview.services import complex_assembler, confidence, deduplication, ingest_service, uniprot
from protoview.services.reconciliation import ReconciliationWriter

console = Console()


def _open_session():
    return get_session_factory()()


def _connect():
    """Open a session on a reachable store, or exit with code 2."""
    try:
        db = _open_session()
    except ConfigurationError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2)
    try:
        check_connection(db.get_bind())
    except StoreUnavailableError as exc:
        db.close()
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2)
    return db


def _summary_table(title: str, result: dict, keys: list[str]) -> Table:
    table = Table(title=title)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")
    for key in keys:
        table.add_row(key.replace("_", " "), str(result.get(key, 0)))
    return table


def ingest_cmd(
    paths: Optional[list[Path]] = typer.Argument(None, help="Files or directories to ingest (default: PROTOVIEW_BASE_PATHS)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Count what would change without writing"),
    variant: Optional[str] = typer.Option(None, "--variant", help="Construct variant for complex files (e.g. Cterm)"),
    no_dedupe: bool = typer.Option(False, "--no-dedupe", help="Skip the deduplication pass"),
):
    """Discover, parse and reconcile prediction result files."""
    db = _connect()
    try:
        base_paths = list(paths) if paths else [Path(p) for p in config.ingest.base_paths]
        if not base_paths:
            console.print("[yellow]No paths given and PROTOVIEW_BASE_PATHS is empty; nothing to ingest.[/yellow]")
            return

        files = find_result_files(base_paths)
        if not files:
            console.print("[red]No result files found.[/red]")
            raise typer.Exit(code=1)

        console.print(f"[bold]Found {len(files)} result file(s)[/bold]")
        for path in files:
            console.print(f"  {path}")
        if dry_run:
            console.print("[yellow]Dry run: no changes will be written.[/yellow]")

        result = ingest_service.run_ingest(
            db, files, dry_run=dry_run, variant=variant, dedupe=not no_dedupe
        )
    finally:
        db.close()

    console.print(_summary_table(
        "Ingest summary (dry run)" if dry_run else "Ingest summary",
        result,
        ["files", "failed_files", "parsed", "skipped_malformed", "skipped_unresolved",
         "skipped_ineligible", "new", "updated", "superseded", "deleted", "duplicate_groups"],
    ))
    for error in result["errors"]:
        console.print(f"[red]{error}[/red]")
    if result["failed_files"]:
        raise typer.Exit(code=1)


def dedupe_cmd(
    dry_run: bool = typer.Option(False, "--dry-run", help="Report duplicates without deleting"),
    accession: Optional[str] = typer.Option(None, "--accession", help="Only rows where this accession is bait or prey"),
):
    """Remove duplicate interactions, keeping the v4 > v3 > other survivor."""
    db = _connect()
    try:
        writer = ReconciliationWriter(db, dry_run=dry_run)
        result = deduplication.deduplicate(db, writer, accession=accession)
        writer.finish()
    finally:
        db.close()

    if not result["duplicate_groups"]:
        console.print("[green]No duplicates found.[/green]")
        return
    verb = "Would delete" if dry_run else "Deleted"
    console.print(
        f"Found {result['duplicate_groups']} duplicate group(s). "
        f"{verb} {result['deleted']} row(s)."
    )


def classify_cmd(
    dry_run: bool = typer.Option(False, "--dry-run", help="Count changes without writing"),
):
    """Recompute confidence tiers for every stored interaction."""
    db = _connect()
    try:
        result = confidence.reclassify_all(db, dry_run=dry_run)
    finally:
        db.close()
    console.print(_summary_table("Reclassification", result, ["examined", "changed"]))


def enrich_cmd(
    limit: Optional[int] = typer.Option(None, "--limit", help="Maximum proteins to look up"),
):
    """Fetch aliases and organisms from UniProt, then refresh complex labels."""
    db = _connect()
    try:
        result = asyncio.run(uniprot.enrich_proteins(db, limit=limit))
        result["labels_refreshed"] = complex_assembler.refresh_complex_labels(db)
    finally:
        db.close()
    console.print(_summary_table(
        "UniProt enrichment", result,
        ["requested", "enriched", "aliases", "failed_batches", "labels_refreshed"],
    ))
