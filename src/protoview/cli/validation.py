"""protoview validate -- attach mass-spec pulldown validation to predictions."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from protoview.cli.ingest import _connect, _summary_table
from protoview.exceptions import ParseError
from protoview.services import validation

console = Console()


def validate_cmd(
    hits_file: Path = typer.Argument(..., help="JSON of pulldown hits per bait"),
    source: str = typer.Option(..., "--source", help="Lab or dataset the hits come from"),
    method: str = typer.Option("PD_MS", "--method", help="Validation method label"),
    notes: Optional[str] = typer.Option(None, "--notes"),
    source_file: Optional[str] = typer.Option(None, "--source-file", help="Original spreadsheet or export"),
    restamp: bool = typer.Option(
        False, "--restamp", help="Also rewrite metadata on records already validated by METHOD"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Count matches without writing"),
):
    """Mark AF3 predictions whose prey was recovered in a pulldown."""
    try:
        hits = validation.load_hits(hits_file)
    except ParseError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    info = validation.ExperimentalValidation(
        method=method, source=source, notes=notes, source_file=source_file
    )
    db = _connect()
    try:
        result = validation.attach_validation(db, hits, info, dry_run=dry_run)
        if restamp:
            result.update(validation.restamp_validation(db, info, dry_run=dry_run))
    finally:
        db.close()

    keys = ["baits", "validated"]
    if restamp:
        keys += ["interactions", "complex_interactions"]
    console.print(_summary_table(
        "Validation (dry run)" if dry_run else "Validation", result, keys
    ))
    for label in result["unresolved_baits"]:
        console.print(f"[yellow]No stored protein for bait {label}[/yellow]")
