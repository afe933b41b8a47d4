"""CLI entry point."""

import logging

import typer

from protoview.config import config

app = typer.Typer(
    name="protoview",
    help="ProtoView: structural prediction ingestion and reconciliation",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    level = logging.DEBUG if verbose or config.debug else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _register_lazy():
    """Register subcommands that have heavier imports."""
    from protoview.cli.db import init_cmd
    from protoview.cli.ingest import classify_cmd, dedupe_cmd, enrich_cmd, ingest_cmd
    from protoview.cli.validation import validate_cmd

    app.command(name="init")(init_cmd)
    app.command(name="ingest")(ingest_cmd)
    app.command(name="dedupe")(dedupe_cmd)
    app.command(name="classify")(classify_cmd)
    app.command(name="enrich")(enrich_cmd)
    app.command(name="validate")(validate_cmd)


_register_lazy()


if __name__ == "__main__":
    app()
