"""protoview init -- create database tables."""

import typer
from rich.console import Console

from protoview.db import Base, get_engine
from protoview.exceptions import ConfigurationError

console = Console()


def init_cmd():
    """Initialize the database (create all tables)."""
    console.print("[bold]Creating database tables...[/bold]")
    try:
        engine = get_engine()
        Base.metadata.create_all(engine)
        console.print("[green]Database tables created successfully.[/green]")
    except ConfigurationError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2)
    except Exception as exc:
        console.print(f"[red]Error creating tables: {exc}[/red]")
        raise typer.Exit(code=1)
