"""Output formatting utilities: text vs JSON, rich tables."""

from __future__ import annotations

import json
import sys

from rich.console import Console
from rich.table import Table

console = Console()
error_console = Console(stderr=True)


def is_piped() -> bool:
    return not sys.stdout.isatty()


def output_table(
    rows: list[dict[str, str]],
    columns: list[str],
    fmt: str | None = None,
    title: str | None = None,
) -> None:
    """Print rows as a Rich table, or as a JSON list when piped or fmt="json"."""
    if fmt is None:
        fmt = "json" if is_piped() else "text"

    if fmt == "json":
        print(json.dumps(rows, indent=2, default=str))
    else:
        table = Table(title=title)
        for col in columns:
            table.add_column(col.title())
        for row in rows:
            table.add_row(*[str(row.get(col, "")) for col in columns])
        console.print(table)


def error(msg: str) -> None:
    error_console.print(f"[red]Error:[/red] {msg}")


def success(msg: str) -> None:
    console.print(f"[green]{msg}[/green]")


def info(msg: str) -> None:
    console.print(f"[dim]{msg}[/dim]")
