"""Shared CLI utilities to avoid circular imports."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ezproxy.adapters.base import AdapterProtocol
from ezproxy.adapters.registry import default_adapters
from ezproxy.core.schema import ApplyOutcome, OutcomeKind, Settings
from ezproxy.core.settings import SettingsError, SettingsStore
from ezproxy.utils.output import error

FORMAT_OPTION = typer.Option(None, "--format", "-F", help="Output format: json or text")

_OUTCOME_STYLES = {
    OutcomeKind.configured: "green",
    OutcomeKind.removed: "green",
    OutcomeKind.skipped_disabled: "dim",
    OutcomeKind.skipped_unavailable: "dim",
    OutcomeKind.skipped_declined: "yellow",
    OutcomeKind.failed: "red",
}


def get_adapters() -> list[AdapterProtocol]:
    return default_adapters()


def get_settings_store() -> SettingsStore:
    return SettingsStore()


def load_settings(store: SettingsStore) -> Settings:
    """Load the settings document or exit 1 with a message."""
    try:
        return store.load()
    except SettingsError as e:
        error(str(e))
        raise typer.Exit(1)


def print_outcomes(outcomes: list[ApplyOutcome], console: Console, title: str | None = None) -> None:
    table = Table(title=title)
    table.add_column("Tool")
    table.add_column("Result")
    table.add_column("Details")
    for outcome in outcomes:
        style = _OUTCOME_STYLES.get(outcome.kind, "")
        table.add_row(outcome.name, Text(outcome.kind.value, style=style), Text(outcome.error or ""))
    console.print(table)

    failed = [o.name for o in outcomes if not o.ok]
    if failed:
        console.print(Text(f"{len(failed)} failed: {', '.join(failed)}", style="red"))
