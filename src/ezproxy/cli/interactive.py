"""Interactive adapter picker for `ezproxy manage`."""

from __future__ import annotations

from typing import Callable, Mapping, Sequence

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

from ezproxy.core.diff import effective_state
from ezproxy.utils.output import console as default_console
from ezproxy.utils.output import is_piped

PROMPT = "Toggle by number (e.g. 1,3), [a]ll on, [n]one, [q]uit, Enter to save"


def select_adapters(
    names: Sequence[str],
    current: Mapping[str, bool],
    console: Console | None = None,
    prompt_fn: Callable[..., str] | None = None,
) -> dict[str, bool] | None:
    """Let the user flip adapters on and off until they confirm.

    Args:
        names: Adapter names in registry order.
        current: The stored enablement map.
        console: Rich console for output (injectable for tests).
        prompt_fn: Callable matching Prompt.ask signature (injectable for tests).

    Returns:
        The full desired selection, or None if the user quit or stdin is not a TTY.
    """
    console = console or default_console
    prompt_fn = prompt_fn or Prompt.ask

    if is_piped():
        console.print("[dim]Non-interactive mode detected, use `ezproxy enable`/`disable` instead[/dim]")
        return None

    selection = {name: effective_state(current, name) for name in names}

    while True:
        _show(console, names, selection)
        answer = prompt_fn(PROMPT, default="", show_default=False).strip().lower()

        if not answer:
            return selection
        if answer == "q":
            return None
        if answer in ("a", "n"):
            for name in names:
                selection[name] = answer == "a"
            continue

        for token in answer.replace(" ", ",").split(","):
            if not token:
                continue
            if token.isdigit() and 1 <= int(token) <= len(names):
                name = names[int(token) - 1]
                selection[name] = not selection[name]
            else:
                console.print(f"[yellow]Ignoring {escape(repr(token))}[/yellow]", highlight=False)


def _show(console: Console, names: Sequence[str], selection: Mapping[str, bool]) -> None:
    table = Table(title="Adapters")
    table.add_column("#", justify="right")
    table.add_column("Tool")
    table.add_column("Enabled")
    for i, name in enumerate(names, 1):
        mark = "[green]on[/green]" if selection[name] else "[dim]off[/dim]"
        table.add_row(str(i), name, mark)
    console.print(table)
