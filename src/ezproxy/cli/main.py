"""Typer app: init, apply, remove, status, list, manage, enable, disable."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

import typer
import yaml
from rich.prompt import Prompt
from rich.text import Text

from ezproxy.cli._shared import FORMAT_OPTION, get_adapters, get_settings_store, load_settings, print_outcomes
from ezproxy.cli.interactive import select_adapters
from ezproxy.core.context import ExecutionContext
from ezproxy.core.diff import apply_toggle, effective_state, toggle_single
from ezproxy.core.orchestrator import Orchestrator
from ezproxy.core.schema import ProxySettings, Settings
from ezproxy.core.settings import SettingsError, default_tools
from ezproxy.utils.logs import setup_logging
from ezproxy.utils.output import error, info, is_piped, output_table, success

DEFAULT_NO_PROXY = "localhost,127.0.0.1,::1"

app = typer.Typer(
    name="ezproxy",
    help="ezproxy: configure proxy and CA trust settings across your developer tools.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would change without writing anything"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Run privileged commands without asking"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr"),
) -> None:
    setup_logging("DEBUG" if verbose else None)
    # Tests hand in a prepared context through obj; the flags still apply on top.
    base = ctx.obj if isinstance(ctx.obj, ExecutionContext) else ExecutionContext()
    ctx.obj = replace(base, dry_run=base.dry_run or dry_run, auto_yes=base.auto_yes or yes)


def _run_context(ctx: typer.Context) -> ExecutionContext:
    run_ctx = ctx.obj
    if run_ctx.dry_run:
        run_ctx.note("[dry-run] No changes will be written.")
    return run_ctx


def _ask(label: str, value: Optional[str], default: str = "") -> str:
    if value is not None:
        return value
    if is_piped():
        return default
    return Prompt.ask(label, default=default)


@app.command()
def init(
    ctx: typer.Context,
    http: Optional[str] = typer.Option(None, "--http", help="HTTP proxy URL"),
    https: Optional[str] = typer.Option(None, "--https", help="HTTPS proxy URL (defaults to the HTTP one)"),
    no_proxy: Optional[str] = typer.Option(None, "--no-proxy", help="Comma-separated hosts to bypass"),
    ca_cert: Optional[str] = typer.Option(None, "--ca-cert", help="Path to the corporate CA certificate (PEM)"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing settings file"),
) -> None:
    """Write the settings file, prompting for anything not given as an option."""
    run_ctx = _run_context(ctx)
    store = get_settings_store()
    tools = default_tools(a.name for a in get_adapters())

    if store.exists:
        if not force:
            error(f"Settings already exist at {store.path}. Use --force to overwrite.")
            raise typer.Exit(1)
        try:
            tools = {**tools, **store.load().tools}
        except SettingsError:
            pass

    http = _ask("HTTP proxy URL", http)
    if not http:
        error("An HTTP proxy URL is required (--http).")
        raise typer.Exit(1)
    https = _ask("HTTPS proxy URL", https, default=http)
    no_proxy = _ask("Hosts to bypass the proxy", no_proxy, default=DEFAULT_NO_PROXY)
    ca_cert = _ask("CA certificate path (empty for none)", ca_cert)

    settings = Settings(
        proxy=ProxySettings(http=http, https=https or http, no_proxy=no_proxy),
        ca_cert=ca_cert,
        tools=tools,
    )

    if run_ctx.dry_run:
        run_ctx.note(f"[dry-run] Would write {store.path}:")
        run_ctx.note(yaml.safe_dump(settings.model_dump(mode="json"), sort_keys=False).rstrip("\n"))
        return

    store.save(settings)
    success(f"Wrote settings to {store.path}")
    info("Run `ezproxy apply` to configure your tools.")


@app.command()
def apply(ctx: typer.Context) -> None:
    """Configure every enabled tool that is installed."""
    run_ctx = _run_context(ctx)
    settings = load_settings(get_settings_store())
    outcomes = Orchestrator(get_adapters(), run_ctx).apply(settings)
    print_outcomes(outcomes, run_ctx.console, title="ezproxy apply")


@app.command()
def remove(ctx: typer.Context) -> None:
    """Undo ezproxy's changes for every enabled tool."""
    run_ctx = _run_context(ctx)
    settings = load_settings(get_settings_store())
    outcomes = Orchestrator(get_adapters(), run_ctx).remove(settings)
    print_outcomes(outcomes, run_ctx.console, title="ezproxy remove")


@app.command()
def status(ctx: typer.Context, fmt: Optional[str] = FORMAT_OPTION) -> None:
    """Show per-tool configuration status. Changes nothing."""
    run_ctx = ctx.obj
    settings = load_settings(get_settings_store())
    entries = Orchestrator(get_adapters(), run_ctx).status(settings)

    rows = [{"tool": e.name, "status": e.label, "error": e.error or ""} for e in entries]
    columns = ["tool", "status"]
    if any(e.error for e in entries):
        columns.append("error")

    if fmt != "json" and not is_piped():
        run_ctx.console.print(Text(f"HTTP proxy:  {settings.proxy.http}"))
        run_ctx.console.print(Text(f"HTTPS proxy: {settings.proxy.https}"))
        run_ctx.console.print(Text(f"No proxy:    {settings.proxy.no_proxy}"))
        if settings.ca_cert:
            run_ctx.console.print(Text(f"CA cert:     {settings.ca_cert_path}"))
    output_table(rows, columns, fmt=fmt, title="ezproxy status")


@app.command("list")
def list_cmd(ctx: typer.Context, fmt: Optional[str] = FORMAT_OPTION) -> None:
    """List known tools with their enabled and installed state."""
    run_ctx = ctx.obj
    adapters = get_adapters()
    store = get_settings_store()
    if store.exists:
        tools = load_settings(store).tools
    else:
        tools = default_tools(a.name for a in adapters)

    rows = []
    for adapter in adapters:
        try:
            available = adapter.is_available(run_ctx.os_info)
        except Exception:
            available = False
        rows.append({
            "tool": adapter.name,
            "enabled": "yes" if effective_state(tools, adapter.name) else "no",
            "available": "yes" if available else "no",
        })
    output_table(rows, ["tool", "enabled", "available"], fmt=fmt, title="ezproxy tools")


@app.command()
def manage(ctx: typer.Context) -> None:
    """Pick enabled tools interactively, then apply or remove the ones that changed."""
    run_ctx = _run_context(ctx)
    store = get_settings_store()
    settings = load_settings(store)
    orchestrator = Orchestrator(get_adapters(), run_ctx)

    desired = select_adapters(orchestrator.names, settings.tools, console=run_ctx.console)
    if desired is None:
        info("No changes made")
        return

    diff, _, outcomes = apply_toggle(settings, desired, store, orchestrator)
    if not diff.changed:
        info("No changes made")
        return
    print_outcomes(outcomes, run_ctx.console, title="ezproxy manage")


def _toggle(ctx: typer.Context, name: str, enabled: bool) -> None:
    run_ctx = _run_context(ctx)
    orchestrator = Orchestrator(get_adapters(), run_ctx)
    if orchestrator.get(name) is None:
        error(f"Unknown tool: {name}. Run `ezproxy list` to see the known tools.")
        raise typer.Exit(1)

    store = get_settings_store()
    settings = load_settings(store)
    desired = toggle_single(settings.tools, name, enabled, orchestrator.names)
    diff, _, outcomes = apply_toggle(settings, desired, store, orchestrator)

    if not diff.changed:
        info(f"{name} is already {'enabled' if enabled else 'disabled'}")
        return
    print_outcomes(outcomes, run_ctx.console)


@app.command()
def enable(ctx: typer.Context, name: str = typer.Argument(..., help="Tool name, see `ezproxy list`")) -> None:
    """Enable one tool and configure it now."""
    _toggle(ctx, name, True)


@app.command()
def disable(ctx: typer.Context, name: str = typer.Argument(..., help="Tool name, see `ezproxy list`")) -> None:
    """Disable one tool and remove its configuration now."""
    _toggle(ctx, name, False)
