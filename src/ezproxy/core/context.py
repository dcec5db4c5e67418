"""Execution context threaded through the orchestrator and every adapter call."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property

from rich.console import Console

from ezproxy.core.patcher import TextRegionPatcher
from ezproxy.core.privileged import ConfirmFn, PrivilegedGateway, Runner
from ezproxy.utils.detect import OSInfo, detect_os
from ezproxy.utils.output import console as default_console


@dataclass(frozen=True)
class ExecutionContext:
    """Flags and collaborators for one invocation.

    ``dry_run`` and ``auto_yes`` are fixed before orchestration starts. The
    gateway is created lazily and shared, so privileged confirmation happens
    at most once per context.
    """

    dry_run: bool = False
    auto_yes: bool = False
    console: Console = field(default=default_console, compare=False)
    os_info: OSInfo = field(default_factory=detect_os)
    confirm: ConfirmFn | None = field(default=None, compare=False)
    runner: Runner | None = field(default=None, compare=False)

    @cached_property
    def gateway(self) -> PrivilegedGateway:
        return PrivilegedGateway(
            dry_run=self.dry_run,
            auto_yes=self.auto_yes,
            console=self.console,
            confirm=self.confirm,
            runner=self.runner,
        )

    @property
    def patcher(self) -> TextRegionPatcher:
        return TextRegionPatcher(simulate=self.dry_run, console=self.console)

    def note(self, text: str) -> None:
        """Print an informational line for the user."""
        self.console.print(text, highlight=False, markup=False)
