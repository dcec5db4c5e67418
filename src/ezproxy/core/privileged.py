"""Confirm-then-run gateway for commands that need root.

Adapters that target system-owned paths cannot write them directly. They
hand an ordered list of shell commands to the gateway, which shows them,
asks once per invocation, and runs each as ``sudo sh -c <cmd>``.
"""

from __future__ import annotations

import logging
import subprocess
from enum import Enum
from typing import Callable, Sequence

from rich.console import Console
from rich.prompt import Confirm

logger = logging.getLogger(__name__)

Runner = Callable[..., "subprocess.CompletedProcess"]
ConfirmFn = Callable[[str], bool]


class GatewayResult(str, Enum):
    executed = "executed"
    simulated = "simulated"
    declined = "declined"
    nothing = "nothing"


class PrivilegedCommandError(Exception):
    def __init__(self, command: str, reason: str) -> None:
        super().__init__(f"command failed: sudo sh -c {shell_quote(command)}: {reason}")
        self.command = command
        self.reason = reason


def shell_quote(s: str) -> str:
    """Wrap a string in single quotes for safe shell embedding."""
    return "'" + s.replace("'", "'\\''") + "'"


class PrivilegedGateway:
    """Run privileged command batches for one CLI invocation.

    The confirmation answer is asked for at most once and reused for every
    later batch. Operations whose batch was declined are collected in
    ``declined`` so callers can report them as skipped rather than failed.
    """

    def __init__(
        self,
        dry_run: bool = False,
        auto_yes: bool = False,
        console: Console | None = None,
        confirm: ConfirmFn | None = None,
        runner: Runner | None = None,
    ) -> None:
        self.dry_run = dry_run
        self.auto_yes = auto_yes
        self.console = console or Console()
        self._confirm = confirm or self._ask
        self._runner = runner or subprocess.run
        self._approved: bool | None = None
        self.declined: set[str] = set()

    def run(self, operation: str, commands: Sequence[str]) -> GatewayResult:
        """Run a batch where the first failure aborts the rest."""
        return self._run(operation, commands, required=True)

    def run_best_effort(self, operation: str, commands: Sequence[str]) -> GatewayResult:
        """Run a teardown batch; failures are logged and the batch continues."""
        return self._run(operation, commands, required=False)

    def _run(self, operation: str, commands: Sequence[str], required: bool) -> GatewayResult:
        if not commands:
            return GatewayResult.nothing

        if self.dry_run:
            self._say("\n  [dry-run] Would run (requires sudo):")
            self._show(commands)
            return GatewayResult.simulated

        kind = "commands" if required else "removal commands"
        self._say(f"\n  [{operation}] The following {kind} require sudo:")
        self._show(commands)

        if not self._confirmed():
            self._say("  Skipped. Run the commands above manually.")
            self.declined.add(operation)
            return GatewayResult.declined

        for cmd in commands:
            logger.debug("[%s] sudo sh -c %s", operation, cmd)
            reason = self._execute(cmd)
            if reason is None:
                continue
            if required:
                raise PrivilegedCommandError(cmd, reason)
            logger.warning("[%s] %s", operation, reason)
            self._say(f"  Warning: sudo sh -c {shell_quote(cmd)}: {reason}")

        return GatewayResult.executed

    def _execute(self, cmd: str) -> str | None:
        """Run one command; return a failure reason or None on success."""
        try:
            result = self._runner(["sudo", "sh", "-c", cmd], check=False)
        except OSError as e:
            return str(e)
        if result.returncode != 0:
            return f"exit status {result.returncode}"
        return None

    def _confirmed(self) -> bool:
        if self.auto_yes:
            return True
        if self._approved is None:
            self._approved = bool(self._confirm("Run these commands now?"))
        return self._approved

    def _ask(self, question: str) -> bool:
        try:
            return Confirm.ask(question, default=False, console=self.console)
        except (EOFError, KeyboardInterrupt):
            return False

    def _show(self, commands: Sequence[str]) -> None:
        for cmd in commands:
            self._say(f"    sudo sh -c {shell_quote(cmd)}")

    def _say(self, text: str) -> None:
        self.console.print(text, highlight=False, markup=False)
