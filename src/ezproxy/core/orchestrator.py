"""Drive apply/remove/status across the adapter registry.

One sequential pass in registry order. Each adapter is gated by the
enablement map, then by its availability check, and its failure is captured
in its own outcome so the remaining adapters still run.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, Sequence

from ezproxy.adapters.base import UNKNOWN, AdapterProtocol
from ezproxy.core.context import ExecutionContext
from ezproxy.core.schema import ApplyOutcome, OutcomeKind, Settings, StatusEntry

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    apply = "apply"
    remove = "remove"


class Orchestrator:
    def __init__(self, adapters: Sequence[AdapterProtocol], ctx: ExecutionContext) -> None:
        self.adapters = list(adapters)
        self.ctx = ctx

    @property
    def names(self) -> list[str]:
        return [a.name for a in self.adapters]

    def get(self, name: str) -> AdapterProtocol | None:
        for adapter in self.adapters:
            if adapter.name == name:
                return adapter
        return None

    # -- Passes --

    def apply(self, settings: Settings) -> list[ApplyOutcome]:
        return [self.run_one(a, settings, Operation.apply) for a in self.adapters]

    def remove(self, settings: Settings) -> list[ApplyOutcome]:
        return [self.run_one(a, settings, Operation.remove) for a in self.adapters]

    def run_toggle(
        self,
        settings: Settings,
        enabled: Iterable[str],
        disabled: Iterable[str],
    ) -> list[ApplyOutcome]:
        """Apply newly enabled and remove newly disabled adapters, in registry order."""
        enabled, disabled = set(enabled), set(disabled)
        outcomes: list[ApplyOutcome] = []
        for adapter in self.adapters:
            if adapter.name in enabled:
                outcomes.append(self.run_one(adapter, settings, Operation.apply))
            elif adapter.name in disabled:
                # The map already says disabled; the teardown must still run.
                outcomes.append(
                    self.run_one(adapter, settings, Operation.remove, check_enabled=False)
                )
        return outcomes

    def run_one(
        self,
        adapter: AdapterProtocol,
        settings: Settings,
        operation: Operation,
        check_enabled: bool = True,
    ) -> ApplyOutcome:
        name = adapter.name

        if check_enabled and not settings.is_enabled(name):
            return ApplyOutcome(name=name, kind=OutcomeKind.skipped_disabled)

        try:
            available = adapter.is_available(self.ctx.os_info)
        except Exception as e:
            logger.debug("%s: availability check failed", name, exc_info=True)
            return ApplyOutcome(name=name, kind=OutcomeKind.failed, error=str(e))
        if not available:
            return ApplyOutcome(name=name, kind=OutcomeKind.skipped_unavailable)

        logger.debug("%s: %s", name, operation.value)
        try:
            if operation is Operation.apply:
                adapter.apply(settings, self.ctx)
            else:
                adapter.remove(self.ctx)
        except Exception as e:
            logger.debug("%s: %s failed", name, operation.value, exc_info=True)
            return ApplyOutcome(name=name, kind=OutcomeKind.failed, error=str(e) or type(e).__name__)

        if name in self.ctx.gateway.declined:
            return ApplyOutcome(name=name, kind=OutcomeKind.skipped_declined)
        if operation is Operation.apply:
            return ApplyOutcome(name=name, kind=OutcomeKind.configured)
        return ApplyOutcome(name=name, kind=OutcomeKind.removed)

    def status(self, settings: Settings) -> list[StatusEntry]:
        """Read-only pass; never calls apply or remove."""
        entries: list[StatusEntry] = []
        for adapter in self.adapters:
            name = adapter.name
            if not settings.is_enabled(name):
                entries.append(StatusEntry(name=name, label="disabled", enabled=False))
                continue

            try:
                available = adapter.is_available(self.ctx.os_info)
            except Exception as e:
                entries.append(StatusEntry(name=name, label=UNKNOWN, available=False, error=str(e)))
                continue
            if not available:
                entries.append(StatusEntry(name=name, label="not available", available=False))
                continue

            try:
                label = adapter.status(settings, self.ctx)
            except Exception as e:
                logger.debug("%s: status failed", name, exc_info=True)
                entries.append(StatusEntry(name=name, label=UNKNOWN, error=str(e)))
                continue
            entries.append(StatusEntry(name=name, label=label))
        return entries
