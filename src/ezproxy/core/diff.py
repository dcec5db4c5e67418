"""Compute enable/disable deltas between the stored enablement map and a new selection."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Mapping

from ezproxy.core.schema import ApplyOutcome, Settings

if TYPE_CHECKING:
    from ezproxy.core.orchestrator import Orchestrator
    from ezproxy.core.settings import SettingsStore


@dataclass
class ToggleDiff:
    newly_enabled: list[str] = field(default_factory=list)
    newly_disabled: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.newly_enabled or self.newly_disabled)


def effective_state(tools: Mapping[str, bool], name: str) -> bool:
    """An adapter missing from the map is enabled."""
    return tools.get(name, True)


def compute_diff(
    current: Mapping[str, bool],
    desired: Mapping[str, bool],
    known: Iterable[str],
) -> ToggleDiff:
    """Classify every known adapter as newly enabled, newly disabled or unchanged.

    Names absent from ``desired`` keep their current effective state. The
    result lists preserve the order of ``known``.
    """
    diff = ToggleDiff()
    for name in known:
        before = effective_state(current, name)
        after = desired.get(name, before)
        if after and not before:
            diff.newly_enabled.append(name)
        elif before and not after:
            diff.newly_disabled.append(name)
        else:
            diff.unchanged.append(name)
    return diff


def full_selection(
    current: Mapping[str, bool],
    desired: Mapping[str, bool],
    known: Iterable[str],
) -> dict[str, bool]:
    """Explicit map for every known adapter, desired values over current ones."""
    return {name: desired.get(name, effective_state(current, name)) for name in known}


def toggle_single(
    current: Mapping[str, bool],
    name: str,
    enabled: bool,
    known: Iterable[str],
) -> dict[str, bool]:
    """Desired selection for a single enable/disable command."""
    selection = full_selection(current, {}, known)
    selection[name] = enabled
    return selection


def apply_toggle(
    settings: Settings,
    desired: Mapping[str, bool],
    store: SettingsStore,
    orchestrator: Orchestrator,
) -> tuple[ToggleDiff, Settings, list[ApplyOutcome]]:
    """Persist the new selection, then apply/remove the adapters whose state flipped.

    The map is written before any adapter runs, so an adapter failure or an
    interrupted run never loses the user's choice.
    """
    known = orchestrator.names
    diff = compute_diff(settings.tools, desired, known)
    selection = full_selection(settings.tools, desired, known)

    # Unknown names already in the document are kept as-is.
    merged = {**settings.tools, **selection}
    if orchestrator.ctx.dry_run:
        updated = settings.with_tools(merged)
    else:
        updated = store.save_tools(settings, merged)

    outcomes = orchestrator.run_toggle(updated, diff.newly_enabled, diff.newly_disabled)
    return diff, updated, outcomes
