"""AdapterProtocol: the interface every tool adapter implements."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ezproxy.core.context import ExecutionContext
    from ezproxy.core.schema import Settings
    from ezproxy.utils.detect import OSInfo

# Status labels
CONFIGURED = "configured"
NOT_CONFIGURED = "not configured"
STALE = "stale"  # configured, but no longer matches the current settings
UNKNOWN = "unknown"
NO_CERT = "no cert configured"


class AdapterError(Exception):
    """An adapter cannot do its job with the given settings or environment."""


@runtime_checkable
class AdapterProtocol(Protocol):
    """Interface that all adapters must implement.

    ``name`` is the key into the enablement map and must stay stable.
    ``apply`` and ``remove`` must be safe to repeat and must not assume
    ``is_available`` was checked.
    """

    name: str

    def is_available(self, os_info: OSInfo) -> bool:
        """Check if the tool is installed. Must not change anything."""
        ...

    def apply(self, settings: Settings, ctx: ExecutionContext) -> None:
        """Write proxy configuration for the tool."""
        ...

    def remove(self, ctx: ExecutionContext) -> None:
        """Undo what apply wrote."""
        ...

    def status(self, settings: Settings, ctx: ExecutionContext) -> str:
        """Return a status label. Must not change anything."""
        ...
