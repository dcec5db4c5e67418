"""Per-tool adapters. Each one configures a single tool's own config surface."""

from __future__ import annotations

from ezproxy.adapters.base import AdapterError, AdapterProtocol

__all__ = ["AdapterError", "AdapterProtocol"]
