"""Declarative adapter for tools configured through a marker block in one text file.

Subclasses supply the name, the executables that mark the tool as installed,
the default file location and a template renderer. Upsert, removal and
status all go through the shared patcher.
"""

from __future__ import annotations

from pathlib import Path

from ezproxy.adapters.base import CONFIGURED, NOT_CONFIGURED, STALE
from ezproxy.core.context import ExecutionContext
from ezproxy.core.patcher import BlockNotFoundError, TextRegionPatcher
from ezproxy.core.schema import Settings
from ezproxy.utils.detect import OSInfo, command_available


def marker_status(patcher: TextRegionPatcher, path: Path, expected_body: str, prefix: str = "#") -> str:
    """configured / stale / not configured, judged from the block body on disk."""
    if not patcher.has_block(path, prefix):
        return NOT_CONFIGURED
    try:
        body = patcher.get_block_body(path, prefix)
    except BlockNotFoundError:
        return NOT_CONFIGURED
    return CONFIGURED if body == expected_body else STALE


class MarkerFileAdapter:
    name: str = ""
    commands: tuple[str, ...] = ()
    comment: str = "#"

    def __init__(self, path: Path | None = None) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path or self.default_path()

    def default_path(self) -> Path:
        raise NotImplementedError

    def render(self, settings: Settings) -> str:
        raise NotImplementedError

    def is_available(self, os_info: OSInfo) -> bool:
        return command_available(*self.commands)

    def apply(self, settings: Settings, ctx: ExecutionContext) -> None:
        ctx.patcher.upsert(self.path, self.render(settings), self.comment)

    def remove(self, ctx: ExecutionContext) -> None:
        ctx.patcher.remove(self.path, self.comment)

    def status(self, settings: Settings, ctx: ExecutionContext) -> str:
        return marker_status(ctx.patcher, self.path, self.render(settings), self.comment)
