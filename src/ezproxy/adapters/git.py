"""Git adapter: global http.proxy and http.sslCAInfo through GitPython."""

from __future__ import annotations

import logging

from ezproxy.adapters.base import CONFIGURED, NOT_CONFIGURED, STALE
from ezproxy.core.context import ExecutionContext
from ezproxy.core.schema import Settings
from ezproxy.utils.detect import OSInfo, command_available

logger = logging.getLogger(__name__)

KEYS = ("http.proxy", "http.sslCAInfo")


class GitAdapter:
    name = "git"

    def __init__(self, config_file: str | None = None) -> None:
        # None means --global; tests point this at a scratch file.
        self.config_file = config_file

    def _scope(self) -> tuple[str, ...]:
        if self.config_file:
            return ("--file", self.config_file)
        return ("--global",)

    def _git(self):
        # GitPython resolves the git executable at import time.
        import git

        return git, git.Git()

    def is_available(self, os_info: OSInfo) -> bool:
        return command_available("git")

    def _wanted(self, settings: Settings) -> list[tuple[str, str]]:
        pairs = [("http.proxy", settings.proxy.http)]
        if settings.ca_cert_path:
            pairs.append(("http.sslCAInfo", settings.ca_cert_path))
        return pairs

    def apply(self, settings: Settings, ctx: ExecutionContext) -> None:
        pairs = self._wanted(settings)
        if ctx.dry_run:
            ctx.note("\n  [dry-run] Would run:")
            for key, value in pairs:
                ctx.note(f"    git config {' '.join(self._scope())} {key} {value}")
            return

        _, g = self._git()
        for key, value in pairs:
            g.config(*self._scope(), key, value)

    def remove(self, ctx: ExecutionContext) -> None:
        if ctx.dry_run:
            ctx.note("\n  [dry-run] Would run:")
            for key in KEYS:
                ctx.note(f"    git config {' '.join(self._scope())} --unset {key}")
            return

        git, g = self._git()
        for key in KEYS:
            try:
                g.config(*self._scope(), "--unset", key)
            except git.GitCommandError:
                # Exit status 5: the key was not set.
                logger.debug("git config %s was not set", key)

    def get(self, key: str) -> str:
        git, g = self._git()
        try:
            return g.config(*self._scope(), key).strip()
        except git.GitCommandError:
            return ""

    def status(self, settings: Settings, ctx: ExecutionContext) -> str:
        current = self.get("http.proxy")
        if not current:
            return NOT_CONFIGURED
        return CONFIGURED if current == settings.proxy.http else STALE
