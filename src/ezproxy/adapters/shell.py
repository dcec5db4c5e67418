"""Shell profile adapters: proxy environment variables, Go module hints, Homebrew."""

from __future__ import annotations

import os
from pathlib import Path

from ezproxy.adapters._marker import marker_status
from ezproxy.adapters.base import CONFIGURED, NOT_CONFIGURED, AdapterError
from ezproxy.core.context import ExecutionContext
from ezproxy.core.schema import Settings
from ezproxy.utils.detect import OSInfo, command_available, detect_shell, shell_profiles

# Go's hint block lives in the same profiles as env_vars and needs its own delimiters.
GO_COMMENT = "##"


class _ProfileAdapter:
    def __init__(self, profiles: list[Path] | None = None, shell: str | None = None) -> None:
        self._profiles = profiles
        self._shell = shell

    @property
    def shell(self) -> str:
        return detect_shell() if self._shell is None else self._shell

    @property
    def is_fish(self) -> bool:
        return self.shell == "fish"

    def profiles(self) -> list[Path]:
        if self._profiles is not None:
            return self._profiles
        return shell_profiles(shell=self.shell)


class EnvVarsAdapter(_ProfileAdapter):
    """Export HTTP(S)_PROXY, NO_PROXY and CA bundle variables from every shell profile.

    Several other tools (brew, go, bundler) rely on these variables instead
    of a config file of their own.
    """

    name = "env_vars"
    comment = "#"

    def is_available(self, os_info: OSInfo) -> bool:
        return True

    def render(self, settings: Settings) -> str:
        p = settings.proxy
        variables = [
            ("HTTP_PROXY", p.http),
            ("HTTPS_PROXY", p.https),
            ("http_proxy", p.http),
            ("https_proxy", p.https),
            ("NO_PROXY", p.no_proxy),
            ("no_proxy", p.no_proxy),
        ]
        cert = settings.ca_cert_path
        if cert:
            variables += [
                ("SSL_CERT_FILE", cert),
                ("REQUESTS_CA_BUNDLE", cert),
                ("CURL_CA_BUNDLE", cert),
                ("NODE_EXTRA_CA_CERTS", cert),
            ]
        variables.append(("HOMEBREW_CURLRC", "1"))

        if self.is_fish:
            return "".join(f"set -gx {key} {value}\n" for key, value in variables)
        return "".join(f"export {key}={value}\n" for key, value in variables)

    def apply(self, settings: Settings, ctx: ExecutionContext) -> None:
        profiles = self.profiles()
        if not profiles:
            raise AdapterError("no shell profile found")
        body = self.render(settings)
        for profile in profiles:
            ctx.patcher.upsert(profile, body, self.comment)

    def remove(self, ctx: ExecutionContext) -> None:
        for profile in self.profiles():
            ctx.patcher.remove(profile, self.comment)

    def status(self, settings: Settings, ctx: ExecutionContext) -> str:
        body = self.render(settings)
        labels = [marker_status(ctx.patcher, p, body, self.comment) for p in self.profiles()]
        configured = [label for label in labels if label != NOT_CONFIGURED]
        if not configured:
            return NOT_CONFIGURED
        if all(label == CONFIGURED for label in configured):
            return CONFIGURED
        return "stale"


class GoAdapter(_ProfileAdapter):
    """GOPRIVATE/GONOSUMDB guidance for private modules.

    Go already honours HTTP(S)_PROXY from env_vars and uses the system
    trust store, so the block only carries commented examples.
    """

    name = "go"

    def is_available(self, os_info: OSInfo) -> bool:
        return command_available("go")

    def render(self) -> str:
        if self.is_fish:
            example = ['#   set -gx GOPRIVATE "github.com/yourcompany/*,git.internal.com/*"',
                       "# set -gx GONOSUMDB $GOPRIVATE"]
        else:
            example = ['#   export GOPRIVATE="github.com/yourcompany/*,git.internal.com/*"',
                       '# export GONOSUMDB="$GOPRIVATE"']
        lines = [
            "# Go module settings for corporate proxy",
            "# Set GOPRIVATE to your internal module paths, e.g.:",
            *example,
        ]
        return "\n".join(lines) + "\n"

    def apply(self, settings: Settings, ctx: ExecutionContext) -> None:
        profiles = self.profiles()
        if not profiles:
            raise AdapterError("no shell profile found")
        ctx.patcher.upsert(profiles[0], self.render(), GO_COMMENT)

    def remove(self, ctx: ExecutionContext) -> None:
        for profile in self.profiles():
            ctx.patcher.remove(profile, GO_COMMENT)

    def status(self, settings: Settings, ctx: ExecutionContext) -> str:
        goprivate = os.environ.get("GOPRIVATE")
        if goprivate:
            return f"GOPRIVATE={goprivate}"
        for profile in self.profiles():
            if ctx.patcher.has_block(profile, GO_COMMENT):
                return "configured (GOPRIVATE not yet set)"
        return NOT_CONFIGURED


class BrewAdapter(_ProfileAdapter):
    """Homebrew picks up HTTP_PROXY and HOMEBREW_CURLRC written by env_vars."""

    name = "brew"

    def is_available(self, os_info: OSInfo) -> bool:
        return command_available("brew")

    def apply(self, settings: Settings, ctx: ExecutionContext) -> None:
        return None

    def remove(self, ctx: ExecutionContext) -> None:
        return None

    def status(self, settings: Settings, ctx: ExecutionContext) -> str:
        for profile in self.profiles():
            if ctx.patcher.has_block(profile, EnvVarsAdapter.comment):
                return "configured (via env_vars)"
        return NOT_CONFIGURED
