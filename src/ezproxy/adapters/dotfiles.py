"""Adapters for tools that read a per-user dotfile with '#' comments."""

from __future__ import annotations

import platform
import subprocess
from pathlib import Path
from urllib.parse import urlsplit

from ezproxy.adapters._marker import MarkerFileAdapter, marker_status
from ezproxy.adapters.base import CONFIGURED, NOT_CONFIGURED, AdapterError
from ezproxy.core.context import ExecutionContext
from ezproxy.core.schema import Settings
from ezproxy.utils.detect import home_dir


class PipAdapter(MarkerFileAdapter):
    name = "pip"
    commands = ("pip", "pip3")

    def default_path(self) -> Path:
        if platform.system() == "Darwin":
            return home_dir() / "Library" / "Application Support" / "pip" / "pip.conf"
        return home_dir() / ".config" / "pip" / "pip.conf"

    def render(self, settings: Settings) -> str:
        lines = ["[global]", f"proxy = {settings.proxy.http}"]
        if settings.ca_cert_path:
            lines.append(f"cert = {settings.ca_cert_path}")
        return "\n".join(lines) + "\n"


class NpmAdapter(MarkerFileAdapter):
    name = "npm"
    commands = ("npm",)

    def default_path(self) -> Path:
        return home_dir() / ".npmrc"

    def render(self, settings: Settings) -> str:
        lines = [f"proxy={settings.proxy.http}", f"https-proxy={settings.proxy.https}"]
        if settings.ca_cert_path:
            lines.append(f"cafile={settings.ca_cert_path}")
        return "\n".join(lines) + "\n"


class CurlAdapter(MarkerFileAdapter):
    name = "curl"
    commands = ("curl",)

    def default_path(self) -> Path:
        return home_dir() / ".curlrc"

    def render(self, settings: Settings) -> str:
        lines = [f'proxy = "{settings.proxy.http}"']
        if settings.ca_cert_path:
            lines.append(f'cacert = "{settings.ca_cert_path}"')
        return "\n".join(lines) + "\n"


class WgetAdapter(MarkerFileAdapter):
    name = "wget"
    commands = ("wget",)

    def default_path(self) -> Path:
        return home_dir() / ".wgetrc"

    def render(self, settings: Settings) -> str:
        lines = [
            f"http_proxy = {settings.proxy.http}",
            f"https_proxy = {settings.proxy.https}",
        ]
        if settings.ca_cert_path:
            lines.append(f"ca_certificate = {settings.ca_cert_path}")
        return "\n".join(lines) + "\n"


class CargoAdapter(MarkerFileAdapter):
    name = "cargo"
    commands = ("cargo",)

    def default_path(self) -> Path:
        return home_dir() / ".cargo" / "config.toml"

    def render(self, settings: Settings) -> str:
        lines = ["[http]", f'proxy = "{settings.proxy.http}"']
        if settings.ca_cert_path:
            lines.append(f'cainfo = "{settings.ca_cert_path}"')
        return "\n".join(lines) + "\n"


class CondaAdapter(MarkerFileAdapter):
    name = "conda"
    commands = ("conda",)

    def default_path(self) -> Path:
        return home_dir() / ".condarc"

    def render(self, settings: Settings) -> str:
        lines = [
            "proxy_servers:",
            f"  http: {settings.proxy.http}",
            f"  https: {settings.proxy.https}",
        ]
        if settings.ca_cert_path:
            lines.append(f"ssl_verify: {settings.ca_cert_path}")
        return "\n".join(lines) + "\n"


class PodmanAdapter(MarkerFileAdapter):
    """containers.conf is TOML; the block holds our [containers] env entries."""

    name = "podman"
    commands = ("podman",)

    def default_path(self) -> Path:
        return home_dir() / ".config" / "containers" / "containers.conf"

    def render(self, settings: Settings) -> str:
        p = settings.proxy
        env = [
            f"http_proxy={p.http}",
            f"https_proxy={p.https}",
            f"no_proxy={p.no_proxy}",
            f"HTTP_PROXY={p.http}",
            f"HTTPS_PROXY={p.https}",
            f"NO_PROXY={p.no_proxy}",
        ]
        lines = ["[containers]", "env = ["]
        lines += [f'  "{entry}",' for entry in env]
        lines.append("]")
        return "\n".join(lines) + "\n"


class SSHAdapter(MarkerFileAdapter):
    """Route ssh through the HTTP proxy with netcat's CONNECT support.

    Off by default: a catch-all ``Host *`` ProxyCommand also affects hosts
    inside the corporate network.
    """

    name = "ssh"
    commands = ("ssh",)

    def default_path(self) -> Path:
        return home_dir() / ".ssh" / "config"

    def render(self, settings: Settings) -> str:
        host = urlsplit(settings.proxy.http).netloc
        if not host:
            raise AdapterError(f"cannot parse proxy host from {settings.proxy.http!r}")
        host = host.rpartition("@")[2]
        return f"Host *\n    ProxyCommand nc -X connect -x {host} %h %p\n"

    def apply(self, settings: Settings, ctx: ExecutionContext) -> None:
        super().apply(settings, ctx)
        if ctx.os_info.is_linux:
            ctx.note("\nNote: SSH proxy requires OpenBSD netcat (netcat-openbsd).")
            ctx.note("GNU netcat does NOT support -X/-x proxy flags.")
            ctx.note("Install: sudo apt install netcat-openbsd (Debian/Ubuntu)")


class YarnAdapter(MarkerFileAdapter):
    """Yarn 1 reads ~/.yarnrc; Yarn 2+ (berry) reads ~/.yarnrc.yml."""

    name = "yarn"
    commands = ("yarn",)

    def __init__(self, v1_path: Path | None = None, v2_path: Path | None = None, berry: bool | None = None) -> None:
        super().__init__()
        self.v1_path = v1_path or home_dir() / ".yarnrc"
        self.v2_path = v2_path or home_dir() / ".yarnrc.yml"
        self._berry = berry

    def is_berry(self) -> bool:
        if self._berry is not None:
            return self._berry
        try:
            out = subprocess.run(["yarn", "--version"], capture_output=True, text=True, check=True)
        except (OSError, subprocess.CalledProcessError):
            return False
        version = out.stdout.strip()
        return bool(version) and version[0].isdigit() and int(version.split(".")[0]) >= 2

    def default_path(self) -> Path:
        return self.v2_path if self.is_berry() else self.v1_path

    def render(self, settings: Settings) -> str:
        cert = settings.ca_cert_path
        if self.is_berry():
            lines = [
                f'httpProxy: "{settings.proxy.http}"',
                f'httpsProxy: "{settings.proxy.https}"',
            ]
            if cert:
                lines.append(f'caFilePath: "{cert}"')
        else:
            lines = [
                f'proxy "{settings.proxy.http}"',
                f'https-proxy "{settings.proxy.https}"',
            ]
            if cert:
                lines.append(f'cafile "{cert}"')
        return "\n".join(lines) + "\n"

    def remove(self, ctx: ExecutionContext) -> None:
        ctx.patcher.remove(self.v1_path, self.comment)
        ctx.patcher.remove(self.v2_path, self.comment)

    def status(self, settings: Settings, ctx: ExecutionContext) -> str:
        current = marker_status(ctx.patcher, self.path, self.render(settings), self.comment)
        if current != NOT_CONFIGURED:
            return current
        # A block left in the other version's file still counts.
        for path in (self.v1_path, self.v2_path):
            if ctx.patcher.has_block(path, self.comment):
                return CONFIGURED
        return NOT_CONFIGURED
