"""System-owned targets: trust store and package managers. All writes go through sudo."""

from __future__ import annotations

import re
from pathlib import Path

from ezproxy.adapters.base import CONFIGURED, NO_CERT, NOT_CONFIGURED, STALE, UNKNOWN, AdapterError
from ezproxy.core.context import ExecutionContext
from ezproxy.core.privileged import shell_quote
from ezproxy.core.schema import Settings
from ezproxy.utils.detect import OSInfo, command_available

CA_NAME = "ezproxy-corp-ca"
DEBIAN_ANCHOR = Path(f"/usr/local/share/ca-certificates/{CA_NAME}.crt")
RHEL_ANCHOR = Path(f"/etc/pki/ca-trust/source/anchors/{CA_NAME}.pem")
MACOS_KEYCHAIN = "/Library/Keychains/System.keychain"

INSTALLED = "installed"
NOT_INSTALLED = "not installed"


def _read(path: Path) -> bytes | None:
    try:
        return path.read_bytes()
    except OSError:
        return None


class SystemCAAdapter:
    """Install the corporate CA into the OS trust store."""

    name = "system_ca"

    def __init__(self, anchor: Path | None = None) -> None:
        self._anchor = anchor

    def is_available(self, os_info: OSInfo) -> bool:
        return True

    def anchor(self, os_info: OSInfo) -> Path | None:
        """Where the distro keeps our copy of the cert, if it has a fixed place."""
        if self._anchor is not None:
            return self._anchor
        if os_info.is_debian():
            return DEBIAN_ANCHOR
        if os_info.is_rhel():
            return RHEL_ANCHOR
        return None

    def _cert(self, settings: Settings) -> str:
        cert = settings.ca_cert_path
        if not cert:
            raise AdapterError("no CA cert configured")
        if not Path(cert).is_file():
            raise AdapterError(f"cert file not found: {cert}")
        return cert

    def apply(self, settings: Settings, ctx: ExecutionContext) -> None:
        cert = self._cert(settings)
        os_info = ctx.os_info

        anchor = self.anchor(os_info)
        if anchor is not None and not ctx.dry_run and _read(anchor) == _read(Path(cert)):
            ctx.note("  CA cert is already in the system trust store")
            return

        if os_info.is_darwin:
            commands = [f"security add-trusted-cert -d -r trustRoot -k {MACOS_KEYCHAIN} {shell_quote(cert)}"]
        elif os_info.is_debian():
            commands = [f"cp {shell_quote(cert)} {anchor}", "update-ca-certificates"]
        elif os_info.is_rhel():
            commands = [f"cp {shell_quote(cert)} {anchor}", "update-ca-trust extract"]
        elif os_info.is_arch():
            commands = [f"trust anchor --store {shell_quote(cert)}"]
        else:
            ctx.note(
                "\n  Unknown Linux distro. Copy cert to your system's CA trust directory "
                "and update the trust store manually."
            )
            return
        ctx.gateway.run(self.name, commands)

    def remove(self, ctx: ExecutionContext) -> None:
        os_info = ctx.os_info
        if os_info.is_darwin:
            ctx.note(
                "\n  To remove CA cert from macOS: open Keychain Access > System > "
                "Certificates, find the cert and delete it."
            )
            return

        anchor = self.anchor(os_info)
        if os_info.is_debian():
            if anchor is None or not anchor.exists():
                return
            commands = [f"rm -f {anchor}", "update-ca-certificates --fresh"]
        elif os_info.is_rhel():
            if anchor is None or not anchor.exists():
                return
            commands = [f"rm -f {anchor}", "update-ca-trust extract"]
        elif os_info.is_arch():
            commands = [f"trust anchor --remove {CA_NAME}.pem"]
        else:
            return
        ctx.gateway.run_best_effort(self.name, commands)

    def status(self, settings: Settings, ctx: ExecutionContext) -> str:
        if not settings.ca_cert_path:
            return NO_CERT
        anchor = self.anchor(ctx.os_info)
        if anchor is None:
            return UNKNOWN
        return INSTALLED if anchor.exists() else NOT_INSTALLED


class SnapAdapter:
    name = "snap"

    def is_available(self, os_info: OSInfo) -> bool:
        return command_available("snap")

    def apply(self, settings: Settings, ctx: ExecutionContext) -> None:
        commands = [
            f"snap set system proxy.http={shell_quote(settings.proxy.http)}",
            f"snap set system proxy.https={shell_quote(settings.proxy.https)}",
        ]
        cert = settings.ca_cert_path
        if cert:
            commands.append(f'snap set system store-certs.ezproxy="$(cat {shell_quote(cert)})"')
        ctx.gateway.run(self.name, commands)

    def remove(self, ctx: ExecutionContext) -> None:
        ctx.gateway.run_best_effort(
            self.name,
            [
                "snap unset system proxy.http",
                "snap unset system proxy.https",
                "snap unset system store-certs.ezproxy",
            ],
        )

    def status(self, settings: Settings, ctx: ExecutionContext) -> str:
        # snap get needs root on some systems; nothing to read without sudo.
        return UNKNOWN


class AptAdapter:
    name = "apt"

    def __init__(self, conf_path: Path | None = None) -> None:
        self.conf_path = conf_path or Path("/etc/apt/apt.conf.d/99ezproxy")

    def is_available(self, os_info: OSInfo) -> bool:
        return command_available("apt", "apt-get")

    def render(self, settings: Settings) -> str:
        return (
            f'Acquire::http::Proxy "{settings.proxy.http}";\n'
            f'Acquire::https::Proxy "{settings.proxy.https}";\n'
        )

    def apply(self, settings: Settings, ctx: ExecutionContext) -> None:
        content = self.render(settings)
        ctx.gateway.run(self.name, [f"printf '%s' {shell_quote(content)} > {self.conf_path}"])

    def remove(self, ctx: ExecutionContext) -> None:
        if not self.conf_path.exists():
            return
        ctx.gateway.run_best_effort(self.name, [f"rm -f {self.conf_path}"])

    def status(self, settings: Settings, ctx: ExecutionContext) -> str:
        current = _read(self.conf_path)
        if current is None:
            return NOT_CONFIGURED
        return CONFIGURED if current.decode("utf-8", "replace") == self.render(settings) else STALE


class YumAdapter:
    """Set proxy= and sslcacert= in dnf.conf (or yum.conf on older systems)."""

    name = "yum"

    def __init__(self, conf_path: Path | None = None) -> None:
        self._conf_path = conf_path

    @property
    def conf_path(self) -> Path:
        if self._conf_path is not None:
            return self._conf_path
        if command_available("dnf"):
            return Path("/etc/dnf/dnf.conf")
        return Path("/etc/yum.conf")

    def is_available(self, os_info: OSInfo) -> bool:
        return command_available("yum", "dnf")

    @staticmethod
    def _set_line(key: str, value: str, conf: Path) -> str:
        # Backslash, & and the | delimiter are special in a sed replacement.
        replacement = re.sub(r"([\\&|])", r"\\\1", value)
        script = shell_quote(f"s|^{key}=.*|{key}={replacement}|")
        return (
            f"grep -q '^{key}=' {conf} && sed -i {script} {conf} "
            f"|| echo {shell_quote(f'{key}={value}')} >> {conf}"
        )

    def apply(self, settings: Settings, ctx: ExecutionContext) -> None:
        conf = self.conf_path
        commands = [self._set_line("proxy", settings.proxy.http, conf)]
        cert = settings.ca_cert_path
        if cert:
            commands.append(self._set_line("sslcacert", cert, conf))
        ctx.gateway.run(self.name, commands)

    def remove(self, ctx: ExecutionContext) -> None:
        conf = self.conf_path
        if not conf.exists():
            return
        ctx.gateway.run_best_effort(self.name, [f"sed -i '/^proxy=/d; /^sslcacert=/d' {conf}"])

    def status(self, settings: Settings, ctx: ExecutionContext) -> str:
        raw = _read(self.conf_path)
        if raw is None:
            return NOT_CONFIGURED
        m = re.search(r"^proxy=(.*)$", raw.decode("utf-8", "replace"), re.MULTILINE)
        if not m:
            return NOT_CONFIGURED
        return CONFIGURED if m.group(1).strip() == settings.proxy.http else STALE
