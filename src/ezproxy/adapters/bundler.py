"""Bundler adapter.

Bundler takes the proxy from HTTP_PROXY (written by env_vars) but needs
BUNDLE_SSL_CA_CERT in ~/.bundle/config to trust the corporate CA.
"""

from __future__ import annotations

from pathlib import Path

from ezproxy.adapters._structured import dump_yaml, read_yaml, write_text
from ezproxy.adapters.base import CONFIGURED, NOT_CONFIGURED, STALE
from ezproxy.core.context import ExecutionContext
from ezproxy.core.schema import Settings
from ezproxy.utils.detect import OSInfo, command_available, home_dir

CA_KEY = "BUNDLE_SSL_CA_CERT"


class BundlerAdapter:
    name = "bundler"

    def __init__(self, config_path: Path | None = None) -> None:
        self._config_path = config_path

    @property
    def config_path(self) -> Path:
        return self._config_path or home_dir() / ".bundle" / "config"

    def is_available(self, os_info: OSInfo) -> bool:
        return command_available("bundle")

    def apply(self, settings: Settings, ctx: ExecutionContext) -> None:
        cert = settings.ca_cert_path
        if not cert:
            if ctx.dry_run:
                ctx.note("\n  [dry-run] No CA cert configured; Bundler uses HTTP_PROXY from env_vars.")
            return

        path = self.config_path
        config = read_yaml(path)
        config[CA_KEY] = cert
        write_text(path, dump_yaml(config), ctx, "Would write")

    def remove(self, ctx: ExecutionContext) -> None:
        path = self.config_path
        config = read_yaml(path)
        if CA_KEY not in config:
            return
        del config[CA_KEY]
        write_text(path, dump_yaml(config), ctx, f"Would remove {CA_KEY} from")

    def status(self, settings: Settings, ctx: ExecutionContext) -> str:
        current = read_yaml(self.config_path).get(CA_KEY)
        if not current:
            return NOT_CONFIGURED
        return CONFIGURED if current == settings.ca_cert_path else STALE
