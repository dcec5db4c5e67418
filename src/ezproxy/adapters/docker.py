"""Docker adapter: client proxies in ~/.docker/config.json, daemon drop-in on Linux."""

from __future__ import annotations

import logging
from pathlib import Path

from ezproxy.adapters._structured import dump_json, read_json, write_text
from ezproxy.adapters.base import CONFIGURED, NOT_CONFIGURED, STALE
from ezproxy.core.context import ExecutionContext
from ezproxy.core.privileged import PrivilegedCommandError
from ezproxy.core.schema import Settings
from ezproxy.utils.detect import OSInfo, command_available, home_dir

logger = logging.getLogger(__name__)

DROPIN_DIR = "/etc/systemd/system/docker.service.d"
DROPIN_FILE = f"{DROPIN_DIR}/ezproxy.conf"


def client_proxies(settings: Settings) -> dict:
    return {
        "default": {
            "httpProxy": settings.proxy.http,
            "httpsProxy": settings.proxy.https,
            "noProxy": settings.proxy.no_proxy,
        }
    }


def daemon_dropin(settings: Settings) -> str:
    p = settings.proxy
    return (
        "[Service]\n"
        f'Environment="HTTP_PROXY={p.http}"\n'
        f'Environment="HTTPS_PROXY={p.https}"\n'
        f'Environment="NO_PROXY={p.no_proxy}"\n'
    )


class DockerAdapter:
    name = "docker"

    def __init__(self, config_path: Path | None = None) -> None:
        self._config_path = config_path

    @property
    def config_path(self) -> Path:
        return self._config_path or home_dir() / ".docker" / "config.json"

    def is_available(self, os_info: OSInfo) -> bool:
        return command_available("docker")

    def apply(self, settings: Settings, ctx: ExecutionContext) -> None:
        path = self.config_path
        config = read_json(path)
        config["proxies"] = client_proxies(settings)
        write_text(path, dump_json(config), ctx, "Would merge into")

        if ctx.os_info.is_linux:
            self._apply_daemon(settings, ctx)
        elif ctx.os_info.is_darwin:
            p = settings.proxy
            ctx.note("\n[Docker Desktop - macOS]")
            ctx.note("Configure proxy via: Docker Desktop > Settings > Resources > Proxies")
            ctx.note(f"  HTTP Proxy:  {p.http}")
            ctx.note(f"  HTTPS Proxy: {p.https}")
            ctx.note(f"  No Proxy:    {p.no_proxy}")
            ctx.note("Docker Desktop reads macOS system CA certs automatically after restart.")

    def _apply_daemon(self, settings: Settings, ctx: ExecutionContext) -> None:
        content = daemon_dropin(settings).replace("'", "'\\''")
        commands = [
            f"mkdir -p {DROPIN_DIR}",
            f"printf '%s' '{content}' > {DROPIN_FILE}",
            "systemctl daemon-reload && systemctl restart docker",
        ]
        try:
            ctx.gateway.run(self.name, commands)
        except PrivilegedCommandError as e:
            # The client config is already written; the daemon part is advisory.
            logger.warning("docker daemon: %s", e)
            ctx.note(f"  docker daemon: {e}")

    def remove(self, ctx: ExecutionContext) -> None:
        path = self.config_path
        if not path.is_file():
            return
        config = read_json(path)
        if "proxies" not in config:
            return
        del config["proxies"]
        write_text(path, dump_json(config), ctx, 'Would remove "proxies" from')

    def status(self, settings: Settings, ctx: ExecutionContext) -> str:
        proxies = read_json(self.config_path).get("proxies")
        if not proxies:
            return NOT_CONFIGURED
        return CONFIGURED if proxies == client_proxies(settings) else STALE
