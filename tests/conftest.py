"""Shared fixtures: fake adapters, recording sudo runner, scratch HOME and settings."""

from __future__ import annotations

import subprocess
from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

from ezproxy.core.context import ExecutionContext
from ezproxy.core.schema import ProxySettings, Settings
from ezproxy.utils.detect import OSInfo

PROXY = "http://proxy.corp.com:8080"
NO_PROXY = "localhost,127.0.0.1,.corp.com"


class FakeAdapter:
    """In-memory adapter that records every call made on it."""

    def __init__(self, name: str, available: bool = True, error: Exception | None = None, label: str = "configured"):
        self.name = name
        self.available = available
        self.error = error
        self.label = label
        self.calls: list[str] = []

    def is_available(self, os_info):
        self.calls.append("is_available")
        return self.available

    def apply(self, settings, ctx):
        self.calls.append("apply")
        if self.error:
            raise self.error

    def remove(self, ctx):
        self.calls.append("remove")
        if self.error:
            raise self.error

    def status(self, settings, ctx):
        self.calls.append("status")
        if self.error:
            raise self.error
        return self.label


class FakeRunner:
    """Stands in for subprocess.run; records the commands handed to `sudo sh -c`."""

    def __init__(self, returncodes: list[int] | None = None):
        self.returncodes = list(returncodes or [])
        self.commands: list[str] = []

    def __call__(self, argv, check=False, **kwargs):
        assert argv[:3] == ["sudo", "sh", "-c"]
        self.commands.append(argv[3])
        code = self.returncodes.pop(0) if self.returncodes else 0
        return subprocess.CompletedProcess(argv, code)


@pytest.fixture
def runner_factory():
    return FakeRunner


@pytest.fixture
def make_adapter():
    return FakeAdapter


@pytest.fixture
def home(tmp_path: Path, monkeypatch) -> Path:
    """Point HOME at a scratch directory so adapters never touch real dotfiles."""
    h = tmp_path / "home"
    h.mkdir()
    monkeypatch.setenv("HOME", str(h))
    return h


@pytest.fixture
def config_path(tmp_path: Path, monkeypatch) -> Path:
    path = tmp_path / "ezproxy" / "config.yaml"
    monkeypatch.setenv("EZPROXY_CONFIG", str(path))
    return path


@pytest.fixture
def settings() -> Settings:
    return Settings(proxy=ProxySettings(http=PROXY, https=PROXY, no_proxy=NO_PROXY))


@pytest.fixture
def cert(home: Path) -> Path:
    path = home / "corp-ca.pem"
    path.write_text("-----BEGIN CERTIFICATE-----\nMIIB\n-----END CERTIFICATE-----\n")
    return path


@pytest.fixture
def settings_with_cert(settings: Settings, cert: Path) -> Settings:
    return settings.model_copy(update={"ca_cert": str(cert)})


@pytest.fixture
def console() -> Console:
    return Console(file=StringIO(), width=200)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_ctx(console, fake_runner):
    def _make(**kwargs) -> ExecutionContext:
        kwargs.setdefault("console", console)
        kwargs.setdefault("os_info", OSInfo(os="linux", distro="ubuntu"))
        kwargs.setdefault("runner", fake_runner)
        kwargs.setdefault("confirm", lambda question: True)
        return ExecutionContext(**kwargs)

    return _make


@pytest.fixture
def ctx(make_ctx) -> ExecutionContext:
    return make_ctx()


@pytest.fixture
def dry_ctx(make_ctx) -> ExecutionContext:
    return make_ctx(dry_run=True)
