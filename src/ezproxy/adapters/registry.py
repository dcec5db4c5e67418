"""Adapter discovery and registration."""

from __future__ import annotations

from ezproxy.adapters.base import AdapterProtocol
from ezproxy.adapters.bundler import BundlerAdapter
from ezproxy.adapters.docker import DockerAdapter
from ezproxy.adapters.dotfiles import (
    CargoAdapter,
    CondaAdapter,
    CurlAdapter,
    NpmAdapter,
    PipAdapter,
    PodmanAdapter,
    SSHAdapter,
    WgetAdapter,
    YarnAdapter,
)
from ezproxy.adapters.git import GitAdapter
from ezproxy.adapters.java import GradleAdapter, JavaCAAdapter, MavenAdapter
from ezproxy.adapters.shell import BrewAdapter, EnvVarsAdapter, GoAdapter
from ezproxy.adapters.system import AptAdapter, SnapAdapter, SystemCAAdapter, YumAdapter

# Order matters: the trust store first, env_vars early because brew, go and
# bundler lean on it.
_ADAPTER_CLASSES = {
    "system_ca": SystemCAAdapter,
    "java_ca": JavaCAAdapter,
    "env_vars": EnvVarsAdapter,
    "git": GitAdapter,
    "pip": PipAdapter,
    "npm": NpmAdapter,
    "yarn": YarnAdapter,
    "docker": DockerAdapter,
    "podman": PodmanAdapter,
    "curl": CurlAdapter,
    "wget": WgetAdapter,
    "cargo": CargoAdapter,
    "conda": CondaAdapter,
    "go": GoAdapter,
    "gradle": GradleAdapter,
    "maven": MavenAdapter,
    "bundler": BundlerAdapter,
    "brew": BrewAdapter,
    "snap": SnapAdapter,
    "apt": AptAdapter,
    "yum": YumAdapter,
    "ssh": SSHAdapter,
}


def get_adapter(name: str) -> AdapterProtocol | None:
    """Get an adapter instance by name."""
    cls = _ADAPTER_CLASSES.get(name)
    if cls is None:
        return None
    return cls()


def list_adapters() -> list[str]:
    return list(_ADAPTER_CLASSES.keys())


def default_adapters() -> list[AdapterProtocol]:
    """One instance of every adapter, in registry order."""
    return [cls() for cls in _ADAPTER_CLASSES.values()]
