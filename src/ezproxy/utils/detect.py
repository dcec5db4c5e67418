"""Environment detection: OS family, login shell, shell profiles, installed commands."""

from __future__ import annotations

import os
import platform
import shutil
from dataclasses import dataclass
from pathlib import Path

OS_RELEASE = Path("/etc/os-release")

_DEBIAN = {"debian", "ubuntu", "pop", "mint"}
_RHEL = {"fedora", "rhel", "centos", "rocky", "alma"}
_ARCH = {"arch", "manjaro", "endeavouros"}


@dataclass(frozen=True)
class OSInfo:
    os: str  # "darwin" or "linux"
    distro: str = ""  # os-release ID on Linux, "" elsewhere

    @property
    def is_darwin(self) -> bool:
        return self.os == "darwin"

    @property
    def is_linux(self) -> bool:
        return self.os == "linux"

    def is_debian(self) -> bool:
        return self.distro in _DEBIAN

    def is_rhel(self) -> bool:
        return self.distro in _RHEL

    def is_arch(self) -> bool:
        return self.distro in _ARCH


def detect_os(os_release: Path = OS_RELEASE) -> OSInfo:
    system = platform.system().lower()
    if system != "linux":
        return OSInfo(os=system)
    return OSInfo(os=system, distro=_read_distro(os_release))


def _read_distro(os_release: Path) -> str:
    try:
        content = os_release.read_text().lower()
    except OSError:
        return ""
    for line in content.splitlines():
        if line.startswith("id="):
            return line[len("id="):].strip().strip('"')
    return ""


def command_available(*names: str) -> bool:
    """True if any of the given executables is on PATH."""
    return any(shutil.which(name) is not None for name in names)


def home_dir() -> Path:
    return Path.home()


def detect_shell() -> str:
    """Return the basename of the login shell from $SHELL, or ""."""
    shell = os.environ.get("SHELL", "")
    return Path(shell).name if shell else ""


def shell_profiles(home: Path | None = None, shell: str | None = None) -> list[Path]:
    """Return the existing profile files that belong to the user's shell.

    Only files that already exist are returned; a profile is never created
    just to hold proxy exports. Bash falls back to ~/.profile when neither
    ~/.bashrc nor ~/.bash_profile exists. Fish is the exception: it gets a
    dedicated conf.d file whether or not it exists yet.
    """
    home = home or home_dir()
    shell = detect_shell() if shell is None else shell

    if shell == "zsh":
        candidates = [home / ".zshrc", home / ".zprofile"]
    elif shell == "bash":
        candidates = [home / ".bashrc", home / ".bash_profile"]
    elif shell == "fish":
        # A conf.d snippet of our own; created on first apply.
        return [home / ".config" / "fish" / "conf.d" / "ezproxy.fish"]
    else:
        candidates = [home / ".profile", home / ".bashrc", home / ".bash_profile", home / ".zshrc"]

    profiles = [p for p in candidates if p.exists()]

    if shell == "bash" and not profiles and (home / ".profile").exists():
        profiles.append(home / ".profile")

    return profiles


def expand_path(path: str) -> str:
    """Expand a leading ``~/`` to the home directory."""
    if path.startswith("~/"):
        return str(home_dir() / path[2:])
    return path
