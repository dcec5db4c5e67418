"""Settings document persistence: ~/.config/ezproxy/config.yaml."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Mapping

import yaml
from pydantic import ValidationError

from ezproxy.core.schema import Settings

logger = logging.getLogger(__name__)

CONFIG_ENV = "EZPROXY_CONFIG"

# Adapters that stay off until the user opts in.
DISABLED_BY_DEFAULT = frozenset({"ssh"})


class SettingsError(Exception):
    """The settings document is missing or cannot be used."""


def default_settings_path() -> Path:
    override = os.environ.get(CONFIG_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "ezproxy" / "config.yaml"


def default_tools(names: Iterable[str]) -> dict[str, bool]:
    """First-run enablement map: everything on except DISABLED_BY_DEFAULT."""
    return {name: name not in DISABLED_BY_DEFAULT for name in names}


class SettingsStore:
    def __init__(self, path: Path | None = None) -> None:
        self.path = path or default_settings_path()

    @property
    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Settings:
        if not self.exists:
            raise SettingsError(f"No settings found at {self.path}. Run `ezproxy init` first.")

        logger.debug("Loading settings from %s", self.path)
        try:
            raw = yaml.safe_load(self.path.read_text())
        except yaml.YAMLError as e:
            raise SettingsError(f"Invalid YAML in {self.path}: {e}") from e
        except OSError as e:
            raise SettingsError(f"Cannot read {self.path}: {e}") from e

        if not isinstance(raw, dict):
            raise SettingsError(f"Settings file {self.path} must contain a mapping")

        try:
            return Settings.model_validate(raw)
        except ValidationError as e:
            raise SettingsError(f"Invalid settings in {self.path}: {e}") from e

    def save(self, settings: Settings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = settings.model_dump(mode="json")
        self.path.write_text(yaml.safe_dump(data, sort_keys=False, default_flow_style=False))
        logger.debug("Saved settings to %s", self.path)

    def save_tools(self, settings: Settings, tools: Mapping[str, bool]) -> Settings:
        """Persist a new enablement map and return the updated settings."""
        updated = settings.with_tools(tools)
        self.save(updated)
        return updated
