"""Pydantic v2 models for the settings document and orchestration results."""

from __future__ import annotations

from enum import Enum
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ezproxy.utils.detect import expand_path


# -- Settings document --


class ProxySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    http: str = ""
    https: str = ""
    no_proxy: str = ""

    @field_validator("http", "https", "no_proxy", mode="before")
    @classmethod
    def _blank_is_empty(cls, v):
        # A key left blank in YAML loads as None.
        return "" if v is None else v


class Settings(BaseModel):
    """Input for one run: proxy URLs, optional CA cert and the enablement map.

    ``tools`` maps adapter name to enabled. A name that is absent counts as
    enabled.
    """

    model_config = ConfigDict(frozen=True)

    proxy: ProxySettings = Field(default_factory=ProxySettings)
    ca_cert: str = ""
    tools: dict[str, bool] = Field(default_factory=dict)

    @field_validator("proxy", mode="before")
    @classmethod
    def _blank_proxy(cls, v):
        return {} if v is None else v

    @field_validator("ca_cert", mode="before")
    @classmethod
    def _blank_cert(cls, v):
        return "" if v is None else v

    @field_validator("tools", mode="before")
    @classmethod
    def _blank_tools(cls, v):
        return {} if v is None else v

    @property
    def ca_cert_path(self) -> str:
        return expand_path(self.ca_cert)

    def is_enabled(self, name: str) -> bool:
        return self.tools.get(name, True)

    def with_tools(self, tools: Mapping[str, bool]) -> Settings:
        return self.model_copy(update={"tools": dict(tools)})


# -- Orchestration results --


class OutcomeKind(str, Enum):
    configured = "configured"
    removed = "removed"
    skipped_disabled = "skipped (disabled)"
    skipped_unavailable = "skipped (not available)"
    skipped_declined = "skipped (manual steps printed)"
    failed = "failed"


class ApplyOutcome(BaseModel):
    name: str
    kind: OutcomeKind
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.kind is not OutcomeKind.failed


class StatusEntry(BaseModel):
    name: str
    label: str
    enabled: bool = True
    available: bool = True
    error: str | None = None
