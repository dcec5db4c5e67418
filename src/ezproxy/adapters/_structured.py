"""Shared read-merge-write helpers for JSON and YAML config files."""

from __future__ import annotations

import json
from pathlib import Path

import yaml

from ezproxy.adapters.base import AdapterError
from ezproxy.core.context import ExecutionContext


def read_json(path: Path) -> dict:
    """Read a JSON object; a missing or empty file is an empty dict.

    A file we cannot parse is an error, not something to overwrite.
    """
    if not path.is_file():
        return {}
    text = path.read_text()
    if not text.strip():
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise AdapterError(f"{path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise AdapterError(f"{path} does not contain a JSON object")
    return data


def dump_json(data: dict) -> str:
    return json.dumps(data, indent=2) + "\n"


def read_yaml(path: Path) -> dict:
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise AdapterError(f"{path} is not valid YAML: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise AdapterError(f"{path} does not contain a mapping")
    return data


def dump_yaml(data: dict) -> str:
    return "---\n" + yaml.safe_dump(data, sort_keys=False, default_flow_style=False)


def write_text(path: Path, text: str, ctx: ExecutionContext, summary: str) -> None:
    """Write ``text`` to ``path``, or show it under ``summary`` when simulating."""
    if ctx.dry_run:
        ctx.note(f"\n  [dry-run] {summary} {path}:")
        for line in text.rstrip("\n").splitlines():
            ctx.note(f"    {line}")
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
