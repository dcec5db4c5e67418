"""Managed marker blocks inside user-owned text files.

A block is a machine-owned region delimited by two comment lines::

    # >>> ezproxy >>>
    export HTTP_PROXY=http://proxy:8080
    # <<< ezproxy <<<

Everything outside the block belongs to the user and is never rewritten,
apart from the blank-line separation around the block itself. The comment
prefix is chosen per target format, so the same code handles shell scripts,
INI-like files and anything else with single-line comments.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from rich.console import Console

logger = logging.getLogger(__name__)

MARKER_START = ">>> ezproxy >>>"
MARKER_END = "<<< ezproxy <<<"


class PatchError(OSError):
    """A target file could not be read or written."""


class BlockNotFoundError(LookupError):
    pass


class PatchAction(str, Enum):
    create = "create"
    append = "append to"
    update = "update"
    remove = "remove"
    noop = "noop"


@dataclass
class PatchPlan:
    path: Path
    action: PatchAction
    new_text: str | None = None  # None when nothing is written
    block: str = ""

    @property
    def changes(self) -> bool:
        return self.action is not PatchAction.noop


def start_marker(prefix: str) -> str:
    return f"{prefix} {MARKER_START}"


def end_marker(prefix: str) -> str:
    return f"{prefix} {MARKER_END}"


def render_block(body: str, prefix: str = "#") -> str:
    return f"{start_marker(prefix)}\n{body}{end_marker(prefix)}\n"


def _line_pattern(marker: str) -> re.Pattern[str]:
    # Whole-line match, so "## >>> ezproxy >>>" never satisfies prefix "#".
    return re.compile(rf"^{re.escape(marker)}[ \t]*(?:\n|$)", re.MULTILINE)


def _end_pattern(marker: str) -> re.Pattern[str]:
    # A body without a trailing newline puts the end marker mid-line.
    return re.compile(rf"{re.escape(marker)}[ \t]*(?:\n|$)")


def _match_block(text: str, prefix: str) -> tuple[re.Match[str], re.Match[str]] | None:
    start = _line_pattern(start_marker(prefix)).search(text)
    if start is None:
        return None
    end = _end_pattern(end_marker(prefix)).search(text, start.end())
    if end is None:
        return None
    return start, end


def find_block(text: str, prefix: str = "#") -> tuple[int, int] | None:
    """Return the ``(start, end)`` span of the block, end-delimiter line included."""
    found = _match_block(text, prefix)
    if found is None:
        return None
    start, end = found
    return start.start(), end.end()


def has_start_marker(text: str, prefix: str = "#") -> bool:
    return _line_pattern(start_marker(prefix)).search(text) is not None


def block_body(text: str, prefix: str = "#") -> str:
    found = _match_block(text, prefix)
    if found is None:
        raise BlockNotFoundError("no ezproxy block found")
    start, end = found
    return text[start.end():end.start()]


def upsert_text(existing: str, body: str, prefix: str = "#") -> str:
    """Insert the block, or replace the one already present."""
    block = render_block(body, prefix)
    span = find_block(existing, prefix)

    if span is not None:
        result = existing[: span[0]] + block + existing[span[1]:]
        if result.endswith("\n\n\n"):
            result = result.rstrip("\n") + "\n"
        return result

    if existing and not existing.endswith("\n"):
        existing += "\n"
    if existing:
        existing += "\n"
    return existing + block


def remove_text(existing: str, prefix: str = "#") -> str:
    """Cut the block out and close the gap it leaves behind."""
    span = find_block(existing, prefix)
    if span is None:
        return existing

    before = existing[: span[0]].rstrip("\n")
    after = existing[span[1]:].lstrip("\n")

    if before and after:
        return before + "\n" + after.rstrip("\n") + "\n"
    if before:
        return before + "\n"
    if after:
        return after.rstrip("\n") + "\n"
    return ""


def _read(path: Path) -> str | None:
    try:
        return path.read_bytes().decode("utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        raise PatchError(f"cannot read {path}: {e}") from e


class TextRegionPatcher:
    """File-level upsert/remove of the ezproxy block.

    With ``simulate=True`` the same plan is computed but only rendered to the
    console, so dry runs exercise exactly the code path of a real run.
    """

    def __init__(self, simulate: bool = False, console: Console | None = None) -> None:
        self.simulate = simulate
        self.console = console or Console()

    # -- Planning --

    def plan_upsert(self, path: Path, body: str, prefix: str = "#") -> PatchPlan:
        path = Path(path)
        existing = _read(path)
        block = render_block(body, prefix)
        if existing is None:
            return PatchPlan(path, PatchAction.create, upsert_text("", body, prefix), block)

        new_text = upsert_text(existing, body, prefix)
        if new_text == existing:
            return PatchPlan(path, PatchAction.noop, block=block)
        action = PatchAction.update if find_block(existing, prefix) else PatchAction.append
        return PatchPlan(path, action, new_text, block)

    def plan_remove(self, path: Path, prefix: str = "#") -> PatchPlan:
        path = Path(path)
        existing = _read(path)
        if existing is None or find_block(existing, prefix) is None:
            return PatchPlan(path, PatchAction.noop)
        return PatchPlan(path, PatchAction.remove, remove_text(existing, prefix))

    # -- Execution --

    def upsert(self, path: Path, body: str, prefix: str = "#") -> PatchPlan:
        plan = self.plan_upsert(path, body, prefix)
        self._commit(plan)
        return plan

    def remove(self, path: Path, prefix: str = "#") -> PatchPlan:
        plan = self.plan_remove(path, prefix)
        self._commit(plan)
        return plan

    def has_block(self, path: Path, prefix: str = "#") -> bool:
        try:
            text = _read(Path(path))
        except PatchError:
            return False
        return text is not None and has_start_marker(text, prefix)

    def get_block_body(self, path: Path, prefix: str = "#") -> str:
        text = _read(Path(path))
        if text is None:
            raise BlockNotFoundError(f"{path} does not exist")
        try:
            return block_body(text, prefix)
        except BlockNotFoundError:
            raise BlockNotFoundError(f"no ezproxy block found in {path}") from None

    def _commit(self, plan: PatchPlan) -> None:
        if self.simulate:
            self.render(plan)
            return
        if not plan.changes or plan.new_text is None:
            logger.debug("%s already up to date", plan.path)
            return

        logger.debug("%s %s", plan.action.value, plan.path)
        try:
            plan.path.parent.mkdir(parents=True, exist_ok=True)
            plan.path.write_bytes(plan.new_text.encode("utf-8"))
        except OSError as e:
            raise PatchError(f"cannot write {plan.path}: {e}") from e

    def render(self, plan: PatchPlan) -> None:
        def say(text: str) -> None:
            self.console.print(text, highlight=False, markup=False)

        if plan.action is PatchAction.noop:
            say(f"  [dry-run] No change to {plan.path}")
        elif plan.action is PatchAction.remove:
            say(f"  [dry-run] Would remove ezproxy block from {plan.path}")
        else:
            say(f"\n  [dry-run] Would {plan.action.value} {plan.path}:")
            for line in plan.block.rstrip("\n").split("\n"):
                say(f"    {line}")
