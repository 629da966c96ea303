"""Locate the plan document written in plan mode.

A plan stored inside the work tree (`.claude/plan.md` at the git root) takes
precedence. Otherwise the most recently modified markdown file in the global
plans directory is used.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from linear_plan_sync.planning.git import git_toplevel

logger = logging.getLogger(__name__)

WORKSPACE_PLAN_PATH = Path(".claude") / "plan.md"
DEFAULT_GLOBAL_PLANS_DIR = Path("~/.claude/plans")


class PlanFileUnreadable(Exception):
    """The located plan file could not be read as UTF-8 text."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Cannot read plan file {path}: {reason}")
        self.path = path
        self.reason = reason


@dataclass(frozen=True, slots=True)
class PlanDocument:
    """A plan file and its raw content."""

    path: Path
    text: str


def _latest_markdown_file(directory: Path) -> Path | None:
    if not directory.is_dir():
        return None

    candidates = [p for p in directory.glob("*.md") if p.is_file()]
    if not candidates:
        return None

    # Newest first; the name breaks ties so the choice is stable.
    return max(candidates, key=lambda p: (p.stat().st_mtime, p.name))


def find_plan_file(cwd: Path, *, global_plans_dir: Path | None = None) -> Path | None:
    """Return the plan file for `cwd`, or None when there is nothing to sync."""

    git_root = git_toplevel(cwd)
    if git_root is not None:
        workspace_plan = git_root / WORKSPACE_PLAN_PATH
        if workspace_plan.is_file():
            return workspace_plan

    plans_dir = (global_plans_dir or DEFAULT_GLOBAL_PLANS_DIR).expanduser()
    return _latest_markdown_file(plans_dir)


def load_plan_document(cwd: Path, *, global_plans_dir: Path | None = None) -> PlanDocument | None:
    path = find_plan_file(cwd, global_plans_dir=global_plans_dir)
    if path is None:
        return None

    logger.info("Using plan file", extra={"path": str(path)})
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise PlanFileUnreadable(path, str(e)) from e
    return PlanDocument(path=path, text=text)
