"""Thin wrappers around the `git` command line."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def run_git(args: list[str], *, cwd: Path) -> str | None:
    """Run `git <args>` in `cwd` and return stripped stdout, or None on failure."""

    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except (FileNotFoundError, NotADirectoryError, PermissionError) as e:
        logger.debug("git unavailable", extra={"cwd": str(cwd), "error": str(e)})
        return None

    if result.returncode != 0:
        logger.debug(
            "git command failed",
            extra={"cwd": str(cwd), "git_args": args, "stderr": result.stderr.strip()},
        )
        return None

    return result.stdout.strip()


def git_toplevel(cwd: Path) -> Path | None:
    """Return the root of the work tree containing `cwd`, if any."""

    output = run_git(["rev-parse", "--show-toplevel"], cwd=cwd)
    if not output:
        return None
    return Path(output)


def current_branch(cwd: Path) -> str:
    """Return the checked-out branch name; empty when detached or outside git."""

    return run_git(["branch", "--show-current"], cwd=cwd) or ""
