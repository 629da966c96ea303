"""CLI entrypoint, run by the assistant's hook runtime after plan mode.

The hook payload arrives as a JSON object on stdin; only its `cwd` field is
used. Every "nothing to do" outcome exits 0 so a misconfigured machine never
breaks the caller's workflow. Exit status 1 is reserved for failed mutations.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import TextIO

from pydantic import BaseModel, ConfigDict, ValidationError

from linear_plan_sync import __version__
from linear_plan_sync.config import (
    ConfigurationError,
    RuntimeSettings,
    load_settings,
)
from linear_plan_sync.logging import configure_logging
from linear_plan_sync.outcome import SkipReason, SyncFailed, SyncOutcome, SyncStatus
from linear_plan_sync.runner import run_sync

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1


class HookInput(BaseModel):
    """The subset of the hook payload this command reads."""

    model_config = ConfigDict(extra="ignore")

    cwd: str | None = None


def read_hook_input(stream: TextIO | None) -> HookInput:
    """Parse the hook payload; anything unusable yields an empty input."""

    # sys.stdin is None when the process was started without one.
    if stream is None or stream.isatty():
        return HookInput()

    raw = stream.read()
    if not raw.strip():
        return HookInput()

    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Hook input is not valid JSON; ignoring it")
        return HookInput()

    if not isinstance(data, dict):
        logger.warning("Hook input is not a JSON object; ignoring it")
        return HookInput()

    try:
        return HookInput.model_validate(data)
    except ValidationError:
        logger.warning("Hook input has an unexpected shape; ignoring it")
        return HookInput()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linear-plan-sync",
        description="Post the current implementation plan to its Linear mirror issue",
    )
    parser.add_argument("--version", action="version", version=f"linear-plan-sync {__version__}")
    parser.add_argument(
        "--cwd",
        type=Path,
        default=None,
        help="Working directory to sync from (skips reading the hook payload on stdin)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Config file path (default: $LINEAR_SYNC_CONFIG or ~/.claude/linear-sync.json)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Override LINEAR_SYNC_LOG_LEVEL",
    )
    return parser


def main(argv: list[str] | None = None, *, stdin: TextIO | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        runtime = RuntimeSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check LINEAR_* environment variables):")
        print(e)
        return EXIT_OK

    configure_logging(args.log_level or runtime.log_level)

    if args.cwd is not None:
        cwd = args.cwd
    else:
        hook_input = read_hook_input(stdin if stdin is not None else sys.stdin)
        cwd = Path(hook_input.cwd) if hook_input.cwd else Path.cwd()

    try:
        settings = load_settings(args.config, runtime=runtime)
    except ConfigurationError as e:
        return report(SyncOutcome.skipped(SkipReason.INVALID_CONFIG, f"Configuration error: {e}"))

    try:
        outcome = run_sync(cwd=cwd, settings=settings)
    except SyncFailed as e:
        logger.debug("Plan sync failed", exc_info=True)
        print(str(e), file=sys.stderr)
        return EXIT_FAILED
    except Exception:
        logger.exception("Plan sync failed")
        return EXIT_FAILED

    return report(outcome)


def report(outcome: SyncOutcome) -> int:
    """Print the operator-facing summary of an outcome and return the exit code."""

    if outcome.status is SyncStatus.SKIPPED:
        logger.info("Plan sync skipped", extra={"reason": outcome.skip_reason})
        print(outcome.message)
        return EXIT_OK

    if outcome.mirror_created and outcome.mirror_issue is not None:
        print(f"Created mirror ticket {outcome.mirror_issue.identifier}: {outcome.mirror_title}")
    print(outcome.message)
    print(f"  {outcome.comment_url}")
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
