"""Test configuration and fixtures."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Any

import pytest

from linear_plan_sync.config import SyncSettings

LINEAR_ENV_VARS = (
    "LINEAR_API_KEY",
    "LINEAR_TEAM_ID",
    "LINEAR_CREATE_MIRROR",
    "LINEAR_TITLE_FORMAT",
    "LINEAR_COMMENT_HEADER",
    "LINEAR_API_URL",
    "LINEAR_TIMEOUT_SECONDS",
    "LINEAR_SYNC_LOG_LEVEL",
    "LINEAR_SYNC_CONFIG",
)

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


@pytest.fixture(autouse=True)
def clean_linear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own Linear settings out of the tests."""
    for name in LINEAR_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sync_settings(tmp_path: Path) -> SyncSettings:
    """Provide fully configured settings."""
    return SyncSettings(
        team_id="team-123",
        api_key="lin_api_test",
        config_path=tmp_path / "linear-sync.json",
    )


def init_git_repo(path: Path, *, branch: str = "main") -> Path:
    """Create a git repository at `path` with `branch` checked out."""
    path.mkdir(parents=True, exist_ok=True)
    subprocess.run(["git", "init", "-q"], cwd=path, check=True)
    subprocess.run(["git", "symbolic-ref", "HEAD", f"refs/heads/{branch}"], cwd=path, check=True)
    return path


class FakeResponse:
    def __init__(self, payload: Any, *, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """Records POSTs and replays queued responses (or raises queued errors)."""

    def __init__(self, *responses: Any) -> None:
        self.headers: dict[str, str] = {}
        self.calls: list[dict[str, Any]] = []
        self.closed = False
        self._responses = list(responses)

    def post(self, url: str, *, json: Any = None, timeout: float | None = None) -> FakeResponse:
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        item = self._responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def close(self) -> None:
        self.closed = True
