"""Results of a sync attempt.

A sync either completes, is skipped (a normal no-op that must never break the
caller's workflow), or fails. Completed and skipped runs are returned as a
`SyncOutcome`; failures are raised as `SyncFailed`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from linear_plan_sync.linear.client import CreatedComment, MirrorIssue


class SyncStatus(str, Enum):
    SYNCED = "synced"
    SKIPPED = "skipped"


class SkipReason(str, Enum):
    MISSING_API_KEY = "missing_api_key"
    MISSING_TEAM_ID = "missing_team_id"
    INVALID_CONFIG = "invalid_config"
    NO_PLAN_FILE = "no_plan_file"
    UNREADABLE_PLAN = "unreadable_plan"
    MIRROR_DISABLED = "mirror_disabled"


@dataclass(frozen=True, slots=True)
class SyncOutcome:
    """Result of one invocation that did not fail."""

    status: SyncStatus
    message: str
    skip_reason: SkipReason | None = None

    plan_path: Path | None = None
    ticket_id: str | None = None
    mirror_title: str | None = None
    mirror_issue: MirrorIssue | None = None
    mirror_created: bool = False
    comment: CreatedComment | None = None

    @classmethod
    def skipped(cls, reason: SkipReason, message: str) -> SyncOutcome:
        return cls(status=SyncStatus.SKIPPED, message=message, skip_reason=reason)

    @property
    def comment_url(self) -> str | None:
        return self.comment.url if self.comment is not None else None


class SyncFailed(Exception):
    """Raised when a remote mutation was attempted and did not succeed."""


class MirrorCreationFailed(SyncFailed):
    def __init__(self, title: str, reason: str) -> None:
        super().__init__(f"Failed to create mirror ticket: {reason}")
        self.title = title
        self.reason = reason


class CommentPublishFailed(SyncFailed):
    def __init__(self, issue_id: str, reason: str) -> None:
        super().__init__(f"Failed to post comment: {reason}")
        self.issue_id = issue_id
        self.reason = reason
