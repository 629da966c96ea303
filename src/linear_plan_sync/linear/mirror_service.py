"""Mirror issue resolution and plan comment publishing.

A mirror issue archives plan documentation for a ticket. It is found by title
(the title contains the ticket identifier) and created on demand when enabled.
Plans are appended to it as comments.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from linear_plan_sync.config import SyncSettings
from linear_plan_sync.linear.client import (
    CreatedComment,
    LinearAPIError,
    LinearClient,
    MirrorIssue,
)
from linear_plan_sync.outcome import CommentPublishFailed, MirrorCreationFailed
from linear_plan_sync.planning.plan_file import PlanDocument

logger = logging.getLogger(__name__)

ATTRIBUTION_LINE = (
    "_Synced from Claude Code via "
    "[linear-plan-sync](https://github.com/dhkts1/linear-plan-sync)_"
)


@dataclass(frozen=True, slots=True)
class MirrorResolution:
    """The mirror issue used for a ticket and whether this run created it."""

    issue: MirrorIssue
    title: str
    created: bool


def build_comment_body(header: str, plan_text: str) -> str:
    """Return the comment markdown; the plan text is included verbatim."""

    return f"{header}\n\n{plan_text}\n\n---\n{ATTRIBUTION_LINE}"


class MirrorService:
    """Find-or-create mirror issues and post plans to them."""

    def __init__(self, *, client: LinearClient, settings: SyncSettings) -> None:
        self._client = client
        self._settings = settings

    def find(self, ticket_id: str) -> MirrorIssue | None:
        """Return the first issue whose title contains `ticket_id`.

        A failed lookup is treated as "no match"; only mutations are allowed to
        fail the run.
        """

        try:
            return self._client.find_issue_by_title(ticket_id)
        except LinearAPIError as e:
            logger.warning(
                "Mirror issue lookup failed; treating as not found",
                extra={"ticket_id": ticket_id, "error": str(e)},
            )
            return None

    def resolve(self, ticket_id: str) -> MirrorResolution | None:
        """Return the mirror issue for `ticket_id`, creating it when allowed.

        Returns None when no issue matches and creation is disabled.

        Raises:
            MirrorCreationFailed: if the create mutation fails.
        """

        title = self._settings.mirror_title(ticket_id)

        existing = self.find(ticket_id)
        if existing is not None:
            logger.info(
                "Found mirror issue",
                extra={"ticket_id": ticket_id, "issue_id": existing.id},
            )
            return MirrorResolution(issue=existing, title=title, created=False)

        if not self._settings.create_mirror:
            logger.info("Mirror issue absent and creation disabled", extra={"ticket_id": ticket_id})
            return None

        try:
            created = self._client.create_issue(title=title, team_id=self._settings.team_id)
        except LinearAPIError as e:
            raise MirrorCreationFailed(title, str(e)) from e

        return MirrorResolution(issue=created, title=title, created=True)

    def publish(self, *, issue_id: str, plan: PlanDocument) -> CreatedComment:
        """Post `plan` as a comment on `issue_id`.

        Raises:
            CommentPublishFailed: if the comment mutation fails.
        """

        body = build_comment_body(self._settings.comment_header, plan.text)
        try:
            comment = self._client.create_comment(issue_id=issue_id, body=body)
        except LinearAPIError as e:
            raise CommentPublishFailed(issue_id, str(e)) from e

        logger.info(
            "Posted plan comment",
            extra={"issue_id": issue_id, "plan_path": str(plan.path), "url": comment.url},
        )
        return comment
