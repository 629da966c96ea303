"""Run one plan sync.

Each step runs exactly once, with no retries:
config check -> plan file -> ticket identifier -> mirror issue -> comment.
"""

from __future__ import annotations

import logging
from pathlib import Path

from linear_plan_sync.config import SyncSettings, check_configured
from linear_plan_sync.linear.client import LinearClient
from linear_plan_sync.linear.mirror_service import MirrorService
from linear_plan_sync.outcome import SkipReason, SyncOutcome, SyncStatus
from linear_plan_sync.planning.plan_file import PlanFileUnreadable, load_plan_document
from linear_plan_sync.planning.ticket_id import extract_ticket_id

logger = logging.getLogger(__name__)


def run_sync(
    *,
    cwd: Path,
    settings: SyncSettings,
    client: LinearClient | None = None,
    global_plans_dir: Path | None = None,
) -> SyncOutcome:
    """Sync the current plan for `cwd` to its Linear mirror issue.

    Raises:
        SyncFailed: if a mutation was attempted and did not succeed.
    """

    skipped = check_configured(settings)
    if skipped is not None:
        return skipped

    try:
        plan = load_plan_document(cwd, global_plans_dir=global_plans_dir)
    except PlanFileUnreadable as e:
        logger.warning("Plan file unreadable", extra={"path": str(e.path)})
        return SyncOutcome.skipped(SkipReason.UNREADABLE_PLAN, str(e))
    if plan is None:
        return SyncOutcome.skipped(SkipReason.NO_PLAN_FILE, "No plan file found")

    ticket_id = extract_ticket_id(cwd)
    logger.info("Resolved ticket identifier", extra={"ticket_id": ticket_id, "cwd": str(cwd)})

    owns_client = client is None
    if client is None:
        client = LinearClient(
            api_key=settings.api_key,
            api_url=settings.api_url,
            timeout_seconds=settings.timeout_seconds,
        )

    try:
        service = MirrorService(client=client, settings=settings)

        mirror = service.resolve(ticket_id)
        if mirror is None:
            return SyncOutcome.skipped(
                SkipReason.MIRROR_DISABLED,
                "Mirror ticket not found and createMirrorTickets is disabled",
            )

        comment = service.publish(issue_id=mirror.issue.id, plan=plan)
    finally:
        if owns_client:
            client.close()

    return SyncOutcome(
        status=SyncStatus.SYNCED,
        message=f"Plan synced to {mirror.title}",
        plan_path=plan.path,
        ticket_id=ticket_id,
        mirror_title=mirror.title,
        mirror_issue=mirror.issue,
        mirror_created=mirror.created,
        comment=comment,
    )
