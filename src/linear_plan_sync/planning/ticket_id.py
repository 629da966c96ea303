"""Derive a ticket identifier from the current branch name.

Examples:
    feature/TOK-1234-add-auth     -> TOK-1234
    eng-567-fix-bug               -> ENG-567
    release/v2-TOK-1-and-TOK-2    -> TOK-1
    main                          -> main
    (detached HEAD)               -> NO-TICKET
"""

from __future__ import annotations

import re
from pathlib import Path

from linear_plan_sync.planning.git import current_branch

NO_TICKET = "NO-TICKET"

_TICKET_ID_RE = re.compile(r"[A-Z]+-[0-9]+", re.IGNORECASE | re.ASCII)


def ticket_id_from_branch(branch: str) -> str:
    if not branch:
        return NO_TICKET

    match = _TICKET_ID_RE.search(branch)
    if match is None:
        return branch
    return match.group(0).upper()


def extract_ticket_id(cwd: Path) -> str:
    return ticket_id_from_branch(current_branch(cwd))
