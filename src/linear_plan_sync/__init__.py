"""Linear Plan Sync.

Posts implementation plans written in an assistant's plan mode to Linear:
- settings loaded from `~/.claude/linear-sync.json` or the environment
- the plan file located per workspace or globally
- a mirror issue found (or created) from the branch's ticket identifier
- the plan appended to it as a comment
"""

__version__ = "0.1.0"

from linear_plan_sync.config import SyncSettings

__all__ = ["__version__", "SyncSettings"]
