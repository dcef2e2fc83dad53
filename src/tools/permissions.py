"""
src/tools/permissions.py — minimal tool policy for dangerous tools

Some tools run arbitrary text on the host: `shell` hands the command line
to bash and `postgres` passes the query to psql verbatim. That is what they
are for, so nothing is sanitised. Instead they are flagged as dangerous,
and a ToolPolicy decides whether a given call may run:

- `allowed`: optional allow-list of tool names (None means every tool).
- `confirm`: optional callback asked before each dangerous call; returning
  False blocks it.

The default policy allows everything.

Usage:
    from tools.permissions import ToolPolicy, has_permission
    policy = ToolPolicy(allowed={"web_search"})
    if not has_permission(policy, "shell", {"command": "ls"}):
        raise ToolDeniedError("shell")
"""


from dataclasses import dataclass
from typing import Callable, FrozenSet, Mapping, Optional

from config import ToolName


ConfirmFn = Callable[[str, Mapping[str, str]], bool]

DANGEROUS_TOOLS: FrozenSet[str] = frozenset({ToolName.SHELL.value, ToolName.POSTGRES.value})


@dataclass(frozen=True)
class ToolPolicy:

    allowed: Optional[FrozenSet[str]] = None
    confirm: Optional[ConfirmFn] = None


def is_dangerous(tool_name: str) -> bool:
    return tool_name in DANGEROUS_TOOLS

def has_permission(policy: ToolPolicy, tool_name: str, args: Mapping[str, str]) -> bool:
    """
    Return True if `policy` lets `tool_name` run with `args`.

    Args:
        policy: The active ToolPolicy.
        tool_name: Catalog name, e.g. "shell".
        args: Decoded arguments, shown to the confirm callback.
    """

    if policy.allowed is not None and tool_name not in policy.allowed:
        return False

    if is_dangerous(tool_name) and policy.confirm is not None:
        return bool(policy.confirm(tool_name, args))

    return True
