"""
src/config.py

Runtime settings for the agent. Values come from the environment (a local
.env file is loaded first) and fall back to the defaults below.
"""


import os
from enum import Enum
from typing import FrozenSet, Optional

from dotenv import load_dotenv


load_dotenv()


class ToolName(str, Enum):

    POSTGRES = "postgres"
    SHELL = "shell"
    WEB_SEARCH = "web_search"

class LogFormat(str, Enum):

    LOGFMT = "logfmt"
    JSON = "json"


def _env_int(name: str, default: int) -> int:
    """Read an integer variable; anything unparsable falls back to `default`."""

    raw = os.getenv(name, "").strip()

    try:
        return int(raw) if raw else default
    except ValueError:
        return default

def _env_bool(name: str, default: bool = False) -> bool:

    raw = os.getenv(name)

    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}

def _env_names(name: str) -> Optional[FrozenSet[str]]:
    """Comma separated names; unset or empty means no restriction."""

    raw = os.getenv(name, "")
    names = frozenset(n.strip() for n in raw.split(",") if n.strip())

    return names or None


# Model
DEFAULT_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-5")
MAX_TOOL_ROUNDS: int = _env_int("AGENT_MAX_TOOL_ROUNDS", 25)   # 0 disables the cap
SYSTEM_PROMPT_OVERRIDE: Optional[str] = os.getenv("AGENT_SYSTEM_PROMPT")

# Operational files
LOG_FILE: str = os.getenv("AGENT_LOG_FILE", "agent.log")
LOG_LEVEL: str = os.getenv("AGENT_LOG_LEVEL", "INFO").upper()
LOG_FORMAT: str = os.getenv("AGENT_LOG_FORMAT", LogFormat.LOGFMT.value).lower()
HISTORY_FILE: str = os.getenv("AGENT_HISTORY_FILE", "history")

# Tools
SHELL_PATH: str = os.getenv("AGENT_SHELL", "/bin/bash")
PSQL_PATH: str = os.getenv("AGENT_PSQL", "psql")
PSQL_DATABASE: str = os.getenv("AGENT_PSQL_DATABASE", "postgres")
ALLOWED_TOOLS: Optional[FrozenSet[str]] = _env_names("AGENT_ALLOWED_TOOLS")
CONFIRM_DANGEROUS: bool = _env_bool("AGENT_CONFIRM_DANGEROUS")

# Search
SEARCH_URL: str = "https://html.duckduckgo.com/html/"
SEARCH_LOCALE: str = "us-en"
SEARCH_USER_AGENT: str = "agent/1.0 (+local)"
SEARCH_TIMEOUT: float = 12.0
SEARCH_MAX_BYTES: int = 1 << 20                 # 1 MiB
SEARCH_DEFAULT_RESULTS: int = 5
SEARCH_MAX_RESULTS: int = 10

# Preview length for tool arguments in the log
ARGS_PREVIEW_CHARS: int = 300
# EOF
