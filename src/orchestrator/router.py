"""
src/orchestrator/router.py

Router: builds the tool catalog advertised to the model and dispatches
tool-call requests (name + raw JSON arguments) to the tool executors.
"""


import json
from types import MappingProxyType
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Tuple

import structlog

from config import ToolName
from orchestrator.errors import DecodeError, ToolDeniedError, UnknownToolError
from tools import postgres, shell, web_search
from tools.permissions import ToolPolicy, has_permission


logger = structlog.get_logger(__name__)

ToolHandler = Callable[[Mapping[str, str]], str]


# -------- Tool catalog ---------------------------------------------------------


def _tool_spec(name: str, description: str, parameters: Dict[str, Any]) -> Dict[str, Any]:
    """Build an OpenAI function spec."""

    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": parameters.get("properties", {}),
                "required": parameters.get("required", []),
            },
        },
    }

def get_tools_and_specs() -> Tuple[Dict[str, Any], ...]:
    """
    JSON schemas describing the tools we expose to the model.
    Built once; the same tuple is sent on every request of the session.
    """

    return (
        _tool_spec(
            ToolName.POSTGRES.value,
            "query the postgres db",
            {
                "properties": {
                    "query": {"type": "string", "description": "postgres query to run "},
                },
                "required": ["query"]
            }
        ),
        _tool_spec(
            ToolName.SHELL.value,
            "run a shell command",
            {
                "properties": {
                    "command": {"type": "string", "description": "shell command to run"},
                },
                "required": ["command"]
            }
        ),
        _tool_spec(
            ToolName.WEB_SEARCH.value,
            "perform a web search and return top result titles and URLs",
            {
                "properties": {
                    "query": {"type": "string", "description": "search query"},
                    "max_results": {
                        "type": "integer",
                        "description": "maximum number of results to return (default 5, max 10)",
                    },
                },
                "required": ["query"]
            }
        ),
    )

TOOL_CATALOG: Tuple[Dict[str, Any], ...] = get_tools_and_specs()
CATALOG_NAMES: FrozenSet[str] = frozenset(spec["function"]["name"] for spec in TOOL_CATALOG)

DEFAULT_HANDLERS: Mapping[str, ToolHandler] = MappingProxyType({
    ToolName.POSTGRES.value: postgres.run,
    ToolName.SHELL.value: shell.run,
    ToolName.WEB_SEARCH.value: web_search.run,
})


# -------- Argument decoding ----------------------------------------------------


def decode_arguments(raw_args: str) -> Dict[str, str]:
    """
    Decode a tool-call payload into a flat mapping of string values.

    Integers are accepted and kept as their decimal text (the catalog
    declares `max_results` as an integer). A bare `null` payload is an
    empty mapping. Anything else that is not a string raises DecodeError.
    """

    if not raw_args or not raw_args.strip():
        return {}

    try:
        data = json.loads(raw_args)
    except json.JSONDecodeError as e:
        raise DecodeError(f"invalid tool arguments: {e}") from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise DecodeError(f"tool arguments must be a JSON object, got {type(data).__name__}")

    args: Dict[str, str] = {}

    for key, value in data.items():
        if isinstance(value, str):
            args[key] = value
        elif isinstance(value, int) and not isinstance(value, bool):
            args[key] = str(value)
        else:
            raise DecodeError(f"tool argument {key!r} must be a string, got {type(value).__name__}")

    return args


# -------- Dispatch -------------------------------------------------------------


class ToolRouter:
    """
    Decodes tool-call requests and routes them to exactly one executor.

    The router never touches the transcript; the conversation decides what
    to do with results and errors.
    """

    def __init__(self, handlers: Optional[Mapping[str, ToolHandler]] = None, policy: Optional[ToolPolicy] = None):

        handlers = dict(handlers or DEFAULT_HANDLERS)
        uncatalogued = sorted(set(handlers) - CATALOG_NAMES)
        if uncatalogued:
            raise ValueError(f"handlers without a catalog entry: {uncatalogued}")

        self.handlers: Mapping[str, ToolHandler] = MappingProxyType(handlers)
        self.policy = policy or ToolPolicy()
        self.catalog: Tuple[Dict[str, Any], ...] = tuple(
            spec for spec in TOOL_CATALOG if spec["function"]["name"] in self.handlers
        )

    def dispatch(self, name: str, raw_args: str) -> str:
        """
        Run one tool call and return its text output.

        Raises:
            DecodeError: payload is not a flat JSON object of strings.
            UnknownToolError: `name` is not in this router's catalog.
            ToolDeniedError: the policy refused the call.
            ToolError subclasses raised by the executor itself.
        """

        logger.debug("calltool.start", name=name, args_bytes=len(raw_args or ""))
        args = decode_arguments(raw_args)

        handler = self.handlers.get(name)
        if handler is None:
            raise UnknownToolError(name)

        if not has_permission(self.policy, name, args):
            raise ToolDeniedError(name)

        return handler(args)
