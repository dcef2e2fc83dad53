"""
src/orchestrator/errors.py

Error hierarchy for the agent.

AgentError
├── GatewayError            model call failed (network, provider, empty response)
└── ToolError               anything that goes wrong on the tool side
    ├── DecodeError         tool-call arguments are not a flat JSON object of strings
    ├── UnknownToolError    name not in the catalog
    ├── ToolDeniedError     blocked by the tool policy
    ├── InvalidArgumentsError
    │   └── MissingQueryError
    └── ToolExecutionError  process could not start, HTTP transport failure
        └── SearchHTTPError non-2xx status from the search provider

ToolError instances never reach the user directly: the conversation turns
them into "error ..." tool results so the model can react.
"""


from typing import Optional


class AgentError(Exception):
    """Base class for every error raised by the agent."""


class GatewayError(AgentError):
    """The model gateway call failed."""


class ToolError(AgentError):
    """Base class for tool dispatch and execution failures."""


class DecodeError(ToolError):
    """Raw tool-call arguments could not be decoded."""


class UnknownToolError(ToolError):

    def __init__(self, name: str):
        super().__init__(f"unknown tool: {name}")
        self.name = name


class ToolDeniedError(ToolError):

    def __init__(self, name: str, reason: str = "not permitted"):
        super().__init__(f"tool {name} denied: {reason}")
        self.name = name
        self.reason = reason


class InvalidArgumentsError(ToolError):
    """Arguments decoded fine but do not fit the tool's argument model."""


class MissingQueryError(InvalidArgumentsError):

    def __init__(self, message: str = "missing query"):
        super().__init__(message)


class ToolExecutionError(ToolError):
    """The tool could not run (process failed to start, transport error)."""


class SearchHTTPError(ToolExecutionError):

    def __init__(self, status_code: int, message: Optional[str] = None):
        super().__init__(message or f"search http status {status_code}")
        self.status_code = status_code
