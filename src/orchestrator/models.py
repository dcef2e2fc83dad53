"""
src/orchestrator/models.py

Pydantic models for the tool-calling loop: model responses, tool calls and
results, per-turn statistics, and the typed argument shapes of each tool.
"""


import re
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from config import SEARCH_DEFAULT_RESULTS, SEARCH_MAX_RESULTS


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


# -------- Model gateway I/O ----------------------------------------------------


class ToolCallRequest(BaseModel):

    id: str
    name: str
    arguments: str = ""     # raw JSON text, decoded by the router

    def to_param(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


class ToolResult(BaseModel):

    tool_call_id: str
    name: str
    content: str
    ok: bool = True

    def to_message(self) -> Dict[str, Any]:
        return {"role": "tool", "tool_call_id": self.tool_call_id, "content": self.content}


class Usage(BaseModel):

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class AssistantTurn(BaseModel):
    """One assistant response: final text, tool-call requests, or both."""

    id: str = ""
    model: str = ""
    content: Optional[str] = None
    tool_calls: List[ToolCallRequest] = Field(default_factory=list)
    usage: Usage = Field(default_factory=Usage)

    def to_message(self) -> Dict[str, Any]:
        """Render as the assistant entry appended to the transcript."""

        message: Dict[str, Any] = {"role": "assistant", "content": self.content}

        if self.tool_calls:
            message["tool_calls"] = [tc.to_param() for tc in self.tool_calls]

        return message


# -------- Turn accounting ------------------------------------------------------


class TurnStats(BaseModel):
    """Counters for a single user turn. Durations are in seconds."""

    tool_calls: int = 0
    tool_time: float = 0.0
    llm_calls: int = 0
    llm_time: float = 0.0
    tokens: int = 0

    def reset(self) -> None:
        self.tool_calls = 0
        self.tool_time = 0.0
        self.llm_calls = 0
        self.llm_time = 0.0
        self.tokens = 0


class TurnResult(BaseModel):

    text: str
    stats: TurnStats
    elapsed: float = 0.0
    rounds: int = 0
    aborted: bool = False


# -------- Tool arguments -------------------------------------------------------


class ShellArgs(BaseModel):

    command: str


class PostgresArgs(BaseModel):

    query: str


class WebSearchArgs(BaseModel):

    query: str
    max_results: int = SEARCH_DEFAULT_RESULTS

    @field_validator("max_results", mode="before")
    @classmethod
    def _clamp_max_results(cls, v: Any) -> int:
        """
        The leading integer is used ("7abc" is 7). No digits or a non-positive
        value gives the default; large values are clamped.
        """

        m = _LEADING_INT.match(str(v))
        if m is None:
            return SEARCH_DEFAULT_RESULTS

        n = int(m.group(1))

        if n <= 0:
            return SEARCH_DEFAULT_RESULTS

        return min(n, SEARCH_MAX_RESULTS)
