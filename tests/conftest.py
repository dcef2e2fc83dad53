"""Shared test fixtures for the agent.

Provides a scripted model gateway and helpers to build assistant turns.
"""

import json
from typing import Any, Dict, List

import pytest

from orchestrator.errors import GatewayError
from orchestrator.models import AssistantTurn, ToolCallRequest, Usage


def make_turn(content=None, tool_calls=(), total_tokens: int = 10) -> AssistantTurn:
    """Build an AssistantTurn; tool_calls are (id, name, args-dict-or-raw-str) tuples."""
    calls = []
    for call_id, name, args in tool_calls:
        raw = args if isinstance(args, str) else json.dumps(args)
        calls.append(ToolCallRequest(id=call_id, name=name, arguments=raw))
    return AssistantTurn(
        id="chatcmpl-test",
        model="gpt-test",
        content=content,
        tool_calls=calls,
        usage=Usage(prompt_tokens=total_tokens - 2, completion_tokens=2, total_tokens=total_tokens),
    )


class ScriptedGateway:
    """Returns queued turns in order; a queued exception is raised instead."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: List[Dict[str, Any]] = []

    def complete(self, messages, tools):
        self.requests.append({"messages": list(messages), "tools": tools})
        if not self.responses:
            raise GatewayError("script exhausted")
        nxt = self.responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


class LoopingGateway:
    """Always asks for one more shell call."""

    def __init__(self):
        self.calls = 0

    def complete(self, messages, tools):
        self.calls += 1
        return make_turn(tool_calls=[(f"call_{self.calls}", "shell", {"command": "true"})])


@pytest.fixture
def recorded_calls():
    """List that fake tool handlers append (name, args) to."""
    return []


@pytest.fixture
def fake_handlers(recorded_calls):
    """Tool handlers that record their arguments instead of doing I/O."""

    def handler(name):
        def run(args):
            recorded_calls.append((name, dict(args)))
            return f"{name} ok\n"
        return run

    return {"postgres": handler("postgres"), "shell": handler("shell"), "web_search": handler("web_search")}
