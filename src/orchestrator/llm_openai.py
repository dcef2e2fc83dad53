"""
src/orchestrator/llm_openai.py

OpenAI client wrapper for function calling.
- OpenAIGateway.complete(): one model round (transcript + tools in, one assistant turn out)
- extract_tool_calls(): normalise the function tool calls of a response choice
"""


from typing import Any, Dict, List, Optional, Sequence
from openai import OpenAI, OpenAIError

from config import DEFAULT_MODEL
from orchestrator.errors import GatewayError
from orchestrator.models import AssistantTurn, ToolCallRequest, Usage


def extract_tool_calls(choice) -> List[ToolCallRequest]:
    """
    Normalize tool calls from the OpenAI response choice.
    Only function calls are surfaced; arguments stay raw JSON text.
    """

    out: List[ToolCallRequest] = []
    tcs = getattr(choice.message, "tool_calls", None)

    if not tcs:
        return out

    for tc in tcs:
        if tc.type == "function" and tc.function:
            out.append(ToolCallRequest(id=tc.id, name=tc.function.name, arguments=tc.function.arguments or ""))

    return out

def _usage(resp) -> Usage:

    u = getattr(resp, "usage", None)

    if u is None:
        return Usage()

    return Usage(
        prompt_tokens=u.prompt_tokens or 0,
        completion_tokens=u.completion_tokens or 0,
        total_tokens=u.total_tokens or 0,
    )


class OpenAIGateway:
    """
    The model gateway: a thin synchronous wrapper over Chat Completions.

    The client reads OPENAI_API_KEY / OPENAI_BASE_URL from the environment
    unless one is passed in (tests pass a client on a mock transport).
    """

    def __init__(self, client: Optional[OpenAI] = None, model: str = DEFAULT_MODEL):

        if client is None:
            try:
                client = OpenAI()
            except OpenAIError as e:
                raise GatewayError(str(e)) from e

        self.client = client
        self.model = model

    def complete(self, messages: List[Dict[str, Any]], tools: Sequence[Dict[str, Any]]) -> AssistantTurn:
        """
        Send the whole transcript and the tool catalog; return one assistant turn.
        Raises GatewayError on any provider or transport failure.
        """

        kwargs: Dict[str, Any] = {"model": self.model, "messages": messages}

        if tools:
            kwargs["tools"] = list(tools)

        try:
            resp = self.client.chat.completions.create(**kwargs)
        except OpenAIError as e:
            raise GatewayError(str(e)) from e

        if not resp.choices:
            raise GatewayError(f"empty response from model {resp.model or self.model}")

        choice = resp.choices[0]

        return AssistantTurn(
            id=resp.id or "",
            model=resp.model or self.model,
            content=choice.message.content,
            tool_calls=extract_tool_calls(choice),
            usage=_usage(resp),
        )
