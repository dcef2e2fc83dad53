"""
src/orchestrator/conversation.py

The conversation loop. A user turn is sent to the model together with the
whole transcript and the tool catalog; while the model answers with tool
calls, each call is executed in the order it was emitted, its result is
appended, and the model is asked again. The first answer without tool
calls is the turn's reply.

Per-turn counters (model/tool calls, time spent, tokens) are kept in a
TurnStats that starts fresh with every turn.

Not thread-safe: the transcript is owned by one Conversation and must only
be touched from one thread at a time.
"""


import time
from typing import Any, Dict, List, Optional, Protocol, Sequence

import structlog

from config import ARGS_PREVIEW_CHARS, MAX_TOOL_ROUNDS
from orchestrator.errors import ToolError
from orchestrator.models import AssistantTurn, ToolCallRequest, ToolResult, TurnResult, TurnStats
from orchestrator.prompts import SYSTEM_PROMPT
from orchestrator.router import ToolRouter


logger = structlog.get_logger(__name__)

ABORTED_TEXT = "turn aborted: tool-call limit exceeded"


class Gateway(Protocol):

    def complete(self, messages: List[Dict[str, Any]], tools: Sequence[Dict[str, Any]]) -> AssistantTurn:
        ...


def preview(text: str, limit: int = ARGS_PREVIEW_CHARS) -> str:
    """Shorten `text` for the log."""

    if len(text) > limit:
        return text[:limit] + "… (truncated)"
    return text


class Conversation:
    """
    Owns the transcript and drives request → tool calls → results → request.

    Args:
        gateway: Anything with `complete(messages, tools) -> AssistantTurn`.
        router: Tool dispatcher; defaults to the three built-in tools.
        system_prompt: First message of the transcript.
        max_tool_rounds: Tool-call rounds allowed per turn; 0 means no cap.
    """

    def __init__(
            self,
            gateway: Gateway,
            router: Optional[ToolRouter] = None,
            *,
            system_prompt: str = SYSTEM_PROMPT,
            max_tool_rounds: int = MAX_TOOL_ROUNDS,
    ):

        self.gateway = gateway
        self.router = router or ToolRouter()
        self.max_tool_rounds = max_tool_rounds
        self.messages: List[Dict[str, Any]] = [{"role": "system", "content": system_prompt}]
        self.stats = TurnStats()

    @property
    def tools(self) -> Sequence[Dict[str, Any]]:
        return self.router.catalog

    def reset_stats(self) -> None:
        self.stats.reset()

    def handle_turn(self, line: str) -> TurnResult:
        """
        Run one user turn to completion.

        Raises:
            GatewayError: the model call failed. Messages appended so far stay
                in the transcript and the conversation can take the next turn.
        """

        self.stats = TurnStats()
        start = time.perf_counter()
        rounds = 0

        self.messages.append({"role": "user", "content": line})

        while True:
            turn = self._call_model()
            self.messages.append(turn.to_message())

            # Not a tool call: we have the final result
            if not turn.tool_calls:
                return self._result(turn.content or "", start, rounds)

            for tc in turn.tool_calls:
                result = self._call_tool(tc)
                self.messages.append(result.to_message())
            rounds += 1

            if self.max_tool_rounds and rounds >= self.max_tool_rounds:
                logger.warning("tool round limit reached", rounds=rounds, limit=self.max_tool_rounds)
                return self._result(ABORTED_TEXT, start, rounds, aborted=True)

    # -------- Steps -----------------------------------------------------------

    def _call_model(self) -> AssistantTurn:

        start = time.perf_counter()
        turn = self.gateway.complete(self.messages, self.tools)
        elapsed = time.perf_counter() - start

        self.stats.llm_calls += 1
        self.stats.llm_time += elapsed
        self.stats.tokens += turn.usage.total_tokens

        logger.info(
            "llm usage",
            id=turn.id,
            model=turn.model,
            prompt_tokens=turn.usage.prompt_tokens,
            completion_tokens=turn.usage.completion_tokens,
            total_tokens=turn.usage.total_tokens,
            elapsed=round(elapsed, 3),
        )

        return turn

    def _call_tool(self, tc: ToolCallRequest) -> ToolResult:
        """Dispatch one call; any failure becomes an "error ..." result for the model."""

        logger.info("tool call", id=tc.id, name=tc.name, args=preview(tc.arguments))

        start = time.perf_counter()
        try:
            content = self.router.dispatch(tc.name, tc.arguments)
            ok = True
        except ToolError as e:
            logger.error("error in tool call", id=tc.id, name=tc.name, err=str(e))
            content, ok = f"error {e}", False
        except Exception as e:
            logger.exception("unexpected error in tool call", id=tc.id, name=tc.name)
            content, ok = f"error {e}", False
        elapsed = time.perf_counter() - start

        self.stats.tool_calls += 1
        self.stats.tool_time += elapsed
        logger.info(
            "tool metrics",
            calls=self.stats.tool_calls,
            last_duration=round(elapsed, 3),
            total_tool_time=round(self.stats.tool_time, 3),
            ok=ok,
        )

        return ToolResult(tool_call_id=tc.id, name=tc.name, content=content, ok=ok)

    def _result(self, text: str, start: float, rounds: int, aborted: bool = False) -> TurnResult:

        return TurnResult(
            text=text,
            stats=self.stats.model_copy(),
            elapsed=time.perf_counter() - start,
            rounds=rounds,
            aborted=aborted,
        )
