"""
src/app.py

Interactive front end: reads a line at the "> " prompt, runs it through the
conversation and prints the reply followed by a one-line timing summary.

Errors from a turn are printed and the prompt comes back; Ctrl-D exits.
"""


import sys
from typing import Callable, Mapping

import structlog
from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory

from config import ALLOWED_TOOLS, CONFIRM_DANGEROUS, HISTORY_FILE, LOG_FILE, LOG_FORMAT, LOG_LEVEL
from observability import configure_logging
from orchestrator.conversation import Conversation
from orchestrator.errors import AgentError, GatewayError
from orchestrator.llm_openai import OpenAIGateway
from orchestrator.models import TurnResult
from orchestrator.router import ToolRouter
from tools.permissions import ToolPolicy


logger = structlog.get_logger(__name__)

PROMPT = "> "


def format_stats(result: TurnResult) -> str:
    """Timing/usage line printed after every reply."""

    s = result.stats
    total = result.elapsed

    def pct(part: float) -> float:
        return part / total * 100 if total > 0 else 0.0

    return (
        f"waiting for: tools: {s.tool_time:.2f}s ({pct(s.tool_time):2.0f}%), "
        f"LLM: {s.llm_time:.2f}s ({pct(s.llm_time):2.0f}%), "
        f"total: {total:.2f}s. "
        f"Total calls: LLM {s.llm_calls}, tools: {s.tool_calls} tokens: {s.tokens}"
    )

def run_repl(conversation: Conversation, read_line: Callable[[], str], write: Callable[[str], None] = print) -> None:
    """
    Read-eval-print loop. Returns on end of input.

    A failing turn is reported and the loop carries on with the next line.
    """

    while True:
        try:
            line = read_line()
        except KeyboardInterrupt:
            continue
        except EOFError:
            return

        try:
            result = conversation.handle_turn(line)
        except AgentError as e:
            logger.error("turn failed", err=str(e), kind=type(e).__name__)
            write(f"error: {e}")
            continue
        except Exception as e:
            logger.exception("turn crashed")
            write(f"error: {e}")
            continue

        write(result.text)
        write(format_stats(result))
        conversation.reset_stats()

def build_policy(session: PromptSession) -> ToolPolicy:
    """Tool policy from config; asks on the prompt before dangerous calls when enabled."""

    if not CONFIRM_DANGEROUS:
        return ToolPolicy(allowed=ALLOWED_TOOLS)

    def confirm(name: str, args: Mapping[str, str]) -> bool:
        answer = session.prompt(f"run {name} {dict(args)}? [y/N] ")
        return answer.strip().lower() in {"y", "yes"}

    return ToolPolicy(allowed=ALLOWED_TOOLS, confirm=confirm)

def main() -> int:

    configure_logging(LOG_FILE, LOG_LEVEL, LOG_FORMAT)
    session: PromptSession = PromptSession(history=FileHistory(HISTORY_FILE))

    try:
        gateway = OpenAIGateway()
    except GatewayError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    conversation = Conversation(gateway, ToolRouter(policy=build_policy(session)))
    logger.info("session started", model=gateway.model, tools=[t["function"]["name"] for t in conversation.tools])

    run_repl(conversation, lambda: session.prompt(PROMPT))

    return 0


if __name__ == "__main__":

    sys.exit(main())

# EOF
