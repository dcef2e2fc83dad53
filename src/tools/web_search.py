"""
src/tools/web_search.py — web search through DuckDuckGo's HTML endpoint

Provides:
- search(query, max_results): fetch the lightweight result page and format the hits
- parse_results(html_text, max_results): pull titles/links out of the page
- run(args): tool entry point used by the router

Notes:
* One GET, fixed user agent, body read capped at 1 MiB. The 12 s timeout is
  both httpx's per-phase limit and an overall deadline while reading the body.
* Hits are anchors whose class contains `result__a`. Nested tags are stripped
  from the title and HTML entities unescaped.
* Output is compact, one "N. Title\\nURL\\n" record per hit, or "no results".
"""


from __future__ import annotations
import html
import re
import time
from itertools import islice
from typing import Mapping, Optional

import httpx
import structlog
from pydantic import ValidationError

from config import (
    SEARCH_DEFAULT_RESULTS,
    SEARCH_LOCALE,
    SEARCH_MAX_BYTES,
    SEARCH_TIMEOUT,
    SEARCH_URL,
    SEARCH_USER_AGENT,
)
from orchestrator.errors import InvalidArgumentsError, MissingQueryError, SearchHTTPError, ToolExecutionError
from orchestrator.models import WebSearchArgs


logger = structlog.get_logger(__name__)

NO_RESULTS = "no results"

_RESULT_ANCHOR = re.compile(r'<a[^>]*class="[^"]*result__a[^"]*"[^>]*href="([^"]+)"[^>]*>(.*?)</a>')
_TAG = re.compile(r"<[^>]+>")

_clock = time.monotonic


# --- Parsing -------------------------------------------------------------------
def parse_results(html_text: str, max_results: int = SEARCH_DEFAULT_RESULTS) -> str:
    """
    Extract up to `max_results` hits from a result page, in document order.
    Returns NO_RESULTS when nothing matches.
    """

    lines = []

    for i, m in enumerate(islice(_RESULT_ANCHOR.finditer(html_text), max_results), start=1):
        href = html.unescape(m.group(1))
        title = html.unescape(_TAG.sub("", m.group(2)))
        lines.append(f"{i}. {title}\n{href}\n")

    if not lines:
        return NO_RESULTS

    return "".join(lines)

def _read_capped(resp: httpx.Response, limit: int, deadline: float) -> bytes:
    """Read at most `limit` bytes of a streamed response body, giving up at `deadline`."""

    buf = bytearray()

    for chunk in resp.iter_bytes():
        if _clock() > deadline:
            raise ToolExecutionError(f"search timed out after {SEARCH_TIMEOUT:g}s")
        buf.extend(chunk[: limit - len(buf)])
        if len(buf) >= limit:
            break

    return bytes(buf)


# --- Public API ----------------------------------------------------------------
def search(
        query: str,
        max_results: int = SEARCH_DEFAULT_RESULTS,
        *,
        transport: Optional[httpx.BaseTransport] = None,
) -> str:
    """
    Run a web search and return formatted hits.

    Args:
        query: Free-text search query (must be non-empty).
        max_results: Number of hits to keep; already clamped by WebSearchArgs.
        transport: Optional httpx transport (tests use httpx.MockTransport).

    Raises:
        MissingQueryError: empty query; raised before any request is made.
        SearchHTTPError: status outside 200-299.
        ToolExecutionError: timeout or other transport failure.
    """

    if not query:
        raise MissingQueryError()

    deadline = _clock() + SEARCH_TIMEOUT
    params = {"q": query, "kl": SEARCH_LOCALE}
    headers = {"User-Agent": SEARCH_USER_AGENT}

    try:
        with httpx.Client(timeout=SEARCH_TIMEOUT, headers=headers, transport=transport) as client:
            with client.stream("GET", SEARCH_URL, params=params) as resp:
                if not 200 <= resp.status_code < 300:
                    logger.warning("search http status", status=resp.status_code)
                    raise SearchHTTPError(resp.status_code)
                body = _read_capped(resp, SEARCH_MAX_BYTES, deadline)
    except httpx.HTTPError as e:
        logger.error("search request failed", err=str(e))
        raise ToolExecutionError(f"search request failed: {e}") from e

    logger.info("search finished", query=query, bytes=len(body))

    return parse_results(body.decode("utf-8", errors="replace"), max_results)

def run(args: Mapping[str, str], *, transport: Optional[httpx.BaseTransport] = None) -> str:
    """Tool entry point: validate {query, max_results?} and search."""

    if not args.get("query"):
        raise MissingQueryError()

    try:
        parsed = WebSearchArgs.model_validate(dict(args))
    except ValidationError as e:
        raise InvalidArgumentsError("web_search: invalid arguments") from e

    return search(parsed.query, parsed.max_results, transport=transport)
