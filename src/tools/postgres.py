"""
src/tools/postgres.py — query the postgres db through psql

The query is handed to `psql <db> -c` verbatim. Only standard output is
captured (psql's stderr is discarded), and it is returned even when psql
exits non-zero.
"""


from __future__ import annotations
import subprocess
from typing import List, Mapping

import structlog
from pydantic import ValidationError

import config
from orchestrator.errors import InvalidArgumentsError, ToolExecutionError
from orchestrator.models import PostgresArgs


logger = structlog.get_logger(__name__)


def build_command(query: str) -> List[str]:
    return [config.PSQL_PATH, config.PSQL_DATABASE, "-c", query]

def run_query(query: str) -> str:
    """
    Run `query` with psql and return its standard output.

    Raises:
        ToolExecutionError: psql could not be started.
    """

    print(query)

    try:
        proc = subprocess.run(
            build_command(query),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
        )
    except OSError as e:
        logger.error("psql failed to start", err=str(e))
        raise ToolExecutionError(f"cannot start {config.PSQL_PATH}: {e}") from e

    out = proc.stdout.decode("utf-8", errors="replace")
    logger.info("command finished", exit_code=proc.returncode, bytes=len(out))

    return out

def run(args: Mapping[str, str]) -> str:
    """Tool entry point: validate {query} and run it."""

    try:
        parsed = PostgresArgs.model_validate(dict(args))
    except ValidationError as e:
        raise InvalidArgumentsError("postgres: 'query' is required") from e

    return run_query(parsed.query)
