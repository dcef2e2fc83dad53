"""
src/tools/shell.py — run a shell command

The command line goes to bash as-is. Standard output and standard error
are merged into one text blob, which is returned whatever the exit status:
a failing command explains itself in its own output. Only a process that
cannot be started at all is an error.
"""


from __future__ import annotations
import subprocess
from typing import Mapping

import structlog
from pydantic import ValidationError

import config
from orchestrator.errors import InvalidArgumentsError, ToolExecutionError
from orchestrator.models import ShellArgs


logger = structlog.get_logger(__name__)


def run_command(command: str) -> str:
    """
    Execute `command` with `bash -c` and return combined stdout/stderr.

    Raises:
        ToolExecutionError: the shell could not be started.
    """

    print(command)
    logger.info("running command", command=command)

    try:
        proc = subprocess.run(
            [config.SHELL_PATH, "-c", command],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
    except OSError as e:
        logger.error("command failed to start", err=str(e))
        raise ToolExecutionError(f"cannot start {config.SHELL_PATH}: {e}") from e

    out = proc.stdout.decode("utf-8", errors="replace")
    logger.info("command finished", exit_code=proc.returncode, bytes=len(out))

    return out

def run(args: Mapping[str, str]) -> str:
    """Tool entry point: validate {command} and run it."""

    try:
        parsed = ShellArgs.model_validate(dict(args))
    except ValidationError as e:
        raise InvalidArgumentsError("shell: 'command' is required") from e

    return run_command(parsed.command)
