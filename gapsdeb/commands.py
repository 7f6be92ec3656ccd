"""Execution of external commands.

Every tool gapsdeb drives (apt-get, git, patch, dch, dpkg-buildpackage)
is started through run_command, which returns a CommandResult and raises
CommandError on failure when asked to check the exit status.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from pathlib import Path

from gapsdeb.errors import COMMAND_NOT_FOUND, COMMAND_TIMEOUT, CommandError
from gapsdeb.types import CommandResult

logger = logging.getLogger(__name__)


def run_command(
    argv: list[str],
    cwd: Path | None = None,
    check: bool = True,
    capture: bool = True,
    env_override: dict[str, str] | None = None,
    timeout: int | None = None,
) -> CommandResult:
    """Run an external command and wait for it to exit.

    Args:
        argv: Command and arguments.
        cwd: Working directory for the command.
        check: Raise CommandError when the exit status is non-zero.
        capture: Capture stdout/stderr. Commands that may prompt the user
            (package installs under sudo) run with capture=False so their
            output reaches the terminal.
        env_override: Environment variables to set on top of os.environ.
        timeout: Timeout in seconds (None = no timeout).

    Returns:
        CommandResult with the exit status and captured output.

    Raises:
        CommandError: If the command cannot be started, times out, or
            exits non-zero while check is set.
    """
    cmd_str = shlex.join(argv)
    logger.debug("Running: %s (cwd=%s)", cmd_str, cwd or ".")

    env: dict[str, str] | None = None
    if env_override:
        env = dict(os.environ)
        env.update(env_override)

    started = time.monotonic()
    try:
        completed = subprocess.run(
            argv,
            cwd=cwd,
            capture_output=capture,
            text=True,
            env=env,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        raise CommandError(
            f"{cmd_str} timed out after {timeout} seconds",
            code=COMMAND_TIMEOUT,
        ) from e
    except OSError as e:
        raise CommandError(
            f"Failed to run {argv[0]}: {e}",
            code=COMMAND_NOT_FOUND,
        ) from e

    result = CommandResult(
        argv=tuple(argv),
        exit_code=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
        cwd=str(cwd) if cwd is not None else None,
        duration=time.monotonic() - started,
    )

    if check and not result.success:
        detail = result.stderr.strip()
        message = f"{cmd_str} failed with exit code {result.exit_code}"
        if detail:
            message = f"{message}: {detail}"
        logger.error(message)
        raise CommandError(message, result=result)

    return result


__all__ = ["run_command"]
