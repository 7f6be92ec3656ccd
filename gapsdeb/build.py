"""Package build execution.

This module handles:
- Composing the dpkg-buildpackage command
- Executing the build with subprocess
- Capturing stdout/stderr to a log file tagged with the build tag
- Enforcing the build timeout
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from gapsdeb.config import Settings
from gapsdeb.errors import BUILD_TIMEOUT, COMMAND_NOT_FOUND, BuildExecutionError

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Result of a package build.

    Attributes:
        success: Whether the build succeeded.
        exit_code: Process exit code.
        log_path: Path to the build log file.
        started_at: Build start time.
        finished_at: Build finish time.
        command: The command that was executed.
    """

    success: bool
    exit_code: int
    log_path: Path
    started_at: datetime
    finished_at: datetime
    command: str


def compose_build_command(jobs: int | None = None) -> list[str]:
    """Compose the dpkg-buildpackage command.

    Builds binary packages only, unsigned.
    """
    cmd = ["dpkg-buildpackage", "-us", "-uc", "-b"]
    if jobs:
        cmd.append(f"-j{jobs}")
    return cmd


def build_log_path(workdir: Path, build_tag: str) -> Path:
    """Return the log file path for a run."""
    return workdir / f"build-{build_tag}.log"


def run_package_build(
    source_dir: Path,
    workdir: Path,
    build_tag: str,
    settings: Settings,
) -> BuildResult:
    """Build the Debian packages.

    dpkg-buildpackage writes the packages to the parent of the source
    tree, which is the working directory.

    Args:
        source_dir: Path to the patched source tree.
        workdir: Working directory receiving the log.
        build_tag: The run's build tag.
        settings: Application settings.

    Returns:
        BuildResult with execution details.

    Raises:
        BuildExecutionError: If the build fails, times out, or cannot start.
    """
    log_path = build_log_path(workdir, build_tag)
    cmd = compose_build_command(settings.build_jobs)
    cmd_str = shlex.join(cmd)
    timeout = settings.build_timeout

    logger.info("Executing build: %s", cmd_str)
    logger.info("Source directory: %s", source_dir)
    logger.info("Build log: %s", log_path)

    started_at = datetime.now(timezone.utc)

    try:
        with log_path.open("w") as log_file:
            log_file.write(f"# Command: {cmd_str}\n")
            log_file.write(f"# Started: {started_at.isoformat()}\n")
            log_file.write(f"# CWD: {source_dir}\n")
            log_file.write("# " + "=" * 70 + "\n\n")
            log_file.flush()

            result = subprocess.run(
                cmd,
                cwd=source_dir,
                stdout=log_file,
                stderr=subprocess.STDOUT,
                timeout=timeout,
                check=False,
            )
            exit_code = result.returncode

    except subprocess.TimeoutExpired as e:
        message = f"Build timed out after {timeout} seconds"
        logger.error("%s. See log: %s", message, log_path)
        with log_path.open("a") as log_file:
            log_file.write(f"\n# TIMEOUT after {timeout} seconds\n")
        raise BuildExecutionError(
            message,
            exit_code=-1,
            log_path=log_path,
            code=BUILD_TIMEOUT,
        ) from e

    except OSError as e:
        message = f"Failed to execute build: {e}"
        logger.error(message)
        raise BuildExecutionError(
            message,
            log_path=log_path,
            code=COMMAND_NOT_FOUND,
        ) from e

    finished_at = datetime.now(timezone.utc)

    with log_path.open("a") as log_file:
        log_file.write(f"\n# Finished: {finished_at.isoformat()}\n")
        log_file.write(f"# Exit code: {exit_code}\n")
        duration = (finished_at - started_at).total_seconds()
        log_file.write(f"# Duration: {duration:.1f}s\n")

    if exit_code != 0:
        message = f"Build failed with exit code {exit_code}"
        logger.error("%s. See log: %s", message, log_path)
        raise BuildExecutionError(message, exit_code=exit_code, log_path=log_path)

    return BuildResult(
        success=True,
        exit_code=exit_code,
        log_path=log_path,
        started_at=started_at,
        finished_at=finished_at,
        command=cmd_str,
    )


__all__ = [
    "BuildResult",
    "build_log_path",
    "compose_build_command",
    "run_package_build",
]
