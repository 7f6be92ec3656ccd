"""Shared type definitions for gapsdeb.

This module contains dataclasses, enums, and constants shared across
modules to avoid circular imports.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum


class ExitCode(IntEnum):
    """Process exit statuses used by the CLI."""

    OK = 0
    COMMAND_FAILED = 1
    INVALID_ARGUMENT = 2
    GIT_DECLINED = 3
    TOOLS_DECLINED = 4


class PatchOutcome(str, Enum):
    """Result of applying a single patch."""

    APPLIED = "applied"
    ALREADY_APPLIED = "already_applied"


@dataclass(frozen=True)
class CommandResult:
    """Result of an external command invocation.

    Attributes:
        argv: The command and its arguments.
        exit_code: Process exit status.
        stdout: Captured standard output (empty when not captured).
        stderr: Captured standard error (empty when not captured).
        cwd: Working directory the command ran in.
        duration: Wall-clock duration in seconds.
    """

    argv: tuple[str, ...]
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    cwd: str | None = None
    duration: float = 0.0

    @property
    def success(self) -> bool:
        """Whether the command exited with status 0."""
        return self.exit_code == 0


@dataclass
class ArtifactInfo:
    """Information about a built package artifact."""

    filename: str
    relative_path: str
    size_bytes: int
    sha256: str
    kind: str | None = None
    labels: list[str] = field(default_factory=list)


__all__ = [
    "ArtifactInfo",
    "CommandResult",
    "ExitCode",
    "PatchOutcome",
]
