"""Error definitions for gapsdeb.

Every error carries a stable string code and the process exit status the
CLI uses when the error reaches the top level.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from gapsdeb.types import ExitCode

if TYPE_CHECKING:
    from pathlib import Path

    from gapsdeb.types import CommandResult

# Error code constants
GATE_DECLINED = "gate_declined"
COMMAND_FAILED = "command_failed"
COMMAND_NOT_FOUND = "command_not_found"
COMMAND_TIMEOUT = "command_timeout"
PATCH_FAILED = "patch_failed"
PATCH_NOT_FOUND = "patch_not_found"
RULES_MISSING = "rules_missing"
BUILD_FAILED = "build_failed"
BUILD_TIMEOUT = "build_timeout"


class GapsDebError(Exception):
    """Base class for errors that terminate a run."""

    def __init__(
        self,
        message: str,
        code: str = "error",
        exit_code: int = ExitCode.COMMAND_FAILED,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.exit_code = exit_code


class GateDeclinedError(GapsDebError):
    """Raised when the user declines a required gate."""

    def __init__(self, gate: str, exit_code: int) -> None:
        super().__init__(
            f"Declined required step: {gate}",
            code=GATE_DECLINED,
            exit_code=exit_code,
        )
        self.gate = gate


class CommandError(GapsDebError):
    """Raised when an external command fails or cannot be started."""

    def __init__(
        self,
        message: str,
        result: CommandResult | None = None,
        code: str = COMMAND_FAILED,
    ) -> None:
        super().__init__(message, code=code, exit_code=ExitCode.COMMAND_FAILED)
        self.result = result


class PatchApplyError(CommandError):
    """Raised when a patch cannot be applied."""

    def __init__(
        self,
        patch: Path,
        message: str,
        result: CommandResult | None = None,
        code: str = PATCH_FAILED,
    ) -> None:
        super().__init__(message, result=result, code=code)
        self.patch = patch


class BuildExecutionError(CommandError):
    """Raised when the package build fails."""

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        log_path: Path | None = None,
        code: str = BUILD_FAILED,
    ) -> None:
        super().__init__(message, code=code)
        self.build_exit_code = exit_code
        self.log_path = log_path


class RulesFileError(GapsDebError):
    """Raised when debian/rules cannot be found or written."""

    def __init__(self, path: Path, message: str | None = None) -> None:
        super().__init__(
            message or f"Build rules file not found: {path}",
            code=RULES_MISSING,
        )
        self.path = path


__all__ = [
    "BUILD_FAILED",
    "BUILD_TIMEOUT",
    "COMMAND_FAILED",
    "COMMAND_NOT_FOUND",
    "COMMAND_TIMEOUT",
    "GATE_DECLINED",
    "PATCH_FAILED",
    "PATCH_NOT_FOUND",
    "RULES_MISSING",
    "BuildExecutionError",
    "CommandError",
    "GapsDebError",
    "GateDeclinedError",
    "PatchApplyError",
    "RulesFileError",
]
