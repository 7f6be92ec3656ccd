"""Yes/no decision gates.

Every decision point of a run is a Gate with a default answer. Gates are
answered by a DecisionProvider, so runs can be driven interactively, with
defaults only, or with canned answers in tests. Declining a required gate
raises GateDeclinedError with the gate's exit status.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

import typer

from gapsdeb.errors import GateDeclinedError
from gapsdeb.types import ExitCode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Gate:
    """A yes/no decision point.

    Attributes:
        name: Stable gate identifier.
        prompt: Question shown to the user.
        default: Answer used when the user just presses enter.
        required: Whether declining terminates the run.
        exit_code: Exit status used when a required gate is declined.
    """

    name: str
    prompt: str
    default: bool
    required: bool = False
    exit_code: int = ExitCode.COMMAND_FAILED


INSTALL_GIT = Gate(
    name="install-git",
    prompt="git is not installed. Install it now?",
    default=True,
    required=True,
    exit_code=ExitCode.GIT_DECLINED,
)
INSTALL_PACKAGING_TOOLS = Gate(
    name="install-packaging-tools",
    prompt="Packaging tools are missing. Install them now?",
    default=True,
    required=True,
    exit_code=ExitCode.TOOLS_DECLINED,
)
USE_NEXT_BRANCH = Gate(
    name="use-next-branch",
    prompt="Build the development branch instead of the stable one?",
    default=False,
)
INSTALL_BUILD_DEPS = Gate(
    name="install-build-deps",
    prompt="Install the build dependencies from debian/control?",
    default=True,
)
INSTALL_PACKAGES = Gate(
    name="install-packages",
    prompt="Install the built packages?",
    default=True,
)
APPEND_USER_CONFIG = Gate(
    name="append-user-config",
    prompt="Append the gaps configuration snippet to your i3 config?",
    default=False,
)
CLEANUP = Gate(
    name="cleanup",
    prompt="Delete the files produced by this build?",
    default=False,
)


class DecisionProvider(Protocol):
    """Answers yes/no questions."""

    def confirm(self, prompt: str, default: bool, gate: str | None = None) -> bool:
        """Return the answer to a yes/no question."""
        ...


class InteractiveDecisionProvider:
    """Asks the user on the terminal."""

    def confirm(self, prompt: str, default: bool, gate: str | None = None) -> bool:
        return typer.confirm(prompt, default=default)


class DefaultsDecisionProvider:
    """Answers every question with its default."""

    def confirm(self, prompt: str, default: bool, gate: str | None = None) -> bool:
        logger.info("%s -> %s (default)", prompt, "yes" if default else "no")
        return default


class ScriptedDecisionProvider:
    """Answers from a fixed mapping of gate name to answer.

    Gates missing from the mapping get their default. Every question is
    recorded in ``asked`` in order.
    """

    def __init__(self, answers: Mapping[str, bool] | None = None) -> None:
        self.answers = dict(answers or {})
        self.asked: list[str] = []

    def confirm(self, prompt: str, default: bool, gate: str | None = None) -> bool:
        key = gate or prompt
        self.asked.append(key)
        return self.answers.get(key, default)


def ask(decider: DecisionProvider, gate: Gate, prompt: str | None = None) -> bool:
    """Ask a gate's question.

    Args:
        decider: Provider answering the question.
        gate: The gate to ask.
        prompt: Optional prompt overriding the gate's text.

    Returns:
        The answer. Optional gates may return False.

    Raises:
        GateDeclinedError: If a required gate is declined.
    """
    answer = decider.confirm(prompt or gate.prompt, gate.default, gate=gate.name)
    if not answer and gate.required:
        logger.error("Required step declined: %s", gate.name)
        raise GateDeclinedError(gate.name, gate.exit_code)
    if not answer:
        logger.info("Skipping %s", gate.name)
    return answer


__all__ = [
    "APPEND_USER_CONFIG",
    "CLEANUP",
    "INSTALL_BUILD_DEPS",
    "INSTALL_GIT",
    "INSTALL_PACKAGES",
    "INSTALL_PACKAGING_TOOLS",
    "USE_NEXT_BRANCH",
    "DecisionProvider",
    "DefaultsDecisionProvider",
    "Gate",
    "InteractiveDecisionProvider",
    "ScriptedDecisionProvider",
    "ask",
]
