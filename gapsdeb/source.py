"""Upstream source tree access.

Clones the upstream repository once and brings the tree to a clean
checkout of the selected branch on every run.
"""

from __future__ import annotations

import logging
from pathlib import Path

from gapsdeb.commands import run_command
from gapsdeb.config import Settings
from gapsdeb.prompts import USE_NEXT_BRANCH, DecisionProvider, ask

logger = logging.getLogger(__name__)


def choose_branch(settings: Settings, decider: DecisionProvider) -> str:
    """Ask which upstream branch to build.

    Returns:
        The next branch if the user opts in, else the stable branch.
    """
    prompt = (
        f"Build the '{settings.next_branch}' branch "
        f"instead of '{settings.stable_branch}'?"
    )
    if ask(decider, USE_NEXT_BRANCH, prompt=prompt):
        branch = settings.next_branch
    else:
        branch = settings.stable_branch
    logger.info("Selected branch: %s", branch)
    return branch


def clone_source(repo_url: str, source_dir: Path) -> bool:
    """Clone the upstream repository unless the tree already exists.

    Args:
        repo_url: Repository URL.
        source_dir: Target directory.

    Returns:
        True if a clone was made, False if it was skipped.

    Raises:
        CommandError: If git clone fails.
    """
    if source_dir.exists():
        logger.info("Source tree %s already exists, skipping clone", source_dir)
        return False

    logger.info("Cloning %s into %s", repo_url, source_dir)
    source_dir.parent.mkdir(parents=True, exist_ok=True)
    run_command(["git", "clone", repo_url, str(source_dir)])
    return True


def checkout_branch(source_dir: Path, branch: str) -> None:
    """Reset the tree to a clean checkout of the remote branch.

    Untracked files are removed too, so files added by patches or left
    behind by a previous build do not survive into the next run.

    Raises:
        CommandError: If any git command fails.
    """
    logger.info("Checking out %s in %s", branch, source_dir)
    run_command(["git", "fetch", "origin"], cwd=source_dir)
    run_command(["git", "reset", "--hard"], cwd=source_dir)
    run_command(["git", "checkout", branch], cwd=source_dir)
    run_command(["git", "reset", "--hard", f"origin/{branch}"], cwd=source_dir)
    run_command(["git", "clean", "-fdx"], cwd=source_dir)


__all__ = ["checkout_branch", "choose_branch", "clone_source"]
