"""Dependency checks and installation.

This module handles:
- Checking that git is available
- Checking that the packaging toolchain packages are installed
- Installing missing packages with apt-get
- Installing build dependencies from debian/control with mk-build-deps
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from gapsdeb.commands import run_command
from gapsdeb.config import Settings
from gapsdeb.prompts import (
    INSTALL_BUILD_DEPS,
    INSTALL_GIT,
    INSTALL_PACKAGING_TOOLS,
    DecisionProvider,
    ask,
)

logger = logging.getLogger(__name__)

MK_BUILD_DEPS_TOOL = "apt-get -y --no-install-recommends"


def is_tool_available(name: str) -> bool:
    """Return True if an executable is on PATH."""
    return shutil.which(name) is not None


def is_package_installed(package: str) -> bool:
    """Check whether a Debian package is installed.

    Args:
        package: Package name.

    Returns:
        True if dpkg reports the package as installed.
    """
    result = run_command(
        ["dpkg-query", "-W", "-f=${Status}", package],
        check=False,
    )
    # Status is "<want> <error> <state>", e.g. "install ok installed"
    status = result.stdout.split()
    return result.success and bool(status) and status[-1] == "installed"


def missing_packages(packages: list[str]) -> list[str]:
    """Return the packages from the list that are not installed."""
    return [pkg for pkg in packages if not is_package_installed(pkg)]


def install_packages(packages: list[str], settings: Settings) -> None:
    """Install packages with apt-get.

    Raises:
        CommandError: If apt-get fails.
    """
    if not packages:
        return
    logger.info("Installing packages: %s", " ".join(packages))
    run_command(
        settings.privileged(["apt-get", "install", "-y", *packages]),
        capture=False,
    )


def ensure_git(settings: Settings, decider: DecisionProvider) -> bool:
    """Make sure git is available.

    Returns:
        True if git had to be installed, False if it was already present.

    Raises:
        GateDeclinedError: If git is missing and the user declines installing it.
        CommandError: If installation fails.
    """
    if is_tool_available("git"):
        logger.debug("git found")
        return False

    ask(decider, INSTALL_GIT)
    install_packages(["git"], settings)
    return True


def ensure_packaging_tools(settings: Settings, decider: DecisionProvider) -> list[str]:
    """Make sure the packaging toolchain is installed.

    Returns:
        The packages that were installed (empty if nothing was missing).

    Raises:
        GateDeclinedError: If tools are missing and the user declines.
        CommandError: If installation fails.
    """
    missing = missing_packages(settings.packaging_tools)
    if not missing:
        logger.debug("Packaging tools present: %s", ", ".join(settings.packaging_tools))
        return []

    ask(
        decider,
        INSTALL_PACKAGING_TOOLS,
        prompt=f"Missing packaging tools: {', '.join(missing)}. Install them now?",
    )
    install_packages(missing, settings)
    return missing


def install_build_dependencies(
    source_dir: Path,
    settings: Settings,
    decider: DecisionProvider,
) -> bool:
    """Offer to install the build dependencies declared in debian/control.

    Returns:
        True if the dependencies were installed, False if skipped.

    Raises:
        CommandError: If mk-build-deps fails.
    """
    if not ask(decider, INSTALL_BUILD_DEPS):
        return False

    control = source_dir / "debian" / "control"
    run_command(
        settings.privileged(
            [
                "mk-build-deps",
                "--install",
                "--remove",
                "--tool",
                MK_BUILD_DEPS_TOOL,
                str(control),
            ]
        ),
        cwd=source_dir,
        capture=False,
    )
    return True


__all__ = [
    "MK_BUILD_DEPS_TOOL",
    "ensure_git",
    "ensure_packaging_tools",
    "install_build_dependencies",
    "install_packages",
    "is_package_installed",
    "is_tool_available",
    "missing_packages",
]
