"""Patch application and build-rule overrides.

This module handles:
- Discovering the ordered patch set
- Applying patches with patch(1), skipping ones already present
- Appending override targets to debian/rules
"""

from __future__ import annotations

import logging
from pathlib import Path

from gapsdeb.commands import run_command
from gapsdeb.errors import (
    PATCH_NOT_FOUND,
    CommandError,
    PatchApplyError,
    RulesFileError,
)
from gapsdeb.types import PatchOutcome

logger = logging.getLogger(__name__)

# Appended verbatim to debian/rules; recipe lines must start with a tab.
RULES_OVERRIDES = """
# gapsdeb overrides
override_dh_auto_test:
\t@echo "Skipping test suite (needs a running X server)"

override_dh_strip:
\tdh_strip --no-automatic-dbgsym

override_dh_builddeb:
\tdh_builddeb -- -Zxz
"""


def discover_patches(patches_dir: Path, names: list[str] | None = None) -> list[Path]:
    """Return the ordered patch set.

    Args:
        patches_dir: Directory containing the patches.
        names: Explicit ordered patch file names. When empty, every
            '*.patch' file in the directory is used in sorted order.

    Returns:
        Ordered list of patch paths.
    """
    if names:
        return [patches_dir / name for name in names]
    if not patches_dir.is_dir():
        logger.info("No patches directory at %s", patches_dir)
        return []
    return sorted(p for p in patches_dir.glob("*.patch") if p.is_file())


def is_patch_applied(source_dir: Path, patch: Path) -> bool:
    """Check whether a patch's changes are already in the tree.

    A patch is considered applied when it can be reversed cleanly.
    """
    result = run_command(
        [
            "patch",
            "-p1",
            "--reverse",
            "--dry-run",
            "--force",
            "--silent",
            "--input",
            str(patch),
        ],
        cwd=source_dir,
        check=False,
    )
    return result.success


def apply_patch(source_dir: Path, patch: Path) -> PatchOutcome:
    """Apply a single patch to the source tree.

    Args:
        source_dir: Root of the source tree (patch -p1 base).
        patch: Patch file.

    Returns:
        PatchOutcome.APPLIED, or PatchOutcome.ALREADY_APPLIED if the
        changes were present.

    Raises:
        PatchApplyError: If the patch is missing or fails to apply.
    """
    if not patch.is_file():
        raise PatchApplyError(patch, f"Patch not found: {patch}", code=PATCH_NOT_FOUND)

    if is_patch_applied(source_dir, patch):
        logger.info("Patch %s already applied, skipping", patch.name)
        return PatchOutcome.ALREADY_APPLIED

    try:
        run_command(
            [
                "patch",
                "-p1",
                "--forward",
                "--force",
                "--no-backup-if-mismatch",
                "--reject-file=-",
                "--input",
                str(patch),
            ],
            cwd=source_dir,
        )
    except CommandError as e:
        raise PatchApplyError(
            patch,
            f"Failed to apply {patch.name}: {e.message}",
            result=e.result,
        ) from e

    logger.info("Applied patch %s", patch.name)
    return PatchOutcome.APPLIED


def apply_patch_set(source_dir: Path, patches: list[Path]) -> dict[str, PatchOutcome]:
    """Apply patches in order, stopping at the first failure.

    Returns:
        Mapping of patch file name to outcome, in application order.

    Raises:
        PatchApplyError: If any patch fails.
    """
    outcomes: dict[str, PatchOutcome] = {}
    for patch in patches:
        outcomes[patch.name] = apply_patch(source_dir, patch)
    return outcomes


def append_rules_overrides(rules_path: Path, overrides: str = RULES_OVERRIDES) -> None:
    """Append override targets to debian/rules.

    The block is appended on every call; running twice on an unreset tree
    duplicates it.

    Raises:
        RulesFileError: If the rules file does not exist or cannot be written.
    """
    if not rules_path.is_file():
        raise RulesFileError(rules_path)

    try:
        with rules_path.open("a", encoding="utf-8") as f:
            f.write(overrides)
    except OSError as e:
        raise RulesFileError(rules_path, f"Failed to update {rules_path}: {e}") from e

    logger.info("Appended build overrides to %s", rules_path)


__all__ = [
    "RULES_OVERRIDES",
    "append_rules_overrides",
    "apply_patch",
    "apply_patch_set",
    "discover_patches",
    "is_patch_applied",
]
