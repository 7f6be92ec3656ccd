"""Build orchestration.

This module provides the high-level run API:
- run_pipeline(): Main entry point - every step of a run, in order
- RunContext: immutable per-run state threaded through the steps

Steps raise typed errors from gapsdeb.errors; nothing here exits the
process.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from pathlib import Path

from gapsdeb.artifacts import (
    cleanup_tagged_files,
    describe_artifacts,
    find_artifacts,
    generate_manifest,
    install_artifacts,
    manifest_path,
    write_manifest,
)
from gapsdeb.build import BuildResult, run_package_build
from gapsdeb.config import Settings, print_settings_json
from gapsdeb.deps import ensure_git, ensure_packaging_tools, install_build_dependencies
from gapsdeb.patches import append_rules_overrides, apply_patch_set, discover_patches
from gapsdeb.prompts import CLEANUP, INSTALL_PACKAGES, DecisionProvider, ask
from gapsdeb.source import checkout_branch, choose_branch, clone_source
from gapsdeb.types import PatchOutcome
from gapsdeb.user_config import offer_user_config
from gapsdeb.versions import compute_new_version, make_build_tag, record_changelog_entry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunContext:
    """Per-run state.

    The build tag and branch are fixed when the context is created. The
    version is unknown until the source tree is available, so a second
    context carrying it is derived with with_version().
    """

    workdir: Path
    source_dir: Path
    patches_dir: Path
    branch: str
    build_tag: str
    version: str | None = None

    def with_version(self, version: str) -> RunContext:
        """Return a copy of this context with the version set."""
        return dataclasses.replace(self, version=version)


@dataclass
class PipelineResult:
    """Outcome of a complete run."""

    context: RunContext
    build: BuildResult
    cloned: bool
    patches: dict[str, PatchOutcome] = field(default_factory=dict)
    artifacts: list[Path] = field(default_factory=list)
    manifest_path: Path | None = None
    installed: bool = False
    config_files_updated: list[Path] = field(default_factory=list)
    removed: list[Path] = field(default_factory=list)


def create_context(
    settings: Settings,
    branch: str,
    build_tag: str | None = None,
) -> RunContext:
    """Create the context of a run from settings."""
    workdir = settings.workdir.resolve()
    return RunContext(
        workdir=workdir,
        source_dir=workdir / settings.source_dirname,
        patches_dir=settings.effective_patches_dir.resolve(),
        branch=branch,
        build_tag=build_tag or make_build_tag(),
    )


def prepare_source(context: RunContext, settings: Settings) -> bool:
    """Clone (if needed) and check out the context's branch.

    Returns:
        True if the tree was cloned in this run.
    """
    cloned = clone_source(settings.repo_url, context.source_dir)
    checkout_branch(context.source_dir, context.branch)
    return cloned


def apply_patches(context: RunContext, settings: Settings) -> dict[str, PatchOutcome]:
    """Apply the patch set and append the debian/rules overrides."""
    patches = discover_patches(context.patches_dir, settings.patches)
    outcomes = apply_patch_set(context.source_dir, patches)
    append_rules_overrides(context.source_dir / "debian" / "rules")
    return outcomes


def run_pipeline(
    settings: Settings,
    decider: DecisionProvider,
    build_tag: str | None = None,
) -> PipelineResult:
    """Run every step of a build.

    Args:
        settings: Application settings.
        decider: Provider answering the yes/no gates.
        build_tag: Optional fixed build tag (generated when omitted).

    Returns:
        PipelineResult describing what was done.

    Raises:
        GateDeclinedError: If a required gate is declined.
        CommandError: If any external command fails.
        RulesFileError: If debian/rules is missing.
    """
    logger.debug("Effective settings: %s", print_settings_json(settings))

    ensure_git(settings, decider)
    ensure_packaging_tools(settings, decider)

    branch = choose_branch(settings, decider)
    context = create_context(settings, branch, build_tag)
    logger.info("Build tag: %s", context.build_tag)

    cloned = prepare_source(context, settings)

    version = compute_new_version(context.source_dir, settings, context.build_tag)
    context = context.with_version(version)
    record_changelog_entry(context.source_dir, version, settings)

    patch_outcomes = apply_patches(context, settings)

    install_build_dependencies(context.source_dir, settings, decider)

    build = run_package_build(
        context.source_dir,
        context.workdir,
        context.build_tag,
        settings,
    )

    result = PipelineResult(
        context=context,
        build=build,
        cloned=cloned,
        patches=patch_outcomes,
    )

    result.artifacts = find_artifacts(context.workdir, context.build_tag)
    manifest = generate_manifest(
        describe_artifacts(result.artifacts, context.workdir),
        build_tag=context.build_tag,
        version=context.version,
        branch=context.branch,
    )
    result.manifest_path = write_manifest(
        manifest, manifest_path(context.workdir, context.build_tag)
    )

    if result.artifacts and ask(decider, INSTALL_PACKAGES):
        install_artifacts(result.artifacts, settings)
        result.installed = True

    result.config_files_updated = offer_user_config(settings.user_config_paths, decider)

    if ask(decider, CLEANUP):
        result.removed = cleanup_tagged_files(context.workdir, context.build_tag)

    return result


__all__ = [
    "PipelineResult",
    "RunContext",
    "apply_patches",
    "create_context",
    "prepare_source",
    "run_pipeline",
]
