"""Package version reconciliation.

The next package version is derived from two sources that can drift
apart: the newest entry of debian/changelog and the upstream version
marker file. The greater of the two (Debian ordering) is suffixed with
the build suffix and the per-run build tag, then recorded with dch.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path

from debian.changelog import Changelog, ChangelogParseError
from debian.debian_support import version_compare

from gapsdeb.commands import run_command
from gapsdeb.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "0.0.0"
BUILD_TAG_FORMAT = "%Y%m%d%H%M%S"

_VERSION_RE = re.compile(r"^\s*v?(\d+(?:\.\d+)*)")


def make_build_tag(now: datetime | None = None) -> str:
    """Generate the build tag for a run.

    Args:
        now: Timestamp to use (defaults to the current UTC time).

    Returns:
        Timestamp string such as '20240101000000'.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    return now.strftime(BUILD_TAG_FORMAT)


def parse_version_string(text: str | None) -> str | None:
    """Extract the leading dotted numeric version from a string.

    '4.18.2 (2020-07-26, branch "gaps")' gives '4.18.2'.

    Returns:
        The version, or None if the text does not start with one.
    """
    if not text:
        return None
    match = _VERSION_RE.match(text)
    return match.group(1) if match else None


def read_changelog_version(changelog_path: Path) -> str | None:
    """Read the upstream version of the newest changelog entry.

    The upstream version is kept whole, including suffixes such as
    '+git20200801', so the new upstream part never sorts below the
    entry's.

    Args:
        changelog_path: Path to debian/changelog.

    Returns:
        Upstream version, or None if the file is missing, has no entry,
        or its upstream version does not start with a dotted number.
    """
    if not changelog_path.is_file():
        logger.debug("No changelog at %s", changelog_path)
        return None

    try:
        with changelog_path.open(encoding="utf-8") as fh:
            changelog = Changelog(fh, max_blocks=1)
    except ChangelogParseError as e:
        logger.warning("Could not parse changelog %s: %s", changelog_path, e)
        return None

    if len(changelog) == 0 or changelog.version is None:
        logger.warning("Changelog %s has no usable entry", changelog_path)
        return None

    upstream = str(changelog.version.upstream_version)
    if parse_version_string(upstream) is None:
        logger.warning("Unusable changelog version %s", changelog.version)
        return None
    return upstream


def read_marker_version(marker_path: Path) -> str | None:
    """Read the version from the upstream version marker file.

    Returns:
        The version, or None if the file is missing or unparseable.
    """
    if not marker_path.is_file():
        logger.debug("No version marker at %s", marker_path)
        return None

    version = parse_version_string(marker_path.read_text(encoding="utf-8"))
    if version is None:
        logger.warning("Could not parse version marker %s", marker_path)
    return version


def compare_versions(a: str, b: str) -> int:
    """Compare two versions using Debian ordering.

    Returns:
        Negative if a < b, zero if equal, positive if a > b.
    """
    return version_compare(a, b)


def reconcile_versions(
    changelog_version: str | None,
    marker_version: str | None,
) -> str:
    """Pick the greater of two versions, treating missing ones as 0.0.0."""
    a = changelog_version or DEFAULT_VERSION
    b = marker_version or DEFAULT_VERSION
    if changelog_version is None and marker_version is None:
        logger.warning(
            "No version found in changelog or marker, using %s", DEFAULT_VERSION
        )

    winner = a if compare_versions(a, b) >= 0 else b
    logger.debug("Reconciled %s (changelog) and %s (marker) to %s", a, b, winner)
    return winner


def compose_package_version(upstream: str, build_suffix: str, build_tag: str) -> str:
    """Build the full package version, e.g. '4.18.2-1~gaps20240101000000'."""
    return f"{upstream}-{build_suffix}{build_tag}"


def compute_new_version(source_dir: Path, settings: Settings, build_tag: str) -> str:
    """Compute the package version for this run.

    Args:
        source_dir: Path to the source tree.
        settings: Application settings.
        build_tag: The run's build tag.

    Returns:
        The new package version.
    """
    changelog_version = read_changelog_version(source_dir / "debian" / "changelog")
    marker_version = read_marker_version(source_dir / settings.version_file)
    upstream = reconcile_versions(changelog_version, marker_version)
    version = compose_package_version(upstream, settings.build_suffix, build_tag)
    logger.info("New package version: %s", version)
    return version


def record_changelog_entry(source_dir: Path, version: str, settings: Settings) -> None:
    """Add a changelog entry for the new version with dch.

    Raises:
        CommandError: If dch fails.
    """
    run_command(
        [
            "dch",
            "--newversion",
            version,
            "--distribution",
            settings.changelog_distribution,
            "--force-distribution",
            "--force-bad-version",
            settings.changelog_message,
        ],
        cwd=source_dir,
        env_override={
            "DEBFULLNAME": settings.maintainer_name,
            "DEBEMAIL": settings.maintainer_email,
            "EDITOR": "true",
            "VISUAL": "true",
        },
    )
    logger.info("Recorded version %s in debian/changelog", version)


__all__ = [
    "BUILD_TAG_FORMAT",
    "DEFAULT_VERSION",
    "compare_versions",
    "compose_package_version",
    "compute_new_version",
    "make_build_tag",
    "parse_version_string",
    "read_changelog_version",
    "read_marker_version",
    "reconcile_versions",
    "record_changelog_entry",
]
