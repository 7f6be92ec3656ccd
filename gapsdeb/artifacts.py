"""Artifact discovery, installation and cleanup.

This module handles:
- Locating the packages produced by a run via its build tag
- Computing checksums and writing a run manifest
- Installing the packages with a single apt-get call
- Deleting every file tagged with the run's build tag
"""

from __future__ import annotations

import glob
import hashlib
import json
import logging
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from gapsdeb.commands import run_command
from gapsdeb.config import Settings
from gapsdeb.types import ArtifactInfo

logger = logging.getLogger(__name__)

DEBUG_PATTERNS = ["-dbgsym_", "-dbg_"]
METADATA_SUFFIXES = [".changes", ".buildinfo"]

# Default chunk size for hashing
HASH_CHUNK_SIZE = 64 * 1024  # 64KB


def artifact_pattern(build_tag: str) -> str:
    """Return the glob matching package files of a run."""
    return f"*{glob.escape(build_tag)}*.deb"


def classify_artifact(filename: str) -> str:
    """Classify an artifact by its filename.

    Returns:
        Artifact kind (debug, metadata, binary).
    """
    filename_lower = filename.lower()

    if any(p in filename_lower for p in DEBUG_PATTERNS):
        return "debug"
    if any(filename_lower.endswith(s) for s in METADATA_SUFFIXES):
        return "metadata"
    return "binary"


def compute_file_hash(
    file_path: Path,
    chunk_size: int = HASH_CHUNK_SIZE,
) -> str:
    """Compute SHA-256 hash of a file."""
    sha256 = hashlib.sha256()
    with file_path.open("rb") as f:
        while chunk := f.read(chunk_size):
            sha256.update(chunk)
    return sha256.hexdigest()


def find_artifacts(directory: Path, build_tag: str) -> list[Path]:
    """Locate the packages built with a given tag.

    Args:
        directory: Directory dpkg-buildpackage wrote the packages to.
        build_tag: The run's build tag.

    Returns:
        Sorted list of package paths (possibly empty).
    """
    if not directory.is_dir():
        logger.warning("Artifact directory does not exist: %s", directory)
        return []

    artifacts = sorted(
        p for p in directory.glob(artifact_pattern(build_tag)) if p.is_file()
    )
    logger.info("Found %d package(s) for build %s", len(artifacts), build_tag)
    return artifacts


def describe_artifacts(paths: list[Path], root: Path) -> list[ArtifactInfo]:
    """Collect size, checksum and kind for each artifact."""
    infos: list[ArtifactInfo] = []
    for path in paths:
        try:
            relative_path = path.relative_to(root).as_posix()
        except ValueError:
            relative_path = path.name

        kind = classify_artifact(path.name)
        info = ArtifactInfo(
            filename=path.name,
            relative_path=relative_path,
            size_bytes=path.stat().st_size,
            sha256=compute_file_hash(path),
            kind=kind,
        )
        if kind == "binary":
            info.labels.append("installable")
        infos.append(info)
        logger.debug(
            "Artifact: %s (kind=%s, size=%d)", path.name, kind, info.size_bytes
        )
    return infos


def generate_manifest(
    artifacts: list[ArtifactInfo],
    build_tag: str,
    version: str | None = None,
    branch: str | None = None,
) -> dict[str, Any]:
    """Generate the manifest of a run.

    Returns:
        Manifest dictionary suitable for JSON serialization.
    """
    now = datetime.now(timezone.utc)

    manifest: dict[str, Any] = {
        "version": "1.0",
        "generated_at": now.isoformat(),
        "build_tag": build_tag,
        "artifacts": [asdict(a) for a in artifacts],
    }
    if version:
        manifest["package_version"] = version
    if branch:
        manifest["branch"] = branch

    manifest["summary"] = {
        "total_artifacts": len(artifacts),
        "total_size_bytes": sum(a.size_bytes for a in artifacts),
    }
    return manifest


def manifest_path(directory: Path, build_tag: str) -> Path:
    """Return the manifest path of a run."""
    return directory / f"gapsdeb-{build_tag}.json"


def write_manifest(manifest: dict[str, Any], output_path: Path) -> Path:
    """Write manifest to a JSON file."""
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with output_path.open("w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2, sort_keys=True)

    logger.info("Wrote manifest to %s", output_path)
    return output_path


def install_artifacts(paths: list[Path], settings: Settings) -> None:
    """Install all packages in one apt-get call.

    Raises:
        CommandError: If apt-get fails.
    """
    if not paths:
        logger.info("No packages to install")
        return

    # Absolute paths make apt-get treat the arguments as local files
    files = [str(p.resolve()) for p in paths]
    logger.info("Installing %d package(s)", len(files))
    run_command(
        settings.privileged(["apt-get", "install", "-y", *files]),
        capture=False,
    )


def find_tagged_files(directory: Path, build_tag: str) -> list[Path]:
    """Return every regular file in directory whose name contains the tag."""
    if not directory.is_dir():
        return []
    return sorted(
        p for p in directory.iterdir() if p.is_file() and build_tag in p.name
    )


def cleanup_tagged_files(directory: Path, build_tag: str) -> list[Path]:
    """Delete every file produced by a run.

    Returns:
        The deleted paths.
    """
    removed: list[Path] = []
    for path in find_tagged_files(directory, build_tag):
        path.unlink()
        removed.append(path)
        logger.debug("Removed %s", path)
    logger.info("Removed %d file(s) for build %s", len(removed), build_tag)
    return removed


__all__ = [
    "DEBUG_PATTERNS",
    "HASH_CHUNK_SIZE",
    "METADATA_SUFFIXES",
    "artifact_pattern",
    "classify_artifact",
    "cleanup_tagged_files",
    "compute_file_hash",
    "describe_artifacts",
    "find_artifacts",
    "find_tagged_files",
    "generate_manifest",
    "install_artifacts",
    "manifest_path",
    "write_manifest",
]
