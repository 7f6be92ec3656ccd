"""Shared fixtures for gapsdeb tests."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from gapsdeb.config import Settings

CHANGELOG_TEXT = """\
i3-wm (4.18.1-1) unstable; urgency=medium

  * New upstream release.

 -- Test Maintainer <test@example.com>  Mon, 06 Jan 2020 10:00:00 +0100
"""

RULES_TEXT = """\
#!/usr/bin/make -f

%:
\tdh $@
"""


class FakeSubprocess:
    """Stand-in for subprocess.run that records calls.

    Results are chosen by the most recently added rule whose argv prefix
    matches; unmatched commands succeed with empty output.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], dict]] = []
        self.rules: list[tuple[tuple[str, ...], int, str, str]] = []

    def on(
        self,
        prefix: list[str],
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.rules.append((tuple(prefix), returncode, stdout, stderr))

    def __call__(self, argv, **kwargs):
        argv = list(argv)
        self.calls.append((argv, kwargs))
        for prefix, returncode, stdout, stderr in reversed(self.rules):
            if tuple(argv[: len(prefix)]) == prefix:
                return subprocess.CompletedProcess(argv, returncode, stdout, stderr)
        return subprocess.CompletedProcess(argv, 0, "", "")

    @property
    def commands(self) -> list[list[str]]:
        return [argv for argv, _ in self.calls]


@pytest.fixture
def fake_subprocess():
    """Patch the command seam with a FakeSubprocess."""
    fake = FakeSubprocess()
    with patch("gapsdeb.commands.subprocess.run", side_effect=fake):
        yield fake


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings rooted in a temporary working directory."""
    return Settings(
        workdir=tmp_path,
        privilege_command="",
        user_config_paths=[],
    )


@pytest.fixture
def source_tree(settings: Settings) -> Path:
    """Create a minimal i3-gaps source tree with debian packaging."""
    source_dir = settings.source_dir
    (source_dir / "debian").mkdir(parents=True)
    (source_dir / "debian" / "changelog").write_text(CHANGELOG_TEXT)
    (source_dir / "debian" / "rules").write_text(RULES_TEXT)
    (source_dir / "debian" / "control").write_text("Source: i3-wm\n")
    (source_dir / settings.version_file).write_text(
        '4.18.2 (2020-07-26, branch "gaps")\n'
    )
    return source_dir
