"""Tests for commands.py module."""

import os
import subprocess
from unittest.mock import patch

import pytest

from gapsdeb.commands import run_command
from gapsdeb.errors import COMMAND_NOT_FOUND, COMMAND_TIMEOUT, CommandError


class TestRunCommand:
    """Tests for run_command with mocked subprocess."""

    def test_success(self, tmp_path, fake_subprocess):
        fake_subprocess.on(["git", "--version"], stdout="git version 2.43.0\n")

        result = run_command(["git", "--version"], cwd=tmp_path)

        assert result.success
        assert result.argv == ("git", "--version")
        assert result.stdout.startswith("git version")
        assert result.cwd == str(tmp_path)

    def test_failure_raises(self, fake_subprocess):
        fake_subprocess.on(["false"], returncode=1, stderr="boom\n")

        with pytest.raises(CommandError) as exc_info:
            run_command(["false"])

        assert exc_info.value.result.exit_code == 1
        assert "boom" in exc_info.value.message

    def test_no_check(self, fake_subprocess):
        fake_subprocess.on(["false"], returncode=3)
        result = run_command(["false"], check=False)
        assert result.exit_code == 3
        assert not result.success

    def test_env_override_extends_environment(self, fake_subprocess):
        with patch.dict(os.environ, {"GAPSDEB_TEST_VAR": "kept"}):
            run_command(["env"], env_override={"DEBEMAIL": "a@b"})

        env = fake_subprocess.calls[0][1]["env"]
        assert env["DEBEMAIL"] == "a@b"
        assert env["GAPSDEB_TEST_VAR"] == "kept"

    def test_no_env_by_default(self, fake_subprocess):
        run_command(["true"])
        assert fake_subprocess.calls[0][1]["env"] is None

    def test_uncaptured(self, fake_subprocess):
        run_command(["apt-get", "install"], capture=False)
        assert fake_subprocess.calls[0][1]["capture_output"] is False

    def test_missing_executable(self):
        with patch("gapsdeb.commands.subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(CommandError) as exc_info:
                run_command(["no-such-tool"])
        assert exc_info.value.code == COMMAND_NOT_FOUND

    def test_timeout(self):
        error = subprocess.TimeoutExpired(cmd="git", timeout=5)
        with patch("gapsdeb.commands.subprocess.run", side_effect=error):
            with pytest.raises(CommandError) as exc_info:
                run_command(["git", "fetch"], timeout=5)
        assert exc_info.value.code == COMMAND_TIMEOUT
