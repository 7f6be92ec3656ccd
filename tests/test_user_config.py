"""Tests for user_config.py module."""

import os

import pytest

from gapsdeb.prompts import ScriptedDecisionProvider
from gapsdeb.user_config import (
    GAPS_CONFIG_SNIPPET,
    append_snippet,
    offer_user_config,
    writable_config_paths,
)


@pytest.fixture
def config_files(tmp_path):
    """Create one existing i3 config and reference one missing."""
    existing = tmp_path / ".config" / "i3" / "config"
    existing.parent.mkdir(parents=True)
    existing.write_text("set $mod Mod4\n")
    missing = tmp_path / ".i3" / "config"
    return [existing, missing]


class TestSnippet:
    def test_contains_gaps_settings(self):
        assert "gaps inner" in GAPS_CONFIG_SNIPPET
        assert "smart_gaps on" in GAPS_CONFIG_SNIPPET


class TestWritableConfigPaths:
    """Tests for writable_config_paths function."""

    def test_skips_missing(self, config_files):
        assert writable_config_paths(config_files) == [config_files[0]]

    @pytest.mark.skipif(os.geteuid() == 0, reason="root can write read-only files")
    def test_skips_read_only(self, config_files):
        config_files[0].chmod(0o444)
        assert writable_config_paths(config_files) == []


class TestAppend:
    """Tests for append_snippet and offer_user_config."""

    def test_append_snippet(self, config_files):
        append_snippet(config_files[0])
        content = config_files[0].read_text()
        assert content.startswith("set $mod Mod4\n")
        assert content.endswith(GAPS_CONFIG_SNIPPET)

    def test_offer_declined_by_default(self, config_files):
        decider = ScriptedDecisionProvider()
        assert offer_user_config(config_files, decider) == []
        assert decider.asked == ["append-user-config"]
        assert config_files[0].read_text() == "set $mod Mod4\n"

    def test_offer_accepted(self, config_files):
        decider = ScriptedDecisionProvider({"append-user-config": True})
        assert offer_user_config(config_files, decider) == [config_files[0]]
        assert "gaps inner" in config_files[0].read_text()
