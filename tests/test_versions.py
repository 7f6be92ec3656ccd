"""Tests for versions.py module.

Tests version parsing, Debian-ordered reconciliation, and changelog
recording with mocked dch.
"""

from datetime import datetime, timezone

import pytest

from gapsdeb.versions import (
    DEFAULT_VERSION,
    compare_versions,
    compose_package_version,
    compute_new_version,
    make_build_tag,
    parse_version_string,
    read_changelog_version,
    read_marker_version,
    reconcile_versions,
    record_changelog_entry,
)


class TestMakeBuildTag:
    """Tests for make_build_tag function."""

    def test_fixed_timestamp(self):
        """Should format the timestamp as YYYYMMDDHHMMSS."""
        now = datetime(2024, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
        assert make_build_tag(now) == "20240101000000"

    def test_default_is_numeric(self):
        """Should produce a 14-digit tag by default."""
        tag = make_build_tag()
        assert len(tag) == 14
        assert tag.isdigit()


class TestParseVersionString:
    """Tests for parse_version_string function."""

    def test_plain_version(self):
        assert parse_version_string("4.18.2") == "4.18.2"

    def test_marker_with_suffix(self):
        """Should take the leading dotted numeric token."""
        assert parse_version_string('4.18.2 (2020-07-26, branch "gaps")') == "4.18.2"

    def test_leading_v_and_whitespace(self):
        assert parse_version_string("  v4.19\n") == "4.19"

    def test_unparseable(self):
        assert parse_version_string("unknown") is None
        assert parse_version_string("") is None
        assert parse_version_string(None) is None


class TestReadChangelogVersion:
    """Tests for read_changelog_version function."""

    def test_reads_upstream_version(self, source_tree):
        """Should return the upstream part of the newest entry."""
        assert read_changelog_version(source_tree / "debian" / "changelog") == "4.18.1"

    def test_strips_epoch_and_revision(self, tmp_path):
        """Should ignore epoch and Debian revision."""
        changelog = tmp_path / "changelog"
        changelog.write_text(
            "i3-wm (1:4.20.1-2) unstable; urgency=medium\n"
            "\n"
            "  * Rebuild.\n"
            "\n"
            " -- Test Maintainer <test@example.com>  Mon, 06 Jan 2020 10:00:00 +0100\n"
        )
        assert read_changelog_version(changelog) == "4.20.1"

    def test_keeps_upstream_suffix(self, tmp_path):
        """Should keep suffixes that order after the bare release."""
        changelog = tmp_path / "changelog"
        changelog.write_text(
            "i3-wm (4.18.2+git20200801-1) unstable; urgency=medium\n"
            "\n"
            "  * Snapshot.\n"
            "\n"
            " -- Test Maintainer <test@example.com>  Mon, 03 Aug 2020 10:00:00 +0100\n"
        )
        version = read_changelog_version(changelog)
        assert version == "4.18.2+git20200801"
        assert reconcile_versions(version, "4.18.2") == version

    def test_missing_file(self, tmp_path):
        """Should return None when there is no changelog."""
        assert read_changelog_version(tmp_path / "changelog") is None


class TestReadMarkerVersion:
    """Tests for read_marker_version function."""

    def test_reads_marker(self, source_tree, settings):
        assert read_marker_version(source_tree / settings.version_file) == "4.18.2"

    def test_missing_marker(self, tmp_path):
        assert read_marker_version(tmp_path / "I3_VERSION") is None

    def test_garbage_marker(self, tmp_path):
        """Should treat an unparseable marker as absent."""
        marker = tmp_path / "I3_VERSION"
        marker.write_text("not a version\n")
        assert read_marker_version(marker) is None


class TestReconcileVersions:
    """Tests for compare_versions and reconcile_versions."""

    def test_numeric_not_lexicographic(self):
        """4.9.0 is newer than 4.8.12 under Debian ordering."""
        assert compare_versions("4.9.0", "4.8.12") > 0
        assert compare_versions("4.8.12", "4.9.0") < 0
        assert compare_versions("4.18.2", "4.18.2") == 0

    @pytest.mark.parametrize(
        ("changelog", "marker", "expected"),
        [
            ("4.8.12", "4.9.0", "4.9.0"),
            ("4.9.0", "4.8.12", "4.9.0"),
            ("4.18.1", "4.18.2", "4.18.2"),
            ("4.10", "4.9.9", "4.10"),
        ],
    )
    def test_picks_greater(self, changelog, marker, expected):
        assert reconcile_versions(changelog, marker) == expected

    def test_one_missing(self):
        """Should use the available version when the other is absent."""
        assert reconcile_versions(None, "4.18.2") == "4.18.2"
        assert reconcile_versions("4.18.1", None) == "4.18.1"

    def test_both_missing(self):
        """Should fall back to 0.0.0 when both are absent."""
        assert reconcile_versions(None, None) == DEFAULT_VERSION == "0.0.0"


class TestComputeNewVersion:
    """Tests for compose_package_version and compute_new_version."""

    def test_compose(self):
        assert (
            compose_package_version("4.18.2", "1~gaps", "20240101000000")
            == "4.18.2-1~gaps20240101000000"
        )

    def test_uses_greater_source(self, source_tree, settings):
        """Marker 4.18.2 beats changelog 4.18.1."""
        version = compute_new_version(source_tree, settings, "20240101000000")
        assert version == "4.18.2-1~gaps20240101000000"

    def test_empty_tree(self, tmp_path, settings):
        """Should fall back to 0.0.0 without any version source."""
        version = compute_new_version(tmp_path, settings, "20240101000000")
        assert version == "0.0.0-1~gaps20240101000000"


class TestRecordChangelogEntry:
    """Tests for record_changelog_entry with mocked dch."""

    def test_runs_dch(self, source_tree, settings, fake_subprocess):
        """Should call dch with the new version and fixed authorship."""
        record_changelog_entry(source_tree, "4.18.2-1~gaps20240101000000", settings)

        assert len(fake_subprocess.calls) == 1
        argv, kwargs = fake_subprocess.calls[0]
        assert argv[0] == "dch"
        assert argv[argv.index("--newversion") + 1] == "4.18.2-1~gaps20240101000000"
        assert argv[-1] == settings.changelog_message
        assert kwargs["cwd"] == source_tree
        assert kwargs["env"]["DEBFULLNAME"] == settings.maintainer_name
        assert kwargs["env"]["DEBEMAIL"] == settings.maintainer_email
        assert kwargs["env"]["EDITOR"] == "true"

    def test_dch_failure(self, source_tree, settings, fake_subprocess):
        """Should raise CommandError when dch fails."""
        from gapsdeb.errors import CommandError

        fake_subprocess.on(["dch"], returncode=1, stderr="dch: fatal")
        with pytest.raises(CommandError):
            record_changelog_entry(source_tree, "4.18.2-1", settings)
