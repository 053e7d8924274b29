"""Tests for report file discovery."""

import os
import time
from datetime import datetime, timedelta

import pytest

from integrity_report_parser.api.discovery import collect_report_files
from integrity_report_parser.shared import IngestionConfig, NoReportsFoundError

HOUR = 3600


@pytest.fixture
def report_tree(tmp_path):
    """Directory with two fresh reports, one stale report and a decoy directory."""
    (tmp_path / "unit").mkdir()
    (tmp_path / "web").mkdir()
    (tmp_path / "decoy.xml").mkdir()
    fresh_xml = tmp_path / "unit" / "result.xml"
    fresh_html = tmp_path / "web" / "result.html"
    stale_xml = tmp_path / "old.xml"
    for path in (fresh_xml, fresh_html, stale_xml):
        path.write_bytes(b"<?xml version='1.0'?><suite/>")
    old = time.time() - 2 * HOUR
    os.utime(stale_xml, (old, old))
    return tmp_path


class TestCollectReportFiles:
    """Test suite for collect_report_files."""

    def test_recursive_pattern(self, report_tree):
        """Test that ** patterns find nested files and skip directories."""
        # Act
        paths = collect_report_files(report_tree, "**/*.xml", config=IngestionConfig())

        # Assert
        assert paths == sorted([report_tree / "old.xml", report_tree / "unit" / "result.xml"])

    def test_multiple_patterns(self, report_tree):
        """Test comma separated patterns without duplicates."""
        paths = collect_report_files(
            report_tree, "unit/*.xml, **/*.html, **/result.*", config=IngestionConfig()
        )

        assert paths == sorted([
            report_tree / "unit" / "result.xml",
            report_tree / "web" / "result.html",
        ])

    def test_stale_files_skipped(self, report_tree):
        """Test that files older than the build are ignored."""
        paths = collect_report_files(
            report_tree, "**/*.xml", built_after=time.time() - HOUR, config=IngestionConfig()
        )

        assert paths == [report_tree / "unit" / "result.xml"]

    def test_datetime_threshold(self, report_tree):
        """Test that the threshold may be given as a datetime."""
        built_after = datetime.now() - timedelta(hours=1)

        paths = collect_report_files(
            report_tree, "*.xml", built_after=built_after, allow_empty=True,
            config=IngestionConfig(),
        )

        assert paths == []

    def test_ignore_timestamps(self, report_tree):
        """Test that stale files are accepted when timestamps are ignored."""
        config = IngestionConfig().override(discovery__ignore_timestamps=True)

        paths = collect_report_files(
            report_tree, "*.xml", built_after=time.time(), config=config
        )

        assert paths == [report_tree / "old.xml"]

    def test_only_stale_files(self, report_tree):
        """Test the error raised when every match is stale."""
        with pytest.raises(NoReportsFoundError, match="none of them are new"):
            collect_report_files(
                report_tree, "*.xml", built_after=time.time() - HOUR, config=IngestionConfig()
            )

    def test_no_matches(self, report_tree):
        """Test the error raised when nothing matches."""
        with pytest.raises(NoReportsFoundError, match="No Integrity result files matching"):
            collect_report_files(report_tree, "*.json", config=IngestionConfig())

    def test_no_matches_allowed(self, report_tree):
        """Test that an empty result can be accepted."""
        assert collect_report_files(
            report_tree, "*.json", allow_empty=True, config=IngestionConfig()
        ) == []

    def test_blank_pattern(self, report_tree):
        """Test that at least one pattern is required."""
        with pytest.raises(ValueError, match="At least one report file pattern is required"):
            collect_report_files(report_tree, " , ", config=IngestionConfig())
