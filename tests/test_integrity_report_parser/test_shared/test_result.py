"""Tests for result value objects, diagnostics and errors."""

import pytest

from integrity_report_parser.shared.result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    IngestionError,
    IngestionMetrics,
    NoReportsFoundError,
    OrchestrationError,
    SummaryCounts,
)


class TestDiagnosticEntry:
    """Test the DiagnosticEntry class."""

    def test_format(self):
        """Test single line rendering."""
        entry = DiagnosticEntry(DiagnosticSeverity.WARNING, "file is empty", "ingestor")

        assert entry.format() == "[WARNING] ingestor: file is empty"

    def test_error_severities(self):
        """Test that only ERROR and CRITICAL count as errors."""
        assert DiagnosticEntry(DiagnosticSeverity.ERROR, "m", "c").is_error
        assert DiagnosticEntry(DiagnosticSeverity.CRITICAL, "m", "c").is_error
        assert not DiagnosticEntry(DiagnosticSeverity.WARNING, "m", "c").is_error

    def test_empty_message_rejected(self):
        """Test that an empty message raises ValueError."""
        with pytest.raises(ValueError, match="Diagnostic message cannot be empty"):
            DiagnosticEntry(DiagnosticSeverity.INFO, "", "ingestor")

    def test_empty_component_rejected(self):
        """Test that an empty component raises ValueError."""
        with pytest.raises(ValueError, match="Diagnostic component cannot be empty"):
            DiagnosticEntry(DiagnosticSeverity.INFO, "message", "")


class TestSummaryCounts:
    """Test the SummaryCounts class."""

    def test_empty_counts(self):
        """Test that the empty summary is all zeros without a name."""
        counts = SummaryCounts.empty()

        assert counts.total_count == 0
        assert counts.exception_count == 0
        assert counts.test_name is None

    def test_derived_totals(self):
        """Test total and exception counts."""
        counts = SummaryCounts(
            success_count=5, failure_count=2, test_exception_count=1, call_exception_count=3
        )

        assert counts.total_count == 8
        assert counts.exception_count == 4

    def test_negative_count_rejected(self):
        """Test that negative counts are rejected."""
        with pytest.raises(ValueError, match="failure_count must be >= 0"):
            SummaryCounts(failure_count=-1)


class TestIngestionMetrics:
    """Test the IngestionMetrics class."""

    def test_rates(self):
        """Test derived throughput figures."""
        metrics = IngestionMetrics(processing_time_ms=500.0, files_processed=4, files_failed=1)

        assert metrics.files_per_second == 8.0
        assert metrics.failure_rate == 0.25

    def test_rates_without_work(self):
        """Test that empty batches do not divide by zero."""
        metrics = IngestionMetrics()

        assert metrics.files_per_second == 0.0
        assert metrics.failure_rate == 0.0


class TestErrors:
    """Test the ingestion exception hierarchy."""

    def test_hierarchy(self):
        """Test that batch level errors share a base class."""
        assert issubclass(OrchestrationError, IngestionError)
        assert issubclass(NoReportsFoundError, IngestionError)
