"""Result objects, diagnostic types and errors for Integrity report ingestion.

This module defines the value objects that flow between the extraction,
ingestion and aggregation layers.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()      # Debug-level information
    INFO = auto()       # Informational messages
    WARNING = auto()    # Suspicious input that was still processed
    ERROR = auto()      # A report could not be (fully) parsed
    CRITICAL = auto()   # The batch itself is in trouble


@dataclass(frozen=True)
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    @property
    def is_error(self) -> bool:
        """Whether this entry describes a failure."""
        return self.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)

    def format(self) -> str:
        """Render the entry as a single diagnostic line."""
        return f"[{self.severity.name}] {self.component}: {self.message}"


@dataclass(frozen=True)
class SummaryCounts:
    """Execution totals read from the outer summary ``result`` element.

    Attributes:
        success_count: Number of successful tests
        failure_count: Number of failed tests
        test_exception_count: Number of exceptions raised in tests
        call_exception_count: Number of exceptions raised in calls
        test_name: Name of the test run, from the ``integrity`` element
    """

    success_count: int = 0
    failure_count: int = 0
    test_exception_count: int = 0
    call_exception_count: int = 0
    test_name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate that all counts are non-negative."""
        for name in (
            "success_count",
            "failure_count",
            "test_exception_count",
            "call_exception_count",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")

    @classmethod
    def empty(cls) -> "SummaryCounts":
        """Counts of a report whose summary could not be found."""
        return cls()

    @property
    def exception_count(self) -> int:
        """Test and call exceptions combined."""
        return self.test_exception_count + self.call_exception_count

    @property
    def total_count(self) -> int:
        """Number of executed tests (successes, failures and test exceptions)."""
        return self.success_count + self.failure_count + self.test_exception_count


@dataclass
class IngestionMetrics:
    """Performance metrics for one ingestion batch."""

    processing_time_ms: float = 0.0
    files_processed: int = 0
    files_failed: int = 0
    bytes_read: int = 0
    worker_count: int = 0

    @property
    def files_per_second(self) -> float:
        """Calculate files ingested per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.files_processed * 1000.0) / self.processing_time_ms

    @property
    def failure_rate(self) -> float:
        """Share of files whose summary could not be parsed."""
        if self.files_processed == 0:
            return 0.0
        return self.files_failed / self.files_processed


class IngestionError(Exception):
    """Base exception for report ingestion errors."""


class OrchestrationError(IngestionError):
    """Raised when the worker pool fails to drain; indicates a stuck task."""


class NoReportsFoundError(IngestionError):
    """Raised when report discovery yields no usable files."""
