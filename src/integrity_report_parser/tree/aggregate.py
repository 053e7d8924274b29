"""Result tree for a batch of ingested Integrity reports.

Each parsed file becomes an immutable ReportRecord. A ResultAggregate owns the
records of one batch, keeps them ordered by test name and derives the batch
totals from them.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from integrity_report_parser.shared.result import (
    DiagnosticEntry,
    IngestionMetrics,
    SummaryCounts,
)

DEFAULT_DISPLAY_NAME = "Integrity Test Results"
IDENTIFIER_SEPARATOR = "/"
NO_RESULTS_DESCRIPTION = "No test results"


class ResultStatus(Enum):
    """Overall outcome of a report or a batch."""

    SUCCESS = "success"
    EXCEPTION = "exception"
    FAILURE = "failure"

    @classmethod
    def from_counts(cls, counts: SummaryCounts) -> "ResultStatus":
        """Failures dominate exceptions, which dominate success."""
        if counts.failure_count > 0:
            return cls.FAILURE
        if counts.exception_count > 0:
            return cls.EXCEPTION
        return cls.SUCCESS


@dataclass(frozen=True)
class HealthReport:
    """Health score (0-100) and description of a set of test results."""

    score: int
    description: str

    @classmethod
    def from_counts(cls, counts: SummaryCounts) -> "HealthReport":
        """Score the share of tests that neither failed nor raised exceptions."""
        total = counts.total_count
        if total == 0:
            return cls(100, NO_RESULTS_DESCRIPTION)
        unhealthy = counts.failure_count + counts.test_exception_count
        return cls(int(100 * (1.0 - unhealthy / total)), describe_counts(counts))


def describe_counts(counts: SummaryCounts) -> str:
    """One-line human readable summary of ``counts``."""
    if counts.total_count == 0 and counts.call_exception_count == 0:
        return NO_RESULTS_DESCRIPTION
    return (
        f"{counts.success_count} successful tests, "
        f"{counts.failure_count} failures, "
        f"{counts.test_exception_count} test exceptions, "
        f"{counts.call_exception_count} call exceptions"
    )


@dataclass(frozen=True)
class ReportRecord:
    """Parse outcome of a single report file.

    Attributes:
        identifier: File name, made unique within its batch
        test_name: Name of the test run, if the report declared one
        raw_content: Unmodified file content, kept for archival
        content_type: MIME type of ``raw_content``
        counts: Execution totals read from the report
        source_path: Where the report was read from
        diagnostics: Problems encountered while reading or parsing the file
    """

    identifier: str
    test_name: Optional[str]
    raw_content: bytes = field(repr=False)
    content_type: str
    counts: SummaryCounts = field(default_factory=SummaryCounts.empty)
    source_path: Optional[Path] = None
    diagnostics: Tuple[DiagnosticEntry, ...] = ()

    @property
    def success_count(self) -> int:
        return self.counts.success_count

    @property
    def failure_count(self) -> int:
        return self.counts.failure_count

    @property
    def test_exception_count(self) -> int:
        return self.counts.test_exception_count

    @property
    def call_exception_count(self) -> int:
        return self.counts.call_exception_count

    @property
    def exception_count(self) -> int:
        return self.counts.exception_count

    @property
    def total_count(self) -> int:
        return self.counts.total_count

    @property
    def display_name(self) -> str:
        """Test name if known, otherwise the identifier."""
        return self.test_name or self.identifier

    @property
    def sort_key(self) -> Tuple[str, str]:
        return ((self.test_name or "").casefold(), self.identifier)

    @property
    def status(self) -> ResultStatus:
        return ResultStatus.from_counts(self.counts)

    @property
    def has_errors(self) -> bool:
        """Whether reading or parsing this report failed."""
        return any(entry.is_error for entry in self.diagnostics)

    def qualified_identifier(self, parent_identifier: str = "") -> str:
        """Identifier prefixed with the owning aggregate's identifier."""
        if parent_identifier:
            return f"{parent_identifier}{IDENTIFIER_SEPARATOR}{self.identifier}"
        return self.identifier

    def to_dict(self) -> Dict[str, Any]:
        """Plain representation without the raw content."""
        return {
            "identifier": self.identifier,
            "test_name": self.test_name,
            "content_type": self.content_type,
            "source_path": str(self.source_path) if self.source_path else None,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "test_exception_count": self.test_exception_count,
            "call_exception_count": self.call_exception_count,
            "status": self.status.value,
            "diagnostics": [entry.format() for entry in self.diagnostics],
        }


class ResultAggregate:
    """Ordered collection of ReportRecords with derived totals.

    Insertion is thread-safe. Totals are derived from the children and are
    recomputed before they are read whenever the children changed.

    Args:
        identifier: Identifier of the aggregate itself, used as prefix when
            looking up children
        display_name: Human readable name of the batch
    """

    def __init__(
        self, identifier: str = "", display_name: str = DEFAULT_DISPLAY_NAME
    ) -> None:
        self.identifier = identifier
        self.display_name = display_name
        self.metrics: Optional[IngestionMetrics] = None
        self._lock = threading.Lock()
        self._children: List[ReportRecord] = []
        self._totals = SummaryCounts.empty()
        self._totals_stale = False

    # Structure

    def add_child(self, record: ReportRecord) -> None:
        """Append ``record`` and restore the ordering."""
        with self._lock:
            self._children.append(record)
            self._sort_locked()
            self._totals_stale = True

    def append_child(self, record: ReportRecord) -> None:
        """Append ``record`` without sorting; call ``finalize`` afterwards."""
        with self._lock:
            self._children.append(record)
            self._totals_stale = True

    def remove_child(self, identifier: str) -> bool:
        """Remove the child with ``identifier``; return whether one was found."""
        with self._lock:
            for index, record in enumerate(self._children):
                if record.identifier == identifier:
                    del self._children[index]
                    self._totals_stale = True
                    return True
        return False

    def finalize(self) -> None:
        """Sort the children once and recompute the totals."""
        with self._lock:
            self._sort_locked()
            self._recompute_locked()

    def recompute_totals(self) -> SummaryCounts:
        """Sum every count field over all children."""
        with self._lock:
            return self._recompute_locked()

    @property
    def children(self) -> Tuple[ReportRecord, ...]:
        with self._lock:
            return tuple(self._children)

    def has_children(self) -> bool:
        return len(self) > 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._children)

    def __iter__(self) -> Iterator[ReportRecord]:
        return iter(self.children)

    # Lookup

    def find(
        self, identifier: Optional[str]
    ) -> Optional[Union["ResultAggregate", ReportRecord]]:
        """Find the aggregate itself or one of its children by identifier.

        Children are matched by their identifier qualified with this
        aggregate's identifier, so both ``"a.html"`` and ``"<id>/a.html"``
        style lookups resolve. Returns ``None`` if nothing matches.
        """
        if identifier is None or identifier == self.identifier:
            return self
        if self.identifier and not identifier.startswith(self.identifier + IDENTIFIER_SEPARATOR):
            query = f"{self.identifier}{IDENTIFIER_SEPARATOR}{identifier}"
        else:
            query = identifier
        for record in self.children:
            if record.qualified_identifier(self.identifier) == query:
                return record
        return None

    # Totals

    @property
    def totals(self) -> SummaryCounts:
        with self._lock:
            if self._totals_stale:
                self._recompute_locked()
            return self._totals

    @property
    def success_count(self) -> int:
        return self.totals.success_count

    @property
    def failure_count(self) -> int:
        return self.totals.failure_count

    @property
    def test_exception_count(self) -> int:
        return self.totals.test_exception_count

    @property
    def call_exception_count(self) -> int:
        return self.totals.call_exception_count

    @property
    def exception_count(self) -> int:
        return self.totals.exception_count

    @property
    def total_count(self) -> int:
        return self.totals.total_count

    @property
    def status(self) -> ResultStatus:
        return ResultStatus.from_counts(self.totals)

    def health(self) -> HealthReport:
        return HealthReport.from_counts(self.totals)

    def summary(self) -> str:
        return describe_counts(self.totals)

    def to_dict(self) -> Dict[str, Any]:
        """Plain representation of the batch and its children."""
        totals = self.totals
        return {
            "identifier": self.identifier,
            "display_name": self.display_name,
            "success_count": totals.success_count,
            "failure_count": totals.failure_count,
            "test_exception_count": totals.test_exception_count,
            "call_exception_count": totals.call_exception_count,
            "status": self.status.value,
            "children": [record.to_dict() for record in self.children],
        }

    def _sort_locked(self) -> None:
        self._children.sort(key=lambda record: record.sort_key)

    def _recompute_locked(self) -> SummaryCounts:
        success = failure = test_exceptions = call_exceptions = 0
        for record in self._children:
            success += record.success_count
            failure += record.failure_count
            test_exceptions += record.test_exception_count
            call_exceptions += record.call_exception_count
        self._totals = SummaryCounts(
            success_count=success,
            failure_count=failure,
            test_exception_count=test_exceptions,
            call_exception_count=call_exceptions,
        )
        self._totals_stale = False
        return self._totals
