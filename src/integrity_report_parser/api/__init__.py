"""Public ingestion API for Integrity reports.

Progressive API disclosure:
- Level 1: Simple functions - parse_report(), parse_reports()
- Level 2: Configured components - ReportIngestor, ParallelIngestionOrchestrator
- Level 3: Report discovery - collect_report_files()
"""

from typing import Optional, Sequence

from integrity_report_parser.character.stream import PathLike
from integrity_report_parser.shared import IngestionConfig
from integrity_report_parser.tree import ReportRecord, ResultAggregate

from .discovery import collect_report_files
from .ingestor import DiagnosticListener, ReportIngestor, open_parse_stream
from .orchestrator import (
    ParallelIngestionOrchestrator,
    assign_identifiers,
    available_parallelism,
)


def parse_report(
    path: PathLike,
    config: Optional[IngestionConfig] = None,
    listener: Optional[DiagnosticListener] = None,
) -> ReportRecord:
    """Parse a single Integrity report file.

    Examples:
        >>> record = parse_report("results/integrity.xml")
        >>> record.success_count, record.failure_count
        (3, 1)
    """
    return ReportIngestor(config, listener).ingest_file(path)


def parse_reports(
    paths: Sequence[PathLike],
    config: Optional[IngestionConfig] = None,
    listener: Optional[DiagnosticListener] = None,
) -> ResultAggregate:
    """Parse a batch of Integrity report files in parallel."""
    return ParallelIngestionOrchestrator(config, listener).ingest(paths)


__all__ = [
    "parse_report",
    "parse_reports",
    "collect_report_files",
    "DiagnosticListener",
    "ReportIngestor",
    "open_parse_stream",
    "ParallelIngestionOrchestrator",
    "assign_identifiers",
    "available_parallelism",
]
