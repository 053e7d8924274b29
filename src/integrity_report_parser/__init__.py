"""Integrity Report Parser.

Extracts the execution totals from Integrity test result files (plain XML or
HTML pages with an embedded XML island) without building a DOM, and ingests
whole batches of such files in parallel.

Progressive API Disclosure:
- Level 1: Simple functions - parse_report(), parse_reports()
- Level 2: Configured components - ReportIngestor, ParallelIngestionOrchestrator
- Level 3: Building blocks - BracketEscapingFilter, SummaryExtractor
"""

__version__ = "0.1.0"
__author__ = "Integrity Report Parser Team"

# Level 1: Simple functions
# Level 2: Configured components
from .api import (
    ParallelIngestionOrchestrator,
    ReportIngestor,
    collect_report_files,
    parse_report,
    parse_reports,
)

# Level 3: Building blocks
from .character import BracketEscapingFilter, ContentKind
from .extraction import SummaryExtractor

# Configuration and result objects
from .shared.config import IngestionConfig
from .shared.result import SummaryCounts
from .tree import ReportRecord, ResultAggregate, ResultStatus

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "parse_report",
    "parse_reports",

    # Level 2: Configured components
    "ReportIngestor",
    "ParallelIngestionOrchestrator",
    "collect_report_files",

    # Level 3: Building blocks
    "BracketEscapingFilter",
    "ContentKind",
    "SummaryExtractor",

    # Configuration and result objects
    "IngestionConfig",
    "SummaryCounts",
    "ReportRecord",
    "ResultAggregate",
    "ResultStatus",
]
