"""Result tree layer for Integrity report ingestion.

This module provides the per-file ReportRecord and the ResultAggregate that
orders a batch of records and derives its totals, status and health.
"""

from .aggregate import (
    HealthReport,
    ReportRecord,
    ResultAggregate,
    ResultStatus,
    describe_counts,
)

__all__ = [
    "HealthReport",
    "ReportRecord",
    "ResultAggregate",
    "ResultStatus",
    "describe_counts",
]
