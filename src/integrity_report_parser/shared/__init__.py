"""Shared utilities for Integrity report ingestion.

This module provides shared data structures, configuration objects, result types,
and logging helpers used across all processing layers.
"""

from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    IngestionError,
    IngestionMetrics,
    NoReportsFoundError,
    OrchestrationError,
    SummaryCounts,
)
from .config import (
    ConcurrencyConfig,
    ConfigError,
    ConfigValidationError,
    DiscoveryConfig,
    IngestionConfig,
    StreamingParserConfig,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)

__all__ = [
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "IngestionError",
    "IngestionMetrics",
    "NoReportsFoundError",
    "OrchestrationError",
    "SummaryCounts",
    "ConcurrencyConfig",
    "ConfigError",
    "ConfigValidationError",
    "DiscoveryConfig",
    "IngestionConfig",
    "StreamingParserConfig",
    "CorrelationLogger",
    "get_logger",
]
