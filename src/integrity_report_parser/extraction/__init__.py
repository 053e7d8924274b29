"""Streaming extraction layer for Integrity reports.

This module turns a report byte stream into structural parse events and picks
the summary counts out of them, stopping the parse as soon as they are known.
"""

from .events import (
    EnterElement,
    ExitElement,
    ParseEvent,
    iter_parse_events,
    qualified_name,
)
from .summary import (
    ExtractionResult,
    SummaryExtractor,
)

__all__ = [
    "EnterElement",
    "ExitElement",
    "ParseEvent",
    "iter_parse_events",
    "qualified_name",
    "ExtractionResult",
    "SummaryExtractor",
]
