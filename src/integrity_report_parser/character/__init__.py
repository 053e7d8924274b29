"""Byte-level processing layer for Integrity reports.

This module provides content sniffing, location of the embedded XML data, the
logical byte stream handed to the parser, and the bracket escaping filter that
makes the XML island of HTML reports well-formed.
"""

from .filtering import (
    EOF,
    BracketEscapingFilter,
    escape_attribute_brackets,
)
from .stream import (
    ConcatenatedByteStream,
    RawReport,
)
from .window import (
    ContentKind,
    ParseWindow,
    sniff_content_kind,
)

__all__ = [
    "EOF",
    "BracketEscapingFilter",
    "escape_attribute_brackets",
    "ConcatenatedByteStream",
    "RawReport",
    "ContentKind",
    "ParseWindow",
    "sniff_content_kind",
]
