"""Content sniffing and location of the parseable XML inside a report buffer.

Integrity writes its results either as plain XML or as an HTML page that
embeds the XML data in an ``xmldata`` element. For HTML pages only the
DOCTYPE declaration and the XML island are handed to the parser; the HTML in
between is cut away.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

# Fewer bytes than this are not enough to tell XML from HTML
SNIFF_LENGTH = 10

XML_DECLARATION_PREFIX = b"<?xml"
DOCTYPE_PREFIX = b"<!DOCTYPE "
XML_DATA_MARKER = b"<xmldata "
DOCTYPE_END = b">"


class ContentKind(Enum):
    """Kind of a report file, determined from its first bytes."""

    XML = "text/xml;charset=UTF-8"
    HTML = "text/html;charset=UTF-8"

    @property
    def content_type(self) -> str:
        """MIME content type recorded for archived reports of this kind."""
        return self.value


def sniff_content_kind(buffer: bytes) -> ContentKind:
    """Determine whether ``buffer`` holds plain XML or an HTML page.

    Buffers too short to sniff are treated as HTML.
    """
    if len(buffer) >= SNIFF_LENGTH and buffer.startswith(XML_DECLARATION_PREFIX):
        return ContentKind.XML
    return ContentKind.HTML


@dataclass(frozen=True)
class ParseWindow:
    """Byte ranges of a report buffer that form the parser input.

    Attributes:
        doctype_end: Offset just past the DOCTYPE declaration, 0 if there is none
        xml_start: Offset where the XML data begins
    """

    doctype_end: int = 0
    xml_start: int = 0

    def __post_init__(self) -> None:
        """Validate offsets."""
        if self.doctype_end < 0 or self.xml_start < 0:
            raise ValueError("ParseWindow offsets must be >= 0")
        if self.xml_start < self.doctype_end:
            raise ValueError("xml_start cannot precede doctype_end")

    @classmethod
    def locate(cls, buffer: bytes, kind: ContentKind) -> "ParseWindow":
        """Locate the DOCTYPE preamble and the embedded XML data.

        Plain XML is parsed from its first byte. For HTML, the DOCTYPE end is
        the first ``>`` after a leading ``<!DOCTYPE `` and the XML start is the
        first ``<xmldata `` at or after it. Without that marker the parser is
        given everything from the DOCTYPE end on.
        """
        if kind is ContentKind.XML or len(buffer) < SNIFF_LENGTH:
            return cls()

        doctype_end = 0
        if buffer.startswith(DOCTYPE_PREFIX):
            close = buffer.find(DOCTYPE_END, len(DOCTYPE_PREFIX))
            doctype_end = len(buffer) if close < 0 else close + 1

        xml_start = buffer.find(XML_DATA_MARKER, doctype_end)
        if xml_start < 0:
            xml_start = doctype_end

        return cls(doctype_end=doctype_end, xml_start=xml_start)

    @property
    def has_doctype(self) -> bool:
        """Whether a DOCTYPE preamble precedes the XML data."""
        return self.doctype_end > 0

    def segments(self, buffer: bytes) -> Tuple[memoryview, ...]:
        """Zero-copy slices of ``buffer`` to concatenate for parsing."""
        view = memoryview(buffer)
        if self.has_doctype and self.xml_start < len(buffer):
            return (view[:self.doctype_end], view[self.xml_start:])
        return (view[self.xml_start:],)
