"""Structural parse events produced from a report byte stream.

The events form a closed set: an element is either entered or exited. They
are produced lazily by feeding the stream into an ``lxml`` pull parser chunk
by chunk, so a consumer that stops iterating also stops reading input.
"""

from dataclasses import dataclass, field
from typing import BinaryIO, Iterator, Mapping, Optional, Union

from lxml import etree

from integrity_report_parser.shared.config import StreamingParserConfig

_PARSE_EVENTS = ("start", "end")


@dataclass(frozen=True)
class EnterElement:
    """An element start tag together with its attributes."""

    name: str
    attributes: Mapping[str, str] = field(default_factory=dict)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Look up an attribute value, ignoring the case of its name."""
        if name in self.attributes:
            return self.attributes[name]
        wanted = name.casefold()
        for key, value in self.attributes.items():
            if key.casefold() == wanted:
                return value
        return default

    def has(self, name: str) -> bool:
        """Whether the element carries attribute ``name`` (case-insensitive)."""
        return self.get(name) is not None


@dataclass(frozen=True)
class ExitElement:
    """An element end tag."""

    name: str


ParseEvent = Union[EnterElement, ExitElement]


def qualified_name(element: etree._Element) -> str:
    """Return ``prefix:local`` for namespaced elements, the plain tag otherwise."""
    tag = element.tag
    if not isinstance(tag, str) or not tag.startswith("{"):
        return tag
    local = etree.QName(tag).localname
    return f"{element.prefix}:{local}" if element.prefix else local


def _attribute_name(name: str) -> str:
    if name.startswith("{"):
        return etree.QName(name).localname
    return name


def iter_parse_events(
    stream: BinaryIO, config: Optional[StreamingParserConfig] = None
) -> Iterator[ParseEvent]:
    """Parse ``stream`` incrementally and yield its structural events.

    Args:
        stream: Binary stream holding an XML document
        config: Parser settings; DTD loading and entity resolution stay
            disabled unless explicitly enabled here

    Yields:
        EnterElement and ExitElement events in document order

    Raises:
        lxml.etree.XMLSyntaxError: If the document is not well-formed
    """
    config = config or StreamingParserConfig()
    parser = etree.XMLPullParser(events=_PARSE_EVENTS, **config.parser_options())

    while True:
        chunk = stream.read(config.read_chunk_size)
        if not chunk:
            break
        try:
            parser.feed(chunk)
        except etree.XMLSyntaxError:
            # events parsed before the error are still delivered
            yield from _drain(parser)
            raise
        yield from _drain(parser)

    try:
        parser.close()
    except etree.XMLSyntaxError:
        yield from _drain(parser)
        raise
    yield from _drain(parser)


def _drain(parser: etree.XMLPullParser) -> Iterator[ParseEvent]:
    for action, element in parser.read_events():
        if action == "start":
            yield EnterElement(
                qualified_name(element),
                {_attribute_name(key): value for key, value in element.attrib.items()},
            )
        else:
            yield ExitElement(qualified_name(element))
            element.clear(keep_tail=True)
