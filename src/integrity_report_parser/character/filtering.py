"""Bracket escaping filter for the XML island of HTML Integrity reports.

When Integrity renders its HTML result page, the XSLT processor emits raw
``<`` and ``>`` characters inside attribute values of the embedded ``xmldata``
section. That section is meant to stay strict XML, so this filter rewrites
exactly those characters into ``&lt;`` / ``&gt;`` while the bytes pass through
to the parser. Everything outside attribute values of the ``xmldata`` region is
left untouched.
"""

import io
from typing import BinaryIO, Optional

EOF = -1

# Sentinel tag names delimiting the tagged region
OPEN_TAG_NAME = b"xmldata"
CLOSE_TAG_NAME = b"/xmldata"

TAG_START = ord("<")
TAG_END = ord(">")
ATTRIBUTE_QUOTE = ord('"')

# Bytes pulled from the wrapped stream per refill
READ_AHEAD_SIZE = 8192

LESS_THAN_ENTITY = b"&lt;"
GREATER_THAN_ENTITY = b"&gt;"


class BracketEscapingFilter(io.RawIOBase):
    """Pull-based byte transducer escaping brackets inside ``xmldata`` attributes.

    The filter is a small state machine evaluated once per input byte:

    * ``tag_position`` is ``None`` while not scanning a tag name, otherwise the
      number of sentinel characters matched so far in the current tag.
    * ``inside_region`` is set between the ``xmldata`` open and close tags.
    * ``inside_attribute`` is set between two ``"`` of a tag in the region.
    * ``past_region`` is set once the close tag was seen; the region is never
      re-entered afterwards.
    * ``_pending`` holds replacement bytes still to be emitted.

    Args:
        raw: Readable binary stream providing the unfiltered bytes
        read_ahead: Number of bytes fetched from ``raw`` at a time
    """

    def __init__(self, raw: BinaryIO, read_ahead: int = READ_AHEAD_SIZE) -> None:
        super().__init__()
        if read_ahead <= 0:
            raise ValueError("read_ahead must be > 0")
        self._raw = raw
        self._read_ahead = read_ahead
        self._buffer = b""
        self._buffer_position = 0
        self.inside_region = False
        self.inside_attribute = False
        self.past_region = False
        self.tag_position: Optional[int] = None
        self._pending = b""
        self._replacements = 0

    @property
    def replacements(self) -> int:
        """Number of brackets escaped so far."""
        return self._replacements

    def readable(self) -> bool:
        return True

    def read_byte(self) -> int:
        """Read a single filtered byte.

        Returns:
            The next byte value, or ``EOF`` once the wrapped stream is exhausted
        """
        if self._pending:
            value = self._pending[0]
            self._pending = self._pending[1:]
            return value

        value = self._next_raw_byte()
        if value == EOF:
            return EOF

        if self.past_region:
            return value

        if self.inside_attribute:
            return self._filter_attribute_byte(value)

        if value == TAG_START:
            self.tag_position = 0
        elif value == TAG_END:
            self.tag_position = None
        elif self.tag_position is not None:
            if self.inside_region and value == ATTRIBUTE_QUOTE:
                self.inside_attribute = True
            else:
                self._advance_scan(value)
        return value

    def readinto(self, buffer) -> int:  # type: ignore[override]
        """Fill ``buffer`` with filtered bytes, one byte at a time.

        Once the region has been closed and nothing is pending, the remaining
        input is copied straight from the wrapped stream.
        """
        view = memoryview(buffer).cast("B")
        position = 0
        while position < len(view):
            if self.past_region and not self._pending:
                chunk = self._take_buffered(len(view) - position)
                if not chunk:
                    chunk = self._raw.read(len(view) - position)
                if not chunk:
                    break
                view[position:position + len(chunk)] = chunk
                position += len(chunk)
                continue

            value = self.read_byte()
            if value == EOF:
                break
            view[position] = value
            position += 1
        return position

    def close(self) -> None:
        try:
            self._raw.close()
        finally:
            super().close()

    def _next_raw_byte(self) -> int:
        if self._buffer_position >= len(self._buffer):
            self._buffer = self._raw.read(self._read_ahead) or b""
            self._buffer_position = 0
            if not self._buffer:
                return EOF
        value = self._buffer[self._buffer_position]
        self._buffer_position += 1
        return value

    def _take_buffered(self, limit: int) -> bytes:
        start = self._buffer_position
        chunk = self._buffer[start:start + limit]
        self._buffer_position += len(chunk)
        return chunk

    def _filter_attribute_byte(self, value: int) -> int:
        if value == ATTRIBUTE_QUOTE:
            self.inside_attribute = False
            return value
        if value == TAG_START:
            return self._substitute(LESS_THAN_ENTITY)
        if value == TAG_END:
            return self._substitute(GREATER_THAN_ENTITY)
        return value

    def _substitute(self, replacement: bytes) -> int:
        self._replacements += 1
        self._pending = replacement[1:]
        return replacement[0]

    def _advance_scan(self, value: int) -> None:
        sentinel = CLOSE_TAG_NAME if self.inside_region else OPEN_TAG_NAME
        position = self.tag_position or 0

        # a mismatch consumes the byte and restarts the match
        position = position + 1 if value == sentinel[position] else 0

        if position == len(sentinel):
            if self.inside_region:
                self.inside_region = False
                self.past_region = True
            else:
                self.inside_region = True
            position = 0

        self.tag_position = position


def escape_attribute_brackets(data: bytes) -> bytes:
    """Run ``data`` through a BracketEscapingFilter and return the result."""
    with BracketEscapingFilter(io.BytesIO(data)) as stream:
        return stream.read()
