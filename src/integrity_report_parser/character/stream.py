"""Byte sources for report parsing.

A report file is read into memory exactly once. The same immutable buffer is
archived in the resulting record and, through zero-copy slices, forms the
logical stream that the XML parser consumes.
"""

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Union

PathLike = Union[str, Path]


@dataclass(frozen=True)
class RawReport:
    """Raw bytes of one report file together with the file's path.

    Attributes:
        path: Location the report was read from
        content: Complete, unmodified file content
    """

    path: Path
    content: bytes

    @classmethod
    def read(cls, path: PathLike) -> "RawReport":
        """Read a report file completely into memory.

        Raises:
            OSError: If the file cannot be read
        """
        file_path = Path(path)
        return cls(path=file_path, content=file_path.read_bytes())

    @property
    def name(self) -> str:
        """Base name of the report file."""
        return self.path.name

    def __len__(self) -> int:
        return len(self.content)


class ConcatenatedByteStream(io.RawIOBase):
    """Read-only stream over a sequence of byte segments.

    Segments are consumed in order without being copied into a joint buffer.

    Args:
        segments: Byte-like objects (bytes or memoryview slices) to chain
    """

    def __init__(self, segments: Iterable[Union[bytes, memoryview]]) -> None:
        super().__init__()
        self._segments: List[memoryview] = [
            memoryview(segment).cast("B") for segment in segments if len(segment)
        ]
        self._index = 0
        self._offset = 0

    @property
    def total_size(self) -> int:
        """Combined length of all segments."""
        return sum(len(segment) for segment in self._segments)

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # type: ignore[override]
        view = memoryview(buffer).cast("B")
        written = 0
        while written < len(view) and self._index < len(self._segments):
            segment = self._segments[self._index]
            available = len(segment) - self._offset
            count = min(available, len(view) - written)
            view[written:written + count] = segment[self._offset:self._offset + count]
            written += count
            self._offset += count
            if self._offset == len(segment):
                self._index += 1
                self._offset = 0
        return written

    def close(self) -> None:
        self._segments = []
        super().close()
