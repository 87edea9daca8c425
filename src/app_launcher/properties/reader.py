"""Logical line reader for the legacy properties format.

Joins physical lines into logical lines:
- Leading whitespace (space, tab, form-feed) and blank lines are skipped
- Lines starting with '#' or '!' are comments and are discarded
- A line terminator preceded by an odd number of backslashes is a
  continuation: the backslash and terminator are dropped and the leading
  whitespace of the next physical line is skipped

Input is decoded one byte per character (ISO-8859-1), so every byte value
maps to exactly one character and the reader never fails on encoding.
"""

from __future__ import annotations

__all__ = [
    "COMMENT_MARKERS",
    "LINE_TERMINATORS",
    "LogicalLineReader",
    "WHITESPACE",
]

from collections.abc import Iterator
from typing import BinaryIO

WHITESPACE: frozenset[str] = frozenset(" \t\f")
LINE_TERMINATORS: frozenset[str] = frozenset("\r\n")
COMMENT_MARKERS: frozenset[str] = frozenset("#!")

# Bytes read from the underlying stream per call
_BUFFER_SIZE = 8192


class LogicalLineReader:
    """Single-use iterator over the logical lines of a byte stream.

    The stream is consumed forward only; once exhausted the reader yields
    nothing more. Read errors from the stream propagate unchanged.

    Example:
        >>> import io
        >>> list(LogicalLineReader(io.BytesIO(b"a=1\\\\\\n  2\\n# c\\nb=3")))
        ['a=12', 'b=3']
    """

    def __init__(self, stream: BinaryIO, buffer_size: int = _BUFFER_SIZE) -> None:
        self._stream = stream
        self._buffer_size = buffer_size
        self._lines = self._read_lines()

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        return next(self._lines)

    def _chars(self) -> Iterator[str]:
        """Yield the stream one character per byte."""
        while True:
            chunk = self._stream.read(self._buffer_size)
            if not chunk:
                return
            yield from chunk.decode("latin-1")

    def _read_lines(self) -> Iterator[str]:
        chars = self._chars()
        buf: list[str] = []
        skip_whitespace = True
        continued = False
        preceding_backslash = False
        skip_lf = False

        for c in chars:
            # A \r\n pair ending a continued line is a single terminator
            if skip_lf:
                skip_lf = False
                if c == "\n":
                    continue

            if skip_whitespace:
                if c in WHITESPACE:
                    continue
                if not continued and c in LINE_TERMINATORS:
                    continue
                skip_whitespace = False
                continued = False

            if not buf and c in COMMENT_MARKERS:
                for c in chars:
                    if c in LINE_TERMINATORS:
                        break
                skip_whitespace = True
                continue

            if c not in LINE_TERMINATORS:
                buf.append(c)
                preceding_backslash = not preceding_backslash if c == "\\" else False
                continue

            if not buf:
                skip_whitespace = True
                continue

            if preceding_backslash:
                buf.pop()
                skip_whitespace = True
                continued = True
                preceding_backslash = False
                skip_lf = c == "\r"
                continue

            yield "".join(buf)
            buf = []
            skip_whitespace = True

        if buf:
            # A continuation backslash at end of input is not part of the line
            if preceding_backslash:
                buf.pop()
            yield "".join(buf)
