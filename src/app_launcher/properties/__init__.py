"""Legacy properties format support.

Byte-exact reader for the Java .properties grammar used by node and
launcher configuration:
- reader: Joins physical lines into logical lines
- parser: Splits keys from values and decodes escapes
"""

from __future__ import annotations

from .parser import (
    decode_escapes,
    load,
    load_file,
    load_lines,
    loads,
    parse_overrides,
    resolve,
    split_line,
)
from .reader import LogicalLineReader

__all__ = [
    "LogicalLineReader",
    "decode_escapes",
    "load",
    "load_file",
    "load_lines",
    "loads",
    "parse_overrides",
    "resolve",
    "split_line",
]
