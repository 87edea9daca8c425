"""Key/value decoding for the legacy properties format.

Splits logical lines into keys and values and decodes backslash escapes,
producing the same strings as the reference Java implementation. Node and
launcher configuration are read through this module, and downstream
consumers compare the resulting values verbatim.

Public API:
- load / loads / load_file: Parse a whole source into a dict
- load_lines: Logical lines of a file (comments and blanks removed)
- resolve: Look up one key, expanding ${ENV:NAME} references
- parse_overrides: Decode -D key=value command line overrides
"""

from __future__ import annotations

__all__ = [
    "decode_escapes",
    "load",
    "load_file",
    "load_lines",
    "loads",
    "parse_overrides",
    "resolve",
    "split_line",
]

import io
import os
import string
from collections.abc import Iterable
from pathlib import Path
from typing import BinaryIO

from app_launcher.constants import RESERVED_PROPERTY_OPTIONS
from app_launcher.exceptions import ConfigParseError, MalformedEscapeError

from .reader import WHITESPACE, LogicalLineReader

_SEPARATORS = frozenset("=:")
_HEX_DIGITS = frozenset(string.hexdigits)
_CONTROL_ESCAPES = {"t": "\t", "r": "\r", "n": "\n", "f": "\f"}

_ENV_PREFIX = "${ENV:"
_ENV_SUFFIX = "}"


def decode_escapes(text: str) -> str:
    """Decode backslash escapes in a key or value.

    \\t, \\r, \\n and \\f map to control characters, \\uXXXX to one code
    point, and any other escaped character is copied with the backslash
    dropped.

    Args:
        text: Raw key or value substring of a logical line.

    Returns:
        The decoded string.

    Raises:
        MalformedEscapeError: If \\u is not followed by four hex digits.
    """
    if "\\" not in text:
        return text

    out: list[str] = []
    end = len(text)
    i = 0
    while i < end:
        c = text[i]
        i += 1
        if c != "\\":
            out.append(c)
            continue
        # The line reader never leaves an unescaped backslash at the end
        if i >= end:
            break
        c = text[i]
        i += 1
        if c == "u":
            digits = text[i : i + 4]
            if len(digits) < 4 or not all(d in _HEX_DIGITS for d in digits):
                raise MalformedEscapeError()
            out.append(chr(int(digits, 16)))
            i += 4
        else:
            out.append(_CONTROL_ESCAPES.get(c, c))
    return "".join(out)


def split_line(line: str) -> tuple[str, str]:
    """Split a logical line into its decoded key and value.

    The key ends at the first unescaped '=', ':' or whitespace. Whitespace
    after the key is skipped, together with at most one '=' or ':' when the
    key was ended by whitespace.

    Args:
        line: One logical line.

    Returns:
        (key, value) tuple, both escape-decoded.

    Raises:
        MalformedEscapeError: If either part holds a malformed \\u escape.
    """
    length = len(line)
    key_len = 0
    value_start = length
    has_separator = False
    preceding_backslash = False

    for c in line:
        if not preceding_backslash:
            if c in _SEPARATORS:
                value_start = key_len + 1
                has_separator = True
                break
            if c in WHITESPACE:
                value_start = key_len + 1
                break
        preceding_backslash = not preceding_backslash if c == "\\" else False
        key_len += 1

    while value_start < length:
        c = line[value_start]
        if c not in WHITESPACE:
            if not has_separator and c in _SEPARATORS:
                has_separator = True
            else:
                break
        value_start += 1

    return decode_escapes(line[:key_len]), decode_escapes(line[value_start:])


def load(stream: BinaryIO) -> dict[str, str]:
    """Parse a properties byte stream.

    Duplicate keys are allowed; the last occurrence wins.

    Args:
        stream: Binary stream, read one byte per character.

    Returns:
        Mapping of keys to values.

    Raises:
        MalformedEscapeError: If any line holds a malformed \\u escape.
        OSError: If reading the stream fails.
    """
    properties: dict[str, str] = {}
    for line in LogicalLineReader(stream):
        key, value = split_line(line)
        properties[key] = value
    return properties


def loads(data: bytes | str) -> dict[str, str]:
    """Parse properties from bytes or an ISO-8859-1 representable string."""
    if isinstance(data, str):
        data = data.encode("latin-1")
    return load(io.BytesIO(data))


def load_file(path: Path | str) -> dict[str, str]:
    """Parse a properties file.

    Args:
        path: File to read.

    Returns:
        Mapping of keys to values.

    Raises:
        ConfigParseError: If the file cannot be read or holds a malformed
            escape. The message names the file.
    """
    try:
        with open(path, "rb") as f:
            return load(f)
    except MalformedEscapeError as e:
        raise MalformedEscapeError(f"{e} in {path}") from e
    except OSError as e:
        raise ConfigParseError(f"could not read {path}: {e.strerror or e}") from e


def load_lines(path: Path | str) -> list[str]:
    """Read the logical lines of a file, dropping comments and blank lines.

    Used for files such as jvm.config where each line is one argument.

    Raises:
        ConfigParseError: If the file cannot be read.
    """
    try:
        with open(path, "rb") as f:
            return list(LogicalLineReader(f))
    except OSError as e:
        raise ConfigParseError(f"could not read {path}: {e.strerror or e}") from e


def resolve(path: Path | str, key: str) -> str:
    """Look up a single property, expanding an ${ENV:NAME} reference.

    Args:
        path: Properties file to read.
        key: Property name.

    Returns:
        The property value, or the environment variable it references.

    Raises:
        ConfigParseError: If the file cannot be parsed, the key is missing,
            the reference is unterminated or the variable is not set.
    """
    properties = load_file(path)
    if key not in properties:
        raise ConfigParseError(f"there is no property named {key} in {path}")
    return _decode_env_reference(properties[key])


def _decode_env_reference(value: str) -> str:
    if not value.startswith(_ENV_PREFIX):
        return value
    if not value.endswith(_ENV_SUFFIX):
        raise ConfigParseError(f"malformed property {value}, does not end with }}")

    name = value[len(_ENV_PREFIX) : -len(_ENV_SUFFIX)]
    if name not in os.environ:
        raise ConfigParseError(f"could not find environment variable: {name}")
    return os.environ[name]


def parse_overrides(args: Iterable[str]) -> dict[str, str]:
    """Decode -D key=value overrides from the command line.

    Keys and values are trimmed; later duplicates win. Properties that have
    a dedicated command line option are rejected.

    Args:
        args: The values passed with -D.

    Returns:
        Mapping of keys to values.

    Raises:
        ConfigParseError: If an argument has no '=' or uses a reserved key.
    """
    properties: dict[str, str] = {}
    for arg in args:
        if "=" not in arg:
            raise ConfigParseError(f"property is malformed: {arg}")
        key, value = arg.split("=", 1)
        key = key.strip()
        if key in RESERVED_PROPERTY_OPTIONS:
            option = RESERVED_PROPERTY_OPTIONS[key]
            raise ConfigParseError(f"cannot specify {key} using -D option (use {option})")
        properties[key] = value.strip()
    return properties
