"""Parser for flat ``key=value`` property resources.

Grammar (line oriented):
    - Natural lines end at LF, CRLF or CR. A leading BOM is ignored.
    - A line whose first non-blank character is ``#`` or ``!`` is a comment.
    - A line ending in an odd number of backslashes continues on the next
      natural line; leading blanks of the continuation are dropped.
    - The key ends at the first unescaped ``=``, ``:`` or blank. Blanks, at
      most one ``=``/``:``, and blanks again separate key from value.
    - Escapes: ``\\t \\n \\r \\f \\uXXXX``; any other escaped character stands
      for itself (``\\=`` is ``=``, ``\\\\`` is a backslash).

Robustness principle: a malformed logical line (bad ``\\u`` escape, empty
key) is skipped and reported as a ParseWarning; the rest of the resource is
still parsed. Repeated keys keep the last value.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from autumn_messages.constants import DEFAULT_ENCODING
from autumn_messages.diagnostics import DiagnosticCode, ParseWarning

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping
    from typing import BinaryIO

__all__ = ["ParseResult", "PropertiesParser", "parse_properties"]

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_ESCAPE = re.compile(r"\\(u[0-9A-Fa-f]{4}|u|.|$)", re.DOTALL)
_SIMPLE_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_BLANKS = " \t\f"
_KEY_TERMINATORS = "=: \t\f"


class _InvalidEscapeError(ValueError):
    """Malformed \\uXXXX sequence inside a logical line."""


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Outcome of parsing one property resource.

    Attributes:
        entries: Read-only key -> value mapping in first-definition order
        warnings: Lines that were skipped, in source order
    """

    entries: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    warnings: tuple[ParseWarning, ...] = ()

    @property
    def has_warnings(self) -> bool:
        """Check if any line was skipped."""
        return len(self.warnings) > 0


def parse_properties(
    source: bytes | str,
    *,
    encoding: str = DEFAULT_ENCODING,
    source_path: str | None = None,
) -> ParseResult:
    """Parse property source into ordered key/value pairs.

    Args:
        source: Raw bytes (decoded with ``encoding``) or already-decoded text
        encoding: Character encoding for byte input
        source_path: Resource name used in warnings

    Returns:
        ParseResult with entries and warnings

    Raises:
        LookupError: If ``encoding`` is not a known codec

    Example:
        >>> result = parse_properties(b"greeting = Hello, {0}!\\n# comment\\n")
        >>> dict(result.entries)
        {'greeting': 'Hello, {0}!'}
    """
    warnings: list[ParseWarning] = []

    if isinstance(source, bytes):
        try:
            text = source.decode(encoding)
        except UnicodeDecodeError as e:
            warnings.append(
                ParseWarning(
                    code=DiagnosticCode.UNDECODABLE_BYTES,
                    message=(
                        f"Invalid {encoding} byte sequence at offset {e.start}; "
                        "undecodable bytes replaced"
                    ),
                    line=0,
                    source_path=source_path,
                )
            )
            text = source.decode(encoding, errors="replace")
    else:
        text = source

    text = text.removeprefix("\ufeff")

    entries: dict[str, str] = {}
    for line_no, logical in _logical_lines(text):
        key_raw, value_raw = _split_key_value(logical)
        try:
            key = _unescape(key_raw)
            value = _unescape(value_raw)
        except _InvalidEscapeError as e:
            warnings.append(
                ParseWarning(
                    code=DiagnosticCode.INVALID_UNICODE_ESCAPE,
                    message=str(e),
                    line=line_no,
                    content=logical,
                    source_path=source_path,
                )
            )
            continue

        if not key:
            warnings.append(
                ParseWarning(
                    code=DiagnosticCode.EMPTY_KEY,
                    message="Line has a value but no key",
                    line=line_no,
                    content=logical,
                    source_path=source_path,
                )
            )
            continue

        entries[key] = value

    return ParseResult(entries=MappingProxyType(entries), warnings=tuple(warnings))


class PropertiesParser:
    """Property parser bound to a character encoding.

    Example:
        >>> parser = PropertiesParser("latin-1")
        >>> dict(parser.parse(b"caf\\xe9=open").entries)
        {'café': 'open'}
    """

    __slots__ = ("_encoding",)

    def __init__(self, encoding: str = DEFAULT_ENCODING) -> None:
        """Initialize parser.

        Args:
            encoding: Character encoding for byte input
        """
        self._encoding = encoding

    @property
    def encoding(self) -> str:
        """Character encoding applied to byte input."""
        return self._encoding

    def parse(self, source: bytes | str, source_path: str | None = None) -> ParseResult:
        """Parse bytes or text. See parse_properties()."""
        return parse_properties(source, encoding=self._encoding, source_path=source_path)

    def parse_stream(self, stream: BinaryIO, source_path: str | None = None) -> ParseResult:
        """Read a binary stream to the end and parse it."""
        return self.parse(stream.read(), source_path)


def _logical_lines(text: str) -> Iterator[tuple[int, str]]:
    """Yield (starting line number, logical line) pairs, skipping blanks and comments."""
    natural = _LINE_BREAK.split(text)
    index = 0
    while index < len(natural):
        line_no = index + 1
        line = natural[index].lstrip(_BLANKS)
        index += 1
        if not line or line[0] in "#!":
            continue

        parts = [line]
        while _continues(parts[-1]):
            parts[-1] = parts[-1][:-1]
            if index >= len(natural):
                break
            parts.append(natural[index].lstrip(_BLANKS))
            index += 1
        yield line_no, "".join(parts)


def _continues(line: str) -> bool:
    """True if the line ends with an odd run of backslashes."""
    run = len(line) - len(line.rstrip("\\"))
    return run % 2 == 1


def _split_key_value(line: str) -> tuple[str, str]:
    pos = 0
    length = len(line)
    while pos < length:
        char = line[pos]
        if char == "\\":
            pos += 2
            continue
        if char in _KEY_TERMINATORS:
            break
        pos += 1
    key_end = min(pos, length)

    while pos < length and line[pos] in _BLANKS:
        pos += 1
    if pos < length and line[pos] in "=:":
        pos += 1
    while pos < length and line[pos] in _BLANKS:
        pos += 1
    return line[:key_end], line[pos:]


def _unescape(raw: str) -> str:
    if "\\" not in raw:
        return raw
    text = _ESCAPE.sub(_replace_escape, raw)
    if any("\ud800" <= char <= "\udfff" for char in text):
        # \uXXXX pairs arrive as separate surrogates; join them into code points
        text = text.encode("utf-16", "surrogatepass").decode("utf-16", "replace")
    return text


def _replace_escape(match: re.Match[str]) -> str:
    token = match.group(1)
    if token == "u":
        msg = "Malformed \\uXXXX encoding"
        raise _InvalidEscapeError(msg)
    if token.startswith("u"):
        return chr(int(token[1:], 16))
    return _SIMPLE_ESCAPES.get(token, token)
