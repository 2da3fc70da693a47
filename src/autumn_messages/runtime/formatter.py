"""Positional message formatting.

Substitutes ``{0}``, ``{1}``, ... placeholders in a message pattern with the
rendered arguments at those indexes. ``{{`` and ``}}`` stand for literal
braces; a lone ``}`` is kept as-is.

Architecture:
    - Patterns compile once into a tuple of literal/index segments
      (memoized with functools.lru_cache)
    - Arguments render locale-aware via Babel (numbers, dates, datetimes)
    - Missing argument indexes and malformed placeholders raise
      MessageFormatError instead of producing partial output

Python 3.13+. Uses Babel for i18n.
"""

from __future__ import annotations

import functools
import logging
import re
from collections.abc import Sequence
from datetime import date, datetime
from decimal import Decimal

from babel import Locale as BabelLocale
from babel import UnknownLocaleError
from babel import dates as babel_dates
from babel import numbers as babel_numbers

from autumn_messages.constants import DEFAULT_PATTERN_CACHE_SIZE, NULL_ARGUMENT
from autumn_messages.diagnostics import Diagnostic, DiagnosticCode, MessageFormatError
from autumn_messages.locale_utils import Locale, LocaleLike

__all__ = ["MessageFormatter", "compile_pattern", "format_message", "render_argument"]

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"\{\{|\}\}|\{([^{}]*)\}|\{")

type Segment = str | int
"""Compiled pattern piece: literal text or an argument index."""


@functools.lru_cache(maxsize=DEFAULT_PATTERN_CACHE_SIZE)
def compile_pattern(pattern: str) -> tuple[Segment, ...]:
    """Split a pattern into literal and argument-index segments.

    Args:
        pattern: Message pattern

    Returns:
        Tuple of str (literal) and int (argument index) segments

    Raises:
        MessageFormatError: If a placeholder is malformed or unterminated

    Example:
        >>> compile_pattern("Hello {0}, {{literal}}")
        ('Hello ', 0, ', {literal}')
    """
    segments: list[Segment] = []
    literal: list[str] = []
    pos = 0

    for match in _TOKEN.finditer(pattern):
        literal.append(pattern[pos : match.start()])
        pos = match.end()
        token = match.group(0)

        if token == "{{":
            literal.append("{")
            continue
        if token == "}}":
            literal.append("}")
            continue
        if token == "{":
            diagnostic = Diagnostic(
                code=DiagnosticCode.PLACEHOLDER_UNTERMINATED,
                message=f"Unterminated placeholder at offset {match.start()} in {pattern!r}",
                hint="Close the placeholder or escape the brace as '{{'",
            )
            raise MessageFormatError(diagnostic, pattern=pattern)

        body = match.group(1).strip()
        if not (body.isascii() and body.isdigit()):
            diagnostic = Diagnostic(
                code=DiagnosticCode.PLACEHOLDER_MALFORMED,
                message=f"Placeholder {token!r} is not an argument index in {pattern!r}",
                hint="Use positional placeholders such as {0}, or escape braces by doubling",
            )
            raise MessageFormatError(diagnostic, pattern=pattern)

        if literal:
            segments.append("".join(literal))
            literal = []
        segments.append(int(body))

    literal.append(pattern[pos:])
    text = "".join(literal)
    if text:
        segments.append(text)
    return tuple(segments)


def render_argument(value: object, babel_locale: BabelLocale | None = None) -> str:
    """Render one argument as text.

    Numbers and dates use the CLDR conventions of ``babel_locale`` when one
    is given; None renders as ``"null"``; everything else uses str().

    Args:
        value: Argument value
        babel_locale: Locale for number/date formatting (None for plain str())

    Returns:
        Rendered text
    """
    match value:
        case None:
            return NULL_ARGUMENT
        case bool():
            return str(value)
        case int() | float() | Decimal() if babel_locale is not None:
            return babel_numbers.format_decimal(value, locale=babel_locale)
        case datetime() if babel_locale is not None:
            return babel_dates.format_datetime(value, locale=babel_locale)
        case date() if babel_locale is not None:
            return babel_dates.format_date(value, locale=babel_locale)
        case _:
            return str(value)


@functools.lru_cache(maxsize=DEFAULT_PATTERN_CACHE_SIZE)
def _babel_locale_for(locale: Locale) -> BabelLocale | None:
    if locale.is_root:
        return None
    try:
        return locale.to_babel()
    except (UnknownLocaleError, ValueError) as e:
        logger.warning(
            "Unknown locale '%s' for argument formatting: %s. Using plain str()", locale, e
        )
        return None


class MessageFormatter:
    """Formats message patterns for one locale.

    Thread-safe: instances are immutable and compiled patterns are shared
    through a locked LRU cache.

    Example:
        >>> formatter = MessageFormatter("en")
        >>> formatter.format("Hello {0}, you have {1} items", ["Ann", 3])
        'Hello Ann, you have 3 items'
        >>> formatter.format("{0}", [1234567])
        '1,234,567'
    """

    __slots__ = ("_babel_locale", "_locale")

    def __init__(self, locale: LocaleLike | None = None) -> None:
        """Initialize formatter.

        Args:
            locale: Locale for number/date rendering (None renders with str())
        """
        self._locale = None if locale is None else Locale.parse(locale)
        self._babel_locale = None if self._locale is None else _babel_locale_for(self._locale)

    @property
    def locale(self) -> Locale | None:
        """Locale used for argument rendering."""
        return self._locale

    def format(self, pattern: str, args: Sequence[object] = ()) -> str:
        """Substitute positional arguments into ``pattern``.

        Args:
            pattern: Message pattern with ``{n}`` placeholders
            args: Arguments indexed by placeholder number

        Returns:
            Rendered message

        Raises:
            MessageFormatError: If a placeholder index has no argument, or a
                placeholder is malformed
        """
        if not args and "{" not in pattern and "}" not in pattern:
            return pattern

        parts: list[str] = []
        for segment in compile_pattern(pattern):
            if isinstance(segment, str):
                parts.append(segment)
                continue
            if segment >= len(args):
                diagnostic = Diagnostic(
                    code=DiagnosticCode.ARGUMENT_INDEX_OUT_OF_RANGE,
                    message=(
                        f"Placeholder {{{segment}}} has no argument "
                        f"({len(args)} supplied) in {pattern!r}"
                    ),
                    hint="Pass an argument for every placeholder index",
                )
                raise MessageFormatError(
                    diagnostic, pattern=pattern, index=segment, argument_count=len(args)
                )
            parts.append(render_argument(args[segment], self._babel_locale))
        return "".join(parts)


def format_message(
    pattern: str, args: Sequence[object] = (), locale: LocaleLike | None = None
) -> str:
    """Format ``pattern`` with ``args``. See MessageFormatter.format()."""
    return MessageFormatter(locale).format(pattern, args)
