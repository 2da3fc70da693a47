"""Locale value type and locale utilities.

Locale is the (language, country, variant) triple used for bundle file
naming and fallback chains. Identifiers are parsed with Babel so that POSIX
(``pt_BR``), BCP-47 (``pt-BR``) and encoding-suffixed (``de_DE.UTF-8``)
spellings all normalize to the same cache key.

Python 3.13+. Uses Babel for identifier parsing.
"""

from __future__ import annotations

import functools
import os
from dataclasses import dataclass
from typing import ClassVar

from babel import Locale as BabelLocale
from babel.core import parse_locale

from autumn_messages.constants import MAX_LOCALE_CACHE_SIZE

__all__ = [
    "Locale",
    "LocaleLike",
    "get_babel_locale",
    "get_system_locale",
    "normalize_locale",
]


@dataclass(frozen=True, slots=True)
class Locale:
    """Immutable (language, country, variant) triple.

    Equality and hashing depend only on the triple, so two locales parsed
    from different spellings of the same identifier share cache entries.
    ``Locale.ROOT`` (all parts empty) names the language-neutral bundle.

    Example:
        >>> Locale.parse("pt-BR")
        Locale(language='pt', country='BR', variant='')
        >>> str(Locale.parse("pt_BR"))
        'pt_BR'
        >>> str(Locale("de", "", "POSIX"))
        'de__POSIX'

    Attributes:
        language: Lowercase ISO 639 language code ("" for the root locale)
        country: Uppercase ISO 3166 region code or UN M.49 number ("" if none)
        variant: Uppercase variant ("" if none)
    """

    ROOT: ClassVar[Locale]

    language: str = ""
    country: str = ""
    variant: str = ""

    def __post_init__(self) -> None:
        """Validate the triple.

        Raises:
            ValueError: If country or variant is set without a language
        """
        if not self.language and (self.country or self.variant):
            msg = f"Locale with country/variant requires a language: {self!r}"
            raise ValueError(msg)

    def __str__(self) -> str:
        """Return the underscore-joined form used in resource names."""
        if self.variant:
            return f"{self.language}_{self.country}_{self.variant}"
        if self.country:
            return f"{self.language}_{self.country}"
        return self.language

    @property
    def is_root(self) -> bool:
        """True for the language-neutral root locale."""
        return not self.language

    @property
    def tag(self) -> str:
        """BCP-47 style tag (``pt-BR``); empty string for the root locale."""
        return "-".join(part for part in (self.language, self.country, self.variant) if part)

    def to_babel(self) -> BabelLocale:
        """Return the matching Babel locale.

        Raises:
            babel.UnknownLocaleError: If Babel has no CLDR data for the locale
            ValueError: If this is the root locale
        """
        if self.is_root:
            msg = "The root locale has no Babel equivalent"
            raise ValueError(msg)
        return get_babel_locale(str(self))

    @classmethod
    def parse(cls, value: LocaleLike) -> Locale:
        """Coerce a locale identifier, Locale or babel.Locale into a Locale.

        Script subtags (``zh_Hant_TW``) are not part of the triple and are
        dropped. The resource-suffix spelling ``de__POSIX`` (variant without
        country) is accepted.

        Args:
            value: Identifier string, Locale, or babel.Locale

        Returns:
            Parsed Locale

        Raises:
            ValueError: If the identifier is malformed
            TypeError: If value is of an unsupported type
        """
        match value:
            case Locale():
                return value
            case BabelLocale():
                return cls(value.language, value.territory or "", value.variant or "")
            case str():
                return _parse_identifier(value)
            case _:
                msg = f"Cannot interpret {type(value).__name__} as a locale"
                raise TypeError(msg)


Locale.ROOT = Locale()

type LocaleLike = Locale | BabelLocale | str
"""Anything Locale.parse() accepts."""


@functools.lru_cache(maxsize=MAX_LOCALE_CACHE_SIZE)
def _parse_identifier(identifier: str) -> Locale:
    normalized = normalize_locale(identifier.strip())
    if not normalized or normalized.lower() == "root":
        return Locale.ROOT

    if "__" in normalized:
        language_part, _, variant = normalized.partition("__")
        if not variant or "_" in variant or not variant.isalnum():
            msg = f"'{identifier}' is not a valid locale identifier"
            raise ValueError(msg)
        language = _parse_identifier(language_part)
        if language.country:
            msg = f"'{identifier}' is not a valid locale identifier"
            raise ValueError(msg)
        return Locale(language.language, "", variant.upper())

    try:
        parts = parse_locale(normalized)
    except ValueError as e:
        msg = f"'{identifier}' is not a valid locale identifier: {e}"
        raise ValueError(msg) from e

    language, territory, _script, variant = parts[:4]
    return Locale(language, territory or "", variant or "")


def normalize_locale(locale_code: str) -> str:
    """Convert a BCP-47 locale code to the POSIX spelling used by Babel.

    Strips an encoding suffix and converts hyphens to underscores.
    Case is left to Locale.parse(), which canonicalizes each part.

    Args:
        locale_code: Locale code (e.g., "en-US", "pt_BR.UTF-8")

    Returns:
        POSIX-formatted locale code (e.g., "en_US", "pt_BR")

    Example:
        >>> normalize_locale("en-US")
        'en_US'
        >>> normalize_locale("de_DE.UTF-8")
        'de_DE'
    """
    return locale_code.split(".", 1)[0].replace("-", "_")


@functools.lru_cache(maxsize=MAX_LOCALE_CACHE_SIZE)
def get_babel_locale(locale_code: str) -> BabelLocale:
    """Get a Babel Locale object with caching.

    Thread-safe via lru_cache internal locking.

    Args:
        locale_code: Locale code (BCP-47 or POSIX format accepted)

    Returns:
        Babel Locale object

    Raises:
        babel.UnknownLocaleError: If locale is not recognized
        ValueError: If locale format is invalid
    """
    return BabelLocale.parse(normalize_locale(locale_code))


def get_system_locale(*, raise_on_failure: bool = False) -> Locale:
    """Detect the process locale from the OS and environment variables.

    Detection order:
    1. Python locale.getlocale() (OS-level locale)
    2. LC_ALL environment variable (overrides all)
    3. LC_MESSAGES environment variable (for message catalogs)
    4. LANG environment variable (default locale)

    The "C" and "POSIX" pseudo-locales and unparseable values are skipped.

    Args:
        raise_on_failure: If True, raise RuntimeError when no locale can be
            determined. If False (default), return Locale.ROOT.

    Returns:
        Detected Locale, or Locale.ROOT when nothing usable is set.

    Raises:
        RuntimeError: If raise_on_failure is True and no locale is found.
    """
    import locale as locale_module  # noqa: PLC0415

    candidates: list[str | None] = []
    try:
        candidates.append(locale_module.getlocale()[0])
    except (ValueError, AttributeError):
        pass
    candidates.extend(os.environ.get(var) for var in ("LC_ALL", "LC_MESSAGES", "LANG"))

    for candidate in candidates:
        if not candidate or candidate in ("C", "POSIX") or candidate.startswith("C."):
            continue
        try:
            detected = Locale.parse(candidate)
        except ValueError:
            continue
        if not detected.is_root:
            return detected

    if raise_on_failure:
        msg = (
            "Could not determine system locale. "
            "Set LC_ALL, LC_MESSAGES, or LANG environment variable."
        )
        raise RuntimeError(msg)
    return Locale.ROOT
