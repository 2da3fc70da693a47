"""Locale fallback chains.

A candidate chain lists locales from most to least specific and ends at the
configured default locale, or at the language-neutral root when no default
is configured::

    chain_for("ca_ES_VALENCIA", "en") -> (ca_ES_VALENCIA, ca_ES, ca, en)
    chain_for("en_US", "en")     -> (en_US, en)
    chain_for("en", "en")        -> (en,)
    chain_for("pt_BR")           -> (pt_BR, pt, ROOT)

Chains are pure functions of their inputs and are memoized.

Python 3.13+.
"""

from __future__ import annotations

import functools

from autumn_messages.constants import MAX_LOCALE_CACHE_SIZE
from autumn_messages.locale_utils import Locale, LocaleLike

__all__ = [
    "LocaleFallbackResolver",
    "chain_for",
    "resource_chain",
]


def chain_for(
    locale: LocaleLike, default_locale: LocaleLike | None = None
) -> tuple[Locale, ...]:
    """Build the candidate chain for a requested locale.

    For locale (L, C, V) the chain is ``[(L,C,V), (L,C), (L), default]`` with
    duplicates removed (first occurrence kept). The default is
    ``Locale.ROOT`` when ``default_locale`` is None. Never empty.

    Args:
        locale: Requested locale
        default_locale: Configured default locale, or None

    Returns:
        Tuple of locales, most specific first
    """
    requested = Locale.parse(locale)
    default = Locale.ROOT if default_locale is None else Locale.parse(default_locale)
    return _chain(requested, default)


@functools.lru_cache(maxsize=MAX_LOCALE_CACHE_SIZE)
def _chain(requested: Locale, default: Locale) -> tuple[Locale, ...]:
    if requested == default:
        return (requested,)

    candidates = (
        requested,
        Locale(requested.language, requested.country),
        Locale(requested.language),
        default,
    )
    # dict.fromkeys() removes duplicates while maintaining insertion order
    return tuple(dict.fromkeys(c for c in candidates if not c.is_root or c == default))


def resource_chain(chain: tuple[Locale, ...]) -> tuple[Locale, ...]:
    """Return the locales whose files make up a merged bundle.

    This is the candidate chain with the root bundle appended, so
    ``basename.properties`` always serves as the last resort.

    Args:
        chain: Candidate chain from chain_for()

    Returns:
        Chain ending in Locale.ROOT, without duplicates
    """
    if chain and chain[-1].is_root:
        return chain
    return (*chain, Locale.ROOT)


class LocaleFallbackResolver:
    """Chain builder bound to a default locale.

    Example:
        >>> resolver = LocaleFallbackResolver("en")
        >>> [str(loc) for loc in resolver.chain_for("pt_BR")]
        ['pt_BR', 'pt', 'en']
    """

    __slots__ = ("_default_locale",)

    def __init__(self, default_locale: LocaleLike | None = None) -> None:
        """Initialize resolver.

        Args:
            default_locale: Locale terminating every chain (None for root)
        """
        self._default_locale = (
            None if default_locale is None else Locale.parse(default_locale)
        )

    @property
    def default_locale(self) -> Locale | None:
        """Configured default locale, or None for root."""
        return self._default_locale

    def chain_for(self, locale: LocaleLike) -> tuple[Locale, ...]:
        """Build the candidate chain for ``locale``."""
        return chain_for(locale, self._default_locale)
