"""Cache configuration for MessageCache.

Provides a single frozen dataclass that encapsulates the refresh policy and
memory bound of the message cache.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass

from autumn_messages.constants import CACHE_FOREVER

__all__ = ["CacheConfig"]


@dataclass(frozen=True, slots=True)
class CacheConfig:
    """Immutable configuration for message bundle caching.

    Constructing ``CacheConfig()`` with no arguments caches bundles forever,
    without a size bound.

    Attributes:
        cache_seconds: Time-to-live before an entry is re-validated against
            its source timestamps. Negative: never re-validate, so a
            resource that failed to load stays absent until the cache is
            cleared. Zero: re-validate on every access. Fractional values
            are accepted.
        max_entries: Maximum cached (basename, locale) entries; the least
            recently used entry is evicted beyond it. None disables the bound.
        concurrent_refresh: If True, a reader that finds another thread
            already re-validating a stale entry is served the stale entry
            instead of waiting. If False, it waits for the refreshed entry.
            First loads always wait.

    Example:
        >>> config = CacheConfig(cache_seconds=30, max_entries=256)
        >>> config.expires
        True
    """

    cache_seconds: float = CACHE_FOREVER
    max_entries: int | None = None
    concurrent_refresh: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values at construction time.

        Raises:
            ValueError: If max_entries is not positive
            TypeError: If cache_seconds is not a real number
        """
        if isinstance(self.cache_seconds, bool) or not isinstance(
            self.cache_seconds, (int, float)
        ):
            msg = f"cache_seconds must be a number, got {type(self.cache_seconds).__name__}"
            raise TypeError(msg)
        if self.max_entries is not None and self.max_entries <= 0:
            msg = "max_entries must be positive"
            raise ValueError(msg)

    @property
    def expires(self) -> bool:
        """True if entries are ever re-validated."""
        return self.cache_seconds >= 0
