"""Thread-safe, self-refreshing cache of merged message bundles.

One CacheEntry per (basename, most specific locale) holds the merged view of
every resource in the locale's fallback chain. Entries are immutable and are
replaced wholesale, so readers never observe a half-loaded bundle.

Architecture:
    - Slot arena: OrderedDict of key -> _Slot, guarded by a short arena lock
      that covers only dictionary bookkeeping and LRU ordering
    - Per-slot threading.Lock serializes loads of one key (single-flight);
      loads of different keys proceed in parallel
    - Readers take the published entry reference without locking
    - TTL expiry triggers revalidation: sources are re-stat'ed and only
      re-parsed when a timestamp changed or the previous load failed
    - Optional LRU bound (max_entries) evicts least recently used slots

Entry lifecycle:
    MISSING -> LOADING -> FRESH -> STALE -> LOADING -> FRESH ...

Python 3.13+.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from autumn_messages.enums import EntryState
from autumn_messages.locale_utils import Locale, LocaleLike
from autumn_messages.localization.fallback import chain_for, resource_chain
from autumn_messages.runtime.cache_config import CacheConfig

if TYPE_CHECKING:
    from autumn_messages.localization.loading import BundleLoader, ResourceLoadResult
    from autumn_messages.localization.types import Basename, MessageCode, Timestamp

__all__ = ["CacheEntry", "MessageCache"]

logger = logging.getLogger(__name__)

type _CacheKey = tuple[str, Locale]

_EMPTY: Mapping[str, str] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Immutable merged view of one basename for one locale.

    ``layers`` holds the entries of each resource in ``chain`` order (most
    specific first, ending with the root resource); ``messages`` is their
    overlay where the most specific layer wins.

    Attributes:
        basename: Bundle family name
        locale: Most specific locale of the chain
        chain: Locales whose resources were consulted, most specific first
        layers: Per-resource entries aligned with ``chain`` (empty if absent)
        messages: Merged read-only code -> pattern mapping
        created_at: Clock reading when the entry was loaded or re-validated
        source_timestamps: Resource modification times aligned with ``chain``
            (None where the resource was absent or unreadable)
        load_results: Load results aligned with ``chain``
        needs_retry: True if a resource failed to load and must be retried
            once the entry goes stale
    """

    basename: Basename
    locale: Locale
    chain: tuple[Locale, ...]
    layers: tuple[Mapping[str, str], ...]
    messages: Mapping[str, str]
    created_at: float
    source_timestamps: tuple[Timestamp | None, ...]
    load_results: tuple[ResourceLoadResult, ...] = ()
    needs_retry: bool = False

    def get(self, code: MessageCode) -> str | None:
        """Return the merged pattern for ``code``, or None."""
        return self.messages.get(code)

    def layer(self, locale: Locale) -> Mapping[str, str]:
        """Return the entries contributed by exactly ``locale``'s resource."""
        try:
            return self.layers[self.chain.index(locale)]
        except ValueError:
            return _EMPTY

    def is_stale(self, now: float, cache_seconds: float) -> bool:
        """True once ``cache_seconds`` have elapsed since ``created_at``.

        Negative ``cache_seconds`` never expire; zero expires immediately.
        """
        if cache_seconds < 0:
            return False
        return now - self.created_at >= cache_seconds


class _Slot:
    """Mutable holder for one cache key.

    ``entry`` is swapped atomically (a single reference assignment); ``lock``
    is held while the entry is being loaded or re-validated.
    """

    __slots__ = ("entry", "lock")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.entry: CacheEntry | None = None


class MessageCache:
    """Self-refreshing cache of merged message bundles.

    Thread-safe. Loads of one key are single-flight: concurrent first
    requests wait for one shared load. A reader that finds a stale entry
    being refreshed by another thread is served the stale entry when
    ``concurrent_refresh`` is enabled.

    Example:
        >>> loader = BundleLoader(PathResourceResolver("locales"))
        >>> cache = MessageCache(loader, CacheConfig(cache_seconds=60))
        >>> cache.resolve("messages", "greeting", "pt_BR")
        'Olá {0}'
    """

    __slots__ = (
        "_arena",
        "_clock",
        "_config",
        "_default_locale",
        "_evictions",
        "_hits",
        "_loader",
        "_loads",
        "_lock",
        "_misses",
        "_reloads",
        "_revalidations",
        "_stale_served",
    )

    def __init__(
        self,
        loader: BundleLoader,
        config: CacheConfig | None = None,
        *,
        default_locale: LocaleLike | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize cache.

        Args:
            loader: Loader used on misses and reloads
            config: Refresh policy and size bound (default: cache forever)
            default_locale: Locale terminating every fallback chain
            clock: Monotonic time source in seconds
        """
        self._loader = loader
        self._config = config if config is not None else CacheConfig()
        self._default_locale = None if default_locale is None else Locale.parse(default_locale)
        self._clock = clock
        self._arena: OrderedDict[_CacheKey, _Slot] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._loads = 0
        self._revalidations = 0
        self._reloads = 0
        self._stale_served = 0
        self._evictions = 0

    @property
    def loader(self) -> BundleLoader:
        """Loader used on misses and reloads."""
        return self._loader

    @property
    def config(self) -> CacheConfig:
        """Current cache configuration."""
        return self._config

    @property
    def cache_seconds(self) -> float:
        """Seconds before an entry is re-validated (negative: never)."""
        return self._config.cache_seconds

    @cache_seconds.setter
    def cache_seconds(self, value: float) -> None:
        # Existing entries are judged against the new TTL on next access.
        self._config = dataclasses.replace(self._config, cache_seconds=value)

    @property
    def default_locale(self) -> Locale | None:
        """Locale terminating every fallback chain (None: root)."""
        return self._default_locale

    @default_locale.setter
    def default_locale(self, value: LocaleLike | None) -> None:
        self._default_locale = None if value is None else Locale.parse(value)
        self.clear()

    def chain_for(self, locale: LocaleLike) -> tuple[Locale, ...]:
        """Return the resource chain consulted for ``locale``."""
        return resource_chain(chain_for(locale, self._default_locale))

    def resolve(
        self, basename: Basename, code: MessageCode, locale: LocaleLike
    ) -> str | None:
        """Return the unformatted pattern for ``code``, or None if absent."""
        return self.get_entry(basename, locale).get(code)

    def get_entry(self, basename: Basename, locale: LocaleLike) -> CacheEntry:
        """Return a current entry for ``basename`` and ``locale``.

        Loads on first access, re-validates once stale. Never returns a
        partially loaded entry.

        Args:
            basename: Bundle family name
            locale: Requested locale

        Returns:
            CacheEntry whose merged view covers the whole fallback chain

        Raises:
            ValueError: If basename is empty or locale is malformed
        """
        if not basename:
            msg = "basename must be a non-empty string"
            raise ValueError(msg)
        chain = self.chain_for(locale)
        slot = self._slot((basename, chain[0]))

        entry = slot.entry
        if entry is not None and not entry.is_stale(self._clock(), self._config.cache_seconds):
            self._count_hit()
            return entry

        if entry is None:
            self._count_miss()
            with slot.lock:
                current = slot.entry
                if current is None:
                    current = self._load(basename, chain)
                    slot.entry = current
                return current

        if self._config.concurrent_refresh:
            if not slot.lock.acquire(blocking=False):
                with self._lock:
                    self._stale_served += 1
                logger.debug("Serving stale bundle %s for '%s' during refresh", basename, chain[0])
                return entry
        else:
            slot.lock.acquire()
        try:
            current = slot.entry
            if current is not None and not current.is_stale(
                self._clock(), self._config.cache_seconds
            ):
                # Another thread refreshed while this one waited
                return current
            current = self._revalidate(basename, chain, current)
            slot.entry = current
            return current
        finally:
            slot.lock.release()

    def state_of(self, basename: Basename, locale: LocaleLike) -> EntryState:
        """Return the lifecycle state of an entry without loading it."""
        chain = self.chain_for(locale)
        with self._lock:
            slot = self._arena.get((basename, chain[0]))
        if slot is None:
            return EntryState.MISSING
        entry = slot.entry
        if slot.lock.locked():
            return EntryState.LOADING
        if entry is None:
            return EntryState.MISSING
        if entry.is_stale(self._clock(), self._config.cache_seconds):
            return EntryState.STALE
        return EntryState.FRESH

    def clear(self) -> None:
        """Drop all entries and reset metrics.

        Loads in flight complete for their callers but are not published.
        """
        with self._lock:
            size = len(self._arena)
            self._arena.clear()
            self._hits = 0
            self._misses = 0
            self._loads = 0
            self._revalidations = 0
            self._reloads = 0
            self._stale_served = 0
            self._evictions = 0
        logger.debug("Cleared message cache (%d entries)", size)

    def get_stats(self) -> dict[str, int | float | None]:
        """Get cache statistics.

        Thread-safe. Returns current metrics.

        Returns:
            Dict with keys:
            - size (int): Current number of cached keys
            - max_entries (int | None): LRU bound
            - cache_seconds (float): Current TTL
            - hits (int): Lookups served from a fresh entry
            - misses (int): Lookups that found no entry
            - hit_rate (float): Hit rate as percentage (0.0-100.0)
            - loads (int): Full loads (first loads and reloads)
            - revalidations (int): Timestamp checks of stale entries
            - reloads (int): Revalidations that re-read the sources
            - stale_served (int): Stale entries served during a refresh
            - evictions (int): Entries dropped by the LRU bound
        """
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0.0

            return {
                "size": len(self._arena),
                "max_entries": self._config.max_entries,
                "cache_seconds": self._config.cache_seconds,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(hit_rate, 2),
                "loads": self._loads,
                "revalidations": self._revalidations,
                "reloads": self._reloads,
                "stale_served": self._stale_served,
                "evictions": self._evictions,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._arena)

    def _slot(self, key: _CacheKey) -> _Slot:
        with self._lock:
            slot = self._arena.get(key)
            if slot is not None:
                self._arena.move_to_end(key)
                return slot

            slot = _Slot()
            self._arena[key] = slot
            max_entries = self._config.max_entries
            while max_entries is not None and len(self._arena) > max_entries:
                evicted, _ = self._arena.popitem(last=False)
                self._evictions += 1
                logger.debug("Evicted bundle %s for '%s'", evicted[0], evicted[1])
            return slot

    def _count_hit(self) -> None:
        with self._lock:
            self._hits += 1

    def _count_miss(self) -> None:
        with self._lock:
            self._misses += 1

    def _load(self, basename: Basename, chain: tuple[Locale, ...]) -> CacheEntry:
        results = tuple(self._loader.load(basename, locale) for locale in chain)
        layers = tuple(_EMPTY if r.bundle is None else r.bundle.entries for r in results)

        merged: dict[str, str] = {}
        for layer in reversed(layers):
            merged.update(layer)

        entry = CacheEntry(
            basename=basename,
            locale=chain[0],
            chain=chain,
            layers=layers,
            messages=MappingProxyType(merged),
            created_at=self._clock(),
            source_timestamps=tuple(r.last_modified for r in results),
            load_results=results,
            needs_retry=any(r.is_error for r in results),
        )
        with self._lock:
            self._loads += 1
        logger.debug(
            "Loaded bundle %s for '%s': %d messages from %d of %d resources",
            basename,
            chain[0],
            len(merged),
            sum(1 for r in results if r.is_success),
            len(results),
        )
        return entry

    def _revalidate(
        self, basename: Basename, chain: tuple[Locale, ...], entry: CacheEntry | None
    ) -> CacheEntry:
        if entry is None:
            return self._load(basename, chain)

        with self._lock:
            self._revalidations += 1
        timestamps = tuple(self._loader.stat(basename, locale) for locale in entry.chain)

        if entry.needs_retry or timestamps != entry.source_timestamps:
            logger.info(
                "Reloading bundle %s for '%s': %s",
                basename,
                entry.locale,
                "retrying failed resource" if entry.needs_retry else "resource changed",
            )
            with self._lock:
                self._reloads += 1
            return self._load(basename, chain)

        logger.debug("Bundle %s for '%s' unchanged; re-stamped", basename, entry.locale)
        return dataclasses.replace(entry, created_at=self._clock())
