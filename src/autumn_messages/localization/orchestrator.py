"""Reloadable message source with locale fallback.

ReloadableMessageSource resolves a message code plus a locale to a formatted
string. Messages live in ``<basename>[_<locale>].properties`` resources that
are parsed once, merged along the locale's fallback chain, cached, and
re-validated against the resources after a configurable TTL.

Lookup order for one request:
    1. Own basenames (per basename precedence), walking the fallback chain
       from the requested locale to the default locale and the root file
    2. Common messages (locale-independent)
    3. Parent message source
    4. Default message, then the code itself if configured
    5. NoSuchMessageError

Key architectural decisions:
- Protocol-based ResourceResolver (dependency inversion)
- Configuration guarded by RWLock: lookups are readers, setters writers
- Bundles cached in MessageCache; lookups never hold the configuration
  lock while loading
- Python 3.13 features: pattern matching, frozen dataclasses

Python 3.13+.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from types import MappingProxyType
from typing import TYPE_CHECKING, Protocol

from autumn_messages.constants import CACHE_FOREVER, DEFAULT_ENCODING
from autumn_messages.diagnostics import NoSuchMessageError
from autumn_messages.enums import BasenamePrecedence
from autumn_messages.locale_utils import Locale, LocaleLike, get_system_locale
from autumn_messages.localization.loading import (
    BundleLoader,
    FallbackInfo,
    LoadSummary,
    MappingResourceResolver,
    ResourceResolver,
)
from autumn_messages.localization.resolvable import MessageSourceResolvable
from autumn_messages.runtime.cache import CacheEntry, MessageCache
from autumn_messages.runtime.cache_config import CacheConfig
from autumn_messages.runtime.formatter import MessageFormatter
from autumn_messages.runtime.rwlock import RWLock

if TYPE_CHECKING:
    from types import TracebackType

    from autumn_messages.localization.types import Basename, MessageCode

__all__ = ["MessageSource", "ReloadableMessageSource"]

logger = logging.getLogger(__name__)

type CodeLike = MessageCode | Sequence[MessageCode] | MessageSourceResolvable
"""A single code, codes in priority order, or a self-describing request."""


class MessageSource(Protocol):
    """Protocol for anything that can resolve messages.

    Used for parent sources: a ReloadableMessageSource asks its parent for
    codes it cannot resolve itself.
    """

    def find_message(
        self,
        code: CodeLike,
        args: Sequence[object] = (),
        locale: LocaleLike | None = None,
        *,
        default: str | None = None,
    ) -> str | None:
        """Return the formatted message, or None if it cannot be resolved."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class _Settings:
    """Snapshot of the configuration a single lookup works with."""

    basenames: tuple[Basename, ...]
    precedence: BasenamePrecedence
    common_messages: Mapping[str, str]
    parent: MessageSource | None
    use_code_as_default_message: bool
    default_locale: Locale | None


@dataclasses.dataclass(frozen=True, slots=True)
class _Request:
    codes: tuple[MessageCode, ...]
    args: tuple[object, ...]
    default: str | None
    render_default: bool


class ReloadableMessageSource:
    """Locale-aware message source backed by reloadable property bundles.

    Example - Disk-based bundles:
        >>> source = ReloadableMessageSource(
        ...     ["messages"], PathResourceResolver("i18n"),
        ...     default_locale="en", cache_seconds=30,
        ... )
        >>> source.get_message("greeting", ["Anna"], "pt_BR")
        'Olá, Anna!'
        >>> source.get_message("missing", locale="en", default="n/a")
        'n/a'

    Example - Deferred validation messages:
        >>> error = MessageSourceResolvable.of("required.email", "required",
        ...                                    default_message="Required")
        >>> source.get_message(error, locale="de")
        'Pflichtfeld'

    Thread-safe. Lookups run concurrently; setters take an exclusive lock.
    """

    __slots__ = (
        "_basenames",
        "_cache",
        "_common_messages",
        "_default_locale",
        "_fallback_to_system_locale",
        "_lock",
        "_on_fallback",
        "_parent",
        "_precedence",
        "_resolver",
        "_use_code_as_default_message",
    )

    def __init__(
        self,
        basenames: Iterable[Basename] = (),
        resolver: ResourceResolver | None = None,
        *,
        default_locale: LocaleLike | None = None,
        cache_seconds: float = CACHE_FOREVER,
        cache: CacheConfig | None = None,
        default_encoding: str = DEFAULT_ENCODING,
        file_encodings: Mapping[str, str] | None = None,
        fallback_to_system_locale: bool = False,
        use_code_as_default_message: bool = False,
        basename_precedence: BasenamePrecedence = BasenamePrecedence.BASENAME_FIRST,
        common_messages: Mapping[str, str] | None = None,
        parent: MessageSource | None = None,
        on_fallback: Callable[[FallbackInfo], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize message source.

        Args:
            basenames: Bundle families in precedence order (e.g., ['messages'])
            resolver: Resolver used to open bundle resources
            default_locale: Locale every fallback chain ends with
            cache_seconds: Seconds before cached bundles are re-validated.
                Negative caches forever, zero re-validates on every access.
            cache: Full cache configuration; mutually exclusive with a
                non-default ``cache_seconds``
            default_encoding: Encoding of bundle resources
            file_encodings: Per-resource encodings keyed by resource name
                without suffix (e.g., {'messages_ja': 'shift_jis'})
            fallback_to_system_locale: Use the OS locale when no default
                locale is configured
            use_code_as_default_message: Return the code instead of raising
                NoSuchMessageError when nothing resolves
            basename_precedence: Search order across multiple basenames
            common_messages: Locale-independent code -> pattern mapping
                consulted after all bundles
            parent: Source consulted for codes this source cannot resolve
            on_fallback: Callback invoked when a message resolves from a less
                specific resource than the requested locale's own
            clock: Monotonic time source used for cache expiry

        Raises:
            ValueError: If basenames are given without a resolver, a basename
                is empty, or both cache and cache_seconds are set
            LookupError: If an encoding is unknown
        """
        names = _normalize_basenames(basenames)
        if names and resolver is None:
            msg = "resolver required when basenames provided"
            raise ValueError(msg)
        if cache is not None and cache_seconds != CACHE_FOREVER:
            msg = "Pass either cache or cache_seconds, not both"
            raise ValueError(msg)

        config = cache if cache is not None else CacheConfig(cache_seconds=cache_seconds)

        self._basenames: tuple[Basename, ...] = names
        self._resolver = resolver
        self._default_locale = None if default_locale is None else Locale.parse(default_locale)
        self._fallback_to_system_locale = fallback_to_system_locale
        self._use_code_as_default_message = use_code_as_default_message
        self._precedence = BasenamePrecedence(basename_precedence)
        self._common_messages: Mapping[str, str] = MappingProxyType(dict(common_messages or {}))
        self._parent = parent
        self._on_fallback = on_fallback

        loader = BundleLoader(
            resolver if resolver is not None else MappingResourceResolver(),
            default_encoding=default_encoding,
            file_encodings=file_encodings,
        )
        self._cache = MessageCache(
            loader, config, default_locale=self._effective_default_locale(), clock=clock
        )

        # Lookups are readers; setters and teardown are writers.
        self._lock = RWLock()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def basenames(self) -> tuple[Basename, ...]:
        """Configured basenames in precedence order."""
        with self._lock.read():
            return self._basenames

    @property
    def default_locale(self) -> Locale | None:
        """Explicitly configured default locale (None if unset)."""
        with self._lock.read():
            return self._default_locale

    @property
    def effective_default_locale(self) -> Locale | None:
        """Locale every fallback chain ends with (None: root only)."""
        return self._cache.default_locale

    @property
    def cache_seconds(self) -> float:
        """Seconds before cached bundles are re-validated."""
        return self._cache.cache_seconds

    @property
    def parent(self) -> MessageSource | None:
        """Source consulted for codes this source cannot resolve."""
        with self._lock.read():
            return self._parent

    @property
    def common_messages(self) -> Mapping[str, str]:
        """Locale-independent messages (read-only view)."""
        with self._lock.read():
            return self._common_messages

    @property
    def basename_precedence(self) -> BasenamePrecedence:
        """Search order across multiple basenames."""
        with self._lock.read():
            return self._precedence

    @property
    def use_code_as_default_message(self) -> bool:
        """Whether unresolvable codes are returned instead of raising."""
        with self._lock.read():
            return self._use_code_as_default_message

    @property
    def fallback_to_system_locale(self) -> bool:
        """Whether the OS locale stands in for a missing default locale."""
        with self._lock.read():
            return self._fallback_to_system_locale

    @property
    def cache(self) -> MessageCache:
        """Underlying bundle cache."""
        return self._cache

    def set_basename(self, basename: Basename) -> None:
        """Replace all basenames with a single one."""
        self.set_basenames(basename)

    def set_basenames(self, *basenames: Basename) -> None:
        """Replace all basenames, in precedence order.

        Raises:
            ValueError: If a basename is empty, or no resolver is configured
        """
        names = _normalize_basenames(basenames)
        with self._lock.write():
            self._require_resolver(names)
            self._basenames = names

    def add_basenames(self, *basenames: Basename) -> None:
        """Append basenames after the existing ones (duplicates ignored).

        Raises:
            ValueError: If a basename is empty, or no resolver is configured
        """
        names = _normalize_basenames(basenames)
        with self._lock.write():
            self._require_resolver(names)
            self._basenames = tuple(dict.fromkeys(self._basenames + names))

    def set_default_locale(self, locale: LocaleLike | None) -> None:
        """Change the default locale. Drops all cached bundles."""
        with self._lock.write():
            self._default_locale = None if locale is None else Locale.parse(locale)
            self._cache.default_locale = self._effective_default_locale()
        logger.debug("Default locale set to '%s'", self._cache.default_locale)

    def set_cache_seconds(self, cache_seconds: float) -> None:
        """Change the re-validation TTL. Applies to existing entries.

        Raises:
            TypeError: If cache_seconds is not a number
        """
        with self._lock.write():
            self._cache.cache_seconds = cache_seconds

    def set_parent(self, parent: MessageSource | None) -> None:
        """Set the source consulted for unresolvable codes."""
        with self._lock.write():
            self._parent = parent

    def set_common_messages(self, common_messages: Mapping[str, str] | None) -> None:
        """Replace the locale-independent messages."""
        with self._lock.write():
            self._common_messages = MappingProxyType(dict(common_messages or {}))

    def _require_resolver(self, names: tuple[Basename, ...]) -> None:
        if names and self._resolver is None:
            msg = "resolver required when basenames provided"
            raise ValueError(msg)

    def _effective_default_locale(self) -> Locale | None:
        if self._default_locale is not None:
            return self._default_locale
        if self._fallback_to_system_locale:
            system = get_system_locale()
            return None if system.is_root else system
        return None

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return (
            f"ReloadableMessageSource(basenames={list(self._basenames)!r}, "
            f"default_locale='{self._cache.default_locale or ''}', "
            f"cache_seconds={self._cache.cache_seconds})"
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_message(
        self,
        code: CodeLike,
        args: Sequence[object] = (),
        locale: LocaleLike | None = None,
        *,
        default: str | None = None,
    ) -> str:
        """Resolve and format a message.

        Args:
            code: Code, codes in priority order, or a MessageSourceResolvable
                (which carries its own arguments and default)
            args: Positional arguments; MessageSourceResolvable arguments are
                resolved in the same locale first
            locale: Requested locale (None: the default locale)
            default: Pattern returned, formatted, when no code resolves

        Returns:
            Formatted message

        Raises:
            NoSuchMessageError: If nothing resolves and no default applies
            MessageFormatError: If the pattern does not match the arguments
        """
        request = _make_request(code, args, default)
        settings = self._settings()
        target = self._target_locale(locale, settings)

        message = self._resolve(request, target, settings)
        if message is not None:
            return message
        raise NoSuchMessageError(request.codes, str(target))

    def find_message(
        self,
        code: CodeLike,
        args: Sequence[object] = (),
        locale: LocaleLike | None = None,
        *,
        default: str | None = None,
    ) -> str | None:
        """Resolve and format a message; None instead of NoSuchMessageError.

        Raises:
            MessageFormatError: If the pattern does not match the arguments
        """
        request = _make_request(code, args, default)
        settings = self._settings()
        return self._resolve(request, self._target_locale(locale, settings), settings)

    def get_message_for(
        self, resolvable: MessageSourceResolvable, locale: LocaleLike | None = None
    ) -> str:
        """Resolve a MessageSourceResolvable. See get_message()."""
        return self.get_message(resolvable, locale=locale)

    def has_message(self, code: MessageCode, locale: LocaleLike | None = None) -> bool:
        """Check whether ``code`` resolves from this source's own bundles.

        Does not fire the on_fallback callback.
        """
        settings = self._settings()
        target = self._target_locale(locale, settings)
        return self._lookup(code, target, settings, notify=False) is not None

    def _settings(self) -> _Settings:
        with self._lock.read():
            return _Settings(
                basenames=self._basenames,
                precedence=self._precedence,
                common_messages=self._common_messages,
                parent=self._parent,
                use_code_as_default_message=self._use_code_as_default_message,
                default_locale=self._cache.default_locale,
            )

    @staticmethod
    def _target_locale(locale: LocaleLike | None, settings: _Settings) -> Locale:
        if locale is not None:
            return Locale.parse(locale)
        return settings.default_locale or Locale.ROOT

    def _resolve(self, request: _Request, locale: Locale, settings: _Settings) -> str | None:
        args = self._resolve_arguments(request.args, locale, settings)
        formatter = MessageFormatter(locale)

        for code in request.codes:
            pattern = self._lookup(code, locale, settings)
            if pattern is not None:
                return formatter.format(pattern, args)

        for code in request.codes:
            pattern = settings.common_messages.get(code)
            if pattern is not None:
                return formatter.format(pattern, args)

        if settings.parent is not None and request.codes:
            message = settings.parent.find_message(request.codes, args, locale)
            if message is not None:
                return message

        if request.default is not None:
            if request.render_default:
                return formatter.format(request.default, args)
            return request.default

        if settings.use_code_as_default_message and request.codes:
            return request.codes[0]

        logger.debug("No message for codes %s in locale '%s'", list(request.codes), locale)
        return None

    def _resolve_arguments(
        self, args: tuple[object, ...], locale: Locale, settings: _Settings
    ) -> tuple[object, ...]:
        if not any(isinstance(arg, MessageSourceResolvable) for arg in args):
            return args
        return tuple(
            self._resolve_argument(arg, locale, settings)
            if isinstance(arg, MessageSourceResolvable)
            else arg
            for arg in args
        )

    def _resolve_argument(
        self, arg: MessageSourceResolvable, locale: Locale, settings: _Settings
    ) -> str:
        message = self._resolve(_make_request(arg, (), None), locale, settings)
        if message is not None:
            return message
        # Unresolvable nested arguments render as their first code
        return arg.codes[0] if arg.codes else ""

    def _lookup(
        self,
        code: MessageCode,
        locale: Locale,
        settings: _Settings,
        *,
        notify: bool = True,
    ) -> str | None:
        """Find the raw pattern for ``code`` along the fallback chain."""
        if not settings.basenames:
            return None
        entries = [self._cache.get_entry(basename, locale) for basename in settings.basenames]

        # Chains may differ in length if the default locale changed between fetches
        match settings.precedence:
            case BasenamePrecedence.BASENAME_FIRST:
                candidates = (
                    (entry, index) for entry in entries for index in range(len(entry.chain))
                )
            case BasenamePrecedence.LOCALE_FIRST:
                depth = max(len(entry.chain) for entry in entries)
                candidates = (
                    (entry, index)
                    for index in range(depth)
                    for entry in entries
                    if index < len(entry.chain)
                )

        for entry, index in candidates:
            pattern = entry.layers[index].get(code)
            if pattern is not None:
                if index > 0 and notify:
                    self._notify_fallback(entry, entry.chain[index], code)
                return pattern
        return None

    def _notify_fallback(self, entry: CacheEntry, resolved: Locale, code: MessageCode) -> None:
        if self._on_fallback is None:
            return
        self._on_fallback(
            FallbackInfo(
                requested_locale=entry.locale,
                resolved_locale=resolved,
                basename=entry.basename,
                code=code,
            )
        )

    # ------------------------------------------------------------------
    # Lifecycle and diagnostics
    # ------------------------------------------------------------------

    def clear_cache(self) -> None:
        """Drop all cached bundles. The next lookup reloads them.

        Thread-safe via internal RWLock.
        """
        with self._lock.write():
            self._cache.clear()

    def clear_cache_including_ancestors(self) -> None:
        """Clear this source's cache and that of every reloadable ancestor."""
        self.clear_cache()
        parent = self.parent
        if isinstance(parent, ReloadableMessageSource):
            parent.clear_cache_including_ancestors()

    def close(self) -> None:
        """Release cached bundles."""
        self.clear_cache()

    def __enter__(self) -> ReloadableMessageSource:
        """Enter context manager.

        Returns:
            Self (the ReloadableMessageSource instance)
        """
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit context manager, dropping cached bundles. Does not suppress exceptions."""
        self.close()

    def get_cache_stats(self) -> dict[str, int | float | None]:
        """Get bundle cache statistics.

        Returns:
            MessageCache.get_stats() metrics plus:
            - basename_count (int): Number of configured basenames

        Example:
            >>> source.get_message("greeting", locale="en")
            >>> source.get_cache_stats()["loads"]
            1
        """
        stats = self._cache.get_stats()
        stats["basename_count"] = len(self.basenames)
        return stats

    def get_load_summary(
        self, basename: Basename | None = None, locale: LocaleLike | None = None
    ) -> LoadSummary:
        """Get the load results behind the bundles serving ``locale``.

        Loads the bundles if they are not cached yet.

        Args:
            basename: Bundle family (None: every configured basename)
            locale: Requested locale (None: the default locale)

        Returns:
            LoadSummary over every resource of the fallback chain

        Example:
            >>> summary = source.get_load_summary(locale="lv")
            >>> if summary.has_errors:
            ...     for result in summary.get_errors():
            ...         print(f"Failed: {result.source_path}: {result.error}")
        """
        settings = self._settings()
        target = self._target_locale(locale, settings)
        names = settings.basenames if basename is None else (basename,)
        return LoadSummary(
            results=tuple(
                result
                for name in names
                for result in self._cache.get_entry(name, target).load_results
            )
        )


def _normalize_basenames(basenames: Iterable[Basename]) -> tuple[Basename, ...]:
    if isinstance(basenames, str):
        basenames = (basenames,)
    names = []
    for basename in basenames:
        if not isinstance(basename, str) or not basename.strip():
            msg = f"Basename must be a non-empty string, got {basename!r}"
            raise ValueError(msg)
        names.append(basename.strip())
    return tuple(dict.fromkeys(names))


def _make_request(code: CodeLike, args: Sequence[object], default: str | None) -> _Request:
    match code:
        case MessageSourceResolvable():
            if args or default is not None:
                msg = "args and default come from the MessageSourceResolvable itself"
                raise TypeError(msg)
            return _Request(
                codes=code.codes,
                args=code.arguments,
                default=code.default_message,
                render_default=code.should_render_default_message(),
            )
        case str():
            codes: tuple[MessageCode, ...] = (code,)
        case _:
            codes = tuple(code)
    return _Request(codes=codes, args=tuple(args), default=default, render_default=True)
