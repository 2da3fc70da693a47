"""Resource loading infrastructure for message bundles.

Provides the protocol through which bundles are fetched, three resolver
implementations, and the loader that turns one (basename, locale) pair into
a parsed RawBundle.

Components:
    ResourceResolver - Protocol for opening resources by path (structural typing)
    PathResourceResolver - Disk-based resolver with path-traversal prevention
    PackageResourceResolver - Package data via importlib.resources
    MappingResourceResolver - In-memory resolver for embedding and tests
    BundleLoader - basename + locale -> ResourceLoadResult
    RawBundle - Immutable parsed content of one resource
    ResourceLoadResult - Immutable result of a single load attempt
    LoadSummary - Immutable aggregate of load results

Python 3.13+.
"""

from __future__ import annotations

import codecs
import io
import logging
import os
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, BinaryIO, Protocol

from autumn_messages.constants import DEFAULT_ENCODING, MAX_RESOURCE_SIZE, PROPERTIES_SUFFIX
from autumn_messages.diagnostics import (
    Diagnostic,
    DiagnosticCode,
    MessageSourceError,
    ParseWarning,
    ResourceNotFoundError,
    ResourceTooLargeError,
)
from autumn_messages.enums import LoadStatus
from autumn_messages.localization.types import Basename, ResourcePath, Timestamp
from autumn_messages.syntax import parse_properties

if TYPE_CHECKING:
    from types import TracebackType

    from autumn_messages.locale_utils import Locale

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Protocol and resolvers
    "OpenedResource",
    "ResourceResolver",
    "PathResourceResolver",
    "PackageResourceResolver",
    "MappingResourceResolver",
    "UNKNOWN_TIMESTAMP",
    "drain",
    # Loader
    "BundleLoader",
    "RawBundle",
    # Load result types
    "FallbackInfo",
    "ResourceLoadResult",
    "LoadSummary",
]

logger = logging.getLogger(__name__)

# Timestamp for resources that exist but cannot report a modification time
# (e.g. package data inside a zip). Such resources never look changed.
UNKNOWN_TIMESTAMP: Timestamp = 0.0


@dataclass(frozen=True, slots=True)
class OpenedResource:
    """An open resource stream plus its modification time.

    Usable as a context manager; the stream is closed on exit.

    Attributes:
        stream: Binary stream positioned at the start of the resource
        last_modified: Modification time, or UNKNOWN_TIMESTAMP
    """

    stream: BinaryIO
    last_modified: Timestamp = UNKNOWN_TIMESTAMP

    def __enter__(self) -> OpenedResource:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.stream.close()


class ResourceResolver(Protocol):
    """Protocol for opening resources by path.

    Implementations must provide open(); last_modified() and describe()
    are optional. Subclasses may override them with cheaper or more
    descriptive versions, and BundleLoader applies the defaults below to
    resolvers that define open() alone. A resolver that enforces its own
    I/O timeout should raise TimeoutError; the loader treats it like any
    other read failure and retries after the cache TTL (never, when
    entries do not expire).

    This is a Protocol (structural typing) rather than ABC to allow
    maximum flexibility for users implementing custom resolvers.

    Example:
        >>> class HttpResolver:
        ...     def open(self, path: str) -> OpenedResource:
        ...         response = fetch(f"https://cdn.example.com/{path}")
        ...         if response.status == 404:
        ...             raise ResourceNotFoundError(path)
        ...         return OpenedResource(io.BytesIO(response.body), response.mtime)
        ...     def last_modified(self, path: str) -> float | None:
        ...         return head(f"https://cdn.example.com/{path}").mtime
        ...     def describe(self, path: str) -> str:
        ...         return f"https://cdn.example.com/{path}"
    """

    def open(self, path: ResourcePath) -> OpenedResource:
        """Open the resource at ``path``.

        Args:
            path: Resolver-relative path (e.g., 'messages_en.properties')

        Returns:
            OpenedResource with stream and modification time

        Raises:
            ResourceNotFoundError: If the resource does not exist
            OSError: If the resource cannot be read (TimeoutError included)
        """

    def last_modified(self, path: ResourcePath) -> Timestamp | None:
        """Return the modification time of ``path``, or None if absent.

        The default implementation opens and closes the resource.

        Raises:
            OSError: If the resource cannot be inspected
        """
        try:
            with self.open(path) as resource:
                return resource.last_modified
        except FileNotFoundError:
            return None

    def describe(self, path: ResourcePath) -> str:
        """Return human-readable location for diagnostics."""
        return path


def drain(stream: BinaryIO, limit: int = MAX_RESOURCE_SIZE) -> bytes:
    """Read a binary stream to the end.

    Args:
        stream: Stream to read
        limit: Maximum accepted size in bytes

    Returns:
        All bytes of the stream

    Raises:
        ResourceTooLargeError: If the stream holds more than ``limit`` bytes
    """
    data = stream.read(limit + 1)
    if len(data) > limit:
        raise ResourceTooLargeError(limit)
    return data


def _validate_path(path: ResourcePath) -> None:
    """Reject absolute paths and traversal sequences.

    Raises:
        ValueError: If path contains unsafe components
    """
    if not path or path != path.strip():
        msg = f"Resource path must be non-empty without surrounding whitespace: {path!r}"
        raise ValueError(msg)
    if Path(path).is_absolute() or path.startswith(("/", "\\")):
        msg = f"Absolute paths not allowed: '{path}'"
        raise ValueError(msg)
    if ".." in Path(path).parts or ".." in path.split("\\"):
        msg = f"Path traversal sequences not allowed: '{path}'"
        raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class PathResourceResolver:
    """File system resolver rooted at a directory.

    Modification times come from the file system (``st_mtime``).

    Security:
        Rejects absolute paths and ``..`` components, and verifies every
        resolved path stays within the root directory (symlinks included).

    Example:
        >>> resolver = PathResourceResolver("locales")
        >>> resolver.open("messages_en.properties")
        # Opens: locales/messages_en.properties

    Attributes:
        root_dir: Directory resource paths are relative to
    """

    root_dir: str | os.PathLike[str]
    _resolved_root: Path = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_resolved_root", Path(self.root_dir).resolve())

    def _full_path(self, path: ResourcePath) -> Path:
        _validate_path(path)
        full_path = (self._resolved_root / path).resolve()
        if not full_path.is_relative_to(self._resolved_root):
            msg = f"Path traversal detected: '{path}' escapes root directory"
            raise ValueError(msg)
        return full_path

    def open(self, path: ResourcePath) -> OpenedResource:
        """Open ``root_dir/path`` for binary reading.

        Raises:
            ResourceNotFoundError: If the file does not exist
            ValueError: If path is unsafe
            OSError: If the file cannot be read
        """
        full_path = self._full_path(path)
        try:
            stream = full_path.open("rb")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise ResourceNotFoundError(path) from e
        try:
            mtime = os.fstat(stream.fileno()).st_mtime
        except OSError:
            stream.close()
            raise
        return OpenedResource(stream, mtime)

    def last_modified(self, path: ResourcePath) -> Timestamp | None:
        """Stat ``root_dir/path``; None if it is not a regular file."""
        full_path = self._full_path(path)
        try:
            stat = full_path.stat()
        except (FileNotFoundError, NotADirectoryError):
            return None
        return stat.st_mtime if full_path.is_file() else None

    def describe(self, path: ResourcePath) -> str:
        """Return the file system location for diagnostics."""
        return str(Path(self.root_dir) / path)


@dataclass(frozen=True, slots=True)
class PackageResourceResolver:
    """Resolver for data files shipped inside an importable package.

    Uses importlib.resources, so bundles work from wheels, zip imports and
    source checkouts alike. Files on a real file system report their
    ``st_mtime``; files inside archives report UNKNOWN_TIMESTAMP.

    Example:
        >>> resolver = PackageResourceResolver("myapp", "i18n")
        >>> resolver.open("messages_en.properties")
        # Opens: myapp/i18n/messages_en.properties

    Attributes:
        package: Dotted package name
        directory: Subdirectory inside the package ('' for the package root)
    """

    package: str
    directory: str = ""

    def _traversable(self, path: ResourcePath) -> resources.abc.Traversable:
        _validate_path(path)
        node = resources.files(self.package)
        for part in Path(self.directory, path).parts:
            node = node.joinpath(part)
        return node

    def open(self, path: ResourcePath) -> OpenedResource:
        """Open package data ``directory/path``.

        Raises:
            ResourceNotFoundError: If no such data file exists
            ValueError: If path is unsafe
        """
        node = self._traversable(path)
        if not node.is_file():
            raise ResourceNotFoundError(path)
        return OpenedResource(node.open("rb"), _traversable_mtime(node))

    def last_modified(self, path: ResourcePath) -> Timestamp | None:
        """Return the data file's mtime, UNKNOWN_TIMESTAMP, or None if absent."""
        node = self._traversable(path)
        if not node.is_file():
            return None
        return _traversable_mtime(node)

    def describe(self, path: ResourcePath) -> str:
        """Return a package-qualified location for diagnostics."""
        return f"{self.package}:{Path(self.directory, path).as_posix()}"


def _traversable_mtime(node: resources.abc.Traversable) -> Timestamp:
    if isinstance(node, Path):
        return node.stat().st_mtime
    return UNKNOWN_TIMESTAMP


class MappingResourceResolver:
    """In-memory resolver backed by a path -> content mapping.

    Every put() or remove() advances a revision counter that serves as the
    resource modification time, so cache revalidation notices changes
    without real file system timestamps.

    Thread-safe.

    Example:
        >>> resolver = MappingResourceResolver({"messages_en.properties": "hi=Hello"})
        >>> resolver.put("messages_lv.properties", "hi=Sveiki")
    """

    __slots__ = ("_contents", "_lock", "_revision")

    def __init__(self, contents: Mapping[ResourcePath, bytes | str] | None = None) -> None:
        """Initialize resolver.

        Args:
            contents: Initial path -> content mapping (str is stored as UTF-8)
        """
        self._lock = threading.Lock()
        self._revision = 0
        self._contents: dict[ResourcePath, tuple[bytes, Timestamp]] = {}
        for path, content in (contents or {}).items():
            self.put(path, content)

    def put(self, path: ResourcePath, content: bytes | str) -> None:
        """Create or replace a resource."""
        _validate_path(path)
        data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        with self._lock:
            self._revision += 1
            self._contents[path] = (data, float(self._revision))

    def remove(self, path: ResourcePath) -> None:
        """Delete a resource if present."""
        with self._lock:
            self._revision += 1
            self._contents.pop(path, None)

    def open(self, path: ResourcePath) -> OpenedResource:
        """Open an in-memory resource.

        Raises:
            ResourceNotFoundError: If no content is stored under ``path``
        """
        with self._lock:
            stored = self._contents.get(path)
        if stored is None:
            raise ResourceNotFoundError(path)
        data, revision = stored
        return OpenedResource(io.BytesIO(data), revision)

    def last_modified(self, path: ResourcePath) -> Timestamp | None:
        """Return the revision at which ``path`` was last written."""
        with self._lock:
            stored = self._contents.get(path)
        return None if stored is None else stored[1]

    def describe(self, path: ResourcePath) -> str:
        """Return a memory-qualified location for diagnostics."""
        return f"memory:{path}"

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._contents


@dataclass(frozen=True, slots=True)
class RawBundle:
    """Parsed content of exactly one basename + locale resource.

    Attributes:
        basename: Bundle family name
        locale: Locale the resource belongs to (Locale.ROOT for the root file)
        path: Resolver-relative resource path
        entries: Read-only key -> value mapping
        last_modified: Modification time reported by the resolver
        warnings: Lines skipped while parsing
    """

    basename: Basename
    locale: Locale
    path: ResourcePath
    entries: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    last_modified: Timestamp = UNKNOWN_TIMESTAMP
    warnings: tuple[ParseWarning, ...] = ()


@dataclass(frozen=True, slots=True)
class FallbackInfo:
    """Information about a locale fallback event.

    Provided to the on_fallback callback when ReloadableMessageSource
    resolves a message from a less specific resource than the requested
    locale's own.

    Attributes:
        requested_locale: Most specific locale of the fallback chain
        resolved_locale: Locale whose resource contained the message
            (Locale.ROOT for the root resource)
        basename: Bundle family the message was found in
        code: The message code that was resolved

    Example:
        >>> def log_fallback(info: FallbackInfo) -> None:
        ...     print(f"Fallback: {info.code} resolved from "
        ...           f"'{info.resolved_locale}' (requested '{info.requested_locale}')")
        >>> source = ReloadableMessageSource(["messages"], resolver, on_fallback=log_fallback)
    """

    requested_locale: Locale
    resolved_locale: Locale
    basename: Basename
    code: str


@dataclass(frozen=True, slots=True)
class ResourceLoadResult:
    """Result of loading a single property resource.

    Attributes:
        basename: Bundle family name
        locale: Locale the resource was requested for
        path: Resolver-relative resource path
        status: Load status (success, not_found, error)
        bundle: Parsed bundle if status is SUCCESS, None otherwise
        error: Exception if status is ERROR, None otherwise
        source_path: Human-readable location reported by the resolver
    """

    basename: Basename
    locale: Locale
    path: ResourcePath
    status: LoadStatus
    bundle: RawBundle | None = None
    error: Exception | None = None
    source_path: str | None = None

    @property
    def is_success(self) -> bool:
        """Check if resource loaded successfully."""
        return self.status == LoadStatus.SUCCESS

    @property
    def is_not_found(self) -> bool:
        """Check if resource was not found (expected for most locales)."""
        return self.status == LoadStatus.NOT_FOUND

    @property
    def is_error(self) -> bool:
        """Check if resource load failed with an error."""
        return self.status == LoadStatus.ERROR

    @property
    def last_modified(self) -> Timestamp | None:
        """Modification time of the loaded resource; None unless successful."""
        return None if self.bundle is None else self.bundle.last_modified

    @property
    def warnings(self) -> tuple[ParseWarning, ...]:
        """Parse warnings of the loaded resource."""
        return () if self.bundle is None else self.bundle.warnings

    @property
    def diagnostic(self) -> Diagnostic | None:
        """Diagnostic describing a missing or failed load; None on success."""
        match self.status:
            case LoadStatus.SUCCESS:
                return None
            case LoadStatus.NOT_FOUND:
                return Diagnostic(
                    code=DiagnosticCode.RESOURCE_NOT_FOUND,
                    message=f"Resource not found: {self.path}",
                    resource=self.source_path,
                    severity="warning",
                )
        if isinstance(self.error, MessageSourceError) and self.error.diagnostic is not None:
            return replace(self.error.diagnostic, resource=self.source_path)
        return Diagnostic(
            code=DiagnosticCode.RESOURCE_UNREADABLE,
            message=f"Cannot read resource: {self.error}",
            hint="The load is retried once the cached bundle goes stale",
            resource=self.source_path,
        )


@dataclass(frozen=True, slots=True)
class LoadSummary:
    """Immutable aggregate of resource load results.

    All statistics are computed properties derived from the ``results``
    tuple.

    Example:
        >>> summary = source.get_load_summary("messages", "lv")
        >>> if summary.has_errors:
        ...     for result in summary.get_errors():
        ...         print(f"Failed: {result.source_path}: {result.error}")
    """

    results: tuple[ResourceLoadResult, ...]

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return (
            f"LoadSummary(total={self.total_attempted}, "
            f"ok={self.successful}, "
            f"not_found={self.not_found}, "
            f"errors={self.errors}, "
            f"warnings={self.warning_count})"
        )

    @property
    def total_attempted(self) -> int:
        """Total number of load attempts."""
        return len(self.results)

    @property
    def successful(self) -> int:
        """Number of successful loads."""
        return sum(1 for r in self.results if r.is_success)

    @property
    def not_found(self) -> int:
        """Number of resources not found."""
        return sum(1 for r in self.results if r.is_not_found)

    @property
    def errors(self) -> int:
        """Number of load errors."""
        return sum(1 for r in self.results if r.is_error)

    @property
    def warning_count(self) -> int:
        """Total number of skipped lines across all resources."""
        return sum(len(r.warnings) for r in self.results)

    def get_errors(self) -> tuple[ResourceLoadResult, ...]:
        """Get all results with errors."""
        return tuple(r for r in self.results if r.is_error)

    def get_not_found(self) -> tuple[ResourceLoadResult, ...]:
        """Get all results where resource was not found."""
        return tuple(r for r in self.results if r.is_not_found)

    def get_successful(self) -> tuple[ResourceLoadResult, ...]:
        """Get all successful load results."""
        return tuple(r for r in self.results if r.is_success)

    def get_all_warnings(self) -> tuple[ParseWarning, ...]:
        """Get all parse warnings across all resources, in load order."""
        return tuple(w for r in self.results for w in r.warnings)

    @property
    def has_errors(self) -> bool:
        """Check if any resources failed to load with errors."""
        return self.errors > 0

    @property
    def has_warnings(self) -> bool:
        """Check if any resource had skipped lines."""
        return self.warning_count > 0


class BundleLoader:
    """Loads one basename + locale resource through a ResourceResolver.

    Resource names follow ``<basename>[_<locale>].properties`` where the
    locale part is ``str(locale)`` (``pt_BR``, ``de__POSIX``); the root
    locale maps to ``<basename>.properties``.

    Absence is not an error: a missing resource yields a NOT_FOUND result.
    Read failures (including resolver timeouts) yield an ERROR result and
    are logged. Malformed lines are skipped and logged as warnings.

    Thread-safe: the loader holds no mutable state.
    """

    __slots__ = ("_default_encoding", "_file_encodings", "_resolver")

    def __init__(
        self,
        resolver: ResourceResolver,
        *,
        default_encoding: str = DEFAULT_ENCODING,
        file_encodings: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize loader.

        Args:
            resolver: Resolver used to open resources
            default_encoding: Encoding for resources without an override
            file_encodings: Per-resource encodings keyed by resource name
                without the ``.properties`` suffix (e.g., 'messages_ja')

        Raises:
            LookupError: If an encoding is not a known codec
        """
        codecs.lookup(default_encoding)
        for encoding in (file_encodings or {}).values():
            codecs.lookup(encoding)

        self._resolver = resolver
        self._default_encoding = default_encoding
        self._file_encodings: Mapping[str, str] = MappingProxyType(dict(file_encodings or {}))

    @property
    def resolver(self) -> ResourceResolver:
        """Resolver used to open resources."""
        return self._resolver

    @staticmethod
    def resource_name(basename: Basename, locale: Locale) -> str:
        """Return the resource name without suffix (e.g., 'messages_pt_BR')."""
        suffix = str(locale)
        return f"{basename}_{suffix}" if suffix else basename

    @classmethod
    def resource_path(cls, basename: Basename, locale: Locale) -> ResourcePath:
        """Return the resource path (e.g., 'messages_pt_BR.properties')."""
        return cls.resource_name(basename, locale) + PROPERTIES_SUFFIX

    def encoding_for(self, basename: Basename, locale: Locale) -> str:
        """Return the encoding used for the given resource."""
        return self._file_encodings.get(
            self.resource_name(basename, locale), self._default_encoding
        )

    def load(self, basename: Basename, locale: Locale) -> ResourceLoadResult:
        """Load and parse the resource for ``basename`` and ``locale``.

        Args:
            basename: Bundle family name
            locale: Locale candidate (Locale.ROOT for the root resource)

        Returns:
            ResourceLoadResult indicating success, not_found, or error
        """
        path = self.resource_path(basename, locale)
        source_path = self._describe(path)

        try:
            with self._resolver.open(path) as resource:
                data = drain(resource.stream)
                last_modified = resource.last_modified
        except FileNotFoundError:
            logger.debug("No resource %s", source_path)
            return ResourceLoadResult(
                basename=basename,
                locale=locale,
                path=path,
                status=LoadStatus.NOT_FOUND,
                source_path=source_path,
            )
        except (OSError, ValueError) as e:
            # Timeouts, permission errors, oversized resources, unsafe paths
            logger.warning("Failed to load resource %s: %s", source_path, e)
            return ResourceLoadResult(
                basename=basename,
                locale=locale,
                path=path,
                status=LoadStatus.ERROR,
                error=e,
                source_path=source_path,
            )

        parsed = parse_properties(
            data, encoding=self.encoding_for(basename, locale), source_path=source_path
        )
        for warning in parsed.warnings:
            logger.warning("Skipped property line: %s", warning.format(sanitize=True))

        bundle = RawBundle(
            basename=basename,
            locale=locale,
            path=path,
            entries=parsed.entries,
            last_modified=last_modified,
            warnings=parsed.warnings,
        )
        logger.debug("Loaded %d entries from %s", len(bundle.entries), source_path)
        return ResourceLoadResult(
            basename=basename,
            locale=locale,
            path=path,
            status=LoadStatus.SUCCESS,
            bundle=bundle,
            source_path=source_path,
        )

    def stat(self, basename: Basename, locale: Locale) -> Timestamp | None:
        """Return the current modification time of a resource.

        Cheap compared to load(); used to decide whether a cached bundle
        must be re-read. Failures are reported as absence.

        Returns:
            Modification time, or None if absent or unreadable
        """
        path = self.resource_path(basename, locale)
        try:
            return self._last_modified(path)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.debug("Cannot stat %s: %s", self._describe(path), e)
            return None

    def _describe(self, path: ResourcePath) -> str:
        # Structural resolvers need not inherit the Protocol defaults
        describe = getattr(self._resolver, "describe", None)
        if describe is None:
            return ResourceResolver.describe(self._resolver, path)
        return describe(path)

    def _last_modified(self, path: ResourcePath) -> Timestamp | None:
        last_modified = getattr(self._resolver, "last_modified", None)
        if last_modified is None:
            return ResourceResolver.last_modified(self._resolver, path)
        return last_modified(path)
