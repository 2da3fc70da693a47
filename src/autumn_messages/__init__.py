"""autumn-messages - Reloadable, locale-aware message resolution.

Resolves a message code plus a locale to a formatted string. Messages live in
flat ``key=value`` property bundles named per locale; parsed bundles stay hot
in memory and are periodically re-validated against their resources without
blocking concurrent readers.

Public API:
    ReloadableMessageSource - Message lookup with locale fallback and reloading
    MessageSourceResolvable - Codes + arguments + default message
    Locale - (language, country, variant) value type
    PathResourceResolver - Bundles from a directory
    PackageResourceResolver - Bundles shipped as package data
    MappingResourceResolver - In-memory bundles
    CacheConfig - Cache refresh policy and size bound
    format_message - Positional ``{n}`` formatting

Exceptions:
    MessageSourceError - Base exception class
    NoSuchMessageError - No code resolved and no default applied
    MessageFormatError - Pattern does not match its arguments

Submodules:
    autumn_messages.syntax - Property resource parser
    autumn_messages.localization - Fallback chains, loading, message source
    autumn_messages.runtime - Bundle cache, formatter, RWLock
    autumn_messages.diagnostics - Error types, diagnostic codes, parse warnings
"""

# Essential Public API - Minimal exports for clean namespace
from .diagnostics import (
    MessageFormatError,
    MessageSourceError,
    NoSuchMessageError,
)
from .locale_utils import Locale, get_system_locale
from .localization import (
    BasenamePrecedence,
    MappingResourceResolver,
    MessageSourceResolvable,
    PackageResourceResolver,
    PathResourceResolver,
    ReloadableMessageSource,
)
from .runtime import CacheConfig, format_message

# Version information - Auto-populated from package metadata
# SINGLE SOURCE OF TRUTH: pyproject.toml [project] version
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

try:
    __version__ = _get_version("autumn-messages")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

# Encoding of property bundles unless configured otherwise
__recommended_encoding__ = "UTF-8"

__all__ = [
    "BasenamePrecedence",
    "CacheConfig",
    "Locale",
    "MappingResourceResolver",
    "MessageFormatError",
    "MessageSourceError",
    "MessageSourceResolvable",
    "NoSuchMessageError",
    "PackageResourceResolver",
    "PathResourceResolver",
    "ReloadableMessageSource",
    "__recommended_encoding__",
    "__version__",
    "format_message",
    "get_system_locale",
]
