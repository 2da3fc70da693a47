"""Shared constants for autumn-messages.

Centralized configuration constants used across the syntax, runtime and
localization packages. Placing constants here avoids circular imports and
provides a single source of truth.

Constants are grouped by domain:
- Resource naming: file suffixes and encodings for property bundles
- Cache limits: TTL sentinels and memory bounds for caching subsystems
- Input limits: size constraints on loaded resources
- Rendering: fixed strings used by the message formatter

Python 3.13+. Zero external dependencies.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Resource naming
    "PROPERTIES_SUFFIX",
    "DEFAULT_ENCODING",
    # Cache limits
    "CACHE_FOREVER",
    "DEFAULT_PATTERN_CACHE_SIZE",
    "MAX_LOCALE_CACHE_SIZE",
    # Input limits
    "MAX_RESOURCE_SIZE",
    # Rendering
    "NULL_ARGUMENT",
]

# ============================================================================
# RESOURCE NAMING
# ============================================================================

# File extension appended to "<basename>[_<locale>]" to build resource paths.
PROPERTIES_SUFFIX: str = ".properties"

# Encoding used for property files unless overridden per file.
DEFAULT_ENCODING: str = "utf-8"

# ============================================================================
# CACHE LIMITS
# ============================================================================

# cache_seconds value meaning "load once, never re-validate".
# Any negative number has the same effect; -1 is the canonical spelling.
CACHE_FOREVER: int = -1

# Maximum compiled message patterns kept by the formatter.
# A typical application has a few hundred distinct patterns.
DEFAULT_PATTERN_CACHE_SIZE: int = 1024

# Maximum memoized Babel locale lookups.
# 128 covers typical multi-region applications (major locales + variants).
MAX_LOCALE_CACHE_SIZE: int = 128

# ============================================================================
# INPUT LIMITS
# ============================================================================

# Maximum resource size in bytes (10 MB).
# Prevents unbounded memory allocation from oversized property files.
MAX_RESOURCE_SIZE: int = 10 * 1024 * 1024

# ============================================================================
# RENDERING
# ============================================================================

# Text substituted for a None argument.
NULL_ARGUMENT: str = "null"
