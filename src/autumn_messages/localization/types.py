"""Type aliases for the localization domain.

Provides semantic type aliases used throughout the localization package
and by user code when annotating message source call sites.

Python 3.13+. Zero external dependencies.
"""

__all__ = [
    "Basename",
    "MessageCode",
    "ResourcePath",
    "Timestamp",
]

type Basename = str
"""Name of a bundle family (e.g., 'messages', 'i18n/errors')."""

type MessageCode = str
"""Key of a message inside a bundle (e.g., 'greeting', 'error.404')."""

type ResourcePath = str
"""Resolver-relative resource path (e.g., 'i18n/errors_pt_BR.properties')."""

type Timestamp = float
"""Resource modification time as reported by a resolver."""
