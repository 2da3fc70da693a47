"""Message source runtime package.

Provides the bundle cache, its configuration, positional message formatting
and the readers-writer lock guarding message source configuration.

Python 3.13+.
"""

from .cache import CacheEntry, MessageCache
from .cache_config import CacheConfig
from .formatter import MessageFormatter, compile_pattern, format_message, render_argument
from .rwlock import RWLock

__all__ = [
    "CacheConfig",
    "CacheEntry",
    "MessageCache",
    "MessageFormatter",
    "RWLock",
    "compile_pattern",
    "format_message",
    "render_argument",
]
