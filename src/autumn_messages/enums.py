"""Enumerations for autumn-messages type-safe constants.

Uses StrEnum (Python 3.11+) for automatic string conversion.
StrEnum members are strings themselves, eliminating boilerplate __str__ methods.

Python 3.13+.
"""

from enum import StrEnum


class LoadStatus(StrEnum):
    """Outcome of loading one property resource.

    StrEnum provides automatic string conversion: str(LoadStatus.SUCCESS) == "success"
    """

    SUCCESS = "success"
    """Resource found and parsed (possibly with skipped lines)."""

    NOT_FOUND = "not_found"
    """Resource does not exist. Expected for locales without their own file."""

    ERROR = "error"
    """Resource exists but could not be read (I/O error, timeout)."""


class EntryState(StrEnum):
    """Lifecycle state of one message cache key.

    StrEnum provides automatic string conversion: str(EntryState.FRESH) == "fresh"
    """

    MISSING = "missing"
    """No entry has been loaded for the key yet."""

    LOADING = "loading"
    """A load or revalidation is in flight for the key."""

    FRESH = "fresh"
    """Entry is within its time-to-live window."""

    STALE = "stale"
    """Entry outlived its time-to-live; still servable, re-validated on access."""


class BasenamePrecedence(StrEnum):
    """Search order when several basenames are configured.

    StrEnum provides automatic string conversion:
    str(BasenamePrecedence.BASENAME_FIRST) == "basename_first"
    """

    BASENAME_FIRST = "basename_first"
    """Search the full locale chain of a basename before trying the next basename."""

    LOCALE_FIRST = "locale_first"
    """For each locale in the chain, try every basename before the next locale."""


__all__ = [
    "BasenamePrecedence",
    "EntryState",
    "LoadStatus",
]
