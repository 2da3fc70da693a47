"""Diagnostic system for message source errors.

Provides structured error diagnostics with codes, locations and hints.

Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic, DiagnosticCode
from .errors import (
    MessageFormatError,
    MessageSourceError,
    NoSuchMessageError,
    ResourceNotFoundError,
    ResourceTooLargeError,
)
from .validation import ParseWarning

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "MessageFormatError",
    "MessageSourceError",
    "NoSuchMessageError",
    "ParseWarning",
    "ResourceNotFoundError",
    "ResourceTooLargeError",
]
