"""Message source exception hierarchy with structured diagnostics.

All exceptions optionally store Diagnostic objects for rich error information.
Only NoSuchMessageError and MessageFormatError cross the public API; resource
absence and malformed property lines are absorbed by the loader.

Python 3.13+. Zero external dependencies.
"""

from collections.abc import Sequence

from .codes import Diagnostic, DiagnosticCode

__all__ = [
    "MessageFormatError",
    "MessageSourceError",
    "NoSuchMessageError",
    "ResourceNotFoundError",
    "ResourceTooLargeError",
]


class MessageSourceError(Exception):
    """Base exception for all message source errors.

    Attributes:
        diagnostic: Structured diagnostic information (optional)
    """

    def __init__(self, message: str | Diagnostic) -> None:
        """Initialize MessageSourceError.

        Args:
            message: Error message string OR Diagnostic object
        """
        if isinstance(message, Diagnostic):
            self.diagnostic: Diagnostic | None = message
            super().__init__(message.message)
        else:
            self.diagnostic = None
            super().__init__(message)


class NoSuchMessageError(MessageSourceError, LookupError):
    """No code resolved in any locale and no default message was given.

    Attributes:
        codes: The codes that were tried, in order
        locale: The requested locale (string form, "" for the root locale)
    """

    def __init__(self, codes: Sequence[str], locale: object) -> None:
        """Initialize NoSuchMessageError.

        Args:
            codes: Codes that were tried
            locale: Requested locale
        """
        self.codes: tuple[str, ...] = tuple(codes)
        self.locale = str(locale)
        shown = self.codes[-1] if self.codes else ""
        diagnostic = Diagnostic(
            code=DiagnosticCode.MESSAGE_NOT_FOUND,
            message=f"No message found under code '{shown}' for locale '{self.locale}'.",
            hint="Add the code to a bundle or pass a default message",
        )
        super().__init__(diagnostic)


class MessageFormatError(MessageSourceError, ValueError):
    """Placeholder substitution failed.

    Raised for an argument index beyond the supplied arguments and for
    malformed placeholders. Never swallowed: a half-rendered message must
    not be mistaken for a successful one.

    Attributes:
        pattern: The message pattern being rendered
        index: The offending argument index (None for malformed placeholders)
        argument_count: Number of arguments supplied
    """

    def __init__(
        self,
        message: str | Diagnostic,
        *,
        pattern: str = "",
        index: int | None = None,
        argument_count: int = 0,
    ) -> None:
        """Initialize MessageFormatError.

        Args:
            message: Error message string OR Diagnostic object
            pattern: The message pattern being rendered
            index: The offending argument index
            argument_count: Number of arguments supplied
        """
        super().__init__(message)
        self.pattern = pattern
        self.index = index
        self.argument_count = argument_count


class ResourceNotFoundError(FileNotFoundError):
    """Raised by resource resolvers when a resource path does not exist.

    Expected during normal operation (most locales have no file of their
    own); the bundle loader absorbs it and records a not-found result.
    """

    def __init__(self, path: str) -> None:
        """Initialize ResourceNotFoundError.

        Args:
            path: The resource path that could not be found
        """
        super().__init__(f"Resource not found: {path}")
        self.path = path


class ResourceTooLargeError(MessageSourceError, ValueError):
    """A resource exceeds the maximum accepted size.

    Attributes:
        limit: The size limit in bytes
    """

    def __init__(self, limit: int, resource: str | None = None) -> None:
        """Initialize ResourceTooLargeError.

        Args:
            limit: The size limit in bytes
            resource: Resource location, if known
        """
        diagnostic = Diagnostic(
            code=DiagnosticCode.RESOURCE_TOO_LARGE,
            message=f"Resource exceeds maximum size of {limit} bytes",
            hint="Split the bundle into several basenames",
            resource=resource,
        )
        super().__init__(diagnostic)
        self.limit = limit
