"""Diagnostic codes and data structures.

Defines error codes and structured diagnostic messages.
Python 3.13+. Zero external dependencies.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Literal

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
]


class DiagnosticCode(Enum):
    """Error codes with unique identifiers.

    Organized by category:
        1000-1999: Lookup errors (unresolvable message codes)
        2000-2999: Formatting errors (placeholder substitution)
        3000-3999: Syntax warnings (property file lines)
        4000-4999: Resource errors (resolver failures)
    """

    # Lookup errors (1000-1999)
    MESSAGE_NOT_FOUND = 1001

    # Formatting errors (2000-2999)
    ARGUMENT_INDEX_OUT_OF_RANGE = 2001
    PLACEHOLDER_MALFORMED = 2002
    PLACEHOLDER_UNTERMINATED = 2003

    # Syntax warnings (3000-3999)
    INVALID_UNICODE_ESCAPE = 3001
    EMPTY_KEY = 3002
    UNDECODABLE_BYTES = 3003

    # Resource errors (4000-4999)
    RESOURCE_NOT_FOUND = 4001
    RESOURCE_UNREADABLE = 4002
    RESOURCE_TOO_LARGE = 4003


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Structured diagnostic message.

    Attributes:
        code: Unique error code
        message: Human-readable error description
        hint: Suggestion for fixing the error
        resource: Resource path the diagnostic refers to (if any)
        line: 1-indexed line number inside the resource (if any)
        severity: Error severity level
    """

    code: DiagnosticCode
    message: str
    hint: str | None = None
    resource: str | None = None
    line: int | None = None
    severity: Literal["error", "warning"] = "error"

    def __str__(self) -> str:
        """Return human-readable error description."""
        return self.message

    def format_error(self) -> str:
        """Format diagnostic like a compiler message.

        Example output:
            error[MESSAGE_NOT_FOUND]: No message found under code 'title' for locale 'lv'
              --> messages_lv.properties:12
              = help: Add the code to the bundle or pass a default message

        Returns:
            Formatted error message
        """
        lines = [f"{self.severity}[{self.code.name}]: {_escape_control(self.message)}"]
        if self.resource is not None:
            location = self.resource if self.line is None else f"{self.resource}:{self.line}"
            lines.append(f"  --> {_escape_control(location)}")
        elif self.line is not None:
            lines.append(f"  --> line {self.line}")
        if self.hint:
            lines.append(f"  = help: {_escape_control(self.hint)}")
        return "\n".join(lines)


def _escape_control(text: str) -> str:
    """Escape line breaks so one diagnostic always renders as one block."""
    return text.replace("\r", "\\r").replace("\n", "\\n")
