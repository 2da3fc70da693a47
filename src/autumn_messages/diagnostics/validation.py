"""Non-fatal parse feedback for property resources.

A malformed line inside a property file is skipped and recorded as a
ParseWarning instead of invalidating the whole bundle.

Python 3.13+.
"""

from dataclasses import dataclass

from .codes import Diagnostic, DiagnosticCode

__all__ = ["ParseWarning"]


# Maximum content length before truncation when sanitizing
_SANITIZE_MAX_CONTENT_LENGTH: int = 100


@dataclass(frozen=True, slots=True)
class ParseWarning:
    """Structured warning for a skipped property line.

    Attributes:
        code: Diagnostic code describing the problem
        message: Human-readable warning message
        line: 1-indexed line number where the logical line starts
            (0 for whole-resource problems such as undecodable bytes)
        content: The raw logical line that was skipped
        source_path: Resource the line came from (if known)

    Security Note:
        The `content` field may contain message text that should not be
        exposed in shared logs. Use format(sanitize=True) to truncate or
        redact it.
    """

    code: DiagnosticCode
    message: str
    line: int
    content: str = ""
    source_path: str | None = None

    def format(
        self,
        *,
        sanitize: bool = False,
        redact_content: bool = False,
    ) -> str:
        """Format warning as human-readable string.

        Args:
            sanitize: If True, truncate content to prevent information leakage.
            redact_content: If True (and sanitize=True), completely redact
                           content instead of truncating.

        Returns:
            Formatted warning string with optional content sanitization.
        """
        if sanitize:
            if redact_content:
                content_display = "[content redacted]"
            elif len(self.content) > _SANITIZE_MAX_CONTENT_LENGTH:
                content_display = self.content[:_SANITIZE_MAX_CONTENT_LENGTH] + "..."
            else:
                content_display = self.content
        else:
            content_display = self.content

        location = self.source_path or "<string>"
        text = f"[{self.code.name}] {location}:{self.line}: {self.message}"
        if content_display:
            text += f" (content: {content_display!r})"
        return text

    def to_diagnostic(self) -> Diagnostic:
        """Convert to a warning-severity Diagnostic."""
        return Diagnostic(
            code=self.code,
            message=self.message,
            resource=self.source_path,
            line=self.line or None,
            severity="warning",
        )
