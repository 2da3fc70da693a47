"""Self-describing message requests.

A MessageSourceResolvable bundles everything needed to resolve one message:
candidate codes, arguments and an optional default. Validation errors and
other deferred messages are typically passed around in this form and
resolved once the target locale is known.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from autumn_messages.localization.types import MessageCode

__all__ = ["MessageSourceResolvable"]


@dataclass(frozen=True, slots=True)
class MessageSourceResolvable:
    """Codes, arguments and default message for one lookup.

    Codes are tried in order; the first one found wins. Arguments may
    themselves be MessageSourceResolvable instances, which are resolved in
    the same locale before substitution.

    Example:
        >>> error = MessageSourceResolvable(
        ...     codes=("required.user.email", "required"),
        ...     arguments=(MessageSourceResolvable.of("field.email"),),
        ...     default_message="This field is required",
        ... )
        >>> error.code
        'required'

    Attributes:
        codes: Candidate codes, most specific first
        arguments: Positional arguments for the message pattern
        default_message: Fallback used when no code resolves (None: none)
    """

    codes: tuple[MessageCode, ...] = ()
    arguments: tuple[object, ...] = ()
    default_message: str | None = None

    def __post_init__(self) -> None:
        """Normalize codes and arguments to tuples.

        Raises:
            TypeError: If codes contains a non-string
            ValueError: If neither codes nor a default message is given
        """
        codes = (self.codes,) if isinstance(self.codes, str) else tuple(self.codes)
        if not all(isinstance(code, str) for code in codes):
            msg = f"Message codes must be strings, got {codes!r}"
            raise TypeError(msg)
        if not codes and self.default_message is None:
            msg = "A resolvable needs at least one code or a default message"
            raise ValueError(msg)
        object.__setattr__(self, "codes", codes)
        object.__setattr__(self, "arguments", tuple(self.arguments))

    @classmethod
    def of(
        cls,
        *codes: MessageCode,
        arguments: Sequence[object] = (),
        default_message: str | None = None,
    ) -> MessageSourceResolvable:
        """Build a resolvable from positional codes."""
        return cls(codes=codes, arguments=tuple(arguments), default_message=default_message)

    @property
    def code(self) -> MessageCode | None:
        """The least specific code (the last one), or None if there are none."""
        return self.codes[-1] if self.codes else None

    def should_render_default_message(self) -> bool:
        """Whether the default message is a pattern to be formatted with the arguments.

        Subclasses carrying pre-rendered defaults return False to have the
        default returned verbatim.
        """
        return True

    def __str__(self) -> str:
        codes = ",".join(self.codes)
        arguments = ",".join(str(arg) for arg in self.arguments)
        return (
            f"{type(self).__name__}: codes [{codes}]; arguments [{arguments}]; "
            f"default message [{self.default_message}]"
        )
