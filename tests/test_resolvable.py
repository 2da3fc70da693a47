"""Tests for MessageSourceResolvable."""

import dataclasses

import pytest
from hypothesis import given
from hypothesis import strategies as st

from autumn_messages.localization.resolvable import MessageSourceResolvable
from tests.strategies import message_codes


class TestMessageSourceResolvable:
    """Construction, normalization and rendering."""

    def test_of(self) -> None:
        """of() takes codes positionally."""
        resolvable = MessageSourceResolvable.of(
            "required.email", "required", arguments=["email"], default_message="Required"
        )
        assert resolvable.codes == ("required.email", "required")
        assert resolvable.arguments == ("email",)
        assert resolvable.default_message == "Required"

    def test_single_code_string(self) -> None:
        """A bare string is one code, not a sequence of characters."""
        resolvable = MessageSourceResolvable(codes="title")  # type: ignore[arg-type]
        assert resolvable.codes == ("title",)

    def test_lists_become_tuples(self) -> None:
        """Codes and arguments are stored as tuples, so resolvables hash."""
        resolvable = MessageSourceResolvable(codes=["a", "b"], arguments=[1])  # type: ignore[arg-type]
        assert resolvable.codes == ("a", "b")
        assert resolvable.arguments == (1,)
        assert hash(resolvable) == hash(MessageSourceResolvable.of("a", "b", arguments=[1]))

    def test_code_is_last(self) -> None:
        """code is the least specific code."""
        assert MessageSourceResolvable.of("typeMismatch.age", "typeMismatch").code == (
            "typeMismatch"
        )
        assert MessageSourceResolvable(default_message="only default").code is None

    def test_needs_code_or_default(self) -> None:
        """An empty resolvable cannot resolve to anything."""
        with pytest.raises(ValueError, match="at least one code"):
            MessageSourceResolvable()

    def test_codes_must_be_strings(self) -> None:
        """Non-string codes are rejected."""
        with pytest.raises(TypeError, match="must be strings"):
            MessageSourceResolvable(codes=("ok", 3))  # type: ignore[arg-type]

    def test_frozen(self) -> None:
        """Resolvables are immutable."""
        resolvable = MessageSourceResolvable.of("a")
        with pytest.raises(dataclasses.FrozenInstanceError):
            resolvable.default_message = "x"  # type: ignore[misc]

    def test_renders_default_by_default(self) -> None:
        """Defaults are patterns unless a subclass says otherwise."""
        assert MessageSourceResolvable.of("a").should_render_default_message()

    def test_str(self) -> None:
        """str() lists codes, arguments and default."""
        resolvable = MessageSourceResolvable.of("a", "b", arguments=[1, "x"], default_message="d")
        assert str(resolvable) == (
            "MessageSourceResolvable: codes [a,b]; arguments [1,x]; default message [d]"
        )

    @given(st.lists(message_codes(), min_size=1, max_size=4))
    def test_code_property(self, codes: list[str]) -> None:
        """code is always the last of the given codes."""
        resolvable = MessageSourceResolvable.of(*codes)
        assert resolvable.codes == tuple(codes)
        assert resolvable.code == codes[-1]
