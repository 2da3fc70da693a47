"""Tests for ReloadableMessageSource.

Covers locale fallback across bundle resources, the lookup order (own
bundles, common messages, parent, default, code), formatting, basename
precedence, reloading, configuration setters and diagnostics.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from autumn_messages import (
    BasenamePrecedence,
    CacheConfig,
    Locale,
    MappingResourceResolver,
    MessageFormatError,
    MessageSourceResolvable,
    NoSuchMessageError,
    PathResourceResolver,
    ReloadableMessageSource,
)
from autumn_messages.locale_utils import LocaleLike
from autumn_messages.localization import FallbackInfo, OpenedResource
from autumn_messages.localization.orchestrator import CodeLike
from tests.helpers.resources import CountingResolver, FakeClock, OpenOnlyResolver

PT_BR = Locale("pt", "BR")


@pytest.fixture
def source(bundles: CountingResolver, clock: FakeClock) -> ReloadableMessageSource:
    """Source over the shared 'bundle' family with English as default locale."""
    return ReloadableMessageSource(["bundle"], bundles, default_locale="en", clock=clock)


class RecordingParent:
    """Minimal MessageSource that answers a fixed set of codes."""

    def __init__(self, messages: dict[str, str]) -> None:
        self.messages = messages
        self.calls: list[tuple[tuple[str, ...], tuple[object, ...], object]] = []

    def find_message(
        self,
        code: CodeLike,
        args: Sequence[object] = (),
        locale: LocaleLike | None = None,
        *,
        default: str | None = None,
    ) -> str | None:
        codes = tuple(code)  # type: ignore[arg-type]
        self.calls.append((codes, tuple(args), locale))
        for candidate in codes:
            if candidate in self.messages:
                return self.messages[candidate]
        return default


class TestLocaleFallback:
    """Resolution along the fallback chain."""

    def test_each_locale_sees_own_value(self, source: ReloadableMessageSource) -> None:
        """The same code resolves per locale."""
        assert source.get_message("aaaaa", locale="en") == "aaaa"
        assert source.get_message("aaaaa", locale="pt_BR") == "bbbb"
        assert source.get_message("aaaaa", locale=PT_BR) == "bbbb"

    def test_region_falls_back_to_language(self, source: ReloadableMessageSource) -> None:
        """en_GB has no file of its own and uses en."""
        assert source.get_message("aaaaa", locale="en_GB") == "aaaa"

    def test_unknown_language_falls_back_to_default(self, source: ReloadableMessageSource) -> None:
        """Languages without files resolve through the default locale."""
        assert source.get_message("aaaaa", locale="lv") == "aaaa"
        assert source.get_message("only.en", locale="pt_BR") == "english"

    def test_root_file_is_last_resort(self, source: ReloadableMessageSource) -> None:
        """Codes only the root file defines resolve for every locale."""
        for locale in ("en", "pt_BR", "lv"):
            assert source.get_message("only.root", locale=locale) == "from root"

    def test_without_default_locale_root_follows_request(
        self, bundles: CountingResolver, clock: FakeClock
    ) -> None:
        """With no default locale, unknown languages get the root file."""
        source = ReloadableMessageSource(["bundle"], bundles, clock=clock)
        assert source.get_message("aaaaa", locale="lv") == "root"
        assert source.find_message("only.en", locale="pt_BR") is None

    def test_none_locale_uses_default(self, source: ReloadableMessageSource) -> None:
        """Omitting the locale targets the default locale."""
        assert source.get_message("aaaaa") == "aaaa"

    def test_none_locale_without_default_uses_root(
        self, bundles: CountingResolver, clock: FakeClock
    ) -> None:
        """Omitting the locale with no default targets the root file."""
        source = ReloadableMessageSource(["bundle"], bundles, clock=clock)
        assert source.get_message("aaaaa") == "root"

    def test_system_locale_fallback(
        self, bundles: CountingResolver, clock: FakeClock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """fallback_to_system_locale uses the OS locale when no default is set."""
        monkeypatch.setattr(
            "autumn_messages.localization.orchestrator.get_system_locale", lambda: PT_BR
        )
        source = ReloadableMessageSource(
            ["bundle"], bundles, fallback_to_system_locale=True, clock=clock
        )
        assert source.default_locale is None
        assert source.effective_default_locale == PT_BR
        assert source.get_message("aaaaa", locale="lv") == "bbbb"

    def test_explicit_default_beats_system_locale(
        self, bundles: CountingResolver, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """The system locale is only a stand-in for a missing default."""
        monkeypatch.setattr(
            "autumn_messages.localization.orchestrator.get_system_locale", lambda: PT_BR
        )
        source = ReloadableMessageSource(
            ["bundle"], bundles, default_locale="en", fallback_to_system_locale=True
        )
        assert source.effective_default_locale == Locale("en")

    def test_on_fallback_reports_resolving_resource(
        self, bundles: CountingResolver, clock: FakeClock
    ) -> None:
        """The callback names the requested and the resolving locale."""
        events: list[FallbackInfo] = []
        source = ReloadableMessageSource(
            ["bundle"], bundles, default_locale="en", on_fallback=events.append, clock=clock
        )
        source.get_message("aaaaa", locale="pt_BR")
        assert events == []

        source.get_message("only.en", locale="pt_BR")
        source.get_message("only.root", locale="en")
        assert events == [
            FallbackInfo(PT_BR, Locale("en"), "bundle", "only.en"),
            FallbackInfo(Locale("en"), Locale.ROOT, "bundle", "only.root"),
        ]


class TestLookupOrder:
    """Own bundles, common messages, parent, default, code."""

    def test_missing_code_raises(self, source: ReloadableMessageSource) -> None:
        """Unresolvable codes raise NoSuchMessageError with context."""
        with pytest.raises(NoSuchMessageError) as exc_info:
            source.get_message("nope", locale="pt_BR")
        assert exc_info.value.codes == ("nope",)
        assert exc_info.value.locale == "pt_BR"

    def test_find_message_returns_none(self, source: ReloadableMessageSource) -> None:
        """find_message() reports absence as None."""
        assert source.find_message("nope", locale="pt_BR") is None

    def test_default_message(self, source: ReloadableMessageSource) -> None:
        """A default is used, and formatted, only when no code resolves."""
        assert source.get_message("nope", ["x"], "en", default="Fallback {0}") == "Fallback x"
        assert source.get_message("aaaaa", locale="en", default="unused") == "aaaa"

    def test_codes_tried_in_order(self, source: ReloadableMessageSource) -> None:
        """The first code that resolves wins."""
        assert source.get_message(["nope", "only.en", "aaaaa"], locale="en") == "english"

    def test_common_messages_after_bundles(
        self, bundles: CountingResolver, clock: FakeClock
    ) -> None:
        """Common messages fill gaps but never shadow bundle messages."""
        source = ReloadableMessageSource(
            ["bundle"],
            bundles,
            common_messages={"aaaaa": "common", "shared": "Shared {0}"},
            clock=clock,
        )
        assert source.get_message("aaaaa", locale="pt_BR") == "bbbb"
        assert source.get_message("shared", [1], locale="pt_BR") == "Shared 1"
        assert not source.has_message("shared", "pt_BR")

    def test_all_codes_in_bundles_before_common(
        self, bundles: CountingResolver, clock: FakeClock
    ) -> None:
        """A later code in the bundles beats an earlier common message."""
        source = ReloadableMessageSource(
            ["bundle"], bundles, common_messages={"first": "common"}, clock=clock
        )
        assert source.get_message(["first", "aaaaa"], locale="en") == "aaaa"

    def test_parent_consulted_after_own_messages(
        self, source: ReloadableMessageSource
    ) -> None:
        """The parent answers codes this source cannot, with resolved arguments."""
        parent = RecordingParent({"parent.only": "from parent", "aaaaa": "shadowed"})
        source.set_parent(parent)

        assert source.get_message("aaaaa", locale="en") == "aaaa"
        assert parent.calls == []
        assert source.get_message("parent.only", ["a"], locale="pt_BR") == "from parent"
        assert parent.calls == [(("parent.only",), ("a",), PT_BR)]

    def test_parent_before_default(self, source: ReloadableMessageSource) -> None:
        """A parent answer beats the caller's default message."""
        source.set_parent(RecordingParent({"parent.only": "from parent"}))
        assert source.get_message("parent.only", default="default") == "from parent"
        assert source.get_message("nope", default="default") == "default"

    def test_reloadable_parent_chain(
        self, bundles: CountingResolver, clock: FakeClock
    ) -> None:
        """Reloadable sources can be chained."""
        parent = ReloadableMessageSource(
            ["base"], MappingResourceResolver({"base.properties": "base.only=Base {0}"})
        )
        child = ReloadableMessageSource(["bundle"], bundles, parent=parent, clock=clock)
        assert child.parent is parent
        assert child.get_message("base.only", ["x"], "pt_BR") == "Base x"

    def test_use_code_as_default_message(
        self, bundles: CountingResolver, clock: FakeClock
    ) -> None:
        """The first code is returned instead of raising."""
        source = ReloadableMessageSource(
            ["bundle"], bundles, use_code_as_default_message=True, clock=clock
        )
        assert source.get_message(["missing.a", "missing.b"], locale="en") == "missing.a"
        assert source.get_message("missing", locale="en", default="given") == "given"

    def test_source_without_basenames(self) -> None:
        """A source may serve common messages only."""
        source = ReloadableMessageSource(common_messages={"hello": "Hello {0}"})
        assert source.get_message("hello", ["Ann"], "en") == "Hello Ann"
        assert source.find_message("other", locale="en") is None


class TestFormatting:
    """Argument substitution through the facade."""

    def test_arguments_substituted(self, source: ReloadableMessageSource) -> None:
        """{0} takes the first argument in each locale's pattern."""
        assert source.get_message("greeting", ["Anna"], "en") == "Hello, Anna!"
        assert source.get_message("greeting", ["Anna"], "pt_BR") == "Olá, Anna!"

    def test_locale_aware_numbers(self, bundles: CountingResolver) -> None:
        """Numbers follow the requested locale's conventions."""
        bundles.put("bundle.properties", "count={0} items")
        source = ReloadableMessageSource(["bundle"], bundles)
        assert source.get_message("count", [1234567], "en") == "1,234,567 items"
        assert source.get_message("count", [1234567], "de") == "1.234.567 items"

    def test_missing_argument_raises(self, source: ReloadableMessageSource) -> None:
        """Formatting errors propagate instead of yielding partial text."""
        with pytest.raises(MessageFormatError):
            source.get_message("greeting", locale="en")

    def test_nested_resolvable_arguments(self, source: ReloadableMessageSource) -> None:
        """Resolvable arguments are resolved in the same locale first."""
        argument = MessageSourceResolvable.of("aaaaa")
        assert source.get_message("greeting", [argument], "pt_BR") == "Olá, bbbb!"
        assert source.get_message("greeting", [argument], "en") == "Hello, aaaa!"

    def test_unresolvable_nested_argument_uses_its_code(
        self, source: ReloadableMessageSource
    ) -> None:
        """A nested argument that resolves nowhere renders as its first code."""
        argument = MessageSourceResolvable(codes=("missing.arg", "also.missing"))
        assert source.get_message("greeting", [argument], "en") == "Hello, missing.arg!"
        assert source.find_message("nope", [argument], "en") is None
        assert source.get_message("nope", [argument], "en", default="{0}?") == "missing.arg?"

    def test_unresolvable_nested_argument_uses_its_default(
        self, source: ReloadableMessageSource
    ) -> None:
        """A nested argument's own default applies before its code."""
        argument = MessageSourceResolvable.of("missing.arg", default_message="someone")
        assert source.get_message("greeting", [argument], "en") == "Hello, someone!"


class TestResolvables:
    """MessageSourceResolvable requests."""

    def test_resolvable_with_codes(self, source: ReloadableMessageSource) -> None:
        """Codes, arguments and default all come from the resolvable."""
        resolvable = MessageSourceResolvable(codes=("nope", "greeting"), arguments=("Bo",))
        assert source.get_message(resolvable, locale="pt_BR") == "Olá, Bo!"
        assert source.get_message_for(resolvable, "en") == "Hello, Bo!"

    def test_resolvable_default(self, source: ReloadableMessageSource) -> None:
        """The resolvable's default is formatted with its arguments."""
        resolvable = MessageSourceResolvable.of(
            "nope", arguments=["email"], default_message="{0} is required"
        )
        assert source.get_message(resolvable, locale="en") == "email is required"

    def test_pre_rendered_default_returned_verbatim(
        self, source: ReloadableMessageSource
    ) -> None:
        """Defaults that must not be rendered keep their braces."""

        class Literal(MessageSourceResolvable):
            def should_render_default_message(self) -> bool:
                return False

        resolvable = Literal(codes=("nope",), arguments=("x",), default_message="{0} stays")
        assert source.get_message(resolvable, locale="en") == "{0} stays"

    def test_resolvable_without_codes(self, source: ReloadableMessageSource) -> None:
        """A default-only resolvable renders its default."""
        resolvable = MessageSourceResolvable(default_message="Just text")
        assert source.get_message(resolvable, locale="en") == "Just text"

    def test_args_with_resolvable_rejected(self, source: ReloadableMessageSource) -> None:
        """Arguments travel inside the resolvable, not beside it."""
        resolvable = MessageSourceResolvable.of("aaaaa")
        with pytest.raises(TypeError):
            source.get_message(resolvable, ["extra"])
        with pytest.raises(TypeError):
            source.get_message(resolvable, default="extra")


class TestBasenamePrecedence:
    """Search order across several basenames."""

    @pytest.fixture
    def resolver(self) -> MappingResourceResolver:
        return MappingResourceResolver(
            {
                "app.properties": "title=App root\n",
                "app_pt.properties": "farewell=Tchau\n",
                "lib.properties": "title=Lib root\n",
                "lib_pt_BR.properties": "title=Lib pt_BR\n",
            }
        )

    def test_basename_first(self, resolver: MappingResourceResolver) -> None:
        """The first basename's whole chain is searched before the next basename."""
        source = ReloadableMessageSource(["app", "lib"], resolver)
        assert source.basename_precedence == BasenamePrecedence.BASENAME_FIRST
        assert source.get_message("title", locale="pt_BR") == "App root"

    def test_locale_first(self, resolver: MappingResourceResolver) -> None:
        """Every basename is tried for a locale before moving to the next locale."""
        source = ReloadableMessageSource(
            ["app", "lib"], resolver, basename_precedence=BasenamePrecedence.LOCALE_FIRST
        )
        assert source.get_message("title", locale="pt_BR") == "Lib pt_BR"
        assert source.get_message("title", locale="lv") == "App root"
        assert source.get_message("farewell", locale="pt_BR") == "Tchau"

    def test_locale_first_with_chains_of_different_length(self) -> None:
        """A default locale change between basename fetches does not break the lookup."""
        source: ReloadableMessageSource

        class DroppingDefault(MappingResourceResolver):
            def open(self, path: str) -> OpenedResource:
                if path == "a.properties" and source.default_locale is not None:
                    source.set_default_locale(None)
                return super().open(path)

        resolver = DroppingDefault(
            {"a.properties": "x.a=from a\n", "b_en.properties": "x.en=from b en\n"}
        )
        source = ReloadableMessageSource(
            ["a", "b"],
            resolver,
            default_locale="en",
            basename_precedence=BasenamePrecedence.LOCALE_FIRST,
        )

        assert source.find_message("x.missing", locale="pt_BR") is None
        assert source.default_locale is None
        assert source.find_message("x.a", locale="pt_BR") == "from a"

    def test_precedence_from_string(self, resolver: MappingResourceResolver) -> None:
        """Policies may be given by value."""
        source = ReloadableMessageSource(
            ["app", "lib"], resolver, basename_precedence="locale_first"  # type: ignore[arg-type]
        )
        assert source.basename_precedence == BasenamePrecedence.LOCALE_FIRST


class TestReloading:
    """Cache expiry seen through the facade."""

    def test_changes_picked_up_after_ttl(
        self, bundles: CountingResolver, clock: FakeClock
    ) -> None:
        """Edits become visible once cache_seconds have elapsed."""
        source = ReloadableMessageSource(
            ["bundle"], bundles, cache_seconds=30, default_locale="en", clock=clock
        )
        assert source.get_message("aaaaa", locale="pt_BR") == "bbbb"
        bundles.put("bundle_pt_BR.properties", "aaaaa=updated")

        clock.advance(29)
        assert source.get_message("aaaaa", locale="pt_BR") == "bbbb"
        clock.advance(1)
        assert source.get_message("aaaaa", locale="pt_BR") == "updated"

    def test_cached_forever_by_default(
        self, bundles: CountingResolver, clock: FakeClock
    ) -> None:
        """Without a TTL bundles are read once."""
        source = ReloadableMessageSource(["bundle"], bundles, clock=clock)
        source.get_message("aaaaa", locale="en")
        bundles.put("bundle_en.properties", "aaaaa=updated")
        clock.advance(10**6)
        assert source.get_message("aaaaa", locale="en") == "aaaa"

        source.clear_cache()
        assert source.get_message("aaaaa", locale="en") == "updated"

    def test_failed_resource_kept_until_cleared_without_ttl(
        self, bundles: CountingResolver, clock: FakeClock
    ) -> None:
        """Entries that never expire keep a failed resource absent."""
        bundles.failures["bundle_en.properties"] = TimeoutError("slow")
        source = ReloadableMessageSource(["bundle"], bundles, clock=clock)
        assert source.get_message("aaaaa", locale="en") == "root"

        del bundles.failures["bundle_en.properties"]
        clock.advance(10**6)
        assert source.get_message("aaaaa", locale="en") == "root"

        source.clear_cache()
        assert source.get_message("aaaaa", locale="en") == "aaaa"

    def test_resolver_with_open_only(self, clock: FakeClock) -> None:
        """Resolvers without last_modified() are re-validated by reopening."""
        resolver = OpenOnlyResolver({"bundle.properties": "aaaaa=first\n"})
        source = ReloadableMessageSource(["bundle"], resolver, cache_seconds=10, clock=clock)
        assert source.get_message("aaaaa", locale="en") == "first"

        resolver.backing.put("bundle.properties", "aaaaa=second\n")
        clock.advance(10)
        assert source.get_message("aaaaa", locale="en") == "second"

    def test_files_on_disk(self, tmp_path: Path) -> None:
        """File modification times drive reloading for disk bundles."""
        path = tmp_path / "messages_en.properties"
        path.write_text("title=First\n", encoding="utf-8")
        os.utime(path, (1_000_000, 1_000_000))

        source = ReloadableMessageSource(
            ["messages"], PathResourceResolver(tmp_path), cache_seconds=0
        )
        assert source.get_message("title", locale="en") == "First"

        path.write_text("title=Second\n", encoding="utf-8")
        os.utime(path, (1_000_000, 1_000_000))
        assert source.get_message("title", locale="en") == "First"

        os.utime(path, (2_000_000, 2_000_000))
        assert source.get_message("title", locale="en") == "Second"

    def test_file_encodings(self) -> None:
        """Per-resource encodings are honoured."""
        resolver = MappingResourceResolver(
            {"messages_ja.properties": "hello=こんにちは".encode("shift_jis")}
        )
        source = ReloadableMessageSource(
            ["messages"], resolver, file_encodings={"messages_ja": "shift_jis"}
        )
        assert source.get_message("hello", locale="ja") == "こんにちは"

    def test_cache_config(self, bundles: CountingResolver, clock: FakeClock) -> None:
        """A full CacheConfig may replace cache_seconds."""
        source = ReloadableMessageSource(
            ["bundle"], bundles, cache=CacheConfig(cache_seconds=5, max_entries=1), clock=clock
        )
        source.get_message("aaaaa", locale="en")
        source.get_message("aaaaa", locale="pt_BR")
        stats = source.get_cache_stats()
        assert stats["size"] == 1
        assert stats["evictions"] == 1
        assert stats["basename_count"] == 1
        assert source.cache_seconds == 5


class TestConfiguration:
    """Validation and setters."""

    def test_basenames_require_resolver(self) -> None:
        """Bundles cannot be loaded without a resolver."""
        with pytest.raises(ValueError, match="resolver required"):
            ReloadableMessageSource(["messages"])
        source = ReloadableMessageSource()
        with pytest.raises(ValueError, match="resolver required"):
            source.set_basename("messages")

    def test_cache_and_cache_seconds_exclusive(self, bundles: CountingResolver) -> None:
        """Only one way of configuring the TTL is accepted."""
        with pytest.raises(ValueError, match="either cache or cache_seconds"):
            ReloadableMessageSource(["bundle"], bundles, cache=CacheConfig(), cache_seconds=5)

    @pytest.mark.parametrize("bad", ["", "   "])
    def test_empty_basename_rejected(self, bundles: CountingResolver, bad: str) -> None:
        """Blank basenames are configuration errors."""
        with pytest.raises(ValueError, match="non-empty"):
            ReloadableMessageSource(["bundle", bad], bundles)

    def test_unknown_encoding_rejected(self, bundles: CountingResolver) -> None:
        """Encodings are validated up front."""
        with pytest.raises(LookupError):
            ReloadableMessageSource(["bundle"], bundles, default_encoding="no-such-codec")

    def test_basename_setters(self, bundles: CountingResolver) -> None:
        """Basenames are stripped, de-duplicated and kept in order."""
        source = ReloadableMessageSource(["bundle"], bundles)
        source.set_basenames("b", " a ", "b")
        assert source.basenames == ("b", "a")
        source.add_basenames("c", "a")
        assert source.basenames == ("b", "a", "c")
        source.set_basename("bundle")
        assert source.basenames == ("bundle",)

    def test_single_string_basename(self, bundles: CountingResolver) -> None:
        """A bare string is one basename, not a sequence of letters."""
        source = ReloadableMessageSource("bundle", bundles)  # type: ignore[arg-type]
        assert source.basenames == ("bundle",)

    def test_set_default_locale_drops_cache(self, source: ReloadableMessageSource) -> None:
        """Changing the default locale rebuilds chains."""
        assert source.get_message("aaaaa", locale="lv") == "aaaa"
        source.set_default_locale("pt_BR")
        assert source.default_locale == PT_BR
        assert len(source.cache) == 0
        assert source.get_message("aaaaa", locale="lv") == "bbbb"
        source.set_default_locale(None)
        assert source.get_message("aaaaa", locale="lv") == "root"

    def test_set_cache_seconds(self, source: ReloadableMessageSource) -> None:
        """A new TTL applies to bundles already cached."""
        source.get_message("aaaaa", locale="en")
        source.set_cache_seconds(0)
        assert source.cache_seconds == 0
        with pytest.raises(TypeError):
            source.set_cache_seconds("soon")  # type: ignore[arg-type]

    def test_set_common_messages(self, source: ReloadableMessageSource) -> None:
        """Common messages can be replaced and are exposed read-only."""
        source.set_common_messages({"c": "common"})
        assert source.get_message("c", locale="en") == "common"
        with pytest.raises(TypeError):
            source.common_messages["d"] = "x"  # type: ignore[index]
        source.set_common_messages(None)
        assert source.find_message("c", locale="en") is None

    def test_flags(self, source: ReloadableMessageSource) -> None:
        """Flag properties reflect construction arguments."""
        assert not source.use_code_as_default_message
        assert not source.fallback_to_system_locale
        assert "bundle" in repr(source)

    def test_malformed_locale(self, source: ReloadableMessageSource) -> None:
        """Unparseable locale identifiers are rejected."""
        with pytest.raises(ValueError):
            source.get_message("aaaaa", locale="not a locale!")


class TestLifecycleAndDiagnostics:
    """Cache clearing, context management and load summaries."""

    def test_has_message(self, source: ReloadableMessageSource) -> None:
        """has_message() consults own bundles along the chain."""
        assert source.has_message("only.root", "pt_BR")
        assert source.has_message("greeting")
        assert not source.has_message("nope", "pt_BR")

    def test_has_message_does_not_report_fallbacks(
        self, bundles: CountingResolver, clock: FakeClock
    ) -> None:
        """Checking for a message is not a lookup the fallback callback hears about."""
        events: list[FallbackInfo] = []
        source = ReloadableMessageSource(
            ["bundle"], bundles, default_locale="en", on_fallback=events.append, clock=clock
        )
        assert source.has_message("only.en", "pt_BR")
        assert source.has_message("only.root", "en")
        assert events == []

        source.get_message("only.en", locale="pt_BR")
        assert events == [FallbackInfo(PT_BR, Locale("en"), "bundle", "only.en")]

    def test_context_manager_clears_cache(self, bundles: CountingResolver) -> None:
        """Leaving the with-block drops cached bundles."""
        with ReloadableMessageSource(["bundle"], bundles) as source:
            source.get_message("aaaaa", locale="en")
            assert len(source.cache) == 1
        assert len(source.cache) == 0

    def test_clear_cache_including_ancestors(self, bundles: CountingResolver) -> None:
        """Clearing propagates to reloadable parents."""
        parent = ReloadableMessageSource(["bundle"], bundles)
        child = ReloadableMessageSource(["bundle"], bundles, parent=parent)
        parent.get_message("aaaaa", locale="en")
        child.get_message("aaaaa", locale="en")

        child.clear_cache_including_ancestors()
        assert len(child.cache) == 0
        assert len(parent.cache) == 0

    def test_load_summary(self, source: ReloadableMessageSource) -> None:
        """The summary lists every resource behind a locale's bundle."""
        summary = source.get_load_summary(locale="pt_BR")
        assert summary.total_attempted == 4
        assert summary.successful == 3
        assert summary.not_found == 1
        assert not summary.has_errors
        assert [str(r.locale) for r in summary.get_not_found()] == ["pt"]

    def test_load_summary_reports_errors(self, bundles: CountingResolver) -> None:
        """Failed resources show up as errors with diagnostics."""
        bundles.failures["bundle_en.properties"] = PermissionError("denied")
        source = ReloadableMessageSource(["bundle"], bundles)
        assert source.get_message("aaaaa", locale="en") == "root"

        summary = source.get_load_summary("bundle", "en")
        assert summary.has_errors
        (failed,) = summary.get_errors()
        assert failed.source_path == "memory:bundle_en.properties"
        assert failed.diagnostic is not None


class TestConcurrentLookups:
    """Lookups racing with reconfiguration."""

    def test_lookups_during_default_locale_changes(self, bundles: CountingResolver) -> None:
        """Every lookup sees one consistent default locale."""
        source = ReloadableMessageSource(["bundle"], bundles, default_locale="en")
        stop = threading.Event()

        def toggle() -> None:
            while not stop.is_set():
                source.set_default_locale("pt_BR")
                source.set_default_locale("en")

        toggler = threading.Thread(target=toggle)
        toggler.start()
        try:
            with ThreadPoolExecutor(max_workers=4) as pool:
                results = list(
                    pool.map(lambda _: source.get_message("aaaaa", locale="lv"), range(400))
                )
        finally:
            stop.set()
            toggler.join(timeout=10)

        assert set(results) <= {"aaaa", "bbbb"}
