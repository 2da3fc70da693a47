"""ReloadableMessageSource Example - Locale Fallback Chains.

Demonstrates how incomplete translations are filled in from less specific
bundles.

Scenarios covered:
1. Region -> language -> root fallback
2. Default locale as the last translated fallback
3. Multiple basenames and their precedence
4. Observing fallbacks with on_fallback
5. Inspecting which resources were loaded

Python 3.13+.
"""

from __future__ import annotations

from autumn_messages import BasenamePrecedence, MappingResourceResolver, ReloadableMessageSource
from autumn_messages.localization import FallbackInfo


def example_1_region_to_root() -> None:
    """Example 1: pt_BR -> pt -> root."""
    print("=" * 60)
    print("Example 1: Region -> Language -> Root")
    print("=" * 60)

    resolver = MappingResourceResolver(
        {
            "shop.properties": "currency=EUR\ncart=Cart\ncheckout=Checkout\n",
            "shop_pt.properties": "cart=Carrinho\ncheckout=Finalizar compra\n",
            "shop_pt_BR.properties": "currency=BRL\n",
        }
    )
    source = ReloadableMessageSource(["shop"], resolver)

    for code in ("currency", "cart", "checkout"):
        print(f"  {code}: {source.get_message(code, locale='pt_BR')}")
    # currency: BRL (pt_BR), cart: Carrinho (pt), checkout: Finalizar compra (pt)

    print(f"  cart (lv): {source.get_message('cart', locale='lv')}")
    # cart (lv): Cart (root)


def example_2_default_locale() -> None:
    """Example 2: The default locale is consulted before the root bundle."""
    print("\n" + "=" * 60)
    print("Example 2: Default Locale (lv -> en -> root)")
    print("=" * 60)

    resolver = MappingResourceResolver(
        {
            "ui.properties": "home=home\n",
            "ui_en.properties": "home=Home\nabout=About Us\nprivacy=Privacy Policy\n",
            "ui_lv.properties": "home=Mājas\n",
        }
    )
    source = ReloadableMessageSource(["ui"], resolver, default_locale="en")

    for code in ("home", "about", "privacy"):
        print(f"  {code}: {source.get_message(code, locale='lv')}")

    print(f"  home (de, no file): {source.get_message('home', locale='de')}")
    # Falls back to the default locale, not the root bundle


def example_3_basename_precedence() -> None:
    """Example 3: Application bundles override library bundles."""
    print("\n" + "=" * 60)
    print("Example 3: Basename Precedence")
    print("=" * 60)

    resolver = MappingResourceResolver(
        {
            "app.properties": "title=My App\n",
            "lib.properties": "title=Library\nerror.required={0} is required\n",
            "lib_de.properties": "title=Bibliothek\nerror.required={0} ist erforderlich\n",
        }
    )

    for precedence in BasenamePrecedence:
        source = ReloadableMessageSource(
            ["app", "lib"], resolver, basename_precedence=precedence
        )
        title = source.get_message("title", locale="de")
        required = source.get_message("error.required", ["Name"], "de")
        print(f"  {precedence}: title={title!r}, error.required={required!r}")
    # basename_first: app's root title wins over lib's German one
    # locale_first: lib's German title wins over app's root one


def example_4_on_fallback() -> None:
    """Example 4: Tracking missing translations."""
    print("\n" + "=" * 60)
    print("Example 4: Observing Fallbacks")
    print("=" * 60)

    missing: list[FallbackInfo] = []
    resolver = MappingResourceResolver(
        {
            "messages_en.properties": "greeting=Hello\nfarewell=Goodbye\n",
            "messages_lv.properties": "greeting=Sveiki\n",
        }
    )
    source = ReloadableMessageSource(
        ["messages"], resolver, default_locale="en", on_fallback=missing.append
    )

    source.get_message("greeting", locale="lv")
    source.get_message("farewell", locale="lv")

    for info in missing:
        print(
            f"  '{info.code}' requested in '{info.requested_locale}' "
            f"resolved from '{info.resolved_locale}'"
        )
    # 'farewell' requested in 'lv' resolved from 'en'


def example_5_load_summary() -> None:
    """Example 5: Which resources stood behind a lookup."""
    print("\n" + "=" * 60)
    print("Example 5: Load Summary")
    print("=" * 60)

    resolver = MappingResourceResolver(
        {
            "messages.properties": "a=root\n",
            "messages_en.properties": "a=english\n=orphan value\n",
        }
    )
    source = ReloadableMessageSource(["messages"], resolver)
    summary = source.get_load_summary(locale="en_GB")
    print(f"  {summary!r}")
    for result in summary.results:
        print(f"  {result.source_path}: {result.status}")
    for warning in summary.get_all_warnings():
        print(f"  skipped: {warning.format()}")


if __name__ == "__main__":
    example_1_region_to_root()
    example_2_default_locale()
    example_3_basename_precedence()
    example_4_on_fallback()
    example_5_load_summary()

    print("\n" + "=" * 60)
    print("[SUCCESS] All examples complete!")
    print("=" * 60)
