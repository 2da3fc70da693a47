"""Quickstart example for autumn-messages.

This example demonstrates basic usage of autumn-messages: property bundles,
locale fallback, placeholders, defaults and reloading.

Note: Examples use MappingResourceResolver so they run without files. In a
real application, point a PathResourceResolver or PackageResourceResolver at
the directory holding your .properties files.
"""

import tempfile
from pathlib import Path

from autumn_messages import (
    MappingResourceResolver,
    MessageSourceResolvable,
    NoSuchMessageError,
    PathResourceResolver,
    ReloadableMessageSource,
)

# Example 1: Simple message
print("=" * 50)
print("Example 1: Simple Message")
print("=" * 50)

resolver = MappingResourceResolver(
    {
        "messages.properties": "app.title=Autumn Shop\n",
        "messages_en.properties": "hello=Hello, World!\nwelcome=Welcome to {0}!\n",
        "messages_pt_BR.properties": "hello=Olá, Mundo!\nwelcome=Bem-vindo à {0}!\n",
    }
)
source = ReloadableMessageSource(["messages"], resolver, default_locale="en")

print(source.get_message("hello", locale="en"))
# Output: Hello, World!

print(source.get_message("hello", locale="pt_BR"))
# Output: Olá, Mundo!

# Example 2: Placeholders
print("\n" + "=" * 50)
print("Example 2: Positional Placeholders")
print("=" * 50)

print(source.get_message("welcome", ["Autumn Shop"], "pt_BR"))
# Output: Bem-vindo à Autumn Shop!

resolver.put("messages_en.properties", "hello=Hello!\nitems={0} has {1} items\n")
source.clear_cache()
print(source.get_message("items", ["Cart", 1234567], "en"))
# Output: Cart has 1,234,567 items

# Example 3: Fallback to the root bundle
print("\n" + "=" * 50)
print("Example 3: Root Bundle Fallback")
print("=" * 50)

print(source.get_message("app.title", locale="pt_BR"))
# Output: Autumn Shop

# Example 4: Missing messages
print("\n" + "=" * 50)
print("Example 4: Missing Messages")
print("=" * 50)

print(source.get_message("nonexistent", locale="en", default="Not translated yet"))
# Output: Not translated yet

print(source.find_message("nonexistent", locale="en"))
# Output: None

try:
    source.get_message("nonexistent", locale="en")
except NoSuchMessageError as e:
    print(f"Error: {e}")
    # Output: Error: No message found under code 'nonexistent' for locale 'en'.

# Example 5: Resolvables
print("\n" + "=" * 50)
print("Example 5: MessageSourceResolvable")
print("=" * 50)

error = MessageSourceResolvable.of(
    "required.email",
    "required",
    arguments=[MessageSourceResolvable.of("app.title")],
    default_message="{0}: this field is required",
)
print(source.get_message(error, locale="pt_BR"))
# Output: Autumn Shop: this field is required

# Example 6: Reloading files from disk
print("\n" + "=" * 50)
print("Example 6: Reloading From Disk")
print("=" * 50)

with tempfile.TemporaryDirectory() as tmp_dir:
    messages_file = Path(tmp_dir) / "site_en.properties"
    messages_file.write_text("banner=Summer sale\n", encoding="utf-8")

    # cache_seconds=0 re-checks file timestamps on every lookup
    with ReloadableMessageSource(
        ["site"], PathResourceResolver(tmp_dir), cache_seconds=0
    ) as site:
        print(site.get_message("banner", locale="en"))
        # Output: Summer sale

        messages_file.write_text("banner=Autumn sale\n", encoding="utf-8")
        print(site.get_message("banner", locale="en"))
        # Output: Autumn sale (once the file timestamp has changed)

print("\n" + "=" * 50)
print("[SUCCESS] All examples complete!")
print("=" * 50)
