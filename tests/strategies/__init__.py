"""Hypothesis strategies for autumn-messages property-based testing.

This package provides reusable strategies for generating test data
across multiple test modules. Strategies are organized by domain:

- localization: locale identifiers, message codes, bundle families
- properties: property keys/values and their escaped source form

Usage:
    from tests.strategies import locales, message_codes
    from tests.strategies.properties import property_entries, escape_key

Event-Emitting Strategies (HypoFuzz-Optimized):
    These strategies emit hypothesis.event() calls for coverage-guided fuzzing:
    - locales, bundle_families, property_values
"""

from .localization import bundle_families, locale_identifiers, locales, message_codes
from .properties import escape_key, escape_value, property_entries, property_keys, property_values

__all__ = [
    "bundle_families",
    "escape_key",
    "escape_value",
    "locale_identifiers",
    "locales",
    "message_codes",
    "property_entries",
    "property_keys",
    "property_values",
]
