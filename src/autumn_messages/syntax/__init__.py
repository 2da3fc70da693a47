"""Property resource syntax.

Submodules:
    properties - Line-oriented ``key=value`` parser with non-fatal warnings

Python 3.13+. Zero external dependencies.
"""

from .properties import ParseResult, PropertiesParser, parse_properties

__all__ = ["ParseResult", "PropertiesParser", "parse_properties"]
