"""Localization package for ReloadableMessageSource.

Provides the full message source stack: type aliases, locale fallback
chains, resource loading infrastructure, and the reloadable message source.

Submodules:
    types        - PEP 695 type aliases (Basename, MessageCode, ResourcePath, Timestamp)
    fallback     - chain_for, resource_chain, LocaleFallbackResolver
    loading      - ResourceResolver protocol and resolvers, BundleLoader,
                   FallbackInfo, ResourceLoadResult, LoadSummary
    resolvable   - MessageSourceResolvable
    orchestrator - ReloadableMessageSource (lookup orchestration)

Python 3.13+.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability

# fallback must load before orchestrator: runtime.cache depends on it.
from autumn_messages.localization.fallback import (
    LocaleFallbackResolver,
    chain_for,
    resource_chain,
)
from autumn_messages.enums import BasenamePrecedence, LoadStatus
from autumn_messages.localization.loading import (
    BundleLoader,
    FallbackInfo,
    LoadSummary,
    MappingResourceResolver,
    OpenedResource,
    PackageResourceResolver,
    PathResourceResolver,
    RawBundle,
    ResourceLoadResult,
    ResourceResolver,
    drain,
)
from autumn_messages.localization.orchestrator import MessageSource, ReloadableMessageSource
from autumn_messages.localization.resolvable import MessageSourceResolvable
from autumn_messages.localization.types import Basename, MessageCode, ResourcePath, Timestamp

__all__ = [
    # Main message source
    "ReloadableMessageSource",
    "MessageSource",
    "MessageSourceResolvable",
    "BasenamePrecedence",
    # Fallback chains
    "LocaleFallbackResolver",
    "chain_for",
    "resource_chain",
    # Resolver protocol and implementations
    "ResourceResolver",
    "OpenedResource",
    "PathResourceResolver",
    "PackageResourceResolver",
    "MappingResourceResolver",
    "drain",
    # Loading and load tracking
    "BundleLoader",
    "RawBundle",
    "LoadStatus",
    "LoadSummary",
    "ResourceLoadResult",
    # Fallback observability
    "FallbackInfo",
    # Type aliases for user code type annotations
    "Basename",
    "MessageCode",
    "ResourcePath",
    "Timestamp",
]
