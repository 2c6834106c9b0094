"""npm explorer - browse and discover packages on the npm registry.

This package provides async clients for the npm registry and downloads
API, normalization of registry documents into display models, and a
command-line front end.
"""

__version__ = "0.1.0"

from npm_explorer.errors import (
    NotFoundError,
    PackageNotFoundError,
    RegistryError,
    UpstreamError,
    VersionNotFoundError,
)
from npm_explorer.models import (
    DownloadPoint,
    Enriched,
    PackageAggregate,
    PackageIdentity,
    PackagePage,
    Period,
    RawRegistryMetadata,
    SearchHit,
    SearchPage,
    SearchResults,
    UserPage,
    VersionRecord,
)

__all__ = [
    "__version__",
    "DownloadPoint",
    "Enriched",
    "NotFoundError",
    "PackageAggregate",
    "PackageIdentity",
    "PackageNotFoundError",
    "PackagePage",
    "Period",
    "RawRegistryMetadata",
    "RegistryError",
    "SearchHit",
    "SearchPage",
    "SearchResults",
    "UpstreamError",
    "UserPage",
    "VersionNotFoundError",
]
