"""Core data models for npm_explorer.

This module defines the value types passed between the registry clients,
the normalizer and the presentation layer. Every model is frozen: a new
instance is built per request and never mutated afterwards.
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class Period(str, Enum):
    """Time window understood by the downloads API."""

    LAST_DAY = "last-day"
    LAST_WEEK = "last-week"
    LAST_MONTH = "last-month"
    LAST_YEAR = "last-year"


@dataclass(frozen=True)
class PackageIdentity:
    """Package name and optional version selector taken from a route.

    Attributes:
        name: Package name (e.g., "react" or "@babel/parser"). None when
            there was nothing to resolve.
        version: Exact version requested with the ``v/<version>`` convention.
    """

    name: Optional[str]
    version: Optional[str] = None


@dataclass(frozen=True)
class Maintainer:
    """A registry user with publish rights on a package."""

    name: str
    email: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> "Maintainer":
        if isinstance(data, str):
            return cls(name=data)
        return cls(name=data.get("name", ""), email=data.get("email"))


@dataclass(frozen=True)
class Repository:
    """Source repository descriptor as published in package.json."""

    url: Optional[str] = None
    type: Optional[str] = None
    directory: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> Optional["Repository"]:
        if not data:
            return None
        if isinstance(data, str):
            return cls(url=data)
        return cls(
            url=data.get("url"),
            type=data.get("type"),
            directory=data.get("directory"),
        )


@dataclass(frozen=True)
class RawRegistryMetadata:
    """The full package document returned by the registry.

    ``versions`` keeps the upstream ``version -> document`` mapping as an
    ordered tuple of pairs. The order is the upstream iteration order and
    carries no chronological meaning.

    Attributes:
        name: Package name.
        dist_tags: Tag name to version string (e.g., {"latest": "2.0.0"}).
        versions: Ordered (version, version document) pairs.
        time: Version string, "created" and "modified" to ISO timestamps.
        maintainers: Current maintainers.
        description: Package-level description.
        author: Raw author field (string or structured).
        repository: Repository descriptor.
        license: Package-level license.
        homepage: Homepage URL.
        keywords: Package-level keywords.
        readme: Raw readme text.
    """

    name: str
    dist_tags: dict[str, str] = field(default_factory=dict)
    versions: tuple[tuple[str, dict[str, Any]], ...] = ()
    time: dict[str, str] = field(default_factory=dict)
    maintainers: tuple[Maintainer, ...] = ()
    description: Optional[str] = None
    author: Any = None
    repository: Optional[Repository] = None
    license: Optional[str] = None
    homepage: Optional[str] = None
    keywords: tuple[str, ...] = ()
    readme: Optional[str] = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "RawRegistryMetadata":
        """Build metadata from a decoded registry response.

        Args:
            data: JSON document from ``GET <registry>/<name>``.

        Returns:
            The parsed RawRegistryMetadata.
        """
        return cls(
            name=data.get("name", ""),
            dist_tags=dict(data.get("dist-tags") or {}),
            versions=tuple((data.get("versions") or {}).items()),
            time=dict(data.get("time") or {}),
            maintainers=tuple(
                Maintainer.from_json(m) for m in data.get("maintainers") or []
            ),
            description=data.get("description"),
            author=data.get("author"),
            repository=Repository.from_json(data.get("repository")),
            license=license_text(data.get("license")),
            homepage=data.get("homepage"),
            keywords=tuple(data.get("keywords") or ()),
            readme=data.get("readme"),
        )

    @property
    def latest(self) -> Optional[str]:
        """Return the version the ``latest`` dist-tag points to."""
        return self.dist_tags.get("latest")

    def version_document(self, version: str) -> Optional[dict[str, Any]]:
        """Return the version-specific document, or None if unpublished."""
        for key, document in self.versions:
            if key == version:
                return document
        return None


@dataclass(frozen=True)
class VersionRecord:
    """One published version with its publish timestamp.

    Attributes:
        version: Version string.
        date: ISO timestamp, or "" when the registry has no entry.
        deprecated: Deprecation message for this version, if any.
    """

    version: str
    date: str = ""
    deprecated: Optional[str] = None


@dataclass(frozen=True)
class PackageAggregate:
    """Display-ready view of one package at one resolved version."""

    name: str
    version: str
    description: Optional[str] = None
    keywords: tuple[str, ...] = ()
    author: Optional[str] = None
    license: Optional[str] = None
    homepage: Optional[str] = None
    repository: Optional[Repository] = None
    readme: Optional[str] = None
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    peer_dependencies: dict[str, str] = field(default_factory=dict)
    versions: tuple[VersionRecord, ...] = ()
    maintainers: tuple[Maintainer, ...] = ()
    published_at: Optional[str] = None
    updated_at: Optional[str] = None
    deprecated: Optional[str] = None
    dist_tags: dict[str, str] = field(default_factory=dict)
    engines: dict[str, str] = field(default_factory=dict)
    types: bool = False
    unpacked_size: Optional[int] = None
    file_count: Optional[int] = None

    @property
    def is_deprecated(self) -> bool:
        return self.deprecated is not None


@dataclass(frozen=True)
class ScoreDetail:
    """Search ranking components, each between 0 and 1."""

    quality: float = 0.0
    popularity: float = 0.0
    maintenance: float = 0.0


@dataclass(frozen=True)
class SearchHit:
    """Summary of a package as returned by the search endpoint.

    Attributes:
        name: Package name.
        version: Latest version at indexing time.
        description: Short description.
        keywords: Package keywords.
        author: Author display name.
        date: ISO timestamp of the last publish.
        score: Ranking detail.
        downloads: Weekly download count, filled in after the search.
    """

    name: str
    version: str
    description: Optional[str] = None
    keywords: tuple[str, ...] = ()
    author: Optional[str] = None
    date: Optional[str] = None
    score: Optional[ScoreDetail] = None
    downloads: Optional[int] = None

    def with_downloads(self, downloads: int) -> "SearchHit":
        """Return a copy of this hit carrying a download count."""
        return replace(self, downloads=downloads)


@dataclass(frozen=True)
class SearchResults:
    """One page of search hits plus the total number of matches."""

    hits: tuple[SearchHit, ...]
    total: int


@dataclass(frozen=True)
class DownloadPoint:
    """Download count for a single day."""

    date: str
    downloads: int


@dataclass(frozen=True)
class Enriched(Generic[T]):
    """Result of an enrichment call that is allowed to fail.

    Either carries the fetched value, or a default value together with the
    reason the fetch was abandoned.

    Attributes:
        value: Fetched value, or the default when degraded.
        reason: Why the default was used. None on success.
    """

    value: T
    reason: Optional[str] = None

    @classmethod
    def ok(cls, value: T) -> "Enriched[T]":
        return cls(value=value)

    @classmethod
    def degraded(cls, default: T, reason: str) -> "Enriched[T]":
        return cls(value=default, reason=reason)

    @property
    def is_degraded(self) -> bool:
        return self.reason is not None


@dataclass(frozen=True)
class PackagePage:
    """Everything needed to display a package detail page."""

    package: PackageAggregate
    weekly_downloads: int = 0

    template_name = "package.md.j2"


@dataclass(frozen=True)
class SearchPage:
    """One page of search results with pagination helpers.

    Attributes:
        query: Search text as entered.
        page: 1-based page number.
        per_page: Hits per page.
        hits: Hits on this page, each with a download count.
        total: Total number of matches across all pages.
    """

    query: str
    page: int
    per_page: int
    hits: tuple[SearchHit, ...] = ()
    total: int = 0

    template_name = "search.md.j2"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.per_page)

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1

    @property
    def first_index(self) -> int:
        return self.offset + 1

    @property
    def last_index(self) -> int:
        return min(self.offset + self.per_page, self.total)


@dataclass(frozen=True)
class UserPage:
    """Packages published by one maintainer."""

    username: str
    hits: tuple[SearchHit, ...] = ()
    total: int = 0

    template_name = "user.md.j2"

    @property
    def profile_url(self) -> str:
        return f"https://www.npmjs.com/~{self.username}"


def license_text(value: Any) -> Optional[str]:
    """Return the license string from a string or legacy {"type": ...} field."""
    # Old packages publish {"type": "MIT", "url": ...} instead of a string.
    if isinstance(value, dict):
        return value.get("type")
    return value
