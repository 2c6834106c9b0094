"""Page-level orchestration of the registry and downloads clients.

Each method builds everything one page needs: primary content from the
registry, enriched with download counts fetched concurrently.
"""

import asyncio
import logging
from collections.abc import Sequence
from typing import Optional

from npm_explorer.clients import DownloadsClient, RegistryClient
from npm_explorer.concurrency import gather_map
from npm_explorer.config import ExplorerSettings
from npm_explorer.errors import PackageNotFoundError
from npm_explorer.models import PackagePage, Period, SearchHit, SearchPage, UserPage
from npm_explorer.resolver import parse_package_path

logger = logging.getLogger(__name__)

RESULTS_PER_PAGE = 20


class NpmExplorer:
    """Facade that assembles package, search and maintainer pages.

    Attributes:
        settings: Endpoints and transport settings shared by both clients.
        registry: Client for search and package documents.
        downloads: Client for download statistics.
    """

    def __init__(
        self,
        settings: Optional[ExplorerSettings] = None,
        registry: Optional[RegistryClient] = None,
        downloads: Optional[DownloadsClient] = None,
    ) -> None:
        """Initialize the explorer with optional custom clients.

        Args:
            settings: Settings for the default clients. Defaults to
                ExplorerSettings.from_env().
            registry: Optional custom RegistryClient.
            downloads: Optional custom DownloadsClient.
        """
        self.settings = settings or ExplorerSettings.from_env()
        self.registry = registry or RegistryClient(self.settings)
        self.downloads = downloads or DownloadsClient(self.settings)

    async def package_page(self, segments: Sequence[str]) -> PackagePage:
        """Build the detail page for the package named by route segments.

        Details and the weekly download count are fetched concurrently.

        Args:
            segments: Route segments, e.g. ``["@babel", "parser", "v", "7.0.0"]``.

        Returns:
            The package aggregate and its weekly downloads.

        Raises:
            PackageNotFoundError: If no name could be resolved or the package
                does not exist.
            VersionNotFoundError: If the requested version does not exist.
            UpstreamError: On any other registry failure.
        """
        identity = parse_package_path(segments)
        if identity.name is None:
            raise PackageNotFoundError(identity.name)

        logger.debug("Loading package page for %s (version=%s)", identity.name, identity.version)
        # Both branches settle before returning so no request outlives the
        # sessions closed in __aexit__.
        package, downloads = await asyncio.gather(
            self.registry.get_details(identity.name, identity.version),
            self.downloads.fetch_download_count(identity.name, Period.LAST_WEEK),
            return_exceptions=True,
        )
        if isinstance(package, BaseException):
            raise package
        if isinstance(downloads, BaseException):
            raise downloads
        return PackagePage(package=package, weekly_downloads=downloads.value)

    async def search_page(
        self, query: str, page: int = 1, per_page: int = RESULTS_PER_PAGE
    ) -> SearchPage:
        """Build one page of search results with weekly downloads per hit.

        Args:
            query: Search text.
            page: 1-based page number.
            per_page: Hits per page.

        Returns:
            The search page.

        Raises:
            ValueError: If ``page`` or ``per_page`` is not positive.
            UpstreamError: If the search fails.
        """
        if page < 1:
            raise ValueError(f"page must be at least 1, got {page}")

        results = await self.registry.search(query, size=per_page, from_=(page - 1) * per_page)
        hits = await self.with_downloads(results.hits)
        return SearchPage(
            query=query, page=page, per_page=per_page, hits=hits, total=results.total
        )

    async def user_page(self, username: str) -> UserPage:
        """Build the listing of packages maintained by ``username``."""
        results = await self.registry.maintainer_packages(username)
        hits = await self.with_downloads(results.hits)
        return UserPage(username=username, hits=hits, total=results.total)

    async def popular(self, count: int = 10) -> tuple[SearchHit, ...]:
        """Return popular packages with weekly downloads."""
        results = await self.registry.popular_packages(count)
        return await self.with_downloads(results.hits)

    async def with_downloads(self, hits: Sequence[SearchHit]) -> tuple[SearchHit, ...]:
        """Attach the weekly download count to every hit.

        One request per hit, all in flight at once unless
        ``settings.concurrency_limit`` is set. A failed count becomes 0.
        """

        async def enrich(hit: SearchHit) -> SearchHit:
            downloads = await self.downloads.fetch_download_count(hit.name, Period.LAST_WEEK)
            return hit.with_downloads(downloads.value)

        enriched = await gather_map(enrich, hits, limit=self.settings.concurrency_limit)
        logger.debug("Fetched download counts for %d packages", len(enriched))
        return tuple(enriched)

    async def close(self) -> None:
        """Close both clients' HTTP sessions."""
        await self.registry.close()
        await self.downloads.close()

    async def __aenter__(self) -> "NpmExplorer":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
