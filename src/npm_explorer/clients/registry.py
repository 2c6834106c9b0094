"""Client for the npm registry: search and package documents.

Failures here are primary-content failures. A missing package or version
raises a NotFoundError; any other non-success response or transport error
raises an UpstreamError.
"""

import logging
from typing import Any, Optional

import aiohttp

from npm_explorer.clients.http import HttpClient
from npm_explorer.clients.names import encode_package_name
from npm_explorer.errors import PackageNotFoundError, UpstreamError, VersionNotFoundError
from npm_explorer.models import (
    PackageAggregate,
    RawRegistryMetadata,
    ScoreDetail,
    SearchHit,
    SearchResults,
)
from npm_explorer.normalizer import author_name, normalize

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAINTAINER_PAGE_SIZE = 50
POPULAR_QUERY = "keywords:javascript"


class RegistryClient(HttpClient):
    """Read-only client for the npm registry.

    Use as an async context manager or call close() when done.
    """

    async def search(
        self,
        query: str,
        size: int = DEFAULT_PAGE_SIZE,
        from_: int = 0,
    ) -> SearchResults:
        """Search the registry.

        Args:
            query: Search text. Supports qualifiers such as ``maintainer:``.
            size: Number of hits to return. Must be positive.
            from_: Offset of the first hit. Must not be negative.

        Returns:
            The hits on this page and the total number of matches.

        Raises:
            ValueError: If ``size`` or ``from_`` is out of range.
            UpstreamError: If the registry does not answer with success.
        """
        if size <= 0:
            raise ValueError(f"size must be positive, got {size}")
        if from_ < 0:
            raise ValueError(f"from_ must not be negative, got {from_}")

        url = f"{self.settings.registry_url}/-/v1/search"
        params = {"text": query, "size": str(size), "from": str(from_)}
        logger.debug("Searching %s for %r (size=%d, from=%d)", url, query, size, from_)

        try:
            session = await self._get_session()
            async with session.get(url, params=params) as response:
                if not response.ok:
                    logger.error(
                        "Search for %r returned status %d", query, response.status
                    )
                    raise UpstreamError(
                        f"Search failed: {response.reason}", status=response.status
                    )
                data = await self._read_json(response)
        except aiohttp.ClientError as e:
            logger.error("Network error searching for %r: %s", query, e)
            raise UpstreamError(f"Search failed: {e}") from e
        except TimeoutError as e:
            logger.error("Timed out searching for %r", query)
            raise UpstreamError("Search failed: timed out") from e

        hits = tuple(self._parse_search_object(obj) for obj in data.get("objects") or [])
        return SearchResults(hits=hits, total=int(data.get("total") or 0))

    async def get_metadata(self, name: str) -> RawRegistryMetadata:
        """Fetch the full registry document for a package.

        Args:
            name: Package name, scoped or not.

        Returns:
            The parsed registry document.

        Raises:
            PackageNotFoundError: If the registry answers 404.
            UpstreamError: On any other non-success response.
        """
        url = f"{self.settings.registry_url}/{encode_package_name(name)}"
        logger.debug("Fetching registry metadata from %s", url)

        try:
            session = await self._get_session()
            async with session.get(url) as response:
                if response.status == 404:
                    logger.warning("Package %s not found on the registry", name)
                    raise PackageNotFoundError(name)

                if not response.ok:
                    logger.error(
                        "Registry returned status %d for %s", response.status, name
                    )
                    raise UpstreamError(
                        f"Failed to fetch package: {response.reason}",
                        status=response.status,
                    )

                data = await self._read_json(response)
        except aiohttp.ClientError as e:
            logger.error("Network error fetching metadata for %s: %s", name, e)
            raise UpstreamError(f"Failed to fetch package: {e}") from e
        except TimeoutError as e:
            logger.error("Timed out fetching metadata for %s", name)
            raise UpstreamError("Failed to fetch package: timed out") from e

        return RawRegistryMetadata.from_json(data)

    async def get_details(
        self, name: Optional[str], version: Optional[str] = None
    ) -> PackageAggregate:
        """Fetch and normalize one version of a package.

        Args:
            name: Package name. None is treated as a missing package.
            version: Version to show. Defaults to the ``latest`` dist-tag.

        Returns:
            The normalized package aggregate.

        Raises:
            PackageNotFoundError: If the package does not exist.
            VersionNotFoundError: If the package exists but the version
                does not.
            UpstreamError: On any other registry failure.
        """
        if not name:
            raise PackageNotFoundError(name)

        metadata = await self.get_metadata(name)
        target = version or metadata.latest
        if target is None or metadata.version_document(target) is None:
            logger.warning("Version %s of %s not found", target, name)
            raise VersionNotFoundError(name, target)

        return normalize(metadata, target)

    async def popular_packages(self, count: int = 10) -> SearchResults:
        """Return widely used packages for a landing listing."""
        return await self.search(POPULAR_QUERY, size=count)

    async def maintainer_packages(
        self, username: str, size: int = MAINTAINER_PAGE_SIZE
    ) -> SearchResults:
        """Return packages maintained by ``username``."""
        return await self.search(f"maintainer:{username}", size=size)

    async def _read_json(self, response: aiohttp.ClientResponse) -> dict[str, Any]:
        """Decode a response body that must be a JSON object.

        Raises:
            UpstreamError: If the body is not UTF-8, not JSON, or not an object.
        """
        try:
            data = await response.json(content_type=None)
        except ValueError as e:
            logger.error("Failed to parse JSON response from %s: %s", response.url, e)
            raise UpstreamError(
                f"Malformed response from {response.url}", status=response.status
            ) from e

        if not isinstance(data, dict):
            logger.error(
                "Expected a JSON object from %s, got %s", response.url, type(data).__name__
            )
            raise UpstreamError(
                f"Malformed response from {response.url}", status=response.status
            )
        return data

    def _parse_search_object(self, obj: dict[str, Any]) -> SearchHit:
        """Convert one entry of the search envelope into a SearchHit."""
        package = obj.get("package") or {}
        detail = (obj.get("score") or {}).get("detail")
        score = None
        if detail:
            score = ScoreDetail(
                quality=detail.get("quality", 0.0),
                popularity=detail.get("popularity", 0.0),
                maintenance=detail.get("maintenance", 0.0),
            )

        return SearchHit(
            name=package.get("name", ""),
            version=package.get("version", ""),
            description=package.get("description"),
            keywords=tuple(package.get("keywords") or ()),
            author=author_name(package.get("author")),
            date=package.get("date"),
            score=score,
        )
