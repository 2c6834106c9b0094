"""Unit tests for NpmExplorer.

The registry and downloads clients are mocked so these tests cover the
page assembly: identity resolution, concurrent enrichment and error
propagation.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from npm_explorer.clients import DownloadsClient, RegistryClient
from npm_explorer.config import ExplorerSettings
from npm_explorer.errors import PackageNotFoundError, UpstreamError, VersionNotFoundError
from npm_explorer.explorer import NpmExplorer
from npm_explorer.models import (
    Enriched,
    PackageAggregate,
    Period,
    SearchHit,
    SearchResults,
)


@pytest.fixture
def mock_registry() -> RegistryClient:
    """Return a mock RegistryClient for testing."""
    mock = MagicMock(spec=RegistryClient)
    mock.get_details = AsyncMock()
    mock.search = AsyncMock()
    mock.maintainer_packages = AsyncMock()
    mock.popular_packages = AsyncMock()
    mock.close = AsyncMock()
    return mock


@pytest.fixture
def mock_downloads() -> DownloadsClient:
    """Return a mock DownloadsClient reporting 100 downloads per letter of the name."""
    mock = MagicMock(spec=DownloadsClient)

    async def fetch(name: str, period: Period = Period.LAST_WEEK) -> Enriched[int]:
        if name == "broken":
            return Enriched.degraded(0, "HTTP 404")
        return Enriched.ok(len(name) * 100)

    mock.fetch_download_count = AsyncMock(side_effect=fetch)
    mock.close = AsyncMock()
    return mock


@pytest.fixture
def explorer(mock_registry, mock_downloads) -> NpmExplorer:
    """Return an NpmExplorer with mocked clients."""
    return NpmExplorer(
        settings=ExplorerSettings(),
        registry=mock_registry,
        downloads=mock_downloads,
    )


def _results(*names: str, total: int = None) -> SearchResults:
    hits = tuple(SearchHit(name=name, version="1.0.0") for name in names)
    return SearchResults(hits=hits, total=len(hits) if total is None else total)


@pytest.mark.asyncio
async def test_package_page(explorer, mock_registry, mock_downloads) -> None:
    """Test that details and downloads are combined for a scoped route."""
    pkg = PackageAggregate(name="@babel/parser", version="7.0.0")
    mock_registry.get_details.return_value = pkg

    page = await explorer.package_page(["@babel", "parser", "v", "7.0.0"])

    assert page.package is pkg
    assert page.weekly_downloads == len("@babel/parser") * 100
    mock_registry.get_details.assert_awaited_once_with("@babel/parser", "7.0.0")
    mock_downloads.fetch_download_count.assert_awaited_once_with(
        "@babel/parser", Period.LAST_WEEK
    )


@pytest.mark.asyncio
async def test_package_page_fetches_concurrently(explorer, mock_registry, mock_downloads) -> None:
    """Test that the download count is requested while details are in flight."""
    started = asyncio.Event()

    async def fetch_details(name, version):
        await asyncio.wait_for(started.wait(), timeout=1)
        return PackageAggregate(name=name, version="1.0.0")

    async def fetch_downloads(name, period):
        started.set()
        return Enriched.ok(5)

    mock_registry.get_details.side_effect = fetch_details
    mock_downloads.fetch_download_count.side_effect = fetch_downloads

    page = await explorer.package_page(["react"])

    assert page.weekly_downloads == 5


@pytest.mark.asyncio
async def test_package_page_empty_route(explorer, mock_registry) -> None:
    """Test that an empty route is a not-found condition."""
    with pytest.raises(PackageNotFoundError):
        await explorer.package_page([])

    mock_registry.get_details.assert_not_awaited()


@pytest.mark.asyncio
async def test_package_page_propagates_not_found(explorer, mock_registry) -> None:
    """Test that version-not-found reaches the caller unchanged."""
    mock_registry.get_details.side_effect = VersionNotFoundError("react", "99.0.0")

    with pytest.raises(VersionNotFoundError):
        await explorer.package_page(["react", "v", "99.0.0"])


@pytest.mark.asyncio
async def test_package_page_waits_for_downloads_on_failure(
    explorer, mock_registry, mock_downloads
) -> None:
    """Test that a failed details fetch does not leave the count request running."""
    finished = asyncio.Event()

    async def fetch_downloads(name, period):
        await asyncio.sleep(0.01)
        finished.set()
        return Enriched.ok(5)

    mock_registry.get_details.side_effect = UpstreamError("Failed to fetch package: Bad Gateway")
    mock_downloads.fetch_download_count.side_effect = fetch_downloads

    with pytest.raises(UpstreamError):
        await explorer.package_page(["react"])

    assert finished.is_set()


@pytest.mark.asyncio
async def test_package_page_degraded_downloads(explorer, mock_registry) -> None:
    """Test that missing statistics do not block the page."""
    mock_registry.get_details.return_value = PackageAggregate(name="broken", version="1.0.0")

    page = await explorer.package_page(["broken"])

    assert page.weekly_downloads == 0


@pytest.mark.asyncio
async def test_search_page(explorer, mock_registry, mock_downloads) -> None:
    """Test paging offsets and per-hit download enrichment."""
    mock_registry.search.return_value = _results("react", "broken", "vue", total=45)

    page = await explorer.search_page("ui", page=2, per_page=20)

    mock_registry.search.assert_awaited_once_with("ui", size=20, from_=20)
    assert [hit.name for hit in page.hits] == ["react", "broken", "vue"]
    assert [hit.downloads for hit in page.hits] == [500, 0, 300]
    assert page.total == 45
    assert page.page == 2
    assert mock_downloads.fetch_download_count.await_count == 3


@pytest.mark.asyncio
async def test_search_page_rejects_page_zero(explorer) -> None:
    """Test that page numbers start at 1."""
    with pytest.raises(ValueError):
        await explorer.search_page("ui", page=0)


@pytest.mark.asyncio
async def test_search_page_propagates_upstream_error(explorer, mock_registry) -> None:
    """Test that search failures are not swallowed."""
    mock_registry.search.side_effect = UpstreamError("Search failed: Bad Gateway", status=502)

    with pytest.raises(UpstreamError):
        await explorer.search_page("ui")


@pytest.mark.asyncio
async def test_user_page(explorer, mock_registry) -> None:
    """Test the maintainer listing."""
    mock_registry.maintainer_packages.return_value = _results("left-pad", "pad-core")

    page = await explorer.user_page("stevemao")

    mock_registry.maintainer_packages.assert_awaited_once_with("stevemao")
    assert page.username == "stevemao"
    assert page.total == 2
    assert [hit.downloads for hit in page.hits] == [800, 800]


@pytest.mark.asyncio
async def test_user_page_without_packages(explorer, mock_registry, mock_downloads) -> None:
    """Test a maintainer with no packages."""
    mock_registry.maintainer_packages.return_value = _results()

    page = await explorer.user_page("nobody")

    assert page.hits == ()
    mock_downloads.fetch_download_count.assert_not_awaited()


@pytest.mark.asyncio
async def test_popular(explorer, mock_registry) -> None:
    """Test popular packages are enriched."""
    mock_registry.popular_packages.return_value = _results("react")

    hits = await explorer.popular(1)

    mock_registry.popular_packages.assert_awaited_once_with(1)
    assert hits[0].downloads == 500


@pytest.mark.asyncio
async def test_with_downloads_honours_concurrency_limit(mock_registry, mock_downloads) -> None:
    """Test that the configured cap bounds download requests in flight."""
    in_flight = 0
    peak = 0

    async def fetch(name, period):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return Enriched.ok(1)

    mock_downloads.fetch_download_count.side_effect = fetch
    explorer = NpmExplorer(
        settings=ExplorerSettings(concurrency_limit=2),
        registry=mock_registry,
        downloads=mock_downloads,
    )

    hits = await explorer.with_downloads(_results(*"abcdef").hits)

    assert len(hits) == 6
    assert peak == 2


@pytest.mark.asyncio
async def test_context_manager_closes_clients(explorer, mock_registry, mock_downloads) -> None:
    """Test that leaving the context closes both clients."""
    async with explorer:
        pass

    mock_registry.close.assert_awaited_once()
    mock_downloads.close.assert_awaited_once()
