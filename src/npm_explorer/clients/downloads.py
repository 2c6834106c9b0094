"""Client for the npm downloads statistics API.

Download counts are enrichment data: a package page or a listing must still
render when they are unavailable. Every failure therefore degrades to a
default value (0 or an empty range) and is reported through
:class:`npm_explorer.models.Enriched` rather than raised.
"""

import logging
from typing import Any, Optional

import aiohttp

from npm_explorer.clients.http import HttpClient
from npm_explorer.clients.names import encode_package_name
from npm_explorer.models import DownloadPoint, Enriched, Period

logger = logging.getLogger(__name__)


class DownloadsClient(HttpClient):
    """Client for point and range download statistics."""

    async def fetch_download_count(
        self, name: str, period: Period = Period.LAST_WEEK
    ) -> Enriched[int]:
        """Fetch the number of downloads of a package over a period.

        Args:
            name: Package name.
            period: Time window to count.

        Returns:
            The count, or 0 with the reason it could not be fetched.
        """
        data, reason = await self._fetch("point", name, Period(period))
        if data is None:
            return Enriched.degraded(0, reason)

        downloads = data.get("downloads")
        if not isinstance(downloads, int) or isinstance(downloads, bool) or downloads < 0:
            return self._degrade(0, name, f"no download count in response: {downloads!r}")
        return Enriched.ok(downloads)

    async def get_download_count(self, name: str, period: Period = Period.LAST_WEEK) -> int:
        """Return the download count for a period, 0 if unavailable."""
        return (await self.fetch_download_count(name, period)).value

    async def fetch_download_range(
        self, name: str, period: Period = Period.LAST_MONTH
    ) -> Enriched[list[DownloadPoint]]:
        """Fetch daily download counts of a package over a period.

        Args:
            name: Package name.
            period: Time window to cover.

        Returns:
            Daily points in the order the API returns them, or an empty list
            with the reason they could not be fetched.
        """
        data, reason = await self._fetch("range", name, Period(period))
        if data is None:
            return Enriched.degraded([], reason)

        try:
            points = [
                DownloadPoint(date=day["day"], downloads=int(day["downloads"]))
                for day in data["downloads"]
            ]
        except (KeyError, TypeError, ValueError) as e:
            return self._degrade([], name, f"malformed download range: {e!r}")
        return Enriched.ok(points)

    async def get_download_range(
        self, name: str, period: Period = Period.LAST_MONTH
    ) -> list[DownloadPoint]:
        """Return daily download counts for a period, empty if unavailable."""
        return (await self.fetch_download_range(name, period)).value

    async def _fetch(
        self, kind: str, name: str, period: Period
    ) -> tuple[Optional[dict[str, Any]], Optional[str]]:
        """GET ``<downloads>/<kind>/<period>/<name>``.

        Returns:
            ``(document, None)`` on success, ``(None, reason)`` otherwise.
        """
        url = f"{self.settings.downloads_url}/{kind}/{period.value}/{encode_package_name(name)}"
        logger.debug("Fetching download statistics from %s", url)

        try:
            session = await self._get_session()
            async with session.get(url) as response:
                if not response.ok:
                    # New, unpublished or invalid packages have no statistics
                    reason = f"HTTP {response.status}"
                    logger.debug("No download statistics for %s: %s", name, reason)
                    return None, reason
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, TimeoutError, ValueError) as e:
            # ValueError covers bodies that are not UTF-8 or not JSON
            reason = f"{type(e).__name__}: {e}"
            logger.debug("Download statistics unavailable for %s: %s", name, reason)
            return None, reason

        if not isinstance(data, dict):
            reason = "response is not a JSON object"
            logger.debug("Download statistics unavailable for %s: %s", name, reason)
            return None, reason
        return data, None

    def _degrade(self, default, name: str, reason: str) -> Enriched:
        logger.debug("Download statistics unavailable for %s: %s", name, reason)
        return Enriched.degraded(default, reason)
