"""Shared HTTP plumbing for remote directory sources."""

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from npm_license_tracker.sources.base import BaseSource

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = aiohttp.ClientTimeout(total=30)


class HttpSource(BaseSource):
    """Base class for sources that make HTTP requests.

    The aiohttp.ClientSession is owned by the caller (see RemoteSources) so
    that every repository shares one connection pool.

    Attributes:
        repo_url: Normalized repository URL.
    """

    def __init__(self, repo_url: str, session: aiohttp.ClientSession) -> None:
        self.repo_url = repo_url
        self._session = session

    def _headers(self) -> dict[str, str]:
        """Return extra request headers. Subclasses may add authentication."""
        return {}

    async def _get_text(self, url: str) -> Optional[str]:
        """Fetch a URL as text.

        Args:
            url: URL to fetch.

        Returns:
            Response body on a 200 response, None otherwise.
        """
        try:
            async with self._session.get(url, headers=self._headers()) as response:
                if response.status != 200:
                    await self._log_failure(url, response)
                    return None
                return await response.text(errors="replace")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug("Network error fetching %s: %s", url, e)
            return None

    async def _get_json(self, url: str) -> tuple[Optional[Any], Optional[str]]:
        """Fetch a URL as JSON.

        Args:
            url: URL to fetch.

        Returns:
            Tuple of (decoded JSON or None, URL of the next page or None).
        """
        try:
            async with self._session.get(url, headers=self._headers()) as response:
                if not 200 <= response.status < 300:
                    await self._log_failure(url, response)
                    return None, None

                next_link = response.links.get("next")
                next_url = str(next_link["url"]) if next_link else None

                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    logger.error("Invalid JSON from %s: %s", url, e)
                    return None, None

                return data, next_url
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug("Network error fetching %s: %s", url, e)
            return None, None

    async def _log_failure(self, url: str, response: aiohttp.ClientResponse) -> None:
        try:
            body = await response.text(errors="replace")
        except aiohttp.ClientError:
            body = ""
        logger.error('"%s" responded with %d: %s', url, response.status, body)
