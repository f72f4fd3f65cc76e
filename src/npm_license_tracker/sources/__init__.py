"""Directory sources for reading license files.

This module provides sources that list and read the files of a package,
either on disk or in its remote repository, and the factory selecting the
remote source for a repository URL.
"""

import logging
from typing import Optional

import aiohttp

from npm_license_tracker.sources.base import BaseSource
from npm_license_tracker.sources.github import GitHubSource
from npm_license_tracker.sources.gitlab import GitLabSource
from npm_license_tracker.sources.http import DEFAULT_TIMEOUT, HttpSource
from npm_license_tracker.sources.local import LocalSource
from npm_license_tracker.sources.null import NullSource
from npm_license_tracker.sources.repository import normalize_repo_url, package_repo_url

__all__ = [
    "BaseSource",
    "GitHubSource",
    "GitLabSource",
    "HttpSource",
    "LocalSource",
    "NullSource",
    "RemoteSources",
    "normalize_repo_url",
    "package_repo_url",
]

logger = logging.getLogger(__name__)


class RemoteSources:
    """Selects the remote source for a repository URL.

    Owns the aiohttp.ClientSession shared by every remote source. Use as an
    async context manager or call close() when done.

    Attributes:
        github_token: Optional GitHub token passed to GitHub sources.
    """

    def __init__(self, github_token: Optional[str] = None) -> None:
        self.github_token = github_token
        self._session: Optional[aiohttp.ClientSession] = None
        self._unsupported: set[str] = set()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session.

        Returns:
            The shared aiohttp ClientSession.
        """
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=DEFAULT_TIMEOUT)
        return self._session

    async def for_url(self, repo_url: str) -> BaseSource:
        """Return the source for a normalized repository URL.

        Args:
            repo_url: Normalized repository URL.

        Returns:
            A GitHub or GitLab source, or a NullSource for other hosts.
        """
        try:
            if repo_url.startswith("https://github.com/"):
                return GitHubSource(repo_url, await self._get_session(), self.github_token)
            if repo_url.startswith("https://gitlab.com/"):
                return GitLabSource(repo_url, await self._get_session())
        except ValueError as e:
            logger.debug("%s", e)

        if repo_url not in self._unsupported:
            self._unsupported.add(repo_url)
            logger.error('unsupported repository url "%s"', repo_url)
        return NullSource(repo_url)

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "RemoteSources":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
