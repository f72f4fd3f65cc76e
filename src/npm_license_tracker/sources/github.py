"""Directory source for GitHub repositories.

Lists the repository root through the contents API and reads files from the
raw content host, both against the default branch.
"""

from typing import Optional
from urllib.parse import urlparse

import aiohttp

from npm_license_tracker.sources.http import HttpSource

GITHUB_API = "https://api.github.com"
GITHUB_RAW = "https://raw.githubusercontent.com"


def parse_github_url(url: str) -> Optional[tuple[str, str]]:
    """Parse a GitHub URL to extract owner and repository name.

    Args:
        url: Normalized GitHub repository URL.

    Returns:
        Tuple of (owner, repo) if valid GitHub URL, None otherwise.
    """
    parsed = urlparse(url)

    if parsed.netloc not in ("github.com", "www.github.com"):
        return None

    path = parsed.path.strip("/")
    if path.endswith(".git"):
        path = path[:-4]

    parts = path.split("/")
    if len(parts) != 2:
        return None

    owner, repo = parts
    if not owner or not repo:
        return None

    return (owner, repo)


class GitHubSource(HttpSource):
    """Source reading the root of a GitHub repository.

    Attributes:
        owner: Repository owner.
        repo: Repository name.
        github_token: Optional personal access token, raises the API rate
            limit from 60 to 5000 requests/hour.
    """

    def __init__(
        self,
        repo_url: str,
        session: aiohttp.ClientSession,
        github_token: Optional[str] = None,
    ) -> None:
        super().__init__(repo_url, session)
        parsed = parse_github_url(repo_url)
        if parsed is None:
            raise ValueError(f"Not a GitHub repository URL: {repo_url}")
        self.owner, self.repo = parsed
        self.github_token = github_token

    @property
    def name(self) -> str:
        return "GitHub"

    @property
    def contents_url(self) -> str:
        return f"{GITHUB_API}/repos/{self.owner}/{self.repo}/contents"

    def raw_url(self, name: str) -> str:
        return f"{GITHUB_RAW}/{self.owner}/{self.repo}/HEAD/{name}"

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self.github_token:
            headers["Authorization"] = f"Bearer {self.github_token}"
        return headers

    async def readdir(self) -> list[str]:
        contents, _ = await self._get_json(self.contents_url)
        if not isinstance(contents, list):
            return []
        return [
            entry["name"]
            for entry in contents
            if isinstance(entry, dict) and "name" in entry
        ]

    async def read_file(self, name: str) -> Optional[str]:
        return await self._get_text(self.raw_url(name))
