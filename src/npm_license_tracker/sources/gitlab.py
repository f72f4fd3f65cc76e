"""Directory source for GitLab repositories.

The repository tree API is paginated; pages are followed through the
``Link: <...>; rel="next"`` response header one request at a time, since the
next page URL is only known once the previous response arrived.
"""

from typing import Optional
from urllib.parse import quote, urlparse

import aiohttp

from npm_license_tracker.sources.http import HttpSource

GITLAB_API = "https://gitlab.com/api/v4"
PAGE_SIZE = 100


class GitLabSource(HttpSource):
    """Source reading the root of a GitLab repository.

    Attributes:
        project_path: Namespace and project, e.g. "group/project".
    """

    def __init__(self, repo_url: str, session: aiohttp.ClientSession) -> None:
        super().__init__(repo_url, session)
        self.project_path = urlparse(repo_url).path.strip("/")
        if not self.project_path:
            raise ValueError(f"Not a GitLab repository URL: {repo_url}")

    @property
    def name(self) -> str:
        return "GitLab"

    @property
    def tree_url(self) -> str:
        project_id = quote(self.project_path, safe="")
        return f"{GITLAB_API}/projects/{project_id}/repository/tree?per_page={PAGE_SIZE}"

    def raw_url(self, name: str) -> str:
        return f"{self.repo_url}/-/raw/master/{name}"

    async def readdir(self) -> list[str]:
        names: list[str] = []
        next_url: Optional[str] = self.tree_url

        while next_url:
            contents, next_url = await self._get_json(next_url)
            if not isinstance(contents, list):
                break

            for entry in contents:
                if isinstance(entry, dict) and "name" in entry:
                    names.append(entry["name"])

        return names

    async def read_file(self, name: str) -> Optional[str]:
        return await self._get_text(self.raw_url(name))
