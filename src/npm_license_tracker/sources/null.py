"""Directory source for repositories on unsupported hosts."""

from typing import Optional

from npm_license_tracker.sources.base import BaseSource


class NullSource(BaseSource):
    """Source that is always empty."""

    def __init__(self, repo_url: str) -> None:
        self.repo_url = repo_url

    @property
    def name(self) -> str:
        return "null"

    async def readdir(self) -> list[str]:
        return []

    async def read_file(self, name: str) -> Optional[str]:
        return None
