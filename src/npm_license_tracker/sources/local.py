"""Directory source backed by the local filesystem."""

import logging
import os
from pathlib import Path
from typing import Optional

from npm_license_tracker.sources.base import BaseSource

logger = logging.getLogger(__name__)


class LocalSource(BaseSource):
    """Source reading entries of a directory on disk.

    Attributes:
        base_dir: Directory the source is rooted at.
    """

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = Path(base_dir)

    @property
    def name(self) -> str:
        return "local"

    async def readdir(self) -> list[str]:
        """List the directory, sorted for a stable extraction order."""
        try:
            return sorted(os.listdir(self.base_dir))
        except OSError as e:
            logger.debug("Could not list %s: %s", self.base_dir, e)
            return []

    async def read_file(self, name: str) -> Optional[str]:
        """Read a file of the directory, None if missing or not a file."""
        try:
            with open(self.base_dir / name, "r", encoding="utf-8", errors="replace") as f:
                return f.read()
        except OSError:
            return None
