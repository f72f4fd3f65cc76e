"""File-based cache for remote license lookups.

This module provides a persistent cache to avoid repeated API calls when
resolving license text from the same repository. Each repository gets one
JSON blob named after its percent-encoded URL.
"""

import json
import logging
import shutil
from pathlib import Path
from typing import Optional, Union
from urllib.parse import quote

from npm_license_tracker.models import CacheEntry, ResolvedLicense

logger = logging.getLogger(__name__)

# bump when the shape of cached data changes, older entries become misses
CACHE_VERSION = 1

CACHE_DIR_NAME = "npm-license-tracker"


def default_cache_folder(project_root: Union[str, Path]) -> Path:
    """Return the default cache folder of a project.

    Args:
        project_root: Root of the scanned project.

    Returns:
        ``<project_root>/node_modules/.cache/npm-license-tracker``
    """
    return Path(project_root) / "node_modules" / ".cache" / CACHE_DIR_NAME


def cache_key(repo_url: str) -> str:
    """Return the cache key (file name) for a repository URL."""
    return quote(repo_url, safe="")


class LicenseCache:
    """Blob cache storing the license fragments found for a repository.

    The cache is an optimization only: every failure to read or write an
    entry is treated as a miss.

    Attributes:
        folder: Folder holding the blobs, None disables caching.
    """

    def __init__(self, folder: Optional[Union[str, Path]] = None) -> None:
        """Initialize the license cache.

        Args:
            folder: Cache folder. If None or empty, every lookup misses and
                writes are dropped.
        """
        self.folder = Path(folder) if folder else None

    @property
    def enabled(self) -> bool:
        return self.folder is not None

    def get(self, key: str) -> Optional[list[ResolvedLicense]]:
        """Retrieve cached license data.

        Args:
            key: Cache key, see cache_key().

        Returns:
            List of ResolvedLicense objects on a hit, None if caching is
            disabled, the entry is missing, corrupted or was written with a
            different schema version.
        """
        if self.folder is None:
            return None

        try:
            with open(self.folder / key, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError):
            return None

        try:
            entry = CacheEntry(
                version=raw["version"],
                data=[ResolvedLicense.from_dict(item) for item in raw["data"]],
            )
        except (AttributeError, KeyError, TypeError, ValueError):
            # If data is corrupted, treat as cache miss
            logger.debug("Ignoring corrupted cache entry %s", key)
            return None

        if entry.version != CACHE_VERSION:
            return None

        return entry.data

    def set(self, key: str, licenses: list[ResolvedLicense]) -> None:
        """Store license data in the cache.

        Args:
            key: Cache key, see cache_key().
            licenses: License fragments to store (may be empty).
        """
        if self.folder is None:
            return

        payload = {
            "version": CACHE_VERSION,
            "data": [lic.to_dict() for lic in licenses],
        }

        try:
            self.folder.mkdir(parents=True, exist_ok=True)
            with open(self.folder / key, "w", encoding="utf-8") as f:
                json.dump(payload, f)
        except OSError as e:
            logger.debug("Could not write cache entry %s: %s", key, e)

    def clear(self) -> None:
        """Delete every cache entry."""
        if self.folder is None or not self.folder.exists():
            return
        shutil.rmtree(self.folder, ignore_errors=True)

    def info(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with cache information:
                - path: Path to the cache folder
                - count: Number of cached entries
                - size_bytes: Total size of the entries in bytes
        """
        count = 0
        size_bytes = 0
        if self.folder is not None and self.folder.is_dir():
            for entry in self.folder.iterdir():
                if entry.is_file():
                    count += 1
                    size_bytes += entry.stat().st_size

        return {
            "path": str(self.folder) if self.folder else "",
            "count": count,
            "size_bytes": size_bytes,
        }
