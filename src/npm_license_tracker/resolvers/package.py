"""Resolver producing the license record of one installed package.

Resolution strategy:
1. Overrides: forced license text replaces every other source.
2. Local files: notice, license and readme files of the package directory.
3. Remote repository: when local text is missing or inconclusive, the root
   of the package's GitHub/GitLab repository is scanned the same way. Results
   are cached per repository URL.

The license expression prefers the override, then the metadata's declared
license, then the merged expression of the license texts marked with ``*``.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from npm_license_tracker.cache import LicenseCache, cache_key
from npm_license_tracker.metadata import normalize_funding, read_package_meta
from npm_license_tracker.models import (
    UNKNOWN,
    ForcedLicense,
    Options,
    PackageMeta,
    ResolvedLicense,
    ResolvedPackage,
)
from npm_license_tracker.resolvers.extraction import extract_licenses, is_inconclusive
from npm_license_tracker.resolvers.forced import load_forced_license
from npm_license_tracker.resolvers.spdx import (
    correct_license_expression,
    declared_license_expression,
    merge_expressions,
)
from npm_license_tracker.sources import LocalSource, RemoteSources, package_repo_url

logger = logging.getLogger(__name__)


class PackageResolver:
    """Resolves the licenses of a single package directory.

    Attributes:
        options: Scan options.
        cache: Cache of remote lookups.
        remote: Factory for remote repository sources.
    """

    def __init__(
        self,
        options: Optional[Options] = None,
        cache: Optional[LicenseCache] = None,
        remote: Optional[RemoteSources] = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            options: Scan options, defaults to Options().
            cache: Cache of remote lookups. If not provided, one is created
                for ``options.cache_folder``.
            remote: Remote source factory. If not provided, one is created
                and must be closed with close().
        """
        self.options = options or Options()
        self.cache = cache or LicenseCache(self.options.cache_folder)
        self._owns_remote = remote is None
        self.remote = remote or RemoteSources(self.options.github_token)

    async def resolve(self, package_dir: Union[str, Path]) -> Optional[ResolvedPackage]:
        """Resolve the licenses of a package directory.

        Args:
            package_dir: Directory holding a ``package.json``.

        Returns:
            ResolvedPackage, or None if the directory is not a package or the
            package is filtered out by the include/exclude options.
        """
        package_dir = Path(package_dir)
        meta = read_package_meta(package_dir)
        if meta is None:
            return None

        # folder names do not always match package names, filter again
        if not self.options.is_name_allowed(meta.name):
            logger.debug("Skipping filtered package %s", meta.name)
            return None

        override = self.options.overrides.get(meta.name)

        if override is not None and override.has_text:
            licenses = [
                load_forced_license(
                    ForcedLicense(
                        expression=override.license, text=override.text, file=override.file
                    )
                )
            ]
        else:
            licenses = await self.find_licenses(package_dir, meta)

        resolved = ResolvedPackage(
            name=meta.name,
            version=meta.version or "",
            path=str(package_dir.resolve()),
            license_expression=self.license_expression(meta, licenses),
            licenses=licenses,
        )
        self._enrich(resolved, meta)

        logger.debug(
            "Resolved %s %s as %s with %d license text(s)",
            resolved.name,
            resolved.version,
            resolved.license_expression,
            len(resolved.licenses),
        )
        return resolved

    async def find_licenses(
        self, package_dir: Path, meta: PackageMeta
    ) -> list[ResolvedLicense]:
        """Find license fragments locally, falling back to the repository.

        Args:
            package_dir: Package directory.
            meta: Parsed package metadata.

        Returns:
            Ordered license fragments, possibly empty.
        """
        local = await extract_licenses(LocalSource(package_dir))
        if not is_inconclusive(local):
            return local

        repo_url = package_repo_url(meta)
        if not repo_url:
            return local

        key = cache_key(repo_url)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Using cached licenses of %s for %s", repo_url, meta.name)
            # a weak entry only records that the repository had nothing better
            return local if is_inconclusive(cached) else cached

        source = await self.remote.for_url(repo_url)
        logger.debug("Searching %s repository %s for %s", source.name, repo_url, meta.name)
        remote = await extract_licenses(source)

        if remote:
            self.cache.set(key, remote)
            return remote

        # cache the local result to avoid asking the repository again
        self.cache.set(key, local)
        return local

    def license_expression(
        self, meta: PackageMeta, licenses: list[ResolvedLicense]
    ) -> str:
        """Compute the license expression of a package.

        Args:
            meta: Parsed package metadata.
            licenses: License fragments found for the package.

        Returns:
            Override or declared expression, else the merged expression of
            the license texts followed by ``*``, else ``UNKNOWN``.
        """
        override = self.options.overrides.get(meta.name)
        if override is not None and override.license:
            return correct_license_expression(override.license)

        declared = declared_license_expression(meta.license)
        if declared:
            return declared

        if licenses:
            return merge_expressions(licenses) + "*"

        return UNKNOWN

    def _enrich(self, resolved: ResolvedPackage, meta: PackageMeta) -> None:
        if self.options.include_homepage:
            resolved.homepage = meta.homepage
        if self.options.include_repository:
            resolved.repository = package_repo_url(meta)
        if self.options.include_funding and meta.funding:
            resolved.funding = normalize_funding(meta.funding)

    async def close(self) -> None:
        """Close the remote source factory if this resolver created it."""
        if self._owns_remote:
            await self.remote.close()

    async def __aenter__(self) -> "PackageResolver":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
