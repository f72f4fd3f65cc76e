"""Project-wide license aggregation.

The aggregator discovers the installed packages of a project, resolves them
concurrently, and folds the results in discovery order:

1. Packages whose expression contains ``UNKNOWN`` or that have no license
   text are recorded in the error manifest.
2. Copies of a package with the same set of license texts collapse into one
   entry. A newer copy replaces the kept entry in place.
3. Configured ``append`` entries are added unconditionally.
"""

import asyncio
import dataclasses
import logging
from pathlib import Path
from typing import Optional, Union

from npm_license_tracker.cache import LicenseCache, default_cache_folder
from npm_license_tracker.models import (
    UNKNOWN,
    AppendEntry,
    Options,
    ResolvedPackage,
    ScanErrors,
    ScanResult,
)
from npm_license_tracker.resolvers.forced import load_forced_licenses
from npm_license_tracker.resolvers.package import PackageResolver
from npm_license_tracker.resolvers.spdx import merge_expressions
from npm_license_tracker.scanners import discover_package_dirs
from npm_license_tracker.sources import RemoteSources
from npm_license_tracker.versions import is_newer, parse_version

logger = logging.getLogger(__name__)


def same_license_texts(a: ResolvedPackage, b: ResolvedPackage) -> bool:
    """Return True if two records carry the same license texts, in any order."""
    if len(a.licenses) != len(b.licenses):
        return False
    return {lic.text for lic in a.licenses} == {lic.text for lic in b.licenses}


def resolve_append_entry(entry: AppendEntry) -> ResolvedPackage:
    """Build a record for a manually appended package.

    Args:
        entry: Appended package with forced license fragments.

    Returns:
        ResolvedPackage using the entry's expression, else the merged
        expression of its fragments.
    """
    licenses = load_forced_licenses(entry.licenses)
    expression = entry.license_expression or merge_expressions(licenses)
    return ResolvedPackage(
        name=entry.name,
        version=entry.version,
        path=entry.path,
        license_expression=expression,
        licenses=licenses,
    )


class LicenseAggregator:
    """Scans a project and produces the final license result set.

    Attributes:
        options: Scan options.
    """

    def __init__(self, options: Optional[Options] = None) -> None:
        """Initialize the aggregator.

        Args:
            options: Scan options, defaults to Options(). The object is
                copied, never modified.
        """
        self.options = dataclasses.replace(options) if options else Options()

    async def scan(self, project_root: Union[str, Path]) -> ScanResult:
        """Scan a project.

        Args:
            project_root: Root directory of the project.

        Returns:
            ScanResult with the resolved packages in discovery order and the
            error manifest.
        """
        project_root = Path(project_root)
        options = self.options
        if not options.cache_folder:
            options = dataclasses.replace(
                options, cache_folder=str(default_cache_folder(project_root))
            )

        package_dirs = await discover_package_dirs(project_root, options)
        logger.info("Resolving %d package directories", len(package_dirs))

        async with RemoteSources(options.github_token) as remote:
            cache = LicenseCache(options.cache_folder if options.use_cache else None)
            resolver = PackageResolver(options, cache, remote)
            packages = await self._resolve_all(resolver, package_dirs, options.concurrency)

        result = self.fold(packages)

        for entry in options.append:
            result.resolved.append(resolve_append_entry(entry))

        logger.info(
            "Scan complete: %d packages, %d invalid, %d without license text",
            len(result.resolved),
            len(result.errors.invalid_license),
            len(result.errors.missing_license_text),
        )
        return result

    async def _resolve_all(
        self, resolver: PackageResolver, package_dirs: list[Path], concurrency: int
    ) -> list[Optional[ResolvedPackage]]:
        semaphore = asyncio.Semaphore(max(1, concurrency))

        async def resolve_one(package_dir: Path) -> Optional[ResolvedPackage]:
            async with semaphore:
                return await resolver.resolve(package_dir)

        results = await asyncio.gather(
            *(resolve_one(package_dir) for package_dir in package_dirs),
            return_exceptions=True,
        )

        packages: list[Optional[ResolvedPackage]] = []
        for package_dir, result in zip(package_dirs, results):
            if isinstance(result, Exception):
                logger.error("Exception resolving %s: %s", package_dir, result)
                packages.append(None)
            else:
                packages.append(result)
        return packages

    @staticmethod
    def fold(packages: list[Optional[ResolvedPackage]]) -> ScanResult:
        """Fold resolved packages into the result set.

        Args:
            packages: Resolution results in discovery order, None entries are
                skipped.

        Returns:
            ScanResult with deduplicated records and the error manifest.
        """
        resolved: list[ResolvedPackage] = []
        errors = ScanErrors()
        # name -> indexes into resolved
        by_name: dict[str, list[int]] = {}

        for package in packages:
            if package is None:
                continue

            if UNKNOWN in package.license_expression:
                errors.invalid_license.append(package.name)
            if not package.licenses:
                errors.missing_license_text.append(package.name)

            indexes = by_name.setdefault(package.name, [])
            match = next(
                (i for i in indexes if same_license_texts(resolved[i], package)),
                None,
            )

            if match is None:
                indexes.append(len(resolved))
                resolved.append(package)
            else:
                kept = resolved[match]
                if is_newer(parse_version(package.version), parse_version(kept.version)):
                    logger.debug(
                        "Replacing %s %s with newer %s",
                        package.name,
                        kept.version,
                        package.version,
                    )
                    resolved[match] = package

        return ScanResult(resolved=resolved, errors=errors)


async def scan_project(
    project_root: Union[str, Path], options: Optional[Options] = None
) -> ScanResult:
    """Scan a project for the licenses of its installed dependencies.

    Args:
        project_root: Root directory of the project.
        options: Scan options, defaults to Options().

    Returns:
        ScanResult with resolved packages and the error manifest.
    """
    return await LicenseAggregator(options).scan(project_root)
