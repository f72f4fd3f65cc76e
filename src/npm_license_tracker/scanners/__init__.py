"""Package scanners for the supported Node.js install layouts.

This module provides scanners that find the installed package directories
of a project from an npm lockfile, a pnpm installation, or the
``node_modules`` tree itself.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from npm_license_tracker.models import Options
from npm_license_tracker.scanners.base import BaseScanner, ScanOutcome, ScanStatus
from npm_license_tracker.scanners.fallback import (
    DirectoryWalkScanner,
    GuidedScanner,
    list_installed_packages,
)
from npm_license_tracker.scanners.npm import NpmLockScanner
from npm_license_tracker.scanners.pnpm import PnpmScanner, decode_package_key

__all__ = [
    "BaseScanner",
    "DirectoryWalkScanner",
    "GuidedScanner",
    "NpmLockScanner",
    "PnpmScanner",
    "ScanOutcome",
    "ScanStatus",
    "decode_package_key",
    "discover_package_dirs",
    "get_scanners",
    "list_installed_packages",
]

logger = logging.getLogger(__name__)

# Registry of lockfile scanners in priority order
_SCANNERS: list[type[BaseScanner]] = [
    NpmLockScanner,
    PnpmScanner,
]


def get_scanners(project_root: Path, options: Options) -> list[BaseScanner]:
    """Build the scanner chain for a project.

    Lockfile scanners come first. Without a lockfile the dependency graph is
    walked, or the whole ``node_modules`` tree when dev dependencies are
    included (the graph only follows production edges).

    Args:
        project_root: Root directory of the project.
        options: Scan options.

    Returns:
        Scanner instances in the order they are tried.
    """
    scanners = [scanner_cls(project_root, options) for scanner_cls in _SCANNERS]
    if options.include_dev:
        scanners.append(DirectoryWalkScanner(project_root, options))
    else:
        scanners.append(GuidedScanner(project_root, options))
    return scanners


async def discover_package_dirs(
    project_root: Union[str, Path], options: Optional[Options] = None
) -> list[Path]:
    """Find the installed package directories of a project.

    The first applicable scanner wins. An unreadable lockfile yields an empty
    list rather than falling back to another layout.

    Args:
        project_root: Root directory of the project.
        options: Scan options, defaults to Options().

    Returns:
        Package directories in discovery order.
    """
    project_root = Path(project_root)
    options = options or Options()

    for scanner in get_scanners(project_root, options):
        outcome = await scanner.scan()
        if outcome.status is ScanStatus.NOT_APPLICABLE:
            continue

        logger.debug("Discovered packages of %s using %s", project_root, scanner.source_name)
        if outcome.status is ScanStatus.PARSE_ERROR:
            return []
        return outcome.paths

    return []
