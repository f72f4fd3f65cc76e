"""Scanners for projects without a lockfile.

Without a lockfile the installed packages are found on disk. When dev
dependencies are excluded the walk follows the dependency graph from the
root ``package.json``; otherwise the whole ``node_modules`` tree is listed.
"""

import logging
import os
from pathlib import Path

from npm_license_tracker.metadata import read_dependency_names
from npm_license_tracker.scanners.base import BaseScanner, ScanOutcome

logger = logging.getLogger(__name__)

NODE_MODULES = "node_modules"


def list_installed_packages(modules_dir: Path) -> list[str]:
    """List the package names physically present in a node_modules folder.

    Scope folders are unwrapped, so ``@types/node`` appears as one name.
    Hidden entries such as ``.bin`` and ``.cache`` are skipped.

    Args:
        modules_dir: A ``node_modules`` directory.

    Returns:
        Sorted package names, empty if the folder does not exist.
    """
    names = []
    for entry in _list_dirs(modules_dir):
        if entry.startswith("@"):
            names.extend(f"{entry}/{child}" for child in _list_dirs(modules_dir / entry))
        else:
            names.append(entry)
    return names


def _list_dirs(folder: Path) -> list[str]:
    try:
        entries = sorted(os.listdir(folder))
    except OSError:
        return []
    return [
        entry
        for entry in entries
        if not entry.startswith(".") and (folder / entry).is_dir()
    ]


class GuidedScanner(BaseScanner):
    """Walks the dependency graph declared by the installed packages.

    Starting at the project root, each package contributes its
    ``dependencies``, ``optionalDependencies`` and ``peerDependencies``.
    Nested packages also contribute everything installed in their own
    ``node_modules``. A dependency is looked up in the package's own
    ``node_modules`` first, then in the root ``node_modules``.
    """

    @property
    def source_name(self) -> str:
        return "dependency graph"

    async def scan(self) -> ScanOutcome:
        root_modules = self.project_root / NODE_MODULES
        found: list[Path] = []
        seen: set[Path] = set()
        stack = [self.project_root]

        while stack:
            folder = stack.pop()
            names = read_dependency_names(folder)
            if names is None:
                continue

            local_modules = folder / NODE_MODULES
            installed = list_installed_packages(local_modules)

            if folder != self.project_root:
                names.extend(installed)

            for name in names:
                if not self.options.is_name_allowed(name):
                    continue
                base = local_modules if name in installed else root_modules
                path = base / name
                if path in seen:
                    continue
                seen.add(path)
                found.append(path)
                stack.append(path)

        logger.debug("Found %d packages by walking dependencies", len(found))
        return ScanOutcome.found(found)


class DirectoryWalkScanner(BaseScanner):
    """Lists every package installed anywhere under ``node_modules``."""

    @property
    def source_name(self) -> str:
        return NODE_MODULES

    async def scan(self) -> ScanOutcome:
        found: list[Path] = []
        stack = [self.project_root / NODE_MODULES]

        while stack:
            modules_dir = stack.pop()
            for name in list_installed_packages(modules_dir):
                if not self.options.is_name_allowed(name):
                    continue
                path = modules_dir / name
                found.append(path)
                nested = path / NODE_MODULES
                if nested.is_dir():
                    stack.append(nested)

        logger.debug("Found %d packages in node_modules", len(found))
        return ScanOutcome.found(found)
