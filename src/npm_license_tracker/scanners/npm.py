"""Scanner for npm ``package-lock.json`` files.

Lockfile versions 2 and 3 record every installed package in a flat
``packages`` map keyed by install path::

    {
        "packages": {
            "": {"name": "my-app", ...},
            "node_modules/lodash": {"version": "4.17.21", ...},
            "node_modules/a/node_modules/b": {"version": "1.0.0", "dev": true}
        }
    }

Version 1 lockfiles only have the nested ``dependencies`` tree, which is
flattened into the same install paths.
"""

import json
import logging
from typing import Any, Iterator

from npm_license_tracker.scanners.base import BaseScanner, ScanOutcome

logger = logging.getLogger(__name__)

NODE_MODULES = "node_modules/"


def name_from_install_path(install_path: str) -> str:
    """Return the package name of an install path.

    Args:
        install_path: Lockfile key such as "node_modules/a/node_modules/@s/b".

    Returns:
        Name after the last ``node_modules/`` ("@s/b"), or the path itself
        for workspace packages outside node_modules.
    """
    index = install_path.rfind(NODE_MODULES)
    if index == -1:
        return install_path
    return install_path[index + len(NODE_MODULES):]


def _flatten_v1(dependencies: Any, prefix: str = "") -> Iterator[tuple[str, dict]]:
    if not isinstance(dependencies, dict):
        return
    for name, entry in dependencies.items():
        if not isinstance(entry, dict):
            continue
        install_path = f"{prefix}{NODE_MODULES}{name}"
        yield install_path, {"name": name, "dev": entry.get("dev", False)}
        yield from _flatten_v1(entry.get("dependencies"), install_path + "/")


class NpmLockScanner(BaseScanner):
    """Scanner for npm ``package-lock.json`` files."""

    LOCK_FILE = "package-lock.json"

    @property
    def source_name(self) -> str:
        return self.LOCK_FILE

    async def scan(self) -> ScanOutcome:
        """Read the lockfile and list every recorded install path.

        Dev-only packages are skipped unless ``include_dev`` is set, and names
        are checked against the include/exclude filter.
        """
        lock_path = self.project_root / self.LOCK_FILE
        if not lock_path.is_file():
            return ScanOutcome.not_applicable()

        try:
            with open(lock_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("failed to parse npm lock file %s: %s", lock_path, e)
            return ScanOutcome.parse_error()

        if not isinstance(data, dict):
            logger.error("failed to parse npm lock file %s: not an object", lock_path)
            return ScanOutcome.parse_error()

        packages = data.get("packages")
        if isinstance(packages, dict):
            entries = packages.items()
        else:
            entries = _flatten_v1(data.get("dependencies"))

        paths = []
        for install_path, entry in entries:
            if install_path == "" or not isinstance(entry, dict):
                continue

            # workspace links, the link target has its own entry
            if entry.get("link"):
                continue

            if entry.get("dev") and not self.options.include_dev:
                continue

            name = entry.get("name") or name_from_install_path(install_path)
            if not self.options.is_name_allowed(name):
                continue

            paths.append(self.project_root / install_path)

        logger.debug("Found %d packages in %s", len(paths), lock_path)
        return ScanOutcome.found(paths)
