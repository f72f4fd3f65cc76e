"""Scanner for pnpm installations.

pnpm keeps every package in a content store under ``node_modules/.pnpm``.
When the ``pnpm`` executable is available the installation is enumerated by
pnpm itself, otherwise the lockfile is decoded into store paths.

Lockfile keys look like ``/name@version(peer@version)`` (lockfile v6) or
``name@version(peer@version)`` (v9). Older v5 lockfiles use
``/name/version_peer@version``.
"""

import asyncio
import json
import logging
import shutil
from pathlib import Path
from typing import Any, Optional

import yaml

from npm_license_tracker.models import Options
from npm_license_tracker.scanners.base import BaseScanner, ScanOutcome
from npm_license_tracker.versions import is_newer, parse_version

logger = logging.getLogger(__name__)

STORE_DIR = Path("node_modules") / ".pnpm"
LIST_TIMEOUT = 120


def _is_package_name(value: str) -> bool:
    if value.startswith("@"):
        return value.count("/") == 1
    return "/" not in value


def decode_package_key(key: str) -> Optional[tuple[str, str, str]]:
    """Decode a pnpm lockfile package key.

    Args:
        key: Key such as "/@babel/core@7.1.0(supports-color@8.1.1)".

    Returns:
        Tuple of (name, version, store directory name), or None if the key
        cannot be decoded.
    """
    key = key[1:] if key.startswith("/") else key

    name_end = key.find("@", 1)
    name = key[:name_end]
    if name_end != -1 and _is_package_name(name):
        version = key[name_end + 1:].split("(", 1)[0]
        store = key.replace("/", "+").replace("(", "_").replace(")", "")
        return name, version, store

    # lockfile v5: name/version
    name, sep, version = key.rpartition("/")
    if not sep or not name:
        return None
    store = f"{name}@{version}".replace("/", "+")
    return name, version.split("_", 1)[0], store


class PnpmScanner(BaseScanner):
    """Scanner for projects installed with pnpm.

    Attributes:
        use_cli: Ask the ``pnpm`` executable for the package list when it is
            on ``PATH``.
    """

    LOCK_FILES = (STORE_DIR / "lock.yaml", Path("pnpm-lock.yaml"))

    def __init__(
        self,
        project_root: Path,
        options: Optional[Options] = None,
        use_cli: bool = True,
    ) -> None:
        super().__init__(project_root, options)
        self.use_cli = use_cli

    @property
    def source_name(self) -> str:
        return "pnpm"

    def find_lock_file(self) -> Optional[Path]:
        """Return the first existing pnpm lockfile of the project."""
        for candidate in self.LOCK_FILES:
            path = self.project_root / candidate
            if path.is_file():
                return path
        return None

    async def scan(self) -> ScanOutcome:
        lock_path = self.find_lock_file()
        if lock_path is None:
            return ScanOutcome.not_applicable()

        if self.use_cli:
            listed = await self.list_with_pnpm()
            if listed is not None:
                logger.debug("Found %d packages with pnpm list", len(listed))
                return ScanOutcome.found(listed)

        return self.scan_lock_file(lock_path)

    async def list_with_pnpm(self) -> Optional[list[Path]]:
        """Enumerate installed packages with ``pnpm list``.

        Returns:
            Package directories, or None if pnpm is unavailable or fails.
        """
        executable = shutil.which("pnpm")
        if executable is None:
            return None

        args = [executable, "list", "--json", "--depth", "Infinity"]
        if not self.options.include_dev:
            args.append("--prod")

        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                cwd=str(self.project_root),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=LIST_TIMEOUT
            )
        except (OSError, asyncio.TimeoutError) as e:
            logger.warning("pnpm list failed: %s", e)
            return None

        if process.returncode != 0:
            logger.warning(
                "pnpm list exited with %d: %s",
                process.returncode,
                stderr.decode("utf-8", errors="replace").strip(),
            )
            return None

        try:
            projects = json.loads(stdout)
        except ValueError as e:
            logger.warning("pnpm list returned invalid JSON: %s", e)
            return None

        if isinstance(projects, dict):
            projects = [projects]
        if not isinstance(projects, list):
            return None

        paths: list[Path] = []
        seen: set[str] = set()
        for project in projects:
            if not isinstance(project, dict):
                continue
            for group in ("dependencies", "optionalDependencies", "devDependencies"):
                self._collect_listed(project.get(group), paths, seen)
        return paths

    def _collect_listed(self, dependencies: Any, paths: list[Path], seen: set[str]) -> None:
        if not isinstance(dependencies, dict):
            return
        for alias, entry in dependencies.items():
            if not isinstance(entry, dict):
                continue
            name = entry.get("from") or alias
            path = entry.get("path")
            if not isinstance(path, str) or not self.options.is_name_allowed(name):
                continue
            if path in seen:
                continue
            seen.add(path)
            paths.append(Path(path))
            self._collect_listed(entry.get("dependencies"), paths, seen)

    def scan_lock_file(self, lock_path: Path) -> ScanOutcome:
        """Decode the lockfile into store paths, keeping the newest versions.

        Args:
            lock_path: Path of the pnpm lockfile.

        Returns:
            FOUND with store paths, or PARSE_ERROR.
        """
        try:
            with open(lock_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error("failed to parse pnpm lock file %s: %s", lock_path, e)
            return ScanOutcome.parse_error()

        if not isinstance(data, dict):
            logger.error("failed to parse pnpm lock file %s: not a mapping", lock_path)
            return ScanOutcome.parse_error()

        # v9 keeps the peer-qualified keys in "snapshots"
        packages = data.get("snapshots") or data.get("packages") or {}
        if not isinstance(packages, dict):
            logger.error("failed to parse pnpm lock file %s: bad packages", lock_path)
            return ScanOutcome.parse_error()

        store_root = self.project_root / STORE_DIR
        paths: list[Path] = []
        kept: dict[str, tuple[int, list[int]]] = {}

        for key, entry in packages.items():
            decoded = decode_package_key(str(key))
            if decoded is None:
                logger.debug("Skipping undecodable pnpm key %s", key)
                continue
            name, version, store = decoded

            if isinstance(entry, dict) and entry.get("dev") and not self.options.include_dev:
                continue
            if not self.options.is_name_allowed(name):
                continue

            path = store_root / store / "node_modules" / name
            parsed = parse_version(version)

            if name in kept:
                index, kept_version = kept[name]
                if is_newer(parsed, kept_version):
                    paths[index] = path
                    kept[name] = (index, parsed)
                continue

            kept[name] = (len(paths), parsed)
            paths.append(path)

        logger.debug("Found %d packages in %s", len(paths), lock_path)
        return ScanOutcome.found(paths)
