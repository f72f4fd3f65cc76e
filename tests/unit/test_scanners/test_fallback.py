"""Tests for the scanners used without a lockfile."""

from pathlib import Path

from npm_license_tracker.models import Options
from npm_license_tracker.scanners import (
    DirectoryWalkScanner,
    GuidedScanner,
    list_installed_packages,
)


def build_project(root: Path, make_package) -> Path:
    """Create a project with hoisted, nested and dev packages."""
    modules = root / "node_modules"
    make_package(root, {"name": "app", "dependencies": {"a": "^1.0.0", "b": "^1.0.0"}})
    make_package(modules / "a", {"name": "a", "dependencies": {"c": "^1.0.0"}})
    make_package(modules / "b", {"name": "b", "dependencies": {"c": "^1.0.0"}})
    make_package(modules / "c", {"name": "c"})
    make_package(modules / "a" / "node_modules" / "d", {"name": "d"})
    make_package(modules / "dev-only", {"name": "dev-only"})
    (modules / ".bin").mkdir()
    return modules


class TestListInstalledPackages:
    """Test suite for list_installed_packages."""

    def test_unwraps_scopes_and_skips_hidden(self, tmp_path: Path) -> None:
        for name in ("@types/node", "@types/react", "lodash", ".bin", ".cache"):
            (tmp_path / name).mkdir(parents=True)
        (tmp_path / ".package-lock.json").write_text("{}", encoding="utf-8")

        assert list_installed_packages(tmp_path) == ["@types/node", "@types/react", "lodash"]

    def test_missing_folder(self, tmp_path: Path) -> None:
        assert list_installed_packages(tmp_path / "node_modules") == []


class TestGuidedScanner:
    """Test suite for GuidedScanner."""

    async def test_follows_dependency_graph(self, tmp_path: Path, make_package) -> None:
        """Test reachable packages are found once, nested installs included."""
        modules = build_project(tmp_path, make_package)

        outcome = await GuidedScanner(tmp_path).scan()

        assert outcome.paths == [
            modules / "a",
            modules / "b",
            modules / "c",
            modules / "a" / "node_modules" / "d",
        ]

    async def test_prefers_nested_install(self, tmp_path: Path, make_package) -> None:
        """Test a dependency installed next to its dependent is used."""
        modules = tmp_path / "node_modules"
        make_package(tmp_path, {"name": "app", "dependencies": {"a": "1"}})
        make_package(modules / "a", {"name": "a", "dependencies": {"c": "2"}})
        make_package(modules / "c", {"name": "c", "version": "1.0.0"})
        make_package(modules / "a" / "node_modules" / "c", {"name": "c", "version": "2.0.0"})

        outcome = await GuidedScanner(tmp_path).scan()

        assert modules / "a" / "node_modules" / "c" in outcome.paths
        assert modules / "c" not in outcome.paths

    async def test_private_root_without_name(self, tmp_path: Path, make_package) -> None:
        """Test a root package.json without a name is still walked."""
        make_package(tmp_path, {"private": True, "dependencies": {"a": "1"}})
        make_package(tmp_path / "node_modules" / "a", {"name": "a"})

        outcome = await GuidedScanner(tmp_path).scan()

        assert outcome.paths == [tmp_path / "node_modules" / "a"]

    async def test_exclude(self, tmp_path: Path, make_package) -> None:
        modules = build_project(tmp_path, make_package)

        outcome = await GuidedScanner(tmp_path, Options(exclude=["a"])).scan()

        assert outcome.paths == [modules / "b", modules / "c"]


class TestDirectoryWalkScanner:
    """Test suite for DirectoryWalkScanner."""

    async def test_lists_whole_tree(self, tmp_path: Path, make_package) -> None:
        """Test every installed package is listed, dev packages included."""
        modules = build_project(tmp_path, make_package)
        make_package(modules / "@scope" / "x", {"name": "@scope/x"})

        outcome = await DirectoryWalkScanner(tmp_path).scan()

        assert sorted(outcome.paths) == sorted(
            [
                modules / "@scope" / "x",
                modules / "a",
                modules / "a" / "node_modules" / "d",
                modules / "b",
                modules / "c",
                modules / "dev-only",
            ]
        )

    async def test_include_filter(self, tmp_path: Path, make_package) -> None:
        modules = build_project(tmp_path, make_package)

        outcome = await DirectoryWalkScanner(tmp_path, Options(include=["c"])).scan()

        assert outcome.paths == [modules / "c"]
