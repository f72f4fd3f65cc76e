"""Tests for project-wide license aggregation."""

import logging
from pathlib import Path

from npm_license_tracker.aggregator import (
    LicenseAggregator,
    resolve_append_entry,
    same_license_texts,
    scan_project,
)
from npm_license_tracker.models import (
    UNKNOWN,
    AppendEntry,
    ForcedLicense,
    LicenseSource,
    Options,
    ResolvedLicense,
    ResolvedPackage,
)


def package(name: str, version: str, *texts: str, expression: str = "MIT") -> ResolvedPackage:
    return ResolvedPackage(
        name=name,
        version=version,
        path=f"/p/{name}@{version}",
        license_expression=expression,
        licenses=[ResolvedLicense("MIT", LicenseSource.LICENSE, text) for text in texts],
    )


class TestSameLicenseTexts:
    """Test suite for same_license_texts."""

    def test_order_does_not_matter(self) -> None:
        assert same_license_texts(package("a", "1", "x", "y"), package("a", "2", "y", "x"))

    def test_count_matters(self) -> None:
        assert not same_license_texts(package("a", "1", "x", "x"), package("a", "2", "x"))

    def test_different_texts(self) -> None:
        assert not same_license_texts(package("a", "1", "x"), package("a", "2", "y"))


class TestFold:
    """Test suite for LicenseAggregator.fold."""

    def test_newer_copy_replaces_in_place(self) -> None:
        """Test a newer duplicate keeps the position of the first copy."""
        result = LicenseAggregator.fold(
            [
                package("a", "1.0.0", "mit"),
                package("b", "1.0.0", "isc"),
                package("a", "2.0.0", "mit"),
                package("a", "0.9.0", "mit"),
            ]
        )

        assert [(p.name, p.version) for p in result.resolved] == [
            ("a", "2.0.0"),
            ("b", "1.0.0"),
        ]

    def test_different_texts_are_kept(self) -> None:
        """Test copies with different license texts are separate entries."""
        result = LicenseAggregator.fold(
            [package("a", "1.0.0", "old"), package("a", "2.0.0", "new")]
        )

        assert [p.version for p in result.resolved] == ["1.0.0", "2.0.0"]

    def test_error_manifest(self) -> None:
        """Test unknown expressions and missing texts are reported per copy."""
        result = LicenseAggregator.fold(
            [
                package("unknown", "1.0.0", "text", expression=UNKNOWN),
                package("bare", "1.0.0", expression="MIT"),
                package("bare", "1.0.1", expression="MIT"),
                package("mixed", "1.0.0", expression=f"MIT OR {UNKNOWN}"),
                None,
            ]
        )

        assert result.errors.invalid_license == ["unknown", "mixed"]
        assert result.errors.missing_license_text == ["bare", "bare", "mixed"]
        assert [p.name for p in result.resolved] == ["unknown", "bare", "mixed"]

    def test_empty(self) -> None:
        result = LicenseAggregator.fold([])
        assert result.resolved == []
        assert not result.errors


class TestResolveAppendEntry:
    """Test suite for resolve_append_entry."""

    def test_expression_from_fragments(self, license_texts) -> None:
        entry = AppendEntry(
            name="font",
            version="1.0.0",
            licenses=(ForcedLicense(text=license_texts["ISC"]),),
        )

        resolved = resolve_append_entry(entry)

        assert resolved.license_expression == "ISC"
        assert resolved.licenses[0].source is LicenseSource.FORCED

    def test_explicit_expression(self) -> None:
        entry = AppendEntry(
            name="font",
            licenses=(ForcedLicense(expression="OFL-1.1", text="SIL Open Font License"),),
            license_expression="OFL-1.1 OR MIT",
        )

        assert resolve_append_entry(entry).license_expression == "OFL-1.1 OR MIT"


class TestResolveAll:
    """Test suite for concurrent resolution."""

    async def test_exception_is_logged_and_skipped(self, caplog) -> None:
        """Test a failing package does not abort the scan."""

        class FlakyResolver:
            async def resolve(self, package_dir: Path):
                if package_dir.name == "bad":
                    raise RuntimeError("boom")
                return package(package_dir.name, "1.0.0", "mit")

        with caplog.at_level(logging.ERROR):
            packages = await LicenseAggregator()._resolve_all(
                FlakyResolver(), [Path("good"), Path("bad"), Path("other")], concurrency=2
            )

        assert [p.name if p else None for p in packages] == ["good", None, "other"]
        assert "boom" in caplog.text


class TestScanProject:
    """Test suite for scan_project."""

    async def test_scan(self, tmp_path: Path, make_package, license_texts) -> None:
        """Test discovery, resolution, deduplication and append entries."""
        modules = tmp_path / "node_modules"
        mit = license_texts["MIT"]
        make_package(tmp_path, {"name": "app", "dependencies": {"a": "1", "b": "1"}})
        make_package(
            modules / "a",
            {"name": "a", "version": "1.0.0", "license": "MIT"},
            {"LICENSE": mit},
        )
        make_package(modules / "b", {"name": "b", "version": "1.0.0", "dependencies": {"a": "2"}})
        make_package(
            modules / "b" / "node_modules" / "a",
            {"name": "a", "version": "2.0.0", "license": "MIT"},
            {"LICENSE": mit},
        )
        extra = AppendEntry(name="extra", version="1.0.0", licenses=(ForcedLicense(text=mit),))
        options = Options(append=[extra])

        result = await scan_project(tmp_path, options)

        assert [(p.name, p.version) for p in result.resolved] == [
            ("a", "2.0.0"),
            ("b", "1.0.0"),
            ("extra", "1.0.0"),
        ]
        assert result.resolved[0].license_expression == "MIT"
        assert result.resolved[1].license_expression == UNKNOWN
        assert result.resolved[2].license_expression == "MIT"
        assert result.errors.invalid_license == ["b"]
        assert result.errors.missing_license_text == ["b"]

    async def test_options_are_not_modified(self, tmp_path: Path) -> None:
        options = Options()
        aggregator = LicenseAggregator(options)

        await aggregator.scan(tmp_path)

        assert aggregator.options is not options
        assert options.cache_folder is None
