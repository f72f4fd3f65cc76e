"""Tests for license extraction from package files."""

from pathlib import Path
from typing import Optional

import pytest

from npm_license_tracker.models import UNKNOWN, LicenseSource, ResolvedLicense
from npm_license_tracker.resolvers.extraction import (
    extract_licenses,
    is_inconclusive,
    is_license_file,
    is_notice_file,
    is_readme_file,
)
from npm_license_tracker.sources import BaseSource, LocalSource


class MemorySource(BaseSource):
    """Source serving files from a dict."""

    def __init__(self, files: dict[str, Optional[str]]) -> None:
        self.files = files

    @property
    def name(self) -> str:
        return "memory"

    async def readdir(self) -> list[str]:
        return list(self.files)

    async def read_file(self, name: str) -> Optional[str]:
        return self.files.get(name)


class TestFileClasses:
    """Test filename classification."""

    @pytest.mark.parametrize(
        "name", ["LICENSE", "license.md", "LICENCE.txt", "COPYING", "MIT-License"]
    )
    def test_license_files(self, name: str) -> None:
        assert is_license_file(name)

    @pytest.mark.parametrize("name", ["NOTICE", "notice.txt", "ThirdPartyNotices.md"])
    def test_notice_files(self, name: str) -> None:
        assert is_notice_file(name)

    @pytest.mark.parametrize("name", ["README", "readme.md", "Readme.markdown"])
    def test_readme_files(self, name: str) -> None:
        assert is_readme_file(name)

    def test_other_files(self) -> None:
        assert not is_license_file("index.js")
        assert not is_readme_file("docs-readme.md")


class TestExtractLicenses:
    """Test suite for extract_licenses."""

    async def test_order_is_notice_license_readme(self, license_texts: dict[str, str]) -> None:
        """Test notices come first, then license files, then the readme."""
        source = MemorySource(
            {
                "README.md": "# pkg\n\n## License\n\nISC\n",
                "LICENSE": license_texts["MIT"],
                "NOTICE": "Copyright Example",
                "index.js": "module.exports = 1",
            }
        )

        licenses = await extract_licenses(source)

        assert [lic.source for lic in licenses] == [
            LicenseSource.NOTICE,
            LicenseSource.LICENSE,
            LicenseSource.README,
        ]
        assert licenses[0].expression is None
        assert licenses[1].expression == "MIT"
        assert licenses[2].text == "## License\n\nISC\n"
        assert licenses[2].expression == UNKNOWN

    async def test_last_readme_wins(self, license_texts: dict[str, str]) -> None:
        """Test only the last readme with a license section is used."""
        source = MemorySource(
            {
                "README.md": "## License\n\nfirst\n",
                "readme.txt": "## License\n\n" + license_texts["ISC"],
            }
        )

        licenses = await extract_licenses(source)

        assert len(licenses) == 1
        assert licenses[0].expression == "ISC"

    async def test_notice_only_is_empty(self) -> None:
        """Test notices alone do not count as license text."""
        source = MemorySource({"NOTICE": "Copyright Example"})
        assert await extract_licenses(source) == []

    async def test_unreadable_files_are_skipped(self, license_texts: dict[str, str]) -> None:
        """Test files that cannot be read are ignored."""
        source = MemorySource({"LICENSE": None, "LICENSE-MIT": license_texts["MIT"]})

        licenses = await extract_licenses(source)

        assert [lic.expression for lic in licenses] == ["MIT"]

    async def test_local_directory(self, tmp_path: Path, license_texts: dict[str, str]) -> None:
        """Test extraction from a directory on disk."""
        (tmp_path / "LICENSE").write_text(license_texts["Zlib"], encoding="utf-8")
        (tmp_path / "licenses").mkdir()

        licenses = await extract_licenses(LocalSource(tmp_path))

        assert [lic.expression for lic in licenses] == ["Zlib"]


class TestIsInconclusive:
    """Test suite for is_inconclusive."""

    def test_empty(self) -> None:
        assert is_inconclusive([])

    def test_unknown_readme_only(self) -> None:
        """Test an unclassified readme section (with notices) is inconclusive."""
        licenses = [
            ResolvedLicense(None, LicenseSource.NOTICE, "Copyright"),
            ResolvedLicense(UNKNOWN, LicenseSource.README, "## License\nMIT"),
        ]
        assert is_inconclusive(licenses)

    def test_classified_readme(self) -> None:
        licenses = [ResolvedLicense("MIT", LicenseSource.README, "...")]
        assert not is_inconclusive(licenses)

    def test_unknown_license_file(self) -> None:
        """Test an unclassified license file is still conclusive."""
        licenses = [ResolvedLicense(UNKNOWN, LicenseSource.LICENSE, "custom terms")]
        assert not is_inconclusive(licenses)
