"""Tests for repository URL normalization."""

import pytest

from npm_license_tracker.models import PackageMeta
from npm_license_tracker.sources.repository import normalize_repo_url, package_repo_url


class TestNormalizeRepoUrl:
    """Test suite for normalize_repo_url."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://github.com/owner/repo", "https://github.com/owner/repo"),
            ("git+https://github.com/owner/repo.git", "https://github.com/owner/repo"),
            ("git://github.com/owner/repo.git", "https://github.com/owner/repo"),
            ("git+ssh://git@github.com/owner/repo.git", "https://github.com/owner/repo"),
            ("ssh://git@github.com/owner/repo.git", "https://github.com/owner/repo"),
            ("git@github.com:owner/repo.git", "https://github.com/owner/repo"),
            ("github:owner/repo", "https://github.com/owner/repo"),
            ("gitlab:group/project", "https://gitlab.com/group/project"),
            ("bitbucket:team/repo", "https://bitbucket.org/team/repo"),
            ("owner/repo", "https://github.com/owner/repo"),
            ("http://github.com/owner/repo", "https://github.com/owner/repo"),
            ("https://www.github.com/owner/repo", "https://github.com/owner/repo"),
            (
                "https://github.com/owner/repo/tree/main/packages/sub",
                "https://github.com/owner/repo",
            ),
            ("https://github.com/owner/repo.git#main", "https://github.com/owner/repo"),
            ("https://gitlab.com/group/project?ref=x", "https://gitlab.com/group/project"),
            ("git+https://bitbucket.org/team/repo.git", "https://bitbucket.org/team/repo"),
            ("git@example.com:owner/repo.git", "https://example.com/owner/repo"),
        ],
    )
    def test_normalize(self, url: str, expected: str) -> None:
        """Test repository URLs normalize to the https repository root."""
        assert normalize_repo_url(url) == expected

    def test_other_hosts_keep_their_path(self) -> None:
        """Test only GitHub and GitLab URLs are truncated."""
        url = "https://example.com/git/owner/repo/sub"
        assert normalize_repo_url(url) == url


class TestPackageRepoUrl:
    """Test suite for package_repo_url."""

    def test_object_repository(self) -> None:
        meta = PackageMeta(name="a", repository={"type": "git", "url": "github:o/a"})
        assert package_repo_url(meta) == "https://github.com/o/a"

    def test_missing_repository(self) -> None:
        assert package_repo_url(PackageMeta(name="a")) is None
        assert package_repo_url(PackageMeta(name="a", repository={"type": "git"})) is None
