"""Core data models for npm_license_tracker.

This module defines the fundamental data structures used throughout the
license tracking system: parsed package metadata, resolved license
fragments, resolved packages and the scan options.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

UNKNOWN = "UNKNOWN"


class LicenseSource(str, Enum):
    """Where a resolved license fragment was found."""

    LICENSE = "license"
    README = "readme"
    NOTICE = "notice"
    FORCED = "forced"


@dataclass(frozen=True)
class PackageMeta:
    """Immutable view of a package's ``package.json``.

    Attributes:
        name: Package name (e.g., "lodash" or "@babel/core").
        version: Version string, may be missing for private packages.
        license: Declared license as a string, a ``{type, url}`` object or a
            list of such objects.
        repository: Repository URL string or ``{type, url}`` object.
        homepage: Optional homepage URL.
        funding: Funding URL string, object or list of either.
        dependencies: Names of runtime dependencies.
        optional_dependencies: Names of optional dependencies.
        peer_dependencies: Names of peer dependencies.
    """

    name: str
    version: Optional[str] = None
    license: Any = None
    repository: Any = None
    homepage: Optional[str] = None
    funding: Any = None
    dependencies: tuple[str, ...] = ()
    optional_dependencies: tuple[str, ...] = ()
    peer_dependencies: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "PackageMeta":
        """Build metadata from a parsed ``package.json`` document.

        Args:
            data: Parsed JSON object.

        Returns:
            PackageMeta instance.

        Raises:
            ValueError: If the document has no usable ``name``.
        """
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("package.json has no name")

        version = data.get("version")
        homepage = data.get("homepage")

        return cls(
            name=name,
            version=version if isinstance(version, str) else None,
            license=data.get("license") or data.get("licenses"),
            repository=data.get("repository"),
            homepage=homepage if isinstance(homepage, str) else None,
            funding=data.get("funding"),
            dependencies=dependency_names(data.get("dependencies")),
            optional_dependencies=dependency_names(data.get("optionalDependencies")),
            peer_dependencies=dependency_names(data.get("peerDependencies")),
        )

    @property
    def repository_url(self) -> Optional[str]:
        """Return the raw repository URL, if declared."""
        if isinstance(self.repository, dict):
            url = self.repository.get("url")
            return url if isinstance(url, str) and url else None
        if isinstance(self.repository, str) and self.repository:
            return self.repository
        return None


def dependency_names(value: Any) -> tuple[str, ...]:
    """Return the package names of a dependency map such as ``dependencies``."""
    if isinstance(value, dict):
        return tuple(value.keys())
    return ()


@dataclass
class ResolvedLicense:
    """A single license fragment discovered for a package.

    Attributes:
        expression: Classified expression, None for notice files.
        source: Where the text came from.
        text: Raw license text.
    """

    expression: Optional[str]
    source: LicenseSource
    text: str

    def to_dict(self) -> dict:
        """Serialize to a JSON-ready dictionary."""
        return {
            "expression": self.expression,
            "source": self.source.value,
            "text": self.text,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ResolvedLicense":
        """Deserialize from a dictionary produced by ``to_dict``.

        Raises:
            KeyError: If a required key is missing.
            ValueError: If the source is not a known LicenseSource.
        """
        return cls(
            expression=data.get("expression"),
            source=LicenseSource(data["source"]),
            text=data["text"],
        )


@dataclass
class ResolvedPackage:
    """Resolved license information for one installed package.

    Attributes:
        name: Package name.
        version: Package version ("" when undeclared).
        path: Absolute path of the package directory.
        license_expression: Normalized expression, never empty. Ends with
            ``*`` when derived from license text instead of metadata.
        licenses: Ordered license fragments (notices, license files, readme).
        homepage: Optional homepage URL (only when requested).
        repository: Optional normalized repository URL (only when requested).
        funding: Optional list of funding URLs (only when requested).
    """

    name: str
    version: str
    path: str
    license_expression: str = UNKNOWN
    licenses: list[ResolvedLicense] = field(default_factory=list)
    homepage: Optional[str] = None
    repository: Optional[str] = None
    funding: Optional[list[str]] = None

    @property
    def is_expression_from_text(self) -> bool:
        """Return True if the expression was derived from license text."""
        return self.license_expression.endswith("*")

    def to_dict(self) -> dict:
        """Serialize to a JSON-ready dictionary with camelCase keys."""
        data: dict[str, Any] = {
            "name": self.name,
            "version": self.version,
            "path": self.path,
            "licenseExpression": self.license_expression,
            "licenses": [lic.to_dict() for lic in self.licenses],
        }
        if self.homepage is not None:
            data["homepage"] = self.homepage
        if self.repository is not None:
            data["repository"] = self.repository
        if self.funding is not None:
            data["funding"] = self.funding
        return data


@dataclass(frozen=True)
class ForcedLicense:
    """A user supplied license fragment.

    Attributes:
        expression: Forced license expression.
        text: Inline license text.
        file: Path of a file holding the license text (wins over ``text``).
    """

    expression: Optional[str] = None
    text: Optional[str] = None
    file: Optional[str] = None


@dataclass(frozen=True)
class Override:
    """Per-package override of the resolved license.

    Attributes:
        license: Forced license expression.
        text: Forced license text.
        file: Path of a file holding the forced license text.
    """

    license: Optional[str] = None
    text: Optional[str] = None
    file: Optional[str] = None

    @property
    def has_text(self) -> bool:
        """Return True if the override replaces the license text."""
        return bool(self.text or self.file)


@dataclass(frozen=True)
class AppendEntry:
    """A synthetic package added to the results without scanning.

    Attributes:
        name: Package name.
        version: Package version.
        path: Optional path to report.
        licenses: Forced license fragments for the entry.
        license_expression: Optional expression, merged from the fragments
            when not given.
    """

    name: str
    version: str = ""
    path: str = ""
    licenses: tuple[ForcedLicense, ...] = ()
    license_expression: Optional[str] = None


@dataclass
class Options:
    """Options controlling discovery and resolution.

    Attributes:
        include_dev: Include devDependencies.
        include_homepage: Add the homepage to each resolved package.
        include_repository: Add the normalized repository URL.
        include_funding: Add a flat list of funding URLs.
        include: Allow list of package names, empty allows everything.
        exclude: Deny list of package names.
        overrides: Per-package forced license expression and/or text.
        append: Extra entries added to the output unconditionally.
        cache_folder: Folder for cached remote lookups, defaults to the
            project's node_modules/.cache folder.
        use_cache: Read and write the cache of remote lookups.
        join_text: Separator used when license texts are concatenated.
        github_token: Optional GitHub token for higher API rate limits.
        concurrency: Maximum number of packages resolved at once.
    """

    include_dev: bool = False
    include_homepage: bool = False
    include_repository: bool = False
    include_funding: bool = False
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    overrides: dict[str, Override] = field(default_factory=dict)
    append: list[AppendEntry] = field(default_factory=list)
    cache_folder: Optional[str] = None
    use_cache: bool = True
    join_text: str = "\n\n-\n\n"
    github_token: Optional[str] = None
    concurrency: int = 16

    def is_name_allowed(self, name: str) -> bool:
        """Apply the include/exclude name filter.

        Args:
            name: Package name.

        Returns:
            True if the package should be scanned.
        """
        if name in self.exclude:
            return False
        if self.include and name not in self.include:
            return False
        return True


@dataclass
class CacheEntry:
    """Cached license lookup for a repository.

    Attributes:
        version: Schema version the entry was written with.
        data: Cached license fragments.
    """

    version: int
    data: list[ResolvedLicense]


@dataclass
class ScanErrors:
    """Packages needing attention after a scan.

    Attributes:
        missing_license_text: Packages without any license text.
        invalid_license: Packages whose expression contains UNKNOWN.
    """

    missing_license_text: list[str] = field(default_factory=list)
    invalid_license: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.missing_license_text or self.invalid_license)

    def to_dict(self) -> dict:
        return {
            "missingLicenseText": list(self.missing_license_text),
            "invalidLicense": list(self.invalid_license),
        }


@dataclass
class ScanResult:
    """Result of scanning a project.

    Attributes:
        resolved: Resolved packages in discovery order.
        errors: Error manifest.
    """

    resolved: list[ResolvedPackage] = field(default_factory=list)
    errors: ScanErrors = field(default_factory=ScanErrors)

    def to_dict(self) -> dict:
        return {
            "resolved": [pkg.to_dict() for pkg in self.resolved],
            "errors": self.errors.to_dict(),
        }


