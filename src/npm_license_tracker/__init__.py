"""npm License Tracker - License discovery for installed npm dependencies.

This package finds every installed dependency of a Node.js project (npm,
pnpm or a plain node_modules tree), reads its license, notice and readme
files, falls back to the package's repository when those are missing, and
reconciles the declared license with what the text actually says.
"""

__version__ = "0.1.0"

from npm_license_tracker.aggregator import LicenseAggregator, scan_project
from npm_license_tracker.config import ConfigError, load_options
from npm_license_tracker.models import (
    AppendEntry,
    ForcedLicense,
    LicenseSource,
    Options,
    Override,
    ResolvedLicense,
    ResolvedPackage,
    ScanErrors,
    ScanResult,
)
from npm_license_tracker.resolvers import (
    PackageResolver,
    classify_license_text,
    merge_expressions,
)

__all__ = [
    "__version__",
    "AppendEntry",
    "ConfigError",
    "ForcedLicense",
    "LicenseAggregator",
    "LicenseSource",
    "Options",
    "Override",
    "PackageResolver",
    "ResolvedLicense",
    "ResolvedPackage",
    "ScanErrors",
    "ScanResult",
    "classify_license_text",
    "load_options",
    "merge_expressions",
    "scan_project",
]
