"""License resolvers.

This module provides the text classifier, the readme license extractor, the
package file extraction and the resolver producing one package's license
record from local files, its repository and user overrides.
"""

from npm_license_tracker.resolvers.extraction import extract_licenses
from npm_license_tracker.resolvers.forced import load_forced_license, load_forced_licenses
from npm_license_tracker.resolvers.markdown import extract_markdown_license
from npm_license_tracker.resolvers.package import PackageResolver
from npm_license_tracker.resolvers.spdx import (
    classify_license_text,
    correct_license_expression,
    merge_expressions,
)

__all__ = [
    "PackageResolver",
    "classify_license_text",
    "correct_license_expression",
    "extract_licenses",
    "extract_markdown_license",
    "load_forced_license",
    "load_forced_licenses",
    "merge_expressions",
]
