"""Extraction of license text from the files of a package.

Files of the package root are sorted by name into three groups:

* notice files ("NOTICE", "NOTICE.txt", ...) are kept as-is and never
  classified,
* license files (names containing "license", "licence" or "copying") are
  classified,
* readmes (names starting with "readme") are scanned for a license section.

The result lists notices first, then license files, then the readme section.
Downstream concatenation of texts depends on this order.
"""

import logging
from typing import Optional

from npm_license_tracker.models import UNKNOWN, LicenseSource, ResolvedLicense
from npm_license_tracker.resolvers.markdown import extract_markdown_license
from npm_license_tracker.resolvers.spdx import classify_license_text
from npm_license_tracker.sources.base import BaseSource

logger = logging.getLogger(__name__)

LICENSE_WORDS = ("license", "licence", "copying")


def is_notice_file(name: str) -> bool:
    return "notice" in name.lower()


def is_license_file(name: str) -> bool:
    lowered = name.lower()
    return any(word in lowered for word in LICENSE_WORDS)


def is_readme_file(name: str) -> bool:
    return name.lower().startswith("readme")


async def extract_licenses(source: BaseSource) -> list[ResolvedLicense]:
    """Collect the license fragments of a directory source.

    Args:
        source: Source listing the package root.

    Returns:
        Ordered license fragments, empty if neither a license file nor a
        readme license section was found.
    """
    notices: list[ResolvedLicense] = []
    license_files: list[ResolvedLicense] = []
    readme: Optional[ResolvedLicense] = None

    for entry in await source.readdir():
        if is_notice_file(entry):
            text = await source.read_file(entry)
            if text is not None:
                notices.append(ResolvedLicense(None, LicenseSource.NOTICE, text))
            continue

        if is_license_file(entry):
            text = await source.read_file(entry)
            if text is not None:
                license_files.append(
                    ResolvedLicense(classify_license_text(text), LicenseSource.LICENSE, text)
                )
            continue

        if is_readme_file(entry):
            text = await source.read_file(entry)
            section = extract_markdown_license(text) if text else None
            if section:
                # the last readme with a license section wins
                readme = ResolvedLicense(
                    classify_license_text(section), LicenseSource.README, section
                )

    if not license_files and readme is None:
        logger.debug("No license text found in %s source", source.name)
        return []

    licenses = notices + license_files
    if readme is not None:
        licenses.append(readme)
    return licenses


def is_inconclusive(licenses: list[ResolvedLicense]) -> bool:
    """Check whether extracted fragments are too weak to trust.

    Fragments are inconclusive when there are none, or when the only
    classified fragment is a readme section that did not match a license.

    Args:
        licenses: Result of extract_licenses().

    Returns:
        True if a remote lookup should be attempted.
    """
    if not licenses:
        return True

    classified = [lic for lic in licenses if lic.source != LicenseSource.NOTICE]
    return all(
        lic.source == LicenseSource.README and lic.expression == UNKNOWN
        for lic in classified
    )
