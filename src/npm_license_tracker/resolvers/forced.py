"""Loading of user supplied (forced) license fragments."""

import logging
from typing import Iterable

from npm_license_tracker.models import UNKNOWN, ForcedLicense, LicenseSource, ResolvedLicense
from npm_license_tracker.resolvers.spdx import classify_license_text

logger = logging.getLogger(__name__)


def load_forced_license(template: ForcedLicense) -> ResolvedLicense:
    """Turn a forced license template into a license fragment.

    The text comes from ``file`` when given, else from ``text``. The
    expression is the template's own, else the classification of the text,
    else ``UNKNOWN``.

    Args:
        template: Forced license template.

    Returns:
        ResolvedLicense with source "forced".
    """
    text = ""

    if template.file:
        try:
            with open(template.file, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            logger.error("Could not read forced license file %s: %s", template.file, e)
    elif template.text:
        text = template.text

    if template.expression:
        expression = template.expression
    elif text:
        expression = classify_license_text(text)
    else:
        expression = UNKNOWN

    return ResolvedLicense(expression=expression, source=LicenseSource.FORCED, text=text)


def load_forced_licenses(templates: Iterable[ForcedLicense]) -> list[ResolvedLicense]:
    """Load several forced license templates, preserving order."""
    return [load_forced_license(template) for template in templates]
