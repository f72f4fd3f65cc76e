"""SPDX expression helpers.

Classifies raw license text into an SPDX-like expression by searching for
the defining phrases of known license families, merges the expressions of
several license fragments into one, and corrects license strings declared
in package metadata.

The text classifier is best effort. Every family whose phrases appear in the
text (in order) is reported, so dual-licensed text yields a compound
``(A AND B)`` expression and unrecognized text yields ``UNKNOWN``.
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterable, Optional, Sequence

from license_expression import ExpressionError, get_license_index, get_spdx_licensing

from npm_license_tracker.models import UNKNOWN, LicenseSource, ResolvedLicense

logger = logging.getLogger(__name__)

SPDX = get_spdx_licensing()

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class LicenseFamily:
    """Phrases identifying a license.

    A family matches when all phrases of any one alternative appear in the
    text in order.

    Attributes:
        identifier: SPDX identifier reported on a match.
        alternatives: Phrase sequences, any of which identifies the license.
    """

    identifier: str
    alternatives: tuple[tuple[str, ...], ...]

    def matches(self, text: str) -> bool:
        return any(includes_sequential(text, phrases) for phrases in self.alternatives)


AFL_3_0 = LicenseFamily(
    "AFL-3.0",
    (("Licensed under the Academic Free License version 3.0",),),
)
AFL_2_1 = LicenseFamily(
    "AFL-2.1",
    (("Licensed under the Academic Free License version 2.1",),),
)

APACHE_2_0 = LicenseFamily(
    "Apache-2.0",
    (
        ("http://www.apache.org/licenses/LICENSE-2.0",),
        ("https://www.apache.org/licenses/LICENSE-2.0",),
        (
            "Apache License Version 2.0, January 2004 http://www.apache.org/licenses/",
            "You must give any other recipients of the Work or Derivative Works "
            "a copy of this License",
            "You must cause any modified files to carry prominent notices stating "
            "that You changed the files",
            "You must retain, in the Source form of any Derivative Works that You "
            "distribute, all copyright, patent, trademark, and attribution notices "
            "from the Source form of the Work",
            'If the Work includes a "NOTICE" text file as part of its distribution,',
        ),
    ),
)

BSD_0 = LicenseFamily(
    "0BSD",
    (
        (
            "Permission to use, copy, modify, and/or distribute this software for "
            "any purpose with or without fee is hereby granted. "
            "THE SOFTWARE IS PROVIDED",
        ),
    ),
)

# BSD clauses are tested incrementally, see _classify_bsd
BSD_1_PHRASES = (
    "Redistribution and use",
    # "of this software" is present in some variants
    "in source and binary forms, with or without modification, are permitted "
    "provided that the following conditions are met:",
    "Redistributions of source code must retain the above copyright notice, "
    "this list of conditions and the following disclaimer.",
)
BSD_2_PHRASES = (
    "Redistributions in binary form must reproduce the above copyright notice, "
    "this list of conditions and the following disclaimer in the documentation "
    "and/or other materials provided with the distribution.",
)
BSD_3_PHRASES = ("endorse or promote",)

BLUE_OAK_1_0_0 = LicenseFamily(
    "BlueOak-1.0.0",
    (
        (
            "Blue Oak Model License",
            "Version 1.0.0",
            "This license gives everyone as much permission to work with this "
            "software as possible, while protecting contributors from liability.",
        ),
    ),
)

CC0_1_0 = LicenseFamily(
    "CC0-1.0",
    (
        ("https://creativecommons.org/publicdomain/zero/1.0/deed",),
        (
            "Affirmer understands and acknowledges that Creative Commons is not a "
            "party to this document and has no duty or obligation with respect to "
            "this CC0 or use of the Work.",
        ),
    ),
)

CC_BY_3_0 = LicenseFamily("CC-BY-3.0", (("http://spdx.org/licenses/CC-BY-3.0",),))

CC_BY_4_0 = LicenseFamily(
    "CC-BY-4.0",
    (
        (
            "Creative Commons Attribution 4.0 International Public License "
            "By exercising the Licensed Rights (defined below), You accept and "
            "agree to be bound by the terms and conditions of this Creative "
            'Commons Attribution 4.0 International Public License ("Public '
            'License"). To the',
        ),
    ),
)

EUPL_1_1 = LicenseFamily("EUPL-1.1", (("Licensed under the EUPL V.1.1",),))

# tested in priority order, only the first match is reported
GPL_FAMILIES = (
    LicenseFamily(
        "GPL-3.0-only",
        (('"This License" refers to version 3 of the GNU General Public License.',),),
    ),
    LicenseFamily(
        "LGPL-3.0-only",
        (
            (
                '"this License" refers to version 3 of the GNU Lesser General '
                "Public License",
            ),
        ),
    ),
    LicenseFamily(
        "LGPL-2.1-only",
        (
            (
                "[This is the first released version of the Lesser GPL. It also "
                "counts as the successor of the GNU Library Public License, "
                "version 2, hence the version number 2.1.]",
            ),
        ),
    ),
)

ISC = LicenseFamily(
    "ISC",
    (
        (
            "Permission to use, copy, modify, and/or distribute this software for "
            "any purpose with or without fee is hereby granted, provided that the "
            "above copyright notice and this permission notice appear in all "
            "copies.",
        ),
    ),
)

MIT = LicenseFamily(
    "MIT",
    (
        ("http://www.opensource.org/licenses/mit-license.php",),
        ("http://opensource.org/licenses/MIT",),
        (
            "Permission is hereby granted, free of charge,",
            "obtaining",
            "software",
            "documentation",
            "use",
            "copy",
            "modify",
            "merge",
            "publish",
            "distribute",
            # both "sublicense" and "sub-license" are in use
            "sub",
            "license",
            "sell",
            "The above copyright notice and this permission notice",
        ),
    ),
)

MPL_2_0 = LicenseFamily(
    "MPL-2.0",
    (
        ("Mozilla Public License Version 2.0", "1. Definitions"),
        (
            "This Source Code Form is subject to the terms of the Mozilla Public "
            "License, v. 2.0.",
        ),
    ),
)

UNLICENSE = LicenseFamily(
    "Unlicense",
    (("This is free and unencumbered software released into the public domain.",),),
)

WTFPL = LicenseFamily(
    "WTFPL",
    (
        (
            "DO WHAT THE FUCK YOU WANT TO PUBLIC LICENSE",
            "TERMS AND CONDITIONS FOR COPYING, DISTRIBUTION AND MODIFICATION",
        ),
    ),
)

ZLIB = LicenseFamily(
    "Zlib",
    (
        (
            "Permission is granted to anyone to use this software for any purpose, "
            "including commercial applications, and to alter it and redistribute it "
            "freely, subject to the following restrictions:",
            "The origin of this software must not be misrepresented; you must not "
            "claim that you wrote the original software. If you use this software "
            "in a product, an acknowledgment in the product documentation would be "
            "appreciated but is not required.",
            "Altered source versions must be plainly marked as such, and must not "
            "be misrepresented as being the original software.",
            "This notice may not be removed or altered from any source distribution.",
        ),
    ),
)


def includes_sequential(text: str, phrases: Sequence[str]) -> bool:
    """Check that every phrase appears in ``text`` in the given order.

    Each search starts where the previous match ended.

    Args:
        text: Text to search.
        phrases: Phrases that must appear in order.

    Returns:
        True if all phrases were found in order.
    """
    position = 0
    for phrase in phrases:
        index = text.find(phrase, position)
        if index == -1:
            return False
        position = index + len(phrase)
    return True


def _classify_bsd(text: str) -> Optional[str]:
    if not includes_sequential(text, BSD_1_PHRASES):
        return None
    if includes_sequential(text, BSD_3_PHRASES):
        return "BSD-3-Clause"
    if includes_sequential(text, BSD_2_PHRASES):
        return "BSD-2-Clause"
    return "BSD-1-Clause"


def join_identifiers(identifiers: Sequence[str]) -> str:
    """Join identifiers into a single expression.

    Zero identifiers yield ``UNKNOWN``, one yields itself, several yield a
    parenthesized AND expression. AND is the strict reading of several
    licenses applying at once, callers may loosen it to OR.

    Args:
        identifiers: Unique identifiers in report order.

    Returns:
        Expression string.
    """
    if not identifiers:
        return UNKNOWN
    if len(identifiers) == 1:
        return identifiers[0]
    return "(" + " AND ".join(identifiers) + ")"


def classify_license_text(text: str) -> str:
    """Classify raw license text into an SPDX-like expression.

    Args:
        text: Raw license, notice or readme section text.

    Returns:
        A single identifier, a compound ``(A AND B)`` expression when several
        licenses are present, or ``UNKNOWN``.
    """
    text = _WHITESPACE.sub(" ", text or "")
    matches: list[str] = []

    if AFL_3_0.matches(text):
        matches.append(AFL_3_0.identifier)
    elif AFL_2_1.matches(text):
        matches.append(AFL_2_1.identifier)

    for family in (APACHE_2_0, BSD_0):
        if family.matches(text):
            matches.append(family.identifier)

    bsd = _classify_bsd(text)
    if bsd:
        matches.append(bsd)

    for family in (BLUE_OAK_1_0_0, CC0_1_0, CC_BY_3_0, CC_BY_4_0, EUPL_1_1):
        if family.matches(text):
            matches.append(family.identifier)

    for family in GPL_FAMILIES:
        if family.matches(text):
            matches.append(family.identifier)
            break

    for family in (ISC, MIT, MPL_2_0, UNLICENSE, WTFPL, ZLIB):
        if family.matches(text):
            matches.append(family.identifier)

    return join_identifiers(matches)


def split_expression(expression: str) -> list[str]:
    """Explode a compound ``(A AND B)`` expression into its identifiers."""
    if expression.startswith("(") and expression.endswith(")"):
        return [part.strip() for part in expression[1:-1].split(" AND ")]
    return [expression]


def merge_expressions(licenses: Iterable[ResolvedLicense]) -> str:
    """Merge the expressions of several license fragments.

    Notice fragments carry no expression and are skipped. Readme fragments
    that classified to ``UNKNOWN`` are skipped too, since a readme license
    section is often a bare mention such as "MIT" with no text.

    Args:
        licenses: License fragments of one package.

    Returns:
        Merged expression following the same rule as classification.
    """
    identifiers: list[str] = []

    for license in licenses:
        if not license.expression:
            continue
        if license.source == LicenseSource.README and license.expression == UNKNOWN:
            continue

        for identifier in split_expression(license.expression):
            if identifier not in identifiers:
                identifiers.append(identifier)

    return join_identifiers(identifiers)


# Common license aliases found in package.json files
LICENSE_ALIASES = {
    "apache 2": "Apache-2.0",
    "apache 2.0": "Apache-2.0",
    "apache-2": "Apache-2.0",
    "apache2": "Apache-2.0",
    "apache license 2.0": "Apache-2.0",
    "apache license, version 2.0": "Apache-2.0",
    "apache software license": "Apache-2.0",
    "bsd": "BSD-2-Clause",
    "bsd license": "BSD-2-Clause",
    "bsd 2-clause license": "BSD-2-Clause",
    "bsd 3-clause license": "BSD-3-Clause",
    "gplv2": "GPL-2.0",
    "gplv3": "GPL-3.0",
    "isc license": "ISC",
    "lgplv3": "LGPL-3.0",
    "mit license": "MIT",
    "the mit license": "MIT",
    "mit/x11": "MIT",
    "mozilla public license 2.0": "MPL-2.0",
    "mpl 2.0": "MPL-2.0",
    "public domain": "Unlicense",
    "unlicensed": "UNLICENSED",
}

_OPERATORS = {"and", "or", "with"}
_TOKEN_SPLIT = re.compile(r"(\s+|\(|\))")


@lru_cache(maxsize=1)
def _known_identifiers() -> dict[str, str]:
    """Map lowercased SPDX identifiers (current and deprecated) to their casing."""
    known: dict[str, str] = {}
    for entry in get_license_index():
        keys = [entry.get("spdx_license_key")] + list(
            entry.get("other_spdx_license_keys") or []
        )
        for key in keys:
            if key:
                known.setdefault(key.lower(), key)
    return known


def _is_valid(expression: str) -> bool:
    try:
        info = SPDX.validate(expression)
    except ExpressionError as e:
        logger.debug("Could not validate license '%s': %s", expression, e)
        return False
    return not info.errors


@lru_cache(maxsize=1024)
def correct_license_expression(value: str) -> str:
    """Correct a declared license expression.

    Fixes casing of known identifiers and operators and maps common aliases
    to identifiers. Deprecated identifiers are kept as written (they are not
    upgraded to their "-only" or "-or-later" successors). Strings that cannot
    be corrected, such as "SEE LICENSE IN LICENSE.md", are returned unchanged.

    Args:
        value: Declared license string.

    Returns:
        Corrected expression or the stripped input.
    """
    value = value.strip()
    if not value:
        return value

    alias = LICENSE_ALIASES.get(value.lower())
    if alias:
        return alias

    known = _known_identifiers()
    tokens = []
    for token in _TOKEN_SPLIT.split(value):
        lowered = token.lower()
        if lowered in _OPERATORS:
            tokens.append(token.upper())
        elif lowered in known:
            tokens.append(known[lowered])
        elif lowered in LICENSE_ALIASES:
            tokens.append(LICENSE_ALIASES[lowered])
        else:
            tokens.append(token)

    corrected = "".join(tokens)
    if corrected != value and _is_valid(corrected):
        return corrected

    if corrected != value:
        logger.debug("Could not correct license '%s'", value)
    return value


def declared_license_expression(license: Any) -> Optional[str]:
    """Normalize the ``license`` field of package metadata.

    Args:
        license: A string, a ``{type, url}`` object or a list of such
            objects (legacy ``licenses`` field).

    Returns:
        Corrected expression, or None if nothing usable was declared.
    """
    if not license:
        return None

    if isinstance(license, str):
        return correct_license_expression(license) or None

    if isinstance(license, dict):
        license_type = license.get("type")
        if isinstance(license_type, str) and license_type.strip():
            return correct_license_expression(license_type)
        return None

    if isinstance(license, list):
        identifiers = []
        for item in license:
            expression = declared_license_expression(item)
            if expression and expression not in identifiers:
                identifiers.append(expression)
        if not identifiers:
            return None
        # several declared licenses are read strictly, as with text
        return join_identifiers(identifiers)

    return None


def expression_satisfies(declared: str, resolved: str) -> bool:
    """Check that license text agrees with the declared license.

    Args:
        declared: Expression declared in package metadata.
        resolved: Expression merged from the license texts.

    Returns:
        True if every license found in the texts is named by the declared
        expression.

    Raises:
        ExpressionError: If either expression is not valid SPDX.
    """
    declared_keys = {
        key.lower() for key in SPDX.license_keys(SPDX.parse(declared, validate=True))
    }
    resolved_keys = {
        key.lower() for key in SPDX.license_keys(SPDX.parse(resolved, validate=True))
    }
    return resolved_keys <= declared_keys
