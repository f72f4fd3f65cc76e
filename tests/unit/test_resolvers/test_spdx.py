"""Tests for license text classification and expression handling."""

import pytest
from license_expression import ExpressionError

from npm_license_tracker.models import UNKNOWN, LicenseSource, ResolvedLicense
from npm_license_tracker.resolvers.spdx import (
    classify_license_text,
    correct_license_expression,
    declared_license_expression,
    expression_satisfies,
    includes_sequential,
    join_identifiers,
    merge_expressions,
    split_expression,
)


class TestClassifyLicenseText:
    """Test suite for classify_license_text."""

    @pytest.mark.parametrize(
        "identifier",
        [
            "0BSD",
            "AFL-2.1",
            "AFL-3.0",
            "Apache-2.0",
            "BSD-1-Clause",
            "BSD-2-Clause",
            "BSD-3-Clause",
            "BlueOak-1.0.0",
            "CC-BY-3.0",
            "CC-BY-4.0",
            "CC0-1.0",
            "EUPL-1.1",
            "GPL-3.0-only",
            "ISC",
            "LGPL-2.1-only",
            "LGPL-3.0-only",
            "MIT",
            "MPL-2.0",
            "Unlicense",
            "WTFPL",
            "Zlib",
        ],
    )
    def test_canonical_texts(self, license_texts: dict[str, str], identifier: str) -> None:
        """Test each canonical text classifies to its own identifier."""
        assert classify_license_text(license_texts[identifier]) == identifier

    def test_whitespace_is_collapsed(self, license_texts: dict[str, str]) -> None:
        """Test reflowed text still matches."""
        reflowed = license_texts["MIT"].replace("\n", "\n\n   ").replace(" ", "  ")
        assert classify_license_text(reflowed) == "MIT"

    @pytest.mark.parametrize("order", [("MIT", "Apache-2.0"), ("Apache-2.0", "MIT")])
    def test_dual_license(self, license_texts: dict[str, str], order: tuple[str, str]) -> None:
        """Test several licenses in one text produce an AND expression in any order."""
        text = "\n\n".join(license_texts[identifier] for identifier in order)

        expression = classify_license_text(text)

        assert expression.startswith("(") and " AND " in expression
        assert set(split_expression(expression)) == {"Apache-2.0", "MIT"}

    def test_unrecognized_text(self) -> None:
        """Test unrecognized text yields UNKNOWN."""
        assert classify_license_text("Copyright 2020. All rights reserved.") == UNKNOWN
        assert classify_license_text("") == UNKNOWN

    def test_link_shortcut(self) -> None:
        """Test a bare license link is enough."""
        text = "Released under the terms at http://opensource.org/licenses/MIT"
        assert classify_license_text(text) == "MIT"

    def test_only_first_gpl_family(self) -> None:
        """Test GPL families are mutually exclusive."""
        text = (
            '"This License" refers to version 3 of the GNU General Public License. '
            '"this License" refers to version 3 of the GNU Lesser General Public License'
        )
        assert classify_license_text(text) == "GPL-3.0-only"


class TestIncludesSequential:
    """Test suite for includes_sequential."""

    def test_in_order(self) -> None:
        assert includes_sequential("a b c", ["a", "c"])

    def test_out_of_order(self) -> None:
        assert not includes_sequential("a b c", ["c", "a"])

    def test_matches_do_not_overlap(self) -> None:
        assert not includes_sequential("ab", ["ab", "b"])


class TestJoinIdentifiers:
    """Test suite for join_identifiers."""

    def test_zero_one_many(self) -> None:
        """Test the zero/one/many rule."""
        assert join_identifiers([]) == UNKNOWN
        assert join_identifiers(["MIT"]) == "MIT"
        assert join_identifiers(["ISC", "MIT"]) == "(ISC AND MIT)"


class TestMergeExpressions:
    """Test suite for merge_expressions."""

    def test_empty(self) -> None:
        assert merge_expressions([]) == UNKNOWN

    def test_single(self) -> None:
        assert merge_expressions([ResolvedLicense("MIT", LicenseSource.LICENSE, "")]) == "MIT"

    def test_compound_is_exploded_and_deduplicated(self) -> None:
        """Test identifiers from compound expressions are merged once."""
        licenses = [
            ResolvedLicense("(MIT AND ISC)", LicenseSource.LICENSE, "a"),
            ResolvedLicense("MIT", LicenseSource.LICENSE, "b"),
        ]
        assert merge_expressions(licenses) == "(MIT AND ISC)"

    def test_notices_are_skipped(self) -> None:
        """Test notice fragments do not contribute."""
        licenses = [
            ResolvedLicense(None, LicenseSource.NOTICE, "notice"),
            ResolvedLicense("ISC", LicenseSource.LICENSE, "isc"),
        ]
        assert merge_expressions(licenses) == "ISC"

    def test_unknown_readme_is_skipped(self) -> None:
        """Test an UNKNOWN readme section does not contribute."""
        licenses = [
            ResolvedLicense("MIT", LicenseSource.LICENSE, "mit"),
            ResolvedLicense(UNKNOWN, LicenseSource.README, "## License\nMIT"),
        ]
        assert merge_expressions(licenses) == "MIT"

    def test_unknown_license_file_is_kept(self) -> None:
        """Test an UNKNOWN license file still contributes."""
        licenses = [
            ResolvedLicense("MIT", LicenseSource.LICENSE, "mit"),
            ResolvedLicense(UNKNOWN, LicenseSource.LICENSE, "custom"),
        ]
        assert merge_expressions(licenses) == "(MIT AND UNKNOWN)"


class TestCorrectLicenseExpression:
    """Test suite for correct_license_expression."""

    @pytest.mark.parametrize(
        ("declared", "expected"),
        [
            ("MIT", "MIT"),
            ("mit", "MIT"),
            ("apache-2.0", "Apache-2.0"),
            ("Apache 2.0", "Apache-2.0"),
            ("(mit or apache-2.0)", "(MIT OR Apache-2.0)"),
            ("GPL-2.0", "GPL-2.0"),
        ],
    )
    def test_corrections(self, declared: str, expected: str) -> None:
        """Test casing and aliases are corrected without upgrades."""
        assert correct_license_expression(declared) == expected

    def test_uncorrectable_is_passed_through(self) -> None:
        """Test custom license strings are kept as written."""
        value = "SEE LICENSE IN LICENSE.md"
        assert correct_license_expression(value) == value


class TestDeclaredLicenseExpression:
    """Test suite for declared_license_expression."""

    def test_string(self) -> None:
        assert declared_license_expression("isc") == "ISC"

    def test_object(self) -> None:
        assert declared_license_expression({"type": "MIT", "url": "https://x"}) == "MIT"

    def test_list(self) -> None:
        """Test a legacy list joins into an AND expression."""
        value = [{"type": "MIT"}, {"type": "Apache-2.0"}]
        assert declared_license_expression(value) == "(MIT AND Apache-2.0)"

    def test_missing(self) -> None:
        assert declared_license_expression(None) is None
        assert declared_license_expression({"url": "https://x"}) is None
        assert declared_license_expression([]) is None


class TestExpressionSatisfies:
    """Test suite for expression_satisfies."""

    def test_same_license(self) -> None:
        assert expression_satisfies("MIT", "MIT")

    def test_choice_covers_text(self) -> None:
        assert expression_satisfies("MIT OR Apache-2.0", "(Apache-2.0 AND MIT)")

    def test_different_license(self) -> None:
        assert not expression_satisfies("MIT", "ISC")

    def test_invalid_expression(self) -> None:
        with pytest.raises(ExpressionError):
            expression_satisfies("Not-A-Real-License-1.0", "MIT")
