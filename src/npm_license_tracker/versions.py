"""Dotted numeric version comparison.

Only the numeric components matter for deciding which installed copy of a
package is newer; pre-release tags and build metadata are ignored.
"""

import re
from typing import Optional, Sequence

_LEADING_DIGITS = re.compile(r"\d+")


def parse_version(version: Optional[str]) -> list[int]:
    """Split a version string into its numeric components.

    Each dot separated component contributes its leading digits; a component
    without digits counts as 0. Anything after a "-" or "+" is ignored.

    Args:
        version: Version string such as "1.2.3" or "2.0.0-beta.1".

    Returns:
        List of integers, empty for a missing version.
    """
    if not version:
        return []

    core = re.split(r"[-+]", version.strip().lstrip("v="), maxsplit=1)[0]
    components = []
    for part in core.split("."):
        match = _LEADING_DIGITS.match(part)
        components.append(int(match.group()) if match else 0)
    return components


def is_newer(sample: Sequence[int], against: Sequence[int]) -> bool:
    """Return True if ``sample`` is strictly newer than ``against``.

    Components are compared pairwise up to the shorter length; missing
    trailing components are treated as equal, so ``[1]`` is not newer than
    ``[1, 0, 1]`` and vice versa.

    Args:
        sample: Version being tested.
        against: Version to compare with.

    Returns:
        True if a compared component of ``sample`` is greater.
    """
    for a, b in zip(sample, against):
        if a > b:
            return True
        if a < b:
            return False
    return False
