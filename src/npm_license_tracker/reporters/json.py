"""JSON reporters.

Three shapes are supported:

* ``plain``: the list of resolved packages.
* ``summary``: the number of packages per license expression.
* ``compressed``: resolved packages whose license texts are replaced by keys
  into a ``licenseText`` table, so identical texts are stored once. Keys have
  the form ``name@version/index`` of the first package carrying the text.
"""

import json
from enum import Enum
from typing import Any, Optional

from npm_license_tracker.models import ScanResult
from npm_license_tracker.reporters.base import BaseReporter


class JsonMode(str, Enum):
    """Shape of the JSON output."""

    PLAIN = "plain"
    SUMMARY = "summary"
    COMPRESSED = "compressed"


def summarize(result: ScanResult) -> dict[str, int]:
    """Count packages per license expression, in first-seen order."""
    counts: dict[str, int] = {}
    for package in result.resolved:
        counts[package.license_expression] = counts.get(package.license_expression, 0) + 1
    return counts


def compress(result: ScanResult) -> dict[str, Any]:
    """Deduplicate license texts into a lookup table.

    Args:
        result: Result of scanning a project.

    Returns:
        Dict with ``licenseText`` (key -> text) and ``packages`` (package
        dicts whose license ``text`` holds a key).
    """
    license_text: dict[str, str] = {}
    keys_by_text: dict[str, str] = {}
    packages = []

    for package in result.resolved:
        data = package.to_dict()
        for index, license in enumerate(data["licenses"]):
            key = keys_by_text.get(license["text"])
            if key is None:
                key = f"{package.name}@{package.version}/{index}"
                keys_by_text[license["text"]] = key
                license_text[key] = license["text"]
            license["text"] = key
        packages.append(data)

    return {"licenseText": license_text, "packages": packages}


class JsonReporter(BaseReporter):
    """Reporter producing JSON output.

    Attributes:
        mode: Output shape.
        indent: Indentation passed to json.dumps, None for compact output.
    """

    def __init__(self, mode: JsonMode = JsonMode.PLAIN, indent: Optional[int] = 2) -> None:
        self.mode = JsonMode(mode)
        self.indent = indent

    def build(self, result: ScanResult) -> Any:
        """Build the JSON-ready document for the configured mode."""
        if self.mode is JsonMode.SUMMARY:
            return summarize(result)
        if self.mode is JsonMode.COMPRESSED:
            return compress(result)
        return [package.to_dict() for package in result.resolved]

    def render(self, result: ScanResult) -> str:
        return json.dumps(self.build(result), indent=self.indent, ensure_ascii=False) + "\n"

    @property
    def format_name(self) -> str:
        return "json"

    @property
    def default_extension(self) -> str:
        return ".json"
