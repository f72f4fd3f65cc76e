"""Output reporters for scan results.

This module provides reporters for rendering scan results as JSON (plain,
summary or compressed) and as a Markdown attribution document.
"""

from npm_license_tracker.reporters.base import BaseReporter
from npm_license_tracker.reporters.json import JsonMode, JsonReporter, compress, summarize
from npm_license_tracker.reporters.markdown import MarkdownReporter

__all__ = [
    "BaseReporter",
    "JsonMode",
    "JsonReporter",
    "MarkdownReporter",
    "compress",
    "summarize",
]
