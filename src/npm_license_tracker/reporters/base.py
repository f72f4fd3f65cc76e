"""Base interface for output reporters.

Reporters generate formatted output (JSON, Markdown) from a scan result.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from npm_license_tracker.models import ScanResult


class BaseReporter(ABC):
    """Abstract base class for output reporters."""

    @abstractmethod
    def render(self, result: ScanResult) -> str:
        """Render a scan result.

        Args:
            result: Result of scanning a project.

        Returns:
            Rendered output as a string.
        """
        ...

    def write(self, result: ScanResult, output_path: Path) -> None:
        """Render and write output to a file.

        Args:
            result: Result of scanning a project.
            output_path: Path to write the output file.
        """
        content = self.render(result)
        output_path.write_text(content, encoding="utf-8")

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Return the output format name, like "json" or "markdown"."""
        ...

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Return the default file extension, like ".json" or ".md"."""
        ...
