"""Markdown reporter for generating license attribution files.

This module provides a reporter that generates a Markdown attribution
document, listing every package with its full license text, using Jinja2
templates.
"""

from datetime import datetime
from importlib.resources import files
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, Template

from npm_license_tracker.models import ScanResult
from npm_license_tracker.reporters.base import BaseReporter

DEFAULT_JOIN_TEXT = "\n\n-\n\n"


class MarkdownReporter(BaseReporter):
    """Reporter that generates Markdown license attribution files.

    Attributes:
        template: The Jinja2 template to use for rendering.
        join_text: Separator placed between the license texts of a package.
    """

    def __init__(
        self,
        template_path: Optional[Path] = None,
        join_text: str = DEFAULT_JOIN_TEXT,
    ) -> None:
        """Initialize the Markdown reporter.

        Args:
            template_path: Optional path to a custom Jinja2 template.
                If not provided, uses the default bundled template.
            join_text: Separator between the license texts of a package.
        """
        self.join_text = join_text
        if template_path:
            env = self._environment(FileSystemLoader(template_path.parent))
            self.template = env.get_template(template_path.name)
        else:
            self.template = self._load_default_template()

    @staticmethod
    def _environment(loader=None) -> Environment:
        return Environment(
            loader=loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def _load_default_template(self) -> Template:
        template_content = (
            files("npm_license_tracker.templates")
            .joinpath("licenses.md.j2")
            .read_text(encoding="utf-8")
        )
        return self._environment().from_string(template_content)

    def render(self, result: ScanResult) -> str:
        """Render a scan result to Markdown.

        Args:
            result: Result of scanning a project.

        Returns:
            Rendered Markdown document as a string.
        """
        return self.template.render(
            packages=result.resolved,
            errors=result.errors,
            join_text=self.join_text,
            generated_at=datetime.now(),
        )

    @property
    def format_name(self) -> str:
        return "markdown"

    @property
    def default_extension(self) -> str:
        return ".md"
