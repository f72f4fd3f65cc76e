"""Extraction of license sections from markdown readmes."""

import re
from typing import Optional

from markdown_it import MarkdownIt

_MARKDOWN = MarkdownIt("commonmark")

# line endings as markdown-it normalizes them before counting lines
_NEWLINES = re.compile(r"\r\n?")


def _split_lines(text: str) -> list[str]:
    """Split on line feeds only, keeping line ends, as token.map counts lines."""
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _is_license_title(title: str) -> bool:
    title = title.lower()
    return "licens" in title or "licenc" in title


def extract_markdown_license(readme_text: str) -> Optional[str]:
    """Extract the license section(s) of a markdown readme.

    A section starts at a top-level heading whose title mentions a license
    and covers everything up to the next heading of the same or a shallower
    depth. Nested headings stay inside the section. A later license heading
    starts a new section, and all sections are concatenated.

    Args:
        readme_text: Raw markdown text.

    Returns:
        The raw markdown of the license sections, or None if the readme has
        no license heading.
    """
    readme_text = _NEWLINES.sub("\n", readme_text)
    lines = _split_lines(readme_text)
    tokens = _MARKDOWN.parse(readme_text)

    regions: list[tuple[int, int]] = []
    start: Optional[int] = None
    depth = 0

    for index, token in enumerate(tokens):
        if token.type != "heading_open" or token.level != 0 or token.map is None:
            continue

        heading_depth = int(token.tag[1:])
        title = tokens[index + 1].content if index + 1 < len(tokens) else ""
        line = token.map[0]

        if _is_license_title(title):
            if start is None:
                start = line
                depth = heading_depth
            elif heading_depth < depth:
                depth = heading_depth
        elif start is not None and heading_depth <= depth:
            regions.append((start, line))
            start = None

    if start is not None:
        regions.append((start, len(lines)))

    text = "".join("".join(lines[begin:end]) for begin, end in regions)
    return text if text.strip() else None
