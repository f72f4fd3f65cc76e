"""Base interface for package scanners.

Scanners find the installed package directories of a project. Each scanner
understands one package manager layout and reports whether it applies to
the project at all.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from npm_license_tracker.models import Options


class ScanStatus(str, Enum):
    """Outcome of running a scanner against a project."""

    FOUND = "found"
    NOT_APPLICABLE = "not_applicable"
    PARSE_ERROR = "parse_error"


@dataclass
class ScanOutcome:
    """Tagged result of a scanner.

    Attributes:
        status: Whether the scanner applied and succeeded.
        paths: Package directories, in discovery order.
    """

    status: ScanStatus
    paths: list[Path] = field(default_factory=list)

    @classmethod
    def found(cls, paths: list[Path]) -> "ScanOutcome":
        return cls(ScanStatus.FOUND, paths)

    @classmethod
    def not_applicable(cls) -> "ScanOutcome":
        return cls(ScanStatus.NOT_APPLICABLE)

    @classmethod
    def parse_error(cls) -> "ScanOutcome":
        return cls(ScanStatus.PARSE_ERROR)


class BaseScanner(ABC):
    """Abstract base class for package scanners.

    Attributes:
        project_root: Root directory of the scanned project.
        options: Scan options (dev and name filters).
    """

    def __init__(self, project_root: Path, options: Optional[Options] = None) -> None:
        """Initialize the scanner.

        Args:
            project_root: Root directory of the project.
            options: Scan options, defaults to Options().
        """
        self.project_root = Path(project_root)
        self.options = options or Options()

    @abstractmethod
    async def scan(self) -> ScanOutcome:
        """Find the package directories of the project.

        Returns:
            ScanOutcome with status NOT_APPLICABLE if the project does not
            use this layout, PARSE_ERROR if its lockfile is unreadable, or
            FOUND with the package directories.
        """
        ...

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return a human-readable name for this scanner's source type.

        Returns:
            Name like "package-lock.json", "pnpm", etc.
        """
        ...
