"""Base interface for directory sources.

A directory source lists the entries of a package's root directory and reads
individual files from it, regardless of whether the package lives on disk or
in a remote repository.
"""

from abc import ABC, abstractmethod
from typing import Optional


class BaseSource(ABC):
    """Abstract base class for directory sources.

    Sources never raise for missing files or failed requests; they return an
    empty listing or None instead.
    """

    @abstractmethod
    async def readdir(self) -> list[str]:
        """List the entry names of the source's root directory.

        Returns:
            Entry names, empty if the directory could not be listed.
        """
        ...

    @abstractmethod
    async def read_file(self, name: str) -> Optional[str]:
        """Read an entry of the root directory as text.

        Args:
            name: Entry name as returned by readdir().

        Returns:
            File contents, or None if the file could not be read.
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the source name for logging/debugging.

        Returns:
            Name like "local", "GitHub", "GitLab", etc.
        """
        ...
