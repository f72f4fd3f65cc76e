"""Pytest configuration and shared fixtures."""

import json
from pathlib import Path
from typing import Callable, Optional

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def write_package(
    directory: Path,
    meta: dict,
    files: Optional[dict[str, str]] = None,
) -> Path:
    """Create a package directory with a package.json and extra files."""
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "package.json").write_text(json.dumps(meta), encoding="utf-8")
    for name, content in (files or {}).items():
        (directory / name).write_text(content, encoding="utf-8")
    return directory


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the directory holding test fixtures."""
    return FIXTURES_DIR


@pytest.fixture
def license_texts() -> dict[str, str]:
    """Canonical license texts keyed by SPDX identifier."""
    return {
        path.stem: path.read_text(encoding="utf-8")
        for path in sorted((FIXTURES_DIR / "licenses").glob("*.txt"))
    }


@pytest.fixture
def make_package() -> Callable[..., Path]:
    """Return a factory writing package directories."""
    return write_package
