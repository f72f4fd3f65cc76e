"""Reading and normalizing ``package.json`` metadata."""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from npm_license_tracker.models import PackageMeta, dependency_names

logger = logging.getLogger(__name__)

PACKAGE_JSON = "package.json"

DEPENDENCY_FIELDS = ("dependencies", "optionalDependencies", "peerDependencies")


def read_package_json(package_dir: Union[str, Path]) -> Optional[dict]:
    """Load the raw ``package.json`` document of a directory.

    Args:
        package_dir: Directory that may contain a ``package.json``.

    Returns:
        The parsed JSON object, or None if the file is missing, unreadable
        or not a JSON object.
    """
    path = Path(package_dir) / PACKAGE_JSON

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError:
        return None
    except ValueError as e:
        logger.warning("Invalid JSON in %s: %s", path, e)
        return None

    if not isinstance(data, dict):
        logger.warning("Unexpected package.json content in %s", path)
        return None
    return data


def read_package_meta(package_dir: Union[str, Path]) -> Optional[PackageMeta]:
    """Parse the ``package.json`` of a directory.

    Args:
        package_dir: Directory that may contain a package.

    Returns:
        PackageMeta, or None if the directory holds no readable, valid
        ``package.json`` (it is not a package).
    """
    data = read_package_json(package_dir)
    if data is None:
        return None

    try:
        return PackageMeta.from_dict(data)
    except ValueError as e:
        logger.debug("Skipping %s: %s", Path(package_dir) / PACKAGE_JSON, e)
        return None


def read_dependency_names(package_dir: Union[str, Path]) -> Optional[list[str]]:
    """List the runtime, optional and peer dependency names of a directory.

    Unlike read_package_meta() this does not require a ``name``, so private
    project roots are accepted.

    Returns:
        Dependency names in declaration order, or None without a readable
        ``package.json``.
    """
    data = read_package_json(package_dir)
    if data is None:
        return None
    return [name for field in DEPENDENCY_FIELDS for name in dependency_names(data.get(field))]


def normalize_funding(funding: Any) -> list[str]:
    """Flatten the ``funding`` field into a list of URLs.

    Args:
        funding: A URL string, a ``{type, url}`` object or a list of either.

    Returns:
        List of funding URLs in declaration order.
    """
    items = funding if isinstance(funding, list) else [funding]
    urls = []
    for item in items:
        if isinstance(item, str) and item:
            urls.append(item)
        elif isinstance(item, dict) and isinstance(item.get("url"), str):
            urls.append(item["url"])
    return urls
