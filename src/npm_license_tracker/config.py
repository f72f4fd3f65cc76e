"""Loading scan options from a JSON configuration file.

The file uses the same camelCase keys as the command line tool's JSON
output, for example::

    {
        "includeDev": false,
        "exclude": ["my-internal-package"],
        "overrides": {
            "left-pad": {"license": "WTFPL", "file": "licenses/left-pad.txt"}
        },
        "append": [
            {
                "name": "bundled-font",
                "version": "1.0.0",
                "licenses": [{"expression": "OFL-1.1", "file": "fonts/OFL.txt"}]
            }
        ]
    }
"""

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from npm_license_tracker.models import AppendEntry, ForcedLicense, Options, Override

logger = logging.getLogger(__name__)

_BOOL_KEYS = {
    "includeDev": "include_dev",
    "includeHomepage": "include_homepage",
    "includeRepository": "include_repository",
    "includeFunding": "include_funding",
}

_STRING_KEYS = {
    "cacheFolder": "cache_folder",
    "joinText": "join_text",
}


class ConfigError(ValueError):
    """Raised when a configuration file cannot be read or is invalid."""


def _string_list(data: dict, key: str) -> list[str]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{key} must be a list of package names")
    return list(value)


def _optional_string(data: dict, key: str, where: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"{where}.{key} must be a string")
    return value


def parse_override(name: str, data: Any) -> Override:
    """Parse one entry of the ``overrides`` mapping."""
    if not isinstance(data, dict):
        raise ConfigError(f"overrides.{name} must be an object")
    where = f"overrides.{name}"
    return Override(
        license=_optional_string(data, "license", where),
        text=_optional_string(data, "text", where),
        file=_optional_string(data, "file", where),
    )


def parse_forced_license(data: Any, where: str) -> ForcedLicense:
    """Parse a forced license fragment ``{expression, text, file}``."""
    if not isinstance(data, dict):
        raise ConfigError(f"{where} must be an object")
    return ForcedLicense(
        expression=_optional_string(data, "expression", where),
        text=_optional_string(data, "text", where),
        file=_optional_string(data, "file", where),
    )


def parse_append_entry(data: Any, index: int) -> AppendEntry:
    """Parse one entry of the ``append`` list."""
    where = f"append[{index}]"
    if not isinstance(data, dict):
        raise ConfigError(f"{where} must be an object")

    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise ConfigError(f"{where}.name is required")

    licenses = data.get("licenses", [])
    if not isinstance(licenses, list):
        raise ConfigError(f"{where}.licenses must be a list")

    return AppendEntry(
        name=name,
        version=_optional_string(data, "version", where) or "",
        path=_optional_string(data, "path", where) or "",
        licenses=tuple(
            parse_forced_license(item, f"{where}.licenses[{i}]")
            for i, item in enumerate(licenses)
        ),
        license_expression=_optional_string(data, "licenseExpression", where),
    )


def options_from_dict(data: dict, base: Optional[Options] = None) -> Options:
    """Build Options from a parsed configuration document.

    Args:
        data: Parsed configuration object.
        base: Options to start from, defaults to Options().

    Returns:
        New Options with the configured values applied.

    Raises:
        ConfigError: If a value has the wrong type.
    """
    changes: dict[str, Any] = {}

    for key, attr in _BOOL_KEYS.items():
        if key in data:
            if not isinstance(data[key], bool):
                raise ConfigError(f"{key} must be true or false")
            changes[attr] = data[key]

    for key, attr in _STRING_KEYS.items():
        if key in data:
            if not isinstance(data[key], str):
                raise ConfigError(f"{key} must be a string")
            changes[attr] = data[key]

    if "include" in data:
        changes["include"] = _string_list(data, "include")
    if "exclude" in data:
        changes["exclude"] = _string_list(data, "exclude")

    if "overrides" in data:
        overrides = data["overrides"]
        if not isinstance(overrides, dict):
            raise ConfigError("overrides must be an object keyed by package name")
        changes["overrides"] = {
            name: parse_override(name, value) for name, value in overrides.items()
        }

    if "append" in data:
        append = data["append"]
        if not isinstance(append, list):
            raise ConfigError("append must be a list")
        changes["append"] = [parse_append_entry(item, i) for i, item in enumerate(append)]

    unknown = set(data) - set(_BOOL_KEYS) - set(_STRING_KEYS) - {
        "include",
        "exclude",
        "overrides",
        "append",
    }
    for key in sorted(unknown):
        logger.warning("Ignoring unknown configuration key %s", key)

    return dataclasses.replace(base or Options(), **changes)


def load_options(path: Union[str, Path], base: Optional[Options] = None) -> Options:
    """Load scan options from a JSON configuration file.

    Relative ``file`` paths in overrides and append entries are kept as
    written, so they resolve against the working directory.

    Args:
        path: Path of the JSON file.
        base: Options to start from, defaults to Options().

    Returns:
        Options with the file's values applied.

    Raises:
        ConfigError: If the file cannot be read, is not valid JSON, or holds
            invalid values.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except ValueError as e:
        raise ConfigError(f"Invalid JSON in config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")

    return options_from_dict(data, base)
