"""Configuration file loader for ngkeeper.

Supports two formats:

- ``ngkeeper.toml`` -- settings under the ``[ngkeeper]`` table
- ``pyproject.toml`` -- settings under the ``[tool.ngkeeper]`` table

Discovery order:

1. Explicit path from ``--config`` or ``NGKEEPER_CONFIG``
2. ``ngkeeper.toml`` in the current directory
3. ``pyproject.toml`` with a ``[tool.ngkeeper]`` section

Precedence: defaults < config file < CLI options.

Example (``ngkeeper.toml``)::

    [ngkeeper]
    target_major = 18
    registry_url = "https://registry.npmjs.org"
    concurrent_limit = 10
    timeout = 30
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from ngkeeper.exceptions import ConfigError
from ngkeeper.utils.logger import get_logger
from ngkeeper.constants import (
    DEFAULT_CONCURRENT_LIMIT,
    DEFAULT_TARGET_MAJOR,
    DEFAULT_TIMEOUT,
    NPM_REGISTRY_URL,
)

logger = get_logger("config")

CONFIG_FILE_NAME = "ngkeeper.toml"
SECTION_NAME = "ngkeeper"


@dataclass
class NgKeeperConfig:
    """Parsed and validated ngkeeper configuration.

    All fields have defaults, so an empty section is valid.

    Attributes:
        target_major: Framework major to upgrade towards.
        registry_url: Base URL of the npm registry.
        concurrent_limit: Maximum registry fetches in flight.
        timeout: HTTP timeout in seconds.
        source_path: Path to the loaded file, or ``None`` for defaults.
    """

    target_major: int = DEFAULT_TARGET_MAJOR
    registry_url: str = NPM_REGISTRY_URL
    concurrent_limit: int = DEFAULT_CONCURRENT_LIMIT
    timeout: int = DEFAULT_TIMEOUT

    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return the user-facing options for debug logging."""
        return {
            "target_major": self.target_major,
            "registry_url": self.registry_url,
            "concurrent_limit": self.concurrent_limit,
            "timeout": self.timeout,
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Raises:
        ConfigError: *explicit_path* was given but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    own_file = cwd / CONFIG_FILE_NAME
    if own_file.is_file():
        logger.debug("Found %s: %s", CONFIG_FILE_NAME, own_file)
        return own_file

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_section(pyproject_toml):
        logger.debug("Found [tool.ngkeeper] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_section(path: Path) -> bool:
    """Return True if *path* has a ``[tool.ngkeeper]`` table.

    Unreadable or invalid files count as "no section".
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return SECTION_NAME in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> NgKeeperConfig:
    """Discover, parse and validate the configuration.

    Returns defaults when no file is found.

    Raises:
        ConfigError: The file cannot be parsed, has unknown keys or
            invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return NgKeeperConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get(SECTION_NAME, {})
    else:
        section = raw.get(SECTION_NAME, {})

    if not section:
        logger.debug("Config file has no ngkeeper section, using defaults")
        return NgKeeperConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: The file cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _require_positive_int(section: Dict[str, Any], key: str, config_path: str) -> int:
    val = section[key]
    # bool is an int subclass; reject it explicitly
    if isinstance(val, bool) or not isinstance(val, int):
        raise ConfigError(
            f"{key} must be an integer, got {type(val).__name__}",
            config_path=config_path,
            option=key,
        )
    if val < 1:
        raise ConfigError(
            f"{key} must be at least 1, got {val}",
            config_path=config_path,
            option=key,
        )
    return val


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> NgKeeperConfig:
    """Validate a ``[ngkeeper]`` table.

    Raises:
        ConfigError: Unknown keys or values of the wrong type.
    """
    config = NgKeeperConfig()

    known = {"target_major", "registry_url", "concurrent_limit", "timeout"}
    unknown = set(section.keys()) - known
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    if "target_major" in section:
        config.target_major = _require_positive_int(section, "target_major", config_path)

    if "registry_url" in section:
        val = section["registry_url"]
        if not isinstance(val, str) or not val.startswith(("http://", "https://")):
            raise ConfigError(
                f"registry_url must be an http(s) URL, got {val!r}",
                config_path=config_path,
                option="registry_url",
            )
        config.registry_url = val

    if "concurrent_limit" in section:
        config.concurrent_limit = _require_positive_int(
            section, "concurrent_limit", config_path
        )

    if "timeout" in section:
        config.timeout = _require_positive_int(section, "timeout", config_path)

    return config
