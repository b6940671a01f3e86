"""Configuration file loader for depbump.

Supports two formats:

- ``depbump.toml`` — settings under a ``[depbump]`` table
- ``pyproject.toml`` — settings under a ``[tool.depbump]`` table

Discovery order:

1. Explicit path from ``--config`` or ``DEPBUMP_CONFIG``
2. ``depbump.toml`` in the current directory
3. ``pyproject.toml`` with a ``[tool.depbump]`` section

Configuration precedence: defaults < config file < CLI args.

Example (``depbump.toml``)::

    [depbump]
    update_strategy = "bump_versions_if_necessary"
    package_manager = "cabal"
"""

from __future__ import annotations

from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import tomli as tomllib

from depbump.constants import DEFAULT_PACKAGE_MANAGER, DEFAULT_UPDATE_STRATEGY
from depbump.core.registry import supported_package_managers
from depbump.core.requirements_updater import UpdateStrategy
from depbump.exceptions import ConfigError
from depbump.utils.logger import get_logger

logger = get_logger("config")

_KNOWN_KEYS = ("update_strategy", "package_manager")


@dataclass
class DepBumpConfig:
    """Parsed and validated depbump configuration.

    Attributes:
        update_strategy: Default strategy for ``depbump update``.
        package_manager: Package manager assumed when the input document
            does not name one.
        source_path: Path of the loaded file, or ``None`` for defaults.
    """

    update_strategy: str = DEFAULT_UPDATE_STRATEGY
    package_manager: str = DEFAULT_PACKAGE_MANAGER

    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Configuration options without file metadata, for debug logging."""
        return {
            "update_strategy": self.update_strategy,
            "package_manager": self.package_manager,
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Raises:
        ConfigError: ``explicit_path`` was given but does not exist.
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

    depbump_toml = cwd / "depbump.toml"
    if depbump_toml.is_file():
        logger.debug("Found depbump.toml: %s", depbump_toml)
        return depbump_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_depbump_section(pyproject_toml):
        logger.debug("Found [tool.depbump] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_depbump_section(path: Path) -> bool:
    """True if ``path`` parses and has a ``[tool.depbump]`` table.

    A pyproject that cannot be read is treated as having no section.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return "depbump" in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> DepBumpConfig:
    """Load and validate depbump configuration.

    Returns defaults when no configuration file is found.

    Raises:
        ConfigError: The file cannot be parsed, has unknown keys, or holds
            invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        return DepBumpConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("depbump", {})
    else:
        section = raw.get("depbump", {})

    if not section:
        logger.debug("Config file has no depbump section; using defaults")
        return DepBumpConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
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


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> DepBumpConfig:
    """Validate a ``[depbump]`` / ``[tool.depbump]`` table.

    Raises:
        ConfigError: Unknown keys, wrong types or unsupported values.
    """
    unknown = set(section) - set(_KNOWN_KEYS)
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    config = DepBumpConfig()

    for option in _KNOWN_KEYS:
        if option in section and not isinstance(section[option], str):
            raise ConfigError(
                f"{option} must be a string, got {type(section[option]).__name__}",
                config_path=config_path,
                option=option,
            )

    if "update_strategy" in section:
        value = section["update_strategy"]
        allowed = [strategy.value for strategy in UpdateStrategy]
        if value not in allowed:
            raise ConfigError(
                f"update_strategy must be one of {', '.join(allowed)}, got {value!r}",
                config_path=config_path,
                option="update_strategy",
            )
        config.update_strategy = value

    if "package_manager" in section:
        value = section["package_manager"]
        supported = supported_package_managers()
        if value not in supported:
            raise ConfigError(
                f"package_manager must be one of {', '.join(supported)}, got {value!r}",
                config_path=config_path,
                option="package_manager",
            )
        config.package_manager = value

    return config
