"""
Configuration management for steppedraw.

This module provides centralized configuration management with support for
environment variables, configuration files, and runtime updates.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from steppedraw.core.constants import DATE_FORMATS, DEFAULT_LOG_LEVEL, FileExtensions
from steppedraw.exceptions import ConfigurationError, InvalidConfigurationError

_logger = logging.getLogger("steppedraw.Config")

PACKAGE_LOGGER = "steppedraw"

_LOG_LEVELS = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


def _split_extensions(value: str) -> List[str]:
    return [ext.strip() for ext in value.split(",") if ext.strip()]


@dataclass
class RawReaderConfig:
    """Configuration for the raw file reader."""

    raw_extensions: List[str] = field(
        default_factory=lambda: list(FileExtensions.DEFAULT_RAW_EXTENSIONS)
    )
    log_level: str = DEFAULT_LOG_LEVEL
    date_formats: List[str] = field(default_factory=lambda: list(DATE_FORMATS))

    def __post_init__(self) -> None:
        """Normalize and validate the configured values."""
        self.validate()

    def validate(self) -> None:
        """
        Check the configuration values.

        Raises:
            InvalidConfigurationError: If a value is out of range
        """
        if isinstance(self.raw_extensions, str):
            self.raw_extensions = _split_extensions(self.raw_extensions)
        if not self.raw_extensions:
            raise InvalidConfigurationError("At least one raw extension is required")
        normalized = []
        for ext in self.raw_extensions:
            if not isinstance(ext, str) or not ext.strip("."):
                raise InvalidConfigurationError(f"Invalid raw extension: {ext!r}")
            normalized.append(ext if ext.startswith(".") else "." + ext)
        self.raw_extensions = normalized

        if str(self.log_level).upper() not in _LOG_LEVELS:
            raise InvalidConfigurationError(
                f"Invalid log level: {self.log_level}. "
                f"Valid options: {', '.join(_LOG_LEVELS)}"
            )
        self.log_level = str(self.log_level).upper()

    def accepts_extension(self, path: Union[str, Path]) -> bool:
        """Return True if the path's suffix is one of the raw extensions."""
        suffix = Path(path).suffix.lower()
        return any(suffix == ext.lower() for ext in self.raw_extensions)

    def update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """
        Update configuration from a dictionary.

        Args:
            config_dict: Dictionary with configuration values
        """
        for key, value in config_dict.items():
            if hasattr(self, key):
                setattr(self, key, value)
            else:
                _logger.warning("Ignoring unknown configuration key: %s", key)
        self.validate()

    @classmethod
    def from_file(cls, filepath: Union[str, Path]) -> "RawReaderConfig":
        """
        Load configuration from a JSON object file.

        Keys are the dataclass field names; missing keys keep their defaults.

        Raises:
            ConfigurationError: If the file cannot be read
            InvalidConfigurationError: If it is not a JSON object of valid values
        """
        filepath = Path(filepath)
        try:
            text = filepath.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read configuration file {filepath}: {e}",
                {"filepath": str(filepath)},
            ) from e

        try:
            values = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidConfigurationError(
                f"Invalid JSON in {filepath}: {e}", {"filepath": str(filepath)}
            ) from e
        if not isinstance(values, dict):
            raise InvalidConfigurationError(
                f"Configuration file must hold a JSON object: {filepath}",
                {"filepath": str(filepath)},
            )

        config = cls()
        config.update_from_dict(values)
        return config

    @classmethod
    def from_environment(cls) -> "RawReaderConfig":
        """
        Create configuration from ``STEPPEDRAW_*`` environment variables.

        A variable with an invalid value is logged and ignored.
        """
        config = cls()
        for env_var, (attr, converter) in _ENVIRONMENT.items():
            value = os.environ.get(env_var)
            if value is None:
                continue
            previous = getattr(config, attr)
            setattr(config, attr, converter(value))
            try:
                config.validate()
            except InvalidConfigurationError as e:
                _logger.warning("Ignoring %s=%r: %s", env_var, value, e)
                setattr(config, attr, previous)
        return config


_ENVIRONMENT: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    "STEPPEDRAW_LOG_LEVEL": ("log_level", str),
    "STEPPEDRAW_RAW_EXTENSIONS": ("raw_extensions", _split_extensions),
}


def configure_logging(config: Optional[RawReaderConfig] = None) -> None:
    """
    Apply the configured log level to the package logger.

    No handler is installed; applications decide where records go.

    Args:
        config: Configuration to apply, the global one by default
    """
    config = config or get_config()
    logging.getLogger(PACKAGE_LOGGER).setLevel(config.log_level)


_global_config: Optional[RawReaderConfig] = None


def get_config() -> RawReaderConfig:
    """Process-wide configuration, built from the environment on first use."""
    global _global_config
    if _global_config is None:
        _global_config = RawReaderConfig.from_environment()
    return _global_config


def set_config(config: Optional[RawReaderConfig]) -> None:
    """Replace the process-wide configuration; None rebuilds it on next use."""
    global _global_config
    _global_config = config


def default_config_files() -> List[Path]:
    """Files :func:`load_config` looks at, in order, when given no path."""
    return [Path.cwd() / "steppedraw.json", Path.home() / ".steppedraw.json"]


def load_config(filepath: Optional[Union[str, Path]] = None) -> RawReaderConfig:
    """
    Load, install and apply a configuration.

    An explicit file must load. Without one, the first readable default file
    is used, then the environment.

    Returns:
        The configuration now returned by :func:`get_config`
    """
    if filepath:
        config = RawReaderConfig.from_file(filepath)
    else:
        config = RawReaderConfig.from_environment()
        for candidate in default_config_files():
            if not candidate.is_file():
                continue
            try:
                config = RawReaderConfig.from_file(candidate)
            except ConfigurationError as e:
                _logger.warning("Skipping configuration %s: %s", candidate, e)
                continue
            _logger.debug("Loaded configuration from %s", candidate)
            break

    set_config(config)
    configure_logging(config)
    return config
