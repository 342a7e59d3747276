"""Configuration management module.

This module handles project configuration stored in TOML format
(``psdocsync.toml`` in the project root). The loaded DocSyncConfig value is
passed explicitly to every component that needs a setting.
"""

import getpass
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import tomli
import tomlkit

from .errors import ConfigError
from .models import HelpField

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "psdocsync.toml"

DEFAULT_REGENERATE_FIELDS = [
    "Synopsis",
    "Description",
    "Examples",
    "Notes",
    "Component",
    "Links",
    "Parameters",
]


def _default_author() -> str:
    try:
        return getpass.getuser()
    except Exception:
        return "unknown"


def _parse_fields(names: list[str], key: str) -> set[HelpField]:
    fields = set()
    for name in names:
        try:
            fields.add(HelpField.from_name(name))
        except ValueError as e:
            raise ConfigError(f"Invalid {key}: {e}") from e
    return fields


@dataclass
class DocSyncConfig:
    """psdocsync configuration data."""

    author: str = field(default_factory=_default_author)
    date_format: str = "%Y-%m-%d"
    indent_size: int = 4
    regenerate_fields: list[str] = field(default_factory=lambda: list(DEFAULT_REGENERATE_FIELDS))
    placeholder_fields: list[str] = field(default_factory=list)
    update_version: bool = False
    description_table: str | None = None  # delimited Function/Parent/Description table
    description_delimiter: str = ","
    changelog_path: str = "CHANGELOG.md"
    strip_whitespace: bool = False  # rewrites the whole file
    pwsh_executable: str = "pwsh"
    source_globs: list[str] = field(default_factory=lambda: ["*.ps1", "*.psm1"])
    manifest_path: str | None = None

    @property
    def indent(self) -> str:
        """One indentation level."""
        return " " * self.indent_size

    @property
    def requested_fields(self) -> set[HelpField]:
        return _parse_fields(self.regenerate_fields, "regenerate_fields")

    @property
    def placeholders(self) -> set[HelpField]:
        return _parse_fields(self.placeholder_fields, "placeholder_fields")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        data = asdict(self)
        # TOML has no null
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DocSyncConfig":
        """Create from dictionary.

        Raises:
            ConfigError: If a value has the wrong type or names an unknown
                help field
        """
        defaults = cls()
        config = cls(
            author=str(data.get("author") or defaults.author),
            date_format=str(data.get("date_format", defaults.date_format)),
            indent_size=data.get("indent_size", defaults.indent_size),
            regenerate_fields=list(data.get("regenerate_fields", defaults.regenerate_fields)),
            placeholder_fields=list(data.get("placeholder_fields", defaults.placeholder_fields)),
            update_version=bool(data.get("update_version", defaults.update_version)),
            description_table=data.get("description_table"),
            description_delimiter=str(
                data.get("description_delimiter", defaults.description_delimiter)
            ),
            changelog_path=str(data.get("changelog_path", defaults.changelog_path)),
            strip_whitespace=bool(data.get("strip_whitespace", defaults.strip_whitespace)),
            pwsh_executable=str(data.get("pwsh_executable", defaults.pwsh_executable)),
            source_globs=list(data.get("source_globs", defaults.source_globs)),
            manifest_path=data.get("manifest_path"),
        )

        if not isinstance(config.indent_size, int) or config.indent_size < 0:
            raise ConfigError(f"indent_size must be a non-negative integer: {config.indent_size!r}")
        _parse_fields(config.regenerate_fields, "regenerate_fields")
        _parse_fields(config.placeholder_fields, "placeholder_fields")
        return config


class ConfigManager:
    """Manage the psdocsync project configuration file."""

    @classmethod
    def get_config_path(cls, custom_path: str | None = None) -> Path:
        """Get configuration file path.

        Args:
            custom_path: Custom config file path (optional)

        Returns:
            Path to config file

        Raises:
            ConfigError: If a custom path does not exist
        """
        if custom_path:
            path = Path(custom_path).expanduser().resolve()
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}")
            return path

        return Path.cwd() / DEFAULT_CONFIG_NAME

    @classmethod
    def load_config(cls, custom_path: str | None = None) -> DocSyncConfig:
        """Load configuration from file.

        Args:
            custom_path: Custom config file path (optional)

        Returns:
            DocSyncConfig object (defaults when no file exists)

        Raises:
            ConfigError: If loading fails
        """
        config_path = cls.get_config_path(custom_path)

        if not config_path.exists():
            logger.debug("Config file not found, using defaults")
            return DocSyncConfig()

        try:
            with open(config_path, "rb") as f:
                data = tomli.load(f)
        except (OSError, tomli.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to load config: {e}") from e

        logger.debug(f"Loaded config from: {config_path}")
        return DocSyncConfig.from_dict(data)

    @classmethod
    def save_config(cls, config: DocSyncConfig, custom_path: str | None = None) -> Path:
        """Save configuration to file.

        Existing comments and formatting are preserved; the file is replaced
        atomically.

        Args:
            config: Configuration to save
            custom_path: Custom config file path (optional)

        Returns:
            Path the configuration was written to

        Raises:
            ConfigError: If saving fails
        """
        config_path = (
            Path(custom_path).expanduser().resolve()
            if custom_path
            else Path.cwd() / DEFAULT_CONFIG_NAME
        )
        temp_path = config_path.with_suffix(".tmp")

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)

            if config_path.exists():
                with open(config_path) as f:
                    doc = tomlkit.load(f)
            else:
                doc = tomlkit.document()
            for key, value in config.to_dict().items():
                doc[key] = value

            with open(temp_path, "w") as f:
                tomlkit.dump(doc, f)

            temp_path.replace(config_path)
            logger.debug(f"Saved config to: {config_path}")
            return config_path

        except Exception as e:
            if temp_path.exists():
                temp_path.unlink()
            raise ConfigError(f"Failed to save config: {e}") from e


__all__ = ["DEFAULT_CONFIG_NAME", "ConfigManager", "DocSyncConfig"]
