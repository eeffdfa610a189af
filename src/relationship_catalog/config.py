# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Configuration loading and validation for the relationship catalog."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = ".relationship_catalog.yml"

OUTPUT_FORMATS = ("markdown", "html")


class ConfigurationError(Exception):
    """Raised when configuration validation fails critically."""

    pass


class Config:
    """Configuration for the relationship catalog tools.

    Loads configuration from .relationship_catalog.yml with validation and defaults.
    """

    DEFAULTS = {
        "catalog_path": "",  # Empty means the bundled catalog
        "output_format": "markdown",
        "document_title": "Object Relationship Patterns",
        "include_participants": True,
        "include_diagrams": True,
        "snippet_language": "python",
        "verify_snippets": True,
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_path: Path to configuration file. If None, uses default location.
        """
        if config_path is None:
            config_path = Path.cwd() / DEFAULT_CONFIG_FILENAME

        self.config_path = config_path
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load and validate configuration from file."""
        if not self.config_path.exists():
            logger.info(f"Configuration file not found at {self.config_path}, using defaults")
            self._config = self.DEFAULTS.copy()
            return

        try:
            with open(self.config_path, encoding="utf-8") as f:
                loaded_config = yaml.safe_load(f)

            if loaded_config is None:
                logger.warning("Configuration file is empty, using defaults")
                self._config = self.DEFAULTS.copy()
                return

            if not isinstance(loaded_config, dict):
                logger.warning(
                    f"Configuration file must contain a YAML dictionary, "
                    f"got {type(loaded_config)}, using defaults"
                )
                self._config = self.DEFAULTS.copy()
                return

            # Start with defaults and override with loaded values
            self._config = self.DEFAULTS.copy()
            self._validate_and_merge(loaded_config)

        except yaml.YAMLError as e:
            logger.warning(
                f"Error parsing configuration file {self.config_path}: {e}, using defaults"
            )
            self._config = self.DEFAULTS.copy()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(
                f"Unable to read configuration file {self.config_path}: {e}, using defaults"
            )
            self._config = self.DEFAULTS.copy()

    def _validate_and_merge(self, loaded_config: Dict[str, Any]) -> None:
        """Validate loaded configuration and merge with defaults.

        Invalid parameters are logged as warnings and defaults are used.
        """
        for key, value in loaded_config.items():
            if key not in self.DEFAULTS:
                logger.warning(f"Unknown configuration parameter '{key}', ignoring")
                continue

            if not self._validate_parameter(key, value):
                logger.warning(
                    f"Invalid value for '{key}': {value}, using default {self.DEFAULTS[key]}"
                )
                continue

            self._config[key] = value

    def _validate_parameter(self, key: str, value: Any) -> bool:
        """Validate a configuration parameter.

        Returns:
            True if valid, False if invalid
        """
        expected_type = type(self.DEFAULTS[key])
        if not isinstance(value, expected_type):
            return False

        if key == "output_format":
            return value in OUTPUT_FORMATS
        elif key == "document_title":
            return bool(value.strip())
        elif key == "snippet_language":
            # Used verbatim after a code fence
            return bool(value) and not any(c.isspace() for c in value)

        return True

    def override(self, **values: Any) -> None:
        """Apply command-line overrides, validated like file values.

        None values are skipped so unset CLI options keep the file's value.

        Raises:
            ConfigurationError: If an override names an unknown key or is invalid.
        """
        for key, value in values.items():
            if value is None:
                continue
            if key not in self.DEFAULTS:
                raise ConfigurationError(f"Unknown configuration parameter '{key}'")
            if not self._validate_parameter(key, value):
                raise ConfigurationError(f"Invalid value for '{key}': {value}")
            self._config[key] = value

    # Property accessors for all configuration values
    @property
    def catalog_path(self) -> Optional[Path]:
        """Catalog file to load, or None for the bundled catalog.

        Relative paths are resolved against the configuration file's directory.
        """
        value = self._config["catalog_path"]
        assert isinstance(value, str)
        if not value:
            return None
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = self.config_path.parent / path
        return path

    @property
    def output_format(self) -> str:
        """Default render format (markdown or html)."""
        value = self._config["output_format"]
        assert isinstance(value, str)
        return value

    @property
    def document_title(self) -> str:
        """Title written at the top of a rendered catalog."""
        value = self._config["document_title"]
        assert isinstance(value, str)
        return value

    @property
    def include_participants(self) -> bool:
        """Whether rendered entries list their participants."""
        value = self._config["include_participants"]
        assert isinstance(value, bool)
        return value

    @property
    def include_diagrams(self) -> bool:
        """Whether rendered entries include a PlantUML diagram."""
        value = self._config["include_diagrams"]
        assert isinstance(value, bool)
        return value

    @property
    def snippet_language(self) -> str:
        """Language tag for snippet code blocks."""
        value = self._config["snippet_language"]
        assert isinstance(value, str)
        return value

    @property
    def verify_snippets(self) -> bool:
        """Whether snippets are structurally checked when the catalog loads."""
        value = self._config["verify_snippets"]
        assert isinstance(value, bool)
        return value
