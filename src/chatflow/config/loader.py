"""Settings loader for YAML configuration files."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from chatflow.config.settings import Settings
from chatflow.core.errors import ConfigError


class SettingsLoader:
    """Loader for chatflow settings files.

    Supports both single YAML files and directories containing multiple YAML files.
    When loading from a directory, all .yaml/.yml files are merged in alphabetical order.
    """

    @staticmethod
    def load(path: str | Path) -> Settings:
        """Load and validate settings from YAML file or directory.

        Args:
            path: Path to YAML settings file or directory containing YAML files.

        Returns:
            Validated Settings object.

        Raises:
            ConfigError: If file/directory not found or invalid format.
        """
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Settings file not found: {path}")

        try:
            if path.is_dir():
                data = SettingsLoader._load_directory(path)
            else:
                data = SettingsLoader._load_file(path)
        except yaml.YAMLError as e:
            raise ConfigError(f"Error parsing YAML: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Settings must be a mapping, got {type(data).__name__}")

        try:
            return Settings.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid settings: {e}") from e

    @staticmethod
    def _load_file(path: Path) -> Any:
        """Load a single YAML file."""
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    @staticmethod
    def _load_directory(directory: Path) -> dict[str, Any]:
        """Load and merge all YAML files from a directory.

        Files are loaded in alphabetical order. Later files override earlier ones
        for top-level keys, but nested dicts are merged.
        """
        merged: dict[str, Any] = {}
        yaml_files = sorted(directory.glob("*.yaml")) + sorted(directory.glob("*.yml"))

        if not yaml_files:
            raise ConfigError(f"No YAML files found in directory: {directory}")

        for yaml_file in yaml_files:
            file_data = SettingsLoader._load_file(yaml_file)
            if not isinstance(file_data, dict):
                raise ConfigError(f"Settings must be a mapping: {yaml_file}")
            merged = SettingsLoader._deep_merge(merged, file_data)

        return merged

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries.

        For dict values, recursively merge. For other types, override replaces base.
        """
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = SettingsLoader._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
