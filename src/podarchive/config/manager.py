"""Configuration manager for locating and loading PodArchive config."""

import os
from pathlib import Path

import platformdirs
import yaml
from pydantic import ValidationError

from podarchive.config.schema import AppConfig
from podarchive.utils.errors import ConfigNotFoundError, InvalidConfigError

CONFIG_ENV_VAR = "PODARCHIVE_CONFIG"
DEFAULT_CONFIG_NAMES = ("config.yaml", "config.yml", "config.json")


def get_config_dir() -> Path:
    """Per-user configuration directory."""
    return Path(platformdirs.user_config_dir("podarchive"))


def resolve_config_file(config_file: Path | None = None) -> Path:
    """Determine which configuration file to use.

    Precedence: explicit path, ``PODARCHIVE_CONFIG``, a config file in the
    working directory, then the per-user config directory.
    """
    if config_file is not None:
        return Path(config_file)

    env_value = os.environ.get(CONFIG_ENV_VAR)
    if env_value:
        return Path(env_value)

    for name in DEFAULT_CONFIG_NAMES:
        candidate = Path.cwd() / name
        if candidate.exists():
            return candidate

    return get_config_dir() / "config.yaml"


class ConfigManager:
    """Loads the PodArchive configuration file."""

    def __init__(self, config_file: Path | None = None) -> None:
        """Initialize the config manager.

        Args:
            config_file: Optional explicit config file. Resolved from the
                environment and default locations when None.
        """
        self.config_file = resolve_config_file(config_file)

    def load_config(self) -> AppConfig:
        """Load and validate the configuration.

        YAML and JSON documents are both accepted.

        Returns:
            Validated AppConfig instance

        Raises:
            ConfigNotFoundError: If the config file doesn't exist
            InvalidConfigError: If the config is unreadable or invalid
        """
        if not self.config_file.exists():
            raise ConfigNotFoundError(f"Configuration file not found: {self.config_file}")

        try:
            with open(self.config_file, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise InvalidConfigError(f"Cannot read configuration {self.config_file}: {e}") from e

        if not isinstance(data, dict):
            raise InvalidConfigError(
                f"Invalid configuration in {self.config_file}: expected a mapping"
            )

        try:
            return AppConfig(**data)
        except ValidationError as e:
            raise InvalidConfigError(f"Invalid configuration in {self.config_file}: {e}") from e
