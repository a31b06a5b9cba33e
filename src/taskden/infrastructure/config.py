"""Configuration management with hierarchical loading."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from taskden.infrastructure.exceptions import ConfigError
from taskden.infrastructure.logger import get_logger

logger = get_logger(__name__)

APP_NAME = "taskden"
CONFIG_FILE_NAME = "config.yaml"
DB_FILE_NAME = "taskden.db"
DEFAULT_EDITOR = "vi"

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class TUIConfig(BaseModel):
    """Terminal UI preferences."""

    show_archived: bool = False


class Config(BaseModel):
    """Main configuration model."""

    log_level: str = "WARNING"
    editor: str = ""
    notes_path: str = "~/notes"
    theme: str = "textual-dark"
    database_path: Path | None = None
    tui: TUIConfig = Field(default_factory=TUIConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(LOG_LEVELS)}, got '{v}'")
        return level

    @property
    def notes_dir(self) -> Path:
        return Path(self.notes_path).expanduser()


def _xdg_dir(env_var: str, fallback: Path) -> Path:
    value = os.getenv(env_var)
    return Path(value) if value else fallback


class ConfigManager:
    """Manage configuration loading from multiple sources with hierarchy."""

    def __init__(self, config_file: Path | None = None) -> None:
        """Initialize config manager.

        Args:
            config_file: Explicit config file (``--config``); overrides the user file
        """
        self.config_file = config_file
        self._config: Config | None = None

    @property
    def config_dir(self) -> Path:
        return _xdg_dir("XDG_CONFIG_HOME", Path.home() / ".config") / APP_NAME

    @property
    def data_dir(self) -> Path:
        return _xdg_dir("XDG_DATA_HOME", Path.home() / ".local" / "share") / APP_NAME

    @property
    def user_config_path(self) -> Path:
        return self.config_dir / CONFIG_FILE_NAME

    def load_config(self) -> Config:
        """Load configuration from all sources in hierarchy order.

        Configuration hierarchy (highest priority last):
        1. System defaults (embedded in Config model)
        2. User file ($XDG_CONFIG_HOME/taskden/config.yaml)
        3. Explicit file passed with --config
        4. Environment variables (TASKDEN_* prefix)

        Returns:
            Merged configuration

        Raises:
            ConfigError: If a file cannot be parsed or a value is invalid
        """
        if self._config is not None:
            return self._config

        config_dict: dict[str, Any] = {}

        if self.user_config_path.exists():
            config_dict = self._merge_dicts(config_dict, self._load_yaml(self.user_config_path))

        if self.config_file is not None:
            if not self.config_file.exists():
                raise ConfigError(f"config file not found: {self.config_file}")
            config_dict = self._merge_dicts(config_dict, self._load_yaml(self.config_file))

        config_dict = self._apply_env_vars(config_dict)

        try:
            self._config = Config(**config_dict)
        except ValidationError as e:
            raise ConfigError(f"invalid configuration: {e}") from e

        logger.debug("config_loaded", sources=self._sources())
        return self._config

    def _sources(self) -> list[str]:
        sources = ["defaults"]
        if self.user_config_path.exists():
            sources.append(str(self.user_config_path))
        if self.config_file is not None:
            sources.append(str(self.config_file))
        return sources

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        """Load YAML configuration file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"cannot read config file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"config file {path} must contain a mapping")
        return data

    def _merge_dicts(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Recursively merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_dicts(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_vars(self, config_dict: dict[str, Any]) -> dict[str, Any]:
        """Apply environment variables with TASKDEN_ prefix."""
        env_mappings = {
            "TASKDEN_LOG_LEVEL": "log_level",
            "TASKDEN_EDITOR": "editor",
            "TASKDEN_NOTES_PATH": "notes_path",
            "TASKDEN_THEME": "theme",
            "TASKDEN_DB": "database_path",
        }

        for env_var, key in env_mappings.items():
            value = os.getenv(env_var)
            if value:
                config_dict[key] = value

        return config_dict

    def get_database_path(self) -> Path:
        """Get path to SQLite database."""
        config = self.load_config()
        if config.database_path is not None:
            return config.database_path.expanduser()
        return self.data_dir / DB_FILE_NAME

    def get_log_dir(self) -> Path:
        """Get path to log directory."""
        return self.data_dir / "logs"


def resolve_editor(config: Config) -> str:
    """Pick the editor command: config value, then $EDITOR, then vi."""
    if config.editor:
        return config.editor
    env_editor = os.getenv("EDITOR")
    if env_editor:
        return env_editor
    logger.warning("editor_fallback", editor=DEFAULT_EDITOR)
    return DEFAULT_EDITOR
