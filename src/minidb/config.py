"""Configuration management for MiniDB projects."""

import os
from pathlib import Path
from typing import Optional, Dict, Any

import toml
from pydantic import BaseModel, Field, ConfigDict, field_validator

from minidb.core.path_utils import CONFIG_DIR_NAME, CONFIG_FILE_NAME

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ProjectConfig(BaseModel):
    """Configuration for a MiniDB project stored in .minidb/config.toml."""

    model_config = ConfigDict(
        extra="allow"
    )  # Allow additional fields for extensibility

    snapshot_key: str = Field(
        default="minidb", description="Key the database snapshot is stored under"
    )
    data_dir: str = Field(
        default="data", description="Snapshot directory, relative to .minidb/"
    )
    log_level: str = Field(default="WARNING", description="Logging level for the CLI")

    @field_validator("snapshot_key")
    @classmethod
    def _check_snapshot_key(cls, value: str) -> str:
        value = value.strip()
        if not value or "/" in value or "\\" in value or value.startswith("."):
            raise ValueError(f"Invalid snapshot key: '{value}'")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: '{value}'. Valid levels: {', '.join(LOG_LEVELS)}"
            )
        return level


class Config:
    """Manages MiniDB project configuration."""

    def __init__(self, project_dir: Optional[Path] = None):
        """Initialize config manager.

        Args:
            project_dir: Path to project directory. If None, uses MINIDB_PROJECT_DIR env var or current directory.
        """
        # Check environment variable first
        if project_dir is None:
            env_dir = os.environ.get("MINIDB_PROJECT_DIR")
            if env_dir:
                project_dir = Path(env_dir)

        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self.config_dir = self.project_dir / CONFIG_DIR_NAME
        self.config_path = self.config_dir / CONFIG_FILE_NAME
        self._config: Optional[ProjectConfig] = None

    @property
    def exists(self) -> bool:
        """Check if config file exists."""
        return self.config_path.exists()

    @property
    def data_path(self) -> Path:
        """Directory holding snapshot blobs."""
        config = self._config or self.load()
        return self.config_dir / config.data_dir

    def load(self) -> ProjectConfig:
        """Load configuration from disk, with environment variable overrides."""
        if not self.exists:
            raise FileNotFoundError(f"Config file not found at {self.config_path}")

        with open(self.config_path, "r") as f:
            data = toml.load(f)

        # Apply environment variable overrides
        self._apply_env_overrides(data)

        self._config = ProjectConfig(**data)
        return self._config

    def _apply_env_overrides(self, data: Dict[str, Any]) -> None:
        """Apply environment variable overrides to configuration data."""
        if env_key := os.environ.get("MINIDB_SNAPSHOT_KEY"):
            data["snapshot_key"] = env_key

        if env_level := os.environ.get("MINIDB_LOG_LEVEL"):
            data["log_level"] = env_level

    def save(self, config: Optional[ProjectConfig] = None) -> None:
        """Save configuration to disk.

        Args:
            config: Configuration to save. If None, saves current config.
        """
        if config:
            self._config = config

        if not self._config:
            raise ValueError("No configuration to save")

        # Ensure config directory exists
        self.config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.config_path, "w") as f:
            toml.dump(self._config.model_dump(), f)

    def init_project(self) -> ProjectConfig:
        """Initialize a new MiniDB project with default configuration.

        Delegates to the ProjectInitializer for the actual initialization.
        """
        from minidb.core.initializer import ProjectInitializer

        initializer = ProjectInitializer(self.project_dir)
        config = initializer.init_project()

        # Load the config into this instance
        self._config = config
        return config
