"""Project initialization for MiniDB."""

import logging
from pathlib import Path
from typing import Optional

import toml

from minidb.config import ProjectConfig
from minidb.core.path_utils import CONFIG_DIR_NAME, CONFIG_FILE_NAME, get_data_dir
from minidb.core.storage import FileBlobStore, save_snapshot
from minidb.models import Snapshot

logger = logging.getLogger(__name__)


class ProjectInitializer:
    """Handles initialization of MiniDB projects."""

    def __init__(self, project_dir: Optional[Path] = None):
        """Initialize the project initializer.

        Args:
            project_dir: Path to project directory. If None, uses current directory.
        """
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self.config_dir = self.project_dir / CONFIG_DIR_NAME
        self.config_path = self.config_dir / CONFIG_FILE_NAME

    def init_project(self, snapshot_key: str = "minidb") -> ProjectConfig:
        """Initialize a new MiniDB project with default configuration.

        Creates ``.minidb/config.toml`` and an empty database snapshot.

        Args:
            snapshot_key: Key to store the snapshot under (default: "minidb")

        Returns:
            The created ProjectConfig

        Raises:
            FileExistsError: If project already exists at the location
        """
        if self.config_path.exists():
            raise FileExistsError(f"Project already exists at {self.config_dir}")

        config = ProjectConfig(snapshot_key=snapshot_key)

        # Create config directory and save config
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self._save_config(config)

        # Create the empty snapshot
        blob_store = FileBlobStore(get_data_dir(self.project_dir, config.data_dir))
        save_snapshot(blob_store, Snapshot(), config.snapshot_key)

        logger.info(f"Initialized MiniDB project at {self.project_dir}")
        return config

    def _save_config(self, config: ProjectConfig) -> None:
        with open(self.config_path, "w") as f:
            toml.dump(config.model_dump(), f)


def init_project(project_dir: Optional[Path] = None, snapshot_key: str = "minidb") -> ProjectConfig:
    """Initialize a new MiniDB project.

    Args:
        project_dir: Directory to initialize in (default: current directory)
        snapshot_key: Key to store the snapshot under

    Returns:
        The created ProjectConfig

    Raises:
        FileExistsError: If project already exists
    """
    return ProjectInitializer(project_dir).init_project(snapshot_key=snapshot_key)
