"""Path utilities for MiniDB."""

from pathlib import Path

CONFIG_DIR_NAME = ".minidb"
CONFIG_FILE_NAME = "config.toml"


def get_project_root(start_path: Path) -> Path:
    """Find the project root by looking for .minidb directory.

    Args:
        start_path: Path to start searching from

    Returns:
        Path to project root

    Raises:
        FileNotFoundError: If no project root found
    """
    current = Path(start_path).resolve()

    while True:
        if (current / CONFIG_DIR_NAME).is_dir():
            return current
        if current == current.parent:
            break
        current = current.parent

    raise FileNotFoundError(f"No MiniDB project found from {start_path}")


def get_config_dir(project_root: Path) -> Path:
    return Path(project_root) / CONFIG_DIR_NAME


def get_data_dir(project_root: Path, data_dir: str = "data") -> Path:
    """Get path to the directory holding snapshot blobs.

    Args:
        project_root: Project root directory
        data_dir: Data directory name relative to .minidb/

    Returns:
        Path to the data directory
    """
    return get_config_dir(project_root) / data_dir


def get_snapshot_path(project_root: Path, snapshot_key: str, data_dir: str = "data") -> Path:
    """Get path to the stored snapshot file for a key."""
    return get_data_dir(project_root, data_dir) / f"{snapshot_key}.json"
