"""Core MiniDB functionality."""

from minidb.core.database import MiniDB, connect
from minidb.core.initializer import init_project

__all__ = ["MiniDB", "connect", "init_project"]
