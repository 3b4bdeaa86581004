"""MiniDB - an embedded relational store with a small query language."""

from minidb.core.database import MiniDB, connect
from minidb.core.initializer import init_project

try:
    from importlib.metadata import version
    __version__ = version("minidb")
except Exception:
    # Package metadata is not available when running from a source tree
    __version__ = "0.1.0"

__all__ = ["MiniDB", "connect", "init_project"]
