"""Snapshot model: the full serializable state of a MiniDB database."""

from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field, model_validator

from minidb.models.base import MiniDBBaseModel
from minidb.models.table import Table
from minidb.utils.type_utils import now_iso

SNAPSHOT_VERSION = "1.0"


class SnapshotMeta(MiniDBBaseModel):
    """Snapshot metadata. Unknown keys are kept so imports can carry extras."""

    model_config = ConfigDict(extra="allow")

    version: str = Field(default=SNAPSHOT_VERSION, description="Snapshot format version")
    created_at: str = Field(
        default_factory=now_iso, alias="createdAt", description="Creation timestamp"
    )
    updated_at: Optional[str] = Field(
        default=None, alias="updatedAt", description="Last commit timestamp"
    )


class Snapshot(MiniDBBaseModel):
    """Represents a complete database snapshot.

    Maps lowercase table names to tables and carries the metadata block that
    export and import exchange.
    """

    meta: SnapshotMeta = Field(default_factory=SnapshotMeta, description="Metadata")
    tables: Dict[str, Table] = Field(default_factory=dict, description="Tables by name")

    @model_validator(mode="before")
    @classmethod
    def _fill_table_names(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not isinstance(data.get("tables"), dict):
            return data
        tables = {}
        for key, table in data["tables"].items():
            if isinstance(table, dict) and not table.get("name"):
                table = {**table, "name": key}
            tables[key] = table
        return {**data, "tables": tables}

    @model_validator(mode="after")
    def _normalize_table_keys(self) -> "Snapshot":
        normalized = {}
        for key, table in self.tables.items():
            name = key.strip().lower()
            if table.name != name:
                table = table.model_copy(update={"name": name})
            normalized[name] = table
        self.tables = normalized
        return self

    def has_table(self, table_name: str) -> bool:
        """Check if a table exists in the snapshot."""
        return table_name in self.tables

    def get_table(self, table_name: str) -> Optional[Table]:
        """Get a table by name, or None if it doesn't exist."""
        return self.tables.get(table_name)

    def add_table(self, table: Table) -> None:
        """Add or replace a table."""
        self.tables[table.name] = table

    def remove_table(self, table_name: str) -> None:
        """Remove a table if present."""
        self.tables.pop(table_name, None)

    def list_tables(self) -> List[str]:
        """Get list of all table names in the snapshot."""
        return list(self.tables.keys())

    def deep_copy(self) -> "Snapshot":
        """Create a deep copy of this snapshot."""
        return self.model_copy(deep=True)
