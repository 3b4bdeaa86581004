"""Table, Column and ForeignKeyRef models for MiniDB."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, field_validator, model_validator

from minidb.models.base import MiniDBBaseModel
from minidb.utils.type_utils import normalize_type


# Declared column types
ColumnType = Literal["string", "number", "boolean", "date", "uuid"]

# Foreign key delete policies
OnDeletePolicy = Literal["restrict", "cascade", "set-null"]

ID_COLUMN = "id"

Row = Dict[str, Any]


class Column(MiniDBBaseModel):
    """Represents a column in a table."""

    name: str = Field(default="", description="Column name")
    type: ColumnType = Field(description="Declared column type")
    primary: bool = Field(default=False, description="Whether this is the primary key")
    default: Optional[Any] = Field(
        default=None, description="Value used when an insert omits the column"
    )

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return normalize_type(value)
        return value


class ForeignKeyRef(MiniDBBaseModel):
    """Foreign key declaration: ``column`` references ``table[.column]``."""

    column: str = Field(default="", description="Referencing column in the owning table")
    references: str = Field(description="Referenced 'table' or 'table.column'")
    on_delete: OnDeletePolicy = Field(
        default="restrict",
        alias="onDelete",
        description="Action on delete of the referenced row",
    )

    @field_validator("references")
    @classmethod
    def _normalize_references(cls, value: str) -> str:
        parts = value.strip().split(".")
        if len(parts) > 2 or not parts[0]:
            raise ValueError(f"Invalid foreign key reference format: '{value}'")
        table = parts[0].lower()
        column = parts[1] if len(parts) == 2 and parts[1] else ID_COLUMN
        return f"{table}.{column}"

    @field_validator("on_delete", mode="before")
    @classmethod
    def _normalize_policy(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower().replace("_", "-").replace(" ", "-")
        return value

    @property
    def referenced_table(self) -> str:
        return self.references.split(".", 1)[0]

    @property
    def referenced_column(self) -> str:
        return self.references.split(".", 1)[1]


class TableSchema(MiniDBBaseModel):
    """Column and foreign-key declarations of a table.

    Both mappings are keyed by column name. The identity column is always
    present, first, typed ``uuid`` and marked primary.
    """

    columns: Dict[str, Column] = Field(default_factory=dict, description="Columns by name")
    foreign_keys: Dict[str, ForeignKeyRef] = Field(
        default_factory=dict,
        alias="foreignKeys",
        description="Foreign keys by referencing column",
    )

    @model_validator(mode="before")
    @classmethod
    def _fill_names_from_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)

        columns = data.get("columns") or {}
        filled_columns = {}
        for name, column in columns.items():
            if isinstance(column, dict):
                column = {**column, "name": column.get("name") or name}
            elif isinstance(column, Column) and not column.name:
                column = column.model_copy(update={"name": name})
            filled_columns[name] = column
        data["columns"] = filled_columns

        fk_key = "foreignKeys" if "foreignKeys" in data else "foreign_keys"
        foreign_keys = data.get(fk_key) or {}
        filled_fks = {}
        for name, fk in foreign_keys.items():
            if isinstance(fk, dict):
                fk = {**fk, "column": fk.get("column") or name}
            elif isinstance(fk, ForeignKeyRef) and not fk.column:
                fk = fk.model_copy(update={"column": name})
            filled_fks[name] = fk
        data[fk_key] = filled_fks
        return data

    @model_validator(mode="after")
    def _ensure_identity_column(self) -> "TableSchema":
        for name, column in self.columns.items():
            if column.name != name:
                raise ValueError(f"Column key '{name}' does not match column name '{column.name}'")
            if column.primary and name != ID_COLUMN:
                raise ValueError(
                    f"Column '{name}' cannot be primary; '{ID_COLUMN}' is always the primary key"
                )
        for name, fk in self.foreign_keys.items():
            if fk.column != name:
                raise ValueError(f"Foreign key key '{name}' does not match column '{fk.column}'")

        id_column = Column(name=ID_COLUMN, type="uuid", primary=True)
        others = {name: col for name, col in self.columns.items() if name != ID_COLUMN}
        self.columns = {ID_COLUMN: id_column, **others}
        return self

    def column_names(self) -> List[str]:
        """Names of all columns, identity column first."""
        return list(self.columns.keys())

    def has_column(self, column_name: str) -> bool:
        return column_name in self.columns

    def get_column(self, column_name: str) -> Optional[Column]:
        return self.columns.get(column_name)


class Table(MiniDBBaseModel):
    """Represents a table: its schema and its rows keyed by row id."""

    name: str = Field(description="Table name (lowercase)")
    table_schema: TableSchema = Field(
        default_factory=TableSchema, alias="schema", description="Table schema"
    )
    rows: Dict[str, Row] = Field(default_factory=dict, description="Rows by id")

    @field_validator("name")
    @classmethod
    def _lowercase_name(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def columns(self) -> Dict[str, Column]:
        return self.table_schema.columns

    @property
    def foreign_keys(self) -> Dict[str, ForeignKeyRef]:
        return self.table_schema.foreign_keys

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def list_rows(self) -> List[Row]:
        """Rows as a list; order follows the underlying mapping."""
        return list(self.rows.values())
