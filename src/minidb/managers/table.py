"""Table management for MiniDB."""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Union

from pydantic import ValidationError

from minidb.errors import DuplicateTableError, SchemaError, TypeMismatchError
from minidb.managers.base import BaseManager
from minidb.models import Column, ForeignKeyRef, Table, TableSchema
from minidb.utils.name_validator import normalize_table_name, validate_name
from minidb.utils.type_utils import validate_value

logger = logging.getLogger(__name__)

ColumnsInput = Union[Iterable[Column], Mapping[str, Any], None]
ForeignKeysInput = Union[Iterable[ForeignKeyRef], Mapping[str, Any], None]


def build_column(name: str, definition: Any) -> Column:
    """Build a Column from a model, a mapping or a bare type name.

    Raises:
        SchemaError: If the definition is not a valid column
    """
    try:
        if isinstance(definition, Column):
            column = definition if definition.name else definition.model_copy(update={"name": name})
        elif isinstance(definition, str):
            column = Column(name=name, type=definition)
        elif isinstance(definition, Mapping):
            column = Column(**{"name": name, **definition})
        else:
            raise SchemaError(f"Invalid definition for column '{name}': {definition!r}")
    except ValidationError as e:
        raise SchemaError(f"Invalid definition for column '{name}': {e}") from e
    if column.name != name:
        raise SchemaError(f"Column key '{name}' does not match column name '{column.name}'")
    return column


def build_foreign_key(column_name: str, definition: Any) -> ForeignKeyRef:
    """Build a ForeignKeyRef from a model, a mapping or a ``table[.column]`` string.

    Raises:
        SchemaError: If the definition is not a valid foreign key
    """
    try:
        if isinstance(definition, ForeignKeyRef):
            if definition.column:
                return definition
            return definition.model_copy(update={"column": column_name})
        if isinstance(definition, str):
            return ForeignKeyRef(column=column_name, references=definition)
        if isinstance(definition, Mapping):
            return ForeignKeyRef(**{"column": column_name, **definition})
    except ValidationError as e:
        raise SchemaError(f"Invalid foreign key on column '{column_name}': {e}") from e
    raise SchemaError(f"Invalid foreign key on column '{column_name}': {definition!r}")


class TableManager(BaseManager):
    """Manages tables within a database."""

    def list_tables(self) -> List[Table]:
        """List all tables.

        Returns:
            List of Table objects (copies; changing them does not change the store)
        """
        return [table.model_copy(deep=True) for table in self.snapshot.tables.values()]

    def table_exists(self, table_name: str) -> bool:
        return self.snapshot.has_table(normalize_table_name(table_name))

    def get_table(self, table_name: str) -> Table:
        """Get a table.

        Args:
            table_name: Name of the table (case-insensitive)

        Returns:
            Copy of the Table

        Raises:
            TableNotFoundError: If table doesn't exist
        """
        return self._require_table(table_name).model_copy(deep=True)

    def create_table(
        self,
        table_name: str,
        columns: ColumnsInput = None,
        foreign_keys: ForeignKeysInput = None,
    ) -> Table:
        """Create a new table with optional foreign key constraints.

        The ``id`` column is added automatically.

        Args:
            table_name: Name of the table (lowercased)
            columns: Column objects, or a mapping of column name to Column,
                dict or type name
            foreign_keys: ForeignKeyRef objects, or a mapping of column name to
                ForeignKeyRef, dict or ``"table[.column]"`` string

        Returns:
            Created Table object

        Raises:
            InvalidNameError: If the table or a column name is invalid
            DuplicateTableError: If the table already exists
            SchemaError: If a column definition or default is invalid
            InvalidForeignKeyError: If a foreign key cannot be resolved
        """
        name = normalize_table_name(table_name)
        validate_name(name, "table")

        column_map = self._normalize_columns(columns)
        fk_map = self._normalize_foreign_keys(foreign_keys)

        with self.store.transaction() as snapshot:
            if snapshot.has_table(name):
                raise DuplicateTableError(name)

            try:
                schema = TableSchema(columns=column_map, foreign_keys=fk_map)
            except ValidationError as e:
                raise SchemaError(f"Invalid schema for table '{name}': {e}") from e

            for column in schema.columns.values():
                self.check_default(name, column)

            constraints = self.context.constraints
            for fk in schema.foreign_keys.values():
                constraints.check_foreign_key_definition(snapshot, name, schema, fk)

            table = Table(name=name, table_schema=schema)
            snapshot.add_table(table)

        logger.info(
            f"Created table '{name}' with columns {schema.column_names()}"
        )
        return table.model_copy(deep=True)

    def drop_table(self, table_name: str) -> None:
        """Drop a table and all its rows.

        Args:
            table_name: Name of the table to drop

        Raises:
            TableNotFoundError: If table doesn't exist
            ConstraintViolation: If another table references it
        """
        with self.store.transaction() as snapshot:
            table = self._require_table(table_name, snapshot)
            self.context.constraints.check_table_drop(snapshot, table.name)
            snapshot.remove_table(table.name)
        logger.info(f"Dropped table '{table.name}'")

    @staticmethod
    def check_default(table_name: str, column: Column) -> None:
        """Check that a column default fits the column type.

        Raises:
            SchemaError: If the default has the wrong type
        """
        if column.default is None:
            return
        try:
            validate_value(table_name, column.name, column.type, column.default)
        except TypeMismatchError as e:
            raise SchemaError(f"Invalid default: {e}") from e

    @staticmethod
    def _normalize_columns(columns: ColumnsInput) -> Dict[str, Column]:
        if columns is None:
            return {}
        if isinstance(columns, Mapping):
            items = list(columns.items())
        else:
            items = []
            for column in columns:
                if not isinstance(column, Column):
                    raise SchemaError(f"Expected a Column, got {column!r}")
                items.append((column.name, column))

        column_map = {}
        for name, definition in items:
            validate_name(name, "column")
            if name in column_map:
                raise SchemaError(f"Duplicate column '{name}'")
            column_map[name] = build_column(name, definition)
        return column_map

    @staticmethod
    def _normalize_foreign_keys(foreign_keys: ForeignKeysInput) -> Dict[str, ForeignKeyRef]:
        if foreign_keys is None:
            return {}
        if isinstance(foreign_keys, Mapping):
            items = list(foreign_keys.items())
        else:
            items = []
            for fk in foreign_keys:
                if not isinstance(fk, ForeignKeyRef):
                    raise SchemaError(f"Expected a ForeignKeyRef, got {fk!r}")
                items.append((fk.column, fk))

        fk_map = {}
        for column_name, definition in items:
            if column_name in fk_map:
                raise SchemaError(f"Duplicate foreign key on column '{column_name}'")
            fk_map[column_name] = build_foreign_key(column_name, definition)
        return fk_map
