"""Column management for MiniDB."""

import logging
from typing import Any, List, Optional

from pydantic import ValidationError

from minidb.errors import ColumnNotFoundError, ProtectedColumnError, SchemaError
from minidb.managers.base import BaseManager
from minidb.managers.table import TableManager, build_column, build_foreign_key
from minidb.models import ID_COLUMN, Column, TableSchema
from minidb.utils.name_validator import validate_name

logger = logging.getLogger(__name__)


class ColumnManager(BaseManager):
    """Manages columns within tables."""

    # Columns that cannot be added, redefined or dropped
    PROTECTED_COLUMNS = {ID_COLUMN}

    def list_columns(self, table_name: str) -> List[Column]:
        """List all columns in a table.

        Args:
            table_name: Name of the table

        Returns:
            List of Column objects, ``id`` first

        Raises:
            TableNotFoundError: If table doesn't exist
        """
        table = self._require_table(table_name)
        return [column.model_copy() for column in table.columns.values()]

    def add_column(
        self,
        table_name: str,
        column_name: str,
        column_type: str,
        default: Any = None,
        foreign_key: Optional[Any] = None,
    ) -> Column:
        """Add a column to a table. Existing rows get null in the new column.

        Args:
            table_name: Name of the table
            column_name: Name of the new column
            column_type: Declared type (aliases accepted)
            default: Value inserts use when they omit the column
            foreign_key: Optional ForeignKeyRef, dict or ``"table[.column]"``

        Returns:
            The added Column

        Raises:
            TableNotFoundError: If table doesn't exist
            ProtectedColumnError: If the column is ``id``
            SchemaError: If the column exists or the definition is invalid
            InvalidForeignKeyError: If the foreign key cannot be resolved
        """
        if column_name in self.PROTECTED_COLUMNS:
            raise ProtectedColumnError(
                f"Column name '{column_name}' is protected and cannot be used"
            )
        validate_name(column_name, "column")

        with self.store.transaction() as snapshot:
            table = self._require_table(table_name, snapshot)
            if table.table_schema.has_column(column_name):
                raise SchemaError(
                    f"Column '{column_name}' already exists in table '{table.name}'"
                )

            column = build_column(column_name, {"type": column_type, "default": default})
            TableManager.check_default(table.name, column)

            foreign_keys = dict(table.foreign_keys)
            if foreign_key is not None:
                foreign_keys[column_name] = build_foreign_key(column_name, foreign_key)

            try:
                schema = TableSchema(
                    columns={**table.columns, column_name: column},
                    foreign_keys=foreign_keys,
                )
            except ValidationError as e:
                raise SchemaError(f"Invalid schema for table '{table.name}': {e}") from e

            if column_name in schema.foreign_keys:
                self.context.constraints.check_foreign_key_definition(
                    snapshot, table.name, schema, schema.foreign_keys[column_name]
                )

            table.table_schema = schema
            for row in table.rows.values():
                row[column_name] = None

        logger.info(f"Added column '{column_name}' ({column.type}) to table '{table.name}'")
        return column

    def drop_column(self, table_name: str, column_name: str) -> None:
        """Drop a column from a table and from every row.

        A foreign key declared on the column is dropped with it.

        Args:
            table_name: Name of the table
            column_name: Name of column to drop

        Raises:
            TableNotFoundError: If table doesn't exist
            ProtectedColumnError: If the column is ``id``
            ColumnNotFoundError: If the column doesn't exist
            ConstraintViolation: If a foreign key references the column
        """
        with self.store.transaction() as snapshot:
            table = self._require_table(table_name, snapshot)

            if column_name in self.PROTECTED_COLUMNS:
                raise ProtectedColumnError(f"Cannot drop protected column '{column_name}'")
            if not table.table_schema.has_column(column_name):
                raise ColumnNotFoundError(table.name, column_name)

            self.context.constraints.check_column_drop(snapshot, table.name, column_name)

            table.table_schema = TableSchema(
                columns={
                    name: col for name, col in table.columns.items() if name != column_name
                },
                foreign_keys={
                    name: fk for name, fk in table.foreign_keys.items() if name != column_name
                },
            )
            for row in table.rows.values():
                row.pop(column_name, None)

        logger.info(f"Dropped column '{column_name}' from table '{table.name}'")
