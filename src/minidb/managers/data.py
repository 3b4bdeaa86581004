"""Data management for MiniDB - handles CRUD operations on table rows."""

import copy
import logging
import uuid
from typing import Any, Dict, Iterable, List

from minidb.errors import ColumnNotFoundError, PayloadError, RowNotFoundError
from minidb.managers.base import BaseManager
from minidb.managers.constraints import DeletePlan
from minidb.models import ID_COLUMN, Row, Table
from minidb.utils.type_utils import CREATED_AT_COLUMNS, now_iso, validate_value

logger = logging.getLogger(__name__)


class DataManager(BaseManager):
    """Manages row operations within a database."""

    def list_rows(self, table_name: str) -> List[Row]:
        """List all rows of a table, in no particular order.

        Raises:
            TableNotFoundError: If table doesn't exist
        """
        table = self._require_table(table_name)
        return [dict(row) for row in table.rows.values()]

    def get_row(self, table_name: str, row_id: str) -> Row:
        """Get a single row by id.

        Raises:
            TableNotFoundError: If table doesn't exist
            RowNotFoundError: If no row has this id
        """
        table = self._require_table(table_name)
        if row_id not in table.rows:
            raise RowNotFoundError(table.name, row_id)
        return dict(table.rows[row_id])

    def count(self, table_name: str) -> int:
        return self._require_table(table_name).row_count

    def insert(self, table_name: str, data: Dict[str, Any]) -> Row:
        """Insert a new row.

        A fresh ``id`` is assigned; any ``id`` in ``data`` is ignored. Columns
        missing from ``data`` or given as null take the current time for a
        ``date`` column named ``createdAt``/``created_at``, then the column
        default, then null. Empty text in a foreign key or created-at column
        counts as missing.

        Args:
            table_name: Name of the table to insert into
            data: Column values

        Returns:
            The stored row

        Raises:
            PayloadError: If data is not a mapping
            TableNotFoundError: If table doesn't exist
            TypeMismatchError: If a value doesn't fit its column type
            ForeignKeyViolation: If a foreign key value has no referenced row
        """
        if not isinstance(data, dict):
            raise PayloadError("Insert data must be a JSON object")

        with self.store.transaction() as snapshot:
            table = self._require_table(table_name, snapshot)
            row = self._build_row(table, data)
            self.context.constraints.check_row_references(snapshot, table, row)
            table.rows[row[ID_COLUMN]] = row

        logger.debug(f"Inserted row '{row[ID_COLUMN]}' into '{table.name}'")
        return dict(row)

    def update(self, table_name: str, row_id: str, changes: Dict[str, Any]) -> Row:
        """Update columns of one row.

        The ``id`` column is immutable; an ``id`` key in ``changes`` is ignored.
        Empty text in a foreign key column is stored as null.

        Args:
            table_name: Table name
            row_id: Id of the row to update
            changes: Column values to set

        Returns:
            The updated row

        Raises:
            PayloadError: If changes is not a mapping
            TableNotFoundError: If table doesn't exist
            RowNotFoundError: If no row has this id
            ColumnNotFoundError: If a changed column doesn't exist
            TypeMismatchError: If a value doesn't fit its column type
            ForeignKeyViolation: If a foreign key value has no referenced row
        """
        if not isinstance(changes, dict):
            raise PayloadError("Update data must be a JSON object")
        changes = {key: value for key, value in changes.items() if key != ID_COLUMN}

        with self.store.transaction() as snapshot:
            table = self._require_table(table_name, snapshot)
            current = table.rows.get(row_id)
            if current is None:
                raise RowNotFoundError(table.name, row_id)

            for column_name, value in changes.items():
                column = table.table_schema.get_column(column_name)
                if column is None:
                    raise ColumnNotFoundError(table.name, column_name)
                if value == "" and column_name in table.foreign_keys:
                    changes[column_name] = value = None
                validate_value(table.name, column_name, column.type, value)

            updated = {**current, **copy.deepcopy(changes)}
            constraints = self.context.constraints
            constraints.check_row_references(snapshot, table, updated, columns=changes.keys())
            constraints.check_referenced_update(snapshot, table, current, updated)
            table.rows[row_id] = updated

        logger.debug(f"Updated row '{row_id}' in '{table.name}': {sorted(changes)}")
        return dict(updated)

    def delete(self, table_name: str, row_id: str) -> DeletePlan:
        """Delete a row, resolving foreign keys that reference it first.

        Args:
            table_name: Table name
            row_id: Id of the row to delete

        Returns:
            DeletePlan listing every removed row and nulled reference

        Raises:
            TableNotFoundError: If table doesn't exist
            RowNotFoundError: If no row has this id
            RestrictViolation: If a ``restrict`` reference blocks the delete
        """
        with self.store.transaction() as snapshot:
            table = self._require_table(table_name, snapshot)
            if row_id not in table.rows:
                raise RowNotFoundError(table.name, row_id)
            return self.delete_many(table.name, [row_id])

    def delete_many(self, table_name: str, row_ids: Iterable[str]) -> DeletePlan:
        """Delete several rows of one table as a single all-or-nothing step.

        Ids that don't exist are skipped.

        Raises:
            TableNotFoundError: If table doesn't exist
            RestrictViolation: If a ``restrict`` reference blocks the delete
        """
        with self.store.transaction() as snapshot:
            table = self._require_table(table_name, snapshot)
            targets = [(table.name, row_id) for row_id in row_ids if row_id in table.rows]
            constraints = self.context.constraints
            plan = constraints.plan_delete(snapshot, targets)
            constraints.apply(snapshot, plan)

        logger.debug(
            f"Deleted {len(plan.deleted)} row(s) starting from '{table.name}'"
        )
        return plan

    def _build_row(self, table: Table, data: Dict[str, Any]) -> Row:
        ignored = [key for key in data if key == ID_COLUMN or not table.table_schema.has_column(key)]
        if ignored:
            logger.warning(f"Ignoring keys not in table '{table.name}': {ignored}")

        row_id = str(uuid.uuid4())
        while row_id in table.rows:
            row_id = str(uuid.uuid4())

        row = {ID_COLUMN: row_id}
        for name, column in table.columns.items():
            if name == ID_COLUMN:
                continue
            created_at = column.type == "date" and name in CREATED_AT_COLUMNS
            value = data.get(name)
            # Empty text counts as absent for references and created-at stamps
            if value == "" and (created_at or name in table.foreign_keys):
                value = None
            if value is not None:
                value = copy.deepcopy(value)
            elif created_at:
                value = now_iso()
            elif column.default is not None:
                value = copy.deepcopy(column.default)
            else:
                value = None
            validate_value(table.name, name, column.type, value)
            row[name] = value
        return row
