"""Foreign-key constraint resolution for MiniDB."""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from minidb.errors import (
    ConstraintViolation,
    ForeignKeyViolation,
    InvalidForeignKeyError,
    RestrictViolation,
)
from minidb.managers.base import BaseManager
from minidb.models import ID_COLUMN, ForeignKeyRef, Row, Snapshot, Table, TableSchema
from minidb.utils.type_utils import strict_equals

logger = logging.getLogger(__name__)


@dataclass
class DeletePlan:
    """Outcome of resolving a delete across all foreign keys.

    Attributes:
        deleted: ``(table, row_id)`` pairs to remove, in discovery order
        nullified: ``(table, row_id, column)`` triples to set to null
    """
    deleted: List[Tuple[str, str]] = field(default_factory=list)
    nullified: List[Tuple[str, str, str]] = field(default_factory=list)

    def deleted_from(self, table_name: str) -> int:
        """Number of rows the plan removes from one table."""
        return sum(1 for name, _ in self.deleted if name == table_name)


class ConstraintEngine(BaseManager):
    """Resolves restrict, cascade and set-null policies.

    Methods that take a ``snapshot`` work on that snapshot directly and are
    meant to be called on the working copy of an open transaction.
    """

    def referencing_keys(
        self, snapshot: Snapshot, table_name: str
    ) -> List[Tuple[Table, ForeignKeyRef]]:
        """Every foreign key in every table that targets ``table_name``."""
        references = []
        for table in snapshot.tables.values():
            for fk in table.foreign_keys.values():
                if fk.referenced_table == table_name:
                    references.append((table, fk))
        return references

    def plan_delete(
        self, snapshot: Snapshot, targets: Iterable[Tuple[str, str]]
    ) -> DeletePlan:
        """Work out every side effect of deleting the target rows.

        Rows reached through ``cascade`` keys are scheduled as well. Each
        ``(table, id)`` pair is visited once, so cyclic key graphs terminate.
        Nothing is modified.

        Args:
            snapshot: Snapshot to resolve against
            targets: ``(table, row_id)`` pairs the caller wants removed

        Returns:
            DeletePlan describing the deletions and null writes

        Raises:
            RestrictViolation: If a ``restrict`` reference from a row that is
                not itself being deleted blocks the delete
        """
        queue = deque(targets)
        scheduled = set()
        plan = DeletePlan()
        blockers = []
        pending_nulls = []

        while queue:
            table_name, row_id = queue.popleft()
            if (table_name, row_id) in scheduled:
                continue
            table = snapshot.get_table(table_name)
            if table is None or row_id not in table.rows:
                continue

            scheduled.add((table_name, row_id))
            plan.deleted.append((table_name, row_id))
            row = table.rows[row_id]

            for ref_table, fk in self.referencing_keys(snapshot, table_name):
                key_value = row.get(fk.referenced_column)
                if key_value is None:
                    continue
                for dep_id, dep_row in ref_table.rows.items():
                    if not strict_equals(dep_row.get(fk.column), key_value):
                        continue
                    if fk.on_delete == "cascade":
                        queue.append((ref_table.name, dep_id))
                    elif fk.on_delete == "set-null":
                        pending_nulls.append((ref_table.name, dep_id, fk.column))
                    else:
                        blockers.append((table_name, row_id, ref_table.name, fk.column, dep_id))

        # References from rows that are deleted anyway do not block
        blocking = [b for b in blockers if (b[2], b[4]) not in scheduled]
        if blocking:
            table_name, row_id = blocking[0][0], blocking[0][1]
            raise RestrictViolation(
                table_name, row_id, [(t, c, r) for _, _, t, c, r in blocking]
            )

        seen = set()
        for entry in pending_nulls:
            if (entry[0], entry[1]) in scheduled or entry in seen:
                continue
            seen.add(entry)
            plan.nullified.append(entry)

        logger.debug(
            f"Delete plan: {len(plan.deleted)} row(s) removed, "
            f"{len(plan.nullified)} reference(s) nulled"
        )
        return plan

    def apply(self, snapshot: Snapshot, plan: DeletePlan) -> None:
        """Apply a delete plan: null writes first, then removals."""
        for table_name, row_id, column in plan.nullified:
            snapshot.tables[table_name].rows[row_id][column] = None
        for table_name, row_id in plan.deleted:
            snapshot.tables[table_name].rows.pop(row_id, None)

    def check_foreign_key_definition(
        self,
        snapshot: Snapshot,
        table_name: str,
        schema: TableSchema,
        fk: ForeignKeyRef,
    ) -> None:
        """Validate a foreign-key declaration of ``table_name``.

        The referenced table may be ``table_name`` itself, in which case
        ``schema`` is used to resolve the referenced column.

        Raises:
            InvalidForeignKeyError: If the source column, referenced table or
                referenced column does not exist
        """
        if not schema.has_column(fk.column):
            raise InvalidForeignKeyError(
                f"Foreign key column '{fk.column}' is not a column of table '{table_name}'"
            )
        if fk.column == ID_COLUMN:
            raise InvalidForeignKeyError(
                f"The '{ID_COLUMN}' column of table '{table_name}' cannot be a foreign key"
            )

        if fk.referenced_table == table_name:
            ref_schema = schema
        else:
            ref_table = snapshot.get_table(fk.referenced_table)
            if ref_table is None:
                raise InvalidForeignKeyError(
                    f"Foreign key reference to non-existent table: '{fk.referenced_table}'"
                )
            ref_schema = ref_table.table_schema

        if not ref_schema.has_column(fk.referenced_column):
            raise InvalidForeignKeyError(
                f"Foreign key reference to non-existent column: '{fk.references}'"
            )

    def check_row_references(
        self,
        snapshot: Snapshot,
        table: Table,
        row: Row,
        columns: Optional[Iterable[str]] = None,
    ) -> None:
        """Check that every non-null foreign-key value of ``row`` resolves.

        Args:
            snapshot: Snapshot holding the referenced tables
            table: Table the row belongs to
            row: Row values to check
            columns: Only check keys on these columns (default: all)

        Raises:
            ForeignKeyViolation: If a value has no matching referenced row
            InvalidForeignKeyError: If the referenced table no longer exists
        """
        wanted = set(columns) if columns is not None else None
        for fk in table.foreign_keys.values():
            if wanted is not None and fk.column not in wanted:
                continue
            value = row.get(fk.column)
            if value is None:
                continue

            ref_table = snapshot.get_table(fk.referenced_table)
            if ref_table is None:
                raise InvalidForeignKeyError(
                    f"Foreign key '{table.name}.{fk.column}' references missing "
                    f"table '{fk.referenced_table}'"
                )
            if not self._has_matching_row(ref_table, fk.referenced_column, value):
                raise ForeignKeyViolation(table.name, fk.column, value, ref_table.name)

    def check_referenced_update(
        self, snapshot: Snapshot, table: Table, old_row: Row, new_row: Row
    ) -> None:
        """Refuse to change a referenced key value that other rows still use.

        Raises:
            ConstraintViolation: If a referencing row holds the old value
        """
        for ref_table, fk in self.referencing_keys(snapshot, table.name):
            column = fk.referenced_column
            old_value = old_row.get(column)
            if old_value is None or strict_equals(old_value, new_row.get(column)):
                continue
            for dep_id, dep_row in ref_table.rows.items():
                if strict_equals(dep_row.get(fk.column), old_value):
                    raise ConstraintViolation(
                        f"Cannot change '{table.name}.{column}' of row "
                        f"'{old_row.get(ID_COLUMN)}': it is referenced by row "
                        f"'{dep_id}' in table '{ref_table.name}' (foreign key: {fk.column})"
                    )

    def check_table_drop(self, snapshot: Snapshot, table_name: str) -> None:
        """Refuse to drop a table other tables still reference.

        Raises:
            ConstraintViolation: If another table declares a key to it
        """
        for ref_table, fk in self.referencing_keys(snapshot, table_name):
            if ref_table.name != table_name:
                raise ConstraintViolation(
                    f"Cannot drop table '{table_name}': it is referenced by "
                    f"foreign key '{ref_table.name}.{fk.column}'"
                )

    def check_column_drop(self, snapshot: Snapshot, table_name: str, column_name: str) -> None:
        """Refuse to drop a column a foreign key points at.

        Raises:
            ConstraintViolation: If a key of another column references it
        """
        for ref_table, fk in self.referencing_keys(snapshot, table_name):
            if fk.referenced_column != column_name:
                continue
            if ref_table.name == table_name and fk.column == column_name:
                continue
            raise ConstraintViolation(
                f"Cannot drop column '{table_name}.{column_name}': it is referenced "
                f"by foreign key '{ref_table.name}.{fk.column}'"
            )

    @staticmethod
    def _has_matching_row(table: Table, column: str, value) -> bool:
        # Row ids are the keys of the row mapping
        if column == ID_COLUMN:
            return isinstance(value, str) and value in table.rows
        return any(strict_equals(row.get(column), value) for row in table.rows.values())
