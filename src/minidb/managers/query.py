"""Query execution manager for MiniDB - runs query-language text against the store."""

import logging
from typing import List

from minidb.errors import ColumnNotFoundError, MiniDBError
from minidb.managers.base import BaseManager
from minidb.models import ID_COLUMN, QueryResult, ResultKind
from minidb.query.commands import (
    Command,
    DeleteCommand,
    InsertCommand,
    JoinCommand,
    SelectCommand,
    SetOpCommand,
    ShowTablesCommand,
    UpdateCommand,
)
from minidb.query.evaluator import (
    apply_set_operation,
    filter_records,
    join_records,
    limit_records,
    order_records,
    project_records,
)
from minidb.query.parser import parse_query
from minidb.utils.type_utils import coerce_for_column

logger = logging.getLogger(__name__)

MUTATING_COMMANDS = (InsertCommand, UpdateCommand, DeleteCommand)


class QueryManager(BaseManager):
    """Parses and executes queries, returning uniform result envelopes."""

    def execute(self, text: str, include_snapshot: bool = False) -> QueryResult:
        """Execute one query.

        Never raises: every error becomes a failed QueryResult.

        Args:
            text: Query text
            include_snapshot: Attach the database snapshot to successful
                mutation results

        Returns:
            QueryResult with ``data`` and ``result_kind``, or ``error``
        """
        try:
            command = parse_query(text)
            result = self.run(command)
        except MiniDBError as e:
            logger.debug(f"Query failed ({e.category}): {e}")
            return QueryResult.failure(str(e), e.category)
        except Exception as e:
            logger.exception(f"Unexpected error executing query: {text!r}")
            return QueryResult.failure(f"Query execution error: {e}")

        if include_snapshot and isinstance(command, MUTATING_COMMANDS):
            result.snapshot = self.snapshot.deep_copy()
        return result

    def run(self, command: Command) -> QueryResult:
        """Execute a parsed command.

        Raises:
            MiniDBError: If the command fails; the store is left unchanged
        """
        handlers = {
            SelectCommand: self._select,
            InsertCommand: self._insert,
            UpdateCommand: self._update,
            DeleteCommand: self._delete,
            JoinCommand: self._join,
            SetOpCommand: self._set_operation,
            ShowTablesCommand: self._show_tables,
        }
        handler = handlers.get(type(command))
        if handler is None:
            raise TypeError(f"Unsupported command: {type(command).__name__}")
        return handler(command)

    def _rows(self, table_name: str) -> List[dict]:
        return [dict(row) for row in self._require_table(table_name).rows.values()]

    def _select(self, command: SelectCommand) -> QueryResult:
        records = filter_records(self._rows(command.table), command.where)
        if command.order_by is not None:
            records = order_records(records, command.order_by, command.descending)
        records = limit_records(records, command.limit)
        records = project_records(records, command.fields)
        return QueryResult.success(records, ResultKind.TABLE)

    def _insert(self, command: InsertCommand) -> QueryResult:
        row = self.context.data.insert(command.table, command.payload)
        return QueryResult.success([row], ResultKind.TABLE, affected_row_count=1)

    def _update(self, command: UpdateCommand) -> QueryResult:
        data = self.context.data
        with self.store.transaction():
            table = self._require_table(command.table)
            column = table.table_schema.get_column(command.field)
            if column is None:
                raise ColumnNotFoundError(table.name, command.field)

            if command.where is None:
                logger.warning(f"UPDATE without WHERE applies to every row of '{table.name}'")

            targets = filter_records(table.rows.values(), command.where)
            if command.field == ID_COLUMN:
                logger.warning(f"Ignoring assignment to immutable column '{ID_COLUMN}'")
                targets = []

            value = coerce_for_column(column.type, command.value.value, command.value.text)
            for row in targets:
                data.update(table.name, row[ID_COLUMN], {command.field: value})

            rows = self._rows(table.name)

        return QueryResult.success(rows, ResultKind.TABLE, affected_row_count=len(targets))

    def _delete(self, command: DeleteCommand) -> QueryResult:
        with self.store.transaction():
            table = self._require_table(command.table)
            if command.where is None:
                logger.warning(f"DELETE without WHERE removes every row of '{table.name}'")
            targets = [
                row[ID_COLUMN] for row in filter_records(table.rows.values(), command.where)
            ]
            plan = self.context.data.delete_many(table.name, targets)

        cascaded = len(plan.deleted) - len(targets)
        if cascaded or plan.nullified:
            logger.info(
                f"DELETE on '{table.name}' cascaded to {cascaded} row(s) and "
                f"nulled {len(plan.nullified)} reference(s)"
            )
        return QueryResult.success([], ResultKind.TABLE, affected_row_count=len(targets))

    def _join(self, command: JoinCommand) -> QueryResult:
        left = self._rows(command.left_table)
        right = self._rows(command.right_table)
        records = join_records(
            command.left_table,
            left,
            command.left_field,
            command.right_table,
            right,
            command.right_field,
        )
        return QueryResult.success(records, ResultKind.TABLE)

    def _set_operation(self, command: SetOpCommand) -> QueryResult:
        left = self._rows(command.left_table)
        right = self._rows(command.right_table)
        return QueryResult.success(apply_set_operation(command.op, left, right), ResultKind.SET)

    def _show_tables(self, command: ShowTablesCommand) -> QueryResult:
        records = [
            {"name": table.name, "rowCount": table.row_count}
            for table in self.snapshot.tables.values()
        ]
        return QueryResult.success(records, ResultKind.TABLES)
