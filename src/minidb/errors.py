"""Exception hierarchy for MiniDB.

Every error raised by the store, the managers or the query parser derives from
``MiniDBError``. Each class carries a short ``category`` that the query layer
reports back to callers alongside the message.
"""


class MiniDBError(Exception):
    """Base class for all MiniDB errors."""

    category = "error"


# Query text


class QuerySyntaxError(MiniDBError):
    """Raised when a query string cannot be parsed."""

    category = "syntax"


# Missing entities


class NotFoundError(MiniDBError):
    """Raised when a referenced table, row or column does not exist."""

    category = "not_found"


class TableNotFoundError(NotFoundError):
    """Raised when a table does not exist."""

    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(f"Table '{table_name}' does not exist")


class RowNotFoundError(NotFoundError):
    """Raised when a row id does not exist in a table."""

    def __init__(self, table_name: str, row_id: str):
        self.table_name = table_name
        self.row_id = row_id
        super().__init__(f"Row with id '{row_id}' does not exist in table '{table_name}'")


class ColumnNotFoundError(NotFoundError):
    """Raised when a column is not part of a table's schema."""

    def __init__(self, table_name: str, column_name: str):
        self.table_name = table_name
        self.column_name = column_name
        super().__init__(
            f"Column '{column_name}' does not exist in table '{table_name}'"
        )


# Constraints


class ConstraintViolation(MiniDBError):
    """Raised when a foreign-key constraint would be broken."""

    category = "constraint"


class ForeignKeyViolation(ConstraintViolation):
    """Raised when a foreign-key value has no matching referenced row."""

    def __init__(self, table_name: str, column_name: str, value, referenced_table: str):
        self.table_name = table_name
        self.column_name = column_name
        self.value = value
        self.referenced_table = referenced_table
        super().__init__(
            f"Foreign key violation: '{table_name}.{column_name}' value '{value}' "
            f"does not exist in table '{referenced_table}'"
        )


class RestrictViolation(ConstraintViolation):
    """Raised when a delete is blocked by a ``restrict`` foreign key.

    ``blockers`` lists every blocking reference as ``(table, column, row_id)``.
    """

    def __init__(self, table_name: str, row_id: str, blockers):
        self.table_name = table_name
        self.row_id = row_id
        self.blockers = list(blockers)
        blocker_table, blocker_column, blocker_row = self.blockers[0]
        message = (
            f"Cannot delete row '{row_id}' from '{table_name}': it is referenced by "
            f"row '{blocker_row}' in table '{blocker_table}' (foreign key: {blocker_column})"
        )
        if len(self.blockers) > 1:
            message += f" and {len(self.blockers) - 1} other reference(s)"
        super().__init__(message)


class InvalidForeignKeyError(ConstraintViolation):
    """Raised when a foreign-key declaration is malformed or unresolvable."""


# Values


class TypeMismatchError(MiniDBError):
    """Raised when a value does not satisfy its column's declared type."""

    category = "type"


class PayloadError(TypeMismatchError):
    """Raised when an INSERT payload is not a valid JSON object."""


# Schema


class SchemaError(MiniDBError):
    """Raised when a table or column definition is invalid."""

    category = "schema"


class DuplicateTableError(SchemaError):
    """Raised when creating a table whose name is already used."""

    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(f"Table '{table_name}' already exists")


class ProtectedColumnError(SchemaError):
    """Raised when trying to drop or redefine the identity column."""


# Storage


class StorageError(MiniDBError):
    """Raised when the snapshot cannot be read from or written to storage."""

    category = "storage"


class SnapshotFormatError(StorageError):
    """Raised when a snapshot document does not have the expected shape."""
