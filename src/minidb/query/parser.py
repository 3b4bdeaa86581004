"""Recursive-descent parser for the MiniDB query language.

Grammar (keywords are case-insensitive, table names are lowercased, field
names keep their case)::

    SELECT [* | field {, field}] FROM table [WHERE cond]
           [(ORDERBY | SORTBY | ORDER BY) field [ASC | DESC]] [LIMIT n]
    INSERT INTO table {json}
    UPDATE table SET field = value [WHERE cond]
    DELETE FROM table [WHERE cond]
    JOIN table table ON table.field = table.field
    (UNION | INTERSECT | DIFF | DIFFERENCE) table table
    SHOW (TABLES | FILES)

    cond := field (= | != | >= | <= | > | < | LIKE) value

A value is one quoted string or a run of bare words; a WHERE value ends at
ORDERBY, SORTBY, ORDER or LIMIT and a SET value ends at WHERE.
"""

import json
import re
from typing import List, Optional, Tuple

from minidb.errors import PayloadError, QuerySyntaxError
from minidb.query.commands import (
    Command,
    Condition,
    DeleteCommand,
    InsertCommand,
    JoinCommand,
    Literal,
    SelectCommand,
    SetOpCommand,
    SetOperation,
    ShowTablesCommand,
    UpdateCommand,
)
from minidb.query.tokenizer import Token, TokenType, tokenize
from minidb.utils.type_utils import parse_literal

LIMIT_PATTERN = re.compile(r"^\d+$")

SET_OPERATIONS = {
    "UNION": SetOperation.UNION,
    "INTERSECT": SetOperation.INTERSECT,
    "DIFF": SetOperation.DIFFERENCE,
    "DIFFERENCE": SetOperation.DIFFERENCE,
}

INVALID_QUERY = "Invalid query syntax"
INVALID_WHERE = "Invalid WHERE clause syntax"

# Keywords that end a bare WHERE value
WHERE_VALUE_STOP = ("ORDERBY", "SORTBY", "ORDER", "LIMIT")


class Parser:
    """Parses one tokenized query into a Command."""

    def __init__(self, tokens: List[Token], text: str = ""):
        self.tokens = tokens
        self.text = text
        self.pos = 0

    # Helpers

    def _current(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.type != TokenType.EOF:
            self.pos += 1
        return token

    def _at_keyword(self, *keywords: str) -> bool:
        return self._current().is_keyword(*keywords)

    def _expect_keyword(self, keyword: str, message: Optional[str] = None) -> Token:
        if not self._at_keyword(keyword):
            raise QuerySyntaxError(message or f"{INVALID_QUERY}: expected {keyword}")
        return self._advance()

    def _expect_word(self, what: str) -> str:
        token = self._current()
        if token.type != TokenType.WORD:
            raise QuerySyntaxError(f"{INVALID_QUERY}: expected {what}")
        self._advance()
        return token.value

    def _table_name(self) -> str:
        return self._expect_word("table name").lower()

    def _literal(self, message: str, stop: Tuple[str, ...] = ()) -> Literal:
        """Read a value: one quoted string, or bare words up to a ``stop`` keyword."""
        token = self._current()
        if token.type == TokenType.STRING:
            self._advance()
            return Literal(value=token.value, text=token.value)
        if token.type != TokenType.WORD:
            raise QuerySyntaxError(message)

        words = [self._advance()]
        while self._current().type == TokenType.WORD and not self._at_keyword(*stop):
            words.append(self._advance())
        if len(words) == 1 or not self.text:
            text = " ".join(word.value for word in words)
        else:
            last = words[-1]
            text = self.text[words[0].position:last.position + len(last.value)]
        return Literal(value=parse_literal(text), text=text)

    def _expect_end(self) -> None:
        token = self._current()
        if token.type != TokenType.EOF:
            raise QuerySyntaxError(
                f"{INVALID_QUERY}: unexpected '{token.value}' at position {token.position}"
            )

    # Top level

    def parse(self) -> Command:
        token = self._current()
        if token.type == TokenType.EOF:
            raise QuerySyntaxError("Empty query")
        if token.type != TokenType.WORD:
            raise QuerySyntaxError(INVALID_QUERY)

        keyword = token.value.upper()
        if keyword == "SELECT":
            command = self._select()
        elif keyword == "INSERT":
            command = self._insert()
        elif keyword == "UPDATE":
            command = self._update()
        elif keyword == "DELETE":
            command = self._delete()
        elif keyword == "JOIN":
            command = self._join()
        elif keyword in SET_OPERATIONS:
            command = self._set_operation()
        elif keyword == "SHOW":
            command = self._show()
        else:
            raise QuerySyntaxError(INVALID_QUERY)

        self._expect_end()
        return command

    # Statements

    def _select(self) -> SelectCommand:
        self._advance()
        fields = self._field_list()
        self._expect_keyword("FROM", f"{INVALID_QUERY}: SELECT requires FROM <table>")
        table = self._table_name()

        where = self._optional_where()

        order_by = None
        descending = False
        if self._at_keyword("ORDERBY", "SORTBY", "ORDER"):
            if self._advance().value.upper() == "ORDER":
                self._expect_keyword("BY")
            order_by = self._expect_word("ORDERBY field")
            if self._at_keyword("ASC", "DESC"):
                descending = self._advance().value.upper() == "DESC"

        limit = None
        if self._at_keyword("LIMIT"):
            self._advance()
            token = self._current()
            if token.type != TokenType.WORD or not LIMIT_PATTERN.match(token.value):
                raise QuerySyntaxError("Invalid LIMIT value")
            self._advance()
            limit = int(token.value)

        return SelectCommand(
            table=table,
            fields=fields,
            where=where,
            order_by=order_by,
            descending=descending,
            limit=limit,
        )

    def _field_list(self) -> Optional[Tuple[str, ...]]:
        if self._at_keyword("FROM"):
            return None
        fields = [self._expect_word("field name")]
        while self._current().type == TokenType.COMMA:
            self._advance()
            fields.append(self._expect_word("field name"))
        if "*" in fields:
            if len(fields) > 1:
                raise QuerySyntaxError(f"{INVALID_QUERY}: '*' cannot be combined with fields")
            return None
        return tuple(fields)

    def _insert(self) -> InsertCommand:
        self._advance()
        self._expect_keyword("INTO", f"{INVALID_QUERY}: expected INSERT INTO <table>")
        table = self._table_name()

        token = self._current()
        if token.type != TokenType.JSON:
            raise QuerySyntaxError("INSERT requires a JSON object, e.g. INSERT INTO t {\"name\": \"x\"}")
        self._advance()

        try:
            payload = json.loads(token.value)
        except json.JSONDecodeError as e:
            raise PayloadError(f"Invalid JSON format: {e.msg}") from e
        if not isinstance(payload, dict):
            raise PayloadError("INSERT payload must be a JSON object")
        return InsertCommand(table=table, payload=payload)

    def _update(self) -> UpdateCommand:
        self._advance()
        table = self._table_name()
        self._expect_keyword("SET", f"{INVALID_QUERY}: expected UPDATE <table> SET <field> = <value>")
        field = self._expect_word("SET field")
        token = self._current()
        if token.type != TokenType.OPERATOR or token.value != "=":
            raise QuerySyntaxError(f"{INVALID_QUERY}: expected '=' in SET clause")
        self._advance()
        value = self._literal(f"{INVALID_QUERY}: missing SET value", stop=("WHERE",))
        where = self._optional_where()
        return UpdateCommand(table=table, field=field, value=value, where=where)

    def _delete(self) -> DeleteCommand:
        self._advance()
        self._expect_keyword("FROM", f"{INVALID_QUERY}: expected DELETE FROM <table>")
        table = self._table_name()
        where = self._optional_where()
        return DeleteCommand(table=table, where=where)

    def _join(self) -> JoinCommand:
        self._advance()
        left_table = self._table_name()
        right_table = self._table_name()
        self._expect_keyword("ON", f"{INVALID_QUERY}: expected JOIN <a> <b> ON <a.field> = <b.field>")

        first = self._qualified_field()
        token = self._current()
        if token.type != TokenType.OPERATOR or token.value != "=":
            raise QuerySyntaxError(f"{INVALID_QUERY}: JOIN condition must use '='")
        self._advance()
        second = self._qualified_field()

        if first[0] == left_table and second[0] == right_table:
            left_field, right_field = first[1], second[1]
        elif first[0] == right_table and second[0] == left_table:
            left_field, right_field = second[1], first[1]
        else:
            raise QuerySyntaxError(
                f"{INVALID_QUERY}: JOIN condition must reference '{left_table}' and '{right_table}'"
            )
        return JoinCommand(
            left_table=left_table,
            right_table=right_table,
            left_field=left_field,
            right_field=right_field,
        )

    def _qualified_field(self) -> Tuple[str, str]:
        text = self._expect_word("<table>.<field>")
        table, dot, field = text.partition(".")
        if not dot or not table or not field:
            raise QuerySyntaxError(f"{INVALID_QUERY}: expected <table>.<field>, got '{text}'")
        return table.lower(), field

    def _set_operation(self) -> SetOpCommand:
        op = SET_OPERATIONS[self._advance().value.upper()]
        left_table = self._table_name()
        right_table = self._table_name()
        return SetOpCommand(op=op, left_table=left_table, right_table=right_table)

    def _show(self) -> ShowTablesCommand:
        self._advance()
        if not self._at_keyword("TABLES", "FILES"):
            raise QuerySyntaxError(f"{INVALID_QUERY}: expected SHOW TABLES")
        self._advance()
        return ShowTablesCommand()

    # WHERE

    def _optional_where(self) -> Optional[Condition]:
        if not self._at_keyword("WHERE"):
            return None
        self._advance()

        token = self._current()
        if token.type != TokenType.WORD or token.is_keyword("ORDERBY", "SORTBY", "LIMIT"):
            raise QuerySyntaxError(f"{INVALID_WHERE}: missing field")
        field = self._advance().value

        token = self._current()
        if token.type == TokenType.OPERATOR:
            op = token.value
        elif token.is_keyword("LIKE"):
            op = "LIKE"
        else:
            raise QuerySyntaxError(f"{INVALID_WHERE}: missing operator after '{field}'")
        self._advance()

        value = self._literal(
            f"{INVALID_WHERE}: missing value after '{field} {op}'", stop=WHERE_VALUE_STOP
        )
        return Condition(field=field, op=op, value=value)


def parse_query(text: str) -> Command:
    """Parse one query line into a Command.

    Raises:
        QuerySyntaxError: If the text is not a valid query
        PayloadError: If an INSERT payload is not a valid JSON object
    """
    return Parser(tokenize(text), text).parse()
