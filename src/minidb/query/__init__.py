"""MiniDB query language: tokenizer, parser, commands and row operations."""

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
from minidb.query.parser import parse_query
from minidb.query.tokenizer import Token, TokenType, tokenize

__all__ = [
    "Command",
    "Condition",
    "DeleteCommand",
    "InsertCommand",
    "JoinCommand",
    "Literal",
    "SelectCommand",
    "SetOpCommand",
    "SetOperation",
    "ShowTablesCommand",
    "UpdateCommand",
    "parse_query",
    "Token",
    "TokenType",
    "tokenize",
]
