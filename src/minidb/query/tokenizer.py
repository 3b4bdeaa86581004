"""Tokenizer for the MiniDB query language."""

from dataclasses import dataclass
from enum import Enum
from typing import List

from minidb.errors import QuerySyntaxError


class TokenType(str, Enum):
    """Token types."""

    WORD = "word"
    STRING = "string"
    OPERATOR = "operator"
    COMMA = "comma"
    JSON = "json"
    EOF = "eof"


# Two-character operators come first so ">=" is never read as ">" then "="
OPERATORS = ("!=", ">=", "<=", "=", ">", "<")

QUOTES = ("'", '"')

# Characters that end a bare word
DELIMITERS = set(",=!<>{}'\"")

ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}


@dataclass(frozen=True)
class Token:
    """One token of a query.

    Attributes:
        type: Token type
        value: Token text; for STRING the unquoted, unescaped content
        position: Offset of the token in the query
    """
    type: TokenType
    value: str
    position: int

    def is_keyword(self, *keywords: str) -> bool:
        """Check whether this is a bare word matching one of the keywords."""
        return self.type == TokenType.WORD and self.value.upper() in keywords


class Tokenizer:
    """Single-pass tokenizer over one query line."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def tokenize(self) -> List[Token]:
        tokens = []
        while True:
            token = self._next()
            tokens.append(token)
            if token.type == TokenType.EOF:
                return tokens

    def _next(self) -> Token:
        text = self.text
        while self.pos < len(text) and text[self.pos].isspace():
            self.pos += 1
        start = self.pos
        if start >= len(text):
            return Token(TokenType.EOF, "", start)

        char = text[start]

        for op in OPERATORS:
            if text.startswith(op, start):
                self.pos += len(op)
                return Token(TokenType.OPERATOR, op, start)
        if char == "!":
            raise QuerySyntaxError(f"Unexpected character '!' at position {start}")

        if char == ",":
            self.pos += 1
            return Token(TokenType.COMMA, ",", start)

        if char in QUOTES:
            return self._read_string(start)

        if char == "{":
            return self._read_json(start)

        if char == "}":
            raise QuerySyntaxError(f"Unexpected '}}' at position {start}")

        while self.pos < len(text) and not text[self.pos].isspace() and text[self.pos] not in DELIMITERS:
            self.pos += 1
        return Token(TokenType.WORD, text[start:self.pos], start)

    def _read_string(self, start: int) -> Token:
        quote = self.text[start]
        self.pos = start + 1
        chars = []
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char == "\\" and self.pos + 1 < len(self.text):
                escaped = self.text[self.pos + 1]
                chars.append(ESCAPES.get(escaped, escaped))
                self.pos += 2
                continue
            self.pos += 1
            if char == quote:
                return Token(TokenType.STRING, "".join(chars), start)
            chars.append(char)
        raise QuerySyntaxError(f"Unterminated string starting at position {start}")

    def _read_json(self, start: int) -> Token:
        """Read a balanced ``{...}`` run, skipping braces inside JSON strings.

        An unbalanced run extends to the end of the line; decoding it fails
        later with a payload error rather than a syntax error.
        """
        depth = 0
        in_string = False
        pos = start
        text = self.text
        while pos < len(text):
            char = text[pos]
            if in_string:
                if char == "\\":
                    pos += 1
                elif char == '"':
                    in_string = False
            elif char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    self.pos = pos + 1
                    return Token(TokenType.JSON, text[start:self.pos], start)
            pos += 1
        self.pos = len(text)
        return Token(TokenType.JSON, text[start:], start)


def tokenize(text: str) -> List[Token]:
    """Split a query into tokens, ending with an EOF token.

    Raises:
        QuerySyntaxError: If the text contains an unterminated string or a
            stray character
    """
    return Tokenizer(text).tokenize()
