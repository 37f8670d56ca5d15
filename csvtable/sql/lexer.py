"""Tokenizer for the SQL-like query language."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from ..errors import CsvError


class SqlError(CsvError):
    """A query that cannot be tokenized, parsed or evaluated."""

    default_message = "sql error"


class TokenKind(enum.Enum):
    EOF = 0
    IDENT = 1
    NUMBER = 2
    STRING = 3
    COMMA = 4
    LPAREN = 5
    RPAREN = 6
    STAR = 7
    OP = 8
    KEYWORD = 9


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str = ""


KEYWORDS = frozenset(
    {
        "SELECT", "FROM", "WHERE", "GROUP", "BY",
        "ORDER", "LIMIT", "ASC", "DESC",
        "AND", "OR", "NOT", "AS",
        "COUNT", "SUM", "AVG", "MIN", "MAX",
        "LIKE", "IN", "IS", "NULL",
    }
)

_PUNCTUATION = {
    ",": TokenKind.COMMA,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "*": TokenKind.STAR,
}


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_word_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def _is_word_char(ch: str) -> bool:
    return ch.isalpha() or _is_digit(ch) or ch in "_."


def tokenize(text: str) -> list[Token]:
    """Split a query into tokens; the list always ends with an EOF token."""
    tokens: list[Token] = []
    n = len(text)
    i = 0
    while i < n:
        c = text[i]
        if c.isspace():
            i += 1
            continue
        kind = _PUNCTUATION.get(c)
        if kind is not None:
            tokens.append(Token(kind, c))
            i += 1
            continue
        if c in "'\"":
            end = text.find(c, i + 1)
            if end < 0:
                raise SqlError("unterminated string literal")
            tokens.append(Token(TokenKind.STRING, text[i + 1 : end]))
            i = end + 1
            continue
        if c in "<>=!":
            nxt = text[i + 1] if i + 1 < n else ""
            if nxt == "=" or (c == "<" and nxt == ">"):
                tokens.append(Token(TokenKind.OP, c + nxt))
                i += 2
            else:
                tokens.append(Token(TokenKind.OP, c))
                i += 1
            continue
        if _is_digit(c) or (c == "-" and i + 1 < n and _is_digit(text[i + 1])):
            start = i
            if c == "-":
                i += 1
            while i < n and (_is_digit(text[i]) or text[i] == "."):
                i += 1
            tokens.append(Token(TokenKind.NUMBER, text[start:i]))
            continue
        if _is_word_start(c):
            start = i
            while i < n and _is_word_char(text[i]):
                i += 1
            word = text[start:i]
            upper = word.upper()
            if upper in KEYWORDS:
                tokens.append(Token(TokenKind.KEYWORD, upper))
            else:
                tokens.append(Token(TokenKind.IDENT, word))
            continue
        raise SqlError(f"unexpected character {c!r} at position {i}")
    tokens.append(Token(TokenKind.EOF))
    return tokens