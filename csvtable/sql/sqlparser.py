"""Recursive-descent parser for the SQL-like query language."""

from __future__ import annotations

from .lexer import SqlError, Token, TokenKind, tokenize
from .nodes import (
    BinaryExpr,
    ColumnRef,
    Expr,
    Literal,
    NotExpr,
    OrderClause,
    Projection,
    Statement,
)

_AGGREGATES = frozenset({"COUNT", "SUM", "AVG", "MIN", "MAX"})
_EOF = Token(TokenKind.EOF)


def _q(text: str) -> str:
    return f'"{text}"'


class _Parser:
    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def peek(self) -> Token:
        if self._pos >= len(self._tokens):
            return _EOF
        return self._tokens[self._pos]

    def next(self) -> Token:
        token = self.peek()
        self._pos += 1
        return token

    def at_keyword(self, word: str) -> bool:
        token = self.peek()
        return token.kind is TokenKind.KEYWORD and token.value == word

    def expect_keyword(self, word: str) -> None:
        token = self.next()
        if token.kind is not TokenKind.KEYWORD or token.value != word:
            raise SqlError(f"expected {word}, got {_q(token.value)}")

    def statement(self) -> Statement:
        self.expect_keyword("SELECT")
        stmt = Statement(select=self.projections())

        if self.at_keyword("FROM"):
            self.next()
            name = self.next()
            if name.kind is not TokenKind.IDENT:
                raise SqlError(f"expected table name, got {_q(name.value)}")
            stmt.table = name.value

        if self.at_keyword("WHERE"):
            self.next()
            stmt.where = self.expr()

        if self.at_keyword("GROUP"):
            self.next()
            self.expect_keyword("BY")
            stmt.group_by = self.ident_list()

        if self.at_keyword("ORDER"):
            self.next()
            self.expect_keyword("BY")
            while True:
                col = self.next()
                if col.kind is not TokenKind.IDENT:
                    raise SqlError(f"expected column name, got {_q(col.value)}")
                clause = OrderClause(col.value)
                if self.at_keyword("ASC"):
                    self.next()
                elif self.at_keyword("DESC"):
                    self.next()
                    clause.desc = True
                stmt.order_by.append(clause)
                if self.peek().kind is not TokenKind.COMMA:
                    break
                self.next()

        if self.at_keyword("LIMIT"):
            self.next()
            number = self.next()
            if number.kind is not TokenKind.NUMBER:
                raise SqlError(f"expected number after LIMIT, got {_q(number.value)}")
            try:
                stmt.limit = int(number.value)
            except ValueError as exc:
                raise SqlError(f"invalid LIMIT {_q(number.value)}") from exc
            stmt.has_limit = True

        if self.peek().kind is not TokenKind.EOF:
            raise SqlError(f"unexpected token {_q(self.peek().value)}")
        return stmt

    def projections(self) -> list[Projection]:
        result = [self.projection()]
        while self.peek().kind is TokenKind.COMMA:
            self.next()
            result.append(self.projection())
        return result

    def alias(self) -> str:
        if not self.at_keyword("AS"):
            return ""
        self.next()
        name = self.next()
        if name.kind is not TokenKind.IDENT:
            raise SqlError("expected alias")
        return name.value

    def projection(self) -> Projection:
        token = self.peek()
        if token.kind is TokenKind.STAR:
            self.next()
            return Projection(star=True)
        if token.kind is TokenKind.KEYWORD and token.value.upper() in _AGGREGATES:
            self.next()
            if self.peek().kind is not TokenKind.LPAREN:
                raise SqlError(f"expected ( after {token.value}")
            self.next()
            proj = Projection(agg=token.value)
            if self.peek().kind is TokenKind.STAR:
                self.next()
                proj.column = "*"
            else:
                col = self.next()
                if col.kind is not TokenKind.IDENT:
                    raise SqlError(
                        f"expected column in {token.value}(), got {_q(col.value)}"
                    )
                proj.column = col.value
            if self.peek().kind is not TokenKind.RPAREN:
                raise SqlError("expected )")
            self.next()
            proj.alias = self.alias()
            return proj
        if token.kind is TokenKind.IDENT:
            self.next()
            proj = Projection(column=token.value)
            proj.alias = self.alias()
            return proj
        raise SqlError(f"expected column or aggregate, got {_q(token.value)}")

    def ident_list(self) -> list[str]:
        names: list[str] = []
        while True:
            token = self.next()
            if token.kind is not TokenKind.IDENT:
                raise SqlError(f"expected identifier, got {_q(token.value)}")
            names.append(token.value)
            if self.peek().kind is not TokenKind.COMMA:
                return names
            self.next()

    def expr(self) -> Expr:
        left = self.and_expr()
        while self.at_keyword("OR"):
            self.next()
            left = BinaryExpr(left, "OR", self.and_expr())
        return left

    def and_expr(self) -> Expr:
        left = self.not_expr()
        while self.at_keyword("AND"):
            self.next()
            left = BinaryExpr(left, "AND", self.not_expr())
        return left

    def not_expr(self) -> Expr:
        if self.at_keyword("NOT"):
            self.next()
            return NotExpr(self.compare())
        return self.compare()

    def compare(self) -> Expr:
        if self.peek().kind is TokenKind.LPAREN:
            self.next()
            inner = self.expr()
            if self.peek().kind is not TokenKind.RPAREN:
                raise SqlError("expected )")
            self.next()
            return inner
        left = self.value()
        token = self.peek()
        if token.kind is TokenKind.OP:
            self.next()
            return BinaryExpr(left, token.value, self.value())
        if self.at_keyword("LIKE"):
            self.next()
            return BinaryExpr(left, "LIKE", self.value())
        if self.at_keyword("IS"):
            self.next()
            negate = False
            if self.at_keyword("NOT"):
                self.next()
                negate = True
            if not self.at_keyword("NULL"):
                raise SqlError("expected NULL")
            self.next()
            return BinaryExpr(left, "IS NOT" if negate else "IS", Literal(""))
        return left

    def value(self) -> Expr:
        token = self.next()
        if token.kind is TokenKind.IDENT:
            return ColumnRef(token.value)
        if token.kind is TokenKind.NUMBER:
            return Literal(token.value, is_number=True)
        if token.kind is TokenKind.STRING:
            return Literal(token.value)
        if token.kind is TokenKind.KEYWORD and token.value == "NULL":
            return Literal("")
        raise SqlError(f"expected value, got {_q(token.value)}")


def parse(query: str) -> Statement:
    """Parse a SELECT query into a :class:`Statement`."""
    return _Parser(tokenize(query)).statement()