"""Syntax tree of the SQL-like query language."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass
class Projection:
    """One entry of the SELECT list: a column, ``*`` or an aggregate."""

    agg: str = ""
    column: str = ""
    alias: str = ""
    star: bool = False


@dataclass
class OrderClause:
    """One ORDER BY key."""

    column: str
    desc: bool = False


@dataclass
class ColumnRef:
    """Reference to a column by name."""

    name: str


@dataclass
class Literal:
    """A string or number constant; NULL is the empty string."""

    value: str
    is_number: bool = False


@dataclass
class BinaryExpr:
    """Comparison, LIKE, IS [NOT] NULL, or AND/OR of two expressions."""

    left: "Expr"
    op: str
    right: "Expr"


@dataclass
class NotExpr:
    """Logical negation of an expression."""

    inner: "Expr"


Expr = Union[BinaryExpr, ColumnRef, Literal, NotExpr]


@dataclass
class Statement:
    """A parsed SELECT statement."""

    select: list[Projection] = field(default_factory=list)
    table: str = ""
    where: Expr | None = None
    group_by: list[str] = field(default_factory=list)
    order_by: list[OrderClause] = field(default_factory=list)
    limit: int = 0
    has_limit: bool = False