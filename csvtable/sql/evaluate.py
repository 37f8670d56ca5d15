"""Evaluation of WHERE expressions against a row."""

from __future__ import annotations

import re
from typing import Any

from ..celltype import parse_float
from .lexer import SqlError
from .nodes import BinaryExpr, ColumnRef, Expr, Literal, NotExpr

_LIKE_ESCAPED = frozenset(".+*?()[]{}|^$\\")


def _lookup(row: Any, name: str) -> str:
    value = row.get(name)
    return "" if value is None else value


def eval_value(expr: Expr, row: Any) -> str:
    """Text value of a column reference or literal; anything else is ``""``."""
    if isinstance(expr, ColumnRef):
        return _lookup(row, expr.name)
    if isinstance(expr, Literal):
        return expr.value
    return ""


def _to_number(text: str) -> float | None:
    try:
        return parse_float(text.strip())
    except ValueError:
        return None


def compare(a: str, b: str) -> int:
    """Compare numerically when both sides are numbers, else as text; -1, 0 or 1."""
    af = _to_number(a)
    bf = _to_number(b)
    if af is not None and bf is not None:
        if af < bf:
            return -1
        if af > bf:
            return 1
        return 0
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def like_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a LIKE pattern (``%`` any run, ``_`` any one character)."""
    parts = ["^"]
    for ch in pattern:
        if ch == "%":
            parts.append(".*")
        elif ch == "_":
            parts.append(".")
        elif ch in _LIKE_ESCAPED:
            parts.append("\\" + ch)
        else:
            parts.append(ch)
    parts.append(r"\Z")
    return re.compile("".join(parts))


def like_match(s: str, pattern: str) -> bool:
    """Whether ``s`` matches the whole LIKE pattern."""
    try:
        regex = like_to_regex(pattern)
    except re.error:
        return False
    return regex.match(s) is not None


def _eval_compare(expr: BinaryExpr, row: Any) -> bool:
    left = eval_value(expr.left, row)
    right = eval_value(expr.right, row)
    op = expr.op
    if op in ("=", "=="):
        return left == right
    if op in ("!=", "<>"):
        return left != right
    if op == "<":
        return compare(left, right) < 0
    if op == ">":
        return compare(left, right) > 0
    if op == "<=":
        return compare(left, right) <= 0
    if op == ">=":
        return compare(left, right) >= 0
    if op == "LIKE":
        return like_match(left, right)
    if op == "IS":
        return left.strip() == ""
    if op == "IS NOT":
        return left.strip() != ""
    raise SqlError(f'unknown operator "{op}"')


def eval_predicate(expr: Expr | None, row: Any) -> bool:
    """Evaluate a WHERE expression; ``row`` maps column names to text via ``get``."""
    if expr is None:
        return True
    if isinstance(expr, BinaryExpr):
        if expr.op == "AND":
            return eval_predicate(expr.left, row) and eval_predicate(expr.right, row)
        if expr.op == "OR":
            return eval_predicate(expr.left, row) or eval_predicate(expr.right, row)
        return _eval_compare(expr, row)
    if isinstance(expr, NotExpr):
        return not eval_predicate(expr.inner, row)
    raise SqlError("unsupported expression")