"""Command-line tool for inspecting and filtering CSV files."""

from __future__ import annotations

import argparse
import json
import re
import sys
from typing import Callable, Mapping, Sequence

from .celltype import parse_bool, parse_date, parse_float
from .errors import CsvError
from .file import File, ReadOptions
from .writer import CsvWriter

Predicate = Callable[[Mapping[str, str]], bool]

_INT_RE = re.compile(r"[+-]?[0-9]+\Z")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_SLASH_YMD_RE = re.compile(r"[0-9]{4}/[0-9]{2}/[0-9]{2}\Z")

_OPERATORS = ("<=", ">=", "==", "!=", "<", ">", "contains", "starts", "regex")
_WORD_OPERATORS = ("contains", "starts", "regex")


class CliError(CsvError):
    """A command was called with wrong arguments or could not complete."""

    default_message = "command failed"


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise CliError(message)


def _new_parser(name: str) -> _ArgumentParser:
    parser = _ArgumentParser(prog=f"csvtable {name}", allow_abbrev=False)
    parser.add_argument("args", nargs="*")
    return parser


def _is_int64(value: str) -> bool:
    if not _INT_RE.match(value):
        return False
    return _INT64_MIN <= int(value) <= _INT64_MAX


def _is_float(value: str) -> bool:
    try:
        parse_float(value)
    except ValueError:
        return False
    return True


def _is_bool(value: str) -> bool:
    try:
        parse_bool(value)
    except ValueError:
        return False
    return True


def _open_table(path: str, header: bool) -> File:
    return File.open_file(path, ReadOptions(header=header))


def _write_table(headers: Sequence[str] | None, rows: Sequence[Sequence[str]]) -> None:
    writer = CsvWriter(sys.stdout)
    if headers is not None:
        writer.write_row(list(headers))
    writer.write_all([list(row) for row in rows])


def cmd_head(args: Sequence[str]) -> None:
    """Print the header and the first N rows of a file."""
    parser = _new_parser("head")
    parser.add_argument("-n", type=int, default=10, help="number of rows to print")
    parser.add_argument("-no-header", "--no-header", dest="no_header", action="store_true",
                        help="no header row in input")
    opts = parser.parse_args(list(args))
    if not opts.args:
        raise CliError("usage: head [-n N] file.csv")
    table = _open_table(opts.args[0], not opts.no_header)
    rows = table.rows()
    headers = table.headers() if table.has_header() else None
    _write_table(headers, rows[: max(opts.n, 0)])


def cmd_tail(args: Sequence[str]) -> None:
    """Print the header and the last N rows of a file."""
    parser = _new_parser("tail")
    parser.add_argument("-n", type=int, default=10, help="number of rows to print")
    parser.add_argument("-no-header", "--no-header", dest="no_header", action="store_true",
                        help="no header row in input")
    opts = parser.parse_args(list(args))
    if not opts.args:
        raise CliError("usage: tail [-n N] file.csv")
    table = _open_table(opts.args[0], not opts.no_header)
    rows = table.rows()
    start = max(len(rows) - opts.n, 0)
    headers = table.headers() if table.has_header() else None
    _write_table(headers, rows[start:])


def analyze_col(rows: Sequence[Sequence[str]], idx: int) -> tuple[str, int, int]:
    """Return the inferred type, number of empty cells and distinct values of a column."""
    nulls = 0
    is_int = is_float = is_bool = True
    distinct: set[str] = set()
    for row in rows:
        value = row[idx] if idx < len(row) else ""
        if value == "":
            nulls += 1
            continue
        distinct.add(value)
        if not _is_int64(value):
            is_int = False
        if not _is_float(value):
            is_float = False
        if not _is_bool(value):
            is_bool = False
    if is_int:
        kind = "int"
    elif is_float:
        kind = "float"
    elif is_bool:
        kind = "bool"
    else:
        kind = "string"
    return kind, nulls, len(distinct)


def cmd_stats(args: Sequence[str]) -> None:
    """Print row, column and per-column type statistics."""
    parser = _new_parser("stats")
    parser.add_argument("-no-header", "--no-header", dest="no_header", action="store_true",
                        help="no header row in input")
    opts = parser.parse_args(list(args))
    if not opts.args:
        raise CliError("usage: stats file.csv")
    path = opts.args[0]
    table = _open_table(path, not opts.no_header)
    out = sys.stdout
    out.write(f"File: {path}\n")
    out.write(f"Rows: {table.row_count()}\n")
    out.write(f"Cols: {table.col_count()}\n")
    out.write(f"Has header: {'true' if table.has_header() else 'false'}\n")
    if table.has_header():
        out.write("\n")
        out.write(f"{'Column':<20} {'Type':<10} {'Nulls':<10} {'Distinct':<10}\n")
        out.write("-" * 55 + "\n")
        rows = table.rows()
        for index, header in enumerate(table.headers()):
            kind, nulls, distinct = analyze_col(rows, index)
            out.write(f"{header:<20} {kind:<10} {nulls:<10} {distinct:<10}\n")


def looks_like_date(value: str) -> bool:
    """Whether ``value`` is an ISO date or date-time, or a dd/mm/yyyy or mm/dd/yyyy date."""
    if _SLASH_YMD_RE.match(value):
        return False
    try:
        parse_date(value)
    except ValueError:
        return False
    return True


def infer_types(rows: Sequence[Sequence[str]], num_cols: int) -> list[str]:
    """Field type names for each column, inferred from the non-empty values."""
    is_int = [True] * num_cols
    is_float = [True] * num_cols
    is_bool = [True] * num_cols
    is_date = [True] * num_cols
    has_data = [False] * num_cols
    for row in rows:
        for col in range(num_cols):
            value = row[col] if col < len(row) else ""
            if value == "":
                continue
            has_data[col] = True
            if not _is_int64(value):
                is_int[col] = False
            if not _is_float(value):
                is_float[col] = False
            if not _is_bool(value):
                is_bool[col] = False
            if not looks_like_date(value):
                is_date[col] = False
    types: list[str] = []
    for col in range(num_cols):
        if not has_data[col]:
            types.append("string")
        elif is_int[col]:
            types.append("int64")
        elif is_float[col]:
            types.append("float64")
        elif is_bool[col]:
            types.append("bool")
        elif is_date[col]:
            types.append("time.Time")
        else:
            types.append("string")
    return types


def exported_name(header: str) -> str:
    """Turn a column header into a capitalised identifier such as ``FirstName``."""
    if header == "":
        return "Field"
    parts: list[str] = []
    capitalize = True
    for ch in header:
        if not ch.isalpha() and not ch.isdigit():
            capitalize = True
            continue
        if capitalize:
            parts.append(ch.upper())
            capitalize = False
        else:
            parts.append(ch)
    name = "".join(parts)
    if name == "" or "0" <= name[0] <= "9":
        name = "F" + name
    return name


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def cmd_gen_struct(args: Sequence[str]) -> None:
    """Print a struct definition whose fields match the columns of a file."""
    parser = _new_parser("gen-struct")
    parser.add_argument("-name", dest="name", default="Row", help="struct name")
    parser.add_argument("-package", dest="package", default="main", help="package name")
    parser.add_argument("-sample", dest="sample", type=int, default=1000,
                        help="number of rows to scan for type inference")
    opts = parser.parse_args(list(args))
    if not opts.args:
        raise CliError("usage: gen-struct [-name N] [-package P] [-sample N] file.csv")
    table = _open_table(opts.args[0], True)
    headers = table.headers()
    if not headers:
        raise CliError("file has no header row")
    rows = table.rows()
    types = infer_types(rows[: max(opts.sample, 0)], len(headers))

    out = sys.stdout
    out.write(f"package {opts.package}\n\n")
    if "time.Time" in types:
        out.write('import "time"\n\n')
    out.write(f"type {opts.name} struct {{\n")
    fields = [exported_name(h) for h in headers]
    field_width = max(len(f) for f in fields)
    type_width = max(len(t) for t in types)
    for field_name, kind, header in zip(fields, types, headers):
        out.write(f"\t{field_name:<{field_width}} {kind:<{type_width}} `csv:{_quote(header)}`\n")
    out.write("}\n")


def _row_float(row: Mapping[str, str], col: str) -> float:
    try:
        return parse_float(row.get(col, ""))
    except ValueError:
        return 0.0


def _find_op(expr: str, op: str) -> int:
    if op in _WORD_OPERATORS:
        index = expr.find(f" {op} ")
        return -1 if index < 0 else index + 1
    return expr.find(op)


def _build_predicate(col: str, op: str, val: str) -> Predicate:
    try:
        number: float | None = parse_float(val)
    except ValueError:
        number = None

    def get(row: Mapping[str, str]) -> str:
        return row.get(col, "")

    if op == "==":
        return lambda row: get(row) == val
    if op == "!=":
        return lambda row: get(row) != val
    if op == "<":
        if number is not None:
            return lambda row: _row_float(row, col) < number
        return lambda row: get(row) < val
    if op == ">":
        if number is not None:
            return lambda row: _row_float(row, col) > number
        return lambda row: get(row) > val
    if op == "<=":
        if number is not None:
            return lambda row: _row_float(row, col) <= number
        return lambda row: get(row) <= val
    if op == ">=":
        if number is not None:
            return lambda row: _row_float(row, col) >= number
        return lambda row: get(row) >= val
    if op == "contains":
        return lambda row: val in get(row)
    if op == "starts":
        return lambda row: get(row).startswith(val)
    if op == "regex":
        try:
            pattern = re.compile(val)
        except re.error as exc:
            raise CliError(f"invalid regex {val!r}: {exc}") from exc
        return lambda row: pattern.search(get(row)) is not None
    raise CliError(f"unknown op: {op}")


def parse_expr(expr: str) -> Predicate:
    """Compile ``col op value`` into a predicate over a header-to-value mapping."""
    expr = expr.strip()
    for op in _OPERATORS:
        index = _find_op(expr, op)
        if index < 0:
            continue
        col = expr[:index].strip()
        val = expr[index + len(op):].strip().strip("\"'")
        return _build_predicate(col, op, val)
    raise CliError(f'invalid expression: "{expr}"')


def cmd_filter(args: Sequence[str]) -> None:
    """Print the rows of a file that match a ``col op value`` expression."""
    parser = _new_parser("filter")
    parser.add_argument("-w", dest="where", default="",
                        help="filter expression: col op value "
                             "(ops: ==, !=, <, >, <=, >=, contains, starts, regex)")
    opts = parser.parse_args(list(args))
    if not opts.where or not opts.args:
        raise CliError('usage: filter -w "col op value" file.csv')
    predicate = parse_expr(opts.where)
    table = _open_table(opts.args[0], True)
    headers = table.headers()
    selected = []
    for row in table.rows():
        record = {h: row[i] if i < len(row) else "" for i, h in enumerate(headers)}
        if predicate(record):
            selected.append(row)
    _write_table(headers, selected)


_COMMANDS: dict[str, Callable[[Sequence[str]], None]] = {
    "head": cmd_head,
    "tail": cmd_tail,
    "filter": cmd_filter,
    "stats": cmd_stats,
    "gen-struct": cmd_gen_struct,
}

_USAGE = """\
csvtable — CSV tooling

Usage: csvtable <command> [flags] <args>

Commands:
  head        Print first N rows
  tail        Print last N rows
  filter      Filter rows by expression
  stats       Print row/column/type stats
  gen-struct  Infer a typed struct definition from CSV columns

Run 'csvtable <command> -h' for command-specific help.
"""


def _usage() -> None:
    sys.stdout.write(_USAGE)


def main(argv: Sequence[str] | None = None) -> int:
    """Run a command; returns the process exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        _usage()
        return 1
    name = args[0]
    if name in ("-h", "--help", "help"):
        _usage()
        return 0
    command = _COMMANDS.get(name)
    if command is None:
        sys.stderr.write(f"unknown command: {name}\n\n")
        _usage()
        return 1
    try:
        command(args[1:])
    except Exception as exc:  # report any failure as the command's error
        sys.stderr.write(f"error: {exc}\n")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())