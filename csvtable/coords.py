"""Conversion between spreadsheet-style cell names and coordinates."""

from __future__ import annotations

from .errors import InvalidCellError, InvalidCoordsError


def _is_ascii_letter(ch: str) -> bool:
    return "A" <= ch <= "Z" or "a" <= ch <= "z"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _parse_row_number(text: str) -> int:
    if not text or not all(_is_digit(ch) for ch in text):
        raise InvalidCellError()
    row = int(text)
    if row < 1:
        raise InvalidCellError()
    return row


def column_name_to_number(name: str) -> int:
    """Convert an upper-case column name such as ``AB`` to its 1-based number."""
    result = 0
    for ch in name:
        result = result * 26 + (ord(ch) - ord("A")) + 1
    return result


def column_number_to_name(col: int) -> str:
    """Convert a 1-based column number to its name; zero or less gives ``""``."""
    letters = []
    while col > 0:
        col -= 1
        letters.append(chr(ord("A") + col % 26))
        col //= 26
    return "".join(reversed(letters))


def cell_name_to_coordinates(cell: str) -> tuple[int, int]:
    """Parse a cell name such as ``B7`` into 1-based ``(col, row)``."""
    cell = cell.strip()
    if not cell:
        raise InvalidCellError()

    col_part = []
    row_part = ""
    for index, ch in enumerate(cell):
        if _is_ascii_letter(ch):
            col_part.append(ch)
        elif _is_digit(ch):
            row_part = cell[index:]
            break
        else:
            raise InvalidCellError()

    if not col_part or not row_part:
        raise InvalidCellError()

    col = column_name_to_number("".join(col_part).upper())
    if col < 1:
        raise InvalidCellError()
    return col, _parse_row_number(row_part)


def coordinates_to_cell_name(col: int, row: int) -> str:
    """Build a cell name from 1-based column and row numbers."""
    if col < 1 or row < 1:
        raise InvalidCoordsError()
    return f"{column_number_to_name(col)}{row}"


def cell(col: int, row: int) -> str:
    """Cell name for ``(col, row)``; raises on invalid coordinates."""
    return coordinates_to_cell_name(col, row)


def cells(start_col: int, start_row: int, end_col: int, end_row: int) -> str:
    """Range reference such as ``A1:C10``."""
    return f"{cell(start_col, start_row)}:{cell(end_col, end_row)}"


def split_cell_range(range_ref: str) -> tuple[int, int, int, int]:
    """Parse ``A1:C10`` or a single cell into ``(start_col, start_row, end_col, end_row)``."""
    start, sep, end = range_ref.partition(":")
    start_col, start_row = cell_name_to_coordinates(start)
    if not sep:
        return start_col, start_row, start_col, start_row
    end_col, end_row = cell_name_to_coordinates(end)
    return start_col, start_row, end_col, end_row