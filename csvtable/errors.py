"""Exception types raised by the csvtable package."""

from __future__ import annotations


class CsvError(Exception):
    """Base class of every error raised by csvtable."""

    default_message = "csv error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.default_message)

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else self.default_message


class FileClosedError(CsvError, ValueError):
    default_message = "file is closed"


class InvalidCellError(CsvError, ValueError):
    default_message = "invalid cell reference"


class InvalidCoordsError(CsvError, ValueError):
    default_message = "invalid coordinates"


class InvalidRangeError(CsvError, ValueError):
    default_message = "invalid range"


class RowOutOfRangeError(CsvError, IndexError):
    default_message = "row out of range"


class ColumnOutOfRangeError(CsvError, IndexError):
    default_message = "column out of range"


class HeaderNotFoundError(CsvError, KeyError):
    default_message = "header not found"


class NoHeaderError(CsvError):
    default_message = "file has no header row"


class FieldCountError(CsvError):
    default_message = "row field count mismatch"


class UnsupportedTypeError(CsvError, TypeError):
    default_message = "unsupported value type"


class BareQuoteError(CsvError):
    default_message = "bare quote in unquoted field"


class UnclosedQuoteError(CsvError):
    default_message = "unclosed quoted field"


class EncodingInvalidError(CsvError, ValueError):
    default_message = "invalid encoding"


class InvalidDelimiterError(CsvError, ValueError):
    default_message = "invalid delimiter"


class StreamClosedError(CsvError, ValueError):
    default_message = "stream is closed"


def _as_exception(cause: BaseException | type[BaseException]) -> BaseException:
    if isinstance(cause, type) and issubclass(cause, BaseException):
        return cause()
    return cause


class ParseError(CsvError):
    """A malformed record, with the position where it was found."""

    def __init__(
        self,
        cause: BaseException | type[BaseException],
        line: int = 0,
        column: int = 0,
        offset: int = 0,
    ) -> None:
        self.cause = _as_exception(cause)
        self.line = line
        self.column = column
        self.offset = offset
        self.__cause__ = self.cause
        super().__init__(self.__str__())

    def __str__(self) -> str:
        return (
            f"parse error at line {self.line} column {self.column} "
            f"(offset {self.offset}): {self.cause}"
        )


class CellError(CsvError):
    """A failure tied to one cell, named either by reference or by position."""

    def __init__(
        self,
        cause: BaseException | type[BaseException],
        cell: str = "",
        row: int = 0,
        col: int = 0,
    ) -> None:
        self.cause = _as_exception(cause)
        self.cell = cell
        self.row = row
        self.col = col
        self.__cause__ = self.cause
        super().__init__(self.__str__())

    def __str__(self) -> str:
        if self.cell:
            return f"cell {self.cell}: {self.cause}"
        return f"row {self.row} col {self.col}: {self.cause}"