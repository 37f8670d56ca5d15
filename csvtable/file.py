"""In-memory CSV table with cell, column and header access."""

from __future__ import annotations

import csv
import io
import os
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import IO, Any, Mapping, Sequence

from .celltype import (
    CellType,
    detect_cell_type,
    infer_cell_type,
    parse_bool,
    parse_date,
    parse_float,
    parse_int,
)
from .coords import cell_name_to_coordinates, cells
from .dialect import Dialect, ErrorMode
from .encoding import Encoding, decode_bytes, detect_bom
from .errors import (
    CellError,
    ColumnOutOfRangeError,
    FieldCountError,
    FileClosedError,
    HeaderNotFoundError,
    NoHeaderError,
    ParseError,
    RowOutOfRangeError,
)
from .fastparse import MIN_PARALLEL_SIZE, parse_bytes, parse_bytes_parallel
from .parser import Parser

_SNIFF_SAMPLE = 8192
_SNIFF_RECORDS = 10
_DELIMITER_CANDIDATES = (",", ";", "\t", "|")


@dataclass
class ReadOptions:
    """How CSV data is decoded and parsed when a table is opened.

    ``header`` of ``None`` means the presence of a header row is guessed.
    """

    header: bool | None = None
    encoding: Encoding = Encoding.AUTO
    dialect: Dialect = field(default_factory=Dialect)
    auto_sniff: bool = True
    stdlib_parser: bool = False
    parallel_workers: int = 1
    parallel_threshold: int = MIN_PARALLEL_SIZE


def _split_records(text: str, quote: str) -> list[str]:
    records: list[str] = []
    start = 0
    in_quote = False
    for index, ch in enumerate(text):
        if ch == quote:
            in_quote = not in_quote
        elif ch == "\n" and not in_quote:
            records.append(text[start:index])
            start = index + 1
    if start < len(text):
        records.append(text[start:])
    return records


def _count_outside_quotes(record: str, delim: str, quote: str) -> int:
    count = 0
    in_quote = False
    for ch in record:
        if ch == quote:
            in_quote = not in_quote
        elif ch == delim and not in_quote:
            count += 1
    return count


def _sniff_delimiter(text: str, quote: str) -> str | None:
    sample = text[:_SNIFF_SAMPLE]
    records = _split_records(sample, quote)
    if len(text) > len(sample) and len(records) > 1:
        records = records[:-1]
    records = [r for r in records if r.strip()][:_SNIFF_RECORDS]
    if not records:
        return None
    best: str | None = None
    best_count = 0
    for candidate in _DELIMITER_CANDIDATES:
        counts = {_count_outside_quotes(r, candidate, quote) for r in records}
        if len(counts) == 1:
            count = counts.pop()
            if count > best_count:
                best, best_count = candidate, count
    return best


def _sniff_header(rows: list[list[str]]) -> bool:
    if len(rows) < 2:
        return False
    first = rows[0]
    if not first or any(c == "" for c in first) or len(set(first)) != len(first):
        return False
    if any(infer_cell_type(c) is not CellType.STRING for c in first):
        return False
    typed = (CellType.STRING, CellType.EMPTY)
    return any(
        infer_cell_type(value) not in typed
        for row in rows[1:21]
        for value in row[: len(first)]
    )


def _read_with_csv_module(
    text: str, dialect: Dialect
) -> tuple[list[list[str]], list[ParseError]]:
    lines: Any = io.StringIO(text, newline="")
    if dialect.comment:
        lines = (line for line in lines if not line.startswith(dialect.comment))
    reader = csv.reader(
        lines,
        delimiter=dialect.delimiter,
        quotechar=dialect.quote,
        skipinitialspace=dialect.trim_leading_space,
        strict=not dialect.lazy_quotes,
    )
    rows: list[list[str]] = []
    expected = dialect.fields_per_record
    try:
        for record in reader:
            if not record:
                continue
            if expected == 0:
                expected = len(record)
            elif expected > 0 and len(record) != expected:
                raise ParseError(FieldCountError(), line=reader.line_num)
            rows.append(record)
    except csv.Error as exc:
        error = ParseError(exc, line=reader.line_num)
        if dialect.error_mode is ErrorMode.STRICT:
            raise error from exc
        return [], []
    except ParseError:
        if dialect.error_mode is ErrorMode.STRICT:
            raise
        return [], []
    return rows, []


def _read_with_parser(
    text: str, dialect: Dialect
) -> tuple[list[list[str]], list[ParseError]]:
    parser = Parser(io.StringIO(text, newline="\n"), dialect)
    rows: list[list[str]] = []
    errors: list[ParseError] = []
    while True:
        try:
            row = next(parser)
        except StopIteration:
            break
        except ParseError as err:
            if dialect.error_mode is ErrorMode.SKIP:
                errors.append(err)
                continue
            if dialect.error_mode is ErrorMode.COLLECT:
                errors.append(err)
                record = getattr(err, "record", None)
                if record is not None:
                    rows.append(record)
                continue
            raise
        rows.append(row)
    return rows, errors


class File:
    """A CSV table held in memory, with an optional header row."""

    def __init__(self, header: bool = False) -> None:
        self._rows: list[list[str]] = []
        self._headers: list[str] = []
        self._has_header = header
        self._options = ReadOptions(header=header)
        self._path = ""
        self._closed = False
        self._parse_errors: list[ParseError] = []

    @classmethod
    def open_file(cls, path: str | os.PathLike, options: ReadOptions | None = None) -> File:
        """Read and parse the CSV file at ``path``."""
        with open(path, "rb") as handle:
            data = handle.read()
        table = cls.open_bytes(data, options)
        table._path = path
        return table

    @classmethod
    def open_reader(cls, stream: IO, options: ReadOptions | None = None) -> File:
        """Read a whole binary or text stream and parse it."""
        data = stream.read()
        if isinstance(data, str):
            data = data.encode("utf-8")
        return cls.open_bytes(data, options)

    @classmethod
    def open_bytes(cls, data: bytes, options: ReadOptions | None = None) -> File:
        """Parse CSV held in a byte string."""
        options = options if options is not None else ReadOptions()
        raw = bytes(data)
        encoding = options.encoding
        if encoding is Encoding.AUTO:
            encoding, offset = detect_bom(raw)
        else:
            offset = detect_bom(raw)[1]
        payload = raw[offset:]

        dialect = options.dialect
        text: str | None = None
        if options.auto_sniff and payload:
            text = decode_bytes(payload, encoding)
            delimiter = _sniff_delimiter(text, dialect.quote)
            if delimiter is not None:
                dialect = replace(dialect, delimiter=delimiter)

        if not options.stdlib_parser and encoding in (Encoding.UTF8, Encoding.AUTO):
            if options.parallel_workers != 1 and len(payload) >= options.parallel_threshold:
                rows, errors = parse_bytes_parallel(payload, dialect, options.parallel_workers)
            else:
                rows, errors = parse_bytes(payload, dialect)
        else:
            if text is None:
                text = decode_bytes(payload, encoding)
            if options.stdlib_parser:
                rows, errors = _read_with_csv_module(text, dialect)
            else:
                rows, errors = _read_with_parser(text, dialect)

        table = cls()
        table._options = replace(options, dialect=dialect)
        table._rows = rows
        table._parse_errors = list(errors)
        if options.header is not None:
            table._has_header = options.header
        else:
            table._has_header = _sniff_header(rows)
        if table._has_header and rows:
            table._headers = rows[0]
            table._rows = rows[1:]
        return table

    def _check_open(self) -> None:
        if self._closed:
            raise FileClosedError()

    def row_count(self) -> int:
        """Number of data rows, not counting the header."""
        return 0 if self._closed else len(self._rows)

    def col_count(self) -> int:
        """Number of headers, or the width of the widest row without headers."""
        if self._closed:
            return 0
        if self._headers:
            return len(self._headers)
        return max((len(row) for row in self._rows), default=0)

    def dimension(self) -> str:
        """Range covering the whole table, such as ``A1:C10``; empty if no data."""
        rows = self.row_count()
        cols = self.col_count()
        if rows == 0 or cols == 0:
            return ""
        if self._has_header:
            rows += 1
        return cells(1, 1, cols, rows)

    def has_header(self) -> bool:
        return self._has_header

    def parse_errors(self) -> list[ParseError]:
        """Errors collected while reading in skip or collect mode."""
        return list(self._parse_errors)

    def path(self) -> str | os.PathLike:
        """Path the table was opened from, or ``""``."""
        return self._path

    def rows(self) -> list[list[str]]:
        """Copy of every data row."""
        self._check_open()
        return [list(row) for row in self._rows]

    def close(self) -> None:
        """Release the table; later access raises :class:`FileClosedError`."""
        self._closed = True

    def _ensure_row(self, row_idx: int) -> list[str]:
        while len(self._rows) <= row_idx:
            self._rows.append([])
        return self._rows[row_idx]

    def _ensure_cell(self, col_idx: int, row_idx: int) -> list[str]:
        row = self._ensure_row(row_idx)
        if len(row) <= col_idx:
            row.extend([""] * (col_idx + 1 - len(row)))
        return row

    def _cell_index(self, cell_ref: str) -> tuple[int, int]:
        col, row = cell_name_to_coordinates(cell_ref)
        if self._has_header:
            if row < 2:
                raise CellError(RowOutOfRangeError(), cell=cell_ref)
            return col - 1, row - 2
        return col - 1, row - 1

    def set_cell_value(self, cell_ref: str, value: Any) -> None:
        """Store a value in the cell named by ``cell_ref``, growing the table if needed."""
        self._check_open()
        col, row = self._cell_index(cell_ref)
        self._ensure_cell(col, row)[col] = detect_cell_type(value)[1]

    def get_cell_value(self, cell_ref: str) -> str:
        """Text of a cell; cells outside the data read as ``""``."""
        self._check_open()
        col, row = self._cell_index(cell_ref)
        if row >= len(self._rows):
            return ""
        values = self._rows[row]
        return values[col] if col < len(values) else ""

    def _get_parsed(self, cell_ref: str, parse):
        raw = self.get_cell_value(cell_ref)
        try:
            return parse(raw)
        except ValueError as exc:
            raise CellError(exc, cell=cell_ref) from exc

    def get_cell_int(self, cell_ref: str) -> int:
        return self._get_parsed(cell_ref, parse_int)

    def get_cell_float(self, cell_ref: str) -> float:
        return self._get_parsed(cell_ref, parse_float)

    def get_cell_bool(self, cell_ref: str) -> bool:
        return self._get_parsed(cell_ref, parse_bool)

    def get_cell_date(self, cell_ref: str) -> datetime:
        return self._get_parsed(cell_ref, parse_date)

    def get_cell_type(self, cell_ref: str) -> CellType:
        return infer_cell_type(self.get_cell_value(cell_ref))

    def get_col(self, col: int) -> list[str]:
        """Values of a 0-based column, ``""`` where a row is short."""
        self._check_open()
        if col < 0 or col >= self.col_count():
            raise ColumnOutOfRangeError()
        return [row[col] if col < len(row) else "" for row in self._rows]

    def get_col_by_name(self, header: str) -> list[str]:
        self._check_open()
        index = self.header_index(header)
        if index is None:
            raise HeaderNotFoundError()
        return self.get_col(index)

    def set_col_values(self, col: int, values: Sequence[Any]) -> None:
        """Write ``values`` down a 0-based column from the first row."""
        self._check_open()
        if col < 0:
            raise ColumnOutOfRangeError()
        for index, value in enumerate(values):
            self._ensure_cell(col, index)[col] = detect_cell_type(value)[1]

    def insert_col(self, at: int, header: str, values: Sequence[Any] | None = None) -> None:
        """Insert a column before index ``at``; past the end it is appended."""
        self._check_open()
        if at < 0:
            raise ColumnOutOfRangeError()
        at = min(at, self.col_count())
        values = values if values is not None else []
        if self._has_header:
            if len(self._headers) < at:
                self._headers.extend([""] * (at - len(self._headers)))
            self._headers.insert(at, header)
        for index, row in enumerate(self._rows):
            if len(row) < at:
                row.extend([""] * (at - len(row)))
            text = detect_cell_type(values[index])[1] if index < len(values) else ""
            row.insert(at, text)

    def append_col(self, header: str, values: Sequence[Any] | None = None) -> None:
        self.insert_col(self.col_count(), header, values)

    def remove_col(self, col: int) -> None:
        self._check_open()
        if col < 0 or col >= self.col_count():
            raise ColumnOutOfRangeError()
        if self._has_header and col < len(self._headers):
            del self._headers[col]
        for row in self._rows:
            if col < len(row):
                del row[col]

    def remove_col_by_name(self, header: str) -> None:
        index = self.header_index(header)
        if index is None:
            raise HeaderNotFoundError()
        self.remove_col(index)

    def headers(self) -> list[str]:
        """Copy of the header row; empty when the table has none."""
        return list(self._headers) if self._has_header else []

    def set_headers(self, headers: Sequence[str]) -> None:
        self._check_open()
        self._headers = list(headers)
        self._has_header = True

    def header_index(self, name: str) -> int | None:
        """Index of the first header equal to ``name``, or ``None``."""
        for index, header in enumerate(self._headers):
            if header == name:
                return index
        return None

    def _require_header(self, header: str) -> int:
        self._check_open()
        if not self._has_header:
            raise NoHeaderError()
        index = self.header_index(header)
        if index is None:
            raise HeaderNotFoundError()
        return index

    def get_by_header(self, row: int, header: str) -> str:
        index = self._require_header(header)
        if row < 0 or row >= len(self._rows):
            raise RowOutOfRangeError()
        values = self._rows[row]
        return values[index] if index < len(values) else ""

    def set_by_header(self, row: int, header: str, value: Any) -> None:
        index = self._require_header(header)
        if row < 0:
            raise RowOutOfRangeError()
        self._ensure_cell(index, row)[index] = detect_cell_type(value)[1]

    def append_record(self, record: Mapping[str, Any]) -> None:
        """Append a row built from a mapping of header to value."""
        self._check_open()
        if not self._has_header:
            raise NoHeaderError()
        self._rows.append(
            [detect_cell_type(record[h])[1] if h in record else "" for h in self._headers]
        )

    def get_record(self, row: int) -> dict[str, str]:
        self._check_open()
        if not self._has_header:
            raise NoHeaderError()
        if row < 0 or row >= len(self._rows):
            raise RowOutOfRangeError()
        values = self._rows[row]
        return {
            h: values[i] if i < len(values) else ""
            for i, h in enumerate(self._headers)
        }

    def get_records(self) -> list[dict[str, str]]:
        self._check_open()
        if not self._has_header:
            raise NoHeaderError()
        return [self.get_record(index) for index in range(len(self._rows))]