"""Streaming CSV record parser."""

from __future__ import annotations

from typing import IO, Iterator

from .dialect import Dialect, ErrorMode
from .errors import BareQuoteError, FieldCountError, ParseError, UnclosedQuoteError

_BLANKS = " \t"


def quote_balance(line, quote) -> bool:
    """Return True when ``line`` holds an odd number of ``quote`` characters."""
    return line.count(quote) % 2 == 1


def _split_simple(line: str, delim: str, trim: bool) -> list[str]:
    fields = line.split(delim)
    if trim:
        fields = [field.lstrip(_BLANKS) for field in fields]
    return fields


def _split_quoted(line: str, dialect: Dialect) -> list[str]:
    delim = dialect.delimiter
    quote = dialect.quote
    lazy = dialect.lazy_quotes
    trim = dialect.trim_leading_space
    n = len(line)
    fields: list[str] = []
    i = 0
    while i < n:
        if trim:
            while i < n and line[i] in _BLANKS:
                i += 1
        if i < n and line[i] == quote:
            i += 1
            parts: list[str] = []
            closed = False
            while True:
                j = line.find(quote, i)
                if j < 0:
                    parts.append(line[i:])
                    i = n
                    break
                parts.append(line[i:j])
                if j + 1 < n and line[j + 1] == quote:
                    parts.append(quote)
                    i = j + 2
                    continue
                i = j + 1
                closed = True
                break
            if not closed and not lazy:
                raise UnclosedQuoteError()
            if i < n and line.startswith(delim, i):
                i += len(delim)
            elif i < n and not lazy:
                raise BareQuoteError()
            fields.append("".join(parts))
            continue
        j = line.find(delim, i)
        end = n if j < 0 else j
        segment = line[i:end]
        if not lazy and quote in segment:
            raise BareQuoteError()
        fields.append(segment)
        i = end
        if i < n:
            i += len(delim)
            if i == n:
                fields.append("")
    return fields


def _split_fields(line: str, dialect: Dialect) -> list[str]:
    """Split one logical line (without its line ending) into fields."""
    trim = dialect.trim_leading_space
    if trim:
        line = line.lstrip(_BLANKS)
    if dialect.quote not in line:
        return _split_simple(line, dialect.delimiter, trim)
    return _split_quoted(line, dialect)


class Parser:
    """Reads records one at a time from a text or binary stream.

    Iterating yields each record as a list of strings. A malformed record
    raises :class:`ParseError`; its ``record`` attribute holds the fields read,
    if any, and iteration may continue with the next record afterwards.
    """

    def __init__(self, stream: IO, dialect: Dialect | None = None) -> None:
        self._stream = stream
        self._dialect = dialect if dialect is not None else Dialect()
        self._line = 1
        self._offset = 0
        self._done = False
        self._skipped = 0
        self._expected = max(self._dialect.fields_per_record, 0)

    def line(self) -> int:
        """Current line number, counted from 1."""
        return self._line

    def offset(self) -> int:
        """Number of bytes consumed so far."""
        return self._offset

    def __iter__(self) -> Iterator[list[str]]:
        return self

    def __next__(self) -> list[str]:
        if self._done:
            raise StopIteration
        while self._skipped < self._dialect.skip_rows:
            raw = self._readline()
            if not raw.endswith("\n"):
                self._done = True
                raise StopIteration
            self._line += 1
            self._skipped += 1

        comment = self._dialect.comment
        fields_per_record = self._dialect.fields_per_record
        while True:
            row = self._read_record()
            if row is None:
                self._done = True
                raise StopIteration
            if comment and row and row[0].startswith(comment):
                continue
            if self._expected == 0:
                self._expected = len(row)
            elif fields_per_record > 0 and len(row) != fields_per_record:
                raise self._error(FieldCountError(), row)
            elif fields_per_record == -1 and len(row) != self._expected:
                raise self._error(FieldCountError(), row)
            return row

    def _error(self, cause: BaseException, record: list[str] | None = None) -> ParseError:
        err = ParseError(cause, line=self._line, offset=self._offset)
        err.record = record
        return err

    def _readline(self) -> str:
        raw = self._stream.readline()
        if isinstance(raw, (bytes, bytearray)):
            self._offset += len(raw)
            return bytes(raw).decode("utf-8", errors="replace")
        self._offset += len(raw.encode("utf-8", errors="surrogatepass"))
        return raw

    def _read_line(self) -> str:
        line = self._readline()
        quote = self._dialect.quote
        count = line.count(quote)
        if count % 2 == 0:
            return line
        parts = [line]
        while count % 2 == 1:
            more = self._readline()
            if not more:
                break
            parts.append(more)
            count += more.count(quote)
        return "".join(parts)

    def _read_record(self) -> list[str] | None:
        text = self._read_line()
        if not text:
            return None
        at_eof = not text.endswith("\n")
        if not at_eof:
            text = text[:-1]
            if text.endswith("\r"):
                text = text[:-1]

        dialect = self._dialect
        if dialect.quote not in text:
            trim = dialect.trim_leading_space
            if trim:
                text = text.lstrip(_BLANKS)
            if not text and at_eof:
                return None
            fields = _split_simple(text, dialect.delimiter, trim)
        else:
            try:
                fields = _split_quoted(text, dialect)
            except (BareQuoteError, UnclosedQuoteError) as exc:
                raise self._error(exc)
        self._line += 1
        return fields


def read_all(stream: IO, dialect: Dialect | None = None) -> list[list[str]]:
    """Read every record from ``stream``, handling errors per the dialect."""
    dialect = dialect if dialect is not None else Dialect()
    parser = Parser(stream, dialect)
    rows: list[list[str]] = []
    while True:
        try:
            row = next(parser)
        except StopIteration:
            return rows
        except ParseError as err:
            if dialect.error_mode is ErrorMode.SKIP:
                continue
            if dialect.error_mode is ErrorMode.COLLECT:
                record = getattr(err, "record", None)
                if record is not None:
                    rows.append(record)
                continue
            raise
        rows.append(row)