"""Buffered CSV record writer."""

from __future__ import annotations

from typing import Iterable, TextIO

from .dialect import Dialect

_BUFFER_LIMIT = 64 * 1024


class CsvWriter:
    """Writes records to a text stream, quoting fields only where needed.

    Output is buffered until :meth:`flush`. Once a write to the stream fails,
    every later call raises that same error.
    """

    def __init__(self, stream: TextIO, dialect: Dialect | None = None) -> None:
        self._stream = stream
        self._dialect = dialect if dialect is not None else Dialect()
        self._buffer: list[str] = []
        self._buffered = 0
        self._error: BaseException | None = None

    def _check(self) -> None:
        if self._error is not None:
            raise self._error

    def _needs_quote(self, field: str) -> bool:
        if not field:
            return False
        special = {self._dialect.delimiter, self._dialect.quote, "\n", "\r"}
        return any(ch in special for ch in field)

    def _format_field(self, field: str) -> str:
        if not self._needs_quote(field):
            return field
        quote = self._dialect.quote
        return quote + field.replace(quote, quote + quote) + quote

    def _drain(self) -> None:
        if not self._buffer:
            return
        data = "".join(self._buffer)
        self._buffer.clear()
        self._buffered = 0
        try:
            self._stream.write(data)
        except Exception as exc:
            self._error = exc
            raise

    def write_row(self, row: Iterable[str]) -> None:
        """Append one record to the buffer."""
        self._check()
        line = self._dialect.delimiter.join(self._format_field(f) for f in row)
        line += "\r\n" if self._dialect.crlf else "\n"
        self._buffer.append(line)
        self._buffered += len(line)
        if self._buffered >= _BUFFER_LIMIT:
            self._drain()

    def write_all(self, rows: Iterable[Iterable[str]]) -> None:
        """Write every record and flush."""
        for row in rows:
            self.write_row(row)
        self.flush()

    def flush(self) -> None:
        """Send buffered output to the stream."""
        self._check()
        self._drain()