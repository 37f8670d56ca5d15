"""Row-by-row iteration over tables held in memory or read from streams."""

from __future__ import annotations

import io
import os
from dataclasses import replace
from typing import IO, Any, Iterable, Iterator

from .encoding import Encoding, decode_bytes, detect_bom, open_decoder
from .file import File, ReadOptions, _sniff_delimiter
from .parser import Parser

_PEEK_SIZE = 8192


class RowIterator:
    """Iterates over records, remembering the current one and its index.

    ``source`` is any iterable of rows. An error raised by the source is
    stored (see :meth:`error`) and re-raised; iteration then stops. ``closer``
    is an object whose ``close()`` is called once by :meth:`close`.
    """

    def __init__(
        self,
        headers: Iterable[str] | None = None,
        source: Iterable[Iterable[str]] = (),
        closer: Any = None,
    ) -> None:
        self._headers = list(headers or [])
        self._source: Iterator[Iterable[str]] = iter(source)
        self._closer = closer
        self._current: list[str] = []
        self._row_index = -1
        self._error: BaseException | None = None
        self._closed = False

    @classmethod
    def from_file(cls, file: File) -> RowIterator:
        """Iterate over a snapshot of the rows of an in-memory table."""
        rows = file.rows()
        return cls(file.headers(), rows, None)

    def __iter__(self) -> RowIterator:
        return self

    def __next__(self) -> list[str]:
        if self._closed or self._error is not None:
            raise StopIteration
        try:
            row = next(self._source)
        except StopIteration:
            raise
        except Exception as exc:
            self._error = exc
            raise
        self._current = list(row)
        self._row_index += 1
        return list(self._current)

    def row(self) -> list[str]:
        """Copy of the current row."""
        return list(self._current)

    def record(self) -> dict[str, str] | None:
        """Current row keyed by header, or ``None`` when there are no headers."""
        if not self._headers:
            return None
        current = self._current
        return {
            header: current[index] if index < len(current) else ""
            for index, header in enumerate(self._headers)
        }

    def row_index(self) -> int:
        """0-based index of the current row; -1 before the first."""
        return self._row_index

    def headers(self) -> list[str]:
        return list(self._headers)

    def error(self) -> BaseException | None:
        """The error that ended iteration, if any."""
        return self._error

    def close(self) -> None:
        """Stop iterating and release the underlying resource."""
        self._closed = True
        closer, self._closer = self._closer, None
        if closer is not None:
            closer.close()

    def __enter__(self) -> RowIterator:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class _PrefixedReader(io.RawIOBase):
    """Binary stream that yields already-read bytes before the rest of a stream."""

    def __init__(self, prefix: bytes, rest: IO[bytes]) -> None:
        super().__init__()
        self._prefix = prefix
        self._pos = 0
        self._rest = rest

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        size = len(buffer)
        if self._pos < len(self._prefix):
            chunk = self._prefix[self._pos : self._pos + size]
            self._pos += len(chunk)
        else:
            chunk = self._rest.read(size) or b""
        count = len(chunk)
        buffer[:count] = chunk
        return count


class _ChainedText:
    """Text source reading lines first from a sample, then from a stream."""

    def __init__(self, head: str, rest: IO[str]) -> None:
        self._head = io.StringIO(head, newline="\n")
        self._rest = rest

    def readline(self) -> str:
        line = self._head.readline()
        if line.endswith("\n"):
            return line
        return line + self._rest.readline()


def _read_sample(stream: IO, size: int):
    first = stream.read(size)
    if first is None:
        first = b""
    chunks = [first]
    total = len(first)
    while first and total < size:
        chunk = stream.read(size - total)
        if not chunk:
            break
        chunks.append(chunk)
        total += len(chunk)
    return first[:0].join(chunks)


def _sniff_sample(text: str, truncated: bool, quote: str) -> str | None:
    if truncated and "\n" in text:
        text = text[: text.rfind("\n") + 1]
    return _sniff_delimiter(text, quote)


def stream_reader(stream: IO, options: ReadOptions | None = None) -> RowIterator:
    """Iterate over the records of a binary or text stream without loading it whole.

    With ``options.header`` true, the first record becomes the headers.
    """
    options = options if options is not None else ReadOptions()
    sample = _read_sample(stream, _PEEK_SIZE)
    truncated = len(sample) >= _PEEK_SIZE
    dialect = options.dialect

    if isinstance(sample, str):
        if sample.startswith("\ufeff"):
            sample = sample[1:]
        if options.auto_sniff:
            delimiter = _sniff_sample(sample, truncated, dialect.quote)
            if delimiter is not None:
                dialect = replace(dialect, delimiter=delimiter)
        source: Any = _ChainedText(sample, stream)
    else:
        sample = bytes(sample)
        encoding = options.encoding
        if encoding is Encoding.AUTO:
            encoding, offset = detect_bom(sample)
        else:
            offset = detect_bom(sample)[1]
        body = sample[offset:]
        if options.auto_sniff:
            text = decode_bytes(body, encoding)
            delimiter = _sniff_sample(text, truncated, dialect.quote)
            if delimiter is not None:
                dialect = replace(dialect, delimiter=delimiter)
        source = open_decoder(io.BufferedReader(_PrefixedReader(body, stream)), encoding)

    parser = Parser(source, dialect)
    headers: list[str] = []
    if options.header:
        try:
            headers = next(parser)
        except StopIteration:
            raise EOFError("stream is empty: no header row") from None
    return RowIterator(headers, parser, None)


def stream_reader_from_file(
    path: str | os.PathLike, options: ReadOptions | None = None
) -> RowIterator:
    """Stream the records of a file; closing the iterator closes the file."""
    handle = open(path, "rb")
    try:
        iterator = stream_reader(handle, options)
    except BaseException:
        handle.close()
        raise
    iterator._closer = handle
    return iterator